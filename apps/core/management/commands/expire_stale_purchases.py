"""
management command: expire_stale_purchases

Cancels purchases that were staged but never paid: every reference whose
records are still pending, carry no payment id, and are older than
PENDING_PURCHASE_TTL_MINUTES gets the failure transition (source=expiry).

Run via OS cron every 15 minutes:
  */15 * * * *  /path/to/venv/bin/python manage.py expire_stale_purchases

On Render.com: add a Cron Job service with the same command.
"""
import logging
from datetime import timedelta

from django.conf import settings
from django.core.management.base import BaseCommand
from django.utils import timezone

from apps.payments.models import EventSource, Outcome, ReconcileResult
from apps.payments.reconciler import LEDGERS, reconcile
from apps.payments.references import PurchaseReference

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Cancel pending purchases that never received a payment'

    def add_arguments(self, parser):
        parser.add_argument(
            '--minutes', type=int, default=None,
            help='Age in minutes after which an unpaid purchase expires '
                 '(default: PENDING_PURCHASE_TTL_MINUTES)',
        )

    def handle(self, *args, **options):
        minutes = options['minutes']
        if minutes is None:
            minutes = settings.PENDING_PURCHASE_TTL_MINUTES
        cutoff = timezone.now() - timedelta(minutes=minutes)

        expired = 0
        for kind, ledger in LEDGERS.items():
            tokens = set(
                ledger.model.objects
                .filter(status=ledger.pending, payment_id='', created_at__lt=cutoff)
                .values_list('reference_id', flat=True)
            )
            for token in sorted(tokens):
                try:
                    reference = PurchaseReference.parse(token)
                except ValueError:
                    logger.warning('Skipping %s row with malformed reference %r', kind.value, token)
                    continue
                result = reconcile(reference, Outcome.FAILURE, source=EventSource.EXPIRY)
                if result == ReconcileResult.APPLIED:
                    expired += 1

        self.stdout.write(
            self.style.SUCCESS(
                f'expire_stale_purchases: expired {expired} purchase(s) older than {minutes} minutes'
            )
        )
