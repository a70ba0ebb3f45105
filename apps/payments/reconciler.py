"""
Outcome reconciler: applies processor callbacks to staged purchases.

Public API:
  CallbackParams.from_query(query)
  reconcile(reference, outcome, params, source=EventSource.REDIRECT) -> ReconcileResult
  reconcile_payment_notification(payment_id, gateway) -> ReconcileResult | None

State machine per reference (all rows of the reference move together):

    pending ──success──▶ confirmed / active
       │ ──failure──▶ cancelled (soft-deleted)
       └ ──pending──▶ pending (payment ids recorded)

Each transition locks the reference's rows, checks that they are all still
pending, then writes with UPDATE ... WHERE status = 'pending'. If the update
touches fewer rows than were locked the transaction is rolled back.
"""
import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from django.db import DatabaseError, transaction
from django.utils import timezone

from apps.memberships.models import Membership, MembershipStatus
from apps.notifications import emails
from apps.reservations.models import PaymentStatus, Reservation, ReservationStatus

from .exceptions import ReconciliationError
from .models import EventSource, Outcome, PaymentEvent, ReconcileResult
from .references import PurchaseKind, PurchaseReference

logger = logging.getLogger(__name__)

# Mercado Pago payment.status → our outcome
PROCESSOR_STATUS_OUTCOMES = {
    'approved': Outcome.SUCCESS,
    'rejected': Outcome.FAILURE,
    'cancelled': Outcome.FAILURE,
    'refunded': Outcome.FAILURE,
    'charged_back': Outcome.FAILURE,
    'pending': Outcome.PENDING,
    'in_process': Outcome.PENDING,
    'authorized': Outcome.PENDING,
    'in_mediation': Outcome.PENDING,
}

# Mercado Pago fills missing query params with the literal string "null"
_NULL_VALUES = ('', 'null', 'undefined', 'None')


def _clean(value, max_length: int) -> str:
    value = (value or '').strip()
    if value in _NULL_VALUES:
        return ''
    return value[:max_length]


@dataclass(frozen=True)
class CallbackParams:
    """Payment identifiers reported by the processor with a callback."""
    payment_id: str = ''
    status: str = ''
    payment_type: str = ''
    merchant_order_id: str = ''
    raw: dict = field(default_factory=dict)

    @classmethod
    def from_query(cls, query) -> 'CallbackParams':
        """Build from redirect query params (a QueryDict or plain dict)."""
        get = query.get
        return cls(
            payment_id=_clean(get('payment_id') or get('collection_id'), 64),
            status=_clean(get('status') or get('collection_status'), 40),
            payment_type=_clean(get('payment_type'), 40),
            merchant_order_id=_clean(get('merchant_order_id'), 64),
            raw={key: query.get(key) for key in query.keys()},
        )

    def payment_values(self) -> dict:
        """The non-empty payment identifiers, as model field values."""
        values = {
            'payment_id': self.payment_id,
            'payment_type': self.payment_type,
            'merchant_order_id': self.merchant_order_id,
        }
        return {name: value for name, value in values.items() if value}


# ── Per-kind ledgers ──────────────────────────────────────────────────────────

def _reservation_success_values(now) -> dict:
    return {
        'status': ReservationStatus.CONFIRMED,
        'payment_status': PaymentStatus.PAID,
        'confirmed_at': now,
    }


def _membership_success_values(now) -> dict:
    return {
        'status': MembershipStatus.ACTIVE,
        'activated_at': now,
    }


def _send_reservation_emails(reference):
    reservations = list(Reservation.objects.for_reference(reference))
    if reservations:
        emails.send_reservation_confirmed(reservations)


def _send_membership_email(reference):
    membership = Membership.objects.for_reference(reference).select_related('membership_type').first()
    if membership:
        emails.send_membership_activated(membership)


@dataclass(frozen=True)
class _Ledger:
    """Where one purchase kind lives and what its states are called."""
    model: type
    pending: str
    settled: str
    cancelled: str
    success_values: Callable
    notify: Callable

    def rows(self, reference):
        # Cancelled rows are soft-deleted but still decide duplicate/rejected
        return self.model.objects.all_with_deleted().for_reference(reference)


LEDGERS = {
    PurchaseKind.RESERVATION: _Ledger(
        model=Reservation,
        pending=ReservationStatus.PENDING,
        settled=ReservationStatus.CONFIRMED,
        cancelled=ReservationStatus.CANCELLED,
        success_values=_reservation_success_values,
        notify=_send_reservation_emails,
    ),
    PurchaseKind.MEMBERSHIP: _Ledger(
        model=Membership,
        pending=MembershipStatus.PENDING,
        settled=MembershipStatus.ACTIVE,
        cancelled=MembershipStatus.CANCELLED,
        success_values=_membership_success_values,
        notify=_send_membership_email,
    ),
}


# ── Transitions ───────────────────────────────────────────────────────────────

def _settled_result(ledger: _Ledger, outcome: str, statuses: set) -> ReconcileResult:
    """Result for a callback that arrives after the reference left pending."""
    if len(statuses) != 1:
        raise ReconciliationError(f"Rows disagree on status: {sorted(statuses)}")
    state = next(iter(statuses))

    if outcome == Outcome.PENDING:
        return ReconcileResult.IGNORED
    if outcome == Outcome.SUCCESS:
        return ReconcileResult.DUPLICATE if state == ledger.settled else ReconcileResult.REJECTED
    return ReconcileResult.DUPLICATE if state == ledger.cancelled else ReconcileResult.REJECTED


def _transition_values(ledger: _Ledger, outcome: str, params: CallbackParams, now) -> dict:
    values = params.payment_values()
    if outcome == Outcome.SUCCESS:
        values.update(ledger.success_values(now))
    elif outcome == Outcome.FAILURE:
        values.update(status=ledger.cancelled, deleted_at=now)
    values['updated_at'] = now
    return values


@transaction.atomic
def _transition(ledger: _Ledger, reference: PurchaseReference, outcome: str,
                params: CallbackParams) -> ReconcileResult:
    rows = ledger.rows(reference)
    statuses = list(rows.select_for_update().values_list('status', flat=True))
    if not statuses:
        return ReconcileResult.NOT_FOUND

    if any(status != ledger.pending for status in statuses):
        return _settled_result(ledger, outcome, set(statuses))

    values = _transition_values(ledger, outcome, params, timezone.now())
    updated = rows.filter(status=ledger.pending).update(**values)
    if updated != len(statuses):
        raise ReconciliationError(
            f"Conditional update touched {updated} of {len(statuses)} rows for {reference}"
        )
    return ReconcileResult.APPLIED


def _record(reference: PurchaseReference, outcome: str, result: str,
            params: CallbackParams, source: str):
    try:
        PaymentEvent.objects.create(
            reference_id=reference.token,
            kind=reference.kind,
            outcome=outcome,
            result=result,
            source=source,
            payment_id=params.payment_id,
            processor_status=params.status,
            payload=params.raw,
        )
    except DatabaseError:
        logger.exception('Could not record payment event for %s', reference)


def reconcile(reference: PurchaseReference, outcome: str, params: Optional[CallbackParams] = None,
              source: str = EventSource.REDIRECT) -> ReconcileResult:
    """
    Apply one callback outcome to every record staged under `reference`.

    Never raises: storage errors are logged and reported as ERROR. The
    confirmation email goes out only when a success is actually applied.
    """
    params = params or CallbackParams()
    outcome = Outcome(outcome)
    ledger = LEDGERS[reference.kind]

    try:
        result = _transition(ledger, reference, outcome, params)
    except (ReconciliationError, DatabaseError):
        logger.exception('Reconciliation of %s (%s via %s) failed', reference, outcome.value, source)
        result = ReconcileResult.ERROR

    _record(reference, outcome, result, params, source)

    if result == ReconcileResult.APPLIED:
        logger.info('%s: %s applied via %s (payment %s)',
                    reference, outcome.value, source, params.payment_id or '-')
        if outcome == Outcome.SUCCESS:
            ledger.notify(reference)
    elif result == ReconcileResult.NOT_FOUND:
        logger.warning('%s: no records for %s callback via %s', reference, outcome.value, source)
    elif result == ReconcileResult.REJECTED:
        logger.warning('%s: %s callback via %s rejected, purchase already settled',
                       reference, outcome.value, source)
    elif result != ReconcileResult.ERROR:
        logger.info('%s: %s callback via %s -> %s', reference, outcome.value, source, result.value)

    return result


# ── Processor notifications ───────────────────────────────────────────────────

def reconcile_payment_notification(payment_id, gateway) -> Optional[ReconcileResult]:
    """
    Fetch a payment from the processor and reconcile its purchase.

    Returns None when the payment can't be tied to one of our references or
    carries a status we don't act on. Raises ReconciliationError if the
    payment can't be fetched.
    """
    payment = gateway.fetch_payment(payment_id)

    try:
        reference = PurchaseReference.parse(payment.get('external_reference') or '')
    except ValueError:
        logger.warning('Notification for payment %s has no usable external_reference (%r)',
                       payment_id, payment.get('external_reference'))
        return None

    processor_status = payment.get('status') or ''
    outcome = PROCESSOR_STATUS_OUTCOMES.get(processor_status)
    if outcome is None:
        logger.warning('Notification for %s: unhandled payment status %r', reference, processor_status)
        return None

    order = payment.get('order') or {}
    params = CallbackParams(
        payment_id=_clean(str(payment.get('id') or payment_id), 64),
        status=_clean(processor_status, 40),
        payment_type=_clean(payment.get('payment_type_id'), 40),
        merchant_order_id=_clean(str(order.get('id') or ''), 64),
        raw={'id': payment.get('id'), 'status': processor_status,
             'status_detail': payment.get('status_detail'),
             'external_reference': reference.token},
    )
    return reconcile(reference, outcome, params, source=EventSource.WEBHOOK)
