"""
Email notification service for Hoyo en Uno.

All functions are synchronous and called by the reconciler right after a
success transition is applied, so each purchase is confirmed exactly once.

Public API:
  send_reservation_confirmed(reservations)
  send_membership_activated(membership)
"""
import logging
from decimal import Decimal

from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.template.loader import render_to_string

logger = logging.getLogger(__name__)


def _base_context(record) -> dict:
    """Template context shared by every purchase email."""
    return {
        'customer_name':  record.customer_name,
        'reference':      record.reference_id,
        'payment_id':     record.payment_id,
        'business_name':  getattr(settings, 'BUSINESS_NAME', 'Hoyo en Uno'),
        'support_email':  settings.DEFAULT_FROM_EMAIL,
        'support_url':    getattr(settings, 'SUPPORT_WHATSAPP_URL', ''),
    }


def _send(subject: str, to_email: str, html_template: str, txt_template: str, context: dict):
    """Low-level send helper: multipart email with HTML + text fallback."""
    if not to_email:
        logger.warning('Email skipped: no address for purchase %s', context.get('reference'))
        return

    try:
        text_body = render_to_string(txt_template, context)
        html_body = render_to_string(html_template, context)

        msg = EmailMultiAlternatives(
            subject=subject,
            body=text_body,
            from_email=settings.DEFAULT_FROM_EMAIL,
            to=[to_email],
        )
        msg.attach_alternative(html_body, 'text/html')
        msg.send(fail_silently=False)
        logger.info('Email "%s" sent to %s', subject, to_email)
    except Exception as exc:
        # Never crash the payment flow over an email
        logger.exception('Failed to send email "%s" to %s: %s', subject, to_email, exc)


# ─────────────────────────────────────────────────────────────────────────────
# Public API
# ─────────────────────────────────────────────────────────────────────────────

def send_reservation_confirmed(reservations):
    """
    One email listing every confirmed slot of a cart.
    All reservations share the same reference and customer.
    """
    reservations = list(reservations)
    if not reservations:
        return
    first = reservations[0]

    ctx = _base_context(first)
    ctx['reservations'] = reservations
    ctx['title'] = first.title
    ctx['total'] = sum((r.total_price for r in reservations), Decimal('0'))

    _send(
        subject=f'Reservación confirmada - {ctx["business_name"]}',
        to_email=first.customer_email,
        html_template='emails/reservation_confirmed.html',
        txt_template='emails/reservation_confirmed.txt',
        context=ctx,
    )


def send_membership_activated(membership):
    ctx = _base_context(membership)
    ctx.update({
        'membership_name':   membership.membership_type.name,
        'membership_code':   membership.membership_code,
        'start_date':        membership.start_date,
        'end_date':          membership.end_date,
        'monthly_price':     membership.monthly_price,
        'hours_remaining':   membership.hours_remaining,
        'classes_remaining': membership.classes_remaining,
    })

    _send(
        subject=f'Membresía {membership.membership_type.name} activada - {ctx["business_name"]}',
        to_email=membership.customer_email,
        html_template='emails/membership_activated.html',
        txt_template='emails/membership_activated.txt',
        context=ctx,
    )
