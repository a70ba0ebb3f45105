"""
Checkout request builder.

Maps a StagedPurchase onto a Mercado Pago preference and asks the gateway
for the hosted checkout URL. If that fails the staged records are discarded
before the error reaches the view.
"""
import logging
from decimal import Decimal

from django.conf import settings

from .compensation import discard_staged
from .exceptions import CheckoutCreationError
from .gateway import CheckoutSession

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 100
MAX_QUANTITY = 100

OUTCOME_PATHS = ('success', 'failure', 'pending')


def callback_urls(base_url: str) -> dict:
    """back_urls plus notification_url, all rooted at base_url without a trailing slash."""
    base = (base_url or '').rstrip('/')
    return {
        'back_urls': {outcome: f"{base}/payment/{outcome}" for outcome in OUTCOME_PATHS},
        'notification_url': f"{base}/payment/webhook",
    }


def _clamp_quantity(quantity) -> int:
    try:
        quantity = int(quantity)
    except (TypeError, ValueError):
        quantity = 1
    return max(1, min(quantity, MAX_QUANTITY))


def _amount(value) -> float:
    # The API expects a JSON number
    return float(Decimal(value).quantize(Decimal('0.01')))


def build_preference(staged, *, base_url: str, currency: str, statement_descriptor: str) -> dict:
    title = staged.title[:MAX_TITLE_LENGTH]
    customer = staged.customer
    urls = callback_urls(base_url)

    return {
        'items': [{
            'id': staged.reference.token,
            'title': title,
            'quantity': _clamp_quantity(staged.quantity),
            'unit_price': _amount(staged.unit_price),
            'currency_id': currency,
            'description': staged.description or f"Servicio de {staged.title}",
        }],
        'payer': {
            'name': customer.name,
            'email': customer.email,
            'phone': {'number': customer.phone},
        },
        'back_urls': urls['back_urls'],
        'notification_url': urls['notification_url'],
        'external_reference': staged.reference.token,
        'auto_return': 'approved',
        'binary_mode': True,
        'statement_descriptor': statement_descriptor,
    }


def open_checkout(staged, gateway, *, base_url=None, currency=None, statement_descriptor=None) -> CheckoutSession:
    """
    Create the checkout session for a staged purchase.

    On any failure the purchase's records are removed and CheckoutCreationError
    is raised; the caller never sees half a purchase.
    """
    payload = build_preference(
        staged,
        base_url=base_url if base_url is not None else settings.BASE_URL,
        currency=currency or settings.CHECKOUT_CURRENCY,
        statement_descriptor=statement_descriptor or settings.STATEMENT_DESCRIPTOR,
    )
    try:
        if gateway is None:
            raise CheckoutCreationError('Payment gateway is not initialised')
        session = gateway.create_checkout(payload, idempotency_key=staged.reference.token)
    except Exception as exc:
        logger.error('Checkout creation failed for %s: %s', staged.reference, exc)
        discard_staged(staged.reference)
        if isinstance(exc, CheckoutCreationError):
            raise
        raise CheckoutCreationError(str(exc)) from exc

    logger.info(
        'Checkout %s opened for %s (%s)',
        session.preference_id, staged.reference, session.environment,
    )
    return session
