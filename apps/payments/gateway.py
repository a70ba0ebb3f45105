"""
Mercado Pago client wrapper.

Built once at startup (PaymentsConfig.ready) and handed to the checkout and
notification code. Nothing here touches the database.

The SDK never raises on HTTP errors; every call returns
{"status": <http status>, "response": <json body>} and we check it ourselves.
"""
import logging
from dataclasses import dataclass

import mercadopago
from mercadopago.config import RequestOptions
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

from .exceptions import CheckoutCreationError, ReconciliationError

logger = logging.getLogger(__name__)

SANDBOX = 'sandbox'
PRODUCTION = 'production'
ENVIRONMENTS = (SANDBOX, PRODUCTION)

# Which preference field holds the hosted checkout URL in each environment
CHECKOUT_URL_FIELDS = {
    SANDBOX: 'sandbox_init_point',
    PRODUCTION: 'init_point',
}


@dataclass(frozen=True)
class CheckoutSession:
    preference_id: str
    checkout_url: str
    environment: str


class MercadoPagoGateway:

    def __init__(self, access_token: str, environment: str = SANDBOX, timeout: float = 5.0):
        if environment not in ENVIRONMENTS:
            raise ImproperlyConfigured(
                f"MP_ENVIRONMENT must be one of {ENVIRONMENTS}, got {environment!r}"
            )
        self.access_token = access_token
        self.environment = environment
        self.timeout = float(timeout)
        self._sdk = None

    @classmethod
    def from_settings(cls) -> 'MercadoPagoGateway':
        environment = getattr(settings, 'MERCADOPAGO_ENVIRONMENT', SANDBOX)
        if environment == PRODUCTION:
            token = settings.MP_ACCESS_TOKEN_PROD
        else:
            token = settings.MP_ACCESS_TOKEN_TEST
        if not token:
            # Startup continues so the callback pages keep working; checkout will fail.
            logger.error('No Mercado Pago access token configured for %s environment', environment)
        return cls(
            access_token=token,
            environment=environment,
            timeout=getattr(settings, 'MERCADOPAGO_TIMEOUT_SECONDS', 5.0),
        )

    # ── SDK plumbing ─────────────────────────────────────────────────────────

    def _client(self):
        if not self.access_token:
            raise CheckoutCreationError('Mercado Pago access token is not configured')
        if self._sdk is None:
            self._sdk = mercadopago.SDK(self.access_token)
        return self._sdk

    def _request_options(self, idempotency_key=None) -> RequestOptions:
        headers = {}
        if idempotency_key:
            headers['x-idempotency-key'] = str(idempotency_key)
        return RequestOptions(
            access_token=self.access_token,
            connection_timeout=self.timeout,
            custom_headers=headers,
            max_retries=0,
        )

    # ── Checkout ─────────────────────────────────────────────────────────────

    def create_checkout(self, payload: dict, idempotency_key=None) -> CheckoutSession:
        """
        Create a checkout preference and return its hosted checkout URL.
        Any failure, including timeouts, comes out as CheckoutCreationError.
        """
        try:
            result = self._client().preference().create(
                payload, self._request_options(idempotency_key)
            )
        except CheckoutCreationError:
            raise
        except Exception as exc:
            logger.exception('Mercado Pago preference request failed for %s', idempotency_key)
            raise CheckoutCreationError(f"Mercado Pago request failed: {exc}") from exc

        return self.checkout_session(result)

    def checkout_session(self, result) -> CheckoutSession:
        """Validate an SDK preference result and pick this environment's URL."""
        status = result.get('status') if isinstance(result, dict) else None
        body = result.get('response') if isinstance(result, dict) else None
        if not isinstance(status, int) or not 200 <= status < 300:
            logger.error('Mercado Pago rejected preference: status=%s body=%s', status, body)
            raise CheckoutCreationError(f"Mercado Pago returned status {status}")
        if not isinstance(body, dict) or not body.get('id'):
            raise CheckoutCreationError('Mercado Pago response has no preference id')

        checkout_url = body.get(CHECKOUT_URL_FIELDS[self.environment])
        if not checkout_url:
            raise CheckoutCreationError(
                f"Mercado Pago response has no {CHECKOUT_URL_FIELDS[self.environment]}"
            )
        return CheckoutSession(
            preference_id=str(body['id']),
            checkout_url=checkout_url,
            environment=self.environment,
        )

    # ── Payments ─────────────────────────────────────────────────────────────

    def fetch_payment(self, payment_id) -> dict:
        """Look up a payment by id. Raises ReconciliationError if it can't be read."""
        try:
            result = self._client().payment().get(payment_id, self._request_options())
        except Exception as exc:
            raise ReconciliationError(f"Could not fetch payment {payment_id}: {exc}") from exc

        status = result.get('status') if isinstance(result, dict) else None
        body = result.get('response') if isinstance(result, dict) else None
        if status != 200 or not isinstance(body, dict):
            raise ReconciliationError(f"Mercado Pago returned status {status} for payment {payment_id}")
        return body
