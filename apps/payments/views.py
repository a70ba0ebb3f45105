"""
Payment views for Hoyo en Uno.

Flow:
  1. create_preference / create_membership
         → validate body → stage pending records → open Mercado Pago checkout
         → JSON with the checkout URL (records discarded if checkout fails)
  2. Customer pays on Mercado Pago's hosted checkout
  3. payment_success / payment_failure / payment_pending
         → browser redirect back from Mercado Pago → reconcile → terminal page
  4. payment_webhook
         → server-to-server notification → fetch payment → reconcile
"""
import json
import logging

from django.apps import apps as django_apps
from django.conf import settings
from django.http import HttpResponse, JsonResponse
from django.shortcuts import render
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST

from .checkout import open_checkout
from .exceptions import NotFoundError, PaymentFlowError, ValidationError
from .forms import parse_membership_request, parse_reservation_request
from .models import EventSource, Outcome
from .reconciler import CallbackParams, reconcile, reconcile_payment_notification
from .references import PurchaseReference
from .staging import stage_membership, stage_reservations

logger = logging.getLogger(__name__)

GENERIC_FAILURE = 'Payment processing failed'


# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────

def _gateway():
    """Processor client built at startup by PaymentsConfig.ready()."""
    return django_apps.get_app_config('payments').gateway


def _json_body(request):
    try:
        return json.loads(request.body or b'{}')
    except (ValueError, UnicodeDecodeError):
        raise ValidationError('Request body is not valid JSON', errors={'body': ['Invalid JSON.']}) from None


def _error_response(exc: PaymentFlowError) -> JsonResponse:
    if isinstance(exc, ValidationError):
        return JsonResponse({
            'success': False,
            'error': str(exc),
            'message': exc.first_error,
            'errors': exc.errors,
        }, status=exc.status_code)
    if isinstance(exc, NotFoundError):
        return JsonResponse({
            'success': False,
            'error': 'Membership type not found',
            'message': str(exc),
        }, status=exc.status_code)
    return JsonResponse({
        'success': False,
        'error': GENERIC_FAILURE,
        'message': str(exc),
    }, status=500)


def _unexpected_error() -> JsonResponse:
    return JsonResponse({
        'success': False,
        'error': GENERIC_FAILURE,
        'message': 'An unexpected error occurred. Please try again.',
    }, status=500)


def _page_context(params: CallbackParams, token: str) -> dict:
    return {
        'payment_id': params.payment_id,
        'reference': token,
        'business_name': settings.BUSINESS_NAME,
        'support_url': settings.SUPPORT_WHATSAPP_URL,
    }


# ─────────────────────────────────────────────────────────────────────────────
# Service banner
# ─────────────────────────────────────────────────────────────────────────────

@require_GET
def index(request):
    return HttpResponse(
        f"{settings.BUSINESS_NAME} payments API is running.",
        content_type='text/plain; charset=utf-8',
    )


# ─────────────────────────────────────────────────────────────────────────────
# Checkout creation
# ─────────────────────────────────────────────────────────────────────────────

@csrf_exempt
@require_POST
def create_preference(request):
    """Stage a cart of reservations and open a checkout for its total."""
    try:
        purchase = parse_reservation_request(_json_body(request))
        staged = stage_reservations(purchase)
        session = open_checkout(staged, _gateway())
    except ValidationError as exc:
        logger.info('Reservation request rejected: %s', exc.errors)
        return _error_response(exc)
    except PaymentFlowError as exc:
        logger.error('Reservation checkout failed: %s', exc)
        return _error_response(exc)
    except Exception as exc:
        logger.exception('Unexpected error in create_preference: %s', exc)
        return _unexpected_error()

    return JsonResponse({
        'success': True,
        'id': session.preference_id,
        'checkout_url': session.checkout_url,
        'reference': staged.reference.token,
        'reservations_created': staged.records_created,
        'environment': session.environment,
    })


@csrf_exempt
@require_POST
def create_membership(request):
    """Stage a pending membership and open a checkout for its price."""
    try:
        purchase = parse_membership_request(_json_body(request))
        staged = stage_membership(purchase)
        session = open_checkout(staged, _gateway())
    except ValidationError as exc:
        logger.info('Membership request rejected: %s', exc.errors)
        return _error_response(exc)
    except PaymentFlowError as exc:
        logger.error('Membership checkout failed: %s', exc)
        return _error_response(exc)
    except Exception as exc:
        logger.exception('Unexpected error in create_membership: %s', exc)
        return _unexpected_error()

    membership = staged.membership
    return JsonResponse({
        'success': True,
        'id': session.preference_id,
        'checkout_url': session.checkout_url,
        'reference': staged.reference.token,
        'environment': session.environment,
        'membership': {
            'code': membership.membership_code,
            'name': membership.membership_type.name,
            'price': float(membership.monthly_price),
            'start_date': membership.start_date.isoformat(),
            'end_date': membership.end_date.isoformat(),
            'hours_remaining': membership.hours_remaining,
            'classes_remaining': membership.classes_remaining,
        },
    })


# ─────────────────────────────────────────────────────────────────────────────
# Redirect callbacks (browser comes back from Mercado Pago)
# ─────────────────────────────────────────────────────────────────────────────

def _reconcile_redirect(request, outcome: str):
    """
    Apply the redirect's outcome and render its terminal page.
    The page is always shown; reconciliation problems are only logged.
    """
    params = CallbackParams.from_query(request.GET)
    token = (request.GET.get('external_reference') or '').strip()[:64]

    try:
        reference = PurchaseReference.parse(token)
    except ValueError:
        logger.warning('Redirect %s with unusable external_reference %r', outcome, token)
    else:
        try:
            reconcile(reference, outcome, params, source=EventSource.REDIRECT)
        except Exception as exc:
            logger.exception('Fatal error reconciling %s redirect for %s: %s', outcome, reference, exc)

    template = f'payments/{Outcome(outcome).value}.html'
    return render(request, template, _page_context(params, token))


@require_GET
def payment_success(request):
    return _reconcile_redirect(request, Outcome.SUCCESS)


@require_GET
def payment_failure(request):
    return _reconcile_redirect(request, Outcome.FAILURE)


@require_GET
def payment_pending(request):
    return _reconcile_redirect(request, Outcome.PENDING)


# ─────────────────────────────────────────────────────────────────────────────
# Mercado Pago notification (server-to-server)
# ─────────────────────────────────────────────────────────────────────────────

def _notification_payment_id(payload: dict, query) -> str:
    """Payment id from a notification, or '' when it's not about a payment."""
    kind = payload.get('type') or payload.get('topic') or query.get('type') or query.get('topic')
    if kind != 'payment':
        return ''
    data = payload.get('data') if isinstance(payload.get('data'), dict) else {}
    payment_id = data.get('id') or query.get('data.id') or query.get('id')
    return str(payment_id or '').strip()


@csrf_exempt
def payment_webhook(request):
    """
    Mercado Pago calls this for every payment event.
    Answers 200 for anything we could parse so the processor stops retrying.
    """
    if request.method != 'POST':
        logger.warning('Webhook: received non-POST request.')
        return HttpResponse(status=405)

    try:
        payload = json.loads(request.body or b'{}')
    except (ValueError, UnicodeDecodeError):
        logger.warning('Webhook: unparsable body.')
        return HttpResponse(status=400)
    if not isinstance(payload, dict):
        return HttpResponse(status=400)

    payment_id = _notification_payment_id(payload, request.GET)
    if not payment_id:
        logger.info('Webhook: ignoring %s notification', payload.get('type') or request.GET.get('topic') or 'unknown')
        return HttpResponse(status=200)

    try:
        result = reconcile_payment_notification(payment_id, _gateway())
        logger.info('Webhook: payment %s → %s', payment_id, result.value if result else 'skipped')
    except Exception as exc:
        # Notification handling must never answer 500
        logger.exception('Webhook processing error for payment %s: %s', payment_id, exc)

    return HttpResponse(status=200)
