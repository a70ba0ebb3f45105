from decimal import Decimal

import pytest
from django.core.exceptions import ImproperlyConfigured

from apps.payments.checkout import build_preference, callback_urls, open_checkout
from apps.payments.exceptions import CheckoutCreationError
from apps.payments.gateway import MercadoPagoGateway
from apps.payments.staging import StagedPurchase, stage_reservations
from apps.payments.references import PurchaseKind, new_reference
from apps.reservations.models import Reservation


def _staged(customer, **overrides):
    values = dict(
        reference=new_reference(PurchaseKind.RESERVATION),
        title='Simulador de golf',
        description='',
        quantity=1,
        unit_price=Decimal('500'),
        customer=customer,
        records_created=1,
    )
    values.update(overrides)
    return StagedPurchase(**values)


def _build(staged, base_url='https://hoyo.example/'):
    return build_preference(staged, base_url=base_url, currency='MXN', statement_descriptor='HOYO EN UNO')


# ── Payload ───────────────────────────────────────────────────────────────────

def test_callback_urls_trim_trailing_slash():
    urls = callback_urls('https://hoyo.example/')

    assert urls['back_urls'] == {
        'success': 'https://hoyo.example/payment/success',
        'failure': 'https://hoyo.example/payment/failure',
        'pending': 'https://hoyo.example/payment/pending',
    }
    assert urls['notification_url'] == 'https://hoyo.example/payment/webhook'
    assert callback_urls('https://hoyo.example')['notification_url'] == urls['notification_url']


def test_preference_is_tagged_with_the_reference(customer):
    staged = _staged(customer)

    payload = _build(staged)

    [item] = payload['items']
    assert item['id'] == staged.reference.token
    assert payload['external_reference'] == staged.reference.token
    assert item['unit_price'] == 500.0
    assert item['currency_id'] == 'MXN'
    assert payload['binary_mode'] is True
    assert payload['auto_return'] == 'approved'
    assert payload['statement_descriptor'] == 'HOYO EN UNO'
    assert payload['payer'] == {
        'name': 'Ana López',
        'email': 'ana@example.com',
        'phone': {'number': '+52 33 1234 5678'},
    }


def test_title_is_truncated_and_description_defaults(customer):
    payload = _build(_staged(customer, title='x' * 150))

    [item] = payload['items']
    assert item['title'] == 'x' * 100
    assert item['description'] == 'Servicio de ' + 'x' * 150


def test_explicit_description_is_kept(customer):
    payload = _build(_staged(customer, description='Bahía 3, 1 hora'))
    assert payload['items'][0]['description'] == 'Bahía 3, 1 hora'


@pytest.mark.parametrize('quantity, expected', [(0, 1), (-3, 1), (1, 1), (7, 7), (100, 100), (500, 100)])
def test_quantity_is_clamped(customer, quantity, expected):
    payload = _build(_staged(customer, quantity=quantity))
    assert payload['items'][0]['quantity'] == expected


# ── Gateway ───────────────────────────────────────────────────────────────────

@pytest.mark.django_db
def test_open_checkout_returns_sandbox_url(reservation_request, gateway, fake_sdk):
    staged = stage_reservations(reservation_request)

    session = open_checkout(staged, gateway)

    assert session.preference_id == fake_sdk.preference_result['response']['id']
    assert session.checkout_url.startswith('https://sandbox.mercadopago.com.mx/')
    assert session.environment == 'sandbox'
    payload = fake_sdk.last_preference()
    assert payload['external_reference'] == staged.reference.token
    assert payload['back_urls']['success'] == 'https://hoyo.test/payment/success'


@pytest.mark.django_db
def test_open_checkout_sends_reference_as_idempotency_key(reservation_request, gateway, fake_sdk):
    staged = stage_reservations(reservation_request)

    open_checkout(staged, gateway)

    _, _, options = fake_sdk.calls[0]
    assert options.custom_headers == {'x-idempotency-key': staged.reference.token}
    assert options.connection_timeout == 5.0
    assert options.max_retries == 0


def test_production_uses_init_point(fake_sdk):
    gateway = MercadoPagoGateway(access_token='APP_USR-token', environment='production')
    gateway._sdk = fake_sdk

    session = gateway.create_checkout({'items': []})

    assert session.checkout_url.startswith('https://www.mercadopago.com.mx/')
    assert session.environment == 'production'


def test_sandbox_never_falls_back_to_init_point(gateway, fake_sdk):
    del fake_sdk.preference_result['response']['sandbox_init_point']

    with pytest.raises(CheckoutCreationError):
        gateway.create_checkout({'items': []})


def test_unknown_environment_is_a_configuration_error():
    with pytest.raises(ImproperlyConfigured):
        MercadoPagoGateway(access_token='token', environment='staging')


@pytest.mark.django_db
@pytest.mark.parametrize('result', [
    {'status': 400, 'response': {'message': 'invalid unit_price'}},
    {'status': 500, 'response': None},
    {'status': 201, 'response': {'init_point': 'https://x', 'sandbox_init_point': 'https://y'}},
    {'status': 201, 'response': {'id': 'pref-without-urls'}},
    None,
])
def test_bad_processor_answer_discards_staged_records(reservation_request, gateway, fake_sdk, result):
    fake_sdk.preference_result = result
    staged = stage_reservations(reservation_request)

    with pytest.raises(CheckoutCreationError):
        open_checkout(staged, gateway)

    assert Reservation.objects.all_with_deleted().for_reference(staged.reference).count() == 0


@pytest.mark.django_db
def test_transport_error_discards_staged_records(reservation_request, gateway, fake_sdk):
    fake_sdk.error = TimeoutError('read timed out')
    staged = stage_reservations(reservation_request)

    with pytest.raises(CheckoutCreationError):
        open_checkout(staged, gateway)

    assert Reservation.objects.all_with_deleted().for_reference(staged.reference).count() == 0


@pytest.mark.django_db
def test_missing_credentials_discard_staged_records(reservation_request):
    staged = stage_reservations(reservation_request)

    with pytest.raises(CheckoutCreationError):
        open_checkout(staged, MercadoPagoGateway(access_token=''))

    assert Reservation.objects.all_with_deleted().count() == 0


@pytest.mark.django_db
def test_missing_gateway_discards_staged_records(reservation_request):
    staged = stage_reservations(reservation_request)

    with pytest.raises(CheckoutCreationError):
        open_checkout(staged, None)

    assert Reservation.objects.all_with_deleted().count() == 0


@pytest.mark.django_db
def test_compensation_only_touches_its_own_reference(reservation_request, gateway, fake_sdk):
    kept = stage_reservations(reservation_request)
    fake_sdk.error = ConnectionError('connection reset')
    failed = stage_reservations(reservation_request)

    with pytest.raises(CheckoutCreationError):
        open_checkout(failed, gateway)

    assert Reservation.objects.for_reference(kept.reference).count() == 2
    assert Reservation.objects.for_reference(failed.reference).count() == 0
