from datetime import date, time
from decimal import Decimal

import pytest
from django.apps import apps as django_apps

from apps.memberships.models import MembershipType
from apps.payments.forms import CartLine, Customer, ReservationRequest
from apps.payments.gateway import MercadoPagoGateway

PREFERENCE_ID = '123456789-abcd-ef01-2345-6789abcdef01'


class FakePreferenceResource:
    def __init__(self, sdk):
        self.sdk = sdk

    def create(self, payload, request_options=None):
        self.sdk.calls.append(('preference.create', payload, request_options))
        if self.sdk.error is not None:
            raise self.sdk.error
        return self.sdk.preference_result


class FakePaymentResource:
    def __init__(self, sdk):
        self.sdk = sdk

    def get(self, payment_id, request_options=None):
        self.sdk.calls.append(('payment.get', payment_id, request_options))
        if self.sdk.error is not None:
            raise self.sdk.error
        body = self.sdk.payments.get(str(payment_id))
        if body is None:
            return {'status': 404, 'response': {'message': 'Payment not found'}}
        return {'status': 200, 'response': body}


class FakeSdk:
    """Stands in for mercadopago.SDK: same resource methods, same result shape."""

    def __init__(self):
        self.calls = []
        self.error = None
        self.payments = {}
        self.preference_result = {
            'status': 201,
            'response': {
                'id': PREFERENCE_ID,
                'init_point': f'https://www.mercadopago.com.mx/checkout/v1/redirect?pref_id={PREFERENCE_ID}',
                'sandbox_init_point': f'https://sandbox.mercadopago.com.mx/checkout/v1/redirect?pref_id={PREFERENCE_ID}',
            },
        }

    def preference(self):
        return FakePreferenceResource(self)

    def payment(self):
        return FakePaymentResource(self)

    def add_payment(self, payment_id, external_reference, status='approved', **extra):
        self.payments[str(payment_id)] = {
            'id': int(payment_id),
            'status': status,
            'status_detail': 'accredited' if status == 'approved' else status,
            'external_reference': external_reference,
            'payment_type_id': 'credit_card',
            'order': {'id': 987654},
            **extra,
        }

    def last_preference(self):
        created = [call for call in self.calls if call[0] == 'preference.create']
        return created[-1][1] if created else None


@pytest.fixture
def fake_sdk():
    return FakeSdk()


@pytest.fixture
def gateway(fake_sdk):
    gw = MercadoPagoGateway(access_token='TEST-0000-token', environment='sandbox', timeout=5)
    gw._sdk = fake_sdk
    return gw


@pytest.fixture
def installed_gateway(gateway, monkeypatch):
    """Swap the app-level processor client for the fake-backed one."""
    monkeypatch.setattr(django_apps.get_app_config('payments'), 'gateway', gateway)
    return gateway


@pytest.fixture
def customer():
    return Customer(name='Ana López', email='ana@example.com', phone='+52 33 1234 5678', notes='')


@pytest.fixture
def reservation_request(customer):
    lines = (
        CartLine(service_id='1', date=date(2025, 6, 1), time=time(10, 0), quantity=1,
                 unit_price=Decimal('500'), total_price=Decimal('500')),
        CartLine(service_id='2', date=date(2025, 6, 1), time=time(11, 0), quantity=2,
                 unit_price=Decimal('350'), total_price=Decimal('700')),
    )
    return ReservationRequest(
        title='Simulador de golf', description='', quantity=1,
        price=Decimal('1200'), cart=lines, customer=customer,
    )


@pytest.fixture
def membership_type(db):
    return MembershipType.objects.create(
        code='BOGEY_PASS',
        name='Bogey Pass',
        description='Membresía mensual con 4 horas de simulador.',
        price=Decimal('1500.00'),
        duration_days=30,
        included_hours=4,
        included_classes=0,
    )


@pytest.fixture
def reservation_payload():
    return {
        'title': 'Simulador de golf',
        'quantity': 1,
        'price': 500,
        'cart': [{
            'serviceId': 1,
            'date': '2025-06-01',
            'time': '10:00',
            'quantity': 1,
            'unitPrice': 500,
            'totalPrice': 500,
        }],
        'customerName': 'Ana López',
        'customerEmail': 'ana@example.com',
        'customerPhone': '+52 33 1234 5678',
        'customerNotes': 'Zurda',
    }


@pytest.fixture
def membership_payload():
    return {
        'membershipType': 'BOGEY_PASS',
        'customerName': 'Luis Pérez',
        'customerEmail': 'luis@example.com',
        'customerPhone': '3312345678',
    }
