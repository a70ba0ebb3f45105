from datetime import date, time
from decimal import Decimal

import pytest

from apps.payments.exceptions import ValidationError
from apps.payments.forms import parse_membership_request, parse_reservation_request


def _errors(body, parser=parse_reservation_request):
    with pytest.raises(ValidationError) as excinfo:
        parser(body)
    return excinfo.value.errors


def test_valid_reservation_request(reservation_payload):
    request = parse_reservation_request(reservation_payload)

    assert request.title == 'Simulador de golf'
    assert request.price == Decimal('500')
    assert request.customer.name == 'Ana López'
    assert request.customer.notes == 'Zurda'
    [line] = request.cart
    assert line.service_id == '1'
    assert line.date == date(2025, 6, 1)
    assert line.time == time(10, 0)
    assert line.quantity == 1
    assert line.total_price == Decimal('500')


def test_total_price_defaults_to_unit_price_times_quantity(reservation_payload):
    del reservation_payload['cart'][0]['totalPrice']
    reservation_payload['cart'][0]['quantity'] = 3

    [line] = parse_reservation_request(reservation_payload).cart

    assert line.total_price == Decimal('1500')


def test_missing_quantity_defaults_to_one(reservation_payload):
    del reservation_payload['cart'][0]['quantity']
    del reservation_payload['quantity']

    request = parse_reservation_request(reservation_payload)

    assert request.quantity == 1
    assert request.cart[0].quantity == 1


def test_price_defaults_to_cart_total(reservation_payload):
    del reservation_payload['price']
    reservation_payload['cart'].append({
        'serviceId': 2, 'date': '2025-06-01', 'time': '11:30',
        'quantity': 2, 'unitPrice': 250,
    })

    request = parse_reservation_request(reservation_payload)

    assert request.price == Decimal('1000')
    assert len(request.cart) == 2


def test_cart_total_is_charged_once_whatever_the_quantity(reservation_payload):
    del reservation_payload['price']
    reservation_payload['quantity'] = 3

    request = parse_reservation_request(reservation_payload)

    assert request.price == Decimal('500')
    assert request.quantity == 1


def test_explicit_price_keeps_its_quantity(reservation_payload):
    reservation_payload['quantity'] = 3

    assert parse_reservation_request(reservation_payload).quantity == 3


@pytest.mark.parametrize('field', ['serviceId', 'date', 'time'])
def test_cart_entry_requires_slot_fields(reservation_payload, field):
    del reservation_payload['cart'][0][field]
    assert f'cart[0].{field}' in _errors(reservation_payload)


@pytest.mark.parametrize('field, value', [
    ('date', '01/06/2025'),
    ('date', '2025-02-30'),
    ('time', '25:00'),
    ('time', 'ten'),
])
def test_cart_entry_rejects_unparsable_date_and_time(reservation_payload, field, value):
    reservation_payload['cart'][0][field] = value
    assert f'cart[0].{field}' in _errors(reservation_payload)


@pytest.mark.parametrize('value', [0, -5, 'abc', None])
def test_unit_price_must_be_positive(reservation_payload, value):
    reservation_payload['cart'][0]['unitPrice'] = value
    assert 'cart[0].unitPrice' in _errors(reservation_payload)


def test_top_level_price_must_be_positive(reservation_payload):
    reservation_payload['price'] = '0'
    assert 'price' in _errors(reservation_payload)


def test_errors_point_at_the_failing_entry(reservation_payload):
    good = dict(reservation_payload['cart'][0])
    bad = dict(good, totalPrice=-1)
    reservation_payload['cart'] = [good, bad]

    errors = _errors(reservation_payload)

    assert list(errors) == ['cart[1].totalPrice']


@pytest.mark.parametrize('cart', [None, [], 'cart', {'serviceId': 1}])
def test_cart_must_be_a_non_empty_list(reservation_payload, cart):
    reservation_payload['cart'] = cart
    assert 'cart' in _errors(reservation_payload)


def test_title_is_required(reservation_payload):
    reservation_payload['title'] = '   '
    assert 'title' in _errors(reservation_payload)


@pytest.mark.parametrize('field', ['customerName', 'customerEmail', 'customerPhone'])
def test_customer_identity_is_required(reservation_payload, field):
    del reservation_payload[field]
    assert field in _errors(reservation_payload)


def test_customer_email_must_be_well_formed(reservation_payload):
    reservation_payload['customerEmail'] = 'ana-at-example'
    assert 'customerEmail' in _errors(reservation_payload)


def test_first_error_names_the_field(reservation_payload):
    reservation_payload['title'] = ''
    with pytest.raises(ValidationError) as excinfo:
        parse_reservation_request(reservation_payload)
    assert excinfo.value.first_error.startswith('title: ')
    assert excinfo.value.status_code == 400


@pytest.mark.parametrize('body', [None, [], 'text', 42])
def test_body_must_be_an_object(body):
    assert 'body' in _errors(body)


def test_valid_membership_request(membership_payload):
    membership_payload['membershipType'] = ' bogey_pass '

    request = parse_membership_request(membership_payload)

    assert request.membership_code == 'BOGEY_PASS'
    assert request.customer.email == 'luis@example.com'


@pytest.mark.parametrize('value', ['', '   ', None])
def test_membership_type_is_required(membership_payload, value):
    membership_payload['membershipType'] = value
    assert 'membershipType' in _errors(membership_payload, parse_membership_request)
