"""
Request validation for the purchase endpoints.

The JSON bodies use camelCase keys (customerName, cart[].serviceId, ...).
Each form works on snake_case fields; errors are reported back under the
original key so the frontend can point at the offending input.

Public API:
  parse_reservation_request(body) -> ReservationRequest
  parse_membership_request(body)  -> MembershipRequest
Both raise apps.payments.exceptions.ValidationError and touch no storage.
"""
from dataclasses import dataclass
from datetime import date as date_type, time as time_type
from decimal import Decimal
from typing import Tuple

from django import forms

from .exceptions import ValidationError

CUSTOMER_KEYS = {
    'name': 'customerName',
    'email': 'customerEmail',
    'phone': 'customerPhone',
    'notes': 'customerNotes',
}
CART_KEYS = {
    'service_id': 'serviceId',
    'date': 'date',
    'time': 'time',
    'quantity': 'quantity',
    'unit_price': 'unitPrice',
    'total_price': 'totalPrice',
}
ORDER_KEYS = {
    'title': 'title',
    'quantity': 'quantity',
    'price': 'price',
    'description': 'description',
}
MEMBERSHIP_KEYS = {
    'membership_type': 'membershipType',
}


# ── Validated request shapes ──────────────────────────────────────────────────

@dataclass(frozen=True)
class Customer:
    name: str
    email: str
    phone: str
    notes: str = ''


@dataclass(frozen=True)
class CartLine:
    service_id: str
    date: date_type
    time: time_type
    quantity: int
    unit_price: Decimal
    total_price: Decimal


@dataclass(frozen=True)
class ReservationRequest:
    title: str
    description: str
    quantity: int
    price: Decimal
    cart: Tuple[CartLine, ...]
    customer: Customer


@dataclass(frozen=True)
class MembershipRequest:
    membership_code: str
    customer: Customer


# ── Forms ─────────────────────────────────────────────────────────────────────

class PositiveDecimalField(forms.DecimalField):
    """Money amount: finite, at most two decimals, strictly greater than zero."""

    def __init__(self, **kwargs):
        kwargs.setdefault('max_digits', 10)
        kwargs.setdefault('decimal_places', 2)
        super().__init__(**kwargs)

    def validate(self, value):
        super().validate(value)
        if value is not None and value <= 0:
            raise forms.ValidationError('Must be a positive number.', code='not_positive')


class CustomerForm(forms.Form):
    name = forms.CharField(max_length=120)
    email = forms.EmailField()
    phone = forms.CharField(max_length=30)
    notes = forms.CharField(required=False, max_length=1000)

    def clean_phone(self):
        phone = self.cleaned_data.get('phone', '')
        if not any(ch.isdigit() for ch in phone):
            raise forms.ValidationError('Enter a phone number we can reach you at.')
        return phone


class CartItemForm(forms.Form):
    service_id = forms.CharField(max_length=64)
    date = forms.DateField(input_formats=['%Y-%m-%d'])
    time = forms.TimeField(input_formats=['%H:%M', '%H:%M:%S'])
    quantity = forms.IntegerField(required=False, min_value=1)
    unit_price = PositiveDecimalField()
    total_price = PositiveDecimalField(required=False)

    def clean(self):
        cleaned = super().clean()
        if not cleaned.get('quantity'):
            cleaned['quantity'] = 1
        unit_price = cleaned.get('unit_price')
        if unit_price is not None and cleaned.get('total_price') is None:
            cleaned['total_price'] = unit_price * cleaned['quantity']
        return cleaned


class ReservationOrderForm(forms.Form):
    title = forms.CharField()
    description = forms.CharField(required=False, max_length=600)
    quantity = forms.IntegerField(required=False)
    # Optional: defaults to the cart total
    price = PositiveDecimalField(required=False)


class MembershipOrderForm(forms.Form):
    membership_type = forms.CharField(max_length=40)

    def clean_membership_type(self):
        return self.cleaned_data['membership_type'].upper()


# ── Helpers ───────────────────────────────────────────────────────────────────

def _bind(form_class, body: dict, keys: dict) -> forms.Form:
    return form_class({field: body.get(key) for field, key in keys.items()})


def _errors(form: forms.Form, keys: dict, prefix: str = '') -> dict:
    return {
        f"{prefix}{keys.get(field, field)}": [str(message) for message in messages]
        for field, messages in form.errors.items()
    }


def _require_object(body):
    if not isinstance(body, dict):
        raise ValidationError('Request body must be a JSON object', errors={'body': ['Expected an object.']})


def _customer(body: dict, errors: dict):
    form = _bind(CustomerForm, body, CUSTOMER_KEYS)
    if not form.is_valid():
        errors.update(_errors(form, CUSTOMER_KEYS))
        return None
    return Customer(**form.cleaned_data)


def _cart(raw_cart, errors: dict) -> list:
    if not isinstance(raw_cart, list) or not raw_cart:
        errors['cart'] = ['At least one reservation slot is required.']
        return []

    lines = []
    for index, entry in enumerate(raw_cart):
        if not isinstance(entry, dict):
            errors[f'cart[{index}]'] = ['Each cart entry must be an object.']
            continue
        form = _bind(CartItemForm, entry, CART_KEYS)
        if not form.is_valid():
            errors.update(_errors(form, CART_KEYS, prefix=f'cart[{index}].'))
            continue
        data = form.cleaned_data
        lines.append(CartLine(
            service_id=data['service_id'],
            date=data['date'],
            time=data['time'],
            quantity=data['quantity'],
            unit_price=data['unit_price'],
            total_price=data['total_price'],
        ))
    return lines


# ── Public API ────────────────────────────────────────────────────────────────

def parse_reservation_request(body) -> ReservationRequest:
    _require_object(body)
    errors = {}

    order = _bind(ReservationOrderForm, body, ORDER_KEYS)
    if not order.is_valid():
        errors.update(_errors(order, ORDER_KEYS))
    customer = _customer(body, errors)
    lines = _cart(body.get('cart'), errors)

    if errors:
        raise ValidationError('Invalid reservation request', errors=errors)

    data = order.cleaned_data
    title = data['title']
    price = data.get('price')
    quantity = data.get('quantity') or 1
    if price is None:
        # The cart total is already the whole charge
        price = sum((line.total_price for line in lines), Decimal('0'))
        quantity = 1
    return ReservationRequest(
        title=title,
        description=data.get('description') or '',
        quantity=quantity,
        price=price,
        cart=tuple(lines),
        customer=customer,
    )


def parse_membership_request(body) -> MembershipRequest:
    _require_object(body)
    errors = {}

    order = _bind(MembershipOrderForm, body, MEMBERSHIP_KEYS)
    if not order.is_valid():
        errors.update(_errors(order, MEMBERSHIP_KEYS))
    customer = _customer(body, errors)

    if errors:
        raise ValidationError('Invalid membership request', errors=errors)

    return MembershipRequest(
        membership_code=order.cleaned_data['membership_type'],
        customer=customer,
    )
