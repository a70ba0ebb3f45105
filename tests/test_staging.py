from datetime import date, timedelta
from decimal import Decimal

import pytest
from django.db import DatabaseError

from apps.memberships.models import Membership, MembershipStatus
from apps.payments.exceptions import NotFoundError, StagingError
from apps.payments.forms import MembershipRequest
from apps.payments.references import PurchaseKind
from apps.payments.staging import stage_membership, stage_reservations
from apps.reservations.models import PaymentStatus, Reservation, ReservationStatus

pytestmark = pytest.mark.django_db


def test_stage_reservations_writes_one_pending_row_per_cart_line(reservation_request):
    staged = stage_reservations(reservation_request)

    assert staged.reference.kind == PurchaseKind.RESERVATION
    assert staged.records_created == 2
    rows = list(Reservation.objects.for_reference(staged.reference))
    assert len(rows) == 2
    assert {row.status for row in rows} == {ReservationStatus.PENDING}
    assert {row.payment_status for row in rows} == {PaymentStatus.PENDING}
    assert {row.customer_email for row in rows} == {'ana@example.com'}
    assert [row.total_price for row in rows] == [Decimal('500'), Decimal('700')]
    assert all(row.payment_id == '' for row in rows)


def test_staged_purchase_carries_the_line_item(reservation_request):
    staged = stage_reservations(reservation_request)

    assert staged.title == 'Simulador de golf'
    assert staged.unit_price == Decimal('1200')
    assert staged.quantity == 1
    assert staged.customer == reservation_request.customer
    assert staged.membership is None


def test_each_staging_gets_its_own_reference(reservation_request):
    first = stage_reservations(reservation_request)
    second = stage_reservations(reservation_request)

    assert first.reference != second.reference
    assert Reservation.objects.for_reference(first.reference).count() == 2
    assert Reservation.objects.for_reference(second.reference).count() == 2


def test_stage_reservations_is_all_or_nothing(reservation_request, monkeypatch):
    real_create = Reservation.objects.create
    calls = []

    def flaky_create(**kwargs):
        calls.append(kwargs)
        if len(calls) == 2:
            raise DatabaseError('disk full')
        return real_create(**kwargs)

    monkeypatch.setattr(Reservation.objects, 'create', flaky_create)

    with pytest.raises(StagingError):
        stage_reservations(reservation_request)

    assert len(calls) == 2
    assert Reservation.objects.all_with_deleted().count() == 0


def test_stage_membership_snapshots_the_catalog(membership_type, customer):
    staged = stage_membership(
        MembershipRequest(membership_code='BOGEY_PASS', customer=customer),
        today=date(2025, 6, 1),
    )

    membership = Membership.objects.get(reference_id=staged.reference.token)
    assert staged.reference.kind == PurchaseKind.MEMBERSHIP
    assert staged.membership == membership
    assert membership.status == MembershipStatus.PENDING
    assert membership.membership_code == 'BOGEY_PASS'
    assert membership.start_date == date(2025, 6, 1)
    assert membership.end_date - membership.start_date == timedelta(days=30)
    assert membership.monthly_price == Decimal('1500.00')
    assert membership.hours_remaining == 4
    assert membership.classes_remaining == 0
    assert staged.title == 'Membership Bogey Pass'
    assert staged.unit_price == Decimal('1500.00')


def test_catalog_edits_do_not_touch_staged_memberships(membership_type, customer):
    staged = stage_membership(MembershipRequest(membership_code='BOGEY_PASS', customer=customer))

    membership_type.price = Decimal('9999.00')
    membership_type.duration_days = 90
    membership_type.save()

    membership = Membership.objects.get(reference_id=staged.reference.token)
    assert membership.monthly_price == Decimal('1500.00')
    assert membership.end_date - membership.start_date == timedelta(days=30)


def test_stage_membership_defaults_to_local_today(membership_type, customer, monkeypatch):
    monkeypatch.setattr('apps.payments.staging.timezone.localdate', lambda: date(2025, 12, 20))

    staged = stage_membership(MembershipRequest(membership_code='BOGEY_PASS', customer=customer))

    assert staged.membership.start_date == date(2025, 12, 20)
    assert staged.membership.end_date == date(2026, 1, 19)


def test_unknown_membership_code_is_not_found(membership_type, customer):
    with pytest.raises(NotFoundError):
        stage_membership(MembershipRequest(membership_code='ALBATROSS_PASS', customer=customer))

    assert Membership.objects.all_with_deleted().count() == 0


def test_retired_membership_code_is_not_found(membership_type, customer):
    membership_type.is_active = False
    membership_type.save()

    with pytest.raises(NotFoundError):
        stage_membership(MembershipRequest(membership_code='BOGEY_PASS', customer=customer))
