"""
Staging writer: persists a validated purchase as pending records.

Public API:
  stage_reservations(request) -> StagedPurchase
  stage_membership(request, today=None) -> StagedPurchase

Every record of one purchase is written inside a single transaction and
tagged with a freshly allocated PurchaseReference. Either all rows for the
token exist afterwards or none do.
"""
import logging
from dataclasses import dataclass
from datetime import date as date_type
from decimal import Decimal
from typing import Optional

from django.db import DatabaseError, transaction
from django.utils import timezone

from apps.memberships.models import Membership, MembershipType
from apps.reservations.models import Reservation

from .exceptions import NotFoundError, StagingError
from .forms import Customer, MembershipRequest, ReservationRequest
from .references import PurchaseKind, PurchaseReference, new_reference

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StagedPurchase:
    """What the checkout builder needs to know about a freshly staged purchase."""
    reference: PurchaseReference
    title: str
    description: str
    quantity: int
    unit_price: Decimal
    customer: Customer
    records_created: int
    membership: Optional[Membership] = None


def _customer_fields(customer: Customer) -> dict:
    return {
        'customer_name': customer.name,
        'customer_email': customer.email,
        'customer_phone': customer.phone,
        'notes': customer.notes,
    }


# ── Reservations ──────────────────────────────────────────────────────────────

def stage_reservations(request: ReservationRequest) -> StagedPurchase:
    """One pending Reservation per cart line, all under one new reference."""
    reference = new_reference(PurchaseKind.RESERVATION)
    customer = _customer_fields(request.customer)

    try:
        with transaction.atomic():
            for line in request.cart:
                Reservation.objects.create(
                    reference_id=reference.token,
                    service_id=line.service_id,
                    title=request.title[:150],
                    reservation_date=line.date,
                    reservation_time=line.time,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                    total_price=line.total_price,
                    **customer,
                )
    except DatabaseError as exc:
        logger.exception('Staging reservations failed for %s', reference)
        raise StagingError(f"Could not stage reservations: {exc}") from exc

    logger.info('Staged %d pending reservation(s) under %s', len(request.cart), reference)
    return StagedPurchase(
        reference=reference,
        title=request.title,
        description=request.description,
        quantity=request.quantity,
        unit_price=request.price,
        customer=request.customer,
        records_created=len(request.cart),
    )


# ── Memberships ───────────────────────────────────────────────────────────────

def stage_membership(request: MembershipRequest, today: Optional[date_type] = None) -> StagedPurchase:
    """
    One pending Membership for the requested catalog entry.

    Price, term and allowances are copied from the catalog row now; the term
    starts today (local time) and lasts duration_days.
    Raises NotFoundError when the code is not an active catalog entry.
    """
    try:
        membership_type = MembershipType.get_active(request.membership_code)
    except MembershipType.DoesNotExist:
        logger.warning('Membership purchase for unknown code %r', request.membership_code)
        raise NotFoundError(f"Membership type {request.membership_code!r} not found") from None

    reference = new_reference(PurchaseKind.MEMBERSHIP)
    start_date, end_date = membership_type.term_starting(today or timezone.localdate())

    try:
        with transaction.atomic():
            membership = Membership.objects.create(
                reference_id=reference.token,
                membership_type=membership_type,
                membership_code=membership_type.code,
                start_date=start_date,
                end_date=end_date,
                monthly_price=membership_type.price,
                hours_remaining=membership_type.included_hours,
                classes_remaining=membership_type.included_classes,
                **_customer_fields(request.customer),
            )
    except DatabaseError as exc:
        logger.exception('Staging membership failed for %s', reference)
        raise StagingError(f"Could not stage membership: {exc}") from exc

    logger.info('Staged pending membership %s under %s', membership_type.code, reference)
    return StagedPurchase(
        reference=reference,
        title=f"Membership {membership_type.name}",
        description=membership_type.description,
        quantity=1,
        unit_price=membership_type.price,
        customer=request.customer,
        records_created=1,
        membership=membership,
    )
