"""
Reservation model: one row per (service, date, time slot) in a cart.

Every row of a cart shares the cart's purchase reference and moves through
the state machine together:

    pending ──success──▶ confirmed (payment_status=paid)
       └─────failure──▶ cancelled (soft-deleted)

Transitions are applied by apps.payments.reconciler with conditional updates,
never by writing `status` directly.
"""
from django.core.validators import MinValueValidator
from django.db import models

from apps.core.models import PurchaseRecord


class ReservationStatus(models.TextChoices):
    PENDING   = 'pending',   'Pending'
    CONFIRMED = 'confirmed', 'Confirmed'
    CANCELLED = 'cancelled', 'Cancelled'


class PaymentStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    PAID    = 'paid',    'Paid'


class Reservation(PurchaseRecord):
    service_id = models.CharField(max_length=64, help_text='Identifier of the booked service')
    title = models.CharField(max_length=150, blank=True)

    reservation_date = models.DateField(db_index=True)
    reservation_time = models.TimeField()
    quantity = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])

    # Price snapshot at staging time
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    total_price = models.DecimalField(max_digits=10, decimal_places=2)

    status = models.CharField(
        max_length=10, choices=ReservationStatus.choices,
        default=ReservationStatus.PENDING, db_index=True,
    )
    payment_status = models.CharField(
        max_length=10, choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
    )
    confirmed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        verbose_name = 'Reservation'
        verbose_name_plural = 'Reservations'
        ordering = ['reservation_date', 'reservation_time']

    def __str__(self):
        return (
            f"{self.reference_id} | {self.customer_name} | service {self.service_id} "
            f"| {self.reservation_date} {self.reservation_time:%H:%M} [{self.status}]"
        )

    @property
    def is_pending(self):
        return self.status == ReservationStatus.PENDING
