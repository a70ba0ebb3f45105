"""
Membership models:
  - MembershipType : read-only catalog (code, price, duration, included hours/classes)
  - Membership     : one purchase of a catalog entry, staged pending until paid

Design decision: price, term and allowances are SNAPSHOT onto the Membership
at staging time. Editing the catalog later never changes a staged or active
membership.
"""
from datetime import timedelta
from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from apps.core.models import PurchaseRecord, TimestampedModel, UUIDModel


class MembershipType(UUIDModel, TimestampedModel):
    code = models.CharField(max_length=40, unique=True)
    name = models.CharField(max_length=120)
    description = models.TextField(blank=True)
    price = models.DecimalField(
        max_digits=10, decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))],
        help_text='Monthly price',
    )
    duration_days = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    included_hours = models.PositiveIntegerField(default=0)
    included_classes = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True, db_index=True)

    class Meta:
        verbose_name = 'Membership Type'
        verbose_name_plural = 'Membership Types'
        ordering = ['price', 'code']

    def __str__(self):
        return f"{self.name} ({self.code}) - ${self.price} / {self.duration_days} days"

    @classmethod
    def get_active(cls, code):
        """Catalog lookup by code. Raises DoesNotExist for unknown or retired codes."""
        return cls.objects.get(code=(code or '').strip().upper(), is_active=True)

    def term_starting(self, start_date):
        """(start_date, end_date) for a membership bought on start_date."""
        return start_date, start_date + timedelta(days=self.duration_days)


class MembershipStatus(models.TextChoices):
    PENDING   = 'pending',   'Pending'
    ACTIVE    = 'active',    'Active'
    CANCELLED = 'cancelled', 'Cancelled'


class Membership(PurchaseRecord):
    membership_type = models.ForeignKey(
        MembershipType, on_delete=models.PROTECT, related_name='memberships',
    )
    membership_code = models.CharField(max_length=40)

    start_date = models.DateField()
    end_date = models.DateField()
    monthly_price = models.DecimalField(max_digits=10, decimal_places=2)
    hours_remaining = models.PositiveIntegerField(default=0)
    classes_remaining = models.PositiveIntegerField(default=0)

    status = models.CharField(
        max_length=10, choices=MembershipStatus.choices,
        default=MembershipStatus.PENDING, db_index=True,
    )
    activated_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        verbose_name = 'Membership'
        verbose_name_plural = 'Memberships'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.reference_id} | {self.customer_name} | {self.membership_code} [{self.status}]"

    @property
    def is_pending(self):
        return self.status == MembershipStatus.PENDING
