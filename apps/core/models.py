"""
Core base model mixins.

Reservations and memberships both inherit from PurchaseRecord: every row
carries the purchase reference token it was staged under, the buyer's
identity, and the payment identifiers the processor reports back.
"""
import uuid
from django.db import models
from django.utils import timezone


class UUIDModel(models.Model):
    """Primary key is a UUID, not an auto-incrementing integer."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    class Meta:
        abstract = True


class TimestampedModel(models.Model):
    """Automatically tracks creation and last-update timestamps."""
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class SoftDeleteQuerySet(models.QuerySet):
    """Custom queryset that excludes soft-deleted records by default."""
    def alive(self):
        return self.filter(deleted_at__isnull=True)

    def deleted(self):
        return self.filter(deleted_at__isnull=False)

    def delete(self):
        return self.update(deleted_at=timezone.now())

    def hard_delete(self):
        return super().delete()


class PurchaseRecordQuerySet(SoftDeleteQuerySet):
    def for_reference(self, reference):
        """Rows staged under `reference` (a PurchaseReference or its raw token)."""
        return self.filter(reference_id=getattr(reference, 'token', reference))


class SoftDeleteManager(models.Manager):
    queryset_class = SoftDeleteQuerySet

    def get_queryset(self):
        return self.queryset_class(self.model, using=self._db).alive()

    def all_with_deleted(self):
        return self.queryset_class(self.model, using=self._db)


class PurchaseRecordManager(SoftDeleteManager):
    queryset_class = PurchaseRecordQuerySet

    def for_reference(self, reference):
        return self.get_queryset().for_reference(reference)


class SoftDeleteModel(models.Model):
    """
    Soft-delete mixin. Cancelled purchases are hidden, not physically removed,
    so the payment trail survives.
    Use .delete() to soft-delete, .hard_delete() to permanently remove.
    """
    deleted_at = models.DateTimeField(null=True, blank=True, db_index=True)

    objects = SoftDeleteManager()

    class Meta:
        abstract = True

    def delete(self, *args, **kwargs):
        self.deleted_at = timezone.now()
        self.save(update_fields=['deleted_at'])

    def hard_delete(self, *args, **kwargs):
        super().delete(*args, **kwargs)

    @property
    def is_deleted(self):
        return self.deleted_at is not None


class BaseModel(UUIDModel, TimestampedModel, SoftDeleteModel):
    """
    Convenience base combining UUID pk + timestamps + soft delete.
    """
    class Meta:
        abstract = True


class PurchaseRecord(BaseModel):
    """
    Fields shared by every record staged for a payment.

    reference_id is the join key with the processor's callbacks; it is set
    once at staging time and never changes.
    """
    reference_id = models.CharField(max_length=64, db_index=True)

    customer_name = models.CharField(max_length=120)
    customer_email = models.EmailField()
    customer_phone = models.CharField(max_length=30)
    notes = models.TextField(blank=True)

    # Populated from the processor callback
    payment_id = models.CharField(max_length=64, blank=True)
    payment_type = models.CharField(max_length=40, blank=True)
    merchant_order_id = models.CharField(max_length=64, blank=True)

    objects = PurchaseRecordManager()

    class Meta:
        abstract = True
