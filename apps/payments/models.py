"""
PaymentEvent model: immutable audit trail of every processor callback.

One row per redirect callback, webhook notification or expiry sweep that was
handled for a purchase reference, including the ones that changed nothing
(duplicates, rejected transitions, unknown references). The reservation and
membership rows only hold the latest state; this table holds the history.
"""
from django.db import models

from apps.core.models import UUIDModel
from .references import PurchaseKind


class Outcome(models.TextChoices):
    SUCCESS = 'success', 'Success'
    FAILURE = 'failure', 'Failure'
    PENDING = 'pending', 'Pending'


class ReconcileResult(models.TextChoices):
    APPLIED   = 'applied',   'Applied'
    DUPLICATE = 'duplicate', 'Duplicate (already in that state)'
    REJECTED  = 'rejected',  'Rejected (precondition failed)'
    IGNORED   = 'ignored',   'Ignored (already settled)'
    NOT_FOUND = 'not_found', 'No records for reference'
    ERROR     = 'error',     'Error'


class EventSource(models.TextChoices):
    REDIRECT = 'redirect', 'Browser redirect'
    WEBHOOK  = 'webhook',  'Processor notification'
    EXPIRY   = 'expiry',   'Expiry sweep'


class PaymentEvent(UUIDModel):
    reference_id = models.CharField(max_length=64, db_index=True)
    kind = models.CharField(max_length=12, choices=PurchaseKind.choices)
    outcome = models.CharField(max_length=10, choices=Outcome.choices)
    result = models.CharField(max_length=12, choices=ReconcileResult.choices)
    source = models.CharField(max_length=10, choices=EventSource.choices, default=EventSource.REDIRECT)
    payment_id = models.CharField(max_length=64, blank=True)
    processor_status = models.CharField(max_length=40, blank=True)
    payload = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = 'Payment Event'
        verbose_name_plural = 'Payment Events'
        ordering = ['created_at']

    def __str__(self):
        return f"{self.reference_id}: {self.outcome} via {self.source} → {self.result}"
