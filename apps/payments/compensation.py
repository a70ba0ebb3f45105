"""
Compensation: undo a staging whose checkout could not be created.

Rows are removed physically (not soft-deleted): the purchase never reached
the processor, so there is no payment trail to keep.
"""
import logging

from django.db import DatabaseError

from apps.memberships.models import Membership
from apps.reservations.models import Reservation

from .references import PurchaseKind, PurchaseReference

logger = logging.getLogger(__name__)

RECORD_MODELS = {
    PurchaseKind.RESERVATION: Reservation,
    PurchaseKind.MEMBERSHIP: Membership,
}


def discard_staged(reference: PurchaseReference) -> int:
    """
    Hard-delete every record staged under `reference`. Returns rows removed.

    A failed delete is logged and left for the expiry sweep; it never raises,
    so the caller's original error is the one that propagates.
    """
    model = RECORD_MODELS[reference.kind]
    try:
        deleted, _ = model.objects.all_with_deleted().for_reference(reference).hard_delete()
    except DatabaseError:
        logger.exception('Compensation failed: could not discard staged records for %s', reference)
        return 0

    logger.info('Compensation: discarded %d staged %s record(s) for %s', deleted, reference.kind.value, reference)
    return deleted
