"""
Purchase reference tokens.

A token looks like `reservation-3f2a…` or `membership-9c1e…` (kind, a dash,
32 hex chars). It is the only correlation handle between a staged purchase
and the processor's callbacks, so it is decoded into a PurchaseReference once
at the HTTP boundary and passed around typed from there on.
"""
import re
import uuid
from dataclasses import dataclass

from django.db import models

SEPARATOR = '-'
_SUFFIX_RE = re.compile(r'^[0-9a-f]{32}$')


class PurchaseKind(models.TextChoices):
    RESERVATION = 'reservation', 'Reservation'
    MEMBERSHIP  = 'membership',  'Membership'


@dataclass(frozen=True)
class PurchaseReference:
    kind: PurchaseKind
    token: str

    def __str__(self):
        return self.token

    @classmethod
    def parse(cls, token: str) -> 'PurchaseReference':
        """Decode a raw token. Raises ValueError if it is not one of ours."""
        token = (token or '').strip()
        prefix, sep, suffix = token.partition(SEPARATOR)
        if not sep or not _SUFFIX_RE.match(suffix):
            raise ValueError(f"Malformed purchase reference {token!r}")
        try:
            kind = PurchaseKind(prefix)
        except ValueError:
            raise ValueError(f"Unknown purchase kind in reference {token!r}") from None
        return cls(kind=kind, token=token)


def new_reference(kind) -> PurchaseReference:
    """Allocate a fresh, never-reused reference for one purchase attempt."""
    kind = PurchaseKind(kind)
    return PurchaseReference(kind=kind, token=f"{kind.value}{SEPARATOR}{uuid.uuid4().hex}")
