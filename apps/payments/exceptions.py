"""
Custom exceptions for the purchase and payment flow.
Raised in forms/staging/checkout/reconciler and caught in views.py.
"""


class PaymentFlowError(Exception):
    """Base exception for all purchase/payment flow errors."""
    status_code = 500


class ValidationError(PaymentFlowError):
    """Raised when a purchase request is malformed. Nothing has been written."""
    status_code = 400

    def __init__(self, message, errors=None):
        super().__init__(message)
        self.errors = errors or {}

    @property
    def first_error(self):
        """'field: message' for the first failing field, for human-facing responses."""
        for field, messages in self.errors.items():
            if messages:
                return f"{field}: {messages[0]}"
        return str(self)


class NotFoundError(PaymentFlowError):
    """Raised when the requested membership code is not in the active catalog."""
    status_code = 404


class StagingError(PaymentFlowError):
    """Raised when pending records could not be written. Nothing was persisted."""
    pass


class CheckoutCreationError(PaymentFlowError):
    """
    Raised when the processor did not give us a usable checkout session
    (transport error, timeout, error status, missing id or checkout URL).
    Staged records have already been discarded when this propagates.
    """
    pass


class ReconciliationError(PaymentFlowError):
    """Raised when a callback could not be applied to the stored records."""
    pass
