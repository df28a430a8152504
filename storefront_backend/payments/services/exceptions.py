# payments/services/exceptions.py

"""
PAYMENT SERVICE ERRORS
"""


class PaymentServiceError(Exception):
    """Base exception for all payment service failures."""


class PaymentOrderNotFoundError(PaymentServiceError):
    """Raised when the paid order does not exist."""


class InvalidOrderStateError(PaymentServiceError):
    """Raised when the order cannot accept a payment confirmation."""


class AmountMismatchError(PaymentServiceError):
    """Raised when the reported amount differs from the order total."""

    def __init__(self, *, expected, received):
        self.expected = expected
        self.received = received
        super().__init__(f"Amount mismatch: expected {expected}, received {received}")


class DuplicatePaymentError(PaymentServiceError):
    """Raised when a transaction id is already bound to another order."""


class PaymentSignatureError(PaymentServiceError):
    """Raised when a provider callback signature does not verify."""
