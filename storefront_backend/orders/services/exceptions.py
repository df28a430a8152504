# orders/services/exceptions.py

"""
ORDER SERVICE ERRORS

Centralized domain errors for order services.
"""


class OrderServiceError(Exception):
    """Base exception for all order service failures."""


class OrderNotFoundError(OrderServiceError):
    """Raised when the referenced order does not exist."""


class InvalidStatusError(OrderServiceError):
    """Raised when a requested status is not valid for the order."""

    def __init__(self, message: str, *, field: str = "status"):
        super().__init__(message)
        self.field = field
