# shipping/services/exceptions.py

"""
SHIPPING SERVICE ERRORS

Centralized domain errors for courier + parcel services.
"""


class ShippingServiceError(Exception):
    """Base exception for all shipping service failures."""


class CourierError(ShippingServiceError):
    """Raised when the courier API cannot be reached or answers unusably."""


class CourierNotConfiguredError(CourierError):
    """Raised when courier credentials are missing."""


class CourierConnectionError(CourierError):
    """Network-level failure (DNS, refused, timeout). Retryable."""


class CourierHTTPError(CourierError):
    """
    HTTP error status from the courier.
    The response body is kept as the error detail.
    """

    def __init__(self, status: int, body: str = "", *, retry_after: str | None = None):
        self.status = status
        self.body = body or ""
        self.retry_after = retry_after
        super().__init__(f"HTTP {status}: {self.body}".strip())


class ParcelError(ShippingServiceError):
    """Raised when a parcel operation is not allowed for an order."""


class ParcelNotFoundError(ParcelError):
    """Raised when an order has no parcel record."""


class ParcelAlreadyCreatedError(ParcelError):
    """Raised when a parcel already carries a courier tracking number."""


class WebhookSignatureError(ShippingServiceError):
    """Raised when a courier webhook signature does not verify."""
