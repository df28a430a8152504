from .confirm import PaymentConfirmView

__all__ = ["PaymentConfirmView"]
