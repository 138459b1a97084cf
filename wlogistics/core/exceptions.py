"""
Error taxonomy for the order tracking backend.

Every failure here is terminal for the request that raised it; the HTTP
layer maps each type onto a status code and nothing is retried.
"""

from typing import Optional


class WLogisticsError(Exception):
    """Base class for all application errors."""

    status_code: int = 500

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail


class OrderNotFoundError(WLogisticsError):
    """Referenced order id (or tracking code) is not in the store."""

    status_code = 404

    def __init__(self, order_ref: str):
        super().__init__("Not found", detail=f"Order {order_ref} not found")
        self.order_ref = order_ref


class OrderValidationError(WLogisticsError):
    """Create payload rejected; only raised with strict validation on."""

    status_code = 422

    def __init__(self, problems: list[str]):
        super().__init__("Invalid order", detail="; ".join(problems))
        self.problems = problems
