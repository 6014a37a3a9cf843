"""Domain errors for the delivery rates system.

All errors derive from ValueError so callers that already guard domain
operations with ``except ValueError`` keep working.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import DeliveryKey, DeliveryStatus


class DeliveryRatesError(ValueError):
    """Base class for delivery rate errors."""


class InvalidDeliveryEventError(DeliveryRatesError):
    """Raised when a DeliveryEvent is constructed with invalid fields."""


class RateValidationError(DeliveryRatesError):
    """Raised when a delivery group does not have the shape a policy requires.

    Aborts the whole batch: no partial list of rates is returned.
    """

    def __init__(
        self,
        key: "DeliveryKey",
        reason: str,
        count: int | None = None,
        status: "DeliveryStatus | None" = None,
    ):
        self.key = key
        self.reason = reason
        self.count = count
        self.status = status
        super().__init__(
            f"Delivery (order_id={key.order_id}, delivery_id={key.delivery_id}): {reason}"
        )
