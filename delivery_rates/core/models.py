"""Domain models for the delivery rates system.

All models in this module use only Python standard library types,
ensuring zero external dependencies in the core domain.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import NamedTuple

from .errors import InvalidDeliveryEventError

# Currency units paid per elapsed minute of a delivery.
PAY_RATE_PER_MINUTE = 0.75


class DeliveryStatus(Enum):
    """Lifecycle states reported by delivery events.

    A delivery starts PENDING and ends in one of the terminal states:
    - DELIVERED: the order reached the customer
    - CANCELLED: the delivery was abandoned
    """

    PENDING = "PENDING"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        """True for statuses that end a delivery's lifecycle."""
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({DeliveryStatus.DELIVERED, DeliveryStatus.CANCELLED})


class DeliveryKey(NamedTuple):
    """Identity of a delivery: delivery_id is only unique within an order."""

    order_id: int
    delivery_id: int


@dataclass(frozen=True)
class DeliveryEvent:
    """A single status change reported for a delivery.

    Events are immutable facts. A "delivery" is not stored anywhere; it is
    the group of all events sharing the same (order_id, delivery_id).
    """

    order_id: int
    delivery_id: int
    kind: str  # descriptive label, e.g. "Entrega"
    status: DeliveryStatus
    timestamp: datetime

    def __post_init__(self) -> None:
        """Validate event invariants on creation."""
        for field_name in ("order_id", "delivery_id"):
            value = getattr(self, field_name)
            # bool is an int subclass but never a valid id
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidDeliveryEventError(
                    f"{field_name} must be an integer, got {value!r}"
                )
        if not self.kind or not self.kind.strip():
            raise InvalidDeliveryEventError("kind cannot be blank")
        if self.timestamp.tzinfo is None or self.timestamp.utcoffset() is None:
            raise InvalidDeliveryEventError(
                f"timestamp must be timezone-aware, got {self.timestamp.isoformat()}"
            )

    @property
    def key(self) -> DeliveryKey:
        """Grouping key of the delivery this event belongs to."""
        return DeliveryKey(self.order_id, self.delivery_id)


@dataclass(frozen=True)
class DeliveryRate:
    """Billing record computed for one delivery.

    A pure projection of the events at the time of calculation; a new
    instance is produced on every engine run.
    """

    order_id: int
    delivery_id: int
    final_status: DeliveryStatus
    minutes: float
    amount: float

    @property
    def key(self) -> DeliveryKey:
        return DeliveryKey(self.order_id, self.delivery_id)


@dataclass(frozen=True)
class BillingSummary:
    """Totals over a batch of computed rates."""

    deliveries: int
    total_minutes: float
    total_amount: float
    by_status: Mapping[str, int]  # final status value -> count (immutable at runtime)

    def __post_init__(self) -> None:
        """Convert mutable dict to immutable proxy."""
        object.__setattr__(self, "by_status", MappingProxyType(dict(self.by_status)))
