"""Port interfaces for the delivery rates system.

These abstract base classes define the boundaries between core
domain logic and external adapters. Implementations live in the
adapters/ package.

Port Interface Categories:

1. **Driven Ports** (core calls out to adapters)
   - DeliveryEventStorePort: Hold and query delivery events
   - RateReportPort: Present events and computed rates

2. **Driving Ports** (adapters/external systems call into core)
   - DeliveryPort: Create/update/list events and calculate rates
"""

from abc import ABC, abstractmethod
from collections.abc import Callable

from .models import BillingSummary, DeliveryEvent, DeliveryRate
from .rates import ValidationPolicy

EventMatcher = Callable[[DeliveryEvent], bool]


# ============================================================================
# DRIVEN PORTS (Core calls out to adapters)
# ============================================================================


class DeliveryEventStorePort(ABC):
    """Port for holding delivery events.

    The store is the only stateful component. It must hand out snapshots:
    a list returned by list() must not change while the caller uses it.
    """

    @abstractmethod
    async def save(self, event: DeliveryEvent) -> DeliveryEvent:
        """Append an event.

        Returns:
            The saved event.
        """

    @abstractmethod
    async def update(
        self, match: EventMatcher, event: DeliveryEvent
    ) -> DeliveryEvent:
        """Replace the first stored event, in insertion order, matching `match`.

        If nothing matches the store is left unchanged.

        Args:
            match: Predicate selecting the event to replace.
            event: Replacement event.

        Returns:
            The replacement event, whether or not a match was found.
        """

    @abstractmethod
    async def list_by(self, order_id: int, delivery_id: int) -> list[DeliveryEvent]:
        """Return a snapshot of the events of one delivery, in insertion order."""

    @abstractmethod
    async def list(self) -> list[DeliveryEvent]:
        """Return a snapshot of all events in insertion order."""


class RateReportPort(ABC):
    """Port for presenting events and computed rates to a human."""

    @abstractmethod
    async def report(
        self, events: list[DeliveryEvent], rates: list[DeliveryRate]
    ) -> None:
        """Present the event log and the rates derived from it.

        Raises:
            Exception: If the output channel is unavailable.
        """


# ============================================================================
# DRIVING PORTS (Adapters/external systems call into core)
# ============================================================================


class DeliveryPort(ABC):
    """Port for delivery commands and queries.

    Driving port: the CLI and report entry points invoke these methods.
    Implementation lives in the core (delivery_service.py).
    """

    @abstractmethod
    async def create(self, event: DeliveryEvent) -> DeliveryEvent:
        """Record a new delivery event."""

    @abstractmethod
    async def update_first(
        self, order_id: int, delivery_id: int, event: DeliveryEvent
    ) -> DeliveryEvent:
        """Replace the first event recorded for (order_id, delivery_id)."""

    @abstractmethod
    async def list_events(self) -> list[DeliveryEvent]:
        """List all recorded events."""

    @abstractmethod
    async def list_events_by(
        self, order_id: int, delivery_id: int
    ) -> list[DeliveryEvent]:
        """List the events of one delivery."""

    @abstractmethod
    async def rates(
        self, policy: ValidationPolicy | None = None
    ) -> list[DeliveryRate]:
        """Calculate one rate per delivery from the current events.

        Args:
            policy: Override of the service's default validation policy.

        Raises:
            RateValidationError: If the strict policy rejects any delivery.
        """

    @abstractmethod
    async def rate_for(
        self,
        order_id: int,
        delivery_id: int,
        policy: ValidationPolicy | None = None,
    ) -> DeliveryRate | None:
        """Calculate the rate of a single delivery, None if it has no events."""

    @abstractmethod
    async def billing_summary(
        self, policy: ValidationPolicy | None = None
    ) -> BillingSummary:
        """Aggregate totals over the rates of all deliveries."""
