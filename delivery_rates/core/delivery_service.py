"""Delivery service: implements DeliveryPort for commands and queries.

Thin orchestration over the event store and the rate engine. Commands
write to the store; rate queries take a snapshot of the store and hand
it to the engine.
"""

import logging

from .errors import RateValidationError
from .models import BillingSummary, DeliveryEvent, DeliveryRate
from .ports import DeliveryEventStorePort, DeliveryPort
from .rates import RateEngine, ValidationPolicy

logger = logging.getLogger(__name__)


class DeliveryService(DeliveryPort):
    """Core implementation of DeliveryPort."""

    def __init__(
        self,
        store: DeliveryEventStorePort,
        policy: ValidationPolicy | None = None,
    ):
        """Initialize the delivery service.

        Args:
            store: DeliveryEventStorePort implementation holding the events.
            policy: Default validation policy for rate calculation
                (lenient when omitted).
        """
        self.store = store
        self.engine = RateEngine(policy)

    def _engine_for(self, policy: ValidationPolicy | None) -> RateEngine:
        if policy is None:
            return self.engine
        return RateEngine(policy)

    async def create(self, event: DeliveryEvent) -> DeliveryEvent:
        saved = await self.store.save(event)
        logger.info(
            f"Recorded {event.status.value} event for delivery "
            f"{event.order_id}/{event.delivery_id}",
            extra={
                "order_id": event.order_id,
                "delivery_id": event.delivery_id,
                "status": event.status.value,
            },
        )
        return saved

    async def update_first(
        self, order_id: int, delivery_id: int, event: DeliveryEvent
    ) -> DeliveryEvent:
        """Replace the first event recorded for (order_id, delivery_id).

        The replacement is stored as given, even if its own ids differ.
        When the delivery has no events the store is left unchanged.
        """
        updated = await self.store.update(
            lambda e: e.order_id == order_id and e.delivery_id == delivery_id,
            event,
        )
        logger.info(
            f"Updated first event of delivery {order_id}/{delivery_id}",
            extra={
                "order_id": order_id,
                "delivery_id": delivery_id,
                "status": event.status.value,
            },
        )
        return updated

    async def list_events(self) -> list[DeliveryEvent]:
        return await self.store.list()

    async def list_events_by(
        self, order_id: int, delivery_id: int
    ) -> list[DeliveryEvent]:
        return await self.store.list_by(order_id, delivery_id)

    async def rates(
        self, policy: ValidationPolicy | None = None
    ) -> list[DeliveryRate]:
        """Calculate one rate per delivery from a snapshot of the store.

        Raises:
            RateValidationError: If the strict policy rejects any delivery.
        """
        engine = self._engine_for(policy)
        events = await self.store.list()
        try:
            return engine.calculate_rates(events)
        except RateValidationError as e:
            logger.warning(
                f"Rate calculation rejected: {e}",
                extra={"policy": engine.policy.name, "events": len(events)},
            )
            raise

    async def rate_for(
        self,
        order_id: int,
        delivery_id: int,
        policy: ValidationPolicy | None = None,
    ) -> DeliveryRate | None:
        events = await self.store.list_by(order_id, delivery_id)
        if not events:
            return None
        rates = self._engine_for(policy).calculate_rates(events)
        return rates[0]

    async def billing_summary(
        self, policy: ValidationPolicy | None = None
    ) -> BillingSummary:
        return RateEngine.summarize(await self.rates(policy))
