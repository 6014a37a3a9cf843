"""In-memory delivery event store.

Implements DeliveryEventStorePort with a keyed mapping from
(order_id, delivery_id) to that delivery's events, so per-delivery reads
do not scan the whole log. A monotonically increasing sequence number is
kept with every event to preserve global insertion order for list().
"""

import itertools
import logging
from collections.abc import Iterable

from delivery_rates.core.models import DeliveryEvent, DeliveryKey
from delivery_rates.core.ports import DeliveryEventStorePort, EventMatcher

logger = logging.getLogger(__name__)


class InMemoryDeliveryEventStore(DeliveryEventStorePort):
    """Holds delivery events in process memory.

    Not durable and not guarded against concurrent writers. Every read
    returns a new list, so callers get a snapshot that later writes do
    not affect.
    """

    def __init__(self, events: Iterable[DeliveryEvent] = ()):
        """Initialize the store.

        Args:
            events: Initial events, appended in the given order.
        """
        self._sequence = itertools.count()
        self._by_key: dict[DeliveryKey, list[tuple[int, DeliveryEvent]]] = {}
        for event in events:
            self._append(event)

    def _append(self, event: DeliveryEvent) -> None:
        self._by_key.setdefault(event.key, []).append((next(self._sequence), event))

    def _ordered(self) -> list[tuple[int, DeliveryEvent]]:
        entries = [entry for group in self._by_key.values() for entry in group]
        entries.sort(key=lambda entry: entry[0])
        return entries

    async def save(self, event: DeliveryEvent) -> DeliveryEvent:
        self._append(event)
        return event

    async def update(
        self, match: EventMatcher, event: DeliveryEvent
    ) -> DeliveryEvent:
        """Replace the first event, in insertion order, matching `match`.

        The replacement takes over the position of the replaced event in
        the global order, and moves to its own delivery's group if its
        ids differ from the replaced event's.
        """
        for seq, current in self._ordered():
            if not match(current):
                continue

            group = self._by_key[current.key]
            index = next(i for i, (s, _) in enumerate(group) if s == seq)
            if event.key == current.key:
                group[index] = (seq, event)
            else:
                del group[index]
                if not group:
                    del self._by_key[current.key]
                target = self._by_key.setdefault(event.key, [])
                target.append((seq, event))
                target.sort(key=lambda entry: entry[0])
            return event

        logger.debug(
            "No stored event matched update; store unchanged",
            extra={"order_id": event.order_id, "delivery_id": event.delivery_id},
        )
        return event

    async def list_by(self, order_id: int, delivery_id: int) -> list[DeliveryEvent]:
        group = self._by_key.get(DeliveryKey(order_id, delivery_id), [])
        return [event for _, event in group]

    async def list(self) -> list[DeliveryEvent]:
        return [event for _, event in self._ordered()]

    async def count(self) -> int:
        """Number of stored events."""
        return sum(len(group) for group in self._by_key.values())
