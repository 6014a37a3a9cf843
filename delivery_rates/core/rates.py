"""Rate calculation engine for deliveries.

This module implements the business rules that turn a flat collection of
delivery events into one billing record per delivery:

1. Partition events by (order_id, delivery_id)
2. Sort each group chronologically (stable for equal timestamps)
3. Let a ValidationPolicy decide the start, the terminal state and the
   elapsed whole minutes of each group
4. Price the minutes at PAY_RATE_PER_MINUTE

The engine is a pure function over its input: no I/O, no shared state,
and the input collection is never mutated.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta

from .errors import RateValidationError
from .models import (
    PAY_RATE_PER_MINUTE,
    TERMINAL_STATUSES,
    BillingSummary,
    DeliveryEvent,
    DeliveryKey,
    DeliveryRate,
    DeliveryStatus,
)

logger = logging.getLogger(__name__)

_ONE_MINUTE = timedelta(minutes=1)


def whole_minutes(start: datetime, end: datetime) -> float:
    """Elapsed whole minutes from start to end, truncated toward zero.

    Sub-minute precision is discarded: 2m59s -> 2.0, -0m30s -> 0.0.
    """
    delta = end - start
    minutes = abs(delta) // _ONE_MINUTE
    return float(-minutes if delta < timedelta(0) else minutes)


def group_events(
    events: Iterable[DeliveryEvent],
) -> dict[DeliveryKey, list[DeliveryEvent]]:
    """Partition events by delivery key, each group sorted by timestamp.

    Keys keep the order in which they first appear in the input. Sorting
    is stable, so events with equal timestamps keep their relative order.
    """
    groups: dict[DeliveryKey, list[DeliveryEvent]] = {}
    for event in events:
        groups.setdefault(event.key, []).append(event)
    return {
        key: sorted(group, key=lambda e: e.timestamp)
        for key, group in groups.items()
    }


class ValidationPolicy(ABC):
    """Decides how a single delivery group is turned into a rate.

    Implementations receive the group already sorted by timestamp.
    """

    name: str = ""

    def select(self, events: Sequence[DeliveryEvent]) -> list[DeliveryEvent]:
        """Filter events before grouping. Default keeps everything."""
        return list(events)

    @abstractmethod
    def evaluate(
        self, key: DeliveryKey, events: Sequence[DeliveryEvent]
    ) -> tuple[DeliveryStatus, float]:
        """Return (final_status, minutes) for one delivery group.

        Raises:
            RateValidationError: If the policy rejects the group's shape.
        """


class LenientPolicy(ValidationPolicy):
    """Best-effort policy: never fails.

    Incomplete or malformed groups degrade to zero minutes:
    - no PENDING event -> no start reference, 0 minutes
    - no terminal event -> final status PENDING, 0 minutes
    - terminal before start -> clamped to 0 minutes
    """

    name = "lenient"

    def evaluate(
        self, key: DeliveryKey, events: Sequence[DeliveryEvent]
    ) -> tuple[DeliveryStatus, float]:
        start = next(
            (e.timestamp for e in events if e.status == DeliveryStatus.PENDING),
            None,
        )
        final_event = next(
            (e for e in reversed(events) if e.status in TERMINAL_STATUSES),
            None,
        )
        final_status = (
            final_event.status if final_event is not None else DeliveryStatus.PENDING
        )

        if start is None or final_event is None:
            return final_status, 0.0

        return final_status, max(0.0, whole_minutes(start, final_event.timestamp))


class StrictPolicy(ValidationPolicy):
    """All-or-nothing policy: every group must be exactly PENDING then terminal.

    Any violation raises RateValidationError and aborts the whole batch.
    Because groups are sorted before evaluation, the terminal event can
    never precede the PENDING one, so minutes are never negative.
    """

    name = "strict"
    expected_events = 2
    accepted_statuses = frozenset(DeliveryStatus)

    def select(self, events: Sequence[DeliveryEvent]) -> list[DeliveryEvent]:
        # The status enum is already closed; this only documents the contract.
        return [e for e in events if e.status in self.accepted_statuses]

    def evaluate(
        self, key: DeliveryKey, events: Sequence[DeliveryEvent]
    ) -> tuple[DeliveryStatus, float]:
        if len(events) != self.expected_events:
            raise RateValidationError(
                key,
                f"Expected exactly {self.expected_events} events, found {len(events)}",
                count=len(events),
            )

        first, second = events
        if first.status != DeliveryStatus.PENDING:
            raise RateValidationError(
                key,
                f"First status should be PENDING, found {first.status.value}",
                status=first.status,
            )
        if second.status not in TERMINAL_STATUSES:
            raise RateValidationError(
                key,
                f"Second status must be DELIVERED or CANCELLED, found {second.status.value}",
                status=second.status,
            )

        return second.status, whole_minutes(first.timestamp, second.timestamp)


_POLICIES: dict[str, type[ValidationPolicy]] = {
    LenientPolicy.name: LenientPolicy,
    StrictPolicy.name: StrictPolicy,
}


def get_policy(name: str) -> ValidationPolicy:
    """Resolve a policy by name ("lenient" or "strict").

    Raises:
        ValueError: If the name is unknown.
    """
    if not isinstance(name, str):
        raise ValueError(f"Rate policy must be a name, got {name!r}")
    try:
        return _POLICIES[name.lower()]()
    except KeyError:
        raise ValueError(
            f"Unknown rate policy: {name}. Expected one of {sorted(_POLICIES)}"
        ) from None


class RateEngine:
    """Computes delivery rates under a validation policy.

    Pure decision logic with no side effects.
    """

    def __init__(self, policy: ValidationPolicy | None = None):
        self.policy = policy if policy is not None else LenientPolicy()

    def calculate_rates(self, events: Iterable[DeliveryEvent]) -> list[DeliveryRate]:
        """Produce one DeliveryRate per distinct (order_id, delivery_id).

        Emission order follows the first appearance of each delivery in the
        input; callers should not rely on it.

        Raises:
            RateValidationError: If the policy rejects any group. No partial
                result is returned.
        """
        groups = group_events(self.policy.select(list(events)))

        rates = []
        for key, group in groups.items():
            final_status, minutes = self.policy.evaluate(key, group)
            rates.append(
                DeliveryRate(
                    order_id=key.order_id,
                    delivery_id=key.delivery_id,
                    final_status=final_status,
                    minutes=minutes,
                    amount=minutes * PAY_RATE_PER_MINUTE,
                )
            )

        logger.debug(
            f"Calculated {len(rates)} rates with {self.policy.name} policy",
            extra={"policy": self.policy.name, "deliveries": len(rates)},
        )
        return rates

    @staticmethod
    def summarize(rates: Iterable[DeliveryRate]) -> BillingSummary:
        """Aggregate totals over computed rates."""
        deliveries = 0
        total_minutes = 0.0
        total_amount = 0.0
        by_status: dict[str, int] = {}
        for rate in rates:
            deliveries += 1
            total_minutes += rate.minutes
            total_amount += rate.amount
            status = rate.final_status.value
            by_status[status] = by_status.get(status, 0) + 1

        return BillingSummary(
            deliveries=deliveries,
            total_minutes=total_minutes,
            total_amount=total_amount,
            by_status=by_status,
        )


def calculate_rates(
    events: Iterable[DeliveryEvent],
    policy: ValidationPolicy | None = None,
) -> list[DeliveryRate]:
    """Compute rates for events under the given policy (lenient by default)."""
    return RateEngine(policy).calculate_rates(events)
