"""Unit tests for the rate engine.

Covers grouping, both validation policies, and the reference scenarios
for orders 1/1 (delivered after 2 minutes) and 1/2 (cancelled after 4).
"""

from collections import Counter
from datetime import datetime, timedelta, timezone

import pytest

from delivery_rates.core.errors import RateValidationError
from delivery_rates.core.models import (
    PAY_RATE_PER_MINUTE,
    DeliveryEvent,
    DeliveryKey,
    DeliveryRate,
    DeliveryStatus,
)
from delivery_rates.core.rates import (
    LenientPolicy,
    RateEngine,
    StrictPolicy,
    calculate_rates,
    get_policy,
    group_events,
    whole_minutes,
)

PENDING = DeliveryStatus.PENDING
DELIVERED = DeliveryStatus.DELIVERED
CANCELLED = DeliveryStatus.CANCELLED

T0 = datetime(2025, 9, 6, 15, 16, 0, tzinfo=timezone.utc)


def at(minutes: float) -> datetime:
    return T0 + timedelta(minutes=minutes)


def event(order_id: int, delivery_id: int, status: DeliveryStatus, ts: datetime) -> DeliveryEvent:
    return DeliveryEvent(order_id, delivery_id, "Entrega", status, ts)


# ============================================================================
# Test Fixtures
# ============================================================================


@pytest.fixture
def sample_events() -> list[DeliveryEvent]:
    """Two deliveries of order 1, interleaved as they would arrive."""
    return [
        event(1, 1, PENDING, at(0)),
        event(1, 2, PENDING, at(0)),
        event(1, 1, DELIVERED, at(2)),
        event(1, 2, CANCELLED, at(4)),
    ]


@pytest.fixture
def expected_rates() -> set[DeliveryRate]:
    return {
        DeliveryRate(1, 1, DELIVERED, 2.0, 1.5),
        DeliveryRate(1, 2, CANCELLED, 4.0, 3.0),
    }


# ============================================================================
# Helpers
# ============================================================================


class TestWholeMinutes:
    """Tests for whole-minute truncation."""

    def test_exact_minutes(self) -> None:
        assert whole_minutes(at(0), at(2)) == 2.0

    def test_sub_minute_precision_discarded(self) -> None:
        assert whole_minutes(T0, T0 + timedelta(minutes=2, seconds=59)) == 2.0
        assert whole_minutes(T0, T0 + timedelta(seconds=59)) == 0.0

    def test_negative_truncates_toward_zero(self) -> None:
        assert whole_minutes(T0, T0 - timedelta(seconds=30)) == 0.0
        assert whole_minutes(T0, T0 - timedelta(minutes=1, seconds=30)) == -1.0

    def test_result_is_float(self) -> None:
        assert isinstance(whole_minutes(at(0), at(3)), float)

    def test_across_timezones(self) -> None:
        """Instants in different offsets are compared as instants."""
        other_tz = timezone(timedelta(hours=-3))
        end = datetime(2025, 9, 6, 12, 21, 0, tzinfo=other_tz)  # 15:21 UTC
        assert whole_minutes(T0, end) == 5.0


class TestGroupEvents:
    """Tests for partitioning events by delivery."""

    def test_groups_by_order_and_delivery(self, sample_events) -> None:
        groups = group_events(sample_events)
        assert set(groups) == {DeliveryKey(1, 1), DeliveryKey(1, 2)}
        assert sum(len(g) for g in groups.values()) == len(sample_events)

    def test_same_delivery_id_in_different_orders_is_distinct(self) -> None:
        groups = group_events([event(1, 1, PENDING, at(0)), event(2, 1, PENDING, at(0))])
        assert set(groups) == {DeliveryKey(1, 1), DeliveryKey(2, 1)}

    def test_groups_sorted_by_timestamp(self) -> None:
        events = [event(1, 1, DELIVERED, at(5)), event(1, 1, PENDING, at(1))]
        group = group_events(events)[DeliveryKey(1, 1)]
        assert [e.status for e in group] == [PENDING, DELIVERED]

    def test_ties_keep_input_order(self) -> None:
        first = DeliveryEvent(1, 1, "first", PENDING, at(0))
        second = DeliveryEvent(1, 1, "second", PENDING, at(0))
        group = group_events([first, second])[DeliveryKey(1, 1)]
        assert [e.kind for e in group] == ["first", "second"]

    def test_input_is_not_mutated(self) -> None:
        events = [event(1, 1, DELIVERED, at(5)), event(1, 1, PENDING, at(1))]
        snapshot = list(events)
        group_events(events)
        assert events == snapshot


# ============================================================================
# Lenient Policy
# ============================================================================


class TestLenientPolicy:
    """Tests for the best-effort policy."""

    def test_delivered_scenario(self) -> None:
        rates = calculate_rates([event(1, 1, PENDING, at(0)), event(1, 1, DELIVERED, at(2))])
        assert rates == [DeliveryRate(1, 1, DELIVERED, 2.0, 1.5)]

    def test_cancelled_scenario(self) -> None:
        rates = calculate_rates([event(1, 2, PENDING, at(0)), event(1, 2, CANCELLED, at(4))])
        assert rates == [DeliveryRate(1, 2, CANCELLED, 4.0, 3.0)]

    def test_mixed_batch(self, sample_events, expected_rates) -> None:
        assert set(calculate_rates(sample_events, LenientPolicy())) == expected_rates

    def test_only_pending_events(self) -> None:
        rates = calculate_rates([event(1, 1, PENDING, at(0)), event(1, 1, PENDING, at(3))])
        assert rates == [DeliveryRate(1, 1, PENDING, 0.0, 0.0)]

    def test_terminal_without_pending(self) -> None:
        rates = calculate_rates([event(1, 1, DELIVERED, at(7))])
        assert rates == [DeliveryRate(1, 1, DELIVERED, 0.0, 0.0)]

    def test_terminal_before_pending_is_clamped(self) -> None:
        rates = calculate_rates([event(1, 1, DELIVERED, at(0)), event(1, 1, PENDING, at(10))])
        assert rates == [DeliveryRate(1, 1, DELIVERED, 0.0, 0.0)]

    def test_first_pending_and_last_terminal_are_used(self) -> None:
        events = [
            event(1, 1, PENDING, at(0)),
            event(1, 1, PENDING, at(1)),
            event(1, 1, CANCELLED, at(3)),
            event(1, 1, DELIVERED, at(6)),
        ]
        assert calculate_rates(events) == [DeliveryRate(1, 1, DELIVERED, 6.0, 4.5)]

    def test_out_of_order_input(self) -> None:
        events = [event(1, 1, DELIVERED, at(9)), event(1, 1, PENDING, at(0))]
        assert calculate_rates(events) == [DeliveryRate(1, 1, DELIVERED, 9.0, 6.75)]

    def test_sub_minute_duration_truncated(self) -> None:
        events = [
            event(1, 1, PENDING, T0),
            event(1, 1, DELIVERED, T0 + timedelta(minutes=3, seconds=45)),
        ]
        assert calculate_rates(events)[0].minutes == 3.0

    def test_minutes_never_negative(self) -> None:
        events = [
            event(1, 1, DELIVERED, at(0)),
            event(1, 1, PENDING, at(5)),
            event(2, 1, CANCELLED, at(1)),
            event(2, 1, PENDING, at(2)),
            event(3, 1, PENDING, at(0)),
            event(3, 1, CANCELLED, at(3)),
        ]
        assert all(rate.minutes >= 0 for rate in calculate_rates(events))

    def test_one_rate_per_distinct_delivery(self) -> None:
        events = [
            event(order, delivery, PENDING, at(0))
            for order in range(1, 4)
            for delivery in range(1, 3)
        ]
        rates = calculate_rates(events + events)
        assert len(rates) == 6
        assert {r.key for r in rates} == {e.key for e in events}

    def test_empty_input(self) -> None:
        assert calculate_rates([]) == []

    def test_amount_uses_fixed_rate(self, sample_events) -> None:
        for rate in calculate_rates(sample_events):
            assert rate.amount == rate.minutes * PAY_RATE_PER_MINUTE

    def test_idempotent(self, sample_events) -> None:
        engine = RateEngine(LenientPolicy())
        assert Counter(engine.calculate_rates(sample_events)) == Counter(
            engine.calculate_rates(sample_events)
        )

    def test_accepts_any_iterable(self, sample_events, expected_rates) -> None:
        assert set(calculate_rates(iter(sample_events))) == expected_rates


# ============================================================================
# Strict Policy
# ============================================================================


class TestStrictPolicy:
    """Tests for the all-or-nothing policy."""

    def test_valid_batch(self, sample_events, expected_rates) -> None:
        assert set(calculate_rates(sample_events, StrictPolicy())) == expected_rates

    def test_agrees_with_lenient_on_well_formed_input(self, sample_events) -> None:
        strict = calculate_rates(sample_events, StrictPolicy())
        lenient = calculate_rates(sample_events, LenientPolicy())
        assert set(strict) == set(lenient)

    def test_single_event_group_fails(self) -> None:
        events = [
            event(1, 1, PENDING, at(0)),
            event(1, 1, DELIVERED, at(2)),
            event(1, 3, PENDING, at(0)),
        ]
        with pytest.raises(RateValidationError) as exc_info:
            calculate_rates(events, StrictPolicy())

        error = exc_info.value
        assert error.key == DeliveryKey(1, 3)
        assert error.count == 1
        assert "Expected exactly 2 events, found 1" in str(error)
        assert "order_id=1, delivery_id=3" in str(error)

    def test_three_event_group_fails(self) -> None:
        events = [
            event(1, 1, PENDING, at(0)),
            event(1, 1, PENDING, at(1)),
            event(1, 1, DELIVERED, at(2)),
        ]
        with pytest.raises(RateValidationError) as exc_info:
            calculate_rates(events, StrictPolicy())
        assert exc_info.value.count == 3

    def test_terminal_first_fails(self) -> None:
        events = [event(1, 1, DELIVERED, at(0)), event(1, 1, PENDING, at(2))]
        with pytest.raises(RateValidationError, match="First status should be PENDING") as exc_info:
            calculate_rates(events, StrictPolicy())
        assert exc_info.value.status == DELIVERED

    def test_two_pending_fails(self) -> None:
        events = [event(1, 1, PENDING, at(0)), event(1, 1, PENDING, at(2))]
        with pytest.raises(RateValidationError, match="Second status must be DELIVERED or CANCELLED"):
            calculate_rates(events, StrictPolicy())

    def test_order_decided_by_timestamp_not_input(self) -> None:
        events = [event(1, 1, DELIVERED, at(2)), event(1, 1, PENDING, at(0))]
        assert calculate_rates(events, StrictPolicy()) == [DeliveryRate(1, 1, DELIVERED, 2.0, 1.5)]

    def test_no_partial_results(self) -> None:
        """One bad group aborts the whole batch."""
        events = [
            event(1, 1, PENDING, at(0)),
            event(1, 1, DELIVERED, at(2)),
            event(2, 1, DELIVERED, at(1)),
        ]
        with pytest.raises(RateValidationError):
            calculate_rates(events, StrictPolicy())

    def test_sub_minute_duration_truncated(self) -> None:
        events = [
            event(1, 1, PENDING, T0),
            event(1, 1, CANCELLED, T0 + timedelta(minutes=1, seconds=59)),
        ]
        assert calculate_rates(events, StrictPolicy())[0].minutes == 1.0

    def test_empty_input(self) -> None:
        assert calculate_rates([], StrictPolicy()) == []


# ============================================================================
# Policy lookup and summaries
# ============================================================================


class TestGetPolicy:
    """Tests for resolving policies by name."""

    def test_known_policies(self) -> None:
        assert isinstance(get_policy("lenient"), LenientPolicy)
        assert isinstance(get_policy("STRICT"), StrictPolicy)

    def test_unknown_policy(self) -> None:
        with pytest.raises(ValueError, match="Unknown rate policy"):
            get_policy("relaxed")


class TestRateEngine:
    """Tests for engine defaults and summaries."""

    def test_default_policy_is_lenient(self) -> None:
        assert isinstance(RateEngine().policy, LenientPolicy)

    def test_summarize(self, sample_events) -> None:
        summary = RateEngine.summarize(calculate_rates(sample_events))
        assert summary.deliveries == 2
        assert summary.total_minutes == 6.0
        assert summary.total_amount == 4.5
        assert dict(summary.by_status) == {"DELIVERED": 1, "CANCELLED": 1}

    def test_summarize_empty(self) -> None:
        summary = RateEngine.summarize([])
        assert summary.deliveries == 0
        assert summary.total_amount == 0.0
        assert dict(summary.by_status) == {}
