"""Stdout rate report adapter.

Implements RateReportPort by printing the event log and the computed
rates to the terminal with human-readable formatting.
"""

import asyncio
import logging

from delivery_rates.core.models import (
    PAY_RATE_PER_MINUTE,
    BillingSummary,
    DeliveryEvent,
    DeliveryRate,
)
from delivery_rates.core.ports import RateReportPort
from delivery_rates.core.rates import RateEngine

logger = logging.getLogger(__name__)


class StdoutRateReporter(RateReportPort):
    """Prints events and rates to stdout."""

    def __init__(self, currency: str = "R$", verbose: bool = False):
        """Initialize stdout reporter.

        Args:
            currency: Currency symbol shown next to amounts.
            verbose: If True, append a billing summary after the rates.
        """
        self.currency = currency
        self.verbose = verbose

    async def report(
        self, events: list[DeliveryEvent], rates: list[DeliveryRate]
    ) -> None:
        """Print the event log followed by the computed rates."""
        await asyncio.to_thread(print, self._format_events(events))
        await asyncio.to_thread(print, self._format_rates(rates))

        if self.verbose:
            summary = RateEngine.summarize(rates)
            await asyncio.to_thread(print, self._format_summary(summary))

        logger.debug(f"Reported {len(events)} events and {len(rates)} rates")

    @staticmethod
    def _format_event(event: DeliveryEvent) -> str:
        return (
            f"  order={event.order_id} delivery={event.delivery_id} "
            f"kind={event.kind} status={event.status.value} "
            f"at={event.timestamp.isoformat()}"
        )

    def _format_events(self, events: list[DeliveryEvent]) -> str:
        """Format the event log section."""
        lines = ["=" * 80, "EVENTS", "=" * 80]
        if not events:
            lines.append("  (no events)")
        lines.extend(self._format_event(event) for event in events)
        return "\n".join(lines)

    def _format_rate(self, rate: DeliveryRate) -> str:
        return (
            f"  order={rate.order_id} delivery={rate.delivery_id} "
            f"status={rate.final_status.value} minutes={rate.minutes:.1f} "
            f"amount={self.currency} {rate.amount:.2f}"
        )

    def _format_rates(self, rates: list[DeliveryRate]) -> str:
        """Format the rates section, headed by the pay rate."""
        per_minute = f"{PAY_RATE_PER_MINUTE:.2f}".replace(".", ",")
        lines = [
            "",
            "-" * 80,
            f"RATES ({self.currency} {per_minute}/min)",
            "-" * 80,
        ]
        if not rates:
            lines.append("  (no deliveries)")
        lines.extend(self._format_rate(rate) for rate in rates)
        return "\n".join(lines)

    def _format_summary(self, summary: BillingSummary) -> str:
        lines = [
            "",
            "-" * 80,
            "SUMMARY",
            "-" * 80,
            f"Deliveries: {summary.deliveries}",
            f"Total Minutes: {summary.total_minutes:.1f}",
            f"Total Amount: {self.currency} {summary.total_amount:.2f}",
        ]
        for status, count in sorted(summary.by_status.items()):
            lines.append(f"  {status}: {count}")
        lines.append("=" * 80)
        return "\n".join(lines)
