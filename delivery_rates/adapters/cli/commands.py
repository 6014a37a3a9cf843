"""CLI command implementations for delivery management.

This adapter maps CLI commands (list, list_by, create, update, rates,
rate, summary) to DeliveryPort operations. It handles CLI-specific formatting
and error reporting: domain errors become result dicts with
``"status": "error"`` instead of propagating.
"""

import logging
from typing import Any

from delivery_rates.adapters.store.seed import event_from_dict, event_to_dict
from delivery_rates.core.errors import DeliveryRatesError
from delivery_rates.core.models import DeliveryRate
from delivery_rates.core.ports import DeliveryPort
from delivery_rates.core.rates import get_policy

logger = logging.getLogger(__name__)


def rate_to_dict(rate: DeliveryRate) -> dict[str, Any]:
    """Serialize a DeliveryRate for CLI output."""
    return {
        "order_id": rate.order_id,
        "delivery_id": rate.delivery_id,
        "final_status": rate.final_status.value,
        "minutes": rate.minutes,
        "amount": rate.amount,
    }


class CLICommandHandler:
    """Handles CLI commands by delegating to DeliveryPort."""

    def __init__(self, deliveries: DeliveryPort):
        """Initialize the CLI command handler.

        Args:
            deliveries: DeliveryPort implementation to execute commands.
        """
        self.deliveries = deliveries

    async def list_events(self, output_format: str = "json") -> dict[str, Any]:
        """List all recorded events."""
        events = await self.deliveries.list_events()
        if output_format == "text":
            lines = [
                f"{e.order_id}/{e.delivery_id} {e.status.value:<9} "
                f"{e.timestamp.isoformat()} {e.kind}"
                for e in events
            ]
            return {"status": "success", "operation": "list", "output": "\n".join(lines)}

        return {
            "status": "success",
            "operation": "list",
            "count": len(events),
            "data": [event_to_dict(e) for e in events],
        }

    async def list_events_by(self, order_id: int, delivery_id: int) -> dict[str, Any]:
        """List the events of one delivery."""
        events = await self.deliveries.list_events_by(order_id, delivery_id)
        return {
            "status": "success",
            "operation": "list_by",
            "order_id": order_id,
            "delivery_id": delivery_id,
            "count": len(events),
            "data": [event_to_dict(e) for e in events],
        }

    async def create_event(self, event_data: dict[str, Any]) -> dict[str, Any]:
        """Record a new event from its JSON representation."""
        try:
            event = await self.deliveries.create(event_from_dict(event_data))
        except DeliveryRatesError as e:
            logger.error(f"Failed to create event: {e}")
            return {"status": "error", "operation": "create", "message": str(e)}

        return {
            "status": "success",
            "operation": "create",
            "data": event_to_dict(event),
        }

    async def update_event(
        self, order_id: int, delivery_id: int, event_data: dict[str, Any]
    ) -> dict[str, Any]:
        """Replace the first event of a delivery."""
        try:
            event = await self.deliveries.update_first(
                order_id, delivery_id, event_from_dict(event_data)
            )
        except DeliveryRatesError as e:
            logger.error(f"Failed to update event: {e}")
            return {"status": "error", "operation": "update", "message": str(e)}

        return {
            "status": "success",
            "operation": "update",
            "order_id": order_id,
            "delivery_id": delivery_id,
            "data": event_to_dict(event),
        }

    async def calculate_rates(
        self, policy: str | None = None, output_format: str = "json"
    ) -> dict[str, Any]:
        """Calculate rates for all deliveries.

        Args:
            policy: "lenient" or "strict"; the service default when omitted.
            output_format: Output format ('json', 'text'). Default 'json'.
        """
        try:
            rates = await self.deliveries.rates(
                get_policy(policy) if policy else None
            )
        except ValueError as e:
            logger.error(f"Failed to calculate rates: {e}")
            return {"status": "error", "operation": "rates", "message": str(e)}

        if output_format == "text":
            lines = [
                f"{r.order_id}/{r.delivery_id} {r.final_status.value:<9} "
                f"{r.minutes:>6.1f} min {r.amount:>8.2f}"
                for r in rates
            ]
            return {"status": "success", "operation": "rates", "output": "\n".join(lines)}

        return {
            "status": "success",
            "operation": "rates",
            "count": len(rates),
            "data": [rate_to_dict(r) for r in rates],
        }

    async def rate_for(
        self, order_id: int, delivery_id: int, policy: str | None = None
    ) -> dict[str, Any]:
        """Calculate the rate of a single delivery."""
        try:
            rate = await self.deliveries.rate_for(
                order_id, delivery_id, get_policy(policy) if policy else None
            )
        except ValueError as e:
            logger.error(f"Failed to calculate rate: {e}")
            return {"status": "error", "operation": "rate", "message": str(e)}

        if rate is None:
            return {
                "status": "error",
                "operation": "rate",
                "message": f"No events for delivery (order_id={order_id}, delivery_id={delivery_id})",
            }

        return {"status": "success", "operation": "rate", "data": rate_to_dict(rate)}

    async def billing_summary(self, policy: str | None = None) -> dict[str, Any]:
        """Aggregate totals over all delivery rates."""
        try:
            summary = await self.deliveries.billing_summary(
                get_policy(policy) if policy else None
            )
        except ValueError as e:
            logger.error(f"Failed to summarize rates: {e}")
            return {"status": "error", "operation": "summary", "message": str(e)}

        return {
            "status": "success",
            "operation": "summary",
            "data": {
                "deliveries": summary.deliveries,
                "total_minutes": summary.total_minutes,
                "total_amount": summary.total_amount,
                "by_status": dict(summary.by_status),
            },
        }
