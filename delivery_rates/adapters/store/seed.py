"""Seed loader for delivery events.

Reads an initial event log from a JSON file so sample data is injected
input rather than module-level state. Expected format::

    [
        {"order_id": 1, "delivery_id": 1, "kind": "Entrega",
         "status": "PENDING", "timestamp": "2025-09-06T15:16:00Z"},
        ...
    ]
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

from delivery_rates.core.errors import InvalidDeliveryEventError
from delivery_rates.core.models import DeliveryEvent, DeliveryStatus

logger = logging.getLogger(__name__)


def event_from_dict(data: dict[str, Any]) -> DeliveryEvent:
    """Build a DeliveryEvent from its JSON representation.

    Raises:
        InvalidDeliveryEventError: If a field is missing or malformed.
    """
    try:
        timestamp = data["timestamp"]
        if isinstance(timestamp, str):
            # fromisoformat does not accept a trailing "Z" before Python 3.11
            timestamp = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
        return DeliveryEvent(
            order_id=int(data["order_id"]),
            delivery_id=int(data["delivery_id"]),
            kind=str(data["kind"]),
            status=DeliveryStatus(str(data["status"]).upper()),
            timestamp=timestamp,
        )
    except InvalidDeliveryEventError:
        raise
    except KeyError as e:
        raise InvalidDeliveryEventError(f"Missing field {e.args[0]!r} in event") from e
    except (AttributeError, TypeError, ValueError) as e:
        raise InvalidDeliveryEventError(f"Malformed event {data!r}: {e}") from e


def event_to_dict(event: DeliveryEvent) -> dict[str, Any]:
    """Serialize a DeliveryEvent to its JSON representation."""
    return {
        "order_id": event.order_id,
        "delivery_id": event.delivery_id,
        "kind": event.kind,
        "status": event.status.value,
        "timestamp": event.timestamp.isoformat(),
    }


def load_seed_events(path: str | Path) -> list[DeliveryEvent]:
    """Load delivery events from a JSON file.

    Args:
        path: Path to a JSON file holding a list of event objects.

    Returns:
        Events in file order.

    Raises:
        FileNotFoundError: If the file does not exist.
        InvalidDeliveryEventError: If the file is not a list of valid events.
    """
    path = Path(path)
    with path.open(encoding="utf-8") as f:
        try:
            raw = json.load(f)
        except json.JSONDecodeError as e:
            raise InvalidDeliveryEventError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(raw, list):
        raise InvalidDeliveryEventError(
            f"Seed file {path} must contain a list of events, got {type(raw).__name__}"
        )

    events = [event_from_dict(item) for item in raw]
    logger.info(f"Loaded {len(events)} seed events from {path}")
    return events
