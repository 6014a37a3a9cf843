"""Core domain logic for the delivery rates system.

This package contains zero external dependencies and represents
the pure business logic of the application. All adapters and
external integrations are handled by the adapters package.
"""

from .errors import (
    DeliveryRatesError,
    InvalidDeliveryEventError,
    RateValidationError,
)
from .models import (
    PAY_RATE_PER_MINUTE,
    BillingSummary,
    DeliveryEvent,
    DeliveryKey,
    DeliveryRate,
    DeliveryStatus,
)
from .rates import (
    LenientPolicy,
    RateEngine,
    StrictPolicy,
    ValidationPolicy,
    calculate_rates,
    get_policy,
)

__all__ = [
    "PAY_RATE_PER_MINUTE",
    "BillingSummary",
    "DeliveryEvent",
    "DeliveryKey",
    "DeliveryRate",
    "DeliveryRatesError",
    "DeliveryStatus",
    "InvalidDeliveryEventError",
    "LenientPolicy",
    "RateEngine",
    "RateValidationError",
    "StrictPolicy",
    "ValidationPolicy",
    "calculate_rates",
    "get_policy",
]
