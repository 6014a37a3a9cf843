"""Fake implementations of core ports for testing.

- FakeDeliveryEventStorePort: In-memory event list with call tracking
- FakeRateReportPort: Captured reports for assertion
"""

from .report import FakeRateReportPort
from .store import FakeDeliveryEventStorePort

__all__ = [
    "FakeDeliveryEventStorePort",
    "FakeRateReportPort",
]
