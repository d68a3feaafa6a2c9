"""
Device health tracking.

Applies probe outcomes to a device's rolling counters and status.
"""

from datetime import datetime, timezone
from typing import Callable, Optional

from netpulse.core.models import Device, DeviceStatus, ProbeOutcome, ProbeSuccess

# Replies at or above this round trip time are flagged as WARNING
LATENCY_WARNING_MS = 100


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def compute_uptime(successful: int, total: int) -> float:
    """Uptime percentage rounded to 2 decimals; 0 when nothing was probed."""
    if total <= 0:
        return 0
    return round(successful / total * 100, 2)


def classify_latency(round_trip_ms: float) -> DeviceStatus:
    """Map a successful round trip time to ONLINE or WARNING."""
    if round_trip_ms < LATENCY_WARNING_MS:
        return DeviceStatus.ONLINE
    return DeviceStatus.WARNING


class DeviceHealthTracker:
    """Updates device health fields from probe outcomes."""

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        """
        Initialize health tracker.

        Args:
            clock: Callable returning the current time (default: UTC now)
        """
        self.clock = clock or _utcnow

    def apply_probe_outcome(self, device: Device, outcome: ProbeOutcome) -> Device:
        """
        Record one probe outcome on a device.

        The caller is responsible for holding the inventory lock.

        Args:
            device: Device to update in place
            outcome: ProbeSuccess or ProbeFailure

        Returns:
            The same device, updated
        """
        device.total_probe_count += 1
        device.last_checked_at = self.clock()

        if isinstance(outcome, ProbeSuccess):
            device.successful_probe_count += 1
            device.last_response_time_ms = int(round(outcome.round_trip_ms))
            device.status = classify_latency(outcome.round_trip_ms)
        else:
            device.last_response_time_ms = None
            device.status = DeviceStatus.OFFLINE

        device.uptime_percent = compute_uptime(
            device.successful_probe_count, device.total_probe_count
        )
        return device
