"""
Data models for network monitor.

Defines dataclasses for monitored devices, probe outcomes, alert patterns,
and fleet statistics.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)


class DeviceStatus(Enum):
    """Device status values."""

    UNKNOWN = "unknown"
    ONLINE = "online"
    WARNING = "warning"
    OFFLINE = "offline"


@dataclass(frozen=True)
class ProbeSuccess:
    """Host answered the probe."""

    round_trip_ms: float


@dataclass(frozen=True)
class ProbeFailure:
    """Host did not answer (unreachable, timeout, resolution or transport error)."""

    reason: str


ProbeOutcome = Union[ProbeSuccess, ProbeFailure]


@dataclass
class Device:
    """Monitored host record."""

    id: str
    name: str
    address: str
    category: str = "physical-server"
    vendor: Optional[str] = None
    location: Optional[str] = None

    # Health fields (only mutated by the health tracker)
    status: DeviceStatus = DeviceStatus.UNKNOWN
    last_response_time_ms: Optional[int] = None
    last_checked_at: Optional[datetime] = None
    total_probe_count: int = 0
    successful_probe_count: int = 0
    uptime_percent: float = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert device to JSON-serializable dict."""
        return {
            "id": self.id,
            "name": self.name,
            "address": self.address,
            "category": self.category,
            "vendor": self.vendor,
            "location": self.location,
            "status": self.status.value,
            "response_time_ms": self.last_response_time_ms,
            "last_checked_at": (
                self.last_checked_at.isoformat() if self.last_checked_at else None
            ),
            "uptime_percent": self.uptime_percent,
            "successful_probes": self.successful_probe_count,
            "total_probes": self.total_probe_count,
        }


@dataclass
class AlertPattern:
    """Color sequence played on alert targets."""

    colors: list[str] = field(
        default_factory=lambda: ["#ff0000", "#ffffff", "#0000ff"]
    )
    step_duration_seconds: float = 0.2
    repeat_count: int = 8

    def copy(self) -> "AlertPattern":
        """Return an independent copy."""
        return AlertPattern(
            colors=list(self.colors),
            step_duration_seconds=self.step_duration_seconds,
            repeat_count=self.repeat_count,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert pattern to JSON-serializable dict."""
        return {
            "colors": list(self.colors),
            "step_duration_seconds": self.step_duration_seconds,
            "repeat_count": self.repeat_count,
        }


def _valid_colors(value: Any) -> Optional[list[str]]:
    if not isinstance(value, (list, tuple)) or not value:
        return None
    if not all(isinstance(c, str) and c.strip() for c in value):
        return None
    return [c.strip() for c in value]


def _valid_duration(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value) or value <= 0:
        return None
    return float(value)


def _valid_repeat(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    if value <= 0:
        return None
    return value


@dataclass
class PatternPatch:
    """
    Partial update for an AlertPattern.

    Every field is optional. Fields that fail validation are dropped
    individually so the rest of the patch still applies.
    """

    colors: Optional[list[str]] = None
    step_duration_seconds: Optional[float] = None
    repeat_count: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> "PatternPatch":
        """
        Build a patch from request data.

        Accepts ``time`` and ``repeats`` as aliases for
        ``step_duration_seconds`` and ``repeat_count``.

        Args:
            data: Raw mapping (may be None or contain malformed values)

        Returns:
            PatternPatch containing only the well-formed fields
        """
        if not isinstance(data, dict):
            return cls()

        raw_duration = data.get("step_duration_seconds", data.get("time"))
        raw_repeat = data.get("repeat_count", data.get("repeats"))

        patch = cls(
            colors=_valid_colors(data.get("colors")),
            step_duration_seconds=_valid_duration(raw_duration),
            repeat_count=_valid_repeat(raw_repeat),
        )

        if "colors" in data and patch.colors is None:
            logger.debug(f"Ignoring malformed pattern colors: {data.get('colors')!r}")
        if raw_duration is not None and patch.step_duration_seconds is None:
            logger.debug(f"Ignoring malformed step duration: {raw_duration!r}")
        if raw_repeat is not None and patch.repeat_count is None:
            logger.debug(f"Ignoring malformed repeat count: {raw_repeat!r}")

        return patch

    @property
    def is_empty(self) -> bool:
        """True if no field survived validation."""
        return (
            self.colors is None
            and self.step_duration_seconds is None
            and self.repeat_count is None
        )

    def apply_to(self, pattern: AlertPattern) -> AlertPattern:
        """Return a new pattern with this patch merged over ``pattern``."""
        merged = pattern.copy()
        if self.colors is not None:
            merged.colors = list(self.colors)
        if self.step_duration_seconds is not None:
            merged.step_duration_seconds = self.step_duration_seconds
        if self.repeat_count is not None:
            merged.repeat_count = self.repeat_count
        return merged


@dataclass
class NetworkStats:
    """Fleet-wide status counts."""

    total_devices: int = 0
    online_devices: int = 0
    offline_devices: int = 0
    warning_devices: int = 0
    unknown_devices: int = 0
    average_response_time_ms: int = 0

    @classmethod
    def from_devices(cls, devices: list[Device]) -> "NetworkStats":
        """Compute statistics for a list of devices."""
        counts = {status: 0 for status in DeviceStatus}
        for device in devices:
            counts[device.status] += 1

        times = [
            d.last_response_time_ms
            for d in devices
            if d.last_response_time_ms is not None
        ]
        average = int(round(sum(times) / len(times))) if times else 0

        return cls(
            total_devices=len(devices),
            online_devices=counts[DeviceStatus.ONLINE],
            offline_devices=counts[DeviceStatus.OFFLINE],
            warning_devices=counts[DeviceStatus.WARNING],
            unknown_devices=counts[DeviceStatus.UNKNOWN],
            average_response_time_ms=average,
        )

    def to_dict(self) -> dict[str, int]:
        """Convert stats to JSON-serializable dict."""
        return {
            "total_devices": self.total_devices,
            "online_devices": self.online_devices,
            "offline_devices": self.offline_devices,
            "warning_devices": self.warning_devices,
            "unknown_devices": self.unknown_devices,
            "average_response_time_ms": self.average_response_time_ms,
        }
