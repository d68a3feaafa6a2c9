"""
Core components for network monitor.

Provides configuration, data models, and the device inventory.
"""

from netpulse.core.config import Config, load_config
from netpulse.core.inventory import DeviceInventory
from netpulse.core.models import (
    AlertPattern,
    Device,
    DeviceStatus,
    NetworkStats,
    PatternPatch,
    ProbeFailure,
    ProbeOutcome,
    ProbeSuccess,
)

__all__ = [
    "Config",
    "load_config",
    "DeviceInventory",
    "Device",
    "DeviceStatus",
    "ProbeSuccess",
    "ProbeFailure",
    "ProbeOutcome",
    "AlertPattern",
    "PatternPatch",
    "NetworkStats",
]
