"""
Visual alert module for network monitor.

Drives blink(1) indicator servers when monitored hosts go offline.
"""

from netpulse.alerts.broadcast import BroadcastResult, TargetOutcome, broadcast
from netpulse.alerts.channel import TEST_PATTERN, AlertChannel, ConnectivityReport
from netpulse.alerts.targets import AlertTarget, Blink1Target, get_target

__all__ = [
    # Targets
    "AlertTarget",
    "Blink1Target",
    "get_target",
    # Fan-out
    "BroadcastResult",
    "TargetOutcome",
    "broadcast",
    # Channel
    "AlertChannel",
    "ConnectivityReport",
    "TEST_PATTERN",
]
