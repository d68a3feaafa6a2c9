"""
Health monitoring module for network monitor.

Provides probing, per-device health tracking, poll cycles and scheduling.
"""

from netpulse.health.monitor import Monitor, format_device_table
from netpulse.health.poller import CycleResult, PollCycleRunner
from netpulse.health.probe import PingProbe, ProbeClient
from netpulse.health.scheduler import Scheduler
from netpulse.health.tracker import (
    LATENCY_WARNING_MS,
    DeviceHealthTracker,
    compute_uptime,
)

__all__ = [
    # Probes
    "ProbeClient",
    "PingProbe",
    # Tracking
    "DeviceHealthTracker",
    "LATENCY_WARNING_MS",
    "compute_uptime",
    # Polling
    "CycleResult",
    "PollCycleRunner",
    "Scheduler",
    "Monitor",
    "format_device_table",
]
