"""
Network monitor service.

Owns the device inventory, alert channel, poll runner and scheduler for one
monitor instance.
"""

import logging
from typing import Any, Optional, Sequence

from netpulse.alerts.channel import AlertChannel
from netpulse.alerts.targets import AlertTarget, get_target
from netpulse.core.config import Config
from netpulse.core.inventory import DeviceInventory
from netpulse.core.models import Device, NetworkStats
from netpulse.health.poller import CycleResult, PollCycleRunner
from netpulse.health.probe import PingProbe, ProbeClient
from netpulse.health.scheduler import Scheduler

logger = logging.getLogger(__name__)


class Monitor:
    """
    Network monitor instance.

    Independent instances share no state, so several can coexist (e.g. in
    tests).
    """

    def __init__(
        self,
        config: Config,
        probe_client: Optional[ProbeClient] = None,
        targets: Optional[Sequence[AlertTarget]] = None,
        inventory: Optional[DeviceInventory] = None,
    ):
        """
        Initialize monitor.

        Args:
            config: Monitor configuration
            probe_client: Probe implementation (default: PingProbe)
            targets: Alert targets (default: built from config.alerts.targets)
            inventory: Device inventory (default: seeded from config.devices)
        """
        self.config = config
        self.inventory = inventory or DeviceInventory(config.devices)

        if targets is None:
            targets = [
                get_target(url, timeout=config.alerts.request_timeout)
                for url in config.alerts.targets
            ]

        self.alert_channel = AlertChannel(
            targets,
            enabled=config.alerts.enabled,
            status_timeout=config.alerts.status_timeout,
        )
        self.runner = PollCycleRunner(
            probe_client or PingProbe(),
            self.alert_channel,
            lock=self.inventory.lock,
            probe_timeout=config.poll.probe_timeout,
            max_workers=config.poll.max_workers,
        )
        self.scheduler = Scheduler(self.poll, interval=config.poll.interval)

    def poll(self) -> CycleResult:
        """Run one poll cycle over the current inventory."""
        return self.runner.run_cycle(self.inventory.get_all_devices())

    def poll_now(self) -> list[dict[str, Any]]:
        """Run a manual poll cycle and return the updated device list."""
        self.poll()
        return self.inventory.snapshot()

    def start(self) -> None:
        """Start scheduled polling (first cycle runs immediately)."""
        logger.info(
            f"Monitoring {len(self.inventory)} devices every "
            f"{self.config.poll.interval}s, alert targets: "
            f"{', '.join(t.base_url for t in self.alert_channel.targets) or 'none'}"
        )
        self.scheduler.start()

    def stop(self) -> None:
        """Stop scheduled polling and release worker threads."""
        self.scheduler.stop()
        self.runner.shutdown(wait=False)

    def snapshot(self) -> list[dict[str, Any]]:
        """JSON-serializable device list."""
        return self.inventory.snapshot()

    def devices(self) -> list[Device]:
        return self.inventory.get_all_devices()

    def stats(self) -> NetworkStats:
        """Fleet statistics for the current inventory."""
        with self.inventory.lock:
            return NetworkStats.from_devices(self.inventory.get_all_devices())

    def __enter__(self) -> "Monitor":
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()


def format_device_table(devices: list[Device], show_details: bool = False) -> str:
    """
    Format device health as a table.

    Args:
        devices: Devices to show
        show_details: Whether to show probe counters and last check time

    Returns:
        Formatted table string
    """
    if not devices:
        return "No devices to check."

    lines = []
    header = f"{'DEVICE':<24} {'ADDRESS':<20} {'STATUS':<9} {'RTT':>7} {'UPTIME':>8}"
    lines.append(header)
    lines.append("-" * len(header))

    for device in sorted(devices, key=lambda d: d.name.lower()):
        rtt = (
            f"{device.last_response_time_ms}ms"
            if device.last_response_time_ms is not None
            else "-"
        )
        uptime = f"{device.uptime_percent:.2f}%"
        lines.append(
            f"{device.name:<24} {device.address:<20} {device.status.value:<9} "
            f"{rtt:>7} {uptime:>8}"
        )

        if show_details:
            checked = (
                device.last_checked_at.strftime("%Y-%m-%d %H:%M:%S")
                if device.last_checked_at
                else "never"
            )
            lines.append(
                f"  Probes: {device.successful_probe_count}/"
                f"{device.total_probe_count} ok, last check {checked}"
            )

    return "\n".join(lines)
