"""
Poll cycle runner for network monitor.

Probes every device concurrently, records the outcomes, and decides
whether the fleet is in an alerting state.
"""

import logging
import math
import threading
import time
from concurrent.futures import CancelledError, Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field
from typing import Optional

from netpulse.alerts.broadcast import BroadcastResult
from netpulse.alerts.channel import AlertChannel
from netpulse.core.models import Device, DeviceStatus, ProbeFailure, ProbeOutcome
from netpulse.health.probe import ProbeClient
from netpulse.health.tracker import DeviceHealthTracker

logger = logging.getLogger(__name__)


@dataclass
class CycleResult:
    """Summary of one poll cycle."""

    devices: list[Device]
    outcomes: dict[str, ProbeOutcome] = field(default_factory=dict)
    offline: list[Device] = field(default_factory=list)
    duration_s: float = 0.0
    alert_action: str = ""
    alert_future: Optional[Future] = None


class PollCycleRunner:
    """Runs poll cycles: fan out probes, fan in results, update alerts."""

    def __init__(
        self,
        probe_client: ProbeClient,
        alert_channel: AlertChannel,
        lock: Optional[threading.RLock] = None,
        tracker: Optional[DeviceHealthTracker] = None,
        probe_timeout: float = 10.0,
        max_workers: int = 16,
        timeout_grace: float = 1.0,
    ):
        """
        Initialize poll cycle runner.

        Args:
            probe_client: Probe used for each device
            alert_channel: Channel updated after every cycle
            lock: Lock guarding device records (usually the inventory lock)
            tracker: Health tracker (default: DeviceHealthTracker())
            probe_timeout: Per-probe timeout in seconds
            max_workers: Maximum concurrent probes
            timeout_grace: Extra seconds allowed before a probe is abandoned
        """
        self.probe_client = probe_client
        self.alert_channel = alert_channel
        self.lock = lock or threading.RLock()
        self.tracker = tracker or DeviceHealthTracker()
        self.probe_timeout = probe_timeout
        self.max_workers = max_workers
        self.timeout_grace = timeout_grace

        # Pools are created on first use and again after shutdown()
        self._pool_lock = threading.Lock()
        self._probe_pool: Optional[ThreadPoolExecutor] = None
        self._alert_pool: Optional[ThreadPoolExecutor] = None

    def _pools(self) -> tuple[ThreadPoolExecutor, ThreadPoolExecutor]:
        with self._pool_lock:
            if self._probe_pool is None:
                self._probe_pool = ThreadPoolExecutor(
                    max_workers=self.max_workers, thread_name_prefix="probe"
                )
            if self._alert_pool is None:
                # Single worker keeps trigger/stop dispatches in cycle order
                self._alert_pool = ThreadPoolExecutor(
                    max_workers=1, thread_name_prefix="alert-dispatch"
                )
            return self._probe_pool, self._alert_pool

    def _probe(self, device: Device) -> ProbeOutcome:
        """Probe one device; any error becomes a ProbeFailure."""
        try:
            outcome = self.probe_client.probe(device.address, self.probe_timeout)
        except Exception as e:
            logger.warning(f"Error probing {device.name} ({device.address}): {e}")
            return ProbeFailure(str(e) or e.__class__.__name__)

        if outcome is None:
            return ProbeFailure("No probe result")
        return outcome

    def _cycle_deadline(self, start: float, device_count: int) -> float:
        """Latest time at which every probe of the cycle must have settled."""
        waves = max(1, math.ceil(device_count / self.max_workers))
        return start + waves * self.probe_timeout + self.timeout_grace

    def run_cycle(self, devices: list[Device]) -> CycleResult:
        """
        Probe all devices and update the alert channel.

        Probes are dispatched together and the alert decision is made only
        after every probe has settled. A probe still running past its
        timeout is abandoned and recorded as a failure. The trigger/stop
        call is dispatched without waiting for it; see
        CycleResult.alert_future.

        Args:
            devices: Devices to probe (updated in place)

        Returns:
            CycleResult for this cycle
        """
        probe_pool, alert_pool = self._pools()

        start_time = time.monotonic()
        deadline = self._cycle_deadline(start_time, len(devices))
        logger.debug(f"Starting poll cycle for {len(devices)} devices")

        futures = [
            (device, probe_pool.submit(self._probe, device)) for device in devices
        ]

        result = CycleResult(devices=list(devices))
        for device, future in futures:
            try:
                outcome = future.result(timeout=max(0.0, deadline - time.monotonic()))
            except FutureTimeoutError:
                future.cancel()
                logger.warning(
                    f"Probe of {device.name} ({device.address}) exceeded "
                    f"{self.probe_timeout}s timeout"
                )
                outcome = ProbeFailure(f"Probe to {device.address} timed out")
            except CancelledError:
                outcome = ProbeFailure(f"Probe to {device.address} cancelled")

            with self.lock:
                self.tracker.apply_probe_outcome(device, outcome)
            result.outcomes[device.id] = outcome

            rtt = device.last_response_time_ms
            logger.debug(
                f"Pinged {device.name} ({device.address}): {device.status.value} - "
                f"{rtt if rtt is not None else 'N/A'}ms"
            )

        with self.lock:
            result.offline = [d for d in devices if d.status == DeviceStatus.OFFLINE]

        result.duration_s = time.monotonic() - start_time

        if result.offline:
            names = ", ".join(d.name for d in result.offline)
            logger.info(f"{len(result.offline)} device(s) offline: {names}")
            result.alert_action = "trigger"
            result.alert_future = alert_pool.submit(self.alert_channel.trigger)
        else:
            result.alert_action = "stop"
            result.alert_future = alert_pool.submit(self.alert_channel.stop)
        result.alert_future.add_done_callback(
            lambda f, action=result.alert_action: _log_dispatch(action, f)
        )

        logger.info(
            f"Poll cycle completed for {len(devices)} devices "
            f"in {result.duration_s:.2f}s"
        )
        return result

    def shutdown(self, wait: bool = True) -> None:
        """Release worker threads; the next cycle starts fresh pools."""
        with self._pool_lock:
            probe_pool, self._probe_pool = self._probe_pool, None
            alert_pool, self._alert_pool = self._alert_pool, None

        if probe_pool is not None:
            probe_pool.shutdown(wait=wait, cancel_futures=not wait)
        if alert_pool is not None:
            alert_pool.shutdown(wait=wait)


def _log_dispatch(action: str, future: Future) -> None:
    """Log the outcome of a fire-and-forget alert dispatch."""
    if future.cancelled():
        logger.debug(f"Alert {action} dispatch cancelled")
        return

    try:
        result: Optional[BroadcastResult] = future.result()
    except Exception:
        logger.exception(f"Alert {action} dispatch failed")
        return

    if result is None:
        logger.debug(f"Alert {action}: no change")
    else:
        logger.info(
            f"Alert {action}: {result.successes} succeeded, "
            f"{result.failures} failed of {result.total}"
        )
