"""
Alert channel for network monitor.

Latched, best-effort visual alerting across multiple blink(1) servers.
The channel is either idle or alerting; ``enabled`` only gates the
transition into alerting.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence, Union

from netpulse.alerts.broadcast import BroadcastResult, broadcast
from netpulse.alerts.targets import AlertTarget
from netpulse.core.models import AlertPattern, PatternPatch

logger = logging.getLogger(__name__)

# Short red blink used by test(), independent of the configured pattern
TEST_PATTERN = AlertPattern(colors=["#ff0000"], step_duration_seconds=0.3, repeat_count=3)


@dataclass
class ConnectivityReport:
    """Reachability of every alert target."""

    targets: list[tuple[str, bool]] = field(default_factory=list)

    @property
    def connected_count(self) -> int:
        return sum(1 for _, connected in self.targets if connected)

    @property
    def any_connected(self) -> bool:
        return self.connected_count > 0

    def to_dict(self) -> dict[str, Any]:
        """Convert report to JSON-serializable dict."""
        return {
            "targets": [
                {"url": url, "connected": connected} for url, connected in self.targets
            ],
            "connected_count": self.connected_count,
            "any_connected": self.any_connected,
        }


class AlertChannel:
    """
    Multi-target alert notifier with an on/off latch.

    trigger() and stop() only talk to the targets on a state change, so
    repeated calls from successive poll cycles are cheap no-ops.
    """

    def __init__(
        self,
        targets: Sequence[AlertTarget],
        pattern: Optional[AlertPattern] = None,
        enabled: bool = True,
        status_timeout: float = 3.0,
    ):
        """
        Initialize alert channel.

        Args:
            targets: Alert targets, fixed for the lifetime of the channel
            pattern: Initial alert pattern (default: AlertPattern())
            enabled: Whether triggering is allowed
            status_timeout: Timeout for connectivity checks in seconds
        """
        self._targets = tuple(targets)
        self._pattern = pattern.copy() if pattern else AlertPattern()
        self._enabled = enabled
        self._is_active = False
        self.status_timeout = status_timeout

        # Serializes latch transitions across poll, API and scheduler threads
        self._lock = threading.RLock()

    @property
    def targets(self) -> tuple[AlertTarget, ...]:
        return self._targets

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def is_active(self) -> bool:
        return self._is_active

    @property
    def pattern(self) -> AlertPattern:
        """Copy of the current alert pattern."""
        with self._lock:
            return self._pattern.copy()

    def trigger(self) -> Optional[BroadcastResult]:
        """
        Start the alert pattern on all targets.

        Returns:
            BroadcastResult, or None if already alerting or disabled
        """
        with self._lock:
            if self._is_active or not self._enabled:
                return None

            pattern = self._pattern.copy()
            result = broadcast(
                self._targets, lambda t: t.play_pattern(pattern), "trigger"
            )

            if result.any_success:
                self._is_active = True
                logger.info(
                    f"Alert started on {result.successes}/{result.total} targets"
                )
            elif result.total:
                logger.error(f"Alert trigger failed on all {result.total} targets")
            return result

    def stop(self) -> Optional[BroadcastResult]:
        """
        Turn all targets off.

        Returns:
            BroadcastResult, or None if not alerting
        """
        with self._lock:
            if not self._is_active:
                return None

            result = broadcast(self._targets, lambda t: t.off(), "stop")

            if result.any_success:
                self._is_active = False
                logger.info(
                    f"Alert stopped on {result.successes}/{result.total} targets"
                )
            elif result.total:
                logger.error(f"Alert stop failed on all {result.total} targets")
            return result

    def test(self) -> BroadcastResult:
        """Play the fixed test pattern without touching the latch."""
        return self.test_pattern(TEST_PATTERN)

    def test_pattern(self, pattern: AlertPattern) -> BroadcastResult:
        """
        Preview a pattern on all targets without saving it.

        Args:
            pattern: Pattern to play

        Returns:
            BroadcastResult for the preview
        """
        preview = pattern.copy()
        result = broadcast(self._targets, lambda t: t.play_pattern(preview), "test")
        logger.info(f"Test pattern sent to {result.successes}/{result.total} targets")
        return result

    def force_off(self) -> BroadcastResult:
        """Send off to all targets regardless of state and clear the latch."""
        with self._lock:
            result = broadcast(self._targets, lambda t: t.off(), "off")
            if result.any_success:
                self._is_active = False
            return result

    def check_connectivity(self, timeout: Optional[float] = None) -> ConnectivityReport:
        """
        Check every target's status endpoint.

        Args:
            timeout: Per-target timeout (default: status_timeout)

        Returns:
            ConnectivityReport; unreachable targets are reported as not connected
        """
        timeout = timeout or self.status_timeout
        result = broadcast(self._targets, lambda t: t.status_check(timeout), "status")
        return ConnectivityReport(
            targets=[(o.url, o.success) for o in result.outcomes]
        )

    def set_enabled(self, value: bool) -> None:
        """
        Enable or disable triggering.

        Disabling while alerting stops the alert immediately.
        """
        with self._lock:
            self._enabled = bool(value)
            logger.info(f"blink1 alerts {'enabled' if self._enabled else 'disabled'}")
            if not self._enabled and self._is_active:
                self.stop()

    def toggle(self, value: Optional[bool] = None) -> bool:
        """
        Set enabled to ``value``, or flip it when ``value`` is None.

        Returns:
            New enabled state
        """
        with self._lock:
            new_value = (not self._enabled) if value is None else value
            self.set_enabled(new_value)
            return self._enabled

    def update_pattern(
        self, patch: Union[PatternPatch, dict[str, Any]]
    ) -> AlertPattern:
        """
        Merge the well-formed fields of ``patch`` into the current pattern.

        Args:
            patch: PatternPatch or raw mapping

        Returns:
            Copy of the updated pattern
        """
        if not isinstance(patch, PatternPatch):
            patch = PatternPatch.from_dict(patch)

        with self._lock:
            self._pattern = patch.apply_to(self._pattern)
            logger.info(f"Alert pattern updated: {self._pattern.to_dict()}")
            return self._pattern.copy()

    def status(self) -> dict[str, Any]:
        """Current latch state."""
        return {
            "enabled": self._enabled,
            "is_active": self._is_active,
            "targets": [t.base_url for t in self._targets],
        }
