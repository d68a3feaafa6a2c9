"""
Reachability probes for network monitor.

Defines the probe client interface and a system ``ping`` implementation.
"""

import logging
import re
import subprocess
import time
from abc import ABC, abstractmethod

from netpulse.core.models import ProbeFailure, ProbeOutcome, ProbeSuccess

logger = logging.getLogger(__name__)

# Matches "time=12.3 ms" / "time<1 ms" in ping output
_RTT_PATTERN = re.compile(r"time[=<]\s*([\d.]+)\s*ms")


class ProbeClient(ABC):
    """Abstract base class for reachability probes."""

    @abstractmethod
    def probe(self, address: str, timeout: float) -> ProbeOutcome:
        """
        Check whether a host is reachable.

        Args:
            address: Hostname or IP address
            timeout: Seconds to wait for a reply

        Returns:
            ProbeSuccess with round trip time, or ProbeFailure
        """
        pass


class PingProbe(ProbeClient):
    """Probe that shells out to the system ``ping`` command."""

    def __init__(self, command: str = "ping"):
        """
        Initialize ping probe.

        Args:
            command: Ping executable to run
        """
        self.command = command

    def probe(self, address: str, timeout: float) -> ProbeOutcome:
        """Send one ICMP echo request to ``address``."""
        start_time = time.time()

        try:
            # -c 1: send 1 packet
            # -W: reply timeout in seconds (Linux)
            result = subprocess.run(
                [self.command, "-c", "1", "-W", str(max(1, int(timeout))), address],
                capture_output=True,
                text=True,
                timeout=timeout + 1,
            )
        except subprocess.TimeoutExpired:
            return ProbeFailure(f"Ping to {address} timed out")
        except OSError as e:
            return ProbeFailure(f"Ping error: {e}")

        if result.returncode != 0:
            return ProbeFailure(f"Host {address} is unreachable")

        match = _RTT_PATTERN.search(result.stdout or "")
        if match:
            rtt_ms = float(match.group(1))
        else:
            rtt_ms = (time.time() - start_time) * 1000

        return ProbeSuccess(round_trip_ms=rtt_ms)
