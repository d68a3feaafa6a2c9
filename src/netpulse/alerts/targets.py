"""
Alert targets for network monitor.

Defines the abstract alert target interface and the blink1-server HTTP
implementation.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

import requests

from netpulse.core.models import AlertPattern

logger = logging.getLogger(__name__)


class AlertTarget(ABC):
    """Abstract base class for visual alert endpoints."""

    def __init__(self, base_url: str, timeout: float = 5.0):
        """
        Initialize alert target.

        Args:
            base_url: Base URL of the device server (e.g. http://host:8934)
            timeout: Request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    @abstractmethod
    def play_pattern(self, pattern: AlertPattern) -> bool:
        """
        Start playing a color pattern.

        Returns:
            True if the target acknowledged the request
        """
        pass

    @abstractmethod
    def off(self) -> bool:
        """
        Turn the indicator off.

        Returns:
            True if the target acknowledged the request
        """
        pass

    @abstractmethod
    def status_check(self, timeout: float) -> bool:
        """
        Check that the target is reachable.

        Args:
            timeout: Seconds to wait for a reply

        Returns:
            True if the target answered
        """
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.base_url!r})"


class Blink1Target(AlertTarget):
    """
    Alert target for a blink1-server instance.

    Uses blink1-server HTTP API, addressing every attached blink(1):
    - Pattern: <base>/blink1/pattern?rgb=<c1,c2,..>&time=<s>&repeats=<n>&id=all
    - Off:     <base>/blink1/off?id=all
    - Status:  <base>/blink1
    """

    def _request(
        self,
        endpoint: str,
        params: Optional[dict] = None,
        timeout: Optional[float] = None,
    ) -> bool:
        """
        Send request to blink1-server.

        Args:
            endpoint: API endpoint (e.g., "blink1/off")
            params: Optional query parameters
            timeout: Override for the default request timeout

        Returns:
            True on a 2xx response, False on any error
        """
        url = f"{self.base_url}/{endpoint}"

        try:
            response = requests.get(
                url, params=params, timeout=timeout or self.timeout
            )
            response.raise_for_status()
            return True
        except requests.RequestException as e:
            logger.debug(f"blink1 request {url} failed: {e}")
            return False

    def play_pattern(self, pattern: AlertPattern) -> bool:
        """Play pattern on all blink(1) devices attached to the server."""
        params = {
            "rgb": ",".join(pattern.colors),
            "time": pattern.step_duration_seconds,
            "repeats": pattern.repeat_count,
            "id": "all",
        }
        return self._request("blink1/pattern", params=params)

    def off(self) -> bool:
        """Turn all attached blink(1) devices off."""
        return self._request("blink1/off", params={"id": "all"})

    def status_check(self, timeout: float) -> bool:
        """Check blink1-server responds."""
        return self._request("blink1", timeout=timeout)


def get_target(url: str, kind: str = "blink1", timeout: float = 5.0) -> AlertTarget:
    """
    Factory function to create an alert target.

    Args:
        url: Base URL of the target server
        kind: Target type (only "blink1" is supported)
        timeout: Request timeout in seconds

    Returns:
        AlertTarget subclass instance

    Raises:
        ValueError: If kind is not supported
    """
    if kind == "blink1":
        return Blink1Target(url, timeout)

    raise ValueError(f"Unsupported alert target type: {kind}")
