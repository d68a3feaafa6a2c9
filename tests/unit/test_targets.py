"""Unit tests for alert targets."""

from unittest.mock import Mock, patch

import pytest
import requests

from netpulse.alerts.targets import Blink1Target, get_target
from netpulse.core.models import AlertPattern


def ok_response() -> Mock:
    response = Mock()
    response.raise_for_status = Mock()
    return response


class TestGetTarget:
    """Tests for target factory function."""

    def test_get_blink1_target(self):
        """Test creating a blink1 target."""
        target = get_target("http://10.0.0.5:8934/")
        assert isinstance(target, Blink1Target)
        assert target.base_url == "http://10.0.0.5:8934"

    def test_get_target_with_timeout(self):
        """Test creating a target with custom timeout."""
        target = get_target("http://localhost:8934", timeout=2.0)
        assert target.timeout == 2.0

    def test_unsupported_kind(self):
        """Test unknown target types are rejected."""
        with pytest.raises(ValueError):
            get_target("http://localhost:8934", kind="hue")


class TestBlink1Target:
    """Tests for blink1-server target."""

    @patch("netpulse.alerts.targets.requests.get")
    def test_play_pattern(self, mock_get):
        """Test pattern request parameters."""
        mock_get.return_value = ok_response()
        target = Blink1Target("http://localhost:8934")
        pattern = AlertPattern(colors=["#ff0000", "#0000ff"], step_duration_seconds=0.5, repeat_count=4)

        assert target.play_pattern(pattern) is True

        url = mock_get.call_args[0][0]
        params = mock_get.call_args[1]["params"]
        assert url == "http://localhost:8934/blink1/pattern"
        assert params["rgb"] == "#ff0000,#0000ff"
        assert params["time"] == 0.5
        assert params["repeats"] == 4
        assert params["id"] == "all"
        assert mock_get.call_args[1]["timeout"] == 5.0

    @patch("netpulse.alerts.targets.requests.get")
    def test_off(self, mock_get):
        """Test off request."""
        mock_get.return_value = ok_response()
        target = Blink1Target("http://localhost:8934")

        assert target.off() is True
        assert mock_get.call_args[0][0] == "http://localhost:8934/blink1/off"
        assert mock_get.call_args[1]["params"] == {"id": "all"}

    @patch("netpulse.alerts.targets.requests.get")
    def test_status_check_uses_short_timeout(self, mock_get):
        """Test status check uses the given timeout."""
        mock_get.return_value = ok_response()
        target = Blink1Target("http://localhost:8934")

        assert target.status_check(timeout=3.0) is True
        assert mock_get.call_args[0][0] == "http://localhost:8934/blink1"
        assert mock_get.call_args[1]["timeout"] == 3.0

    @patch("netpulse.alerts.targets.requests.get")
    def test_connection_error(self, mock_get):
        """Test network errors return False instead of raising."""
        mock_get.side_effect = requests.ConnectionError("refused")
        target = Blink1Target("http://localhost:8934")

        assert target.off() is False
        assert target.play_pattern(AlertPattern()) is False
        assert target.status_check(timeout=1.0) is False

    @patch("netpulse.alerts.targets.requests.get")
    def test_error_status(self, mock_get):
        """Test non-2xx responses return False."""
        response = Mock()
        response.raise_for_status.side_effect = requests.HTTPError("500")
        mock_get.return_value = response
        target = Blink1Target("http://localhost:8934")

        assert target.off() is False

    @patch("netpulse.alerts.targets.requests.get")
    def test_timeout(self, mock_get):
        """Test request timeouts return False."""
        mock_get.side_effect = requests.Timeout()
        target = Blink1Target("http://localhost:8934")

        assert target.play_pattern(AlertPattern()) is False
