"""Unit tests for the alert channel and target fan-out."""

from unittest.mock import MagicMock

import pytest

from netpulse.alerts.broadcast import BroadcastResult, TargetOutcome, broadcast
from netpulse.alerts.channel import TEST_PATTERN, AlertChannel
from netpulse.alerts.targets import AlertTarget
from netpulse.core.models import AlertPattern, PatternPatch


def make_target(url: str, ok: bool = True) -> MagicMock:
    """Mock alert target whose operations all return ``ok``."""
    target = MagicMock(spec=AlertTarget)
    target.base_url = url
    target.play_pattern.return_value = ok
    target.off.return_value = ok
    target.status_check.return_value = ok
    return target


@pytest.fixture
def targets():
    return [make_target(f"http://blink{i}:8934") for i in range(1, 4)]


@pytest.fixture
def channel(targets):
    return AlertChannel(targets)


class TestBroadcast:
    """Tests for the broadcast primitive."""

    def test_all_succeed(self, targets):
        """Test every target is called once."""
        result = broadcast(targets, lambda t: t.off(), "stop")

        assert result.total == 3
        assert result.successes == 3
        assert result.failures == 0
        assert result.any_success is True
        for target in targets:
            target.off.assert_called_once()

    def test_exception_is_isolated(self):
        """Test one raising target does not affect the others."""
        bad = make_target("http://bad")
        bad.off.side_effect = RuntimeError("boom")
        good = make_target("http://good")

        result = broadcast([bad, good], lambda t: t.off(), "stop")

        assert result.successes == 1
        assert result.failures == 1
        assert result.outcomes[0] == TargetOutcome(url="http://bad", success=False, error="boom")
        assert result.outcomes[1].success is True
        good.off.assert_called_once()

    def test_outcomes_keep_target_order(self):
        """Test outcomes are reported in target order."""
        targets = [make_target(f"http://t{i}", ok=(i % 2 == 0)) for i in range(6)]

        result = broadcast(targets, lambda t: t.off(), "stop")

        assert [o.url for o in result.outcomes] == [f"http://t{i}" for i in range(6)]
        assert [o.success for o in result.outcomes] == [True, False, True, False, True, False]

    def test_no_targets(self):
        """Test an empty target list reports nothing succeeded."""
        result = broadcast([], lambda t: t.off(), "stop")
        assert result.total == 0
        assert result.any_success is False

    def test_to_dict(self):
        """Test JSON conversion."""
        result = BroadcastResult(
            label="trigger",
            outcomes=[
                TargetOutcome(url="http://a", success=True),
                TargetOutcome(url="http://b", success=False, error="not acknowledged"),
            ],
        )
        data = result.to_dict()
        assert data["operation"] == "trigger"
        assert data["successes"] == 1
        assert data["failures"] == 1
        assert data["total"] == 2
        assert data["targets"][0] == {"url": "http://a", "success": True, "error": None}


class TestTrigger:
    """Tests for AlertChannel.trigger()."""

    def test_trigger_activates(self, channel, targets):
        """Test trigger plays the configured pattern on every target."""
        result = channel.trigger()

        assert channel.is_active is True
        assert result.successes == 3
        for target in targets:
            target.play_pattern.assert_called_once()
            pattern = target.play_pattern.call_args[0][0]
            assert pattern.colors == AlertPattern().colors

    def test_trigger_is_idempotent(self, channel, targets):
        """Test a second trigger without stop is a no-op."""
        channel.trigger()
        second = channel.trigger()

        assert second is None
        for target in targets:
            assert target.play_pattern.call_count == 1

    def test_trigger_disabled(self, targets):
        """Test trigger does nothing while disabled."""
        channel = AlertChannel(targets, enabled=False)

        assert channel.trigger() is None
        assert channel.is_active is False
        for target in targets:
            target.play_pattern.assert_not_called()

    def test_or_aggregation(self):
        """Test one success out of three is enough to activate."""
        targets = [
            make_target("http://blink1", ok=False),
            make_target("http://blink2", ok=True),
            make_target("http://blink3", ok=False),
        ]
        channel = AlertChannel(targets)

        result = channel.trigger()

        assert channel.is_active is True
        assert result.successes == 1
        assert result.failures == 2
        assert result.total == 3

    def test_all_fail_stays_idle(self):
        """Test the channel stays idle when no target acknowledges."""
        targets = [make_target("http://a", ok=False), make_target("http://b", ok=False)]
        channel = AlertChannel(targets)

        result = channel.trigger()

        assert channel.is_active is False
        assert result.failures == 2

        # Not latched, so the next cycle retries
        channel.trigger()
        assert targets[0].play_pattern.call_count == 2

    def test_raising_target_does_not_block(self):
        """Test an exception on one target still activates via the others."""
        bad = make_target("http://bad")
        bad.play_pattern.side_effect = ConnectionError("refused")
        good = make_target("http://good")
        channel = AlertChannel([bad, good])

        result = channel.trigger()

        assert channel.is_active is True
        assert result.successes == 1


class TestStop:
    """Tests for AlertChannel.stop()."""

    def test_stop_when_idle_is_noop(self, channel, targets):
        """Test stop does nothing when not alerting."""
        assert channel.stop() is None
        for target in targets:
            target.off.assert_not_called()

    def test_stop_after_trigger(self, channel, targets):
        """Test stop turns targets off and clears the latch."""
        channel.trigger()
        result = channel.stop()

        assert channel.is_active is False
        assert result.successes == 3
        for target in targets:
            target.off.assert_called_once()

    def test_stop_all_fail_stays_active(self, targets):
        """Test the latch is kept when no target acknowledges off."""
        channel = AlertChannel(targets)
        channel.trigger()
        for target in targets:
            target.off.return_value = False

        channel.stop()

        assert channel.is_active is True

    def test_trigger_after_stop(self, channel, targets):
        """Test a new trigger is sent after stop."""
        channel.trigger()
        channel.stop()
        channel.trigger()

        for target in targets:
            assert target.play_pattern.call_count == 2


class TestEnable:
    """Tests for enabling and disabling alerts."""

    def test_disable_while_active_stops(self, channel, targets):
        """Test disabling while alerting stops immediately."""
        channel.trigger()

        channel.set_enabled(False)

        assert channel.enabled is False
        assert channel.is_active is False
        for target in targets:
            target.off.assert_called_once()

    def test_disable_while_idle(self, channel, targets):
        """Test disabling while idle sends nothing."""
        channel.set_enabled(False)

        assert channel.enabled is False
        for target in targets:
            target.off.assert_not_called()

    def test_stop_allowed_while_disabled(self, channel, targets):
        """Test stop still works after disabling if the latch is stuck."""
        channel.trigger()
        for target in targets:
            target.off.return_value = False
        channel.set_enabled(False)
        assert channel.is_active is True

        for target in targets:
            target.off.return_value = True
        channel.stop()
        assert channel.is_active is False

    def test_toggle_flips(self, channel):
        """Test toggle without a value flips the state."""
        assert channel.toggle() is False
        assert channel.toggle() is True

    def test_toggle_explicit(self, channel):
        """Test toggle with an explicit value."""
        assert channel.toggle(True) is True
        assert channel.toggle(False) is False
        assert channel.toggle(False) is False

    def test_status(self, channel):
        """Test status report."""
        channel.trigger()
        status = channel.status()
        assert status["enabled"] is True
        assert status["is_active"] is True
        assert len(status["targets"]) == 3


class TestTest:
    """Tests for test() and test_pattern()."""

    def test_test_uses_fixed_pattern(self, channel, targets):
        """Test the test blink ignores the configured pattern."""
        channel.update_pattern({"colors": ["#00ff00"]})

        result = channel.test()

        assert result.any_success is True
        for target in targets:
            assert target.play_pattern.call_args[0][0] == TEST_PATTERN

    def test_test_ignores_state(self, targets):
        """Test test() works while disabled and does not latch."""
        channel = AlertChannel(targets, enabled=False)

        result = channel.test()

        assert result.successes == 3
        assert channel.is_active is False

    def test_test_does_not_clear_latch(self, channel):
        """Test test() leaves an active alert active."""
        channel.trigger()
        channel.test()
        assert channel.is_active is True

    def test_test_reports_failure(self):
        """Test test() reports no success when every target fails."""
        channel = AlertChannel([make_target("http://a", ok=False)])
        assert channel.test().any_success is False

    def test_test_pattern_not_persisted(self, channel, targets):
        """Test previewing a pattern does not save it."""
        candidate = AlertPattern(colors=["#abcdef"], step_duration_seconds=1.0, repeat_count=1)

        channel.test_pattern(candidate)

        assert targets[0].play_pattern.call_args[0][0].colors == ["#abcdef"]
        assert channel.pattern.colors == AlertPattern().colors


class TestUpdatePattern:
    """Tests for update_pattern()."""

    def test_partial_update(self, channel):
        """Test only supplied fields change."""
        pattern = channel.update_pattern({"colors": ["#ff00ff"]})

        assert pattern.colors == ["#ff00ff"]
        assert pattern.step_duration_seconds == 0.2
        assert pattern.repeat_count == 8

    def test_invalid_field_ignored_valid_applied(self, channel):
        """Test a malformed repeat count is dropped while duration applies."""
        pattern = channel.update_pattern({"repeat_count": -5, "step_duration_seconds": 0.75})

        assert pattern.repeat_count == 8
        assert pattern.step_duration_seconds == 0.75

    def test_accepts_patch(self, channel):
        """Test a PatternPatch can be passed directly."""
        channel.update_pattern(PatternPatch(repeat_count=2))
        assert channel.pattern.repeat_count == 2

    def test_trigger_uses_updated_pattern(self, channel, targets):
        """Test trigger sends the current pattern."""
        channel.update_pattern({"colors": ["#00ff00"], "repeat_count": 1})
        channel.trigger()

        sent = targets[0].play_pattern.call_args[0][0]
        assert sent.colors == ["#00ff00"]
        assert sent.repeat_count == 1

    def test_pattern_property_is_copy(self, channel):
        """Test mutating the returned pattern does not affect the channel."""
        channel.pattern.colors.append("#000000")
        assert len(channel.pattern.colors) == 3


class TestConnectivity:
    """Tests for check_connectivity()."""

    def test_mixed_connectivity(self):
        """Test per-target and aggregate connectivity."""
        targets = [
            make_target("http://a", ok=True),
            make_target("http://b", ok=False),
            make_target("http://c", ok=True),
        ]
        targets[1].status_check.side_effect = TimeoutError()
        channel = AlertChannel(targets, status_timeout=3.0)

        report = channel.check_connectivity()

        assert report.targets == [("http://a", True), ("http://b", False), ("http://c", True)]
        assert report.connected_count == 2
        assert report.any_connected is True
        targets[0].status_check.assert_called_once_with(3.0)

    def test_no_targets(self):
        """Test an empty channel reports nothing connected."""
        report = AlertChannel([]).check_connectivity()
        assert report.connected_count == 0
        assert report.any_connected is False
        assert report.to_dict() == {"targets": [], "connected_count": 0, "any_connected": False}

    def test_does_not_change_state(self, channel):
        """Test connectivity checks leave the latch alone."""
        channel.check_connectivity()
        assert channel.is_active is False
