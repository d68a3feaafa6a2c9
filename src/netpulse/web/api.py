"""
REST API endpoints for network monitor.
"""

import logging
from datetime import datetime, timezone

from flask import Blueprint, g, jsonify, request

from netpulse.core.models import AlertPattern, PatternPatch

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__)


def _pattern_body(data) -> dict:
    """Accept both {"pattern": {...}} and bare pattern fields."""
    if isinstance(data, dict) and isinstance(data.get("pattern"), dict):
        return data["pattern"]
    return data if isinstance(data, dict) else {}


def _pattern_json(pattern: AlertPattern) -> dict:
    """Pattern fields plus the "time" and "repeats" keys the dashboard reads."""
    data = pattern.to_dict()
    data["time"] = pattern.step_duration_seconds
    data["repeats"] = pattern.repeat_count
    return data


# --- Device Endpoints ---

@api_bp.route("/devices", methods=["GET"])
def list_devices():
    """List all devices with their health state."""
    return jsonify(g.monitor.snapshot())


@api_bp.route("/devices/<device_id>", methods=["GET"])
def get_device(device_id: str):
    """Get device details."""
    inventory = g.monitor.inventory
    with inventory.lock:
        device = inventory.get(device_id)
        if not device:
            return jsonify({"error": "Device not found"}), 404
        return jsonify(device.to_dict())


@api_bp.route("/devices", methods=["POST"])
def create_device():
    """Add a device to the inventory."""
    data = request.get_json(silent=True)
    if not data or "name" not in data:
        return jsonify({"error": "name is required"}), 400

    try:
        device = g.monitor.inventory.add(
            name=data["name"],
            address=data.get("address") or data.get("ip"),
            category=data.get("category"),
            vendor=data.get("vendor"),
            location=data.get("location"),
        )
        return jsonify(device.to_dict()), 201
    except ValueError as e:
        return jsonify({"error": str(e)}), 400


@api_bp.route("/devices/<device_id>", methods=["PUT"])
def update_device(device_id: str):
    """Update descriptive device fields; health fields are read-only."""
    data = request.get_json(silent=True) or {}

    fields = {
        key: data[key]
        for key in ("name", "address", "category", "vendor", "location")
        if key in data
    }
    if "address" not in fields and "ip" in data:
        fields["address"] = data["ip"]

    inventory = g.monitor.inventory
    with inventory.lock:
        device = inventory.update(device_id, **fields)
        if not device:
            return jsonify({"error": "Device not found"}), 404
        return jsonify(device.to_dict())


@api_bp.route("/devices/<device_id>", methods=["DELETE"])
def delete_device(device_id: str):
    """Remove a device from the inventory."""
    if g.monitor.inventory.delete(device_id):
        return "", 204
    return jsonify({"error": "Device not found"}), 404


@api_bp.route("/ping-now", methods=["POST"])
def ping_now():
    """Run a poll cycle immediately and return the updated devices."""
    devices = g.monitor.poll_now()
    return jsonify({"message": "Ping completed", "devices": devices})


@api_bp.route("/stats", methods=["GET"])
def get_stats():
    """Fleet status counts and average response time."""
    return jsonify(g.monitor.stats().to_dict())


# --- Status Endpoints ---

@api_bp.route("/health", methods=["GET"])
def health_check():
    """Service health, including alert target connectivity."""
    channel = g.monitor.alert_channel
    report = channel.check_connectivity()

    alerts = {
        "enabled": channel.enabled,
        "is_active": channel.is_active,
    }
    alerts.update(report.to_dict())

    return jsonify({
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "alerts": alerts,
    })


# --- blink(1) Endpoints ---

@api_bp.route("/blink1/status", methods=["GET"])
def blink1_status():
    """Alert latch state."""
    return jsonify(g.monitor.alert_channel.status())


@api_bp.route("/blink1/toggle", methods=["POST"])
def blink1_toggle():
    """Enable/disable alerts; without "enabled" the current state is flipped."""
    data = request.get_json(silent=True) or {}
    enabled = data.get("enabled")

    if enabled is not None and not isinstance(enabled, bool):
        return jsonify({"error": "enabled must be true or false"}), 400

    new_state = g.monitor.alert_channel.toggle(enabled)
    return jsonify({"enabled": new_state})


@api_bp.route("/blink1/test", methods=["POST"])
def blink1_test():
    """Play the short test pattern on every target."""
    result = g.monitor.alert_channel.test()
    success = result.any_success
    return jsonify({
        "success": success,
        "message": (
            "Test blink triggered on all devices"
            if success
            else "Failed to trigger test blink"
        ),
        "result": result.to_dict(),
    })


@api_bp.route("/blink1/pattern", methods=["GET"])
def get_pattern():
    """Current alert pattern."""
    return jsonify({"pattern": _pattern_json(g.monitor.alert_channel.pattern)})


@api_bp.route("/blink1/pattern", methods=["POST"])
def set_pattern():
    """Merge the valid fields of the submitted pattern."""
    data = request.get_json(silent=True)
    pattern = g.monitor.alert_channel.update_pattern(_pattern_body(data))
    return jsonify({"pattern": _pattern_json(pattern)})


@api_bp.route("/blink1/test-pattern", methods=["POST"])
def test_pattern():
    """Preview a pattern without saving it."""
    channel = g.monitor.alert_channel
    patch = PatternPatch.from_dict(_pattern_body(request.get_json(silent=True)))
    candidate = patch.apply_to(channel.pattern)

    result = channel.test_pattern(candidate)
    return jsonify({
        "success": result.any_success,
        "pattern": _pattern_json(candidate),
        "result": result.to_dict(),
    })
