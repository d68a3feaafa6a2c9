"""
Configuration management for network monitor.

Loads configuration from YAML files with environment variable overrides.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml


# Default configuration paths
DEFAULT_CONFIG_DIR = Path.home() / ".config" / "netpulse"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"
SYSTEM_CONFIG_FILE = Path("/etc/netpulse/config.yaml")

DEFAULT_ALERT_TARGET = "http://localhost:8934"


@dataclass
class PollConfig:
    """Polling configuration."""

    interval: float = 30.0
    probe_timeout: float = 10.0
    max_workers: int = 16


@dataclass
class AlertConfig:
    """Alert channel (blink1-server) configuration."""

    targets: list[str] = field(default_factory=lambda: [DEFAULT_ALERT_TARGET])
    request_timeout: float = 5.0
    status_timeout: float = 3.0
    enabled: bool = True


@dataclass
class WebConfig:
    """HTTP API server configuration."""

    host: str = "0.0.0.0"
    port: int = 3001


@dataclass
class DeviceEntry:
    """Device declared in the configuration file."""

    name: str
    address: str
    category: str = "physical-server"
    vendor: Optional[str] = None
    location: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DeviceEntry":
        """
        Create DeviceEntry from dictionary.

        Raises:
            ValueError: If the entry has no name or no address/ip
        """
        if not isinstance(data, dict):
            raise ValueError(f"Invalid device entry: {data!r}")

        name = data.get("name")
        address = data.get("address") or data.get("ip")
        if not name or not address:
            raise ValueError(
                f"Device entry needs a name and an address (or ip): {data!r}"
            )

        return cls(
            name=str(name),
            address=str(address),
            category=data.get("category", "physical-server"),
            vendor=data.get("vendor"),
            location=data.get("location"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert DeviceEntry to dictionary."""
        data = {"name": self.name, "address": self.address, "category": self.category}
        if self.vendor:
            data["vendor"] = self.vendor
        if self.location:
            data["location"] = self.location
        return data


@dataclass
class Config:
    """Main configuration for network monitor."""

    poll: PollConfig = field(default_factory=PollConfig)
    alerts: AlertConfig = field(default_factory=AlertConfig)
    web: WebConfig = field(default_factory=WebConfig)
    devices: list[DeviceEntry] = field(default_factory=list)
    log_level: str = "INFO"
    log_file: Optional[Path] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Config":
        """Create Config from dictionary."""
        poll_data = data.get("poll", {})
        alerts_data = data.get("alerts", {})
        web_data = data.get("web", {})

        poll = PollConfig(
            interval=poll_data.get("interval", 30.0),
            probe_timeout=poll_data.get("probe_timeout", 10.0),
            max_workers=poll_data.get("max_workers", 16),
        )

        targets = alerts_data.get("targets", [DEFAULT_ALERT_TARGET])
        if isinstance(targets, str):
            targets = parse_targets(targets)

        alerts = AlertConfig(
            targets=list(targets),
            request_timeout=alerts_data.get("request_timeout", 5.0),
            status_timeout=alerts_data.get("status_timeout", 3.0),
            enabled=alerts_data.get("enabled", True),
        )

        web = WebConfig(
            host=web_data.get("host", "0.0.0.0"),
            port=web_data.get("port", 3001),
        )

        devices = [DeviceEntry.from_dict(d) for d in data.get("devices") or []]

        return cls(
            poll=poll,
            alerts=alerts,
            web=web,
            devices=devices,
            log_level=data.get("log_level", "INFO"),
            log_file=Path(data["log_file"]) if data.get("log_file") else None,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert Config to dictionary."""
        return {
            "poll": {
                "interval": self.poll.interval,
                "probe_timeout": self.poll.probe_timeout,
                "max_workers": self.poll.max_workers,
            },
            "alerts": {
                "targets": list(self.alerts.targets),
                "request_timeout": self.alerts.request_timeout,
                "status_timeout": self.alerts.status_timeout,
                "enabled": self.alerts.enabled,
            },
            "web": {
                "host": self.web.host,
                "port": self.web.port,
            },
            "devices": [d.to_dict() for d in self.devices],
            "log_level": self.log_level,
            "log_file": str(self.log_file) if self.log_file else None,
        }


def parse_targets(value: str) -> list[str]:
    """Split a comma-separated target list, dropping blanks and trailing slashes."""
    return [t.strip().rstrip("/") for t in value.split(",") if t.strip()]


def load_config(config_path: Optional[Path] = None) -> Config:
    """
    Load configuration from YAML file.

    Search order:
    1. Explicit path if provided
    2. NETPULSE_CONFIG environment variable
    3. ~/.config/netpulse/config.yaml
    4. /etc/netpulse/config.yaml
    5. Default values

    Environment variable overrides:
    - NETPULSE_ALERT_TARGETS: Comma-separated blink1-server base URLs
    - BLINK1_SERVER_URL: Single target (only if NETPULSE_ALERT_TARGETS unset)
    - NETPULSE_POLL_INTERVAL: Override poll.interval
    - NETPULSE_PROBE_TIMEOUT: Override poll.probe_timeout
    - NETPULSE_HOST: Override web.host
    - NETPULSE_PORT / PORT: Override web.port
    - NETPULSE_LOG_LEVEL: Override log_level
    - NETPULSE_LOG_FILE: Override log_file

    Args:
        config_path: Optional explicit path to config file

    Returns:
        Loaded configuration

    Raises:
        ValueError: If a device entry is malformed
    """
    # Determine config file path
    if config_path:
        paths_to_try = [config_path]
    else:
        env_path = os.environ.get("NETPULSE_CONFIG")
        paths_to_try = []
        if env_path:
            paths_to_try.append(Path(env_path))
        paths_to_try.extend([DEFAULT_CONFIG_FILE, SYSTEM_CONFIG_FILE])

    # Try to load from file
    config_data = {}
    for path in paths_to_try:
        if path.exists():
            try:
                with open(path) as f:
                    config_data = yaml.safe_load(f) or {}
                break
            except (OSError, yaml.YAMLError):
                continue

    config = Config.from_dict(config_data)
    config = _apply_env_overrides(config)

    return config


def _apply_env_overrides(config: Config) -> Config:
    """Apply environment variable overrides to config."""
    if "NETPULSE_ALERT_TARGETS" in os.environ:
        config.alerts.targets = parse_targets(os.environ["NETPULSE_ALERT_TARGETS"])
    elif "BLINK1_SERVER_URL" in os.environ:
        config.alerts.targets = parse_targets(os.environ["BLINK1_SERVER_URL"])

    if "NETPULSE_POLL_INTERVAL" in os.environ:
        try:
            config.poll.interval = float(os.environ["NETPULSE_POLL_INTERVAL"])
        except ValueError:
            pass

    if "NETPULSE_PROBE_TIMEOUT" in os.environ:
        try:
            config.poll.probe_timeout = float(os.environ["NETPULSE_PROBE_TIMEOUT"])
        except ValueError:
            pass

    if "NETPULSE_HOST" in os.environ:
        config.web.host = os.environ["NETPULSE_HOST"]

    port = os.environ.get("NETPULSE_PORT") or os.environ.get("PORT")
    if port:
        try:
            config.web.port = int(port)
        except ValueError:
            pass

    if "NETPULSE_LOG_LEVEL" in os.environ:
        config.log_level = os.environ["NETPULSE_LOG_LEVEL"]

    if "NETPULSE_LOG_FILE" in os.environ:
        config.log_file = Path(os.environ["NETPULSE_LOG_FILE"])

    return config


def save_config(config: Config, path: Path) -> None:
    """
    Save configuration to YAML file.

    Args:
        config: Configuration to save
        path: Path to save to
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        f.write("# Network Monitor Configuration\n")
        f.write("# See documentation for all options\n\n")
        yaml.dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)


def get_default_config() -> Config:
    """Get default configuration without loading from file."""
    return Config()
