"""
Command-line interface for network monitor.

Provides commands for running the API server, one-off checks, and
controlling the blink(1) alert targets.
"""

import sys
from pathlib import Path

import click
import yaml

from netpulse import __version__
from netpulse.core.config import (
    DEFAULT_CONFIG_FILE,
    Config,
    load_config,
    save_config,
)
from netpulse.core.inventory import DeviceInventory
from netpulse.core.models import DeviceStatus
from netpulse.health.monitor import Monitor, format_device_table
from netpulse.logging_setup import setup_logging


def _alert_monitor(ctx: click.Context) -> Monitor:
    """Monitor with an empty inventory, used by the alert commands."""
    return Monitor(ctx.obj["config"], inventory=DeviceInventory())


@click.group()
@click.version_option(version=__version__, prog_name="netpulse")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option(
    "-c", "--config", "config_path", type=click.Path(exists=True, path_type=Path),
    help="Path to config file"
)
@click.pass_context
def main(ctx: click.Context, verbose: bool, config_path: Path | None) -> None:
    """Network Monitor - Ping hosts and raise blink(1) alerts when they go offline."""
    ctx.ensure_object(dict)
    try:
        config = load_config(config_path)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    ctx.obj["verbose"] = verbose
    ctx.obj["config"] = config
    setup_logging("DEBUG" if verbose else config.log_level, config.log_file)


@main.command("serve")
@click.option("--host", "-H", help="Interface to bind (default from config)")
@click.option("--port", "-p", type=int, help="Port to listen on (default from config)")
@click.option(
    "--no-scheduler", is_flag=True, help="Do not poll automatically (manual ping-now only)"
)
@click.pass_context
def serve_cmd(
    ctx: click.Context, host: str | None, port: int | None, no_scheduler: bool
) -> None:
    """Run the REST API server and the poll scheduler."""
    from netpulse.web.app import create_app

    config: Config = ctx.obj["config"]
    host = host or config.web.host
    port = port or config.web.port

    monitor = Monitor(config)
    app = create_app(config, monitor=monitor)

    if not no_scheduler:
        monitor.start()

    click.echo(f"Network Monitor backend running on http://{host}:{port}")
    if not no_scheduler:
        click.echo(f"Pinging devices every {config.poll.interval:g} seconds...")

    try:
        app.run(host=host, port=port, threaded=True, use_reloader=False)
    finally:
        monitor.stop()


@main.command("check")
@click.option("--details", "-d", is_flag=True, help="Show probe counters")
@click.option("--alert", is_flag=True, help="Also update the blink(1) alert state")
@click.pass_context
def check_cmd(ctx: click.Context, details: bool, alert: bool) -> None:
    """Ping every configured device once and print the results.

    Exits with status 1 if any device is offline.
    """
    config: Config = ctx.obj["config"]
    if not config.devices:
        click.echo("No devices configured.")
        return

    monitor = Monitor(config, targets=None if alert else [])
    try:
        result = monitor.poll()
        if result.alert_future is not None:
            result.alert_future.result()
        click.echo(format_device_table(result.devices, show_details=details))
    finally:
        monitor.stop()

    offline = [d for d in result.devices if d.status == DeviceStatus.OFFLINE]
    if offline:
        click.echo(f"\n{len(offline)} device(s) offline", err=True)
        sys.exit(1)


# --- Alert Commands ---

@main.group("alerts")
def alerts_group() -> None:
    """Inspect and control blink(1) alert targets."""
    pass


@alerts_group.command("status")
@click.pass_context
def alerts_status_cmd(ctx: click.Context) -> None:
    """Show connectivity of each alert target."""
    monitor = _alert_monitor(ctx)
    try:
        report = monitor.alert_channel.check_connectivity()
    finally:
        monitor.stop()

    if not report.targets:
        click.echo("No alert targets configured.")
        return

    click.echo(f"{'TARGET':<40} {'CONNECTED':<10}")
    click.echo("-" * 51)
    for url, connected in report.targets:
        click.echo(f"{url:<40} {'yes' if connected else 'no':<10}")

    click.echo(f"\n{report.connected_count}/{len(report.targets)} target(s) connected")


@alerts_group.command("test")
@click.pass_context
def alerts_test_cmd(ctx: click.Context) -> None:
    """Blink the test pattern on every alert target."""
    monitor = _alert_monitor(ctx)
    try:
        result = monitor.alert_channel.test()
    finally:
        monitor.stop()

    _echo_broadcast(result)
    if not result.any_success:
        sys.exit(1)


@alerts_group.command("off")
@click.pass_context
def alerts_off_cmd(ctx: click.Context) -> None:
    """Turn every alert target off."""
    monitor = _alert_monitor(ctx)
    try:
        result = monitor.alert_channel.force_off()
    finally:
        monitor.stop()

    _echo_broadcast(result)
    if not result.any_success:
        sys.exit(1)


def _echo_broadcast(result) -> None:
    """Print per-target results of an alert operation."""
    if not result.total:
        click.echo("No alert targets configured.")
        return

    for outcome in result.outcomes:
        mark = "✓" if outcome.success else "✗"
        line = f"{mark} {outcome.url}"
        if outcome.error:
            line += f" ({outcome.error})"
        click.echo(line)
    click.echo(f"\n{result.successes}/{result.total} target(s) succeeded")


# --- Config Commands ---

@main.group("config")
def config_group() -> None:
    """Inspect and create configuration files."""
    pass


@config_group.command("show")
@click.pass_context
def config_show_cmd(ctx: click.Context) -> None:
    """Print the effective configuration as YAML."""
    config: Config = ctx.obj["config"]
    click.echo(yaml.dump(config.to_dict(), default_flow_style=False, sort_keys=False))


@config_group.command("init")
@click.option(
    "--path", "-o", "output", type=click.Path(path_type=Path), default=DEFAULT_CONFIG_FILE,
    show_default=True, help="Where to write the config file"
)
@click.option("--force", is_flag=True, help="Overwrite an existing file")
@click.pass_context
def config_init_cmd(ctx: click.Context, output: Path, force: bool) -> None:
    """Write the effective configuration to a YAML file."""
    if output.exists() and not force:
        click.echo(f"Error: {output} already exists (use --force to overwrite)", err=True)
        sys.exit(1)

    save_config(ctx.obj["config"], output)
    click.echo(f"Wrote configuration to {output}")


if __name__ == "__main__":
    main()
