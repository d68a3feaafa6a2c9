"""
Flask application factory for network monitor REST API.
"""

from typing import Optional

from flask import Flask, g, jsonify

from netpulse.core.config import Config, load_config
from netpulse.health.monitor import Monitor


def create_app(
    config: Optional[Config] = None,
    monitor: Optional[Monitor] = None,
) -> Flask:
    """
    Create and configure Flask application.

    Args:
        config: Optional Config instance. If None, loads from default location.
        monitor: Optional Monitor instance. If None, one is built from config.
            The factory never starts scheduled polling; callers own that.

    Returns:
        Configured Flask application
    """
    app = Flask(__name__)

    if config is None:
        config = monitor.config if monitor else load_config()
    if monitor is None:
        monitor = Monitor(config)

    app.config["NETPULSE_CONFIG"] = config
    app.extensions["netpulse"] = monitor

    from netpulse.web.api import api_bp

    app.register_blueprint(api_bp, url_prefix="/api")

    @app.before_request
    def before_request():
        """Expose the monitor to request handlers."""
        g.monitor = app.extensions["netpulse"]
        g.config = app.config["NETPULSE_CONFIG"]

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({"error": "Not found"}), 404

    return app


def get_monitor(app: Flask) -> Monitor:
    """Get the monitor attached to an application."""
    return app.extensions["netpulse"]
