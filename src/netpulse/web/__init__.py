"""
Web interface for network monitor.

Provides the REST API consumed by the dashboard frontend.
"""

from netpulse.web.app import create_app

__all__ = ["create_app"]
