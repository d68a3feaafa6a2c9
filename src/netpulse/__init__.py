"""
Network Pulse (netpulse).

Network health dashboard backend. Periodically pings monitored hosts,
tracks their uptime, and drives blink(1) LED alerts when hosts go offline.
"""

__version__ = "0.1.0"
