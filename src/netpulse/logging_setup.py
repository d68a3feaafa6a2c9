"""Logging configuration for the netpulse command line."""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "INFO", log_file: Optional[Path] = None) -> None:
    """
    Configure root logging to stderr and, optionally, a rotating file.

    Args:
        level: Log level name (e.g. "INFO", "DEBUG")
        log_file: Optional path for a rotating log file
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    # Repeated calls (e.g. several CLI invocations in one process) reuse handlers
    existing = {h.get_name() for h in root.handlers}

    if "netpulse-console" not in existing:
        console = logging.StreamHandler()
        console.set_name("netpulse-console")
        console.setFormatter(fmt)
        root.addHandler(console)

    if log_file and "netpulse-file" not in existing:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        fh = RotatingFileHandler(
            str(log_file), maxBytes=2_000_000, backupCount=5, encoding="utf-8"
        )
        fh.set_name("netpulse-file")
        fh.setFormatter(fmt)
        root.addHandler(fh)

    # Werkzeug logs every request at INFO
    logging.getLogger("werkzeug").setLevel(logging.WARNING)
