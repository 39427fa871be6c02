"""
Logging setup.

Modules obtain loggers through ``setup_logger(__name__)``; the application
entry point calls ``configure_logging`` once to install the root handler.
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_configured = False


def configure_logging(level: str = "INFO") -> None:
    """Install a single stream handler on the root logger."""
    global _configured
    root = logging.getLogger()
    root.setLevel(level.upper())
    if _configured:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    root.addHandler(handler)

    # SQLAlchemy echoes through its own logger when DB_ECHO is set
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    _configured = True


def setup_logger(name: str) -> logging.Logger:
    """Get a module logger."""
    return logging.getLogger(name)
