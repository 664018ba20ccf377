"""
Logging setup.

Configures the root logger once at application startup.
"""

import logging

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging with a single stream handler."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    # SQL echo is controlled by settings.db_echo, keep the engine quiet otherwise
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
