"""
logging.py – Log format and level for the moderation service.

Modules log through logging.getLogger(__name__), so everything under the
toilet_moderation package inherits what is set here.
"""

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Install the root handler once and return the package logger."""
    logging.basicConfig(format=LOG_FORMAT, level=level.upper())
    package_logger = logging.getLogger("toilet_moderation")
    package_logger.setLevel(level.upper())
    return package_logger
