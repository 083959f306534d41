"""
Logging configuration for the handoff service.
"""

import logging
import sys


def setup_logging(level: str = "DEBUG") -> logging.Logger:
    """Setup logging with proper format and handlers."""

    logger = logging.getLogger("handoff")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Remove existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)

    formatter = logging.Formatter(
        '[%(asctime)s] [%(name)s] [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    handler.setFormatter(formatter)

    logger.addHandler(handler)

    # Prevent propagation to root logger
    logger.propagate = False

    return logger


# Global logger instance, reconfigured with the settings level on startup
logger = setup_logging()
