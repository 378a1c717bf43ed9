"""Logging configuration for scoria.

Library modules only ever do::

    import logging
    log = logging.getLogger(__name__)

Applications embedding the engine call :func:`configure_logging` once at
startup.  The level comes from the ``SCORIA_LOG_LEVEL`` environment variable
(DEBUG, INFO, WARNING, ERROR; default INFO).
"""

from __future__ import annotations

import logging
import os
import sys

PACKAGE_LOGGER = "scoria"


def configure_logging(level: str | None = None) -> logging.Logger:
    """Attach a stderr handler to the ``scoria`` logger.

    Subsequent calls are no-ops and return the already-configured logger.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)

    # Skip if already configured (has handlers)
    if logger.handlers:
        return logger

    level_name = (level or os.environ.get("SCORIA_LOG_LEVEL", "INFO")).upper()
    resolved = getattr(logging, level_name, logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(resolved)
    handler.setFormatter(
        logging.Formatter(
            fmt="[%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )

    logger.setLevel(resolved)
    logger.addHandler(handler)
    # Prevent duplicate messages through the root logger
    logger.propagate = False
    return logger
