"""Logging setup for command-line use.

The library itself only emits records through ``logging.getLogger(__name__)``
and never installs handlers.
"""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(log_level: str = "WARNING") -> None:
    """Send ``tika_client`` records to stderr at ``log_level``.

    Unknown level names fall back to WARNING. Calling this twice replaces
    the handler instead of adding a second one.
    """

    level = getattr(logging, log_level.upper(), logging.WARNING)
    if not isinstance(level, int):
        level = logging.WARNING

    pkg_logger = logging.getLogger("tika_client")
    for handler in pkg_logger.handlers[:]:
        pkg_logger.removeHandler(handler)

    # stdout carries command output, so logs go to stderr.
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    )
    pkg_logger.addHandler(handler)
    pkg_logger.setLevel(level)
    pkg_logger.propagate = False
