"""
Thin wrapper around Python's ``logging`` module.

Every module gets its logger with ``get_logger(__name__)`` so that all
of them hang from the ``hollowprop`` root logger and a single
``set_level()`` call controls everything.
"""

import logging
import sys

ROOT_NAME = "hollowprop"
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def get_logger(name=None) -> logging.Logger:
    """Return a logger under the ``hollowprop`` hierarchy."""
    return logging.getLogger(name or ROOT_NAME)


def set_level(level=logging.INFO) -> None:
    """Set the log level for all hollowprop loggers at once."""
    logging.getLogger(ROOT_NAME).setLevel(level)


def setup(level=logging.INFO, stream=None) -> None:
    """Attach a stream handler to the root hollowprop logger.

    Extra calls only change the level.
    """
    root = logging.getLogger(ROOT_NAME)
    root.setLevel(level)
    if root.handlers:
        return
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S"))
    root.addHandler(handler)
