"""Logging setup for the API server."""

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
HANDLER_NAME = "chartedge"


def setup_logging(level: str = "INFO") -> None:
    """Send application logs to stdout. Safe to call more than once."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    # uvicorn --reload re-imports the app; avoid stacking handlers
    for handler in root.handlers:
        if handler.get_name() == HANDLER_NAME:
            return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    handler.set_name(HANDLER_NAME)
    root.addHandler(handler)
