from __future__ import annotations

import logging
import os
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(log_file: Optional[str], level: int = logging.INFO) -> logging.Handler:
    """Send log records to ``log_file``, or to stderr when it cannot be opened."""
    root = logging.getLogger()
    root.setLevel(level)
    handler: logging.Handler
    problem: Optional[OSError] = None
    if log_file:
        try:
            handler = logging.FileHandler(log_file, encoding="utf-8", errors="backslashreplace")
        except OSError as exc:
            problem = exc
            handler = logging.StreamHandler(sys.stderr)
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    if problem is not None:
        logging.getLogger(__name__).warning(
            "Could not open log file %s, logging to stderr: %s",
            os.path.abspath(log_file or ""),
            problem,
        )
    return handler
