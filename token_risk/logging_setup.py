"""
Logging setup for callers of the engine.

The engine itself only uses module loggers; configuring handlers is the
caller's job.
"""

import json
import logging
import sys
from typing import Optional


def setup_logging(
    level: str = "INFO",
    log_format: str = "text",
    run_id: Optional[str] = None,
) -> logging.Logger:
    """
    Set up stdout logging.

    Args:
        level: Log level name
        log_format: Output format (json or text)
        run_id: Identifier attached to every record, e.g. the token address

    Returns:
        The token_risk package logger
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    if log_format == "json":
        formatter = logging.Formatter(
            json.dumps({
                "timestamp": "%(asctime)s",
                "level": "%(levelname)s",
                "logger": "%(name)s",
                "message": "%(message)s",
                "run_id": run_id or "",
            })
        )
    else:
        formatter = logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = [handler]

    return logging.getLogger("token_risk")
