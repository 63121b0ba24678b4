from __future__ import annotations

import logging
import os
from typing import Optional, Union

from pythonjsonlogger import jsonlogger

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Third-party loggers that drown out chunk diagnostics at INFO
NOISY_LOGGERS = ("werkzeug", "urllib3")


def _resolve_level(level: Union[int, str, None]) -> int:
    if level is None:
        level = os.getenv("GG_NOTES_LOG_LEVEL", "INFO")
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level '{level}'")
    return resolved


def configure_logging(
        level: Union[int, str, None] = None,
        force_format: Optional[str] = None,
) -> logging.Handler:
    """
    Configure the root logger for the notes.

    Modes:
    - JSON (default) when exporting or serving the browser; `levelname`
      is emitted as `level`
    - plain text for local authoring

    Selection Order:
        1) force_format / level arguments if provided
        2) env vars GG_NOTES_LOG_FORMAT / GG_NOTES_LOG_LEVEL
        3) default = "json" at INFO

    Returns the installed handler.
    """
    format_mode = (force_format or os.getenv("GG_NOTES_LOG_FORMAT", "json")).lower()
    resolved_level = _resolve_level(level)

    if format_mode == "plain":
        formatter: logging.Formatter = logging.Formatter(LOG_FORMAT)
    elif format_mode == "json":
        formatter = jsonlogger.JsonFormatter(LOG_FORMAT, rename_fields={"levelname": "level"})
    else:
        raise ValueError(f"Unknown log format '{format_mode}'. Expected 'json' or 'plain'")

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(resolved_level)
    # Replace any existing handlers to avoid duplicate logs
    root.handlers.clear()
    root.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(resolved_level, logging.WARNING))

    return handler
