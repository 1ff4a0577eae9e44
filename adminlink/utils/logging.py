"""JSON log lines for linking runs, with per-run context fields."""
import json
import logging
import traceback
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Optional

LOGGER_NAME = "adminlink"

# Fields attached to every line while a run is active; innermost wins
_context: Dict[str, Any] = {}


def setup_logging(level: str = "INFO"):
    """Print adminlink's JSON lines to stderr at ``level``; unknown names mean INFO."""
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        numeric = logging.INFO
    logging.basicConfig(format='%(message)s', handlers=[logging.StreamHandler()])
    logging.getLogger(LOGGER_NAME).setLevel(numeric)


@contextmanager
def log_context(**fields) -> Iterator[None]:
    """
    Attach ``fields`` to every structured line logged inside the block.

    Usage:
        with log_context(run="cascade", children="adm3.geojson"):
            ...
    """
    previous = dict(_context)
    _context.update(fields)
    try:
        yield
    finally:
        _context.clear()
        _context.update(previous)


def log_structured(level: str, message: str, **kwargs):
    """
    Log one JSON object per line.

    Args:
        level: Log level (info, warning, error, etc.)
        message: Log message
        **kwargs: Additional structured fields; they override context fields
    """
    log_entry = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "level": level.upper(),
        "message": message,
        **_context,
        **kwargs
    }

    logger = logging.getLogger(LOGGER_NAME)
    getattr(logger, level.lower(), logger.info)(json.dumps(log_entry, default=str))


def log_error(error: Exception, context: Optional[Dict[str, Any]] = None):
    """
    Log an exception with its type, traceback and caller context.

    Args:
        error: The exception being reported
        context: Extra fields (module, function, paths...) to attach
    """
    log_structured(
        "error",
        str(error),
        error_type=type(error).__name__,
        traceback="".join(traceback.format_exception(type(error), error, error.__traceback__)),
        **(context or {})
    )
