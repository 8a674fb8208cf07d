"""Log setup shared by ``lodprep`` and ``lodprep-build-db``.

Every module logs under the ``lodprep`` logger. Records go to stderr as
plain text; with ``--log-json FILE`` they are also appended to FILE, one
JSON object per line, carrying the measurement/sensor context passed in
``extra``:

    logger = get_logger(__name__)
    logger.warning("Sensor skipped", extra={"measurement_id": 2, "sensor_id": 4})
"""

from __future__ import annotations

import json
import logging
import os
import sys
import traceback
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple


_configured = False
_root_logger_name = "lodprep"

# record attributes copied into JSON lines when a caller sets them
_EXTRA_FIELDS = ("measurement_id", "sensor_id", "sample_count", "block_count", "error_type", "operation", "duration_ms")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _format_traceback(record: logging.LogRecord) -> str:
    return "".join(traceback.format_exception(*record.exc_info)) if record.exc_info else ""


class JSONFormatter(logging.Formatter):
    """One JSON object per record, with the sensor context fields that are present."""

    def format(self, record: logging.LogRecord) -> str:
        output: Dict[str, Any] = {
            "ts": _utc_now().isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        output.update({key: getattr(record, key) for key in _EXTRA_FIELDS if hasattr(record, key)})
        tb = _format_traceback(record)
        if tb:
            output["traceback"] = tb
        return json.dumps(output, default=str)


class ConsoleFormatter(logging.Formatter):
    """``[time] LEVEL [module] message`` lines for stderr."""

    LEVEL_COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, use_color: bool = True):
        super().__init__()
        self.use_color = use_color and sys.stderr.isatty()

    def _level(self, levelname: str) -> str:
        if not self.use_color:
            return f"{levelname:8}"
        return f"{self.LEVEL_COLORS.get(levelname, '')}{levelname:8}{self.RESET}"

    def format(self, record: logging.LogRecord) -> str:
        module = record.name[len(_root_logger_name) + 1:] if record.name.startswith(_root_logger_name + ".") else record.name
        line = f"[{_utc_now():%Y-%m-%d %H:%M:%S}] {self._level(record.levelname)} [{module}] {record.getMessage()}"
        tb = _format_traceback(record)
        return f"{line}\n{tb}" if tb else line


def _resolve_level(level: Optional[str]) -> int:
    if level is None:
        if os.environ.get("LODPREP_DEBUG", "").strip() in ("1", "true", "yes"):
            level = "DEBUG"
        else:
            level = os.environ.get("LODPREP_LOG_LEVEL", "INFO")
    return getattr(logging, str(level).upper(), logging.INFO)


def _build_handlers(json_file: Optional[str], use_color: bool) -> Tuple[List[logging.Handler], Optional[OSError]]:
    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(ConsoleFormatter(use_color=use_color))
    handlers: List[logging.Handler] = [console]
    if not json_file:
        return handlers, None
    try:
        json_handler = logging.FileHandler(json_file, mode="a", encoding="utf-8")
    except OSError as exc:
        return handlers, exc
    json_handler.setFormatter(JSONFormatter())
    handlers.append(json_handler)
    return handlers, None


def configure_logging(
    *,
    level: Optional[str] = None,
    json_file: Optional[str] = None,
    use_color: bool = True,
) -> None:
    """(Re)install the stderr handler and, if ``json_file`` is given, the JSON-lines file handler.

    Without an explicit ``level`` the LODPREP_DEBUG and LODPREP_LOG_LEVEL
    environment variables decide, falling back to INFO.
    """
    global _configured

    numeric_level = _resolve_level(level)
    logger = logging.getLogger(_root_logger_name)
    logger.setLevel(numeric_level)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()
    handlers, json_error = _build_handlers(json_file, use_color)
    for handler in handlers:
        handler.setLevel(numeric_level)
        logger.addHandler(handler)
    logger.propagate = False
    _configured = True
    if json_error is not None:
        logger.warning("JSON log %s not opened: %s", json_file, json_error)


def get_logger(name: str) -> logging.Logger:
    """Child of the ``lodprep`` logger for a module name; configures defaults on first use."""
    if not _configured:
        configure_logging()
    if name == "__main__":
        name = "main"
    if not name.startswith(_root_logger_name):
        name = f"{_root_logger_name}.{name}"
    return logging.getLogger(name)


def log_exception(
    logger: logging.Logger,
    message: str,
    *,
    error_type: Optional[str] = None,
    **extra: Any,
) -> None:
    """Log ``message`` with the active traceback; ``error_type`` becomes a JSON field."""
    if error_type:
        extra["error_type"] = error_type
    logger.exception(message, extra=extra)
