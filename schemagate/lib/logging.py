"""Logging utilities for schemagate.

Console or JSON output for a preflight run. Verification results passed as
``extra={"verification": result}`` are rendered as the result's ``to_dict()``
under the ``verification`` key, so log aggregation sees one stable shape for
every outcome record.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from schemagate.lib.verifier import VerificationResult

__all__ = [
    "setup_logging",
    "JSONFormatter",
    "GateLogger",
]

# Attributes every LogRecord carries; anything else came from extra=
_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__
) | {"message", "asctime"}

VERIFICATION_KEY = "verification"


def _jsonable(value: Any) -> Any:
    if isinstance(value, VerificationResult):
        return value.to_dict()
    return value


class JSONFormatter(logging.Formatter):
    """Formatter that outputs log records as JSON.

    Example output:
        {"timestamp": "2025-01-15T10:30:00.123Z", "level": "ERROR",
         "logger": "schemagate.lib.gate", "message": "Schema mismatch - ...",
         "verification": {"compatible": false, "missing_tables": ["TraceV2"], ...},
         "extra": {"store": "prod-hbase", "expected": "definition:pinpoint"}}
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.pathname:
            log_data["source"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        extra_attrs = {}
        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS:
                continue
            if key == VERIFICATION_KEY:
                log_data[VERIFICATION_KEY] = _jsonable(value)
            else:
                extra_attrs[key] = _jsonable(value)
        if extra_attrs:
            log_data["extra"] = extra_attrs

        return json.dumps(log_data, default=str)


class GateLogger:
    """Logger that attaches preflight context to every record.

    Example:
        logger = GateLogger("schemagate.lib.gate")
        logger.set_context(store="prod-hbase", expected="definition:pinpoint")
        logger.log_outcome(result)  # one record per outcome, context included
    """

    def __init__(self, name: str):
        self._logger = logging.getLogger(name)
        self._context: Dict[str, Any] = {}

    @property
    def context(self) -> Dict[str, Any]:
        return dict(self._context)

    def set_context(self, **kwargs: Any) -> None:
        """Set context fields that will be included in all log messages."""
        self._context.update(kwargs)

    def clear_context(self) -> None:
        self._context.clear()

    def _log(self, level: int, msg: str, *args: Any, **kwargs: Any) -> None:
        extra = dict(kwargs.pop("extra", None) or {})
        extra.update(self._context)
        self._logger.log(level, msg, *args, extra=extra, **kwargs)

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.INFO, msg, *args, **kwargs)

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.WARNING, msg, *args, **kwargs)

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.ERROR, msg, *args, **kwargs)

    def log_outcome(self, result: VerificationResult) -> None:
        """Log a verification result: INFO when compatible, one ERROR otherwise.

        Duplicate store tables add a WARNING either way.
        """
        if result.duplicate_tables:
            self.warning(
                "Store lists duplicate table(s), last entry used: %s",
                ", ".join(result.duplicate_tables),
            )

        level = logging.INFO if result.compatible else logging.ERROR
        self._log(level, "%s", result.summary(), extra={VERIFICATION_KEY: result})


def setup_logging(
    verbose: bool = False,
    json_format: bool = False,
    log_file: Optional[str] = None,
    level: Optional[str] = None,
) -> None:
    """Configure logging for a schemagate run.

    Args:
        verbose: Enable debug-level logging (overrides ``level``)
        json_format: Use JSON output format (for log aggregation)
        log_file: Optional file path to write logs to
        level: Level name such as "WARNING" (default: INFO)
    """
    if verbose:
        log_level = logging.DEBUG
    else:
        log_level = logging.getLevelName(level.upper()) if level else logging.INFO

    if json_format:
        formatter: logging.Formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # stderr keeps stdout free for the CLI's report
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)
