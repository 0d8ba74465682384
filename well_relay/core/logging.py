"""
Well Level Relay - Structured Logging Setup
Copyright (C) 2024
SPDX-License-Identifier: GPL-3.0-or-later

Configure logging for the relay.
All output goes through the logging module, never print().
Includes correlation ID support so a device push can be followed
through ingest and conversion.
"""

import json
import logging
import sys
import uuid
from contextvars import ContextVar
from datetime import UTC, datetime

# Correlation ID context variable (thread-safe and async-safe)
_correlation_id: ContextVar[str | None] = ContextVar('correlation_id', default=None)


def get_correlation_id() -> str | None:
    """Get the current correlation ID."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: str | None) -> None:
    """Set the correlation ID for the current context."""
    _correlation_id.set(correlation_id)


def generate_correlation_id() -> str:
    """Generate a new correlation ID."""
    return str(uuid.uuid4())


class CorrelationIdFilter(logging.Filter):
    """Logging filter that adds correlation ID to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = _correlation_id.get() or ""
        return True


class StructuredFormatter(logging.Formatter):
    """JSON-structured log formatter for production use."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if hasattr(record, "correlation_id") and record.correlation_id:
            log_entry["correlation_id"] = record.correlation_id

        # Domain extras passed through logger.*(extra=...)
        if hasattr(record, "raw_adc"):
            log_entry["raw_adc"] = record.raw_adc
        if hasattr(record, "depth_ft"):
            log_entry["depth_ft"] = record.depth_ft
        if hasattr(record, "fw_ver"):
            log_entry["fw_ver"] = record.fw_ver
        if hasattr(record, "size_bytes"):
            log_entry["size_bytes"] = record.size_bytes

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry)


class HumanReadableFormatter(logging.Formatter):
    """Human-readable formatter for development."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now(UTC).strftime("%Y-%m-%d %H:%M:%S")

        cid_prefix = ""
        if hasattr(record, "correlation_id") and record.correlation_id:
            # Short form of the UUID is enough to follow one request
            cid_prefix = f"[{record.correlation_id[:8]}] "

        context_parts = []
        if hasattr(record, "raw_adc"):
            context_parts.append(f"raw={record.raw_adc}")
        if hasattr(record, "depth_ft"):
            context_parts.append(f"depth={record.depth_ft}")
        if hasattr(record, "fw_ver"):
            context_parts.append(f"fw={record.fw_ver}")
        if hasattr(record, "size_bytes"):
            context_parts.append(f"size={record.size_bytes}B")

        context = f" [{', '.join(context_parts)}]" if context_parts else ""

        base = f"{timestamp} {record.levelname:8} {cid_prefix}{record.name}: {record.getMessage()}{context}"

        if record.exc_info:
            base += "\n" + self.formatException(record.exc_info)

        return base


def setup_logging(
    level: str = "INFO",
    structured: bool = False,
    log_file: str | None = None
) -> logging.Logger:
    """
    Configure application logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        structured: Use JSON structured logging (for production)
        log_file: Optional file path for log output

    Returns:
        Root logger configured for the application
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    root_logger.handlers.clear()

    correlation_filter = CorrelationIdFilter()
    root_logger.addFilter(correlation_filter)

    formatter = StructuredFormatter() if structured else HumanReadableFormatter()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(correlation_filter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        file_handler.addFilter(correlation_filter)
        root_logger.addHandler(file_handler)

    # The device pushes every few seconds; access lines would drown everything else
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("watchfiles").setLevel(logging.WARNING)

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the specified name."""
    return logging.getLogger(name)


# =============================================================================
# Operator-Focused Logging
# =============================================================================
# Messages an operator standing at the wellhead can act on:
#   - What failed
#   - Why it matters
#   - What still works
#   - What the operator should do


class OperatorLogEntry:
    """
    Structured log entry for operator-actionable events.

    Usage:
        from well_relay.core.logging import operator_log

        operator_log.error(
            what="Firmware upload failed",
            impact="Device keeps running the previous firmware",
            still_works="Readings and calibration",
            action="Check free disk space on the relay host",
        )
    """

    def __init__(self, logger: logging.Logger):
        self._logger = logger

    def _format_operator_message(
        self,
        what: str,
        impact: str = "",
        still_works: str = "",
        action: str = "",
    ) -> str:
        parts = [f"WHAT: {what}"]
        if impact:
            parts.append(f"IMPACT: {impact}")
        if still_works:
            parts.append(f"STILL WORKS: {still_works}")
        if action:
            parts.append(f"ACTION: {action}")
        return " | ".join(parts)

    def warning(
        self,
        what: str,
        impact: str,
        still_works: str = "",
        action: str = "",
        **extra
    ) -> None:
        """Log warning with impact and recommended action."""
        msg = self._format_operator_message(what, impact, still_works, action)
        self._logger.warning(msg, extra=extra)

    def error(
        self,
        what: str,
        impact: str,
        still_works: str = "",
        action: str = "",
        **extra
    ) -> None:
        """Log error with impact and required action."""
        msg = self._format_operator_message(what, impact, still_works, action)
        self._logger.error(msg, extra=extra)


# Pre-configured operator logger
operator_log = OperatorLogEntry(logging.getLogger("operator"))


def log_firmware_storage_failure(error: Exception) -> None:
    """Log a failed firmware write with operator guidance."""
    operator_log.error(
        what=f"Firmware upload could not be written: {error}",
        impact="The device will keep downloading the previously uploaded firmware.",
        still_works="Readings, calibration and the dashboard.",
        action="Check free space and permissions of the firmware directory (WELL_FIRMWARE_DIR).",
    )


def log_dashboard_missing(index_path: str) -> None:
    """Log missing dashboard page with operator guidance."""
    operator_log.warning(
        what=f"Dashboard page not found at {index_path}",
        impact="Browsers get a 404 at '/'. The device API is unaffected.",
        still_works="Sensor ingest, /api/data, /api/settings and OTA updates.",
        action="Place index.html in the public directory or set WELL_PUBLIC_DIR.",
    )
