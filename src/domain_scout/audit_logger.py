"""
Structured logger for the domain scout system.

Provides dual-format output (JSON and human-readable text), minimum level
filtering and masking of registrar credentials and other secrets.
"""

import json
import sys
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, TextIO

from .enums import LogLevel


LEVEL_ORDER = {
    LogLevel.DEBUG: 0,
    LogLevel.INFO: 1,
    LogLevel.WARN: 2,
    LogLevel.ERROR: 3,
}


@dataclass
class LogEntry:
    """One structured log record."""

    timestamp: str
    level: LogLevel
    component: str
    message: str
    data: dict = field(default_factory=dict)


class AuditLogger:
    """
    Structured logger writing JSON lines, text lines, or both.

    Entries below the minimum level are dropped. Values under secret-looking
    keys (registrar credentials, the refresh secret, the cache HMAC key) are
    masked before anything is written or kept.
    """

    SENSITIVE_KEYS = frozenset({
        'token', 'secret', 'password', 'api_key', 'apikey', 'hmac_secret',
        'auth', 'authorization', 'credential', 'credentials', 'cron_secret',
        'secret_key', 'api_secret', 'api_user',
    })

    MASK_VALUE = "***MASKED***"

    def __init__(
        self,
        output_format: str = "text",
        output_stream: Optional[TextIO] = None,
        level: str = "info",
        max_entries: int = 1000,
    ):
        """
        Args:
            output_format: Output format - 'json', 'text', or 'both'
            output_stream: Output stream for log entries (defaults to sys.stderr)
            level: Minimum level written ('debug', 'info', 'warn', 'error')
            max_entries: Most recent entries kept in memory; older ones are discarded
        """
        if output_format not in ("json", "text", "both"):
            raise ValueError(f"Invalid output_format: {output_format}")

        self._output_format = output_format
        self._output_stream = output_stream or sys.stderr
        self._min_level = LogLevel(level.lower())
        self._entries: deque[LogEntry] = deque(maxlen=max_entries)

    @property
    def output_format(self) -> str:
        return self._output_format

    @property
    def entries(self) -> list[LogEntry]:
        """Entries kept so far, oldest first."""
        return list(self._entries)

    def is_enabled_for(self, level: LogLevel) -> bool:
        return LEVEL_ORDER[level] >= LEVEL_ORDER[self._min_level]

    def log(
        self,
        level: LogLevel,
        component: str,
        message: str,
        data: Optional[dict] = None,
    ) -> Optional[LogEntry]:
        """
        Log an entry in the configured format(s).

        Returns:
            The created LogEntry, or None if filtered out by level
        """
        if not self.is_enabled_for(level):
            return None

        entry = LogEntry(
            timestamp=datetime.now(timezone.utc).isoformat(),
            level=level,
            component=component,
            message=message,
            data=self.mask_sensitive_data(data or {}),
        )
        self._entries.append(entry)
        self._output_entry(entry)
        return entry

    def log_error(
        self,
        component: str,
        message: str,
        error: Optional[BaseException] = None,
        request_url: Optional[str] = None,
        response_status_code: Optional[int] = None,
        additional_data: Optional[dict] = None,
    ) -> Optional[LogEntry]:
        """Log an error with the exception, request URL and HTTP status attached."""
        data = dict(additional_data or {})
        if error is not None:
            data.update(error_context(error))
        if request_url is not None:
            data["request_url"] = request_url
        if response_status_code is not None:
            data["response_status_code"] = response_status_code
        return self.log(LogLevel.ERROR, component, message, data)

    def is_sensitive_key(self, key) -> bool:
        lowered = str(key).lower()
        return any(marker in lowered for marker in self.SENSITIVE_KEYS)

    def mask_sensitive_data(self, data: dict) -> dict:
        """Copy of ``data`` with secret-looking keys masked at any depth."""
        return self._mask(data)

    def _mask(self, value):
        if isinstance(value, dict):
            return {
                key: self.MASK_VALUE if self.is_sensitive_key(key) else self._mask(item)
                for key, item in value.items()
            }
        if isinstance(value, (list, tuple)):
            return [self._mask(item) for item in value]
        return value

    def _output_entry(self, entry: LogEntry) -> None:
        lines = []
        if self._output_format != "text":
            lines.append(self.format_json(entry))
        if self._output_format != "json":
            lines.append(self.format_text(entry))
        self._output_stream.write("".join(line + "\n" for line in lines))
        self._output_stream.flush()

    def format_json(self, entry: LogEntry) -> str:
        record = {
            "timestamp": entry.timestamp,
            "level": entry.level.value,
            "component": entry.component,
            "message": entry.message,
            "data": entry.data,
        }
        return json.dumps(record, ensure_ascii=False, default=str)

    def format_text(self, entry: LogEntry) -> str:
        """``[timestamp] LEVEL [component] message {data}``"""
        line = f"[{entry.timestamp}] {entry.level.value.upper()} [{entry.component}] {entry.message}"
        if entry.data:
            line += " " + json.dumps(entry.data, ensure_ascii=False, default=str)
        return line


def error_context(error: BaseException) -> dict:
    """Type, message and (for domain errors) code of an exception."""
    context = {
        "error_type": type(error).__name__,
        "error_message": str(error),
    }
    code = getattr(error, "code", None)
    if isinstance(code, str):
        context["error_code"] = code
    return context


class LoggingMixin:
    """Optional-logger helpers shared by components."""

    _logger: Optional[AuditLogger] = None
    COMPONENT = "DomainScout"

    def _log_debug(self, message: str, data: Optional[dict] = None) -> None:
        if self._logger:
            self._logger.log(LogLevel.DEBUG, self.COMPONENT, message, data)

    def _log_info(self, message: str, data: Optional[dict] = None) -> None:
        if self._logger:
            self._logger.log(LogLevel.INFO, self.COMPONENT, message, data)

    def _log_warn(self, message: str, data: Optional[dict] = None) -> None:
        if self._logger:
            self._logger.log(LogLevel.WARN, self.COMPONENT, message, data)

    def _log_error(
        self,
        message: str,
        error: Optional[BaseException] = None,
        data: Optional[dict] = None,
        request_url: Optional[str] = None,
        response_status_code: Optional[int] = None,
    ) -> None:
        if self._logger:
            self._logger.log_error(
                self.COMPONENT,
                message,
                error=error,
                request_url=request_url,
                response_status_code=response_status_code,
                additional_data=data,
            )
