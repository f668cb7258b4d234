"""Error types and structured error logging for tablelinks.

Errors are split by blast radius:

- ConfigurationError aborts the whole run (missing item list or document dir).
- DocumentMissingError and TableNotFoundError skip one item.
- DocumentWriteError fails one item; later items still run.
- Network problems never raise here: they degrade to an invalid link.

ErrorManager attaches an ErrorContext to every log record via ``extra`` so that
log output can be filtered by item, language, row or column.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from tablelinks.ingest.feature_logger import log_error_policy, log_feature_decision

logger = logging.getLogger(__name__)


class TableLinksError(Exception):
    """Base class for all tablelinks errors."""


class ConfigurationError(TableLinksError):
    """A required input or output location is unusable; the run cannot start."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        self.path = path
        if path is not None:
            message = f"{message}: {path}"
        super().__init__(message)


class DocumentMissingError(TableLinksError):
    def __init__(self, item: str, lang: str, doc_dir: Path) -> None:
        self.item = item
        self.lang = lang
        self.doc_dir = doc_dir
        super().__init__(f"No {lang} document for item {item} in {doc_dir}")


class TableNotFoundError(TableLinksError):
    def __init__(self, path: Path | None = None) -> None:
        self.path = path
        where = f" in {path}" if path is not None else ""
        super().__init__(f"No <tbody> element found{where}")


class DocumentWriteError(TableLinksError):
    def __init__(self, path: Path, cause: Exception | None = None) -> None:
        self.path = path
        self.cause = cause
        msg = f"Failed to write {path}"
        if cause is not None:
            msg += f": {cause}"
        super().__init__(msg)


class ProbeCancelledError(TableLinksError):
    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f"Probe cancelled before start: {url}")


@dataclass
class ErrorContext:
    """Where an event happened; flattened into log record attributes."""

    item: str | None = None
    doc_path: Path | None = None
    source_module: str | None = None
    lang: str | None = None
    row: int | None = None
    column: int | None = None
    flags: dict[str, Any] = field(default_factory=dict)
    correlation_id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])
    cli_verbosity: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "item": self.item,
            "doc_path": str(self.doc_path) if self.doc_path is not None else None,
            "source_module": self.source_module,
            "lang": self.lang,
            "row": self.row,
            "column": self.column,
            "flags": self.flags,
            "correlation_id": self.correlation_id,
            "cli_verbosity": self.cli_verbosity,
        }


class ErrorManager:
    """Emit warnings, errors and decisions as structured log records."""

    def __init__(self, context: ErrorContext | None = None) -> None:
        self.context = context or ErrorContext()

    def _build_log_data(
        self,
        event_code: str,
        extra: dict[str, Any] | None = None,
        exception: BaseException | None = None,
    ) -> dict[str, Any]:
        data = self.context.to_dict()
        data["event_code"] = event_code
        try:
            import requests

            data["requests_version"] = getattr(requests, "__version__", "unknown")
        except ImportError:
            data["requests_version"] = "not_installed"
        if extra:
            data.update(extra)
        if exception is not None:
            data["exception_class"] = type(exception).__name__
            data["exception_message"] = str(exception)
        return data

    def warn(
        self,
        event_code: str,
        message: str,
        extra: dict[str, Any] | None = None,
        exception: BaseException | None = None,
    ) -> None:
        logger.warning(
            "%s: %s", event_code, message, extra=self._build_log_data(event_code, extra, exception)
        )

    def error(
        self,
        event_code: str,
        message: str,
        extra: dict[str, Any] | None = None,
        exception: BaseException | None = None,
    ) -> None:
        logger.error(
            "%s: %s", event_code, message, extra=self._build_log_data(event_code, extra, exception)
        )

    def decision(
        self,
        event_code: str,
        key: str,
        value: Any,
        extra: dict[str, Any] | None = None,
    ) -> None:
        log_feature_decision(key, str(value), extra)
        data = self._build_log_data(event_code, extra)
        data["decision_key"] = key
        data["decision_value"] = value
        logger.debug("%s: %s=%s", event_code, key, value, extra=data)

    def error_policy(
        self,
        feature: str,
        error_type: str,
        action: str,
        details: str | None = None,
        event_code: str | None = None,
    ) -> None:
        log_error_policy(feature, error_type, action, details)
        if event_code is None:
            return
        data = self._build_log_data(
            event_code,
            {"feature": feature, "error_type": error_type, "action": action, "details": details},
        )
        logger.warning(
            "%s: %s error policy: %s -> %s", event_code, feature, error_type, action, extra=data
        )


__all__ = [
    "ConfigurationError",
    "DocumentMissingError",
    "DocumentWriteError",
    "ErrorContext",
    "ErrorManager",
    "ProbeCancelledError",
    "TableLinksError",
    "TableNotFoundError",
]
