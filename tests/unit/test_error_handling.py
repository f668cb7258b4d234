"""Tests for error types and ErrorManager."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from tablelinks.ingest.error_handling import (
    ConfigurationError,
    DocumentMissingError,
    DocumentWriteError,
    ErrorContext,
    ErrorManager,
    ProbeCancelledError,
    TableLinksError,
    TableNotFoundError,
)


class TestExceptions:
    def test_hierarchy(self) -> None:
        for exc_type in (
            ConfigurationError,
            DocumentMissingError,
            DocumentWriteError,
            ProbeCancelledError,
            TableNotFoundError,
        ):
            assert issubclass(exc_type, TableLinksError)

    def test_messages(self) -> None:
        assert str(ConfigurationError("Missing item list", Path("items.txt"))) == "Missing item list: items.txt"
        assert str(DocumentMissingError("A-1", "fr", Path("docs"))) == "No fr document for item A-1 in docs"
        assert str(TableNotFoundError()) == "No <tbody> element found"
        assert str(TableNotFoundError(Path("a.htm"))) == "No <tbody> element found in a.htm"
        err = DocumentWriteError(Path("a.htm"), cause=PermissionError("denied"))
        assert str(err) == "Failed to write a.htm: denied"
        assert isinstance(err.cause, PermissionError)


class TestErrorContext:
    def test_to_dict(self) -> None:
        ctx = ErrorContext(item="A-1", doc_path=Path("/d/a.htm"), lang="en", row=2, column=1)
        data = ctx.to_dict()
        assert data["item"] == "A-1"
        assert data["doc_path"] == "/d/a.htm"
        assert data["row"] == 2
        assert len(data["correlation_id"]) == 8

    def test_correlation_ids_differ(self) -> None:
        assert ErrorContext().correlation_id != ErrorContext().correlation_id


class TestErrorManager:
    def test_warn_attaches_context(self, caplog: pytest.LogCaptureFixture) -> None:
        manager = ErrorManager(ErrorContext(item="A-1", source_module="pipeline"))

        with caplog.at_level(logging.WARNING):
            manager.warn("TBL-NOTFOUND", "Skipping A-1", exception=TableNotFoundError())

        assert "TBL-NOTFOUND: Skipping A-1" in caplog.text
        record = caplog.records[0]
        assert record.event_code == "TBL-NOTFOUND"
        assert record.item == "A-1"
        assert record.source_module == "pipeline"
        assert record.exception_class == "TableNotFoundError"
        assert record.requests_version

    def test_error_level(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.ERROR):
            ErrorManager().error("IO-WRITE", "boom", extra={"detail": "disk"})

        record = caplog.records[0]
        assert record.levelno == logging.ERROR
        assert record.detail == "disk"

    def test_decision(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.DEBUG):
            ErrorManager().decision("ALT-USED", "alternate", "5100-g-22e.pdf")

        assert "ALT-USED: alternate=5100-g-22e.pdf" in caplog.text
        assert any(getattr(r, "decision_key", None) == "alternate" for r in caplog.records)

    def test_error_policy_with_event_code(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING):
            ErrorManager().error_policy("Documents", "missing_document", "skip", details="x", event_code="IO-MISSING")

        assert "Documents error policy: missing_document -> skip (x)" in caplog.text
        assert "IO-MISSING: Documents error policy: missing_document -> skip" in caplog.text

    def test_error_policy_without_event_code(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING):
            ErrorManager().error_policy("Documents", "missing_document", "skip")

        assert len(caplog.records) == 1
