from __future__ import annotations

from pathlib import Path

import pytest

from tablelinks.ingest.error_handling import DocumentMissingError
from tablelinks.ingest.item_list import document_name, parse_item_codes, read_item_codes, resolve_item_path


def test_parse_item_codes() -> None:
    text = "A-1\n\n  B-2  # second\n# comment\nA-1\r\nC-3"
    assert parse_item_codes(text) == ["A-1", "B-2", "C-3"]


def test_read_item_codes_with_bom(tmp_path: Path) -> None:
    path = tmp_path / "items.txt"
    path.write_bytes(b"\xef\xbb\xbfA-1\r\nB-2\r\n")
    assert read_item_codes(path) == ["A-1", "B-2"]


def test_document_name() -> None:
    assert document_name("A-1", "fr") == "A-1-table-fr.htm"
    assert document_name("A-1", "en", ".html") == "A-1-table-en.html"


def test_resolve_prefers_htm(tmp_path: Path) -> None:
    (tmp_path / "A-1-table-en.html").write_text("x")
    assert resolve_item_path(tmp_path, "A-1", "en").name == "A-1-table-en.html"
    (tmp_path / "A-1-table-en.htm").write_text("x")
    assert resolve_item_path(tmp_path, "A-1", "en").name == "A-1-table-en.htm"


def test_resolve_missing(tmp_path: Path) -> None:
    with pytest.raises(DocumentMissingError) as exc_info:
        resolve_item_path(tmp_path, "A-1", "fr")
    assert exc_info.value.lang == "fr"
    assert exc_info.value.item == "A-1"
