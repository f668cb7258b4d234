from __future__ import annotations

from pathlib import Path

from tablelinks.ingest.document_io import load_document
from tablelinks.ingest.error_handling import DocumentMissingError

DOCUMENT_SUFFIXES = (".htm", ".html")


def parse_item_codes(text: str) -> list[str]:
    """Item codes from newline-delimited text.

    Blank lines and ``#`` comments are ignored; duplicates keep their first
    position.
    """

    codes: list[str] = []
    seen: set[str] = set()
    for line in text.splitlines():
        code = line.split("#", 1)[0].strip()
        if code and code not in seen:
            seen.add(code)
            codes.append(code)
    return codes


def read_item_codes(path: Path) -> list[str]:
    return parse_item_codes(load_document(path).text)


def document_name(code: str, lang: str, suffix: str = ".htm") -> str:
    return f"{code}-table-{lang}{suffix}"


def resolve_item_path(doc_dir: Path, code: str, lang: str) -> Path:
    """Locate ``<code>-table-<lang>.htm`` (preferred) or ``.html`` in ``doc_dir``."""

    for suffix in DOCUMENT_SUFFIXES:
        candidate = doc_dir / document_name(code, lang, suffix)
        if candidate.is_file():
            return candidate
    raise DocumentMissingError(code, lang, doc_dir)


__all__ = [
    "DOCUMENT_SUFFIXES",
    "document_name",
    "parse_item_codes",
    "read_item_codes",
    "resolve_item_path",
]
