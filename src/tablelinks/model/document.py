"""Loaded documents and their detected encoding."""

from __future__ import annotations

import codecs
from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class TextEncoding(Enum):
    """Closed set of encodings a document can be loaded with."""

    UTF8 = "utf-8"
    UTF8_BOM = "utf-8-bom"
    UTF16_LE = "utf-16-le"
    UTF16_BE = "utf-16-be"
    LEGACY = "cp1252"

    @property
    def codec(self) -> str:
        if self is TextEncoding.UTF8_BOM:
            return "utf-8"
        return self.value

    @property
    def bom(self) -> bytes:
        return _BOMS.get(self, b"")

    @property
    def errors(self) -> str:
        # UTF-16 decoding has no byte-level escape; everything else round-trips raw bytes
        if self in (TextEncoding.UTF16_LE, TextEncoding.UTF16_BE):
            return "strict"
        return "surrogateescape"


_BOMS = {
    TextEncoding.UTF8_BOM: codecs.BOM_UTF8,
    TextEncoding.UTF16_LE: codecs.BOM_UTF16_LE,
    TextEncoding.UTF16_BE: codecs.BOM_UTF16_BE,
}


@dataclass(frozen=True)
class Document:
    """A document as read from disk.

    ``text`` excludes the trailing run of line breaks, which is kept in
    ``trailing_newline`` so it can be written back exactly.
    """

    path: Path
    raw: bytes
    text: str
    encoding: TextEncoding
    trailing_newline: str = ""

    @property
    def full_text(self) -> str:
        return self.text + self.trailing_newline


__all__ = ["Document", "TextEncoding"]
