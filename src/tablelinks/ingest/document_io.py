"""Encoding-preserving document reading and writing.

Documents are decoded once with the encoding detected from their bytes and
written back with exactly the same encoding, byte-order mark and trailing
line-break sequence. Loading then saving an unchanged document reproduces
the original bytes.

Detection order:
- UTF-8 byte-order mark
- UTF-16 little-endian mark
- UTF-16 big-endian mark
- strict UTF-8
- cp1252 (decoded with surrogateescape so undefined bytes survive)
"""

from __future__ import annotations

import codecs
import logging
import os
import re
from pathlib import Path
from tempfile import NamedTemporaryFile

from tablelinks.model.document import Document, TextEncoding

logger = logging.getLogger(__name__)

_TRAILING_BREAKS_RE = re.compile(r"[\r\n]+\Z")


def detect_encoding(raw: bytes) -> TextEncoding:
    """Return the encoding a document's bytes should be decoded with."""
    if raw.startswith(codecs.BOM_UTF8):
        return TextEncoding.UTF8_BOM
    if raw.startswith(codecs.BOM_UTF16_LE):
        return TextEncoding.UTF16_LE
    if raw.startswith(codecs.BOM_UTF16_BE):
        return TextEncoding.UTF16_BE
    try:
        raw.decode("utf-8")
    except UnicodeDecodeError:
        return TextEncoding.LEGACY
    return TextEncoding.UTF8


def decode_bytes(raw: bytes, encoding: TextEncoding) -> str:
    body = raw[len(encoding.bom) :] if encoding.bom else raw
    return body.decode(encoding.codec, errors=encoding.errors)


def encode_text(text: str, encoding: TextEncoding) -> bytes:
    return encoding.bom + text.encode(encoding.codec, errors=encoding.errors)


def split_trailing_newline(text: str) -> tuple[str, str]:
    """Split ``text`` into its body and the trailing run of line breaks."""
    m = _TRAILING_BREAKS_RE.search(text)
    if m is None:
        return text, ""
    return text[: m.start()], m.group(0)


def load_document(path: Path) -> Document:
    """Read ``path`` and detect its encoding and trailing line breaks.

    Raises:
        OSError: If the file cannot be read
        UnicodeDecodeError: If a UTF-16 document has malformed bytes
    """
    raw = path.read_bytes()
    encoding = detect_encoding(raw)
    body, trailing = split_trailing_newline(decode_bytes(raw, encoding))
    logger.debug(
        "Loaded %s: encoding=%s trailing=%r chars=%d", path, encoding.value, trailing, len(body)
    )
    return Document(path=path, raw=raw, text=body, encoding=encoding, trailing_newline=trailing)


def atomic_write_bytes(path: Path, data: bytes) -> None:
    """Atomically write bytes by writing to a temp file then replacing.

    Ensures parent directories exist and minimizes risk of partial writes.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with NamedTemporaryFile("wb", dir=str(path.parent), delete=False) as tmp:
        tmp.write(data)
        tmp.flush()
        os.fsync(tmp.fileno())
        tmp_path = Path(tmp.name)
    try:
        os.replace(tmp_path, path)
    except OSError:
        tmp_path.unlink(missing_ok=True)
        raise


def save_document(path: Path, text: str, encoding: TextEncoding, trailing_newline: str) -> bytes:
    """Write ``text`` to ``path`` with the original encoding and line ending.

    Any trailing line breaks on ``text`` are replaced by ``trailing_newline``.
    Returns the bytes written.
    """
    body, _ = split_trailing_newline(text)
    data = encode_text(body + trailing_newline, encoding)
    atomic_write_bytes(path, data)
    logger.debug("Wrote %s (%d bytes, encoding=%s)", path, len(data), encoding.value)
    return data


def save_like(document: Document, text: str, path: Path | None = None) -> bytes:
    """Save ``text`` using the encoding and line ending captured on ``document``."""
    return save_document(path or document.path, text, document.encoding, document.trailing_newline)


__all__ = [
    "atomic_write_bytes",
    "decode_bytes",
    "detect_encoding",
    "encode_text",
    "load_document",
    "save_document",
    "save_like",
    "split_trailing_newline",
]
