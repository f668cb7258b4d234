"""Materialize per-item document pairs from a language template.

The template is a complete HTML document in which every occurrence of a
token (``XXXX`` by default) stands for the item code. Output files keep the
template's encoding, byte-order mark and trailing line break.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from contextlib import suppress
from pathlib import Path

from tablelinks.ingest.document_io import load_document, save_like
from tablelinks.ingest.error_handling import ConfigurationError
from tablelinks.ingest.item_list import DOCUMENT_SUFFIXES, document_name

logger = logging.getLogger(__name__)

DEFAULT_TOKEN = "XXXX"

ProgressCallback = Callable[[str, dict[str, int | str]], None] | None


def _safe_emit(on_progress: ProgressCallback, event: str, payload: dict[str, int | str]) -> None:
    if on_progress is None:
        return
    with suppress(Exception):
        on_progress(event, payload)


def render_item(template_text: str, code: str, token: str = DEFAULT_TOKEN) -> str:
    return template_text.replace(token, code)


def generate_item_documents(
    template: Path,
    codes: Iterable[str],
    out_dir: Path,
    lang: str,
    *,
    token: str = DEFAULT_TOKEN,
    overwrite: bool = False,
    on_progress: ProgressCallback = None,
) -> list[Path]:
    """Write ``<code>-table-<lang><suffix>`` for every code; return written paths.

    Existing files are left alone unless ``overwrite`` is set.

    Raises:
        ConfigurationError: If the token is empty or missing from the template
    """

    if not token:
        raise ConfigurationError("Substitution token must not be empty")
    doc = load_document(template)
    if token not in doc.text:
        raise ConfigurationError(f"Token {token!r} not found in template", template)

    suffix = template.suffix.lower() if template.suffix.lower() in DOCUMENT_SUFFIXES else DOCUMENT_SUFFIXES[0]
    code_list = list(codes)
    written: list[Path] = []

    _safe_emit(on_progress, "generate:start", {"count": len(code_list), "lang": lang})
    for code in code_list:
        target = out_dir / document_name(code, lang, suffix)
        if target.exists() and not overwrite:
            logger.info("Keeping existing %s", target)
            _safe_emit(on_progress, "generate:kept", {"path": str(target)})
            continue
        save_like(doc, render_item(doc.text, code, token), path=target)
        written.append(target)
        _safe_emit(on_progress, "generate:written", {"path": str(target)})
    _safe_emit(on_progress, "generate:finalized", {"written": len(written)})
    logger.info("Generated %d %s document(s) in %s", len(written), lang, out_dir)
    return written


__all__ = ["DEFAULT_TOKEN", "generate_item_documents", "render_item"]
