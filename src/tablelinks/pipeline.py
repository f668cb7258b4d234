"""Per-item reconciliation: load, locate, tokenize, resolve, splice, save.

Errors local to one item (missing document, missing table body, failed
write) are logged and recorded on the item's result; they never stop the
items that follow.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator
from contextlib import suppress
from dataclasses import dataclass
from pathlib import Path

from tablelinks.ingest.document_io import encode_text, load_document, save_like, split_trailing_newline
from tablelinks.ingest.error_handling import (
    DocumentMissingError,
    DocumentWriteError,
    ErrorContext,
    ErrorManager,
    TableNotFoundError,
)
from tablelinks.ingest.item_list import resolve_item_path
from tablelinks.model.document import Document
from tablelinks.model.options import ReconcileOptions
from tablelinks.model.plan import CellState, ItemResult, ItemStatus
from tablelinks.parser.table_locator import locate_table_body
from tablelinks.parser.tokenizer import tokenize
from tablelinks.transform.patch import apply_plan
from tablelinks.transform.placeholders import PlaceholderSet
from tablelinks.transform.resolver import CellStateResolver, Resolution
from tablelinks.types import LinkResolver

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, dict[str, int | str]], None] | None


def _safe_emit(on_progress: ProgressCallback, event: str, payload: dict[str, int | str]) -> None:
    if on_progress is None:
        return
    with suppress(Exception):
        on_progress(event, payload)


@dataclass(frozen=True)
class ReconciledPair:
    primary_text: str
    secondary_text: str
    resolution: Resolution
    row_counts: tuple[int, int]


def reconcile_documents(
    primary: Document,
    secondary: Document,
    resolver: CellStateResolver,
    item: str = "",
) -> ReconciledPair:
    """Compute the new text of both documents.

    Raises:
        TableNotFoundError: If either document has no table body
    """

    span_a = locate_table_body(primary.text, primary.path)
    span_b = locate_table_body(secondary.text, secondary.path)
    rows_a = tokenize(span_a.inner)
    rows_b = tokenize(span_b.inner)

    resolution = resolver.resolve(rows_a, rows_b, item=item)
    return ReconciledPair(
        primary_text=apply_plan(primary.text, span_a, rows_a, resolution.primary),
        secondary_text=apply_plan(secondary.text, span_b, rows_b, resolution.secondary),
        resolution=resolution,
        row_counts=(len(rows_a), len(rows_b)),
    )


def _write(document: Document, text: str) -> None:
    try:
        save_like(document, text)
    except OSError as exc:
        raise DocumentWriteError(document.path, cause=exc) from exc


def reconcile_item(
    item: str,
    primary_path: Path,
    secondary_path: Path,
    options: ReconcileOptions,
    resolver: CellStateResolver,
) -> ItemResult:
    """Reconcile one document pair and write it back unless dry-run."""

    result = ItemResult(item=item, primary_path=primary_path, secondary_path=secondary_path)
    ctx = ErrorContext(item=item, source_module="pipeline", flags=options.to_dict())
    errors = ErrorManager(ctx)

    try:
        primary = load_document(primary_path)
        secondary = load_document(secondary_path)
    except (OSError, UnicodeDecodeError) as exc:
        errors.warn("IO-READ", f"Skipping {item}: {exc}", exception=exc)
        result.status = ItemStatus.SKIPPED
        result.warnings.append(str(exc))
        return result

    try:
        reconciled = reconcile_documents(primary, secondary, resolver, item=item)
    except TableNotFoundError as exc:
        ctx.doc_path = exc.path
        errors.warn("TBL-NOTFOUND", f"Skipping {item}: {exc}", exception=exc)
        result.status = ItemStatus.SKIPPED
        result.warnings.append(str(exc))
        return result

    count_a, count_b = reconciled.row_counts
    if count_a != count_b:
        msg = f"Row counts differ ({count_a} vs {count_b}); processed the first {min(count_a, count_b)}"
        errors.warn("ROW-MISMATCH", f"{item}: {msg}", extra={"rows_primary": count_a, "rows_secondary": count_b})
        result.warnings.append(msg)

    resolution = reconciled.resolution
    result.primary_changes = resolution.primary_changes
    result.secondary_changes = resolution.secondary_changes
    result.resolutions = resolution.pairs
    for res in resolution.pairs:
        if res.state is CellState.RELINKED:
            errors.decision("LNK-ALTERNATE", "relinked_cell", f"row {res.row} column {res.column}")

    if options.dry_run or not result.changed:
        return result

    # Encode both before writing either so an encoding failure leaves both untouched
    try:
        for document, text in ((primary, reconciled.primary_text), (secondary, reconciled.secondary_text)):
            body, _ = split_trailing_newline(text)
            encode_text(body + document.trailing_newline, document.encoding)
    except UnicodeEncodeError as exc:
        errors.error("IO-ENCODE", f"{item}: replacement text cannot be encoded", exception=exc)
        result.status = ItemStatus.FAILED
        result.warnings.append(str(exc))
        return result

    try:
        if resolution.primary_changes:
            _write(primary, reconciled.primary_text)
        if resolution.secondary_changes:
            _write(secondary, reconciled.secondary_text)
    except DocumentWriteError as exc:
        ctx.doc_path = exc.path
        errors.error("IO-WRITE", f"{item}: {exc}", exception=exc)
        result.status = ItemStatus.FAILED
        result.warnings.append(str(exc))
    return result


def iter_reconcile_items(
    items: Iterable[str],
    doc_dir: Path,
    options: ReconcileOptions,
    validator: LinkResolver,
    placeholders: PlaceholderSet | None = None,
    on_progress: ProgressCallback = None,
) -> Iterator[ItemResult]:
    """Reconcile items one at a time, yielding each result as it completes."""

    codes = list(items)
    placeholders = placeholders or PlaceholderSet.for_options(options)
    resolver = CellStateResolver(options, placeholders, validator)
    primary_lang, secondary_lang = options.languages

    _safe_emit(on_progress, "items:start", {"count": len(codes)})
    for code in codes:
        _safe_emit(on_progress, "item:start", {"item": code})
        errors = ErrorManager(ErrorContext(item=code, source_module="pipeline"))
        try:
            primary_path = resolve_item_path(doc_dir, code, primary_lang)
            secondary_path = resolve_item_path(doc_dir, code, secondary_lang)
        except DocumentMissingError as exc:
            errors.error_policy("Documents", "missing_document", "skip", details=str(exc), event_code="IO-MISSING")
            result = ItemResult(item=code, status=ItemStatus.SKIPPED, warnings=[str(exc)])
        else:
            result = reconcile_item(code, primary_path, secondary_path, options, resolver)
        _safe_emit(on_progress, "item:done", {"item": code, "changed": result.changed, "status": result.status.value})
        yield result
    _safe_emit(on_progress, "items:finalized", {"count": len(codes)})


def reconcile_items(
    items: Iterable[str],
    doc_dir: Path,
    options: ReconcileOptions,
    validator: LinkResolver,
    placeholders: PlaceholderSet | None = None,
    on_progress: ProgressCallback = None,
) -> list[ItemResult]:
    return list(iter_reconcile_items(items, doc_dir, options, validator, placeholders, on_progress))


__all__ = [
    "ReconciledPair",
    "iter_reconcile_items",
    "reconcile_documents",
    "reconcile_item",
    "reconcile_items",
]
