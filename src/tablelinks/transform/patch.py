"""Span splicing: rebuild text from original spans and sparse replacements.

Each function walks the ordered child spans left to right, copies the gap
before each span verbatim, then emits either the original span or its
replacement, and finally copies the tail. Text outside replaced spans is
byte-identical to the input.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from ..model.plan import ReplacementPlan
from ..types import Cell, Row, TableSpan


def splice(text: str, spans: Sequence[tuple[int, int]], replacements: Mapping[int, str]) -> str:
    """Replace ``spans[i]`` with ``replacements[i]`` where present.

    ``spans`` must be ordered and non-overlapping.
    """

    if not replacements:
        return text
    out: list[str] = []
    pos = 0
    for i, (start, end) in enumerate(spans):
        if start < pos:
            raise ValueError(f"Span {i} ({start}, {end}) overlaps previous span ending at {pos}")
        out.append(text[pos:start])
        out.append(replacements[i] if i in replacements else text[start:end])
        pos = end
    out.append(text[pos:])
    return "".join(out)


def apply_row(row_text: str, cells: Sequence[Cell], cell_replacements: Mapping[int, str]) -> str:
    """Swap the inner markup of the given cells, keeping their tags verbatim."""
    full = {i: cells[i].with_inner(inner) for i, inner in cell_replacements.items()}
    return splice(row_text, [(c.start, c.end) for c in cells], full)


def apply_table_body(tbody_inner: str, rows: Sequence[Row], row_replacements: Mapping[int, str]) -> str:
    return splice(tbody_inner, [(r.start, r.end) for r in rows], row_replacements)


def apply_document(text: str, span: TableSpan, new_inner: str) -> str:
    if new_inner == span.inner:
        return text
    return text[: span.inner_start] + new_inner + text[span.inner_end :]


def apply_plan(
    text: str,
    span: TableSpan,
    rows: Sequence[tuple[Row, Sequence[Cell]]],
    plan: ReplacementPlan,
) -> str:
    """Rebuild document text with every replacement in ``plan`` applied."""

    if not plan:
        return text
    row_replacements: dict[int, str] = {}
    for row, cells in rows:
        cell_replacements = plan.for_row(row.index)
        if cell_replacements:
            row_replacements[row.index] = apply_row(row.text, cells, cell_replacements)
    new_inner = apply_table_body(span.inner, [row for row, _ in rows], row_replacements)
    return apply_document(text, span, new_inner)


__all__ = ["apply_document", "apply_plan", "apply_row", "apply_table_body", "splice"]
