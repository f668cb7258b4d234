"""Split a table body into rows and a row into cells.

This is a span scanner, not an HTML parser: rows and cells must be
well-formed and rows must not nest. Every Row/Cell keeps its offsets so the
patch writer can copy untouched text verbatim.
"""

from __future__ import annotations

import re

from ..types import Cell, Row

_ROW_RE = re.compile(r"<tr\b[^>]*>.*?</tr\s*>", re.IGNORECASE | re.DOTALL)

# Back-reference keeps </td> paired with <td> and </th> with <th>; IGNORECASE
# applies to the back-reference too, so <TD>...</td> still matches.
_CELL_RE = re.compile(
    r"(?P<open><(?P<tag>t[dh])\b(?P<attrs>[^>]*)>)"
    r"(?P<inner>.*?)"
    r"(?P<close></(?P=tag)\s*>)",
    re.IGNORECASE | re.DOTALL,
)


def split_rows(tbody_inner: str) -> list[Row]:
    return [
        Row(index=i, text=m.group(0), start=m.start(), end=m.end())
        for i, m in enumerate(_ROW_RE.finditer(tbody_inner))
    ]


def split_cells(row_text: str) -> list[Cell]:
    cells: list[Cell] = []
    for i, m in enumerate(_CELL_RE.finditer(row_text)):
        cells.append(
            Cell(
                index=i,
                tag=m.group("tag").lower(),
                attrs=m.group("attrs"),
                inner=m.group("inner"),
                open_tag=m.group("open"),
                close_tag=m.group("close"),
                start=m.start(),
                end=m.end(),
            )
        )
    return cells


def tokenize(tbody_inner: str) -> list[tuple[Row, list[Cell]]]:
    """Rows of the table body, each with its cells (possibly none)."""
    return [(row, split_cells(row.text)) for row in split_rows(tbody_inner)]
