from __future__ import annotations

import re
from pathlib import Path

from ..ingest.error_handling import TableNotFoundError
from ..types import TableSpan

_TBODY_RE = re.compile(r"<tbody\b[^>]*>(?P<inner>.*?)</tbody\s*>", re.IGNORECASE | re.DOTALL)


def locate_table_body(text: str, path: Path | None = None) -> TableSpan:
    """Find the first ``<tbody>...</tbody>`` pair in ``text``.

    Attributes on the opening tag are ignored for matching. Raises
    TableNotFoundError when no pair exists.
    """

    m = _TBODY_RE.search(text)
    if m is None:
        raise TableNotFoundError(path)
    return TableSpan(
        start=m.start(),
        end=m.end(),
        inner_start=m.start("inner"),
        inner_end=m.end("inner"),
        inner=m.group("inner"),
    )
