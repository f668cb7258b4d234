from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class TableSpan:
    """Location of the first table body in a document's text.

    - start/end: offsets of the whole ``<tbody>...</tbody>`` match
    - inner_start/inner_end: offsets of the content between the tags
    """

    start: int
    end: int
    inner_start: int
    inner_end: int
    inner: str


@dataclass(frozen=True)
class Row:
    # Offsets are relative to the table-body inner text
    index: int
    text: str
    start: int
    end: int


@dataclass(frozen=True)
class Cell:
    # Offsets are relative to the row text
    index: int
    tag: str
    attrs: str
    inner: str
    open_tag: str
    close_tag: str
    start: int
    end: int

    def with_inner(self, inner: str) -> str:
        """Return the full cell markup with the original wrapper around ``inner``."""
        return f"{self.open_tag}{inner}{self.close_tag}"


@dataclass(frozen=True)
class LinkCandidate:
    url: str
    is_placeholder: bool = False


@dataclass(frozen=True)
class ValidationOutcome:
    is_valid: bool
    resolved_url: str

    def used_alternate(self, url: str) -> bool:
        return self.is_valid and self.resolved_url != url


class LinkResolver(Protocol):
    """Minimal surface the cell resolver needs from a link validator."""

    def resolve_many(self, urls: list[str]) -> dict[str, ValidationOutcome]:  # pragma: no cover - typing
        ...
