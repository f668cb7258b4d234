"""Replacement plans and per-item results."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType


class CellState(Enum):
    UNCHANGED = "unchanged"
    UNAVAILABLE = "unavailable"
    NOT_APPLICABLE = "not-applicable"
    RELINKED = "relinked"


@dataclass(frozen=True)
class ReplacementPlan:
    """Sparse, read-only map of row index -> cell index -> new inner markup.

    Cells that are not listed keep their original bytes.
    """

    rows: Mapping[int, Mapping[int, str]] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def from_dict(cls, data: Mapping[int, Mapping[int, str]]) -> ReplacementPlan:
        frozen = {r: MappingProxyType(dict(cells)) for r, cells in data.items() if cells}
        return cls(rows=MappingProxyType(frozen))

    def for_row(self, row: int) -> Mapping[int, str]:
        return self.rows.get(row, MappingProxyType({}))

    def __iter__(self) -> Iterator[tuple[int, int, str]]:
        for r in sorted(self.rows):
            cells = self.rows[r]
            for c in sorted(cells):
                yield r, c, cells[c]

    def __len__(self) -> int:
        return sum(len(cells) for cells in self.rows.values())

    def __bool__(self) -> bool:
        return bool(self.rows)


@dataclass(frozen=True)
class PairResolution:
    """Outcome for one (row, column) pair across both languages."""

    row: int
    column: int
    rule: str
    state: CellState


class ItemStatus(Enum):
    OK = "ok"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class ItemResult:
    item: str
    primary_path: Path | None = None
    secondary_path: Path | None = None
    primary_changes: int = 0
    secondary_changes: int = 0
    status: ItemStatus = ItemStatus.OK
    warnings: list[str] = field(default_factory=list)
    resolutions: list[PairResolution] = field(default_factory=list)

    @property
    def changed(self) -> int:
        return self.primary_changes + self.secondary_changes


__all__ = [
    "CellState",
    "ItemResult",
    "ItemStatus",
    "PairResolution",
    "ReplacementPlan",
]
