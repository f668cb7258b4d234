"""Decide, per paired cell, whether both language variants keep their content.

Rules, in precedence order, for every (row, column >= 1) pair:

1. existing placeholder: either side already reads "unavailable" -> both
   sides get the canonical "unavailable" markup; terminal for this pass.
2. no link (skip_unlinked only): neither side has a link -> untouched.
2b. placeholder link: either side links to "#" -> untouched.
3. asymmetric link: exactly one side has a link -> untouched.
4. validated: probe both links. Both live -> untouched, except a link whose
   alternate URL answered is rewritten. Otherwise both -> "unavailable".
5. row demoted (demote_empty_rows only): a row left without any live link
   has every paired cell in both languages set to "not applicable".

Resolution is split in three steps so that probing can run as one concurrent
batch per item: classify every pair, resolve all URLs that need it, then
apply outcomes and the row rule. The result is a pair of immutable
ReplacementPlans; no document text is touched here.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from tablelinks.ingest.feature_logger import log_cell_decision
from tablelinks.model.options import ReconcileOptions
from tablelinks.model.plan import CellState, PairResolution, ReplacementPlan
from tablelinks.parser.links import extract_link, rewrite_link
from tablelinks.transform.placeholders import PlaceholderSet, is_unavailable
from tablelinks.types import Cell, LinkCandidate, LinkResolver, Row, ValidationOutcome

logger = logging.getLogger(__name__)

RULE_EXISTING_PLACEHOLDER = "existing-placeholder"
RULE_NO_LINK = "no-link"
RULE_PLACEHOLDER_LINK = "placeholder-link"
RULE_ASYMMETRIC_LINK = "asymmetric-link"
RULE_VALIDATED = "validated"
RULE_ROW_DEMOTED = "row-demoted"

_INVALID = ValidationOutcome(is_valid=False, resolved_url="")

TokenizedRow = tuple[Row, list[Cell]]


@dataclass(frozen=True)
class CellPair:
    row: int
    column: int
    primary: Cell
    secondary: Cell
    rule: str
    primary_link: LinkCandidate | None = None
    secondary_link: LinkCandidate | None = None

    def urls(self) -> list[str]:
        return [link.url for link in (self.primary_link, self.secondary_link) if link is not None]


@dataclass(frozen=True)
class Resolution:
    primary: ReplacementPlan
    secondary: ReplacementPlan
    pairs: list[PairResolution] = field(default_factory=list)

    @property
    def primary_changes(self) -> int:
        return len(self.primary)

    @property
    def secondary_changes(self) -> int:
        return len(self.secondary)


def classify_pair(
    row: int, column: int, primary: Cell, secondary: Cell, *, skip_unlinked: bool
) -> CellPair:
    """Apply rules 1-3; pairs that survive are marked for validation."""

    if is_unavailable(primary.inner) or is_unavailable(secondary.inner):
        return CellPair(row, column, primary, secondary, RULE_EXISTING_PLACEHOLDER)

    link_a = extract_link(primary.inner)
    link_b = extract_link(secondary.inner)

    if link_a is None and link_b is None and skip_unlinked:
        rule = RULE_NO_LINK
    elif (link_a is not None and link_a.is_placeholder) or (
        link_b is not None and link_b.is_placeholder
    ):
        rule = RULE_PLACEHOLDER_LINK
    elif (link_a is None) != (link_b is None):
        rule = RULE_ASYMMETRIC_LINK
    else:
        rule = RULE_VALIDATED
    return CellPair(row, column, primary, secondary, rule, link_a, link_b)


def pair_rows(
    rows_a: Sequence[TokenizedRow], rows_b: Sequence[TokenizedRow], *, skip_unlinked: bool
) -> list[list[CellPair]]:
    """Positionally pair rows and cells beyond the index column."""

    paired: list[list[CellPair]] = []
    for (row_a, cells_a), (_, cells_b) in zip(rows_a, rows_b):
        if not cells_a or not cells_b:
            continue
        if len(cells_a) != len(cells_b):
            logger.debug(
                "Row %d: cell counts differ (%d vs %d); pairing first %d",
                row_a.index,
                len(cells_a),
                len(cells_b),
                min(len(cells_a), len(cells_b)),
            )
        pairs = [
            classify_pair(row_a.index, col, cells_a[col], cells_b[col], skip_unlinked=skip_unlinked)
            for col in range(1, min(len(cells_a), len(cells_b)))
        ]
        if pairs:
            paired.append(pairs)
    return paired


class CellStateResolver:
    """Build per-language replacement plans for one item."""

    def __init__(
        self,
        options: ReconcileOptions,
        placeholders: PlaceholderSet,
        validator: LinkResolver,
    ) -> None:
        self.options = options
        self.placeholders = placeholders
        self.validator = validator
        self.primary_lang, self.secondary_lang = options.languages

    def resolve(
        self,
        rows_a: Sequence[TokenizedRow],
        rows_b: Sequence[TokenizedRow],
        item: str = "",
    ) -> Resolution:
        rows = pair_rows(rows_a, rows_b, skip_unlinked=self.options.skip_unlinked)

        urls = [url for pairs in rows for pair in pairs if pair.rule == RULE_VALIDATED for url in pair.urls()]
        outcomes = self.validator.resolve_many(urls) if urls else {}

        new_a: dict[int, dict[int, str]] = {}
        new_b: dict[int, dict[int, str]] = {}
        resolutions: list[PairResolution] = []

        for pairs in rows:
            row_index = pairs[0].row
            row_a: dict[int, str] = {}
            row_b: dict[int, str] = {}
            row_states: list[PairResolution] = []
            alive = False

            for pair in pairs:
                state, inner_a, inner_b, live = self._apply(pair, outcomes)
                alive = alive or live
                if inner_a is not None:
                    row_a[pair.column] = inner_a
                if inner_b is not None:
                    row_b[pair.column] = inner_b
                row_states.append(PairResolution(pair.row, pair.column, pair.rule, state))

            if self.options.demote_empty_rows and not alive:
                na_a = self.placeholders.not_applicable(self.primary_lang)
                na_b = self.placeholders.not_applicable(self.secondary_lang)
                for pair in pairs:
                    row_a[pair.column] = na_a
                    row_b[pair.column] = na_b
                row_states = [
                    PairResolution(p.row, p.column, RULE_ROW_DEMOTED, CellState.NOT_APPLICABLE)
                    for p in pairs
                ]

            for res in row_states:
                log_cell_decision(item, res.row, res.column, res.rule, res.state.value)
            resolutions.extend(row_states)

            by_column = {p.column: p for p in pairs}
            changed_a = {c: v for c, v in row_a.items() if v != by_column[c].primary.inner}
            changed_b = {c: v for c, v in row_b.items() if v != by_column[c].secondary.inner}
            if changed_a:
                new_a[row_index] = changed_a
            if changed_b:
                new_b[row_index] = changed_b

        return Resolution(
            primary=ReplacementPlan.from_dict(new_a),
            secondary=ReplacementPlan.from_dict(new_b),
            pairs=resolutions,
        )

    def _apply(
        self, pair: CellPair, outcomes: dict[str, ValidationOutcome]
    ) -> tuple[CellState, str | None, str | None, bool]:
        """Return (state, primary inner, secondary inner, keeps row alive).

        A None inner means the cell keeps its original content.
        """

        if pair.rule == RULE_EXISTING_PLACEHOLDER:
            return (
                CellState.UNAVAILABLE,
                self.placeholders.unavailable(self.primary_lang),
                self.placeholders.unavailable(self.secondary_lang),
                False,
            )

        if pair.rule == RULE_NO_LINK:
            return CellState.UNCHANGED, None, None, False

        if pair.rule == RULE_PLACEHOLDER_LINK:
            real_link = any(
                link is not None and not link.is_placeholder
                for link in (pair.primary_link, pair.secondary_link)
            )
            return CellState.UNCHANGED, None, None, real_link

        if pair.rule == RULE_ASYMMETRIC_LINK:
            return CellState.UNCHANGED, None, None, True

        out_a = outcomes.get(pair.primary_link.url, _INVALID) if pair.primary_link else _INVALID
        out_b = outcomes.get(pair.secondary_link.url, _INVALID) if pair.secondary_link else _INVALID

        if out_a.is_valid and out_b.is_valid:
            inner_a = self._relink(pair.primary, pair.primary_link, out_a)
            inner_b = self._relink(pair.secondary, pair.secondary_link, out_b)
            relinked = inner_a is not None or inner_b is not None
            return (CellState.RELINKED if relinked else CellState.UNCHANGED), inner_a, inner_b, True

        return (
            CellState.UNAVAILABLE,
            self.placeholders.unavailable(self.primary_lang),
            self.placeholders.unavailable(self.secondary_lang),
            False,
        )

    @staticmethod
    def _relink(cell: Cell, link: LinkCandidate | None, outcome: ValidationOutcome) -> str | None:
        if link is None or not outcome.used_alternate(link.url):
            return None
        rewritten = rewrite_link(cell.inner, link.url, outcome.resolved_url)
        return rewritten if rewritten != cell.inner else None


__all__ = [
    "CellPair",
    "CellStateResolver",
    "RULE_ASYMMETRIC_LINK",
    "RULE_EXISTING_PLACEHOLDER",
    "RULE_NO_LINK",
    "RULE_PLACEHOLDER_LINK",
    "RULE_ROW_DEMOTED",
    "RULE_VALIDATED",
    "Resolution",
    "classify_pair",
    "pair_rows",
]
