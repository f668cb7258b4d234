from __future__ import annotations

from collections.abc import Sequence

from rich.console import Console
from rich.table import Table

from tablelinks.model.plan import ItemResult, ItemStatus

_STATUS_STYLE = {
    ItemStatus.OK: "green",
    ItemStatus.SKIPPED: "yellow",
    ItemStatus.FAILED: "red",
}


def build_summary_table(results: Sequence[ItemResult], *, dry_run: bool = False) -> Table:
    title = "Reconciliation summary (dry run)" if dry_run else "Reconciliation summary"
    table = Table(title=title, show_footer=True)
    table.add_column("Item", footer="Total")
    table.add_column("Status")
    table.add_column("Primary", justify="right", footer=str(sum(r.primary_changes for r in results)))
    table.add_column("Secondary", justify="right", footer=str(sum(r.secondary_changes for r in results)))
    table.add_column("Changed", justify="right", footer=str(sum(r.changed for r in results)))
    table.add_column("Files")
    for r in results:
        style = _STATUS_STYLE[r.status]
        files = " / ".join(p.name for p in (r.primary_path, r.secondary_path) if p is not None)
        table.add_row(
            r.item,
            f"[{style}]{r.status.value}[/{style}]",
            str(r.primary_changes),
            str(r.secondary_changes),
            str(r.changed),
            files or "-",
        )
    return table


def print_summary(results: Sequence[ItemResult], console: Console | None = None, *, dry_run: bool = False) -> None:
    console = console or Console()
    console.print(build_summary_table(results, dry_run=dry_run))
    for r in results:
        for msg in r.warnings:
            console.print(f"⚠️  {r.item}: {msg}", markup=False)


__all__ = ["build_summary_table", "print_summary"]
