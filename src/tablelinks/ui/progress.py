"""Rich progress display driven by pipeline events.

The pipeline reports through ``emit(event, payload)`` callbacks and never
imports rich itself; this reporter maps those events onto progress tasks.
"""

from __future__ import annotations

from types import TracebackType

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)


class ProgressReporter:
    def __init__(self, console: Console | None = None, *, transient: bool = False) -> None:
        self.console = console or Console(stderr=True)
        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=self.console,
            transient=transient,
        )
        self._tasks: dict[str, TaskID] = {}

    def __enter__(self) -> ProgressReporter:
        self.progress.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.progress.stop()

    def add_step(self, description: str, total: int | None = None) -> TaskID:
        return self.progress.add_task(description, total=total)

    def finish_task(self, task_id: TaskID) -> None:
        task = next((t for t in self.progress.tasks if t.id == task_id), None)
        if task is not None and task.total is not None:
            self.progress.update(task_id, completed=task.total)
        self.progress.remove_task(task_id)

    def _finish(self, name: str) -> None:
        task_id = self._tasks.pop(name, None)
        if task_id is not None:
            self.finish_task(task_id)

    def emit(self, event: str, payload: dict[str, int | str]) -> None:
        if event == "items:start":
            total = int(payload.get("count", 0))
            self._tasks["items"] = self.add_step("Reconciling items", total=total)
        elif event == "item:start":
            task_id = self._tasks.get("items")
            if task_id is not None:
                self.progress.update(task_id, description=f"Reconciling {payload.get('item', '')}")
        elif event == "item:done":
            task_id = self._tasks.get("items")
            if task_id is not None:
                self.progress.advance(task_id)
        elif event == "items:finalized":
            self._finish("items")
        elif event == "generate:start":
            total = int(payload.get("count", 0))
            self._tasks["generate"] = self.add_step(f"Generating {payload.get('lang', '')} documents", total=total)
        elif event in ("generate:written", "generate:kept"):
            task_id = self._tasks.get("generate")
            if task_id is not None:
                self.progress.advance(task_id)
        elif event == "generate:finalized":
            self._finish("generate")


__all__ = ["ProgressReporter"]
