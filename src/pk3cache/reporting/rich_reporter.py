from __future__ import annotations

import os
from typing import Any, Dict, List

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)

from .base import Reporter, TaskRecord

_MARKUP = {
    "info": "[green]INFO[/]",
    "warning": "[yellow]WARN[/]",
    "error": "[bold red]ERROR[/]",
}


def _transient_from_env() -> bool:
    value = os.getenv("PK3CACHE_PROGRESS_TRANSIENT", "0")
    return value.lower() in ("1", "true", "yes")


class RichReporter(Reporter):
    """Live progress bars on a TTY; completion lines once a task ends.

    With ``PK3CACHE_PROGRESS_TRANSIENT=1`` the bars disappear when done and
    the completion lines are printed together on :meth:`flush`.
    """

    supports_progress = True

    def __init__(self, console: Console | None = None):
        super().__init__()
        self.console = console or Console(stderr=True, highlight=False)
        self.transient = _transient_from_env()
        self.progress: Progress | None = None
        self._bars: Dict[str, TaskID] = {}
        self._pending: List[str] = []

    def _progress(self) -> Progress:
        if self.progress is None:
            self.progress = Progress(
                SpinnerColumn(),
                TextColumn("{task.description}"),
                BarColumn(bar_width=None),
                TextColumn("{task.completed}/{task.total}"),
                TextColumn("[dim]{task.fields[item]}"),
                TimeElapsedColumn(),
                console=self.console,
                transient=self.transient,
                expand=True,
            )
            self.progress.start()
        return self.progress

    def on_start(self, rec: TaskRecord) -> None:
        if rec.total is None:
            # nothing to measure: a header is enough
            self.console.rule(rec.name)
            return
        self._bars[rec.task_id] = self._progress().add_task(
            rec.name, total=rec.total, item=""
        )

    def on_advance(self, rec: TaskRecord) -> None:
        bar = self._bars.get(rec.task_id)
        if bar is not None and self.progress is not None:
            self.progress.update(bar, completed=rec.completed, item=rec.item)

    def on_end(self, rec: TaskRecord) -> None:
        bar = self._bars.pop(rec.task_id, None)
        if bar is not None and self.progress is not None:
            self.progress.update(bar, completed=rec.completed, item="")
        if self.transient:
            self._pending.append(rec.summary_line())
        else:
            self.console.print(rec.summary_line(), markup=False)
        if not self._bars:
            self.flush()

    def emit(self, level: str, message: str, **fields: Any) -> None:
        label = _MARKUP.get(level, f"[cyan]{level.upper()}[/]")
        self.console.print(f"{label}: ", end="")
        self.console.print(message, markup=False)

    def flush(self) -> None:
        if self.progress is not None:
            try:
                self.progress.stop()
            finally:
                self.progress = None
        if self._pending:
            self.console.print("\n".join(self._pending), markup=False)
            self._pending.clear()
