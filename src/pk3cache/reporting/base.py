"""Reporter core: task bookkeeping shared by every output backend.

Backends only decide how things look. They implement ``emit`` for messages
and may override the ``on_start`` / ``on_advance`` / ``on_end`` hooks, which
receive the already updated :class:`TaskRecord`.
"""

from __future__ import annotations

import sys
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Iterator, Optional

__all__ = [
    "TaskStatus",
    "TaskRecord",
    "Reporter",
    "STAT_KEYS",
    "set_reporter",
    "get_reporter",
    "set_verbosity",
    "get_verbosity",
    "task",
]

# Final task metadata echoed on completion lines, in display order.
STAT_KEYS = ("packages", "entries", "duplicates", "built", "reused", "shaders")

ICONS = {
    "SUCCESS": "✔",
    "FAILED": "✖",
    "SKIPPED": "→",
}


class TaskStatus(Enum):
    RUNNING = auto()
    SUCCESS = auto()
    FAILED = auto()
    SKIPPED = auto()


@dataclass(slots=True)
class TaskRecord:
    task_id: str
    name: str
    total: Optional[int] = None
    completed: int = 0
    # what the task is working on right now (e.g. a package name)
    item: str = ""
    status: TaskStatus = TaskStatus.RUNNING
    start_time: float = field(default_factory=time.time)
    end_time: float | None = None
    meta: Dict[str, Any] = field(default_factory=dict)

    @property
    def duration(self) -> float:
        return (self.end_time - self.start_time) if self.end_time else 0.0

    @property
    def counter(self) -> str:
        total = "?" if self.total is None else self.total
        return f"{self.completed}/{total}"

    def stats(self) -> str:
        pairs = [f"{key}={self.meta[key]}" for key in STAT_KEYS if key in self.meta]
        return f" [{' '.join(pairs)}]" if pairs else ""

    def summary_line(self) -> str:
        """``✔ Ingest packages 3/3 (0.41s) [packages=3 entries=12]``"""
        icon = ICONS.get(self.status.name, "?")
        counter = f" {self.counter}" if self.total is not None else ""
        return f"{icon} {self.name}{counter} ({self.duration:.2f}s){self.stats()}"


_VERBOSITY: int = 0  # set by the CLI (-v repeats)


def set_verbosity(level: int) -> None:
    global _VERBOSITY
    _VERBOSITY = max(0, level)


def get_verbosity() -> int:
    return _VERBOSITY


class Reporter:
    supports_progress: bool = False

    def __init__(self) -> None:
        self._tasks: Dict[str, TaskRecord] = {}

    # Task lifecycle -------------------------------------------------------------
    def start_task(
        self, task_id: str, name: str, total: int | None = None, **meta: Any
    ) -> None:
        rec = TaskRecord(task_id, name, total, meta=dict(meta))
        self._tasks[task_id] = rec
        self.on_start(rec)

    def advance(self, task_id: str, step: int = 1, **meta: Any) -> None:
        rec = self._tasks.get(task_id)
        if rec is None:
            return
        rec.completed += step
        rec.item = str(meta.pop("current_item", "") or "")
        rec.meta.update(meta)
        self.on_advance(rec)

    def end_task(
        self,
        task_id: str,
        status: TaskStatus = TaskStatus.SUCCESS,
        **final_meta: Any,
    ) -> None:
        rec = self._tasks.pop(task_id, None)
        if rec is None:
            return
        rec.status = status
        rec.end_time = time.time()
        rec.item = ""
        rec.meta.update(final_meta)
        self.on_end(rec)

    def on_start(self, rec: TaskRecord) -> None:
        pass

    def on_advance(self, rec: TaskRecord) -> None:
        pass

    def on_end(self, rec: TaskRecord) -> None:
        pass

    # Messages -------------------------------------------------------------------
    def emit(self, level: str, message: str, **fields: Any) -> None:
        """Write one message; ``level`` is info, warning, error or verboseN."""
        raise NotImplementedError

    def status(self, message: str, **fields: Any) -> None:
        self.emit("info", message, **fields)

    def warning(self, message: str, **fields: Any) -> None:
        self.emit("warning", message, **fields)

    def error(self, message: str, **fields: Any) -> None:
        self.emit("error", message, **fields)

    def verbose(self, message: str, *, level: int = 1, **fields: Any) -> None:
        if get_verbosity() >= level:
            self.emit(f"verbose{level}", message, **fields)

    def flush(self) -> None:
        pass


_ACTIVE_REPORTER: Reporter | None = None


def set_reporter(rep: Reporter) -> None:
    global _ACTIVE_REPORTER
    _ACTIVE_REPORTER = rep


def get_reporter() -> Reporter:
    global _ACTIVE_REPORTER
    if _ACTIVE_REPORTER is None:
        from .plain import PlainReporter  # local import to avoid cycle

        _ACTIVE_REPORTER = PlainReporter(stream=sys.stderr)
    return _ACTIVE_REPORTER


@contextmanager
def task(
    task_id: str, name: str, total: int | None = None, **meta: Any
) -> Iterator[Dict[str, Any]]:
    """Run a block as a reporter task; the task is FAILED if the block raises.

    The yielded dict collects final metadata (e.g. ``entries``) that is
    attached to the task when it ends.
    """
    rep = get_reporter()
    rep.start_task(task_id, name, total, **meta)
    final: Dict[str, Any] = {}
    try:
        yield final
    except Exception:
        rep.end_task(task_id, TaskStatus.FAILED, **final)
        raise
    rep.end_task(task_id, TaskStatus.SUCCESS, **final)
