from __future__ import annotations

import sys
from typing import Any

from .base import Reporter, TaskRecord, get_verbosity

# level -> (ANSI color, label)
_LABELS = {
    "info": ("32", "INFO"),
    "warning": ("33", "WARN"),
    "error": ("31", "ERROR"),
}


class PlainReporter(Reporter):
    """Line-oriented reporter for terminals and CI logs."""

    def __init__(self, stream=None, use_color: bool | None = None):
        super().__init__()
        self.stream = stream or sys.stderr
        if use_color is None:
            use_color = getattr(self.stream, "isatty", lambda: False)()
        self.use_color = use_color

    def _paint(self, code: str, text: str) -> str:
        return f"\x1b[{code}m{text}\x1b[0m" if self.use_color else text

    def _line(self, text: str) -> None:
        self.stream.write(text + "\n")

    def on_advance(self, rec: TaskRecord) -> None:
        # one line per package only when asked for
        if get_verbosity() < 1:
            return
        self._line(f"   · {rec.name}: {rec.item or '#' + str(rec.completed)} ({rec.counter})")

    def on_end(self, rec: TaskRecord) -> None:
        self._line(" " + rec.summary_line())

    def emit(self, level: str, message: str, **fields: Any) -> None:
        code, label = _LABELS.get(level, ("36", level.upper()))
        self._line(f"{self._paint(code, label)}: {message}")
