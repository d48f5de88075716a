from __future__ import annotations

import json
import re
import sys
from typing import Any, Dict

from .base import Reporter, TaskRecord

# "<Kind> summary: k=v k=v" status lines also produce a structured event.
_SUMMARY = re.compile(r"^(packages|merge|cache|index|ingest) summary:(.*)$", re.I)


def _value(text: str) -> Any:
    return int(text) if text.isdigit() else text


class JsonLinesReporter(Reporter):
    """Machine-readable reporter: one JSON object per line."""

    def __init__(self, stream=None):
        super().__init__()
        self.stream = stream or sys.stdout

    def _emit(self, event: str, payload: Dict[str, Any]) -> None:
        record = {**payload, "event": event}
        self.stream.write(json.dumps(record, sort_keys=True, default=str) + "\n")

    def on_start(self, rec: TaskRecord) -> None:
        self._emit(
            "task_start",
            {**rec.meta, "id": rec.task_id, "name": rec.name, "total": rec.total},
        )

    def on_advance(self, rec: TaskRecord) -> None:
        self._emit(
            "task_progress",
            {"id": rec.task_id, "completed": rec.completed, "item": rec.item},
        )

    def on_end(self, rec: TaskRecord) -> None:
        self._emit(
            "task_end",
            {
                **rec.meta,
                "id": rec.task_id,
                "status": rec.status.name.lower(),
                "completed": rec.completed,
                "total": rec.total,
                "duration_seconds": round(rec.duration, 3),
            },
        )

    def emit(self, level: str, message: str, **fields: Any) -> None:
        m = _SUMMARY.match(message) if level == "info" else None
        if m:
            pairs: Dict[str, Any] = {}
            for token in m.group(2).split():
                key, sep, value = token.partition("=")
                if sep:
                    pairs[key] = _value(value)
            self._emit(
                "summary",
                {
                    **pairs,
                    **fields,
                    "summary_type": m.group(1).lower(),
                    "raw": message,
                },
            )
        self._emit("status", {**fields, "message": message, "level": level})
