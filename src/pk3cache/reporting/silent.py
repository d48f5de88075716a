from __future__ import annotations

from typing import Any

from .base import Reporter


class SilentReporter(Reporter):
    """Discards everything (``-r silent`` and the test suite)."""

    def emit(self, level: str, message: str, **fields: Any) -> None:
        pass
