"""Path utilities (safe resolution under the cache root)."""

from __future__ import annotations
from pathlib import Path

from ..errors import format_error

__all__ = ["safe_file_path", "strip_ext"]


def safe_file_path(base_dir: Path, file_path: str) -> Path:
    """Join an archive path onto ``base_dir``, refusing to escape it."""
    base_dir = base_dir.resolve()
    resolved = (base_dir / file_path).resolve()
    try:
        resolved.relative_to(base_dir)
    except ValueError as e:
        raise format_error(
            f"Entry path '{file_path}' escapes the cache root",
            {"path": file_path},
        ) from e
    return resolved


def strip_ext(path: str) -> str:
    """Drop everything from the last dot on (``a/b.tga`` -> ``a/b``)."""
    pos = path.rfind(".")
    return path[:pos] if pos != -1 else path
