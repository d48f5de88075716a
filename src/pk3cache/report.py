"""Ingestion report: an optional JSON summary of one pass.

Only produced when requested (``--emit-report`` or ``report`` in the config
file). Contents:
- cache root, source directories and packages in processing order
- asset counts per kind after the pass
- merge statistics (emitted, duplicates, drained entries)
- cache statistics (artifacts built vs. reused per kind)
"""

from __future__ import annotations

from pathlib import Path
import json
from typing import Any, TYPE_CHECKING

if TYPE_CHECKING:
    from .api import IngestResult

__all__ = ["REPORT_VERSION", "report_dict", "write_report"]

REPORT_VERSION = 1


def report_dict(result: "IngestResult") -> dict[str, Any]:
    return {
        "version": REPORT_VERSION,
        "cache_dir": str(result.cache_dir),
        "directories": list(result.directories),
        "packages": list(result.packages),
        "dedup": result.dedup,
        "counts": dict(result.counts),
        "merge": result.merge.to_dict(),
        "cache": result.cache.to_dict(),
        "shader_index": str(result.shader_index),
        "duration_seconds": round(result.duration, 3),
    }


def write_report(result: "IngestResult", output_path: Path) -> Path:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", encoding="utf-8") as f:
        json.dump(report_dict(result), f, indent=2, sort_keys=True)
        f.write("\n")
    return output_path
