"""Ingestion options and config file loading (JSON/YAML)."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Sequence

import yaml

from .errors import format_error, io_error, usage_error

__all__ = ["IngestOptions", "load_options", "merge_cli_overrides"]


@dataclass(slots=True)
class IngestOptions:
    cache_dir: Path
    pk3_dirs: list[Path] = field(default_factory=list)
    # Skip entries whose path was already emitted by a higher-precedence package
    dedup: bool = True
    # Optional path; when set a JSON summary of the pass is written there
    report_path: Path | None = None


def _resolve(base: Path, value: Any, key: str) -> Path:
    if not isinstance(value, str):
        raise usage_error(f"'{key}' must be a string path", {"value": value})
    p = Path(value).expanduser()
    return p if p.is_absolute() else (base / p)


def load_options(path: str | Path) -> IngestOptions:
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as e:
        raise io_error(f"Cannot read config {p}: {e}", {"path": str(p)}) from e
    try:
        if p.suffix.lower() in {".yaml", ".yml"}:
            data: Any = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise format_error(f"Malformed config {p}: {e}", {"path": str(p)}) from e
    if not isinstance(data, dict):
        raise usage_error("Root of config must be a mapping", {"path": str(p)})

    base = p.parent
    if "cache_dir" not in data:
        raise usage_error("Config is missing 'cache_dir'", {"path": str(p)})
    dirs = data.get("pk3_dirs", [])
    if isinstance(dirs, str):
        dirs = [dirs]
    if not isinstance(dirs, list):
        raise usage_error("'pk3_dirs' must be a list", {"path": str(p)})
    report = data.get("report")
    return IngestOptions(
        cache_dir=_resolve(base, data["cache_dir"], "cache_dir"),
        pk3_dirs=[_resolve(base, d, "pk3_dirs") for d in dirs],
        dedup=bool(data.get("dedup", True)),
        report_path=_resolve(base, report, "report") if report else None,
    )


def merge_cli_overrides(
    options: IngestOptions | None,
    *,
    cache_dir: Path | None = None,
    pk3_dirs: Sequence[Path] = (),
    no_dedup: bool = False,
    report_path: Path | None = None,
) -> IngestOptions:
    """Apply command line values on top of (optional) file options."""
    if options is None:
        if cache_dir is None:
            raise usage_error("A cache directory is required (--cache or --config)")
        options = IngestOptions(cache_dir=cache_dir)
    elif cache_dir is not None:
        options.cache_dir = cache_dir
    if pk3_dirs:
        options.pk3_dirs = list(pk3_dirs)
    if no_dedup:
        options.dedup = False
    if report_path is not None:
        options.report_path = report_path
    if not options.pk3_dirs:
        raise usage_error("At least one package directory is required")
    return options
