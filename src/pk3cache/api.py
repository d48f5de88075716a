"""High-level API: one ingestion pass plus the query surface over its index.

Example::

    manager = CacheManager("cache", ["baseoa", "mods"])
    manager.init()
    manager.get_map_names()
    manager.get_map("oa_ctf1")
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from .archive.decoder import Entry
from .archive.discovery import Package
from .archive.merger import EntryMerger, MergeStats
from .assets.cache import CacheStats, ConversionCache
from .assets.index import AssetIndex
from .assets.router import AssetRouter
from .config import IngestOptions
from .errors import Pk3CacheError, format_error, io_error, not_found
from .formats import ImageConverter, MapParser, MapSerializer, ShaderParser
from .logging import get_logger
from .reporting import get_reporter, task
from .report import write_report

__all__ = [
    "Image",
    "IngestResult",
    "CacheManager",
    "run_ingest",
]

_log = get_logger()


@dataclass(frozen=True, slots=True)
class Image:
    ext: str
    data: bytes


@dataclass(slots=True)
class IngestResult:
    cache_dir: Path
    packages: List[str]
    merge: MergeStats
    cache: CacheStats
    counts: Dict[str, int]
    shader_index: Path
    duration: float = 0.0
    dedup: bool = True
    directories: List[str] = field(default_factory=list)


class CacheManager:
    """Reads every package of the given directories and caches their assets.

    Directories are processed in the given order; within a directory the
    highest-named package wins for duplicate paths (when ``dedup`` is on).
    Queries are only valid after :meth:`init` has completed.
    """

    def __init__(
        self,
        cache_dir: str | Path,
        pk3_dirs: str | Path | Iterable[str | Path],
        *,
        dedup: bool = True,
        map_parser: Optional[MapParser] = None,
        map_serializer: Optional[MapSerializer] = None,
        shader_parser: Optional[ShaderParser] = None,
        image_converter: Optional[ImageConverter] = None,
    ):
        if isinstance(pk3_dirs, (str, Path)):
            pk3_dirs = [pk3_dirs]
        self.cache_dir = Path(cache_dir)
        self.pk3_dirs = [Path(d) for d in pk3_dirs]
        self.dedup = dedup
        overrides: Dict[str, Any] = {
            "map_parser": map_parser,
            "map_serializer": map_serializer,
            "shader_parser": shader_parser,
            "image_converter": image_converter,
        }
        self.cache = ConversionCache(
            self.cache_dir, **{k: v for k, v in overrides.items() if v is not None}
        )
        self.index = AssetIndex()
        self.last_result: IngestResult | None = None

    @classmethod
    def from_options(cls, options: IngestOptions) -> "CacheManager":
        return cls(options.cache_dir, options.pk3_dirs, dedup=options.dedup)

    # Ingestion ----------------------------------------------------------------
    def _handle(self, router: AssetRouter, entry: Entry) -> None:
        try:
            router.route(entry)
        except Pk3CacheError as e:
            raise e.located(entry.file, entry.path) from e
        except OSError as e:
            raise io_error(str(e)).located(entry.file, entry.path) from e

    def init(self) -> IngestResult:
        """Run one ingestion pass; raises the first error encountered."""
        rep = get_reporter()
        start = time.time()
        self.index.reset()
        self.cache.reset()
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise io_error(
                f"Cannot create cache directory {self.cache_dir}: {e.strerror or e}",
                {"cache_dir": str(self.cache_dir)},
            ) from e

        router = AssetRouter(self.cache, self.index)
        merger = EntryMerger(self.pk3_dirs, dedup=self.dedup)
        packages = merger.packages()

        def on_package(package: Package) -> None:
            rep.advance("ingest.packages", current_item=package.name)

        merger.on_package = on_package
        with task("ingest.packages", "Ingest packages", total=len(packages)) as final:
            merger.run(lambda entry: self._handle(router, entry))
            shader_index = self.cache.write_shader_index()
            final.update(
                packages=merger.stats.packages,
                entries=merger.stats.emitted,
                duplicates=merger.stats.duplicates,
                built=self.cache.stats.total_built,
                reused=self.cache.stats.total_reused,
                shaders=len(self.cache.shaders),
            )

        self.index.mark_ready()
        counts = self.index.counts()
        result = IngestResult(
            cache_dir=self.cache.root,
            packages=[str(p) for p in packages],
            merge=merger.stats,
            cache=self.cache.stats,
            counts=counts,
            shader_index=shader_index,
            duration=time.time() - start,
            dedup=self.dedup,
            directories=[str(d) for d in self.pk3_dirs],
        )
        self.last_result = result
        rep.status(
            "Index summary: "
            + " ".join(f"{kind}s={n}" for kind, n in counts.items())
        )
        _log.debug("ingestion finished in %.2fs", result.duration)
        return result

    ingest = init

    def is_initialized(self) -> bool:
        return self.index.ready

    # Queries ------------------------------------------------------------------
    def get_map_names(self) -> List[str]:
        return self.index.names("map")

    def get_map_file(self, name: str) -> Path:
        return self.index.map_file(name)

    def get_map(self, name: str) -> Dict[str, Any]:
        path = self.index.map_file(name)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise not_found(
                f"No map for name '{name}' found!", {"name": name, "file": str(path)}
            ) from e
        except OSError as e:
            raise io_error(f"Cannot read {path}: {e}", {"file": str(path)}) from e
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise format_error(
                f"Corrupt cached map {path}: {e}", {"file": str(path)}
            ) from e

    def get_texture_names(self) -> List[str]:
        return self.index.names("texture")

    def get_texture_file(self, path: str) -> Path:
        return self.index.texture_file(path)

    def get_levelshot_names(self) -> List[str]:
        return self.index.names("levelshot")

    def get_levelshot_file(self, name: str) -> Path:
        return self.index.levelshot_file(name)

    def get_levelshot(self, name: str) -> Image:
        path = self.index.levelshot_file(name)
        try:
            data = path.read_bytes()
        except FileNotFoundError as e:
            raise not_found(
                f"No levelshot for name '{name}' found!",
                {"name": name, "file": str(path)},
            ) from e
        except OSError as e:
            raise io_error(f"Cannot read {path}: {e}", {"file": str(path)}) from e
        return Image(ext=path.suffix.lstrip("."), data=data)

    def get_shader_names(self) -> List[str]:
        return self.index.names("shader")

    def get_shader(self, name: str) -> Dict[str, Any]:
        return self.index.shader(name)

    def get_shaders(self) -> List[Dict[str, Any]]:
        return self.index.shaders()


def run_ingest(options: IngestOptions) -> tuple[CacheManager, IngestResult]:
    """Ingest per ``options`` and write the optional report."""
    manager = CacheManager.from_options(options)
    result = manager.init()
    if options.report_path is not None:
        write_report(result, options.report_path)
    return manager, result
