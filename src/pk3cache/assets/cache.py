"""Conversion cache: derived artifacts under the cache root.

Layout::

    <root>/maps/<name>.json        parsed map document
    <root>/textures/...            mirrored texture path, .tga stored as .png
    <root>/levelshots/...          mirrored levelshot path, .tga stored as .png
    <root>/shaders.json            every shader definition with provenance

Map and image artifacts are built at most once: an existing target file is
taken as proof that its entry was already processed, and the entry is not
even decompressed. Shader scripts are always parsed again and the index is
rewritten at the end of every pass.
"""

from __future__ import annotations

import json
import os
import struct
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List

from ..archive.decoder import Entry
from ..errors import Pk3CacheError, format_error, io_error
from ..formats import (
    ImageConverter,
    MapParser,
    MapSerializer,
    ShaderParser,
    parse_bsp,
    parse_shaders,
    serialize_map,
    tga_to_png,
)
from ..logging import get_logger
from ..utils.paths import safe_file_path

__all__ = [
    "SHADER_INDEX_NAME",
    "LEGACY_IMAGE_EXT",
    "PORTABLE_IMAGE_EXT",
    "CacheStats",
    "ImageTarget",
    "ConversionCache",
]

SHADER_INDEX_NAME = "shaders.json"
LEGACY_IMAGE_EXT = "tga"
PORTABLE_IMAGE_EXT = "png"

_log = get_logger("cache")


def _per_kind() -> Dict[str, int]:
    return {"map": 0, "image": 0, "shader": 0}


@dataclass(slots=True)
class CacheStats:
    built: Dict[str, int] = field(default_factory=_per_kind)
    reused: Dict[str, int] = field(default_factory=_per_kind)

    @property
    def total_built(self) -> int:
        return sum(self.built.values())

    @property
    def total_reused(self) -> int:
        return sum(self.reused.values())

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class ImageTarget:
    ext: str
    file: Path
    # True when the source is a legacy TGA that must be re-encoded
    convert: bool


class ConversionCache:
    def __init__(
        self,
        cache_root: str | Path,
        *,
        map_parser: MapParser = parse_bsp,
        map_serializer: MapSerializer = serialize_map,
        shader_parser: ShaderParser = parse_shaders,
        image_converter: ImageConverter = tga_to_png,
    ):
        self.root = Path(cache_root).resolve()
        self.map_parser = map_parser
        self.map_serializer = map_serializer
        self.shader_parser = shader_parser
        self.image_converter = image_converter
        # declared shader name -> definition (+ file/path provenance)
        self.shaders: Dict[str, Dict[str, Any]] = {}
        self.stats = CacheStats()

    # Targets ------------------------------------------------------------------
    def map_target(self, name: str) -> Path:
        return safe_file_path(self.root, f"maps/{name}.json")

    def image_target(self, path: str) -> ImageTarget:
        ext = path[path.rfind(".") + 1 :]
        if ext == LEGACY_IMAGE_EXT:
            rel = path[: -len(LEGACY_IMAGE_EXT)] + PORTABLE_IMAGE_EXT
            return ImageTarget(PORTABLE_IMAGE_EXT, safe_file_path(self.root, rel), True)
        return ImageTarget(ext, safe_file_path(self.root, path), False)

    @property
    def shader_index_path(self) -> Path:
        return self.root / SHADER_INDEX_NAME

    # Writing ------------------------------------------------------------------
    def _write(self, target: Path, data: bytes) -> None:
        # Write-then-rename: a target that exists is always complete.
        tmp = target.with_name(target.name + ".part")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_bytes(data)
            os.replace(tmp, target)
        except OSError as e:
            raise io_error(
                f"Cannot write {target}: {e.strerror or e}", {"target": str(target)}
            ) from e

    # Operations ---------------------------------------------------------------
    def cache_map(self, entry: Entry, name: str) -> Path:
        target = self.map_target(name)
        if target.exists():
            self.stats.reused["map"] += 1
            return target
        try:
            document = self.map_parser(entry.read())
            text = self.map_serializer(document)
        except Pk3CacheError:
            raise
        except (ValueError, TypeError, struct.error) as e:
            raise format_error(f"Cannot parse map '{name}': {e}") from e
        self._write(target, text.encode("utf-8"))
        self.stats.built["map"] += 1
        _log.debug("built map %s -> %s", name, target)
        return target

    def cache_image(self, entry: Entry) -> Path:
        target = self.image_target(entry.path)
        if target.file.exists():
            self.stats.reused["image"] += 1
            return target.file
        data = entry.read()
        if target.convert:
            try:
                data = self.image_converter(data)
            except Pk3CacheError:
                raise
            except (ValueError, TypeError, OSError) as e:
                raise format_error(f"Cannot convert image: {e}") from e
        self._write(target.file, data)
        self.stats.built["image"] += 1
        _log.debug("built image %s -> %s", entry.path, target.file)
        return target.file

    def cache_shaders(self, entry: Entry) -> List[str]:
        """Parse a shader script and register every definition it declares.

        A later definition with the same name replaces the earlier one.
        """
        text = entry.read().decode("utf-8", errors="replace")
        try:
            definitions = self.shader_parser(text)
        except Pk3CacheError:
            raise
        except (ValueError, TypeError) as e:
            raise format_error(f"Cannot parse shader script: {e}") from e
        names: List[str] = []
        for definition in definitions:
            record = {**definition, "file": entry.file, "path": entry.path}
            self.shaders[record["name"]] = record
            names.append(record["name"])
        self.stats.built["shader"] += len(names)
        return names

    def write_shader_index(self) -> Path:
        text = json.dumps(list(self.shaders.values()), indent=2)
        self._write(self.shader_index_path, text.encode("utf-8"))
        return self.shader_index_path

    def reset(self) -> None:
        """Forget per-pass state (shader registry, stats)."""
        self.shaders = {}
        self.stats = CacheStats()
