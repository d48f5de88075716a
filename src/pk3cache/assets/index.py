"""In-memory asset index built during ingestion.

Every lookup requires the index to be ready (ingestion finished); misses
raise ``NotFoundError`` rather than returning a default.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List

from ..errors import not_found, usage_error
from ..utils.paths import strip_ext

__all__ = ["AssetIndex", "KINDS"]

KINDS = ("map", "texture", "levelshot", "shader")


class AssetIndex:
    def __init__(self) -> None:
        self.maps: Dict[str, Path] = {}
        self.textures: Dict[str, Path] = {}
        self.levelshots: Dict[str, Path] = {}
        self.shader_defs: Dict[str, Dict[str, Any]] = {}
        self._ready = False

    # Lifecycle ----------------------------------------------------------------
    @property
    def ready(self) -> bool:
        return self._ready

    def mark_ready(self) -> None:
        self._ready = True

    def reset(self) -> None:
        self.maps.clear()
        self.textures.clear()
        self.levelshots.clear()
        self.shader_defs.clear()
        self._ready = False

    def _require_ready(self) -> None:
        if not self._ready:
            raise usage_error("Asset index queried before ingestion completed")

    # Recording (ingestion side) -------------------------------------------------
    def add_map(self, name: str, file: Path) -> None:
        self.maps[name] = file

    def add_texture(self, name: str, file: Path) -> None:
        self.textures[name] = file

    def add_levelshot(self, name: str, file: Path) -> None:
        self.levelshots[name] = file

    def add_shader(self, name: str, definition: Dict[str, Any]) -> None:
        self.shader_defs[name] = definition

    def counts(self) -> Dict[str, int]:
        return {
            "map": len(self.maps),
            "texture": len(self.textures),
            "levelshot": len(self.levelshots),
            "shader": len(self.shader_defs),
        }

    # Queries ------------------------------------------------------------------
    def names(self, kind: str) -> List[str]:
        self._require_ready()
        table = {
            "map": self.maps,
            "texture": self.textures,
            "levelshot": self.levelshots,
            "shader": self.shader_defs,
        }.get(kind)
        if table is None:
            raise usage_error(f"Unknown asset kind '{kind}'", {"kinds": list(KINDS)})
        return sorted(table)

    def map_file(self, name: str) -> Path:
        self._require_ready()
        if name not in self.maps:
            raise not_found(f"No map for name '{name}' found!", {"name": name})
        return self.maps[name]

    def texture_file(self, path: str) -> Path:
        """Look up a texture by logical name; an extension is ignored."""
        self._require_ready()
        if path in self.textures:
            return self.textures[path]
        name = strip_ext(path)
        if name not in self.textures:
            raise not_found(f"No texture for '{path}' found!", {"name": name})
        return self.textures[name]

    def levelshot_file(self, name: str) -> Path:
        self._require_ready()
        if name not in self.levelshots:
            raise not_found(f"No levelshot for name '{name}' found!", {"name": name})
        return self.levelshots[name]

    def shader(self, name: str) -> Dict[str, Any]:
        self._require_ready()
        if name not in self.shader_defs:
            raise not_found(f"No shader for name '{name}' found!", {"name": name})
        return self.shader_defs[name]

    def shaders(self) -> List[Dict[str, Any]]:
        self._require_ready()
        return list(self.shader_defs.values())
