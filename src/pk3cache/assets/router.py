"""Asset routing: classify entry paths and dispatch to the conversion cache.

- map: ``maps/<name>.bsp`` -> ``<name>``
- texture: ``textures/**.{png,tga,jpg}`` -> path without extension
- levelshot: ``levelshots/<name>.{png,tga,jpg}`` -> ``<name>``
- shader: ``scripts/**.shader`` -> every shader name declared in the file

Paths are archive-internal, forward-slash separated and case-sensitive.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from ..archive.decoder import Entry
from ..logging import get_logger
from ..utils.paths import strip_ext
from .cache import ConversionCache
from .index import AssetIndex

__all__ = [
    "AssetKind",
    "Route",
    "PATTERN_MAP",
    "PATTERN_TEXTURE",
    "PATTERN_LEVELSHOT",
    "PATTERN_SHADER",
    "classify",
    "strip_ext",
    "AssetRouter",
]

_log = get_logger("router")


class AssetKind(str, Enum):
    MAP = "map"
    TEXTURE = "texture"
    LEVELSHOT = "levelshot"
    SHADER = "shader"


PATTERN_MAP = re.compile(r"^maps/(.*)\.bsp$")
PATTERN_TEXTURE = re.compile(r"^textures/.*\.(png|tga|jpg)$")
PATTERN_LEVELSHOT = re.compile(r"^levelshots/(.*)\.(png|tga|jpg)$")
PATTERN_SHADER = re.compile(r"^scripts/.*\.shader$")


@dataclass(frozen=True, slots=True)
class Route:
    kind: AssetKind
    # None for shader scripts, whose names come from the parsed text
    name: Optional[str] = None


def classify(path: str) -> Route | None:
    m = PATTERN_MAP.match(path)
    if m:
        return Route(AssetKind.MAP, m.group(1))
    if PATTERN_TEXTURE.match(path):
        return Route(AssetKind.TEXTURE, strip_ext(path))
    m = PATTERN_LEVELSHOT.match(path)
    if m:
        return Route(AssetKind.LEVELSHOT, m.group(1))
    if PATTERN_SHADER.match(path):
        return Route(AssetKind.SHADER)
    return None


class AssetRouter:
    """Routes one merged entry to its cache operation and records the result.

    ``route`` returns only when the artifact is on disk and indexed, so the
    caller can acknowledge the entry right after.
    """

    def __init__(self, cache: ConversionCache, index: AssetIndex):
        self.cache = cache
        self.index = index

    def route(self, entry: Entry) -> Route | None:
        route = classify(entry.path)
        if route is None:
            _log.debug("ignore %s", entry.path)
            return None
        if route.kind is AssetKind.MAP:
            assert route.name is not None
            self.index.add_map(route.name, self.cache.cache_map(entry, route.name))
        elif route.kind is AssetKind.TEXTURE:
            assert route.name is not None
            self.index.add_texture(route.name, self.cache.cache_image(entry))
        elif route.kind is AssetKind.LEVELSHOT:
            assert route.name is not None
            self.index.add_levelshot(route.name, self.cache.cache_image(entry))
        else:
            names: List[str] = self.cache.cache_shaders(entry)
            for name in names:
                self.index.add_shader(name, self.cache.shaders[name])
        return route
