"""Default asset parsers and converters used by the conversion cache."""

from __future__ import annotations

from typing import Any, Callable, Dict, List

from .bsp import parse_bsp, serialize_map
from .image import tga_to_png
from .shader import parse_shaders

# Pluggable collaborator signatures
MapParser = Callable[[bytes], Dict[str, Any]]
MapSerializer = Callable[[Dict[str, Any]], str]
ShaderParser = Callable[[str], List[Dict[str, Any]]]
ImageConverter = Callable[[bytes], bytes]

__all__ = [
    "MapParser",
    "MapSerializer",
    "ShaderParser",
    "ImageConverter",
    "parse_bsp",
    "serialize_map",
    "parse_shaders",
    "tga_to_png",
]
