"""Routing, conversion caching and indexing of merged package entries."""

from .cache import CacheStats, ConversionCache, ImageTarget, SHADER_INDEX_NAME
from .index import AssetIndex, KINDS
from .router import AssetKind, AssetRouter, Route, classify

__all__ = [
    "CacheStats",
    "ConversionCache",
    "ImageTarget",
    "SHADER_INDEX_NAME",
    "AssetIndex",
    "KINDS",
    "AssetKind",
    "AssetRouter",
    "Route",
    "classify",
]
