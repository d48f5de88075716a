"""pk3cache - merge pk3 game packages and cache their converted assets.

Packages from an ordered list of directories are streamed entry by entry;
maps are parsed to JSON, TGA textures and levelshots are converted to PNG
and shader scripts are collected into a single index under the cache root.
"""

from .api import CacheManager, Image, IngestResult, run_ingest
from .archive import Entry, EntryMerger, MergeStats, Package, list_packages
from .assets import AssetIndex, AssetKind, ConversionCache, classify
from .config import IngestOptions, load_options
from .errors import (
    FormatError,
    IoError,
    NotFoundError,
    Pk3CacheError,
    UsageError,
)

__version__ = "0.1.0"

__all__ = [
    "CacheManager",
    "Image",
    "IngestResult",
    "run_ingest",
    "Entry",
    "EntryMerger",
    "MergeStats",
    "Package",
    "list_packages",
    "AssetIndex",
    "AssetKind",
    "ConversionCache",
    "classify",
    "IngestOptions",
    "load_options",
    "Pk3CacheError",
    "IoError",
    "FormatError",
    "NotFoundError",
    "UsageError",
]
