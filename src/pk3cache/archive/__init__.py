"""Package discovery, decoding and multi-directory merging."""

from .discovery import PACKAGE_EXTENSION, Package, list_all_packages, list_packages
from .decoder import Entry, open_package
from .merger import EntryMerger, MergeStats

__all__ = [
    "PACKAGE_EXTENSION",
    "Package",
    "list_packages",
    "list_all_packages",
    "Entry",
    "open_package",
    "EntryMerger",
    "MergeStats",
]
