"""Package decoding: lazy, forward-only entry sequences over one ``.pk3``.

Public API:
- Entry: one archive member with deferred decompression
- open_package(package) -> Iterator[Entry]

Decompression happens only when ``Entry.read()`` is called. Entries that
are released without being read are never inflated; the archive handle is
closed when the sequence is exhausted or closed early.
"""

from __future__ import annotations

import zipfile
import zlib
from pathlib import Path
from typing import Iterator

from ..errors import format_error, io_error, usage_error
from .discovery import Package

__all__ = ["Entry", "open_package"]


class Entry:
    """A file member of a package, addressed by its archive-internal path."""

    __slots__ = (
        "package",
        "path",
        "size",
        "compressed_size",
        "_archive",
        "_info",
        "_data",
        "_released",
    )

    def __init__(
        self, package: Package, archive: zipfile.ZipFile, info: zipfile.ZipInfo
    ):
        self.package = package
        self.path: str = info.filename
        self.size: int = info.file_size
        self.compressed_size: int = info.compress_size
        self._archive = archive
        self._info = info
        self._data: bytes | None = None
        self._released = False

    @property
    def file(self) -> str:
        """Name of the owning package (provenance)."""
        return self.package.name

    @property
    def consumed(self) -> bool:
        return self._data is not None

    @property
    def released(self) -> bool:
        return self._released

    def read(self) -> bytes:
        if self._released:
            raise usage_error(
                f"Entry '{self.path}' was already released",
                {"package": str(self.package), "entry": self.path},
            )
        if self._data is None:
            try:
                self._data = self._archive.read(self._info)
            except (zipfile.BadZipFile, zlib.error, EOFError) as e:
                raise format_error(
                    f"Cannot decompress '{self.path}': {e}",
                    {"package": str(self.package), "entry": self.path},
                ) from e
            except (NotImplementedError, RuntimeError) as e:
                # unsupported compression method or encrypted member
                raise format_error(
                    f"Unsupported member '{self.path}': {e}",
                    {"package": str(self.package), "entry": self.path},
                ) from e
            except OSError as e:
                raise io_error(
                    f"Cannot read '{self.path}': {e}",
                    {"package": str(self.package), "entry": self.path},
                ) from e
        return self._data

    def release(self) -> None:
        """Drop the member; unread members are skipped without inflating."""
        self._released = True
        self._data = None

    def __repr__(self) -> str:
        return f"Entry({self.package.name!r}, {self.path!r})"


def _open_archive(path: Path) -> zipfile.ZipFile:
    try:
        return zipfile.ZipFile(path, "r")
    except zipfile.BadZipFile as e:
        raise format_error(
            f"Malformed package {path}: {e}", {"package": str(path)}
        ) from e
    except OSError as e:
        raise io_error(
            f"Cannot open package {path}: {e.strerror or e}",
            {"package": str(path)},
        ) from e


def open_package(package: Package) -> Iterator[Entry]:
    """Yield the file entries of ``package`` in archive order.

    Directory members are skipped. Every yielded entry is released when the
    consumer advances, so callers must finish with an entry before asking
    for the next one.
    """
    with _open_archive(package.path) as archive:
        for info in archive.infolist():
            if info.is_dir():
                continue
            entry = Entry(package, archive, info)
            try:
                yield entry
            finally:
                entry.release()
