"""Multi-source entry merger.

Combines the packages of an ordered list of directories into one entry
sequence. Order is: directories as given, packages by descending name
within a directory, members in archive order within a package.

The merger is pull driven and keeps at most one entry in flight::

    merger = EntryMerger([base_dir, mod_dir])
    while (entry := merger.pull()) is not None:
        handle(entry)          # may call entry.read() any number of times
        merger.ack(entry)      # releases the entry, unblocks the next pull

With ``dedup`` enabled an entry path is emitted only once; later
occurrences are released without being inflated and without suspending.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Callable, Iterable, Iterator, Optional

from ..errors import Pk3CacheError, usage_error
from ..logging import get_logger
from ..reporting import get_reporter
from .decoder import Entry, open_package
from .discovery import Package, list_all_packages

__all__ = ["MergeStats", "EntryMerger"]

_log = get_logger("merge")


@dataclass(slots=True)
class MergeStats:
    packages: int = 0
    emitted: int = 0
    duplicates: int = 0
    # emitted entries the consumer acknowledged without reading
    drained: int = 0

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


class EntryMerger:
    def __init__(
        self,
        directories: Iterable[str | Path],
        *,
        dedup: bool = True,
        on_package: Optional[Callable[[Package], None]] = None,
    ):
        self.directories = [Path(d) for d in directories]
        self.dedup = dedup
        self.on_package = on_package
        self.stats = MergeStats()
        self._seen: set[str] = set()
        self._packages: list[Package] | None = None
        self._walker: Iterator[Entry] | None = None
        self._current: Entry | None = None
        self._completed = False
        self._failed = False

    # State --------------------------------------------------------------------
    @property
    def completed(self) -> bool:
        return self._completed

    @property
    def failed(self) -> bool:
        return self._failed

    @property
    def in_flight(self) -> int:
        return 0 if self._current is None else 1

    @property
    def current(self) -> Entry | None:
        return self._current

    def packages(self) -> list[Package]:
        """Every package to be merged, in processing order."""
        if self._packages is None:
            self._packages = list_all_packages(self.directories)
            get_reporter().status(
                f"Packages summary: count={len(self._packages)} "
                + f"directories={len(self.directories)} dedup={self.dedup}"
            )
        return list(self._packages)

    # Traversal ----------------------------------------------------------------
    def _walk(self) -> Iterator[Entry]:
        for package in self.packages():
            self.stats.packages += 1
            get_reporter().verbose(f"opening package {package}")
            if self.on_package is not None:
                self.on_package(package)
            entries = open_package(package)
            try:
                for entry in entries:
                    if self.dedup:
                        if entry.path in self._seen:
                            self.stats.duplicates += 1
                            _log.debug(
                                "skip duplicate %s in %s",
                                entry.path,
                                package.name,
                            )
                            continue
                        self._seen.add(entry.path)
                    yield entry
            finally:
                # closes the archive even when the merge stops mid-package
                entries.close()

    def pull(self) -> Entry | None:
        """Return the next entry, or None once the merge is complete.

        The returned entry stays in flight until :meth:`ack` is called;
        pulling again before that is a usage error.
        """
        if self._current is not None:
            raise usage_error(
                f"Entry '{self._current.path}' has not been acknowledged",
                {"package": str(self._current.package), "entry": self._current.path},
            )
        if self._completed or self._failed:
            return None
        if self._walker is None:
            self._walker = self._walk()
        try:
            entry = next(self._walker, None)
        except Pk3CacheError:
            self._abort()
            raise
        if entry is None:
            self._completed = True
            self._walker = None
            _log.debug("merge complete: %s", self.stats)
            return None
        self._current = entry
        self.stats.emitted += 1
        return entry

    def ack(self, entry: Entry | None = None) -> None:
        current = self._current
        if current is None:
            raise usage_error("No entry in flight to acknowledge")
        if entry is not None and entry is not current:
            raise usage_error(
                f"Acknowledged '{entry.path}' but '{current.path}' is in flight",
                {"entry": entry.path, "in_flight": current.path},
            )
        self._current = None
        if not current.consumed:
            self.stats.drained += 1
        current.release()

    def close(self) -> None:
        """Stop merging; nothing is emitted afterwards."""
        if not self._completed:
            self._abort()

    def _abort(self) -> None:
        self._failed = True
        if self._current is not None:
            self._current.release()
            self._current = None
        if self._walker is not None:
            self._walker.close()
            self._walker = None

    # Drivers ------------------------------------------------------------------
    def __iter__(self) -> Iterator[Entry]:
        """Yield entries, acknowledging each when the next one is requested."""
        try:
            while True:
                entry = self.pull()
                if entry is None:
                    return
                yield entry
                if self._current is entry:
                    self.ack(entry)
        finally:
            self.close()

    def run(self, handler: Callable[[Entry], object]) -> MergeStats:
        """Feed every entry to ``handler``; acknowledge once it returns."""
        while True:
            entry = self.pull()
            if entry is None:
                return self.stats
            try:
                handler(entry)
            except BaseException:
                self.close()
                raise
            if self._current is entry:
                self.ack(entry)
