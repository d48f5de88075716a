"""Package discovery: list the ``.pk3`` files of a directory in precedence order.

Higher-named packages are conventionally patches, so they are listed first
and win when the same entry path occurs in several packages.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from ..errors import io_error

__all__ = ["PACKAGE_EXTENSION", "Package", "list_packages", "list_all_packages"]

PACKAGE_EXTENSION = ".pk3"


@dataclass(frozen=True, slots=True)
class Package:
    directory: Path
    name: str

    @property
    def path(self) -> Path:
        return self.directory / self.name

    @property
    def sort_key(self) -> str:
        return self.name

    def __str__(self) -> str:
        return str(self.path)


def list_packages(directory: str | Path) -> list[Package]:
    d = Path(directory)
    try:
        names = [
            child.name
            for child in d.iterdir()
            if child.name.endswith(PACKAGE_EXTENSION) and child.is_file()
        ]
    except OSError as e:
        raise io_error(
            f"Cannot list package directory {d}: {e.strerror or e}",
            {"directory": str(d)},
        ) from e
    return [Package(d, name) for name in sorted(names, reverse=True)]


def list_all_packages(directories: Iterable[str | Path]) -> list[Package]:
    packages: list[Package] = []
    for d in directories:
        packages.extend(list_packages(d))
    return packages
