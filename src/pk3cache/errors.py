"""Error taxonomy for pk3cache.

``IoError`` and ``FormatError`` abort an ingestion pass; ``NotFoundError``
and ``UsageError`` are raised by queries and never abort ingestion.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Optional

E_IO = "E_IO"
E_FORMAT = "E_FORMAT"
E_NOT_FOUND = "E_NOT_FOUND"
E_USAGE = "E_USAGE"


@dataclass(eq=False)
class Pk3CacheError(Exception):
    code: str
    message: str
    context: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:
        return f"{self.code}: {self.message}" + (
            f" | ctx={self.context}" if self.context else ""
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "context": self.context or {},
        }

    def located(self, package: str, path: str) -> "Pk3CacheError":
        """Return a copy of this error prefixed with ``package::path``."""
        ctx = dict(self.context or {})
        ctx.setdefault("package", package)
        ctx.setdefault("entry", path)
        return type(self)(
            code=self.code,
            message=f"Error in file '{package}::{path}': {self.message}",
            context=ctx,
        )


class IoError(Pk3CacheError):
    pass


class FormatError(Pk3CacheError):
    pass


class NotFoundError(Pk3CacheError):
    pass


class UsageError(Pk3CacheError):
    pass


def io_error(
    message: str, context: Optional[Dict[str, Any]] = None
) -> IoError:
    return IoError(code=E_IO, message=message, context=context)


def format_error(
    message: str, context: Optional[Dict[str, Any]] = None
) -> FormatError:
    return FormatError(code=E_FORMAT, message=message, context=context)


def not_found(
    message: str, context: Optional[Dict[str, Any]] = None
) -> NotFoundError:
    return NotFoundError(code=E_NOT_FOUND, message=message, context=context)


def usage_error(
    message: str, context: Optional[Dict[str, Any]] = None
) -> UsageError:
    return UsageError(code=E_USAGE, message=message, context=context)


__all__ = [
    "Pk3CacheError",
    "IoError",
    "FormatError",
    "NotFoundError",
    "UsageError",
    "io_error",
    "format_error",
    "not_found",
    "usage_error",
    "E_IO",
    "E_FORMAT",
    "E_NOT_FOUND",
    "E_USAGE",
]
