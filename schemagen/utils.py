# File: schemagen/utils.py
"""
SchemaGen - Utility Functions & Helpers
========================================
String transformation, timestamp formatting, file I/O and timing helpers
used throughout the generation pipeline.

- String-conversion functions are decorated with ``@lru_cache(maxsize=None)``
  since the same entity names are converted once per output format.
- File I/O helpers use atomic rename so a crashed CLI run never leaves a
  half-written artifact behind.
"""

from __future__ import annotations

import functools
import hashlib
import logging
import os
import shutil
import tempfile
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemagen.utils")


# ---------------------------------------------------------------------------
# Cached string transformation functions
# ---------------------------------------------------------------------------


@functools.lru_cache(maxsize=None)
def to_plural(name: str) -> str:
    """
    Naive English pluralisation, used to derive a missing ``tableName``.

    Examples:
        >>> to_plural("user")
        'users'
        >>> to_plural("category")
        'categories'
        >>> to_plural("person")
        'people'
    """
    if not name:
        return ""

    lower: str = name.lower()

    irregulars: Dict[str, str] = {
        "person": "people",
        "child": "children",
        "man": "men",
        "woman": "women",
        "mouse": "mice",
        "datum": "data",
        "index": "indices",
        "matrix": "matrices",
        "analysis": "analyses",
        "status": "statuses",
        "address": "addresses",
    }

    if lower in irregulars:
        plural: str = irregulars[lower]
        if name[0].isupper():
            return plural[0].upper() + plural[1:]
        return plural

    if lower.endswith("s") and not lower.endswith("ss"):
        return name

    if lower.endswith(("sh", "ch", "x", "z", "ss")):
        return name + "es"
    if lower.endswith("y") and len(name) > 1 and lower[-2] not in "aeiou":
        return name[:-1] + "ies"
    if lower.endswith("fe"):
        return name[:-2] + "ves"
    if lower.endswith("f"):
        return name[:-1] + "ves"

    return name + "s"


@functools.lru_cache(maxsize=None)
def capitalize_first(name: str) -> str:
    """
    Upper-case only the first character, leaving the rest untouched.

    Examples:
        >>> capitalize_first("orderItem")
        'OrderItem'
    """
    if not name:
        return ""
    return name[0].upper() + name[1:]


# ---------------------------------------------------------------------------
# Value rendering
# ---------------------------------------------------------------------------


def format_scalar(value: Any) -> str:
    """
    Render a constraint value for human-readable text.

    Booleans and ``None`` use their JSON spelling, integral floats drop the
    trailing ``.0`` and sequences are comma-joined.
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return ",".join(format_scalar(v) for v in value)
    return str(value)


# ---------------------------------------------------------------------------
# Timestamps
# ---------------------------------------------------------------------------


def utc_now() -> datetime:
    """Default clock for all generators."""
    return datetime.now(timezone.utc)


def iso_timestamp(moment: datetime) -> str:
    """
    ISO-8601 UTC timestamp with millisecond precision and a ``Z`` suffix.

    Naive datetimes are taken to be UTC already.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


# ---------------------------------------------------------------------------
# File I/O helpers
# ---------------------------------------------------------------------------


def ensure_directory(path: Path) -> None:
    """Create directory (and parents) if it doesn't exist."""
    path.mkdir(parents=True, exist_ok=True)
    logger.debug("Ensured directory exists: %s", path)


def write_file(path: Path, content: str, atomic: bool = True) -> int:
    """
    Write *content* to *path*.

    When *atomic* is True, writes to a temporary file first then renames.

    Returns the number of bytes written.
    """
    ensure_directory(path.parent)

    encoded: bytes = content.encode("utf-8")
    byte_count: int = len(encoded)

    if atomic:
        fd, tmp_path = tempfile.mkstemp(
            dir=str(path.parent),
            prefix=f".{path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(encoded)
            shutil.move(tmp_path, str(path))
        except Exception:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
    else:
        path.write_bytes(encoded)

    logger.debug("Wrote %d bytes to %s", byte_count, path)
    return byte_count


def sha256_hex(content: str) -> str:
    """Return SHA-256 hex digest of a string."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def count_lines(content: str) -> int:
    """Count the number of lines in a string."""
    if not content:
        return 0
    return content.count("\n") + (1 if not content.endswith("\n") else 0)


# ---------------------------------------------------------------------------
# Timer context manager
# ---------------------------------------------------------------------------


class Timer:
    """
    Simple context-manager timer for profiling generation steps.

    Usage:
        with Timer("json schema") as t:
            ...
        print(t.elapsed)
    """

    __slots__ = ("label", "start_time", "end_time", "elapsed")

    def __init__(self, label: str = "operation") -> None:
        self.label: str = label
        self.start_time: float = 0.0
        self.end_time: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[object],
    ) -> None:
        self.end_time = time.perf_counter()
        self.elapsed = self.end_time - self.start_time
        logger.debug("Timer [%s]: %.4f seconds", self.label, self.elapsed)

    def __repr__(self) -> str:
        return f"<Timer {self.label}: {self.elapsed:.4f}s>"


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "to_plural",
    "capitalize_first",
    "format_scalar",
    "utc_now",
    "iso_timestamp",
    "ensure_directory",
    "write_file",
    "sha256_hex",
    "count_lines",
    "Timer",
]

logger.debug("schemagen.utils loaded — %d public symbols.", len(__all__))
