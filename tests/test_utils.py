"""
tests/test_utils.py
Unit tests for schemagen.utils helpers.
"""

from __future__ import annotations

import hashlib
import pathlib
from datetime import datetime, timedelta, timezone

import pytest

from schemagen.utils import (
    Timer,
    capitalize_first,
    count_lines,
    format_scalar,
    iso_timestamp,
    sha256_hex,
    to_plural,
    write_file,
)


class TestStringHelpers:
    """Pluralisation and capitalisation."""

    @pytest.mark.parametrize(
        "singular, plural",
        [
            ("user", "users"),
            ("category", "categories"),
            ("box", "boxes"),
            ("person", "people"),
            ("status", "statuses"),
            ("key", "keys"),
            ("orders", "orders"),
            ("", ""),
        ],
    )
    def test_to_plural(self, singular: str, plural: str) -> None:
        assert to_plural(singular) == plural

    def test_to_plural_keeps_capital(self) -> None:
        assert to_plural("Person") == "People"

    def test_capitalize_first(self) -> None:
        assert capitalize_first("orderItem") == "OrderItem"
        assert capitalize_first("") == ""


class TestFormatScalar:
    @pytest.mark.parametrize(
        "value, rendered",
        [
            (None, "null"),
            (True, "true"),
            (False, "false"),
            (0, "0"),
            (5.0, "5"),
            (2.5, "2.5"),
            ("draft", "draft"),
            (["a", 1], "a,1"),
        ],
    )
    def test_rendering(self, value: object, rendered: str) -> None:
        assert format_scalar(value) == rendered


class TestTimestamps:
    def test_millisecond_precision(self) -> None:
        moment = datetime(2024, 1, 15, 10, 30, 0, 123456, tzinfo=timezone.utc)
        assert iso_timestamp(moment) == "2024-01-15T10:30:00.123Z"

    def test_naive_is_utc(self) -> None:
        assert iso_timestamp(datetime(2024, 1, 1)) == "2024-01-01T00:00:00.000Z"

    def test_offset_is_converted(self) -> None:
        moment = datetime(2024, 1, 1, 2, 0, tzinfo=timezone(timedelta(hours=2)))
        assert iso_timestamp(moment) == "2024-01-01T00:00:00.000Z"


class TestFileHelpers:
    """Real file I/O inside tmp_path."""

    def test_atomic_write_creates_parents(self, tmp_path: pathlib.Path) -> None:
        target = tmp_path / "a" / "b" / "file.txt"
        written = write_file(target, "héllo\n")
        assert target.read_text(encoding="utf-8") == "héllo\n"
        assert written == len("héllo\n".encode("utf-8"))
        assert not list(target.parent.glob("*.tmp"))

    def test_non_atomic_write(self, tmp_path: pathlib.Path) -> None:
        target = tmp_path / "plain.txt"
        write_file(target, "x", atomic=False)
        assert target.read_text(encoding="utf-8") == "x"

    def test_sha256_hex(self) -> None:
        assert sha256_hex("abc") == hashlib.sha256(b"abc").hexdigest()

    @pytest.mark.parametrize(
        "content, lines",
        [("", 0), ("a", 1), ("a\n", 1), ("a\nb", 2), ("a\nb\n", 2)],
    )
    def test_count_lines(self, content: str, lines: int) -> None:
        assert count_lines(content) == lines


class TestTimer:
    def test_elapsed_is_recorded(self) -> None:
        with Timer("unit") as t:
            sum(range(1000))
        assert t.elapsed >= 0.0
        assert t.end_time >= t.start_time
        assert "unit" in repr(t)
