# Copyright (c) 2025 Ashlen <dev@anthes.is>
#
# Permission to use, copy, modify, and distribute this software for any
# purpose with or without fee is hereby granted, provided that the above
# copyright notice and this permission notice appear in all copies.
#
# THE SOFTWARE IS PROVIDED "AS IS" AND THE AUTHOR DISCLAIMS ALL WARRANTIES
# WITH REGARD TO THIS SOFTWARE INCLUDING ALL IMPLIED WARRANTIES OF
# MERCHANTABILITY AND FITNESS. IN NO EVENT SHALL THE AUTHOR BE LIABLE FOR
# ANY SPECIAL, DIRECT, INDIRECT, OR CONSEQUENTIAL DAMAGES OR ANY DAMAGES
# WHATSOEVER RESULTING FROM LOSS OF USE, DATA OR PROFITS, WHETHER IN AN
# ACTION OF CONTRACT, NEGLIGENCE OR OTHER TORTIOUS ACTION, ARISING OUT OF
# OR IN CONNECTION WITH THE USE OR PERFORMANCE OF THIS SOFTWARE.

"""Conversion between codepoint sets and CSS unicode-range descriptors."""

from collections.abc import Iterable
from typing import NamedTuple

MAX_CODEPOINT = 0x10FFFF


class InvalidCodePointError(ValueError):
    """Raised for a codepoint outside the Unicode range."""


class EmptyRangeError(ValueError):
    """Raised when asked to compact an empty codepoint set."""


class CodePointRange(NamedTuple):
    """Inclusive run of consecutive codepoints."""

    low: int
    high: int

    def __str__(self) -> str:
        return format_range(self)


def validate_codepoint(codepoint: int) -> int:
    """Reject anything that is not an integer in [0, 0x10FFFF]."""
    if isinstance(codepoint, bool) or not isinstance(codepoint, int):
        raise InvalidCodePointError(f"Codepoint must be an integer: {codepoint!r}")

    if not 0 <= codepoint <= MAX_CODEPOINT:
        raise InvalidCodePointError(
            f"Codepoint {codepoint:#x} outside range 0x0-{MAX_CODEPOINT:#x}"
        )

    return codepoint


def codepoints_to_ranges(codepoints: Iterable[int]) -> list[CodePointRange]:
    """
    Compact codepoints into the minimal ascending list of ranges.

    Consecutive codepoints always share a range, so no two ranges in the
    result can be merged.
    """
    ordered = sorted({validate_codepoint(cp) for cp in codepoints})
    if not ordered:
        raise EmptyRangeError("Cannot build unicode-range from no codepoints")

    ranges = []
    low = high = ordered[0]

    for cp in ordered[1:]:
        if cp == high + 1:
            high = cp
            continue

        ranges.append(CodePointRange(low, high))
        low = high = cp

    ranges.append(CodePointRange(low, high))

    return ranges


def format_range(token: CodePointRange) -> str:
    """Render a range as 'U+41' or 'U+41-5A'."""
    low, high = token
    if low == high:
        return f"U+{low:X}"
    return f"U+{low:X}-{high:X}"


def codepoints_to_unicode_range(codepoints: Iterable[int]) -> str:
    """Build a unicode-range descriptor (e.g., 'U+41-43, U+5A') from codepoints."""
    return ", ".join(
        format_range(token) for token in codepoints_to_ranges(codepoints)
    )


def expand_ranges(ranges: Iterable[CodePointRange]) -> set[int]:
    """Expand ranges back into the codepoints they cover."""
    codepoints: set[int] = set()

    for low, high in ranges:
        codepoints.update(range(low, high + 1))

    return codepoints


def parse_unicode_ranges(range_string: str) -> set[int]:
    """Parse Unicode range string (e.g., 'U+0-FF,U+131') into set of codepoints."""
    codepoints: set[int] = set()

    for part in range_string.split(","):
        part = part.strip()
        if not part.upper().startswith("U+"):
            continue

        hex_part = part[2:]

        try:
            if "-" in hex_part:
                start_hex, end_hex = hex_part.split("-")
                start = int(start_hex, 16)
                end = int(end_hex, 16)
            else:
                start = end = int(hex_part, 16)
        except ValueError as e:
            raise ValueError(f"Malformed unicode-range part: {part!r}") from e

        validate_codepoint(start)
        validate_codepoint(end)
        if start > end:
            raise ValueError(f"Reversed unicode-range part: {part!r}")

        codepoints.update(range(start, end + 1))

    return codepoints
