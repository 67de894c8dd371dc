#!/usr/bin/env python3
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

import argparse
import struct
import sys
import warnings
from collections.abc import Collection, Iterable
from pathlib import Path

from fontTools.ttLib import TTFont, TTLibError

from unicode_ranges import codepoints_to_unicode_range

DEFAULT_MAX_FONT_SIZE = 20 * 1024 * 1024  # 20MB

# Tables are decoded on first access, so damaged table data surfaces as
# any of these long after TTFont() returned.
FONT_DECODE_ERRORS = (
    TTLibError,
    struct.error,
    AssertionError,
    IndexError,
    KeyError,
    TypeError,
    ValueError,
)


class FontParseError(ValueError):
    """Raised when a font or its character map cannot be read."""


def validate_file_size(
    file_path: Path, max_size: int = DEFAULT_MAX_FONT_SIZE
) -> None:
    """Validate file size doesn't exceed limits to prevent resource exhaustion."""
    file_size = file_path.stat().st_size
    if file_size > max_size:
        size_mb = file_size / (1024 * 1024)
        limit_mb = max_size / (1024 * 1024)
        raise ValueError(
            f"Font file too large: {size_mb:.1f}MB exceeds {limit_mb:.1f}MB limit"
        )


def load_font(
    font_path: Path, max_size: int = DEFAULT_MAX_FONT_SIZE
) -> TTFont:
    """Load TTF/OTF font file into fonttools TTFont object."""
    validate_file_size(font_path, max_size)

    try:
        return TTFont(font_path)
    except FONT_DECODE_ERRORS as e:
        raise FontParseError(f"Cannot parse font {font_path}: {e}") from e


def get_font_codepoints(font: TTFont) -> frozenset[int]:
    """
    Collect the codepoints the font draws with a real glyph.

    Every Unicode cmap subtable contributes. Entries mapped to glyph 0
    (.notdef) or to a glyph missing from the font are left out.
    """
    if not font:
        raise FontParseError("Font cannot be empty")

    if "cmap" not in font:
        raise FontParseError("Font missing character mapping table")

    try:
        subtables = [
            table for table in font["cmap"].tables if table.isUnicode()
        ]
    except FONT_DECODE_ERRORS as e:
        raise FontParseError(f"Malformed character mapping table: {e!r}") from e

    if not subtables:
        raise FontParseError("Font has no Unicode character mapping")

    try:
        glyph_ids = font.getReverseGlyphMap()
        codepoints = set()

        for table in subtables:
            for cp, glyph_name in table.cmap.items():
                if glyph_ids.get(glyph_name):
                    codepoints.add(cp)

    except FONT_DECODE_ERRORS as e:
        raise FontParseError(f"Malformed glyph tables: {e!r}") from e

    return frozenset(codepoints)


def read_font_codepoints(font_path: Path) -> frozenset[int]:
    """Load a font file and return its codepoint coverage."""
    return read_font_coverage(font_path)[1]


def read_font_coverage(font_path: Path) -> tuple[str, frozenset[int]]:
    """Load a font file once and return its label and codepoint coverage."""
    with load_font(font_path) as font:
        codepoints = get_font_codepoints(font)
        return font_label(font, font_path), codepoints


def exclusive_codepoints(
    codepoints: Iterable[int], baseline: Iterable[int]
) -> frozenset[int]:
    """Return the codepoints not already covered by the baseline font."""
    return frozenset(codepoints).difference(baseline)


def has_coverage(codepoints: Collection[int]) -> bool:
    """An empty coverage set means the font contributes nothing."""
    return len(codepoints) > 0


def get_font_family(font: TTFont) -> str:
    """Extract font family name from name table."""
    if not font or "name" not in font:
        raise ValueError("Font missing name table")

    name_table = font["name"]
    name = name_table.getBestFamilyName()  # type: ignore[attr-defined]
    return name if name else "Unknown"


def get_font_variant(font: TTFont) -> str:
    """Extract font variant/subfamily name from name table."""
    if not font or "name" not in font:
        raise ValueError("Font missing name table")

    name_table = font["name"]
    name = name_table.getBestSubFamilyName()  # type: ignore[attr-defined]
    return name if name else "Regular"


def font_label(font: TTFont, font_path: Path) -> str:
    """Human readable label for warnings, falling back to the file name."""
    try:
        return f"{get_font_family(font)} {get_font_variant(font)}"
    except FONT_DECODE_ERRORS:
        return font_path.name


def font_unicode_range(
    font_path: Path, baseline: frozenset[int] | None = None
) -> tuple[str, str | None]:
    """
    Build the unicode-range descriptor for one font file.

    Returns the font's label and the descriptor, which is None if the
    font adds nothing beyond the baseline.
    """
    label, codepoints = read_font_coverage(font_path)

    if baseline is not None:
        codepoints = exclusive_codepoints(codepoints, baseline)

    if not has_coverage(codepoints):
        return label, None

    return label, codepoints_to_unicode_range(codepoints)


def parse_arguments(argv: list[str] | None = None):
    """Parse and return command line arguments."""
    parser = argparse.ArgumentParser(
        description="Print the CSS unicode-range each font covers"
    )
    parser.add_argument(
        "fonts",
        nargs="+",
        help="Font file(s) to inspect (.ttf, .otf, .woff, .woff2)",
    )
    parser.add_argument(
        "--baseline",
        help="Font whose coverage is subtracted from every other font",
    )
    return parser.parse_args(argv)


def validate_font_paths(font_paths: list[Path]) -> None:
    """Ensure all font paths exist and are files."""
    for font_path in font_paths:
        if not font_path.exists():
            raise FileNotFoundError(f"Font file not found: {font_path}")
        if not font_path.is_file():
            raise ValueError(f"Path is not a file: {font_path}")


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point for unicode-range generation."""
    args = parse_arguments(argv)

    font_paths = [Path(font) for font in args.fonts]
    baseline_path = Path(args.baseline) if args.baseline else None

    validate_font_paths(
        font_paths + ([baseline_path] if baseline_path else [])
    )

    # The baseline is never reduced against itself.
    baseline = None
    if baseline_path is not None:
        baseline = read_font_codepoints(baseline_path)

    emitted = 0

    for font_path in font_paths:
        is_baseline = (
            baseline_path is not None
            and font_path.resolve() == baseline_path.resolve()
        )

        try:
            label, ranges = font_unicode_range(
                font_path, None if is_baseline else baseline
            )
        except ValueError as e:
            warnings.warn(f"Skipping {font_path}: {e}")
            continue

        if ranges is None:
            warnings.warn(
                f"Skipping {label} ({font_path}): "
                "no codepoints beyond the baseline font"
            )
            continue

        print(f"{font_path}: {ranges}")
        emitted += 1

    return 0 if emitted else 1


if __name__ == "__main__":
    sys.exit(main())
