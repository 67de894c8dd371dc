import struct
from pathlib import Path

import pytest
from fontTools.fontBuilder import FontBuilder
from fontTools.pens.ttGlyphPen import TTGlyphPen


def square_glyph():
    pen = TTGlyphPen(None)
    pen.moveTo((100, 0))
    pen.lineTo((100, 500))
    pen.lineTo((400, 500))
    pen.lineTo((400, 0))
    pen.closePath()
    return pen.glyph()


def build_font(
    path: Path,
    cmap: dict[int, str],
    family: str = "Test Sans",
    style: str = "Regular",
) -> Path:
    """Write a minimal TrueType font mapping each codepoint to a glyph name."""
    glyph_order = [".notdef"] + sorted(set(cmap.values()) - {".notdef"})

    fb = FontBuilder(1000, isTTF=True)
    fb.setupGlyphOrder(glyph_order)
    fb.setupCharacterMap(cmap)
    fb.setupGlyf({name: square_glyph() for name in glyph_order})
    fb.setupHorizontalMetrics({name: (500, 0) for name in glyph_order})
    fb.setupHorizontalHeader(ascent=800, descent=-200)
    fb.setupNameTable({"familyName": family, "styleName": style})
    fb.setupOS2()
    fb.setupPost()
    fb.save(str(path))

    return path


def glyph_map(*codepoints: int) -> dict[int, str]:
    return {cp: f"uni{cp:04X}" for cp in codepoints}


@pytest.fixture
def make_font(tmp_path):
    def factory(name: str, cmap: dict[int, str], **kwargs) -> Path:
        return build_font(tmp_path / name, cmap, **kwargs)

    return factory


def find_table(data: bytes, tag: bytes) -> tuple[int, int, int]:
    """Return (directory entry position, offset, length) of a table."""
    (num_tables,) = struct.unpack(">H", data[4:6])
    for i in range(num_tables):
        entry = 12 + 16 * i
        entry_tag, _, offset, length = struct.unpack(
            ">4sLLL", data[entry : entry + 16]
        )
        if entry_tag == tag:
            return entry, offset, length
    raise KeyError(tag)


def rename_table(path: Path, tag: bytes, new_tag: bytes) -> Path:
    """Hide a table by renaming its directory entry."""
    data = bytearray(path.read_bytes())
    entry, _, _ = find_table(data, tag)
    data[entry : entry + 4] = new_tag
    path.write_bytes(bytes(data))
    return path


def garble_table(path: Path, tag: bytes) -> Path:
    """Overwrite a table's data with 0xFF bytes, keeping the header valid."""
    data = bytearray(path.read_bytes())
    _, offset, length = find_table(data, tag)
    data[offset : offset + length] = b"\xff" * length
    path.write_bytes(bytes(data))
    return path
