"""Fixture builders for pk3cache tests.

Usage:
    from pk3_helpers import make_pk3, build_bsp, make_tga
    make_pk3(tmp_path / "01-maps.pk3", {"maps/a.bsp": build_bsp()})
"""

from __future__ import annotations

import io
import struct
import zipfile
from pathlib import Path
from typing import Iterable, Mapping, Sequence, Tuple

from PIL import Image

LUMP_COUNT = 17


def make_pk3(
    path: Path,
    members: Mapping[str, bytes] | Iterable[Tuple[str, bytes]],
    *,
    dirs: Sequence[str] = (),
) -> Path:
    """Write a zip package; ``dirs`` adds explicit directory members first."""
    path.parent.mkdir(parents=True, exist_ok=True)
    items = members.items() if isinstance(members, Mapping) else members
    with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for d in dirs:
            zf.writestr(zipfile.ZipInfo(d.rstrip("/") + "/"), b"")
        for name, data in items:
            zf.writestr(name, data)
    return path


def build_bsp(
    entities: str = '{\n"classname" "worldspawn"\n"message" "test map"\n}\n',
    textures: Sequence[Tuple[str, int, int]] = (("textures/base/floor", 0, 1),),
    planes: Sequence[Tuple[float, float, float, float]] = ((0.0, 0.0, 1.0, 64.0),),
    vertices: int = 0,
) -> bytes:
    """Build a minimal IBSP v46 map with the given lump contents."""
    lumps: list[bytes] = [b""] * LUMP_COUNT
    lumps[0] = entities.encode("latin-1") + b"\x00"
    lumps[1] = b"".join(
        struct.pack("<64sii", name.encode("latin-1"), flags, contents)
        for name, flags, contents in textures
    )
    lumps[2] = b"".join(struct.pack("<4f", *p) for p in planes)
    lumps[10] = b"".join(
        struct.pack("<10f4B", *([float(i)] * 10), 255, 255, 255, 255)
        for i in range(vertices)
    )
    lumps[16] = struct.pack("<ii", 0, 0)
    header_size = 8 + LUMP_COUNT * 8
    offset = header_size
    directory = b""
    for lump in lumps:
        directory += struct.pack("<ii", offset, len(lump))
        offset += len(lump)
    return b"IBSP" + struct.pack("<i", 46) + directory + b"".join(lumps)


def make_image(width: int = 4, height: int = 3, mode: str = "RGBA") -> Image.Image:
    img = Image.new(mode, (width, height))
    for y in range(height):
        for x in range(width):
            value = (x * 60 % 256, y * 80 % 256, (x + y) * 30 % 256, 255 - x * 10)
            img.putpixel((x, y), value[: len(mode)])
    return img


def make_tga(img: Image.Image | None = None) -> bytes:
    out = io.BytesIO()
    (img or make_image()).save(out, format="TGA")
    return out.getvalue()


def make_png(img: Image.Image | None = None) -> bytes:
    out = io.BytesIO()
    (img or make_image()).save(out, format="PNG")
    return out.getvalue()


SHADER_SCRIPT = """// base wall shaders
textures/base_wall/glow
{
    qer_editorimage textures/base_wall/glow.tga
    surfaceparm nomarks
    {
        map $lightmap
        rgbGen identity
    }
    {
        map textures/base_wall/glow.tga
        blendFunc GL_DST_COLOR GL_ZERO
    }
}

textures/base_wall/plain
{
    surfaceparm metalsteps
}
"""
