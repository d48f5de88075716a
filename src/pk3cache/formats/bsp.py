"""Quake 3 binary map (IBSP version 46) parsing.

Public functions:
- parse_bsp(data) -> dict
- serialize_map(document) -> str
- parse_entities(text) -> list[dict]

Geometry lumps are decoded into plain lists/dicts so the result can be
stored as JSON. Lightmaps, light volumes and visibility data are large
binary blobs and are summarised by count/size only.
"""

from __future__ import annotations

import json
import re
import struct
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Tuple

from ..errors import format_error

__all__ = [
    "BSP_MAGIC",
    "BSP_VERSION",
    "LUMP_COUNT",
    "HEADER_SIZE",
    "parse_bsp",
    "parse_entities",
    "serialize_map",
]

BSP_MAGIC = b"IBSP"
BSP_VERSION = 46
LUMP_COUNT = 17
HEADER_SIZE = 8 + LUMP_COUNT * 8

LIGHTMAP_SIZE = 128 * 128 * 3
LIGHTVOL_SIZE = 8

_ENTITY_BLOCK = re.compile(r"\{([^{}]*)\}")
_ENTITY_PAIR = re.compile(r'"([^"]*)"\s+"([^"]*)"')


def _name(raw: bytes) -> str:
    return raw.split(b"\x00", 1)[0].decode("latin-1")


def _vec(values: Tuple[Any, ...]) -> List[Any]:
    return list(values)


@dataclass(frozen=True, slots=True)
class _Lump:
    index: int
    key: str
    fmt: str
    decode: Callable[[Tuple[Any, ...]], Dict[str, Any] | int]

    @property
    def size(self) -> int:
        return struct.calcsize(self.fmt)


_RECORD_LUMPS = (
    _Lump(1, "textures", "<64sii", lambda r: {
        "name": _name(r[0]), "flags": r[1], "contents": r[2]}),
    _Lump(2, "planes", "<4f", lambda r: {
        "normal": _vec(r[0:3]), "dist": r[3]}),
    _Lump(3, "nodes", "<9i", lambda r: {
        "plane": r[0], "children": _vec(r[1:3]),
        "mins": _vec(r[3:6]), "maxs": _vec(r[6:9])}),
    _Lump(4, "leafs", "<12i", lambda r: {
        "cluster": r[0], "area": r[1],
        "mins": _vec(r[2:5]), "maxs": _vec(r[5:8]),
        "leafface": r[8], "n_leaffaces": r[9],
        "leafbrush": r[10], "n_leafbrushes": r[11]}),
    _Lump(5, "leaf_faces", "<i", lambda r: r[0]),
    _Lump(6, "leaf_brushes", "<i", lambda r: r[0]),
    _Lump(7, "models", "<6f4i", lambda r: {
        "mins": _vec(r[0:3]), "maxs": _vec(r[3:6]),
        "face": r[6], "n_faces": r[7], "brush": r[8], "n_brushes": r[9]}),
    _Lump(8, "brushes", "<3i", lambda r: {
        "brushside": r[0], "n_brushsides": r[1], "texture": r[2]}),
    _Lump(9, "brush_sides", "<2i", lambda r: {
        "plane": r[0], "texture": r[1]}),
    _Lump(10, "vertices", "<10f4B", lambda r: {
        "position": _vec(r[0:3]),
        "texcoord": [_vec(r[3:5]), _vec(r[5:7])],
        "normal": _vec(r[7:10]), "color": _vec(r[10:14])}),
    _Lump(11, "mesh_verts", "<i", lambda r: r[0]),
    _Lump(12, "effects", "<64sii", lambda r: {
        "name": _name(r[0]), "brush": r[1], "unknown": r[2]}),
    _Lump(13, "faces", "<12i12f2i", lambda r: {
        "texture": r[0], "effect": r[1], "type": r[2],
        "vertex": r[3], "n_vertices": r[4],
        "meshvert": r[5], "n_meshverts": r[6],
        "lm_index": r[7], "lm_start": _vec(r[8:10]), "lm_size": _vec(r[10:12]),
        "lm_origin": _vec(r[12:15]),
        "lm_vecs": [_vec(r[15:18]), _vec(r[18:21])],
        "normal": _vec(r[21:24]), "size": _vec(r[24:26])}),
)


def _lump_directory(data: bytes) -> List[Tuple[int, int]]:
    if len(data) < HEADER_SIZE:
        raise format_error(
            f"Map too small for header: {len(data)}<{HEADER_SIZE}"
        )
    magic, version = struct.unpack_from("<4si", data, 0)
    if magic != BSP_MAGIC:
        raise format_error(f"Bad map magic {magic!r}", {"expected": "IBSP"})
    if version != BSP_VERSION:
        raise format_error(
            f"Unsupported map version {version}", {"expected": BSP_VERSION}
        )
    lumps = [
        struct.unpack_from("<ii", data, 8 + i * 8) for i in range(LUMP_COUNT)
    ]
    for i, (offset, length) in enumerate(lumps):
        if offset < 0 or length < 0 or offset + length > len(data):
            raise format_error(
                f"Lump {i} out of range: {offset}+{length}>{len(data)}",
                {"lump": i},
            )
    return lumps


def _lump_bytes(data: bytes, lumps: List[Tuple[int, int]], index: int) -> bytes:
    offset, length = lumps[index]
    return data[offset : offset + length]


def _records(raw: bytes, lump: _Lump) -> List[Any]:
    if len(raw) % lump.size:
        raise format_error(
            f"Lump '{lump.key}' size {len(raw)} is not a multiple of {lump.size}",
            {"lump": lump.index},
        )
    return [lump.decode(r) for r in struct.iter_unpack(lump.fmt, raw)]


def parse_entities(text: str) -> List[Dict[str, str]]:
    """Parse the entity lump into one key/value dict per entity."""
    return [
        dict(_ENTITY_PAIR.findall(block))
        for block in _ENTITY_BLOCK.findall(text)
    ]


def parse_bsp(data: bytes) -> Dict[str, Any]:
    lumps = _lump_directory(data)
    entity_text = _name(_lump_bytes(data, lumps, 0))
    doc: Dict[str, Any] = {
        "version": BSP_VERSION,
        "entities": parse_entities(entity_text),
    }
    for lump in _RECORD_LUMPS:
        doc[lump.key] = _records(_lump_bytes(data, lumps, lump.index), lump)

    doc["lightmaps"] = {"count": lumps[14][1] // LIGHTMAP_SIZE}
    doc["light_vols"] = {"count": lumps[15][1] // LIGHTVOL_SIZE}
    vis = _lump_bytes(data, lumps, 16)
    if len(vis) >= 8:
        n_vecs, sz_vecs = struct.unpack_from("<ii", vis, 0)
        doc["vis_data"] = {"n_vecs": n_vecs, "sz_vecs": sz_vecs}
    else:
        doc["vis_data"] = {"n_vecs": 0, "sz_vecs": 0}
    return doc


def serialize_map(document: Dict[str, Any]) -> str:
    return json.dumps(document, indent=2)
