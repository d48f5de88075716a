import json
import struct

import pytest

from pk3cache.errors import FormatError
from pk3cache.formats.bsp import HEADER_SIZE, parse_bsp, parse_entities, serialize_map
from pk3_helpers import build_bsp


def test_parse_minimal_map():
    doc = parse_bsp(build_bsp(vertices=2))
    assert doc["version"] == 46
    assert doc["entities"] == [{"classname": "worldspawn", "message": "test map"}]
    assert doc["textures"] == [
        {"name": "textures/base/floor", "flags": 0, "contents": 1}
    ]
    assert doc["planes"] == [{"normal": [0.0, 0.0, 1.0], "dist": 64.0}]
    assert len(doc["vertices"]) == 2
    assert doc["vertices"][1]["position"] == [1.0, 1.0, 1.0]
    assert doc["vertices"][1]["color"] == [255, 255, 255, 255]
    assert doc["faces"] == []
    assert doc["lightmaps"] == {"count": 0}
    assert doc["vis_data"] == {"n_vecs": 0, "sz_vecs": 0}


def test_document_serializes_to_json():
    doc = parse_bsp(build_bsp())
    assert json.loads(serialize_map(doc)) == doc


def test_parse_entities_multiple_blocks():
    text = '{\n"classname" "worldspawn"\n}\n{\n"classname" "info_player_deathmatch"\n"origin" "0 0 24"\n}\n'
    assert parse_entities(text) == [
        {"classname": "worldspawn"},
        {"classname": "info_player_deathmatch", "origin": "0 0 24"},
    ]


def test_too_small_for_header():
    with pytest.raises(FormatError):
        parse_bsp(b"IBSP")


def test_bad_magic():
    data = b"VBSP" + build_bsp()[4:]
    with pytest.raises(FormatError) as exc:
        parse_bsp(data)
    assert exc.value.context == {"expected": "IBSP"}


def test_unsupported_version():
    data = bytearray(build_bsp())
    struct.pack_into("<i", data, 4, 47)
    with pytest.raises(FormatError):
        parse_bsp(bytes(data))


def test_lump_out_of_range():
    data = bytearray(build_bsp())
    # lump 1 (textures) length past the end of the file
    struct.pack_into("<ii", data, 8 + 8, HEADER_SIZE, 1 << 20)
    with pytest.raises(FormatError) as exc:
        parse_bsp(bytes(data))
    assert exc.value.context == {"lump": 1}


def test_truncated_record_lump():
    data = bytearray(build_bsp())
    offset, length = struct.unpack_from("<ii", data, 8 + 2 * 8)
    struct.pack_into("<ii", data, 8 + 2 * 8, offset, length - 1)
    with pytest.raises(FormatError):
        parse_bsp(bytes(data))
