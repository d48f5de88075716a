from pathlib import Path

import pytest

from pk3cache.archive.discovery import list_all_packages, list_packages
from pk3cache.errors import IoError
from pk3_helpers import make_pk3


def test_packages_sorted_descending_and_filtered(tmp_path: Path):
    for name in ("pak0.pk3", "zz-patch.pk3", "pak1.pk3"):
        make_pk3(tmp_path / name, {"readme.txt": b"x"})
    (tmp_path / "notes.txt").write_text("not a package")
    (tmp_path / "upper.PK3").write_bytes(b"")
    (tmp_path / "dir.pk3").mkdir()

    names = [p.name for p in list_packages(tmp_path)]

    assert names == ["zz-patch.pk3", "pak1.pk3", "pak0.pk3"]


def test_package_path_and_sort_key(tmp_path: Path):
    make_pk3(tmp_path / "pak0.pk3", {"a": b"1"})
    (pkg,) = list_packages(tmp_path)
    assert pkg.path == tmp_path / "pak0.pk3"
    assert pkg.sort_key == "pak0.pk3"
    assert pkg.directory == tmp_path


def test_empty_directory_has_no_packages(tmp_path: Path):
    assert list_packages(tmp_path) == []


def test_missing_directory_raises_io_error(tmp_path: Path):
    with pytest.raises(IoError) as exc:
        list_packages(tmp_path / "missing")
    assert exc.value.code == "E_IO"
    assert exc.value.context["directory"].endswith("missing")


def test_all_packages_keep_directory_order(map_dirs):
    d1, d2 = map_dirs
    packages = list_all_packages([d1, d2])
    assert [str(p.path) for p in packages] == [
        str(d1 / "02-maps.pk3"),
        str(d1 / "01-maps.pk3"),
        str(d2 / "01-maps.pk3"),
    ]
