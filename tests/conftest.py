from __future__ import annotations

from pathlib import Path

import pytest

from pk3cache.reporting import SilentReporter, set_reporter, set_verbosity
from pk3_helpers import build_bsp, make_pk3


@pytest.fixture(autouse=True)
def _quiet_reporter():
    set_reporter(SilentReporter())
    set_verbosity(0)
    yield
    set_reporter(SilentReporter())


@pytest.fixture
def map_dirs(tmp_path: Path) -> tuple[Path, Path]:
    """Two directories with overlapping map packages.

    d1/02-maps.pk3: maps/a.bsp
    d1/01-maps.pk3: maps/a.bsp, maps/b.bsp
    d2/01-maps.pk3: maps/a.bsp
    """
    d1 = tmp_path / "d1"
    d2 = tmp_path / "d2"
    make_pk3(d1 / "02-maps.pk3", {"maps/a.bsp": build_bsp(entities='{\n"origin" "d1-02"\n}\n')})
    make_pk3(
        d1 / "01-maps.pk3",
        {
            "maps/a.bsp": build_bsp(entities='{\n"origin" "d1-01"\n}\n'),
            "maps/b.bsp": build_bsp(),
        },
        dirs=["maps"],
    )
    make_pk3(d2 / "01-maps.pk3", {"maps/a.bsp": build_bsp(entities='{\n"origin" "d2-01"\n}\n')})
    return d1, d2
