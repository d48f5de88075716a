"""Merge order, deduplication and flow-control tests for EntryMerger."""

from __future__ import annotations

from pathlib import Path

import pytest

from pk3cache.archive.merger import EntryMerger
from pk3cache.errors import FormatError, IoError, UsageError
from pk3_helpers import make_pk3


def _drain(merger: EntryMerger) -> list[tuple[str, str]]:
    seen = []
    for entry in merger:
        seen.append((str(entry.package.path), entry.path))
    return seen


def test_empty_directory_list_completes_immediately():
    merger = EntryMerger([])
    assert merger.pull() is None
    assert merger.completed
    assert merger.pull() is None


def test_dedup_keeps_first_occurrence_in_precedence_order(map_dirs):
    d1, d2 = map_dirs
    merger = EntryMerger([d1, d2], dedup=True)
    assert _drain(merger) == [
        (str(d1 / "02-maps.pk3"), "maps/a.bsp"),
        (str(d1 / "01-maps.pk3"), "maps/b.bsp"),
    ]
    assert merger.stats.packages == 3
    assert merger.stats.emitted == 2
    assert merger.stats.duplicates == 2


def test_without_dedup_every_occurrence_is_emitted(map_dirs):
    d1, d2 = map_dirs
    merger = EntryMerger([d1, d2], dedup=False)
    assert _drain(merger) == [
        (str(d1 / "02-maps.pk3"), "maps/a.bsp"),
        (str(d1 / "01-maps.pk3"), "maps/a.bsp"),
        (str(d1 / "01-maps.pk3"), "maps/b.bsp"),
        (str(d2 / "01-maps.pk3"), "maps/a.bsp"),
    ]
    assert merger.stats.duplicates == 0


def test_single_directory_mixed_assets(tmp_path: Path):
    make_pk3(
        tmp_path / "02-maps.pk3",
        [("maps/oa_ctf1.bsp", b"1"), ("maps/oa_ctf2.bsp", b"2"), ("levelshots/oa_ctf2.tga", b"3")],
    )
    make_pk3(
        tmp_path / "01-maps.pk3",
        [("maps/oa_ctf2.bsp", b"old"), ("textures/clown/pipe.jpg", b"4")],
    )
    paths = [path for _, path in _drain(EntryMerger([tmp_path]))]
    assert paths == [
        "maps/oa_ctf1.bsp",
        "maps/oa_ctf2.bsp",
        "levelshots/oa_ctf2.tga",
        "textures/clown/pipe.jpg",
    ]


def test_no_second_entry_until_acknowledged(map_dirs):
    merger = EntryMerger(list(map_dirs), dedup=False)
    first = merger.pull()
    assert first is not None
    assert merger.in_flight == 1

    # A slow consumer that has not acknowledged yet cannot get more entries.
    with pytest.raises(UsageError):
        merger.pull()
    assert merger.current is first
    assert merger.stats.emitted == 1

    first.read()
    merger.ack(first)
    assert merger.in_flight == 0
    second = merger.pull()
    assert second is not None and second is not first
    merger.ack()


def test_run_keeps_one_entry_in_flight(map_dirs):
    merger = EntryMerger(list(map_dirs), dedup=False)
    observed = []

    def handler(entry):
        observed.append((merger.in_flight, entry.released))

    stats = merger.run(handler)
    assert observed == [(1, False)] * 4
    assert stats.emitted == 4
    assert merger.completed
    assert merger.in_flight == 0


def test_unread_entries_are_released_on_ack(map_dirs):
    merger = EntryMerger(list(map_dirs), dedup=True)
    entries = []
    merger.run(entries.append)
    assert all(e.released for e in entries)
    assert merger.stats.drained == 2


def test_ack_wrong_entry_is_usage_error(map_dirs):
    merger = EntryMerger(list(map_dirs))
    with pytest.raises(UsageError):
        merger.ack()
    entry = merger.pull()
    other = EntryMerger(list(map_dirs)).pull()
    with pytest.raises(UsageError):
        merger.ack(other)
    merger.ack(entry)


def test_listing_error_terminates_merge(tmp_path: Path):
    merger = EntryMerger([tmp_path / "missing"])
    with pytest.raises(IoError):
        merger.pull()
    assert merger.failed
    assert merger.pull() is None


def test_format_error_stops_after_partial_progress(tmp_path: Path):
    make_pk3(tmp_path / "b-good.pk3", {"maps/a.bsp": b"a"})
    (tmp_path / "a-bad.pk3").write_bytes(b"garbage")
    merger = EntryMerger([tmp_path])
    seen = []
    with pytest.raises(FormatError):
        merger.run(lambda e: seen.append(e.path))
    assert seen == ["maps/a.bsp"]
    assert merger.failed
    assert merger.pull() is None


def test_handler_error_aborts_and_releases(map_dirs):
    merger = EntryMerger(list(map_dirs))
    captured = []

    def handler(entry):
        captured.append(entry)
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        merger.run(handler)
    assert captured[0].released
    assert merger.failed
    assert merger.pull() is None


def test_on_package_called_in_processing_order(map_dirs):
    d1, d2 = map_dirs
    opened = []
    merger = EntryMerger([d1, d2], on_package=lambda p: opened.append(str(p.path)))
    _drain(merger)
    assert opened == [
        str(d1 / "02-maps.pk3"),
        str(d1 / "01-maps.pk3"),
        str(d2 / "01-maps.pk3"),
    ]
