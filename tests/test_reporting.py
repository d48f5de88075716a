import io
import json
import logging

import pytest
from rich.console import Console

from pk3cache.logging import configure_logging, get_logger
from pk3cache.reporting import (
    JsonLinesReporter,
    PlainReporter,
    RichReporter,
    get_reporter,
    set_reporter,
    set_verbosity,
    task,
)


def test_plain_task_summary_line():
    out = io.StringIO()
    set_reporter(PlainReporter(stream=out, use_color=False))
    with task("ingest.packages", "Ingest packages", total=2) as final:
        get_reporter().advance("ingest.packages", current_item="pak1.pk3")
        get_reporter().advance("ingest.packages", current_item="pak0.pk3")
        final.update(packages=2, entries=7)
    line = out.getvalue().strip()
    assert line.startswith("✔ Ingest packages 2/2 (")
    assert line.endswith("[packages=2 entries=7]")


def test_plain_progress_lines_need_verbosity():
    out = io.StringIO()
    rep = PlainReporter(stream=out, use_color=False)
    rep.start_task("t", "Work", total=1)
    rep.advance("t", current_item="pak0.pk3")
    assert out.getvalue() == ""
    set_verbosity(1)
    rep.advance("t", current_item="pak1.pk3")
    assert "Work: pak1.pk3 (2/1)" in out.getvalue()


def test_failed_task_is_reported_and_reraised():
    out = io.StringIO()
    set_reporter(PlainReporter(stream=out, use_color=False))
    with pytest.raises(ValueError):
        with task("t", "Doomed", total=None) as final:
            final["entries"] = 1
            raise ValueError("boom")
    assert out.getvalue().startswith(" ✖ Doomed (")


def test_plain_message_labels():
    out = io.StringIO()
    rep = PlainReporter(stream=out, use_color=False)
    rep.status("hello")
    rep.warning("careful")
    rep.error("broken")
    rep.verbose("hidden", level=1)
    assert out.getvalue().splitlines() == [
        "INFO: hello",
        "WARN: careful",
        "ERROR: broken",
    ]


def test_jsonl_events_and_summary():
    out = io.StringIO()
    rep = JsonLinesReporter(stream=out)
    rep.start_task("t", "Work", total=3)
    rep.advance("t", current_item="pak0.pk3")
    rep.end_task("t", entries=4)
    rep.status("Merge summary: emitted=4 dedup=True")
    events = [json.loads(line) for line in out.getvalue().splitlines()]
    assert [e["event"] for e in events] == [
        "task_start",
        "task_progress",
        "task_end",
        "summary",
        "status",
    ]
    assert events[1]["item"] == "pak0.pk3"
    assert events[2]["status"] == "success"
    assert events[2]["entries"] == 4
    assert events[3]["summary_type"] == "merge"
    assert events[3]["emitted"] == 4
    assert events[3]["dedup"] == "True"


def test_rich_reporter_prints_completion():
    buf = io.StringIO()
    rep = RichReporter(console=Console(file=buf, force_terminal=False, width=100))
    rep.start_task("t", "Ingest packages", total=1)
    rep.advance("t", current_item="pak0.pk3")
    rep.end_task("t", packages=1)
    rep.status("done [not markup]")
    text = buf.getvalue()
    assert "✔ Ingest packages 1/1" in text
    assert "[packages=1]" in text
    assert "INFO: done [not markup]" in text
    assert rep.progress is None


def test_log_records_reach_reporter():
    out = io.StringIO()
    set_reporter(PlainReporter(stream=out, use_color=False))
    configure_logging(0)
    try:
        get_logger("cache").warning("disk %s", "full")
        get_logger("cache").debug("not shown")
    finally:
        get_logger().handlers.clear()
        get_logger().propagate = True
        get_logger().setLevel(logging.NOTSET)
    assert out.getvalue() == "WARN: pk3cache.cache: disk full\n"
