"""Command line interface for pk3cache."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .api import CacheManager, run_ingest
from .config import IngestOptions, load_options, merge_cli_overrides
from .errors import Pk3CacheError
from .logging import configure_logging
from .reporting import (
    JsonLinesReporter,
    PlainReporter,
    Reporter,
    RichReporter,
    SilentReporter,
    get_reporter,
    set_reporter,
    set_verbosity,
)

_KIND_QUERIES = {
    "maps": CacheManager.get_map_names,
    "textures": CacheManager.get_texture_names,
    "levelshots": CacheManager.get_levelshot_names,
    "shaders": CacheManager.get_shader_names,
}


def _options(args: argparse.Namespace) -> IngestOptions:
    base = load_options(args.config) if args.config else None
    return merge_cli_overrides(
        base,
        cache_dir=args.cache,
        pk3_dirs=args.pk3_dirs,
        no_dedup=args.no_dedup,
        report_path=getattr(args, "emit_report", None),
    )


def _ingest(args: argparse.Namespace) -> CacheManager:
    manager, _ = run_ingest(_options(args))
    # finalize progress UI before anything goes to stdout
    get_reporter().flush()
    return manager


def _ingest_cmd(args: argparse.Namespace) -> int:
    _ingest(args)
    return 0


def _list_cmd(args: argparse.Namespace) -> int:
    manager = _ingest(args)
    for name in _KIND_QUERIES[args.kind](manager):
        print(name)
    return 0


def _show_map_cmd(args: argparse.Namespace) -> int:
    manager = _ingest(args)
    print(json.dumps(manager.get_map(args.name), indent=2))
    return 0


def _show_shader_cmd(args: argparse.Namespace) -> int:
    manager = _ingest(args)
    print(json.dumps(manager.get_shader(args.name), indent=2))
    return 0


def _add_source_args(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "pk3_dirs",
        nargs="*",
        type=Path,
        help="Package directories in precedence order (first wins)",
    )
    p.add_argument(
        "-c",
        "--config",
        type=Path,
        help="JSON/YAML config with cache_dir, pk3_dirs, dedup, report",
    )
    p.add_argument(
        "--cache",
        type=Path,
        help="Cache root directory (created if missing)",
    )
    p.add_argument(
        "--no-dedup",
        dest="no_dedup",
        action="store_true",
        help="Process every occurrence of a path instead of the first one",
    )


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="pk3cache", description="Build an asset cache from pk3 packages"
    )
    p.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (repeatable)",
    )
    p.add_argument(
        "-r",
        "--reporter",
        choices=["plain", "rich", "json", "silent"],
        default="plain",
        help="Select reporter backend: plain (default), rich, json (JSONL events), silent",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    i = sub.add_parser("ingest", help="Ingest packages into the cache")
    _add_source_args(i)
    i.add_argument(
        "--emit-report",
        dest="emit_report",
        type=Path,
        help="Optional path to write a JSON report of the pass",
    )
    i.set_defaults(func=_ingest_cmd)

    ls = sub.add_parser("list", help="Ingest, then list asset names of a kind")
    ls.add_argument("kind", choices=sorted(_KIND_QUERIES))
    _add_source_args(ls)
    ls.set_defaults(func=_list_cmd)

    sm = sub.add_parser("show-map", help="Ingest, then print a parsed map")
    sm.add_argument("name")
    _add_source_args(sm)
    sm.set_defaults(func=_show_map_cmd)

    ss = sub.add_parser("show-shader", help="Ingest, then print a shader")
    ss.add_argument("name")
    _add_source_args(ss)
    ss.set_defaults(func=_show_shader_cmd)

    return p


def _make_reporter(name: str) -> Reporter:
    # every backend writes to stderr; stdout carries query results only
    if name == "json":
        return JsonLinesReporter(stream=sys.stderr)
    if name == "silent":
        return SilentReporter()
    if name == "rich" and sys.stderr.isatty():
        return RichReporter()
    return PlainReporter(stream=sys.stderr)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(sys.argv[1:] if argv is None else argv)
    set_reporter(_make_reporter(args.reporter))
    set_verbosity(args.verbose)
    configure_logging(args.verbose)
    try:
        return args.func(args)
    except Pk3CacheError as e:
        rep = get_reporter()
        rep.flush()
        rep.error(e.message)
        return 2


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
