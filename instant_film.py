#!/usr/bin/env python3
"""
Instant Film — Photo Styling Engine
CLI entry point. Also importable as a library.

Usage:
    python instant_film.py process photo1.jpg photo2.png --out styled/
    python instant_film.py process *.jpg --mono --zip
    python instant_film.py list-effects
    python instant_film.py serve
"""

import sys
import os
import asyncio
import argparse
import logging
from pathlib import Path

# Add project root to path so imports work
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from core.batch import BatchCoordinator
from core.safety import preflight, SafetyError
from effects import list_effects, list_categories

__version__ = "0.1.0"


def _collect_inputs(paths: list[str]) -> list[tuple[str, bytes]]:
    """Read every path that passes preflight; report and skip the rest."""
    files = []
    for path in paths:
        try:
            info = preflight(path)
        except (SafetyError, FileNotFoundError) as e:
            print(f"  skip {path}: {e}", file=sys.stderr)
            continue
        files.append((Path(path).name, Path(info["path"]).read_bytes()))
    return files


def cmd_process(args):
    out_dir = Path(args.out)
    out_dir.mkdir(parents=True, exist_ok=True)

    files = _collect_inputs(args.files)
    if not files:
        print("No processable images.", file=sys.stderr)
        sys.exit(1)

    def on_result(data, filename):
        print(f"  done {filename} ({len(data) // 1024}KB)")

    coordinator = BatchCoordinator(on_result=on_result, monochrome=args.mono)
    print(f"Processing {len(files)} file{'s' if len(files) != 1 else ''}"
          f"{' (monochrome)' if args.mono else ''}...")
    summary = asyncio.run(coordinator.run(files))

    if args.zip:
        packed = coordinator.download_archive()
        if packed is not None:
            data, filename = packed
            (out_dir / filename).write_bytes(data)
            print(f"Archive: {out_dir / filename}")
    else:
        for result in coordinator.results():
            (out_dir / result.filename).write_bytes(result.data)

    print(f"{summary.succeeded}/{summary.submitted} processed"
          f"{f', {summary.failed} skipped' if summary.failed else ''} -> {out_dir}")
    if summary.succeeded == 0:
        sys.exit(1)


def cmd_list_effects(args):
    effects = list_effects(category=args.category)
    print(f"\nInstant-film stack ({len(effects)} stages, applied in order):\n")
    for i, e in enumerate(effects, 1):
        mono = "" if e["monochrome"] else "  [color mode only]"
        print(f"  {i}. {e['name']:14s} {e['description']}{mono}")
    print()


def cmd_serve(args):
    from server import start
    start()


def main():
    parser = argparse.ArgumentParser(
        prog="instant_film",
        description="Instant Film — turn photos into instant-film prints",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command")

    # process
    p = sub.add_parser("process", help="Style one or more photos")
    p.add_argument("files", nargs="+", help="Input images")
    p.add_argument("--out", default="instant-film", help="Output directory")
    p.add_argument("--mono", action="store_true", help="Black & white film instead of color")
    p.add_argument("--zip", action="store_true", help="Write a single instant-film-photos.zip")

    # list-effects
    p = sub.add_parser("list-effects", help="List the effect stack")
    p.add_argument("--category", choices=list_categories(), help="Filter by category")

    # serve
    sub.add_parser("serve", help="Launch the HTTP server")

    args = parser.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(message)s",
    )

    commands = {
        "process": cmd_process,
        "list-effects": cmd_list_effects,
        "serve": cmd_serve,
    }

    if args.command in commands:
        try:
            commands[args.command](args)
        except Exception as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
