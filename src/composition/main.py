#!/usr/bin/env python3
"""mixc: inspect and exercise mixin compositions described by a manifest.

Usage: python -m src.composition.main <manifest.json> order CLASS
       python -m src.composition.main <manifest.json> table CLASS
       python -m src.composition.main <manifest.json> check [CLASS ...]
       python -m src.composition.main <manifest.json> call CLASS MEMBER [ARG ...]
"""

import argparse
import json
import logging
import os
import sys

from .engine import Composer, CompositionError
from .manifest import ManifestError, build_composer, locate_unit

logger = logging.getLogger(__name__)


def _format_error(source: str, filename: str, message: str,
                  line: int, col: int) -> str:
    """Format an error with source context and caret."""
    lines = source.split('\n')
    if line < 1 or line > len(lines):
        return f"error: {message}\n --> {filename}:{line}:{col}"
    source_line = lines[line - 1]
    width = len(str(line))
    pad = " " * width
    caret_offset = max(col - 1, 0)
    caret = " " * caret_offset + "^"
    return (
        f"error: {message}\n"
        f" {pad}--> {filename}:{line}:{col}\n"
        f" {pad} |\n"
        f" {line} | {source_line}\n"
        f" {pad} | {caret}"
    )


def error_location(source: str, err: CompositionError) -> tuple[int, int]:
    if isinstance(err, ManifestError):
        return err.line, err.col
    if err.unit:
        return locate_unit(source, err.unit)
    return 0, 0


def _report(source: str, filename: str, err: CompositionError):
    line, col = error_location(source, err)
    print(_format_error(source, filename, err.message, line, col),
          file=sys.stderr)


def _parse_arg(text: str):
    """Arguments are JSON literals when they parse as such, else strings."""
    try:
        return json.loads(text)
    except ValueError:
        return text


def _cmd_order(composer: Composer, args) -> int:
    order = composer.finalize_class(args.cls).order
    if args.format == "json":
        print(json.dumps(list(order)))
    else:
        print(" -> ".join(order))
    return 0


def _cmd_table(composer: Composer, args) -> int:
    table = composer.finalize_class(args.cls).table
    if args.format == "json":
        print(json.dumps({
            name: {"providers": list(chain.providers),
                   "abstract": list(chain.declarers)}
            for name, chain in table.chains.items()
        }, indent=2))
        return 0
    for name, chain in table.chains.items():
        providers = ", ".join(chain.providers) or "<none>"
        line = f"{name}: {providers}"
        if chain.declarers:
            line += f"  (abstract in {', '.join(chain.declarers)})"
        print(line)
    return 0


def _cmd_check(composer: Composer, args, source: str, filename: str) -> int:
    names = args.classes or [
        name for name, unit in composer.units.items() if unit.instantiable]
    failed = 0
    for name in names:
        try:
            composer.finalize_class(name)
        except CompositionError as e:
            _report(source, filename, e)
            failed += 1
    if args.format == "json":
        print(json.dumps({"checked": len(names), "failed": failed}))
    else:
        print(f"{len(names) - failed}/{len(names)} class(es) OK")
    return 1 if failed else 0


def _cmd_call(composer: Composer, args) -> int:
    instance = composer.instantiate(args.cls)
    result = composer.invoke(instance, args.member,
                             *[_parse_arg(a) for a in args.args])
    if args.format == "json":
        print(json.dumps(result, default=str))
    elif isinstance(result, list):
        print(" -> ".join(str(r) for r in result))
    else:
        print(result)
    return 0


def build_arg_parser() -> argparse.ArgumentParser:
    argparser = argparse.ArgumentParser(
        prog="mixc", description="mixin composition inspector")
    argparser.add_argument("manifest", help="Input manifest (.json)")
    argparser.add_argument("--format", choices=["text", "json"],
                           default="text", help="Output format")
    argparser.add_argument("-v", "--verbose", action="store_true",
                           help="Log composition steps to stderr")
    sub = argparser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("order", help="Print the resolution order of a class")
    p.add_argument("cls")
    p = sub.add_parser("table", help="Print the dispatch table of a class")
    p.add_argument("cls")
    p = sub.add_parser("check", help="Finalize classes and report faults")
    p.add_argument("classes", nargs="*",
                   help="Classes to check (default: every concrete class)")
    p = sub.add_parser("call", help="Instantiate a class and invoke a member")
    p.add_argument("cls")
    p.add_argument("member")
    p.add_argument("args", nargs="*")
    return argparser


def main(argv=None) -> int:
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s")

    filename = os.path.basename(args.manifest)
    try:
        with open(args.manifest, "r") as f:
            source = f.read()
    except FileNotFoundError:
        print(f"Error: File '{args.manifest}' not found", file=sys.stderr)
        return 1

    try:
        composer = build_composer(source)
        logger.debug("loaded %d unit(s) from %s", len(composer.units), filename)
        if args.command == "order":
            return _cmd_order(composer, args)
        if args.command == "table":
            return _cmd_table(composer, args)
        if args.command == "check":
            return _cmd_check(composer, args, source, filename)
        return _cmd_call(composer, args)
    except CompositionError as e:
        _report(source, filename, e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
