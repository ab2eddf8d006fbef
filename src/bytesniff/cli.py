"""Command-line entry point for bytesniff.

* Accept one or more paths, or read them line by line from stdin.
* Classify each file against the text encoding table, optionally extended
  with the binary format block.
* Render a compact table or JSON lines; per-file errors go to stderr and do
  not stop the run.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence

from .core.detector import Detector
from .core.types import ClassificationFailure, ConfigurationError, ScanOutcome, SignatureSet
from .reporting.json_lines import write_json_lines
from .signatures import registry

logger = logging.getLogger(__name__)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bytesniff",
        description="Classify file encodings and formats from their leading bytes",
    )
    parser.add_argument(
        "paths",
        nargs="*",
        help="Files to classify. Reads paths from stdin when omitted or '-'.",
    )
    parser.add_argument(
        "--include-binary",
        action="store_true",
        help="Also match binary format signatures (PNG, ZIP, ...).",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Emit JSON lines instead of a table.",
    )
    parser.add_argument(
        "--signatures",
        type=Path,
        default=None,
        help="JSON signature table replacing the built-in text encodings.",
    )
    parser.add_argument(
        "--window-size",
        type=int,
        default=None,
        help="Bytes to read from each file (defaults to the longest signature, min 8).",
    )
    parser.add_argument(
        "--list-signatures",
        action="store_true",
        help="Print the active signature table and exit.",
    )
    parser.add_argument(
        "--log-level",
        choices=_LOG_LEVELS,
        default="WARNING",
        help="Logging verbosity written to stderr (default: WARNING).",
    )
    return parser


def _iter_input_paths(paths: Sequence[str], stdin: Iterable[str]) -> Iterator[str]:
    if paths and list(paths) != ["-"]:
        yield from paths
        return
    for line in stdin:
        candidate = line.strip()
        if candidate:
            yield candidate


def _load_signatures(args: argparse.Namespace) -> SignatureSet:
    if args.signatures is not None:
        signatures = registry.load_signature_table(args.signatures)
    else:
        signatures = registry.build_default()
    if args.include_binary:
        signatures = registry.with_binary_extensions(signatures)
    return signatures


def _shorten_name(name: str, limit: int) -> str:
    """Trim ``name`` from the front so its extension stays visible."""

    if limit <= 0:
        return ""
    if len(name) <= limit:
        return name
    return "…" + name[len(name) - limit + 1:]


def _emit_table(outcomes: Iterable[ScanOutcome]) -> int:
    columns = ("Name", "Extension", "Encoding", "Path")
    widths = [len(column) for column in columns]
    rows: List[tuple[str, ...]] = []
    errors = 0
    for outcome in outcomes:
        if isinstance(outcome, ClassificationFailure):
            errors += 1
            sys.stderr.write(f"error: {outcome.kind.value}: {outcome.message}\n")
            continue
        rows.append(
            (
                outcome.name,
                outcome.extension or "—",
                outcome.encoding or "—",
                outcome.path,
            )
        )
        for index, value in enumerate(rows[-1]):
            widths[index] = max(widths[index], len(value))

    max_name_width = 48
    if widths[0] > max_name_width:
        widths[0] = max_name_width

    if rows:
        print("  ".join(column.ljust(widths[index]) for index, column in enumerate(columns)))
        print("  ".join("-" * width for width in widths))
        for name, *rest in rows:
            formatted = [_shorten_name(name, widths[0]).ljust(widths[0])]
            formatted.extend(
                value.ljust(widths[index]) for index, value in enumerate(rest, start=1)
            )
            print("  ".join(formatted).rstrip())
    return errors


def _emit_json(outcomes: Iterable[ScanOutcome]) -> int:
    errors = 0

    def _tee() -> Iterator[ScanOutcome]:
        nonlocal errors
        for outcome in outcomes:
            if isinstance(outcome, ClassificationFailure):
                errors += 1
                sys.stderr.write(f"error: {outcome.kind.value}: {outcome.message}\n")
            yield outcome

    write_json_lines(_tee(), sys.stdout)
    return errors


def _emit_signature_table(signatures: SignatureSet, as_json: bool) -> None:
    if as_json:
        print(json.dumps(registry.dump_signature_table(signatures), indent=2))
        return
    for item in registry.signature_summary(signatures):
        alternatives = ", ".join(item["alternatives"])
        print(f"{item['order']:>3}  {item['label']:<12}  {alternatives}")


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        signatures = _load_signatures(args)
    except ConfigurationError as exc:
        parser.error(str(exc))
        return 2

    if args.list_signatures:
        _emit_signature_table(signatures, args.json)
        return 0

    try:
        detector = Detector(signatures, window_size=args.window_size)
    except ValueError as exc:
        parser.error(str(exc))
        return 2

    outcomes = detector.iter_classify(_iter_input_paths(args.paths, sys.stdin))
    if args.json:
        errors = _emit_json(outcomes)
    else:
        errors = _emit_table(outcomes)
    if errors:
        logger.debug("Finished with %d per-file error(s)", errors)
        return 1
    return 0


def console_main() -> None:
    """Entry point for the ``bytesniff`` console script."""

    sys.exit(main())


if __name__ == "__main__":  # pragma: no cover - CLI entry
    sys.exit(main())
