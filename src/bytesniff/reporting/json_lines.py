"""Newline-delimited JSON helpers for classification reports.

Each outcome becomes one record so large batches can be streamed without
loading them into memory first. Failures are emitted next to successful
classifications, keeping partial-success runs visible in a single stream.
"""

from __future__ import annotations

import json
from collections import Counter
from typing import Any, Dict, Iterable, Iterator, TextIO

from ..core.types import ClassificationFailure, ClassificationResult, ScanOutcome

__all__ = [
    "iter_json_records",
    "render_json_lines",
    "summarise_outcomes",
    "write_json_lines",
]


def _prepare_record(outcome: ScanOutcome) -> dict[str, Any]:
    if isinstance(outcome, ClassificationFailure):
        return {"type": "error", "payload": outcome.to_dict()}
    if isinstance(outcome, ClassificationResult):
        return {"type": "classification", "payload": outcome.to_dict()}
    raise TypeError(f"Unsupported outcome type: {type(outcome).__name__}")


def iter_json_records(outcomes: Iterable[ScanOutcome]) -> Iterator[dict[str, Any]]:
    """Yield JSON-compatible records for classification outcomes."""

    for outcome in outcomes:
        yield _prepare_record(outcome)


def render_json_lines(
    outcomes: Iterable[ScanOutcome],
    *,
    sort_keys: bool = True,
) -> str:
    """Return newline-delimited JSON for ``outcomes``."""

    lines = [
        json.dumps(record, ensure_ascii=False, sort_keys=sort_keys)
        for record in iter_json_records(outcomes)
    ]
    return "\n".join(lines)


def write_json_lines(
    outcomes: Iterable[ScanOutcome],
    stream: TextIO,
    *,
    sort_keys: bool = True,
) -> None:
    """Write newline-delimited JSON to ``stream`` as outcomes arrive."""

    for record in iter_json_records(outcomes):
        stream.write(json.dumps(record, ensure_ascii=False, sort_keys=sort_keys))
        stream.write("\n")


def summarise_outcomes(outcomes: Iterable[ScanOutcome]) -> Dict[str, Any]:
    """Aggregate counts across a batch of outcomes."""

    total = classified = unclassified = errors = 0
    labels: Counter[str] = Counter()
    error_kinds: Counter[str] = Counter()
    for outcome in outcomes:
        total += 1
        if isinstance(outcome, ClassificationFailure):
            errors += 1
            error_kinds[outcome.kind.value] += 1
        elif outcome.encoding is None:
            unclassified += 1
        else:
            classified += 1
            labels[outcome.encoding] += 1
    return {
        "total": total,
        "classified": classified,
        "unclassified": unclassified,
        "errors": errors,
        "labels": dict(sorted(labels.items())),
        "error_kinds": dict(sorted(error_kinds.items())),
    }
