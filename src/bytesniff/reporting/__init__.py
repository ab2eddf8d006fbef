"""Reporting adapters for classification outcomes."""

from .json_lines import (
    iter_json_records,
    render_json_lines,
    summarise_outcomes,
    write_json_lines,
)

__all__ = [
    "iter_json_records",
    "render_json_lines",
    "summarise_outcomes",
    "write_json_lines",
]
