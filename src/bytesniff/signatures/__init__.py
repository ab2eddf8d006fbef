"""Signature registry package."""

from .registry import (
    BINARY_SIGNATURES,
    TEXT_SIGNATURES,
    build_default,
    build_signature_set,
    dump_signature_table,
    format_hex,
    get_signatures,
    load_signature_table,
    parse_hex,
    signature_summary,
    with_binary_extensions,
)

__all__ = [
    "BINARY_SIGNATURES",
    "TEXT_SIGNATURES",
    "build_default",
    "build_signature_set",
    "dump_signature_table",
    "format_hex",
    "get_signatures",
    "load_signature_table",
    "parse_hex",
    "signature_summary",
    "with_binary_extensions",
]
