"""Signature table definitions and helpers.

The registry keeps signature definitions as ordered ``(label, hex, ...)``
records. Order is significant: the detector walks entries front to back and
the first match wins, so longer sequences sharing leading bytes with shorter
ones (``FF FE 00 00`` against ``FF FE``) are listed first.

Example
-------
>>> signatures = build_default()
>>> signatures.labels[:4]
('UTF32-LE', 'UTF32-BE', 'UTF8', 'UTF16-LE')
>>> with_binary_extensions(signatures).labels[-2:]
('MSEXE', 'ZIP')
>>> parse_hex("EF-BB-BF")
b'\\xef\\xbb\\xbf'
"""

from __future__ import annotations

import json
import logging
import re
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Tuple

from ..core.types import ConfigurationError, SignatureEntry, SignatureSet

logger = logging.getLogger(__name__)

SIGNATURE_TABLE_VERSION = "1"

_HEX_SEPARATORS = re.compile(r"[\s-]+")
_HEX_OCTET = re.compile(r"^[0-9A-Fa-f]{2}$")

# Longer byte-order marks precede the shorter ones they start with.
TEXT_SIGNATURES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("UTF32-LE", ("FF-FE-00-00",)),
    ("UTF32-BE", ("00-00-FE-FF",)),
    ("UTF8", ("EF-BB-BF",)),
    ("UTF16-LE", ("FF-FE",)),
    ("UTF16-BE", ("FE-FF",)),
    ("UTF7", ("2B-2F-76-38", "2B-2F-76-39", "2B-2F-76-2B", "2B-2F-76-2F")),
    ("UTF1", ("F7-64-4C",)),
    ("UTF-EBCDIC", ("DD-73-66-73",)),
    ("SCSU", ("0E-FE-FF",)),
    ("BOCU-1", ("FB-EE-28",)),
    ("GB-18030", ("84-31-95-33",)),
)

# MSEXCEL starts with the ZIP local header and MSEXE/ZIP are two bytes wide,
# so the generic entries stay at the end of the block.
BINARY_SIGNATURES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("LNK", ("4C-00-00-00-01-14-02-00",)),
    ("MSEXCEL", ("50-4B-03-04-14-00-06-00",)),
    ("PNG", ("89-50-4E-47-0D-0A-1A-0A",)),
    ("MSOFFICE", ("D0-CF-11-E0-A1-B1-1A-E1",)),
    ("7ZIP", ("37-7A-BC-AF-27-1C",)),
    ("RTF", ("7B-5C-72-74-66-31",)),
    ("GIF", ("47-49-46-38",)),
    ("REGPOL", ("50-52-65-67",)),
    ("GZIP", ("1F-8B",)),
    ("JPEG", ("FF-D8",)),
    ("MSEXE", ("4D-5A",)),
    ("ZIP", ("50-4B",)),
)


def parse_hex(text: str) -> bytes:
    """Parse hyphen- or whitespace-delimited hex octets into ``bytes``.

    Raises:
        ConfigurationError: If ``text`` is empty or contains anything other
            than two-digit hex octets.
    """

    if not isinstance(text, str):
        raise ConfigurationError(
            f"Hex signature must be a string, got {type(text).__name__}."
        )
    tokens = [token for token in _HEX_SEPARATORS.split(text.strip()) if token]
    if not tokens:
        raise ConfigurationError("Hex signature cannot be empty.")
    for token in tokens:
        if not _HEX_OCTET.match(token):
            raise ConfigurationError(
                f"Malformed hex octet {token!r} in signature {text!r}."
            )
    return bytes(int(token, 16) for token in tokens)


def format_hex(value: bytes) -> str:
    """Render ``value`` as uppercase hyphen-delimited hex octets."""

    return "-".join(f"{byte:02X}" for byte in value)


def build_signature_set(
    definitions: Iterable[Tuple[str, Sequence[str]]],
) -> SignatureSet:
    """Build a :class:`SignatureSet` from ordered ``(label, [hex, ...])`` pairs."""

    entries: List[SignatureEntry] = []
    for label, hex_values in definitions:
        if isinstance(hex_values, str):
            hex_values = (hex_values,)
        alternatives = tuple(parse_hex(value) for value in hex_values)
        entries.append(SignatureEntry(label=label, alternatives=alternatives))
    return SignatureSet(tuple(entries))


def build_default() -> SignatureSet:
    """Return the text-encoding (byte-order mark) signature set."""

    return build_signature_set(TEXT_SIGNATURES)


def with_binary_extensions(signatures: SignatureSet) -> SignatureSet:
    """Return ``signatures`` with the binary-format block appended."""

    return signatures.extend(build_signature_set(BINARY_SIGNATURES))


@lru_cache(maxsize=None)
def get_signatures(include_binary: bool = False) -> SignatureSet:
    """Return the cached built-in signature set.

    Args:
        include_binary: When ``True`` the binary-format block is appended
            after the text encodings.
    """

    signatures = build_default()
    if include_binary:
        signatures = with_binary_extensions(signatures)
    logger.debug(
        "Built signature set with %d entries (include_binary=%s)",
        len(signatures),
        include_binary,
    )
    return signatures


def _definitions_from_mapping(payload: Any) -> List[Tuple[str, Sequence[str]]]:
    if not isinstance(payload, Mapping):
        raise ConfigurationError("Signature table must be a JSON object.")
    entries = payload.get("signatures")
    if not isinstance(entries, list):
        raise ConfigurationError("Signature table requires a 'signatures' list.")

    definitions: List[Tuple[str, Sequence[str]]] = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, Mapping):
            raise ConfigurationError(f"Signature entry #{index} must be an object.")
        label = entry.get("label")
        if not isinstance(label, str) or not label.strip():
            raise ConfigurationError(f"Signature entry #{index} is missing a label.")
        hex_values = entry.get("hex")
        if isinstance(hex_values, str):
            hex_values = [hex_values]
        if not isinstance(hex_values, list) or not hex_values:
            raise ConfigurationError(
                f"Signature {label!r} must list at least one hex sequence."
            )
        definitions.append((label.strip(), hex_values))
    return definitions


def load_signature_table(path: Path | str) -> SignatureSet:
    """Load an ordered signature table from a JSON document.

    The document looks like ``{"version": "1", "signatures": [{"label":
    "UTF8", "hex": ["EF-BB-BF"]}, ...]}``; entries keep their listed order.

    Raises:
        ConfigurationError: If the file cannot be read or any entry is
            malformed.
    """

    table_path = Path(path)
    try:
        payload = json.loads(table_path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigurationError(
            f"Unable to read signature table {table_path}: {exc}"
        ) from exc
    except json.JSONDecodeError as exc:
        raise ConfigurationError(
            f"Signature table {table_path} is not valid JSON: {exc}"
        ) from exc

    signatures = build_signature_set(_definitions_from_mapping(payload))
    logger.debug(
        "Loaded %d signatures from %s (version %s)",
        len(signatures),
        table_path,
        payload.get("version", "unknown"),
    )
    return signatures


def dump_signature_table(signatures: SignatureSet) -> Dict[str, Any]:
    """Return the JSON-ready table understood by :func:`load_signature_table`."""

    return {
        "version": SIGNATURE_TABLE_VERSION,
        "signatures": [
            {
                "label": entry.label,
                "hex": [format_hex(alternative) for alternative in entry.alternatives],
            }
            for entry in signatures
        ],
    }


def signature_summary(signatures: SignatureSet) -> Tuple[Mapping[str, object], ...]:
    """Return an ordered summary of ``signatures`` for manual auditing."""

    summary = []
    for index, entry in enumerate(signatures):
        summary.append(
            {
                "label": entry.label,
                "order": index,
                "alternatives": [format_hex(alt) for alt in entry.alternatives],
                "max_length": entry.max_length,
            }
        )
    return tuple(summary)
