"""bytesniff package.

Classifies files by comparing their leading bytes against an ordered table
of byte-order marks and, optionally, binary format magic numbers.
"""

from __future__ import annotations

from .core import (
    BytesniffError,
    ClassificationFailure,
    ClassificationResult,
    ConfigurationError,
    Detector,
    DetectorIOError,
    ErrorKind,
    PathError,
    ScanOutcome,
    SignatureEntry,
    SignatureSet,
    classify_file,
    classify_paths,
    detect,
)
from .signatures import (
    build_default,
    get_signatures,
    load_signature_table,
    signature_summary,
    with_binary_extensions,
)

__version__ = "0.1.0"

__all__ = [
    "BytesniffError",
    "ClassificationFailure",
    "ClassificationResult",
    "ConfigurationError",
    "Detector",
    "DetectorIOError",
    "ErrorKind",
    "PathError",
    "ScanOutcome",
    "SignatureEntry",
    "SignatureSet",
    "build_default",
    "classify_file",
    "classify_paths",
    "detect",
    "get_signatures",
    "load_signature_table",
    "signature_summary",
    "with_binary_extensions",
]
