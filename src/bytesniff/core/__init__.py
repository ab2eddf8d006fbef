"""bytesniff core module exports."""

from .detector import DEFAULT_WINDOW_SIZE, Detector, classify_file, classify_paths, detect
from .types import (
    BytesniffError,
    ClassificationFailure,
    ClassificationResult,
    ConfigurationError,
    DetectorIOError,
    FileError,
    ErrorKind,
    PathError,
    ScanOutcome,
    SignatureEntry,
    SignatureSet,
)

__all__ = [
    "BytesniffError",
    "ClassificationFailure",
    "ClassificationResult",
    "ConfigurationError",
    "DEFAULT_WINDOW_SIZE",
    "Detector",
    "DetectorIOError",
    "FileError",
    "ErrorKind",
    "PathError",
    "ScanOutcome",
    "SignatureEntry",
    "SignatureSet",
    "classify_file",
    "classify_paths",
    "detect",
]
