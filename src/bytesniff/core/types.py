"""Shared data structures and error types for the bytesniff core.

This module centralises the signature table dataclasses, the per-file
classification records and the exception hierarchy used across the
package.

Example
-------
>>> entry = SignatureEntry("UTF8", (b"\\xef\\xbb\\xbf",))
>>> signatures = SignatureSet((entry,))
>>> signatures.labels
('UTF8',)
>>> signatures.window_size
3
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, Optional, Tuple, Union


class BytesniffError(Exception):
    """Base class for errors raised by bytesniff."""


class ConfigurationError(BytesniffError, ValueError):
    """Raised when a signature definition cannot be built."""


class FileError(BytesniffError):
    """A failure tied to one input path; carries ``path`` and ``reason``."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"{self.path}: {self.reason}")

    def __repr__(self) -> str:
        return f"{type(self).__name__}(path={str(self.path)!r}, reason={self.reason!r})"


class PathError(FileError, FileNotFoundError):
    """Raised when a supplied path does not exist or is not a regular file."""


class DetectorIOError(FileError):
    """Represents an I/O failure that occurred while reading a file."""


class ErrorKind(str, enum.Enum):
    """Per-file failure categories surfaced to result sinks."""

    PATH = "PathError"
    IO = "IOError"


@dataclass(frozen=True)
class SignatureEntry:
    """A labelled group of alternative byte sequences."""

    label: str
    alternatives: Tuple[bytes, ...]

    def __post_init__(self) -> None:
        if not isinstance(self.label, str) or not self.label.strip():
            raise ConfigurationError("Signature label must be a non-empty string.")
        raw = self.alternatives
        if isinstance(raw, (str, bytes, bytearray, memoryview)):
            raise ConfigurationError(
                f"Signature {self.label!r} alternatives must be a sequence of byte strings."
            )
        try:
            items = tuple(raw)
        except TypeError as exc:
            raise ConfigurationError(
                f"Signature {self.label!r} alternatives must be iterable."
            ) from exc
        for item in items:
            if not isinstance(item, (bytes, bytearray, memoryview)):
                raise ConfigurationError(
                    f"Signature {self.label!r} has a {type(item).__name__} alternative;"
                    " expected bytes."
                )
        alternatives = tuple(bytes(item) for item in items)
        if not alternatives:
            raise ConfigurationError(
                f"Signature {self.label!r} must declare at least one byte sequence."
            )
        for alternative in alternatives:
            if not alternative:
                raise ConfigurationError(
                    f"Signature {self.label!r} contains an empty byte sequence."
                )
        object.__setattr__(self, "alternatives", alternatives)

    @property
    def max_length(self) -> int:
        return max(len(alternative) for alternative in self.alternatives)


@dataclass(frozen=True)
class SignatureSet:
    """Ordered, immutable collection of signature entries.

    Entry order is the precedence rule: when several labels could match the
    same prefix, the entry listed first wins. Longer sequences that share a
    prefix with shorter ones therefore have to be listed before them.
    """

    entries: Tuple[SignatureEntry, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        entries = tuple(self.entries)
        seen: set[str] = set()
        for entry in entries:
            if not isinstance(entry, SignatureEntry):
                raise ConfigurationError(
                    f"Expected SignatureEntry, got {type(entry).__name__}."
                )
            if entry.label in seen:
                raise ConfigurationError(
                    f"A signature labelled {entry.label!r} is already defined."
                )
            seen.add(entry.label)
        object.__setattr__(self, "entries", entries)

    def __iter__(self) -> Iterator[SignatureEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, label: object) -> bool:
        return any(entry.label == label for entry in self.entries)

    @property
    def labels(self) -> Tuple[str, ...]:
        return tuple(entry.label for entry in self.entries)

    @property
    def window_size(self) -> int:
        """Length of the longest alternative, ``0`` for an empty set."""

        return max((entry.max_length for entry in self.entries), default=0)

    def get(self, label: str) -> Optional[SignatureEntry]:
        for entry in self.entries:
            if entry.label == label:
                return entry
        return None

    def extend(self, entries: Iterable[SignatureEntry]) -> "SignatureSet":
        """Return a new set with ``entries`` appended after the current ones."""

        return SignatureSet(self.entries + tuple(entries))


@dataclass(frozen=True)
class ClassificationResult:
    name: str
    extension: str
    encoding: Optional[str]
    path: str
    bytes_read: int = 0

    @property
    def detected(self) -> bool:
        return self.encoding is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "Name": self.name,
            "Extension": self.extension,
            "Encoding": self.encoding,
            "Path": self.path,
        }


@dataclass(frozen=True)
class ClassificationFailure:
    """Per-file error entry reported alongside successful classifications."""

    path: str
    kind: ErrorKind
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "Path": self.path,
            "Kind": self.kind.value,
            "Message": self.message,
        }


ScanOutcome = Union[ClassificationResult, ClassificationFailure]
