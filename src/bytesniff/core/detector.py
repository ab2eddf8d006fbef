"""Signature matching and file classification for bytesniff.

Examples
--------
>>> from bytesniff.signatures import build_default
>>> signatures = build_default()
>>> detect(b"\\xff\\xfe\\x00\\x00", signatures)
'UTF32-LE'
>>> detect(b"\\xff\\xfeh\\x00", signatures)
'UTF16-LE'
>>> detect(b"", signatures) is None
True
>>> detector = Detector(signatures, window_size=8)
>>> detector.window_size
8
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Iterable, Iterator, List, Optional

from ..signatures import registry
from .types import (
    ClassificationFailure,
    ClassificationResult,
    DetectorIOError,
    ErrorKind,
    PathError,
    ScanOutcome,
    SignatureSet,
)

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_SIZE = 8
_MAX_WINDOW_SIZE = 64 * 1024  # Guardrail against oversized custom tables.


def detect(buffer: bytes, signatures: SignatureSet) -> Optional[str]:
    """Return the label of the first signature matching ``buffer``.

    Entries are evaluated in ``signatures`` order and the scan stops at the
    first hit. An alternative longer than ``buffer`` never matches, so short
    or empty buffers cannot collide with signatures that start with null
    bytes.

    Args:
        buffer: Leading bytes of the file, exactly as many as were read.
        signatures: Ordered signature table.

    Returns:
        The matching label, or ``None`` when nothing matches.
    """

    data = bytes(buffer)
    available = len(data)
    for entry in signatures:
        for alternative in entry.alternatives:
            width = len(alternative)
            if width <= available and data[:width] == alternative:
                return entry.label
    return None


def _wrap_io_error(path: Path, exc: OSError) -> DetectorIOError:
    """Convert an ``OSError`` into ``DetectorIOError``."""

    reason = exc.strerror or str(exc)
    return DetectorIOError(path=Path(path), reason=reason)


def _validate_window_size(window_size: int, minimum: int) -> int:
    """Validate the requested read window against the active table."""

    if window_size <= 0:
        raise ValueError("window_size must be a positive integer")
    if window_size > _MAX_WINDOW_SIZE:
        logger.warning(
            "Window size %s exceeds %s bytes; clamping to guardrail.",
            window_size,
            _MAX_WINDOW_SIZE,
        )
        window_size = _MAX_WINDOW_SIZE
    if window_size < minimum:
        logger.warning(
            "Window size %s is shorter than the longest signature; using %s bytes.",
            window_size,
            minimum,
        )
        window_size = minimum
    return window_size


class Detector:
    """Reads file prefixes and classifies them against a signature table.

    Example
    -------
    >>> from bytesniff.signatures import build_default
    >>> detector = Detector(build_default())
    >>> detector.classify_file(Path(__file__)).encoding is None
    True
    """

    def __init__(
        self,
        signatures: Optional[SignatureSet] = None,
        *,
        include_binary: bool = False,
        window_size: Optional[int] = None,
        on_error: Optional[Callable[[Path, Exception], None]] = None,
    ) -> None:
        """Create a detector.

        Args:
            signatures: Optional explicit signature table. When omitted the
                built-in table is used.
            include_binary: Append the binary-format block to the built-in
                table. Ignored when ``signatures`` is supplied.
            window_size: Number of leading bytes to read from each file.
                ``None`` uses ``DEFAULT_WINDOW_SIZE`` or the longest
                signature, whichever is larger.
            on_error: Optional callback invoked with ``(path, exception)``
                when reading a file fails. The exception passed will be a
                :class:`DetectorIOError`.
        """

        if signatures is None:
            signatures = registry.get_signatures(include_binary=include_binary)
        self._signatures = signatures
        minimum = max(signatures.window_size, 1)
        if window_size is None:
            window_size = max(DEFAULT_WINDOW_SIZE, minimum)
        self._window_size = _validate_window_size(window_size, minimum)
        self._on_error = on_error

    @property
    def signatures(self) -> SignatureSet:
        return self._signatures

    @property
    def window_size(self) -> int:
        return self._window_size

    def _handle_error(
        self,
        path: Path,
        error: DetectorIOError,
        *,
        cause: Optional[BaseException] = None,
    ) -> None:
        if self._on_error is not None:
            try:
                self._on_error(path, error)
            except Exception:  # pragma: no cover - defensive
                logger.exception("on_error handler raised during classification")
        if cause is not None:
            raise error from cause
        raise error

    def _resolve(self, path: Path) -> Path:
        candidate = Path(path).expanduser()
        try:
            resolved = candidate.resolve()
            if not resolved.exists():
                raise PathError(resolved, "Path does not exist")
            if not resolved.is_file():
                raise PathError(resolved, "Expected a file path")
        except PathError:
            raise
        except RuntimeError as exc:
            # Symlink loops surface here on some interpreters.
            raise PathError(candidate, str(exc) or "Unable to resolve path") from exc
        except ValueError as exc:
            raise PathError(candidate, f"Invalid path: {exc}") from exc
        except OSError as exc:
            self._handle_error(candidate, _wrap_io_error(candidate, exc), cause=exc)
        return resolved

    def read_window(self, path: Path) -> bytes:
        """Return up to ``window_size`` leading bytes of ``path``.

        Only the bytes actually read are returned; short files yield short
        buffers.
        """

        path = Path(path)
        try:
            with path.open("rb") as handle:
                return handle.read(self._window_size)
        except OSError as exc:
            self._handle_error(path, _wrap_io_error(path, exc), cause=exc)
        return b""  # pragma: no cover - _handle_error always raises

    def classify_file(self, path: Path) -> ClassificationResult:
        """Classify a single file.

        Raises:
            PathError: If ``path`` does not exist or is not a regular file.
            DetectorIOError: If the file cannot be opened or read.
        """

        resolved = self._resolve(Path(path))
        window = self.read_window(resolved)
        label = detect(window, self._signatures)
        logger.debug(
            "Classified %s as %s from %d byte(s)", resolved, label, len(window)
        )
        return ClassificationResult(
            name=resolved.name,
            extension=resolved.suffix,
            encoding=label,
            path=str(resolved),
            bytes_read=len(window),
        )

    def iter_classify(self, paths: Iterable[Path | str]) -> Iterator[ScanOutcome]:
        """Yield one outcome per input path, in input order.

        Path and I/O failures become :class:`ClassificationFailure` entries so
        a bad input never stops the remaining ones.
        """

        for raw in paths:
            path = Path(raw)
            try:
                yield self.classify_file(path)
            except PathError as exc:
                logger.info("Skipping %s: %s", path, exc.reason)
                yield ClassificationFailure(
                    path=str(exc.path), kind=ErrorKind.PATH, message=str(exc)
                )
            except DetectorIOError as exc:
                logger.info("Unable to read %s: %s", path, exc.reason)
                yield ClassificationFailure(
                    path=str(exc.path), kind=ErrorKind.IO, message=str(exc)
                )

    def classify_paths(self, paths: Iterable[Path | str]) -> List[ScanOutcome]:
        return list(self.iter_classify(paths))


def classify_file(
    path: Path,
    *,
    include_binary: bool = False,
    signatures: Optional[SignatureSet] = None,
    on_error: Optional[Callable[[Path, Exception], None]] = None,
) -> ClassificationResult:
    """Convenience wrapper that uses a default detector instance."""

    detector = Detector(
        signatures,
        include_binary=include_binary,
        on_error=on_error,
    )
    return detector.classify_file(Path(path))


def classify_paths(
    paths: Iterable[Path | str],
    *,
    include_binary: bool = False,
    signatures: Optional[SignatureSet] = None,
    on_error: Optional[Callable[[Path, Exception], None]] = None,
) -> List[ScanOutcome]:
    """Convenience wrapper mirroring :meth:`Detector.classify_paths`."""

    detector = Detector(
        signatures,
        include_binary=include_binary,
        on_error=on_error,
    )
    return detector.classify_paths(paths)
