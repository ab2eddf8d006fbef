from __future__ import annotations

import logging
from pathlib import Path

import pytest

from bytesniff.core.detector import (
    DEFAULT_WINDOW_SIZE,
    Detector,
    classify_file,
    classify_paths,
    detect,
)
from bytesniff.core.types import (
    ClassificationFailure,
    ClassificationResult,
    DetectorIOError,
    ErrorKind,
    PathError,
    SignatureEntry,
    SignatureSet,
)
from bytesniff.signatures.registry import build_default, with_binary_extensions


def _set(*pairs: tuple[str, tuple[bytes, ...]]) -> SignatureSet:
    return SignatureSet(tuple(SignatureEntry(label, alts) for label, alts in pairs))


def test_detect_returns_first_label_in_registry_order() -> None:
    signatures = _set(
        ("LONG", (b"\xff\xfe\x00\x00",)),
        ("SHORT", (b"\xff\xfe",)),
    )

    assert detect(b"\xff\xfe\x00\x00rest", signatures) == "LONG"
    assert detect(b"\xff\xfeab", signatures) == "SHORT"


def test_detect_respects_order_even_when_general_entry_comes_first() -> None:
    signatures = _set(
        ("SHORT", (b"\xff\xfe",)),
        ("LONG", (b"\xff\xfe\x00\x00",)),
    )

    assert detect(b"\xff\xfe\x00\x00", signatures) == "SHORT"


def test_detect_matches_any_alternative() -> None:
    signatures = build_default()

    for tail in (b"8", b"9", b"+", b"/"):
        assert detect(b"+/v" + tail + b"abc", signatures) == "UTF7"
    assert detect(b"+/v-", signatures) is None


def test_detect_never_pads_short_buffers() -> None:
    signatures = build_default()

    assert detect(b"", signatures) is None
    assert detect(b"\x00", signatures) is None
    assert detect(b"\x00\x00", signatures) is None
    assert detect(b"\x00\x00\xfe", signatures) is None
    assert detect(b"\x00\x00\xfe\xff", signatures) == "UTF32-BE"


def test_detect_short_prefix_of_long_signature_falls_through() -> None:
    signatures = build_default()

    # Three bytes of the UTF-32LE mark still carry the UTF-16LE mark.
    assert detect(b"\xff\xfe\x00", signatures) == "UTF16-LE"


def test_detect_is_idempotent() -> None:
    signatures = with_binary_extensions(build_default())
    buffer = b"\x89PNG\r\n\x1a\n"

    results = {detect(buffer, signatures) for _ in range(5)}

    assert results == {"PNG"}


def test_detect_with_empty_signature_set() -> None:
    assert detect(b"\xef\xbb\xbf", SignatureSet()) is None


def test_detect_accepts_bytearray_and_memoryview() -> None:
    signatures = build_default()

    assert detect(bytearray(b"\xef\xbb\xbfx"), signatures) == "UTF8"
    assert detect(memoryview(b"\xfe\xffx"), signatures) == "UTF16-BE"


def test_detector_default_window_size() -> None:
    detector = Detector(build_default())

    assert detector.window_size == DEFAULT_WINDOW_SIZE


def test_detector_rejects_invalid_window_size() -> None:
    with pytest.raises(ValueError):
        Detector(build_default(), window_size=0)


def test_detector_raises_window_to_longest_signature(caplog: pytest.LogCaptureFixture) -> None:
    signatures = with_binary_extensions(build_default())

    with caplog.at_level(logging.WARNING, logger="bytesniff.core.detector"):
        detector = Detector(signatures, window_size=2)

    assert detector.window_size == 8
    assert "shorter than the longest signature" in caplog.text


def test_detector_clamps_oversized_window(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="bytesniff.core.detector"):
        detector = Detector(build_default(), window_size=10_000_000)

    assert detector.window_size == 64 * 1024
    assert "clamping" in caplog.text


def test_detector_uses_builtin_table_when_none_given() -> None:
    assert "PNG" not in Detector().signatures
    assert "PNG" in Detector(include_binary=True).signatures


def test_read_window_returns_only_bytes_read(tmp_path: Path) -> None:
    target = tmp_path / "short.bin"
    target.write_bytes(b"\x00\x00")

    detector = Detector(build_default())

    assert detector.read_window(target) == b"\x00\x00"


def test_read_window_truncates_to_window(tmp_path: Path) -> None:
    target = tmp_path / "long.bin"
    target.write_bytes(bytes(range(32)))

    detector = Detector(build_default(), window_size=8)

    assert detector.read_window(target) == bytes(range(8))


def test_classify_file_builds_result(tmp_path: Path) -> None:
    target = tmp_path / "notes.txt"
    target.write_bytes(b"\xef\xbb\xbfhello")

    result = Detector(build_default()).classify_file(target)

    assert isinstance(result, ClassificationResult)
    assert result.name == "notes.txt"
    assert result.extension == ".txt"
    assert result.encoding == "UTF8"
    assert result.path == str(target.resolve())
    assert result.bytes_read == 8


def test_classify_file_null_prefixed_short_file_is_unclassified(tmp_path: Path) -> None:
    target = tmp_path / "tiny"
    target.write_bytes(b"\x00")

    result = Detector(build_default()).classify_file(target)

    assert result.encoding is None
    assert result.extension == ""
    assert result.bytes_read == 1


def test_classify_file_missing_path(tmp_path: Path) -> None:
    with pytest.raises(PathError) as excinfo:
        Detector().classify_file(tmp_path / "missing.txt")

    assert "does not exist" in str(excinfo.value)
    assert isinstance(excinfo.value, FileNotFoundError)


def test_classify_file_rejects_directory(tmp_path: Path) -> None:
    with pytest.raises(PathError) as excinfo:
        Detector().classify_file(tmp_path)

    assert "Expected a file path" in str(excinfo.value)


def test_classify_file_wraps_io_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    target = tmp_path / "locked.txt"
    target.write_text("data", encoding="utf-8")

    captured: list[Path] = []
    errors: list[Exception] = []

    def collect(path: Path, exc: Exception) -> None:
        captured.append(path)
        errors.append(exc)

    detector = Detector(on_error=collect)
    monkeypatch.setattr(
        Path,
        "open",
        lambda self, mode="rb", **_: (_ for _ in ()).throw(OSError("boom")),
    )

    with pytest.raises(DetectorIOError) as excinfo:
        detector.classify_file(target)

    assert excinfo.value.reason == "boom"
    assert isinstance(excinfo.value.__cause__, OSError)
    assert captured == [target.resolve()]
    assert errors and "boom" in str(errors[-1])


def test_classify_paths_preserves_order_and_partial_success(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    utf8 = tmp_path / "a.txt"
    utf8.write_bytes(b"\xef\xbb\xbfa")
    plain = tmp_path / "b.txt"
    plain.write_bytes(b"plain")
    missing = tmp_path / "missing.txt"
    unreadable = tmp_path / "c.txt"
    unreadable.write_bytes(b"\xfe\xff")

    original_open = Path.open

    def fake_open(self: Path, mode: str = "r", *args: object, **kwargs: object):
        if self.name == "c.txt":
            raise PermissionError(13, "Permission denied")
        return original_open(self, mode, *args, **kwargs)

    monkeypatch.setattr(Path, "open", fake_open)

    outcomes = classify_paths([utf8, missing, unreadable, plain, tmp_path])

    assert [type(outcome) for outcome in outcomes] == [
        ClassificationResult,
        ClassificationFailure,
        ClassificationFailure,
        ClassificationResult,
        ClassificationFailure,
    ]
    assert outcomes[0].encoding == "UTF8"
    assert outcomes[1].kind is ErrorKind.PATH
    assert outcomes[2].kind is ErrorKind.IO
    assert "Permission denied" in outcomes[2].message
    assert outcomes[3].encoding is None
    assert outcomes[4].kind is ErrorKind.PATH


def test_iter_classify_is_lazy(tmp_path: Path) -> None:
    target = tmp_path / "x.txt"
    target.write_bytes(b"\xfe\xff")

    seen: list[str] = []

    def paths():
        seen.append("first")
        yield target
        seen.append("second")
        yield target

    iterator = Detector().iter_classify(paths())
    first = next(iterator)

    assert first.encoding == "UTF16-BE"
    assert seen == ["first"]


def test_module_classify_file_with_binary(tmp_path: Path) -> None:
    target = tmp_path / "image.png"
    target.write_bytes(b"\x89PNG\r\n\x1a\n" + b"\x00" * 16)

    assert classify_file(target, include_binary=True).encoding == "PNG"
    assert classify_file(target).encoding is None


def test_classify_paths_continues_after_symlink_loop(tmp_path: Path) -> None:
    loop = tmp_path / "loop"
    try:
        loop.symlink_to(loop)
    except (OSError, NotImplementedError):
        pytest.skip("symlinks unavailable on this platform")
    good = tmp_path / "good.txt"
    good.write_bytes(b"\xef\xbb\xbf")

    outcomes = classify_paths([loop, good])

    assert isinstance(outcomes[0], ClassificationFailure)
    assert outcomes[0].kind is ErrorKind.PATH
    assert isinstance(outcomes[1], ClassificationResult)
    assert outcomes[1].encoding == "UTF8"


def test_classify_paths_continues_after_embedded_null_byte(tmp_path: Path) -> None:
    good = tmp_path / "good.txt"
    good.write_bytes(b"\xfe\xff")

    outcomes = classify_paths(["bad\x00name", good])

    assert isinstance(outcomes[0], ClassificationFailure)
    assert outcomes[0].kind is ErrorKind.PATH
    assert "bad" in outcomes[0].path
    assert outcomes[1].encoding == "UTF16-BE"


def test_classify_file_null_byte_raises_path_error() -> None:
    with pytest.raises(PathError):
        Detector().classify_file(Path("bad\x00name"))


def test_file_errors_carry_path_and_reason(tmp_path: Path) -> None:
    error = DetectorIOError(tmp_path / "x", "boom")

    assert error.reason == "boom"
    assert repr(error) == f"DetectorIOError(path={str(tmp_path / 'x')!r}, reason='boom')"
    assert repr(PathError(tmp_path, "gone")).startswith("PathError(path=")
