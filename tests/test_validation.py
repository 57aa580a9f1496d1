"""Tests for profile validation."""
from unittest.mock import Mock

import pytest

from safe_uploader.errors import MimeTypeError, SizeError
from safe_uploader.models import ErrorMode, Profile
from safe_uploader.orchestrator.run import RunRecorder
from safe_uploader.use_cases.validation import (
    ValidateProfileUseCase,
    convert_human_size_to_bytes,
    is_mime_type_accepted,
)


@pytest.mark.parametrize(
    "size, expected",
    [
        ("1K", 1024),
        ("2M", 2 * 1024 ** 2),
        ("1G", 1024 ** 3),
        ("2mb", 2 * 1024 ** 2),
        ("2MiB", 2 * 1024 ** 2),
        ("1.5K", 1536),
        (" 300 ", 300),
        (4096, 4096),
    ],
)
def test_convert_human_size_to_bytes(size, expected):
    assert convert_human_size_to_bytes(size) == expected


@pytest.mark.parametrize("size", ["abc", "-1", "2X", "", True, -5])
def test_convert_human_size_rejects_garbage(size):
    with pytest.raises(ValueError):
        convert_human_size_to_bytes(size)


def test_mime_wildcard_matching():
    accepted = ["image/*"]
    assert is_mime_type_accepted("image/png", accepted) is True
    assert is_mime_type_accepted("image/jpeg", accepted) is True
    assert is_mime_type_accepted("text/plain", accepted) is False


def test_mime_exact_and_malformed_entries():
    assert is_mime_type_accepted("application/pdf", ["text/plain", "application/pdf"]) is True
    assert is_mime_type_accepted("image/png", ["image"]) is False
    assert is_mime_type_accepted("image/png", ["*/png"]) is False


def _use_case(size=100, mime="image/png"):
    filesystem = Mock()
    filesystem.file_size.return_value = size
    mime_detector = Mock()
    mime_detector.detect.return_value = mime
    return ValidateProfileUseCase(filesystem, mime_detector), filesystem, mime_detector


def test_passes_within_limits():
    use_case, _, _ = _use_case(size=1024)
    profile = Profile.from_mapping({"maxSize": "1K", "acceptedMimeType": "image/*"})
    run = RunRecorder(ErrorMode.COLLECT)
    assert use_case.execute(profile, "/tmp/pic.png", run) is True
    assert run.failures == []


def test_collect_mode_runs_every_check():
    use_case, _, mime_detector = _use_case(size=5000, mime="text/plain")
    profile = Profile.from_mapping({"maxSize": "1K", "acceptedMimeType": ["image/*"]})
    run = RunRecorder(ErrorMode.COLLECT)

    assert use_case.execute(profile, "/tmp/notes.txt", run) is False
    assert [type(f) for f in run.failures] == [SizeError, MimeTypeError]
    assert "5000 bytes" in str(run.failures[0])
    assert "image/*" in str(run.failures[1])
    assert "text/plain" in str(run.failures[1])
    mime_detector.detect.assert_called_once_with("/tmp/notes.txt")


def test_raise_mode_stops_at_size():
    use_case, _, mime_detector = _use_case(size=5000, mime="text/plain")
    profile = Profile.from_mapping({"maxSize": "1K", "acceptedMimeType": "image/*"})

    with pytest.raises(SizeError):
        use_case.execute(profile, "/tmp/notes.txt", RunRecorder(ErrorMode.RAISE))
    mime_detector.detect.assert_not_called()


def test_unreadable_size_fails():
    use_case, _, _ = _use_case(size=None)
    run = RunRecorder(ErrorMode.COLLECT)
    assert use_case.execute(Profile.from_mapping({}), "/tmp/x", run) is False
    assert "Cannot get the file size" in str(run.failures[0])


def test_uninterpretable_max_size_fails():
    use_case, _, _ = _use_case(size=1)
    run = RunRecorder(ErrorMode.COLLECT)
    assert use_case.execute(Profile.from_mapping({"maxSize": "lots"}), "/tmp/x", run) is False
    assert isinstance(run.failures[0], SizeError)


def test_disabled_checks_are_skipped():
    use_case, filesystem, mime_detector = _use_case()
    profile = Profile.from_mapping({"maxSize": False, "acceptedMimeType": None})
    assert use_case.execute(profile, "/tmp/x", RunRecorder(ErrorMode.RAISE)) is True
    filesystem.file_size.assert_not_called()
    mime_detector.detect.assert_not_called()
