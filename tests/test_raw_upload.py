"""Tests for raw upload descriptor checks."""
from unittest.mock import Mock

import pytest

from safe_uploader.errors import StructuralUploadError
from safe_uploader.models import RawUpload
from safe_uploader.use_cases.raw_upload import (
    ValidateRawUploadUseCase,
    client_file_name,
    get_error_info,
    parse_raw_upload,
)


def _descriptor(**overrides):
    descriptor = {
        "name": "pic.png",
        "tmp_name": "/tmp/php123",
        "size": 2048,
        "error": 0,
        "type": "image/png",
    }
    descriptor.update(overrides)
    return descriptor


def _use_case(uploaded=True):
    filesystem = Mock()
    filesystem.is_uploaded_file.return_value = uploaded
    return ValidateRawUploadUseCase(filesystem), filesystem


def test_accepts_valid_descriptor():
    use_case, filesystem = _use_case()
    raw = use_case.execute({"file": _descriptor()})
    assert raw == RawUpload(name="pic.png", tmp_name="/tmp/php123", size=2048, error=0, type="image/png")
    filesystem.is_uploaded_file.assert_called_once_with("/tmp/php123")


def test_custom_field_name_and_source_path_alias():
    use_case, _ = _use_case()
    descriptor = _descriptor()
    del descriptor["tmp_name"]
    descriptor["source_path"] = "/tmp/php456"
    raw = use_case.execute({"avatar": descriptor}, "avatar")
    assert raw.tmp_name == "/tmp/php456"


def test_missing_field():
    use_case, _ = _use_case()
    with pytest.raises(StructuralUploadError, match='Name "file" not found'):
        use_case.execute({"other": _descriptor()})


def test_files_must_be_mapping():
    use_case, _ = _use_case()
    with pytest.raises(StructuralUploadError, match="must be a mapping"):
        use_case.execute(None)


@pytest.mark.parametrize(
    "descriptor",
    [
        "pic.png",
        {"name": "pic.png"},
        _descriptor(size="2048"),
        _descriptor(error=None),
        _descriptor(size=True),
        _descriptor(name=3),
        _descriptor(type=5),
    ],
)
def test_malformed_descriptor(descriptor):
    use_case, _ = _use_case()
    with pytest.raises(StructuralUploadError, match="Something is wrong"):
        use_case.execute({"file": descriptor})


def test_transport_error_is_named():
    use_case, _ = _use_case()
    with pytest.raises(StructuralUploadError, match="UPLOAD_ERR_INI_SIZE"):
        use_case.execute({"file": _descriptor(error=1)})


def test_zero_size():
    use_case, _ = _use_case()
    with pytest.raises(StructuralUploadError, match="is 0"):
        use_case.execute({"file": _descriptor(size=0)})


def test_not_delivered_by_upload_mechanism():
    use_case, _ = _use_case(uploaded=False)
    with pytest.raises(StructuralUploadError, match="not delivered"):
        use_case.execute({"file": _descriptor()})


def test_get_error_info_unknown_code():
    assert get_error_info(4).startswith("UPLOAD_ERR_NO_FILE (4)")
    assert get_error_info(99).startswith("UPLOAD_ERR_UNKNOWN (99)")


def test_parse_raw_upload_without_type():
    raw = parse_raw_upload({"name": "a.txt", "tmp_name": "/tmp/a", "size": 1, "error": 0})
    assert raw is not None
    assert raw.type is None


@pytest.mark.parametrize(
    "name, expected",
    [
        ("pic.png", "pic.png"),
        ("../../etc/passwd", "passwd"),
        ("C:\\Users\\me\\My Pic.png", "My Pic.png"),
    ],
)
def test_client_file_name(name, expected):
    raw = RawUpload(name=name, tmp_name="/tmp/x", size=1)
    assert client_file_name(raw) == expected
