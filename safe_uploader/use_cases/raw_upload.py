"""Use cases for raw multipart-style upload descriptors."""
from __future__ import annotations

import logging
from pathlib import PurePath
from typing import Any, Mapping, Optional

from safe_uploader.errors import StructuralUploadError
from safe_uploader.models import RawUpload
from safe_uploader.protocols import IFileSystem

logger = logging.getLogger(__name__)

DEFAULT_FIELD_NAME = "file"

# Transport error codes reported by multipart parsers (PHP numbering)
UPLOAD_ERRORS = {
    0: ("UPLOAD_ERR_OK", "There is no error, the file uploaded with success"),
    1: ("UPLOAD_ERR_INI_SIZE", "The uploaded file exceeds the server upload size limit"),
    2: ("UPLOAD_ERR_FORM_SIZE", "The uploaded file exceeds the size limit specified in the form"),
    3: ("UPLOAD_ERR_PARTIAL", "The uploaded file was only partially uploaded"),
    4: ("UPLOAD_ERR_NO_FILE", "No file was uploaded"),
    6: ("UPLOAD_ERR_NO_TMP_DIR", "Missing a temporary folder"),
    7: ("UPLOAD_ERR_CANT_WRITE", "Failed to write file to disk"),
    8: ("UPLOAD_ERR_EXTENSION", "An extension stopped the file upload"),
}

_PATH_KEYS = ("tmp_name", "source_path")


def get_error_info(code: int) -> str:
    name, message = UPLOAD_ERRORS.get(code, ("UPLOAD_ERR_UNKNOWN", "Unknown upload error"))
    return f"{name} ({code}): {message}"


def parse_raw_upload(descriptor: Any) -> Optional[RawUpload]:
    """RawUpload from a descriptor mapping, None when its shape is wrong."""
    if not isinstance(descriptor, Mapping):
        return None

    tmp_name = next((descriptor[k] for k in _PATH_KEYS if k in descriptor), None)
    name = descriptor.get("name")
    size = descriptor.get("size")
    error = descriptor.get("error")
    mime = descriptor.get("type")

    if not isinstance(name, str) or not isinstance(tmp_name, str):
        return None
    for number in (size, error):
        if isinstance(number, bool) or not isinstance(number, int):
            return None
    if mime is not None and not isinstance(mime, str):
        return None

    return RawUpload(name=name, tmp_name=tmp_name, size=size, error=error, type=mime)


def client_file_name(raw_upload: RawUpload) -> str:
    """Base name of the client supplied filename, path parts dropped."""
    return PurePath(raw_upload.name.replace("\\", "/")).name


class ValidateRawUploadUseCase:
    """Locate a field in a raw upload set and check it structurally."""

    def __init__(self, filesystem: IFileSystem):
        self._filesystem = filesystem

    def execute(
        self,
        files: Mapping[str, Any],
        field_name: str = DEFAULT_FIELD_NAME,
    ) -> RawUpload:
        if not isinstance(files, Mapping):
            raise StructuralUploadError(
                f"Uploaded files must be a mapping, {type(files).__name__} given"
            )
        if field_name not in files:
            raise StructuralUploadError(f'Name "{field_name}" not found in uploaded files')

        descriptor = files[field_name]
        raw_upload = parse_raw_upload(descriptor)
        if raw_upload is None:
            raise StructuralUploadError(
                f"Something is wrong with this upload structure for file {field_name}: {descriptor!r}"
            )

        if raw_upload.error != 0:
            raise StructuralUploadError(
                f"The following upload error appeared for file {field_name} : "
                f"{get_error_info(raw_upload.error)}"
            )

        if raw_upload.size == 0:
            raise StructuralUploadError(f"The uploaded file size for file {field_name} is 0")

        if not self._filesystem.is_uploaded_file(raw_upload.tmp_name):
            raise StructuralUploadError(
                f"The uploaded file {field_name} was not delivered by the upload mechanism"
            )

        logger.debug(
            "Raw upload %s accepted: name=%s tmp_name=%s size=%s",
            field_name,
            raw_upload.name,
            raw_upload.tmp_name,
            raw_upload.size,
        )
        return raw_upload
