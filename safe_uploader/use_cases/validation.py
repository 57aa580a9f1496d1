"""Use cases for checking a candidate file against a profile."""
from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Iterable, Union

from safe_uploader.errors import MimeTypeError, SizeError
from safe_uploader.models import Profile
from safe_uploader.protocols import IFileSystem, IMimeDetector

if TYPE_CHECKING:
    from safe_uploader.orchestrator.run import RunRecorder

logger = logging.getLogger(__name__)

SIZE_MULTIPLIERS = {
    "": 1,
    "K": 1024,
    "M": 1024 ** 2,
    "G": 1024 ** 3,
    "T": 1024 ** 4,
    "P": 1024 ** 5,
}

_HUMAN_SIZE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([KMGTP]?)(?:I?B)?\s*$", re.IGNORECASE)

MIME_WILDCARD = "*"


def convert_human_size_to_bytes(size: Union[str, int]) -> int:
    """
    Convert ``"2M"``-style sizes to bytes using binary multipliers.

    Integers are taken as byte counts. Raises ValueError on anything else.
    """
    if isinstance(size, bool):
        raise ValueError(f"invalid size: {size!r}")
    if isinstance(size, int):
        if size < 0:
            raise ValueError(f"invalid size: {size!r}")
        return size

    match = _HUMAN_SIZE.match(str(size))
    if not match:
        raise ValueError(f"invalid size: {size!r}")
    number, unit = match.groups()
    return int(float(number) * SIZE_MULTIPLIERS[unit.upper()])


def is_mime_type_accepted(mime_type: str, accepted: Iterable[str]) -> bool:
    """Exact match, or wildcard subtype (``image/*``) on the same main type."""
    accepted = list(accepted)
    if mime_type in accepted:
        return True

    main_type = mime_type.split("/", 1)[0]
    for entry in accepted:
        parts = entry.split("/", 1)
        if len(parts) == 2 and parts[1] == MIME_WILDCARD and parts[0] == main_type:
            return True
    return False


class CheckSizeUseCase:
    """Fail with SizeError when the file exceeds the profile maxSize."""

    def __init__(self, filesystem: IFileSystem):
        self._filesystem = filesystem

    def execute(self, profile: Profile, path: str) -> None:
        size = self._filesystem.file_size(path)
        if size is None:
            raise SizeError(f"Cannot get the file size for file {path}")

        try:
            max_bytes = convert_human_size_to_bytes(profile.max_size)
        except ValueError as exc:
            raise SizeError(
                f"Cannot interpret maxSize {profile.max_size!r} for file {path}"
            ) from exc

        if size > max_bytes:
            raise SizeError(
                f"The file size of {path} is {size} bytes, but only {max_bytes} bytes are allowed"
            )


class CheckMimeTypeUseCase:
    """Fail with MimeTypeError when the detected mime type is not accepted."""

    def __init__(self, mime_detector: IMimeDetector):
        self._mime_detector = mime_detector

    def execute(self, profile: Profile, path: str) -> None:
        file_mime = self._mime_detector.detect(path)
        if not is_mime_type_accepted(file_mime, profile.accepted_mime_types):
            raise MimeTypeError(
                f"The allowed mime types are {', '.join(profile.accepted_mime_types)}; "
                f"{file_mime} was given for file {path}"
            )


class ValidateProfileUseCase:
    """
    Run the profile checks in order: size, then mime type.

    Every failure goes through ``run.fail``, which raises in raise mode. In
    collect mode both checks always run. Returns whether the file passed.
    """

    def __init__(self, filesystem: IFileSystem, mime_detector: IMimeDetector):
        self._check_size = CheckSizeUseCase(filesystem)
        self._check_mime = CheckMimeTypeUseCase(mime_detector)

    def execute(self, profile: Profile, path: str, run: RunRecorder) -> bool:
        passed = True

        if profile.checks_size:
            try:
                self._check_size.execute(profile, path)
            except SizeError as exc:
                run.fail(exc)
                passed = False

        if profile.checks_mime_type:
            try:
                self._check_mime.execute(profile, path)
            except MimeTypeError as exc:
                run.fail(exc)
                passed = False

        logger.debug("Validation of %s: %s", path, "passed" if passed else "failed")
        return passed
