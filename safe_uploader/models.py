"""
Models for safe_uploader.

Immutable dataclasses describing profiles, raw uploads and run results.
"""
import copy
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Union

from .errors import InvalidProfileTypeError, SafeUploaderError


DEFAULT_UPLOAD_DIR = "/tmp/SafeUploader"
DEFAULT_MAX_SIZE = "2M"

# Profile keys merged under every profile before a run (profile keys win)
PROFILE_DEFAULTS: Dict[str, Any] = {
    "dir": DEFAULT_UPLOAD_DIR,
    "file": None,
    "thumbs": [],
    "isImage": False,
    "acceptedMimeType": None,
    "maxSize": DEFAULT_MAX_SIZE,
}

DEFAULT_THUMB_FILE = "{_fileBase}-{_maxWidth}x{_maxHeight}{_fileExt}"

MoveHandler = Callable[[Any, Dict[str, Any], Dict[str, Any]], Any]


class ErrorMode(Enum):
    """How a run reports failures."""
    RAISE = "raise"      # first failure is raised
    COLLECT = "collect"  # failures are recorded in the result

    @classmethod
    def coerce(cls, value: Union["ErrorMode", str]) -> "ErrorMode":
        """Accept an ErrorMode or its name (``exception``/``array`` kept as aliases)."""
        if isinstance(value, cls):
            return value
        aliases = {"exception": cls.RAISE, "array": cls.COLLECT}
        key = str(value).lower()
        if key in aliases:
            return aliases[key]
        return cls(key)


class RunStatus(Enum):
    """Outcome of a run."""
    SUCCESS = "success"
    FAILED = "failed"
    PARTIAL = "partial"  # File placed but a thumbnail failed


def _bound(value: Any, key: str, index: int) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidProfileTypeError(
            f"thumbs[{index}].{key} must be a positive integer, {value!r} given"
        )
    return value


def _optional_template(value: Any, key: str) -> Optional[str]:
    if value is None or isinstance(value, str):
        return value
    raise InvalidProfileTypeError(f"{key} must be a string or null, {type(value).__name__} given")


@dataclass(frozen=True)
class ThumbSpec:
    """One derived, size-bounded image variant of the primary file."""
    max_width: Optional[int]
    max_height: Optional[int]
    file: str = DEFAULT_THUMB_FILE
    dir: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Any, index: int = 0) -> "ThumbSpec":
        if not isinstance(data, Mapping):
            raise InvalidProfileTypeError(
                f"thumbs[{index}] must be a mapping, {type(data).__name__} given"
            )
        max_width = _bound(data.get("maxWidth"), "maxWidth", index)
        max_height = _bound(data.get("maxHeight"), "maxHeight", index)
        if max_width is None and max_height is None:
            raise InvalidProfileTypeError(
                f"thumbs[{index}] needs at least one of maxWidth or maxHeight"
            )
        file = _optional_template(data.get("file"), f"thumbs[{index}].file")
        return cls(
            max_width=max_width,
            max_height=max_height,
            file=file or DEFAULT_THUMB_FILE,
            dir=_optional_template(data.get("dir"), f"thumbs[{index}].dir"),
        )


@dataclass(frozen=True)
class ThumbTarget:
    """Fully resolved thumbnail job."""
    dir: str
    src: str
    dst: str
    max_width: Optional[int]
    max_height: Optional[int]


@dataclass(frozen=True)
class Profile:
    """
    Profile with defaults merged in.

    ``data`` keeps the merged mapping as given (camelCase keys, unknown keys
    preserved); the typed attributes are what the pipeline reads.
    """
    data: Dict[str, Any]
    dir: str
    file: Optional[str]
    thumbs: Tuple[ThumbSpec, ...]
    is_image: bool
    accepted_mime_types: Tuple[str, ...]
    max_size: Union[str, int, None]
    move_handler: Union[MoveHandler, str, None] = None

    @property
    def checks_size(self) -> bool:
        return self.max_size is not None

    @property
    def checks_mime_type(self) -> bool:
        return bool(self.accepted_mime_types)

    @property
    def has_move_handler(self) -> bool:
        return "moveHandler" in self.data

    def as_dict(self) -> Dict[str, Any]:
        return dict(self.data)

    @classmethod
    def from_mapping(cls, profile: Mapping[str, Any]) -> "Profile":
        """Merge defaults under ``profile`` and check the recognised keys."""
        if not isinstance(profile, Mapping):
            raise InvalidProfileTypeError(
                f"profile must be a mapping, {type(profile).__name__} given"
            )
        data = {**copy.deepcopy(PROFILE_DEFAULTS), **profile}

        directory = data["dir"]
        if not isinstance(directory, str) or not directory:
            raise InvalidProfileTypeError(f"dir must be a non-empty string, {directory!r} given")

        thumbs = data["thumbs"] or []
        if not isinstance(thumbs, (list, tuple)):
            raise InvalidProfileTypeError(
                f"thumbs must be a list, {type(thumbs).__name__} given"
            )

        is_image = data["isImage"]
        if not isinstance(is_image, bool):
            raise InvalidProfileTypeError(f"isImage must be a boolean, {is_image!r} given")

        accepted = data["acceptedMimeType"]
        if not accepted:
            accepted_types: Tuple[str, ...] = ()
        elif isinstance(accepted, str):
            accepted_types = (accepted,)
        elif isinstance(accepted, (list, tuple)) and all(isinstance(t, str) for t in accepted):
            accepted_types = tuple(accepted)
        else:
            raise InvalidProfileTypeError(
                f"acceptedMimeType must be null, a string or a list of strings, {accepted!r} given"
            )

        max_size = data["maxSize"]
        if max_size is False:
            max_size = None
        elif max_size is True or not isinstance(max_size, (str, int, type(None))):
            raise InvalidProfileTypeError(
                f"maxSize must be a size string, a byte count or false, {max_size!r} given"
            )

        move_handler = data.get("moveHandler")
        if "moveHandler" in data and not (
            callable(move_handler) or (isinstance(move_handler, str) and ":" in move_handler)
        ):
            raise InvalidProfileTypeError(
                "moveHandler must be a callable or a 'module:attribute' string"
            )

        return cls(
            data=data,
            dir=directory,
            file=_optional_template(data["file"], "file"),
            thumbs=tuple(ThumbSpec.from_mapping(t, i) for i, t in enumerate(thumbs)),
            is_image=is_image,
            accepted_mime_types=accepted_types,
            max_size=max_size,
            move_handler=move_handler,
        )


@dataclass(frozen=True)
class RawUpload:
    """Structurally valid multipart-style upload descriptor."""
    name: str
    tmp_name: str
    size: int
    error: int = 0
    type: Optional[str] = None

    @property
    def path(self) -> Path:
        return Path(self.tmp_name)

    def as_dict(self) -> Dict[str, Any]:
        data = {
            "name": self.name,
            "tmp_name": self.tmp_name,
            "size": self.size,
            "error": self.error,
        }
        if self.type is not None:
            data["type"] = self.type
        return data


@dataclass(frozen=True)
class RunResult:
    """Immutable result of one uploader run."""
    status: RunStatus = RunStatus.FAILED
    uploaded_file_path: Optional[str] = None
    uploaded_file_paths: Tuple[str, ...] = ()
    failures: Tuple[SafeUploaderError, ...] = ()
    profile: Optional[Dict[str, Any]] = None
    real_url: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.status != RunStatus.FAILED

    @property
    def errors(self) -> Tuple[str, ...]:
        return tuple(str(f) for f in self.failures)

    def failures_of(self, error_type: type) -> Tuple[SafeUploaderError, ...]:
        return tuple(f for f in self.failures if isinstance(f, error_type))


def collect_errors(*results: RunResult) -> Tuple[str, ...]:
    """Flatten the error messages of several runs, in order."""
    return tuple(message for result in results for message in result.errors)
