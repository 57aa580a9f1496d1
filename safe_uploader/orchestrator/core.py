"""Core orchestrator - resolves profiles, validates and places uploads."""
import copy
import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Mapping, Optional, Union

from ..errors import (
    ConfigNotFoundError,
    ConfigParseError,
    InvalidProfileTypeError,
    ProfileNotFoundError,
    SourceNotFoundError,
    StructuralUploadError,
)
from ..models import ErrorMode, Profile, RunResult
from ..protocols import IConfigLoader, IFileSystem, IMimeDetector, IThumbnailer
from ..services.config import ConfigService, get_profiles
from ..services.filesystem import LocalFileSystem
from ..services.mime import MimeTypeService
from ..services.thumbnail import ThumbnailService
from ..use_cases.placement import resolve_placement
from ..use_cases.raw_upload import DEFAULT_FIELD_NAME, ValidateRawUploadUseCase, client_file_name
from ..use_cases.tags import PAYLOAD_FILE_KEY
from ..use_cases.validation import ValidateProfileUseCase

from .run import RunRecorder

logger = logging.getLogger(__name__)

ErrorModeLike = Union[ErrorMode, str]


class SafeUploader:
    """
    Validates an uploaded file against a named profile and places it.

    Follows:
    - Dependency Injection (collaborators injected, raw upload sets passed explicitly)
    - Single Responsibility (checks and placement delegated to use cases)
    - Open/Closed (custom placement through the profile moveHandler)

    Every operation returns an immutable RunResult; the accessors
    (``get_uploaded_file_path`` and friends) read the last run, or the run in
    progress when called from a move handler. One instance handles one upload
    at a time.

    Usage:
        uploader = SafeUploader("config/uploads.yml", error_mode=ErrorMode.COLLECT)
        result = uploader.upload_php_file("avatar", files, payload={"user": "42"})
        if result.success:
            print(result.uploaded_file_paths)
        else:
            print(result.errors)
    """

    def __init__(
        self,
        config_file: Optional[str] = None,
        error_mode: ErrorModeLike = ErrorMode.RAISE,
        filesystem: Optional[IFileSystem] = None,
        mime_detector: Optional[IMimeDetector] = None,
        thumbnailer: Optional[IThumbnailer] = None,
        config_loader: Optional[IConfigLoader] = None,
    ):
        """
        Initialize uploader with dependencies.

        Args:
            config_file: Path of the profiles configuration file
            error_mode: Default error mode (raise or collect)
            filesystem: Filesystem collaborator
            mime_detector: Mime type detection collaborator
            thumbnailer: Thumbnail generation collaborator
            config_loader: Configuration file loader
        """
        self._config_file = str(config_file) if config_file is not None else None
        self._error_mode = ErrorMode.coerce(error_mode)
        self._filesystem = filesystem or LocalFileSystem()
        self._mime_detector = mime_detector or MimeTypeService()
        self._thumbnailer = thumbnailer or ThumbnailService()
        self._config_loader = config_loader or ConfigService()

        self._validate_profile = ValidateProfileUseCase(self._filesystem, self._mime_detector)
        self._validate_raw_upload = ValidateRawUploadUseCase(self._filesystem)

        self._active: Optional[RunRecorder] = None
        self._last_result = RunResult()

    @classmethod
    def create(cls, **kwargs) -> "SafeUploader":
        return cls(**kwargs)

    @property
    def config_file(self) -> Optional[str]:
        return self._config_file

    @property
    def error_mode(self) -> ErrorMode:
        return self._error_mode

    def with_error_mode(self, error_mode: ErrorModeLike) -> "SafeUploader":
        """Independent uploader using ``error_mode`` by default."""
        clone = self._clone()
        clone._error_mode = ErrorMode.coerce(error_mode)
        return clone

    def with_configuration_file(self, config_file: str) -> "SafeUploader":
        """Independent uploader reading profiles from ``config_file``."""
        clone = self._clone()
        clone._config_file = str(config_file)
        return clone

    def _clone(self) -> "SafeUploader":
        clone = copy.copy(self)
        clone._active = None
        clone._last_result = RunResult()
        return clone

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------
    def upload_php_file(
        self,
        profile_id: str,
        files: Mapping[str, Any],
        field_name: str = DEFAULT_FIELD_NAME,
        payload: Optional[Mapping[str, Any]] = None,
        error_mode: Optional[ErrorModeLike] = None,
    ) -> RunResult:
        """
        Upload the ``field_name`` entry of a raw upload set.

        Args:
            profile_id: Profile identifier in the configuration
            files: Raw upload set (field name -> {name, tmp_name, size, error})
            field_name: Field to take from ``files``
            payload: Tag values for the path templates
            error_mode: Overrides the uploader default for this call
        """
        with self._run(error_mode) as run:
            self._upload_php_file(run, profile_id, files, field_name, payload)
        return self._last_result

    def upload_file(
        self,
        profile_id: str,
        source_path: str,
        payload: Optional[Mapping[str, Any]] = None,
        raw_upload: Optional[Mapping[str, Any]] = None,
        error_mode: Optional[ErrorModeLike] = None,
    ) -> RunResult:
        """Upload a file already on disk using the ``profile_id`` profile."""
        with self._run(error_mode) as run:
            self._upload_file(run, profile_id, str(source_path), payload, raw_upload)
        return self._last_result

    def execute_profile(
        self,
        profile: Union[Mapping[str, Any], Profile],
        source_path: str,
        payload: Optional[Mapping[str, Any]] = None,
        raw_upload: Optional[Mapping[str, Any]] = None,
        error_mode: Optional[ErrorModeLike] = None,
    ) -> RunResult:
        """Run ``profile`` against ``source_path`` without reading the configuration."""
        with self._run(error_mode) as run:
            self._execute_profile(run, profile, str(source_path), payload, raw_upload)
        return self._last_result

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def last_result(self) -> RunResult:
        if self._active is not None:
            return self._active.to_result()
        return self._last_result

    def get_uploaded_file_path(self) -> Optional[str]:
        return self.last_result.uploaded_file_path

    def get_uploaded_file_paths(self) -> List[str]:
        return list(self.last_result.uploaded_file_paths)

    def get_errors(self) -> List[str]:
        return list(self.last_result.errors)

    def get_profile(self) -> Optional[Dict[str, Any]]:
        return self.last_result.profile

    def get_real_url(self) -> Optional[str]:
        return self.last_result.real_url

    def set_real_url(self, real_url: Optional[str]) -> "SafeUploader":
        """Record the final location chosen by a move handler."""
        self._require_active("set_real_url").real_url = real_url
        return self

    def set_uploaded_file_path(self, path: str) -> "SafeUploader":
        """Record the primary path produced by a move handler."""
        self._require_active("set_uploaded_file_path").set_uploaded_file_path(str(path))
        return self

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------
    @contextmanager
    def _run(self, error_mode: Optional[ErrorModeLike]) -> Iterator[RunRecorder]:
        if self._active is not None:
            raise RuntimeError("SafeUploader is already executing a run; use one instance per upload")

        mode = ErrorMode.coerce(error_mode) if error_mode is not None else self._error_mode
        run = RunRecorder(mode)
        self._active = run
        try:
            yield run
        finally:
            self._active = None
            self._last_result = run.to_result()
            logger.debug(
                "Run finished: status=%s paths=%s errors=%d",
                self._last_result.status.value,
                self._last_result.uploaded_file_paths,
                len(self._last_result.failures),
            )

    def _require_active(self, operation: str) -> RunRecorder:
        if self._active is None:
            raise RuntimeError(f"{operation} can only be called while a run is executing")
        return self._active

    def _upload_php_file(
        self,
        run: RunRecorder,
        profile_id: str,
        files: Mapping[str, Any],
        field_name: str,
        payload: Optional[Mapping[str, Any]],
    ) -> None:
        try:
            raw_upload = self._validate_raw_upload.execute(files, field_name)
        except StructuralUploadError as exc:
            run.fail(exc)
            return

        run_payload = dict(payload or {})
        run_payload[PAYLOAD_FILE_KEY] = client_file_name(raw_upload)
        self._upload_file(run, profile_id, raw_upload.tmp_name, run_payload, raw_upload.as_dict())

    def _upload_file(
        self,
        run: RunRecorder,
        profile_id: str,
        source_path: str,
        payload: Optional[Mapping[str, Any]],
        raw_upload: Optional[Mapping[str, Any]],
    ) -> None:
        try:
            profiles = get_profiles(self._config_loader.load(self._config_file))
        except (ConfigNotFoundError, ConfigParseError) as exc:
            run.fail(exc)
            return

        if profile_id not in profiles:
            run.fail(ProfileNotFoundError(
                f"profileId {profile_id} not found in the current configuration"
            ))
            return

        profile = profiles[profile_id]
        if not isinstance(profile, Mapping):
            run.fail(InvalidProfileTypeError(
                f"profile must be a mapping (for profileId={profile_id}), "
                f"{type(profile).__name__} given"
            ))
            return

        logger.info("Resolved profile %s from %s", profile_id, self._config_file)
        self._execute_profile(run, profile, source_path, payload, raw_upload)

    def _execute_profile(
        self,
        run: RunRecorder,
        profile_data: Union[Mapping[str, Any], Profile],
        source_path: str,
        payload: Optional[Mapping[str, Any]],
        raw_upload: Optional[Mapping[str, Any]],
    ) -> None:
        run_payload = dict(payload or {})
        run_raw_upload = dict(raw_upload or {})

        if not self._filesystem.file_exists(source_path):
            run.fail(SourceNotFoundError(f"File not found: {source_path}"))
            return

        try:
            if isinstance(profile_data, Profile):
                profile = profile_data
            else:
                profile = Profile.from_mapping(profile_data)
            placement = resolve_placement(profile, self._filesystem, self._thumbnailer)
        except InvalidProfileTypeError as exc:
            run.fail(exc)
            return

        run.profile = profile.as_dict()

        if not self._validate_profile.execute(profile, source_path, run):
            logger.info("Upload of %s rejected by profile checks", source_path)
            return

        placement.place(self, run, source_path, run_raw_upload, run_payload)
