"""
Safe Uploader - profile driven validation and placement of uploaded files.

Follows SOLID principles:
- Single Responsibility: Each service/use case handles one concern
- Open/Closed: Custom placement through a profile moveHandler
- Liskov Substitution: Services implement protocols
- Interface Segregation: Small focused interfaces
- Dependency Injection: Collaborators injected into the uploader

Usage:
    from safe_uploader import SafeUploader, ErrorMode

    uploader = SafeUploader("uploads.yml")

    # File delivered by a multipart parser
    result = uploader.upload_php_file("avatar", files, payload={"user": "42"})

    # File already on disk
    result = uploader.upload_file("avatar", "/tmp/incoming/pic.png")

    # Inline profile, failures collected instead of raised
    result = uploader.execute_profile(
        {"dir": "/var/uploads/{user}", "acceptedMimeType": "image/*", "maxSize": "5M"},
        "/tmp/incoming/pic.png",
        payload={"user": "42"},
        error_mode=ErrorMode.COLLECT,
    )
    print(result.uploaded_file_paths, result.errors)
"""
from .errors import (
    ConfigNotFoundError,
    ConfigParseError,
    InvalidProfileTypeError,
    MimeTypeError,
    MoveFailedError,
    ProfileNotFoundError,
    SafeUploaderError,
    SizeError,
    SourceNotFoundError,
    StructuralUploadError,
    ThumbnailFailedError,
)
from .models import (
    ErrorMode,
    Profile,
    RawUpload,
    RunResult,
    RunStatus,
    ThumbSpec,
    ThumbTarget,
    collect_errors,
)
from .orchestrator import SafeUploader
from .services import (
    ConfigService,
    LocalFileSystem,
    MimeTypeService,
    ThumbnailService,
)

__version__ = "0.3.0"
__all__ = [
    # Main
    "SafeUploader",
    # Models
    "ErrorMode",
    "Profile",
    "RawUpload",
    "RunResult",
    "RunStatus",
    "ThumbSpec",
    "ThumbTarget",
    "collect_errors",
    # Errors
    "SafeUploaderError",
    "ConfigNotFoundError",
    "ConfigParseError",
    "ProfileNotFoundError",
    "InvalidProfileTypeError",
    "SourceNotFoundError",
    "SizeError",
    "MimeTypeError",
    "MoveFailedError",
    "ThumbnailFailedError",
    "StructuralUploadError",
    # Services
    "ConfigService",
    "LocalFileSystem",
    "MimeTypeService",
    "ThumbnailService",
]
