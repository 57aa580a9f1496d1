"""Application use cases for safe uploader runs."""

from .placement import (
    CustomPlacement,
    DefaultPlacement,
    GenerateThumbnailsUseCase,
    load_move_handler,
    resolve_placement,
)
from .raw_upload import ValidateRawUploadUseCase, get_error_info, parse_raw_upload
from .tags import (
    Destination,
    ResolveDestinationUseCase,
    ResolveThumbTargetsUseCase,
    contained_path,
    replace_tags,
)
from .validation import (
    CheckMimeTypeUseCase,
    CheckSizeUseCase,
    ValidateProfileUseCase,
    convert_human_size_to_bytes,
    is_mime_type_accepted,
)

__all__ = [
    "CustomPlacement",
    "DefaultPlacement",
    "GenerateThumbnailsUseCase",
    "load_move_handler",
    "resolve_placement",
    "ValidateRawUploadUseCase",
    "get_error_info",
    "parse_raw_upload",
    "Destination",
    "ResolveDestinationUseCase",
    "ResolveThumbTargetsUseCase",
    "contained_path",
    "replace_tags",
    "CheckMimeTypeUseCase",
    "CheckSizeUseCase",
    "ValidateProfileUseCase",
    "convert_human_size_to_bytes",
    "is_mime_type_accepted",
]
