"""Use cases for placing a validated file and deriving its thumbnails."""
from __future__ import annotations

import importlib
import logging
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Mapping, Optional

from safe_uploader.errors import (
    InvalidProfileTypeError,
    MoveFailedError,
    SafeUploaderError,
    ThumbnailFailedError,
)
from safe_uploader.models import Profile
from safe_uploader.protocols import IFileSystem, IPlacementStrategy, IThumbnailer
from safe_uploader.use_cases.tags import ResolveDestinationUseCase, ResolveThumbTargetsUseCase

if TYPE_CHECKING:
    from safe_uploader.orchestrator.run import RunRecorder

logger = logging.getLogger(__name__)


def load_move_handler(reference: str) -> Callable[..., Any]:
    """Import a ``"package.module:attribute"`` move handler."""
    module_name, _, attribute = reference.partition(":")
    try:
        module = importlib.import_module(module_name)
        handler = getattr(module, attribute)
    except (ImportError, AttributeError, ValueError) as exc:
        raise InvalidProfileTypeError(f"moveHandler {reference!r} cannot be imported: {exc}") from exc
    if not callable(handler):
        raise InvalidProfileTypeError(f"moveHandler {reference!r} is not callable")
    return handler


class GenerateThumbnailsUseCase:
    """
    Generate every thumbnail of an image profile.

    Thumbnails are independent: a failure is recorded and the next one is
    still attempted. Failures go through ``run.fail`` only once all of them
    were processed, so raise mode raises the first one at the end.
    """

    def __init__(
        self,
        filesystem: IFileSystem,
        thumbnailer: IThumbnailer,
        resolve_targets: Optional[ResolveThumbTargetsUseCase] = None,
    ):
        self._filesystem = filesystem
        self._thumbnailer = thumbnailer
        self._resolve_targets = resolve_targets or ResolveThumbTargetsUseCase()

    def execute(
        self,
        profile: Profile,
        run: RunRecorder,
        primary_path: str,
        primary_dir: str,
        payload: Mapping[str, Any],
    ) -> List[str]:
        produced: List[str] = []
        failed: List[SafeUploaderError] = []

        for index, spec in enumerate(profile.thumbs):
            try:
                target = self._resolve_targets.resolve_target(
                    spec, index, primary_path, primary_dir, payload
                )
            except ValueError as e:
                error = ThumbnailFailedError(
                    f"The thumb {index} of {primary_path} couldn't be created: {e}"
                )
                logger.warning(f"[thumbs] {error}")
                failed.append(error)
                continue

            if target.dst in run.uploaded_file_paths:
                error = ThumbnailFailedError(
                    f"The thumb {target.src} couldn't be created to {target.dst}: "
                    "path already produced by this upload"
                )
                logger.warning(f"[thumbs] {error}")
                failed.append(error)
                continue

            try:
                self._filesystem.ensure_dir(target.dir, True)
                created = self._thumbnailer.fit_within_bounds(
                    target.src, target.dst, target.max_width, target.max_height
                )
            except Exception as e:
                logger.error(f"[thumbs] Error creating {target.dst}: {e}", exc_info=True)
                created = False

            if not created:
                error = ThumbnailFailedError(
                    f"The thumb {target.src} couldn't be created to {target.dst}"
                )
                logger.warning(f"[thumbs] {error}")
                failed.append(error)
                continue

            run.add_uploaded_file_path(target.dst)
            produced.append(target.dst)
            logger.info(f"[thumbs] Created {target.dst}")

        for error in failed:
            run.fail(error)
        return produced


class DefaultPlacement(IPlacementStrategy):
    """Built-in placement: move to the resolved destination, then thumbnails."""

    def __init__(
        self,
        profile: Profile,
        filesystem: IFileSystem,
        thumbnailer: IThumbnailer,
        resolve_destination: Optional[ResolveDestinationUseCase] = None,
        generate_thumbnails: Optional[GenerateThumbnailsUseCase] = None,
    ):
        self._profile = profile
        self._filesystem = filesystem
        self._resolve_destination = resolve_destination or ResolveDestinationUseCase()
        self._generate_thumbnails = generate_thumbnails or GenerateThumbnailsUseCase(
            filesystem, thumbnailer
        )

    def place(
        self,
        uploader: Any,
        run: RunRecorder,
        source_path: str,
        raw_upload: Mapping[str, Any],
        payload: Dict[str, Any],
    ) -> None:
        profile = self._profile

        try:
            destination = self._resolve_destination.execute(profile, source_path, payload)
        except ValueError as exc:
            run.fail(MoveFailedError(f"Could not resolve a destination for {source_path}: {exc}"))
            return

        dest_file = destination.path
        try:
            self._filesystem.ensure_parent_dirs(dest_file)
        except OSError as exc:
            run.fail(MoveFailedError(f"Could not create the directory of {dest_file}: {exc}"))
            return

        if not self._filesystem.move_file(source_path, dest_file):
            run.fail(MoveFailedError(f"Could not move file {source_path} to {dest_file}"))
            return

        run.set_uploaded_file_path(dest_file)
        logger.info("Placed %s at %s", source_path, dest_file)

        if profile.is_image:
            self._generate_thumbnails.execute(profile, run, dest_file, destination.dir, payload)


class CustomPlacement(IPlacementStrategy):
    """
    Caller provided placement.

    The handler receives ``(uploader, raw_upload, payload)`` and owns the rest
    of the run; it reports its outcome with ``uploader.set_real_url`` and/or
    ``uploader.set_uploaded_file_path``.
    """

    def __init__(self, handler: Callable[..., Any]):
        self._handler = handler

    @property
    def handler(self) -> Callable[..., Any]:
        return self._handler

    def place(
        self,
        uploader: Any,
        run: RunRecorder,
        source_path: str,
        raw_upload: Mapping[str, Any],
        payload: Dict[str, Any],
    ) -> None:
        logger.info("Delegating placement of %s to custom move handler", source_path)
        try:
            self._handler(uploader, raw_upload, payload)
        except SafeUploaderError as exc:
            run.fail(exc)
            return
        run.mark_placed()


def resolve_placement(
    profile: Profile,
    filesystem: IFileSystem,
    thumbnailer: IThumbnailer,
) -> IPlacementStrategy:
    """Placement strategy for a profile: custom when it has a moveHandler."""
    if not profile.has_move_handler:
        return DefaultPlacement(profile, filesystem, thumbnailer)

    handler = profile.move_handler
    if isinstance(handler, str):
        handler = load_move_handler(handler)
    return CustomPlacement(handler)
