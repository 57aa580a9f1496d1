"""
Use cases for tag substitution and destination path resolution.

Templates reference payload values with ``{name}`` tokens. A token whose name
is missing from the payload (or maps to None) is replaced with an empty
string; resolved paths are normalised so empty segments collapse.
"""
from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import PurePath
from typing import Any, List, Mapping, Optional

from safe_uploader.models import Profile, ThumbSpec, ThumbTarget

TAG_PATTERN = re.compile(r"\{([A-Za-z0-9_.\-]+)\}")

PAYLOAD_FILE_KEY = "_file"


def replace_tags(template: str, payload: Optional[Mapping[str, Any]] = None) -> str:
    """Substitute every ``{name}`` token of ``template`` from ``payload``."""
    values = payload or {}

    def _render(match: re.Match) -> str:
        value = values.get(match.group(1))
        return "" if value is None else str(value)

    return TAG_PATTERN.sub(_render, template)


def find_tags(template: str) -> List[str]:
    return TAG_PATTERN.findall(template)


def normalize_path(path: str) -> str:
    return os.path.normpath(path) if path else path


def contained_path(base: str, relative: str) -> str:
    """
    Append ``relative`` to ``base`` and normalise the result.

    Leading separators of ``relative`` are dropped, so an absolute value is
    still placed under ``base``. Raises ValueError when ``..`` segments climb
    out of ``base``.
    """
    base = os.path.normpath(base)
    path = os.path.normpath(f"{base}/{relative.lstrip('/' + os.sep)}")
    if os.path.commonpath([base, path]) != os.path.commonpath([base]):
        raise ValueError(f"{relative!r} points outside of {base}")
    return path


@dataclass(frozen=True)
class Destination:
    """Resolved destination of the primary file."""
    dir: str
    file: str
    path: str


class ResolveDestinationUseCase:
    """Resolve the primary destination from the profile templates."""

    @staticmethod
    def select_file_template(
        profile: Profile,
        source_path: str,
        payload: Mapping[str, Any],
    ) -> str:
        """Explicit profile file > payload ``_file`` > source base name."""
        if profile.file is not None:
            return profile.file
        if PAYLOAD_FILE_KEY in payload:
            return str(payload[PAYLOAD_FILE_KEY])
        return PurePath(source_path).name

    def execute(
        self,
        profile: Profile,
        source_path: str,
        payload: Optional[Mapping[str, Any]] = None,
    ) -> Destination:
        values = payload or {}
        directory = normalize_path(replace_tags(profile.dir, values).strip())
        if not directory:
            raise ValueError(f"dir template {profile.dir!r} resolves to an empty directory")

        template = self.select_file_template(profile, source_path, values)
        file = replace_tags(template, values).strip()
        if not file or file.endswith(("/", os.sep)):
            raise ValueError(f"file template {template!r} resolves to an empty file name")

        path = contained_path(directory, file)
        if path == os.path.normpath(directory):
            raise ValueError(f"file template {template!r} resolves to an empty file name")
        return Destination(dir=directory, file=os.path.relpath(path, directory), path=path)


class ResolveThumbTargetsUseCase:
    """
    Resolve one thumbnail job per thumb spec of a profile.

    A relative thumb ``dir`` and every thumb file name stay under the
    directory they are appended to. An absolute ``dir`` template is taken
    from the profile as is.
    """

    @staticmethod
    def builtin_tags(
        primary_path: str,
        primary_dir: str,
        spec: ThumbSpec,
        index: int,
    ) -> dict:
        primary = PurePath(primary_path)
        return {
            "_fileName": primary.name,
            "_fileBase": primary.stem,
            "_fileExt": primary.suffix,
            "_dir": primary_dir,
            "_maxWidth": spec.max_width,
            "_maxHeight": spec.max_height,
            "_index": index,
        }

    def resolve_target(
        self,
        spec: ThumbSpec,
        index: int,
        primary_path: str,
        primary_dir: str,
        payload: Optional[Mapping[str, Any]] = None,
    ) -> ThumbTarget:
        """Resolve a single thumb spec; ValueError when its paths are unusable."""
        tags = {**(payload or {}), **self.builtin_tags(primary_path, primary_dir, spec, index)}

        if spec.dir is None:
            thumb_dir = normalize_path(primary_dir)
        elif os.path.isabs(spec.dir):
            thumb_dir = normalize_path(replace_tags(spec.dir, tags))
        else:
            thumb_dir = contained_path(primary_dir, replace_tags(spec.dir, tags))

        file = replace_tags(spec.file, tags).strip()
        dst = contained_path(thumb_dir, file)
        if not file or dst == thumb_dir:
            raise ValueError(f"thumb file template {spec.file!r} resolves to an empty file name")

        return ThumbTarget(
            dir=thumb_dir,
            src=primary_path,
            dst=dst,
            max_width=spec.max_width,
            max_height=spec.max_height,
        )

    def execute(
        self,
        profile: Profile,
        primary_path: str,
        primary_dir: str,
        payload: Optional[Mapping[str, Any]] = None,
    ) -> List[ThumbTarget]:
        return [
            self.resolve_target(spec, index, primary_path, primary_dir, payload)
            for index, spec in enumerate(profile.thumbs)
        ]
