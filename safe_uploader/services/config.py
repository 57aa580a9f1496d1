"""
Config Service - Single Responsibility: read profile configuration files.

Files are YAML (JSON documents parse as well) and are read again on every
call; nothing is cached.
"""
from pathlib import Path
from typing import Any, Dict, Optional
import logging

import yaml

from ..errors import ConfigNotFoundError, ConfigParseError
from ..protocols import IConfigLoader

logger = logging.getLogger(__name__)


class ConfigService(IConfigLoader):
    """Loads ``{"profiles": {...}}`` configuration files."""

    def load(self, path: Optional[str]) -> Dict[str, Any]:
        if not path:
            raise ConfigNotFoundError("config file not set")

        file_path = Path(path)
        if not file_path.is_file():
            raise ConfigNotFoundError(f"config file not found: {path}")

        try:
            content = file_path.read_text(encoding="utf-8")
            conf = yaml.safe_load(content)
        except (OSError, UnicodeDecodeError, yaml.YAMLError) as exc:
            raise ConfigParseError(f"could not read config file {path}: {exc}") from exc

        if conf is None:
            conf = {}
        if not isinstance(conf, dict):
            raise ConfigParseError(
                f"config file {path} must contain a mapping, {type(conf).__name__} given"
            )

        logger.debug(f"[config] Loaded {path} ({len(conf.get('profiles') or {})} profiles)")
        return conf


def get_profiles(conf: Dict[str, Any]) -> Dict[str, Any]:
    """The ``profiles`` mapping of a loaded configuration."""
    profiles = conf.get("profiles") or {}
    if not isinstance(profiles, dict):
        raise ConfigParseError(
            f"'profiles' must be a mapping, {type(profiles).__name__} given"
        )
    return profiles
