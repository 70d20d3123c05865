"""Configuration loading and merging.

Global config and episode metadata are YAML key-value documents. They are
merged into one flat mapping where episode values win over global ones.
Nested mappings (``itunes``, ``guid``, ``enclosure``, ``podcast``) are never
merged; the field deriver reads them from the raw episode document.
"""

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from podsite.config.schema import BuildSettings
from podsite.utils.errors import ConfigParseError, InvalidConfigError
from podsite.utils.text import is_blank

logger = logging.getLogger(__name__)

SETTINGS_FILENAME = "podsite.yaml"


def load_document(path: Path) -> dict[str, Any]:
    """Load a YAML key-value document.

    Args:
        path: Document path

    Returns:
        Mapping with string keys. Missing or empty files give an empty mapping.

    Raises:
        ConfigParseError: If the YAML is malformed or not a mapping
    """
    if not path.is_file():
        return {}

    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigParseError(path, str(e)) from e
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigParseError(path, str(e)) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigParseError(path, f"expected a mapping, got {type(data).__name__}")

    return {str(key): value for key, value in data.items()}


def merge(
    global_config: dict[str, Any] | None, episode: dict[str, Any] | None
) -> dict[str, Any]:
    """Merge global and episode documents into one flat mapping.

    For every key the episode value wins unless it is blank. Nested mappings
    are left out of the result.

    Example:
        >>> merge({"A": "g", "B": "g"}, {"B": "e", "C": ""})
        {'A': 'g', 'B': 'e', 'C': ''}
    """
    merged: dict[str, Any] = {}
    for source in (global_config or {}, episode or {}):
        for key, value in source.items():
            if isinstance(value, dict):
                continue
            key = str(key)
            if key in merged and is_blank(value):
                continue
            merged[key] = value
    return merged


class ConfigManager:
    """Manages build settings and the global config for a project."""

    def __init__(self, project_root: Path | None = None) -> None:
        """Initialize the config manager.

        Args:
            project_root: Project directory. Defaults to the current directory.
        """
        self.project_root = (project_root or Path.cwd()).resolve()
        self.settings_file = self.project_root / SETTINGS_FILENAME

    def load_settings(self, **overrides: Any) -> BuildSettings:
        """Load ``podsite.yaml`` and apply overrides.

        Args:
            **overrides: Settings that take precedence over the file. ``None``
                values are ignored.

        Returns:
            Validated BuildSettings instance

        Raises:
            InvalidConfigError: If the settings file is invalid
        """
        try:
            data = load_document(self.settings_file)
        except ConfigParseError as e:
            raise InvalidConfigError(str(e)) from e

        data.update({k: v for k, v in overrides.items() if v is not None})

        try:
            return BuildSettings(**data)
        except ValidationError as e:
            raise InvalidConfigError(
                f"Invalid configuration in {self.settings_file}: {e}"
            ) from e

    def load_global_config(self, settings: BuildSettings) -> dict[str, Any]:
        """Load the global podcast config.

        A malformed global config is logged and treated as empty.
        """
        path = settings.resolve(self.project_root, settings.config_file)
        if not path.is_file():
            logger.warning(f"Global config not found: {path}")
            return {}

        try:
            return load_document(path)
        except ConfigParseError as e:
            logger.error(f"{e}; continuing with an empty global config")
            return {}
