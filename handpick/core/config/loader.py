"""
Configuration loader — reads handpick.yml into a Settings model.

The file is optional.  When it is absent the defaults apply; when it is
present it is read as YAML, validated against the Pydantic schema, and
then the environment overrides are layered on top.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from handpick.core.models.settings import Settings

logger = logging.getLogger(__name__)

# Default config filename
CONFIG_FILE = "handpick.yml"

# Env var → Settings field
_ENV_OVERRIDES = {
    "HANDPICK_MANIFEST": "manifest",
    "HANDPICK_INSTALL_COMMAND": "install_command",
}


class ConfigError(Exception):
    """Raised when handpick configuration is invalid or unreadable."""


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Return handpick.yml in the given directory (default: cwd), if any.

    The manifest lives in the working directory, so the config is looked
    up there too rather than walking up the tree.
    """
    candidate = (start_dir or Path.cwd()) / CONFIG_FILE
    return candidate if candidate.is_file() else None


def load_settings(path: Path | None = None, *, base_dir: Path | None = None) -> Settings:
    """Load and validate handpick settings.

    Args:
        path: Explicit path to a config file. If None, handpick.yml in
            ``base_dir`` is used when present.
        base_dir: Directory to look in (default: cwd).

    Returns:
        Validated Settings model.

    Raises:
        ConfigError: If an explicit file is missing, or any file is invalid.
    """
    data: dict = {}

    if path is None:
        path = find_config_file(base_dir)
    elif not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    if path is not None:
        data = _read_config_file(path)

    for env_name, field_name in _ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value:
            logger.debug("Override %s from %s", field_name, env_name)
            data[field_name] = value

    try:
        settings = Settings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid handpick configuration: {e}") from e

    logger.debug(
        "Settings: manifest=%s suffix=%s command=%r",
        settings.manifest, settings.backup_suffix, settings.install_command,
    )
    return settings


def _read_config_file(path: Path) -> dict:
    logger.debug("Loading config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    # The YAML may wrap everything under a "handpick" key or be flat
    if "handpick" in data:
        data = data["handpick"] or {}
        if not isinstance(data, dict):
            raise ConfigError(f"Expected a mapping under 'handpick' in {path}")

    return dict(data)
