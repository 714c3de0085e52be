"""Discovery and loading of ``devinitrc.yml``."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..errors import FileReadWriteError, InvalidConfigError, NoConfigError
from ..rendering.io import read_text
from .models import Config, ConfigFile

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "devinitrc.yml"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="DEVINIT_", case_sensitive=False)

    config: Path | None = None


def default_config_paths() -> list[Path]:
    """Return the system-wide config locations, in lookup order."""
    home = Path.home()
    config_home = os.environ.get("XDG_CONFIG_HOME") or str(home / ".config")
    return [
        home / ".devinit" / CONFIG_FILENAME,
        Path(config_home) / "devinit" / CONFIG_FILENAME,
    ]


def find_config(user_path: Path | None = None) -> Path:
    """Locate the config file to use.

    Args:
        user_path: Explicit path given with ``--config``, if any

    Returns:
        Path of an existing config file
    """
    if user_path is not None:
        if not user_path.is_file():
            raise FileReadWriteError(
                f"Config file not found (explicit path {str(user_path)!r})"
            )
        return user_path

    env_path = Settings().config
    if env_path is not None:
        if not env_path.is_file():
            raise FileReadWriteError(
                f"Config file not found (DEVINIT_CONFIG={str(env_path)!r})"
            )
        return env_path

    for candidate in default_config_paths():
        if candidate.is_file():
            return candidate
        logger.info(f"Config file miss (not found) at {candidate}")

    raise NoConfigError()


def load_config(user_path: Path | None = None) -> Config:
    """Find, read and validate the config file.

    Template locations are resolved relative to the config file's directory.
    """
    path = find_config(user_path)
    logger.info(f"Using config file {path}")

    raw = read_text(path)

    try:
        data = yaml.safe_load(raw) or {}
        parsed = ConfigFile.model_validate(data)
    except (yaml.YAMLError, ValidationError) as e:
        raise InvalidConfigError(str(e)) from e

    folder = path.parent
    return Config(
        source=path,
        file_templates_dir=folder / parsed.file_templates_loc,
        project_templates_dir=folder / parsed.project_templates_loc,
    )
