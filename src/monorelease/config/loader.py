"""Configuration and environment loading."""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from monorelease.config.models import MonoreleaseConfig
from monorelease.exceptions import (
    ConfigNotFoundError,
    ConfigurationError,
    ConfigValidationError,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "monorelease.toml"

REQUIRED_ENV_VARS = ("GIT_COMMITTER_NAME", "GIT_COMMITTER_EMAIL", "GITHUB_TOKEN")


@dataclass(frozen=True)
class ReleaseEnvironment:
    """Identity and credentials required to publish releases."""

    committer_name: str
    committer_email: str
    token: str

    def __repr__(self) -> str:
        return (
            f"ReleaseEnvironment(committer_name={self.committer_name!r}, "
            f"committer_email={self.committer_email!r}, token='***')"
        )


def find_config_file(start: Path | None = None) -> Path | None:
    """Search for monorelease.toml from ``start`` up to the filesystem root.

    Returns:
        Path to the config file, or None if there is none
    """
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def load_toml(path: Path) -> dict[str, Any]:
    """Read a TOML file.

    Raises:
        ConfigNotFoundError: If the file does not exist
        ConfigValidationError: If the file is not valid TOML
    """
    if not path.is_file():
        raise ConfigNotFoundError(f"Configuration file not found: {path}")
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigValidationError(f"Invalid TOML in {path}: {e}") from e


def load_config(path: Path | None = None) -> MonoreleaseConfig:
    """Load configuration.

    Args:
        path: A config file, or a directory to search upward from.
              Defaults to the current directory.

    Returns:
        Validated configuration; defaults if no config file is found

    Raises:
        ConfigNotFoundError: If ``path`` names a file that does not exist
        ConfigValidationError: If the configuration is invalid
    """
    if path is not None and not path.is_dir():
        config_path: Path | None = path
    else:
        config_path = find_config_file(path)

    if config_path is None:
        logger.debug("No %s found, using defaults", CONFIG_FILENAME)
        return MonoreleaseConfig()

    data = load_toml(config_path)
    logger.debug("Loaded configuration from %s", config_path)
    try:
        return MonoreleaseConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid configuration in {config_path}:\n{e}") from e


def load_environment(environ: Mapping[str, str] | None = None) -> ReleaseEnvironment:
    """Read committer identity and credentials from the environment.

    Raises:
        ConfigurationError: If any required variable is unset or empty
    """
    env = os.environ if environ is None else environ
    missing = [name for name in REQUIRED_ENV_VARS if not env.get(name)]
    if missing:
        raise ConfigurationError(
            f"Missing required environment variables: {', '.join(missing)}"
        )
    return ReleaseEnvironment(
        committer_name=env["GIT_COMMITTER_NAME"],
        committer_email=env["GIT_COMMITTER_EMAIL"],
        token=env["GITHUB_TOKEN"],
    )
