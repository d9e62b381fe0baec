"""Settings loading for bot-pr-merge."""

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

import yaml

from .utils.logging import log_info, log_warning

DEFAULT_CONFIG_PATH = "~/.bot-pr-merge.yml"
BOT_LOGIN_ENV = "BOT_PR_MERGE_BOT_LOGIN"


class ConfigError(Exception):
    """Raised when the configuration file cannot be used."""


@dataclass(frozen=True)
class MergeSettings:
    """Tunables of the merge loop.

    Attributes
    ----------
    bot_login : str
        Login of the dependency-update bot whose pull requests are merged.
    max_iterations : int
        Upper bound on merge steps in one run.
    max_consecutive_failures : int
        Failed steps in a row after which the run gives up.
    retry_interval : float
        Seconds to sleep after a failed step.
    approval_message : str
        Body of the approving review.
    command_timeout : float
        Seconds allowed for a single gh invocation.

    """

    bot_login: str = "renovate-bot"
    max_iterations: int = 100
    max_consecutive_failures: int = 10
    retry_interval: float = 120.0
    approval_message: str = "LGTM"
    command_timeout: float = 60.0


def _coerce(name: str, value: Any, default: Any) -> Any:
    """Check a config value against the type of its default."""
    if isinstance(default, bool) or isinstance(value, bool):
        raise ConfigError(f"Invalid value for {name!r}: {value!r}")
    if isinstance(default, float) and isinstance(value, int):
        value = float(value)
    if not isinstance(value, type(default)):
        raise ConfigError(
            f"Invalid value for {name!r}: expected {type(default).__name__}, "
            f"got {type(value).__name__}"
        )
    if isinstance(value, (int, float)) and value < 0:
        raise ConfigError(f"Invalid value for {name!r}: must not be negative")
    return value


def load_settings(config_path: str | None = DEFAULT_CONFIG_PATH) -> MergeSettings:
    """Load settings by merging, in order of precedence.

    1. Built-in defaults
    2. The YAML config file, when it exists
    3. ``BOT_PR_MERGE_BOT_LOGIN`` from the environment

    Parameters
    ----------
    config_path : str or None, optional
        Path to the YAML file; ``~`` is expanded. None skips the file.

    Returns
    -------
    MergeSettings
        Effective settings.

    Raises
    ------
    ConfigError
        If the path is a directory, the file cannot be read or is not valid
        YAML, it is not a mapping, or a value has the wrong type.

    """
    settings = MergeSettings()
    defaults = {f.name: getattr(settings, f.name) for f in fields(MergeSettings)}

    if config_path:
        path = Path(config_path).expanduser()
        if path.is_dir():
            raise ConfigError(f"Config path {path} is a directory")
        if path.is_file():
            log_info(f"Using config file: {path}")
            try:
                with open(path, encoding="utf-8") as f:
                    file_config = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {path}: {e}") from e
            except (OSError, UnicodeDecodeError) as e:
                raise ConfigError(f"Unable to read {path}: {e}") from e
            if not isinstance(file_config, dict):
                raise ConfigError(f"Config file {path} must contain a mapping")

            overrides = {}
            for key, value in file_config.items():
                if key not in defaults:
                    log_warning(f"Ignoring unknown config key: {key}")
                    continue
                overrides[key] = _coerce(key, value, defaults[key])
            settings = replace(settings, **overrides)

    bot_login = os.environ.get(BOT_LOGIN_ENV)
    if bot_login:
        settings = replace(settings, bot_login=bot_login)

    return settings
