"""Locate, read and validate the livingscore YAML settings file.

String values may reference environment variables as ``${NAME}`` so a
backend API key never has to live in the file itself.
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from livingscore.config.schema import LivingScoreConfig
from livingscore.exceptions import ConfigError

logger = logging.getLogger(__name__)

# Searched in order when no path is given
DEFAULT_CONFIG_PATHS = [
    Path("livingscore.yaml"),
    Path("~/.livingscore/config.yaml").expanduser(),
]

_ENV_PATTERN = re.compile(r"\$\{(\w+)\}")


def _expand_env_vars(value: Any) -> Any:
    """Substitute ``${NAME}`` in every string nested inside ``value``.

    Unset variables become an empty string.
    """
    if isinstance(value, str):
        return _ENV_PATTERN.sub(lambda m: os.environ.get(m.group(1), ""), value)
    elif isinstance(value, dict):
        return {k: _expand_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [_expand_env_vars(item) for item in value]
    return value


def _find_config_file(explicit_path: str | Path | None = None) -> Path | None:
    """The settings file to read, or None to run on defaults.

    A missing explicit path is logged and treated as "no file".
    """
    if explicit_path is not None:
        path = Path(explicit_path).expanduser()
        if not path.exists():
            logger.warning("Config file not found: %s", path)
            return None
        return path

    return next((p for p in DEFAULT_CONFIG_PATHS if p.exists()), None)


def _read_yaml(config_path: Path) -> dict[str, Any]:
    try:
        with open(config_path) as f:
            raw = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e
    return _expand_env_vars(raw)


def load_config(path: str | Path | None = None) -> LivingScoreConfig:
    """Build a validated ``LivingScoreConfig``.

    Uses ``path`` when given, else the first of ``./livingscore.yaml``
    and ``~/.livingscore/config.yaml`` that exists, else pure defaults.
    Empty sections fall back to their defaults.

    Raises ConfigError for malformed YAML or values the schema rejects
    (e.g. a non-positive decay window, or a REST backend with no url).
    """
    config_path = _find_config_file(path)
    if config_path is None:
        logger.info("No config file found, using defaults")
        raw: dict[str, Any] = {}
    else:
        logger.info("Loading config from %s", config_path)
        raw = _read_yaml(config_path)

    try:
        config = LivingScoreConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(str(e)) from e
    logger.debug("Config loaded: version=%d backend=%s", config.version, config.backend.kind)
    return config


def resolve_path(path_str: str) -> Path:
    """Absolute form of a configured database path; ``:memory:`` passes through."""
    if path_str == ":memory:":
        return Path(path_str)
    return Path(path_str).expanduser().resolve()
