"""Locate, read and validate pulse.yaml.

Values may reference the environment as ``${VAR}`` or ``${VAR:-fallback}``.
``PULSE_DB`` overrides ``database.path`` after the file is read, so the
same config can be pointed at a scratch database.
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Any, Mapping

import yaml

from pulse.config.schema import PulseConfig

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "pulse.yaml"
DB_PATH_ENV = "PULSE_DB"
HOME_ENV = "PULSE_HOME"

_ENV_REF = re.compile(r"\$\{(\w+)(?::-([^}]*))?\}")


def _expand_env_vars(value: Any) -> Any:
    """Recursively substitute ``${VAR}`` / ``${VAR:-fallback}`` in strings."""
    if isinstance(value, str):
        return _ENV_REF.sub(lambda m: os.environ.get(m.group(1), m.group(2) or ""), value)
    if isinstance(value, dict):
        return {k: _expand_env_vars(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_expand_env_vars(v) for v in value]
    return value


def _deep_merge(base: dict[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def candidate_paths() -> list[Path]:
    """Search order when no explicit path is given."""
    home = Path(os.environ.get(HOME_ENV, "~/.pulse")).expanduser()
    return [Path.cwd() / CONFIG_FILENAME, home / "config.yaml"]


def _find_config_file(explicit_path: str | Path | None = None) -> Path | None:
    if explicit_path is not None:
        path = Path(explicit_path).expanduser()
        if not path.is_file():
            logger.warning("Config file %s does not exist; using defaults", path)
            return None
        return path
    return next((p for p in candidate_paths() if p.is_file()), None)


def _read_yaml(path: Path) -> dict[str, Any]:
    with path.open() as f:
        raw = yaml.safe_load(f)
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ValueError(f"{path}: top level must be a mapping, got {type(raw).__name__}")
    return raw


def load_config(
    path: str | Path | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> PulseConfig:
    """Load and validate configuration.

    Resolution order: the explicit ``path``; ``./pulse.yaml``;
    ``$PULSE_HOME/config.yaml`` (default ``~/.pulse``); built-in defaults.
    ``overrides`` is deep-merged over the file contents before validation.

    Raises pydantic.ValidationError when the merged config is invalid.
    """
    config_path = _find_config_file(path)
    raw: dict[str, Any] = {}
    if config_path is not None:
        logger.info("Loading config from %s", config_path)
        raw = _expand_env_vars(_read_yaml(config_path))
    else:
        logger.debug("No config file found, using defaults")

    if overrides:
        raw = _deep_merge(raw, overrides)
    if os.environ.get(DB_PATH_ENV):
        raw = _deep_merge(raw, {"database": {"path": os.environ[DB_PATH_ENV]}})

    config = PulseConfig.model_validate(raw)
    logger.debug(
        "Config: window=%d thresholds=%d/%d db=%s",
        config.scoring.signal_window, config.thresholds.on_track,
        config.thresholds.at_risk, config.database.path,
    )
    return config


def resolve_path(path_str: str) -> Path:
    """Expand ``~`` and make a configured path absolute."""
    return Path(path_str).expanduser().resolve()
