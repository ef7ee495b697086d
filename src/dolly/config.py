"""Loading and saving of layout documents."""
import logging
import os
from pathlib import Path
from typing import Any, Dict

import yaml
from pydantic import ValidationError

from .errors import ConfigError
from .models import SessionConfig
from .utils import expand_tilde

logger = logging.getLogger(__name__)

ENV_PREFIX = "DOLLY_"

_TRUE = {"true", "1", "yes", "on"}
_FALSE = {"false", "0", "no", "off"}


def generate_env_var_name(field_name: str) -> str:
    """Environment variable that overrides a top-level field."""
    return f"{ENV_PREFIX}{field_name.upper()}"


def _scalar_fields() -> Dict[str, Any]:
    """Top-level fields that can be set from the environment."""
    fields = {}
    for name, info in SessionConfig.model_fields.items():
        if info.annotation in (str, bool):
            fields[name] = info.annotation
    return fields


def _convert_env_value(value: str, target_type: Any) -> Any:
    """Convert an environment string to the field's type."""
    if target_type is bool:
        lowered = value.strip().lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
        raise ConfigError(f"Invalid boolean value '{value}'")
    return value


def load_env_overrides() -> Dict[str, Any]:
    """Collect DOLLY_* overrides present in the environment."""
    overrides = {}
    for name, field_type in _scalar_fields().items():
        env_name = generate_env_var_name(name)
        if env_name in os.environ:
            overrides[name] = _convert_env_value(os.environ[env_name], field_type)
            logger.debug(f"Override from {env_name}: {name}={overrides[name]!r}")
    return overrides


def load_config(path: str) -> SessionConfig:
    """Load a layout document and apply environment overrides."""
    config_path = Path(expand_tilde(path))
    try:
        data = yaml.safe_load(config_path.read_text())
    except OSError as e:
        raise ConfigError(f"Failed to read config file {config_path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML in {config_path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {config_path} must contain a mapping")

    data.update(load_env_overrides())

    try:
        config = SessionConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config file {config_path}: {e}") from e

    logger.debug(f"Loaded config for session '{config.session_name}' from {config_path}")
    return config


def dump_config(config: SessionConfig) -> str:
    """Render a configuration as a YAML document."""
    data = config.model_dump(exclude_defaults=True)
    # session_name has no default and would otherwise be dropped
    data = {"session_name": config.session_name, **data}
    return yaml.safe_dump(data, default_flow_style=False, sort_keys=False)


def save_config(config: SessionConfig, path: str) -> Path:
    """Write a configuration to a YAML file, creating parent directories."""
    config_path = Path(expand_tilde(path))
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(dump_config(config))
    except OSError as e:
        raise ConfigError(f"Failed to write config file {config_path}: {e}") from e

    logger.debug(f"Configuration saved to {config_path}")
    return config_path
