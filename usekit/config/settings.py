"""Configuration utilities for usekit."""

import logging
import os
from pathlib import Path
from typing import List, Optional

from .constants import DEFAULT_INIT_FILE, ENV_VAR_DEFINITIONS, USEKIT_CONFIG_DIR


def get_init_path() -> Path:
    """Get the init file path, respecting the USEKIT_INIT environment variable."""
    override = os.environ.get("USEKIT_INIT")
    if override:
        return Path(override).expanduser()
    return USEKIT_CONFIG_DIR / DEFAULT_INIT_FILE


def validate_env_var(name: str, value: Optional[str]) -> Optional[str]:
    """Check one environment variable against its allowed values.

    Returns:
        An error message, or None when the value is acceptable or unset
    """
    valid_values = ENV_VAR_DEFINITIONS.get(name, {}).get("valid_values")
    if value is None or valid_values is None:
        return None
    if value.upper() not in valid_values:
        return f"Invalid value '{value}' for {name}. Valid values: {valid_values}"
    return None


def validate_all_env_vars() -> List[str]:
    """Error messages for every usekit environment variable that is set wrongly."""
    errors = (validate_env_var(name, os.environ.get(name)) for name in ENV_VAR_DEFINITIONS)
    return [error for error in errors if error]


def get_log_level() -> int:
    """Resolve USEKIT_LOG_LEVEL to a logging level, falling back to its default."""
    default = ENV_VAR_DEFINITIONS["USEKIT_LOG_LEVEL"]["default"]
    value = os.environ.get("USEKIT_LOG_LEVEL")
    if value is None or validate_env_var("USEKIT_LOG_LEVEL", value):
        value = default
    return getattr(logging, value.upper())
