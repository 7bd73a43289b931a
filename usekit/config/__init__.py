"""Configuration utilities for usekit."""

from .constants import (
    DEFAULT_CAPABILITY_MANIFEST,
    GLOBAL_SCOPE,
    USEKIT_CONFIG_DIR,
)
from .settings import get_init_path, get_log_level, validate_all_env_vars

__all__ = [
    "DEFAULT_CAPABILITY_MANIFEST",
    "GLOBAL_SCOPE",
    "USEKIT_CONFIG_DIR",
    "get_init_path",
    "get_log_level",
    "validate_all_env_vars",
]
