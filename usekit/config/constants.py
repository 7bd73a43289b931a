"""
Centralized constants for usekit.
"""

from pathlib import Path

# =============================================================================
# PATHS
# =============================================================================

USEKIT_CONFIG_DIR = Path.home() / ".config" / "usekit"
DEFAULT_INIT_FILE = "init.yaml"
LOG_FILE_NAME = "usekit.log"

# =============================================================================
# ACTIVATION
# =============================================================================

GLOBAL_SCOPE = "global"
DEFAULT_SHELL_TIMEOUT_SECONDS = 10  # Upper bound for a shell action; never retried

# =============================================================================
# CAPABILITIES
# =============================================================================

# Executables optional components rely on. Inner lists are fallback groups:
# the requirement is met when any of them is on PATH.
DEFAULT_CAPABILITY_MANIFEST = [
    ["git"],
    ["rg", "ag", "grep"],
    ["aspell", "hunspell"],
    ["pandoc"],
    ["latexmk", "pdflatex"],
    ["mpv", "vlc"],
    ["gls", "ls"],
]

DEFAULT_PROBE_WORKERS = 1

# =============================================================================
# ENVIRONMENT VARIABLES
# =============================================================================

ENV_VAR_DEFINITIONS = {
    "USEKIT_INIT": {
        "description": "Path to the init.yaml configuration file",
        "default": None,
        "valid_values": None,
    },
    "USEKIT_LOG_LEVEL": {
        "description": "Log level for the usekit logger",
        "default": "WARNING",
        "valid_values": ["DEBUG", "INFO", "WARNING", "ERROR"],
    },
}
