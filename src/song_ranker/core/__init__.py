"""Core infrastructure layer - no business logic dependencies.

This module provides foundation-level services:
- Configuration management (TOML)
- Logging setup (Loguru)
- Console management (Rich)

Clean architecture principle: The core layer has no dependencies on
domain or application layers.
"""

# Configuration
from .config import (
    Config,
    create_default_config,
    get_config_dir,
    get_config_path,
    get_data_dir,
    load_config,
    parse_config,
)

# Logging
from .output import setup_from_config, setup_loguru

# Console
from .console import get_console, print_error, print_warning, safe_print

__all__ = [
    # Config
    "Config",
    "create_default_config",
    "get_config_dir",
    "get_config_path",
    "get_data_dir",
    "load_config",
    "parse_config",
    # Logging
    "setup_from_config",
    "setup_loguru",
    # Console
    "get_console",
    "print_error",
    "print_warning",
    "safe_print",
]
