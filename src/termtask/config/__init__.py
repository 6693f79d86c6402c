"""Configuration loading."""

from termtask.config.loader import (
    get_home_config_path,
    get_local_config_path,
    load_config,
)
from termtask.config.schema import DEFAULT_CONFIG, TermtaskConfig

__all__ = [
    "DEFAULT_CONFIG",
    "TermtaskConfig",
    "get_home_config_path",
    "get_local_config_path",
    "load_config",
]
