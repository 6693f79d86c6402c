"""Configuration file loading and merging."""

from pathlib import Path

import yaml

from termtask.config.schema import DEFAULT_CONFIG, TermtaskConfig

CONFIG_FILENAME = "config.yaml"


def get_home_config_path() -> Path:
    """Get path to global config: ~/.termtask/config.yaml."""
    return Path.home() / ".termtask" / CONFIG_FILENAME


def get_local_config_path() -> Path:
    """Get path to local config: ./.termtask/config.yaml."""
    return Path.cwd() / ".termtask" / CONFIG_FILENAME


def load_yaml_config(path: Path) -> dict[str, object] | None:
    """Load a YAML config file, return None if not found, empty or invalid."""
    if not path.exists():
        return None
    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError:
        return None
    if not isinstance(data, dict):
        return None
    result: dict[str, object] = data
    return result


def load_config() -> TermtaskConfig:
    """Load merged configuration.

    Precedence (lowest to highest):
    1. Built-in defaults
    2. Global config (~/.termtask/config.yaml)
    3. Local config (./.termtask/config.yaml)
    """
    config = DEFAULT_CONFIG

    home_data = load_yaml_config(get_home_config_path())
    if home_data:
        config = config.merge(TermtaskConfig.from_dict(home_data))

    local_data = load_yaml_config(get_local_config_path())
    if local_data:
        config = config.merge(TermtaskConfig.from_dict(local_data))

    return config
