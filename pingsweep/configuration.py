# pingsweep/configuration.py

"""
Configuration loader for pingsweep.

Settings come from a YAML file (pingsweep.yaml by default). Missing keys and
a missing file fall back to DEFAULT_CONFIG; command-line flags override both.
"""

import logging
import os
from typing import Any, Dict, Optional

import yaml

from .errors import ConfigError

DEFAULT_TIMEOUT_MS = 800
DEFAULT_CONCURRENCY = 100

# This dictionary holds the default structure and values for our config.
# It is also what --write-config dumps to disk.
DEFAULT_CONFIG: Dict[str, Any] = {
    'log_file': 'ping_log.txt',
    'timeout_ms': DEFAULT_TIMEOUT_MS,
    'concurrency': DEFAULT_CONCURRENCY,
    # Options: auto, raw, dgram, system
    'probe_method': 'auto',
    'grid_columns': 20,
    'color': True,
    'show_progress': True,
}

_HEADER = (
    "# pingsweep Configuration File\n"
    "# Command-line flags take precedence over these settings.\n\n"
)


def get_config_path() -> str:
    """Returns the path to the config file, honouring PINGSWEEP_CONFIG."""
    return os.environ.get("PINGSWEEP_CONFIG", "pingsweep.yaml")


def save_config(config: Dict[str, Any], path: Optional[str] = None):
    """Saves the provided configuration dictionary as YAML."""
    config_path = path or get_config_path()
    try:
        with open(config_path, 'w', encoding='utf-8') as f:
            f.write(_HEADER)
            yaml.dump(config, f, sort_keys=False, default_flow_style=False, indent=2)
    except OSError as e:
        raise ConfigError(f"Could not write config file to '{config_path}': {e}") from e


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Loads configuration from a YAML file merged over the defaults.

    A missing file yields the defaults. Content that is not a mapping is
    ignored with a warning; a file that is not valid YAML raises ConfigError.
    """
    config_path = path or get_config_path()
    config = DEFAULT_CONFIG.copy()
    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            user_config = yaml.safe_load(f)
    except FileNotFoundError:
        logging.debug(f"No configuration file at '{config_path}', using defaults.")
        return config
    except OSError as e:
        raise ConfigError(f"Could not read '{config_path}': {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Error parsing '{config_path}': {e}") from e

    if isinstance(user_config, dict):
        unknown = set(user_config) - set(DEFAULT_CONFIG)
        if unknown:
            logging.warning(f"Ignoring unknown configuration keys in '{config_path}': {', '.join(sorted(unknown))}")
        config.update({key: value for key, value in user_config.items() if key in DEFAULT_CONFIG})
    elif user_config is not None:
        logging.warning(f"Configuration file '{config_path}' does not contain a mapping; using defaults.")

    columns = config['grid_columns']
    if isinstance(columns, bool) or not isinstance(columns, int) or columns < 1:
        raise ConfigError(f"Invalid grid_columns in '{config_path}': expected a positive integer, got {columns!r}.")
    return config
