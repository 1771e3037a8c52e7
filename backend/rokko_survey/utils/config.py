import copy
import os
import yaml
from pathlib import Path
import logging
from typing import Dict, Any

class ConfigError(Exception):
    """Custom exception for configuration errors."""
    pass

DEFAULT_CONFIG: Dict[str, Any] = {
    "api": {
        "base_url": "http://localhost:3001/api",
        "request_timeout_seconds": None,  # No timeout unless configured
    },
    "logging": {
        "level": "INFO",
    },
    "cors": {
        "origins": ["http://localhost:5173"],
    },
}

BASE_URL_ENV_VAR = "ROKKO_SURVEY_API_BASE_URL"

def merge_dicts(source: Dict[Any, Any], destination: Dict[Any, Any]) -> Dict[Any, Any]:
    """
    Recursively merges two dictionaries.
    Args:
        source: The source dictionary to merge from.
        destination: The destination dictionary to merge into.
    Returns:
        The merged dictionary.
    """
    for key, value in source.items():
        if isinstance(value, dict):
            # get node or create one
            node = destination.setdefault(key, {})
            merge_dicts(value, node)
        else:
            destination[key] = value
    return destination

def load_config(config_file: Path = Path("config.yaml")) -> Dict[str, Any]:
    """
    Loads the YAML configuration file, merging it with default settings.
    Args:
        config_file: The path to the configuration file.
    Returns:
        A dictionary containing the application configuration.
    Raises:
        ConfigError: If the configuration file is invalid.
    """
    config = copy.deepcopy(DEFAULT_CONFIG)
    config_file = Path(config_file)
    if config_file.exists():
        try:
            with open(config_file, "r", encoding="utf-8") as f:
                user_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logging.error(f"Error parsing YAML file: {e}")
            raise ConfigError(f"Error parsing YAML file: {e}") from e
        except OSError as e:
            logging.error(f"Error loading configuration file: {e}")
            raise ConfigError(f"Error loading configuration file: {e}") from e
        if user_config: # Check if the user_config is not None
            if not isinstance(user_config, dict):
                raise ConfigError(f"Configuration root must be a mapping, got {type(user_config).__name__}")
            config = merge_dicts(user_config, config)
    else:
        logging.warning(f"Configuration file not found at {config_file}. Using default settings.")

    base_url = os.environ.get(BASE_URL_ENV_VAR)
    if base_url:
        config["api"]["base_url"] = base_url
    return config
