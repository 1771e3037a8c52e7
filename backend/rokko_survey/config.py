# backend/rokko_survey/config.py

import logging
from pathlib import Path
from typing import Dict, Any, Optional

from rokko_survey.utils.config import load_config, ConfigError

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Module-level variable to hold the loaded configuration
_config_instance: Optional[Dict[str, Any]] = None

def default_config_path() -> Path:
    """backend/configs/config.yaml"""
    return (Path(__file__).parent.parent / "configs" / "config.yaml").resolve()

def initialize_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Loads the configuration from the specified path or the default location
    and stores it in the module-level variable. Logging is reconfigured from
    the loaded `logging.level`.
    """
    global _config_instance
    if _config_instance is not None:
        logger.warning("Configuration already initialized. Skipping reload.")
        return _config_instance

    path = Path(config_path) if config_path is not None else default_config_path()
    logger.info(f"Initializing configuration from: {path}")
    try:
        _config_instance = load_config(path)
    except ConfigError as e:
        logger.critical(f"CRITICAL CONFIGURATION ERROR during initialization: {e}", exc_info=True)
        _config_instance = None
        raise RuntimeError(f"Configuration loading failed: {e}") from e

    log_level_str = str(_config_instance.get("logging", {}).get("level", "INFO")).upper()
    log_level = getattr(logging, log_level_str, logging.INFO)
    logging.basicConfig(level=log_level, format=LOG_FORMAT, force=True)
    logging.getLogger("rokko_survey").setLevel(log_level)
    logger.info(f"Logging level set to: {log_level_str} based on loaded configuration.")
    return _config_instance

def get_current_config() -> Dict[str, Any]:
    """
    Returns the currently loaded configuration dictionary.
    Raises RuntimeError if configuration has not been initialized.
    """
    if _config_instance is None:
        logger.error("Configuration accessed before initialization!")
        raise RuntimeError("Configuration has not been initialized. Call initialize_config first.")
    return _config_instance

def reload_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Forces a reload of the configuration and returns the new one."""
    global _config_instance
    logger.warning("Attempting configuration reload...")
    _config_instance = None
    return initialize_config(config_path)
