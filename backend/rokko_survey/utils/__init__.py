# backend/rokko_survey/utils/__init__.py
from .config import ConfigError, load_config, merge_dicts

__all__ = ["ConfigError", "load_config", "merge_dicts"]
