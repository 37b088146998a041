"""
bootstrap/ - Configuration and entry points.
"""

from .config import (
    EngineConfig,
    SuggestionConfig,
    LoggingConfig,
    FeatureGraphConfig,
    find_config_file,
    load_config,
    get_config,
    reset_config,
)

__all__ = [
    "EngineConfig",
    "SuggestionConfig",
    "LoggingConfig",
    "FeatureGraphConfig",
    "find_config_file",
    "load_config",
    "get_config",
    "reset_config",
]
