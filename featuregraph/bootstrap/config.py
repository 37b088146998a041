"""
bootstrap/config.py - Application configuration

Provides configuration loading from files, environment variables, and defaults.
The engine functions take no configuration; these settings drive the CLI and
the suggestion intake.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from pathlib import Path
import os
import json
import logging

logger = logging.getLogger("bootstrap.config")


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


def _coerce(value: Any, default: Any) -> Any:
    """
    Convert a file value to the type of the field's default.

    Strings are parsed the way from_env parses them. Raises ValueError or
    TypeError when the value does not fit.
    """
    if isinstance(default, bool):
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.lower() in ("true", "false"):
            return value.lower() == "true"
        raise TypeError(f"expected a boolean, got {value!r}")
    if isinstance(value, bool):
        raise TypeError(f"expected {type(default).__name__}, got {value!r}")
    if isinstance(default, int):
        if isinstance(value, float) and not value.is_integer():
            raise ValueError(f"expected an integer, got {value!r}")
        return int(value)
    if isinstance(default, float):
        return float(value)
    if default is None and value is None:
        return None
    if not isinstance(value, str):
        raise TypeError(f"expected a string, got {value!r}")
    return value


def _apply(target: Any, defaults: Any, key: str, value: Any, label: str) -> None:
    try:
        setattr(target, key, _coerce(value, getattr(defaults, key)))
    except (TypeError, ValueError) as e:
        logger.warning(f"Ignoring config key {label}: {e}")


@dataclass
class EngineConfig:
    """Build-order engine defaults."""

    default_strategy: str = "balanced"
    quick_win_limit: int = 5

    @classmethod
    def from_env(cls) -> "EngineConfig":
        return cls(
            default_strategy=os.getenv("FEATUREGRAPH_DEFAULT_STRATEGY", "balanced"),
            quick_win_limit=int(os.getenv("FEATUREGRAPH_QUICK_WIN_LIMIT", "5")),
        )


@dataclass
class SuggestionConfig:
    """Acceptance policy for AI-proposed dependencies."""

    confidence_threshold: float = 0.7  # accept only confidence > threshold

    @classmethod
    def from_env(cls) -> "SuggestionConfig":
        return cls(
            confidence_threshold=float(os.getenv("FEATUREGRAPH_CONFIDENCE_THRESHOLD", "0.7")),
        )


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    log_file: Optional[str] = None
    json_logs: bool = False

    @classmethod
    def from_env(cls) -> "LoggingConfig":
        return cls(
            level=os.getenv("FEATUREGRAPH_LOG_LEVEL", "INFO"),
            format=os.getenv(
                "FEATUREGRAPH_LOG_FORMAT",
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            ),
            log_file=os.getenv("FEATUREGRAPH_LOG_FILE"),
            json_logs=_env_bool("FEATUREGRAPH_JSON_LOGS", "false"),
        )


@dataclass
class FeatureGraphConfig:
    """Root configuration."""

    environment: str = "development"
    debug: bool = False

    engine: EngineConfig = field(default_factory=EngineConfig)
    suggestions: SuggestionConfig = field(default_factory=SuggestionConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_env(cls) -> "FeatureGraphConfig":
        """Create configuration from environment variables."""
        return cls(
            environment=os.getenv("FEATUREGRAPH_ENVIRONMENT", "development"),
            debug=_env_bool("FEATUREGRAPH_DEBUG", "false"),
            engine=EngineConfig.from_env(),
            suggestions=SuggestionConfig.from_env(),
            logging=LoggingConfig.from_env(),
        )

    @classmethod
    def from_file(cls, filepath: str) -> "FeatureGraphConfig":
        """
        JSON file values layered over the environment.

        Raises:
            ValueError: file is not valid JSON or not a JSON object
        """
        path = Path(filepath)
        if not path.is_file():
            logger.warning(f"No config file at {filepath}; using environment settings")
            return cls.from_env()

        try:
            data = json.loads(path.read_text())
        except json.JSONDecodeError as e:
            raise ValueError(f"Config file {filepath} is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Config file {filepath} must contain a JSON object")
        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: Dict[str, Any]) -> "FeatureGraphConfig":
        """Create config from dictionary; file values override the environment."""
        config = cls.from_env()
        defaults = cls()

        for key in ("environment", "debug"):
            if key in data:
                _apply(config, defaults, key, data[key], key)

        for section in ("engine", "suggestions", "logging"):
            values = data.get(section, {})
            if not isinstance(values, dict):
                raise ValueError(f"Config section {section!r} must be an object")
            target = getattr(config, section)
            for key, value in values.items():
                if hasattr(target, key):
                    _apply(target, getattr(defaults, section), key, value, f"{section}.{key}")
                else:
                    logger.warning(f"Ignoring unknown config key: {section}.{key}")

        return config

    def to_dict(self) -> Dict[str, Any]:
        """Serialize config to dictionary."""
        return {
            "environment": self.environment,
            "debug": self.debug,
            "engine": {
                "default_strategy": self.engine.default_strategy,
                "quick_win_limit": self.engine.quick_win_limit,
            },
            "suggestions": {
                "confidence_threshold": self.suggestions.confidence_threshold,
            },
            "logging": {
                "level": self.logging.level,
                "log_file": self.logging.log_file,
                "json_logs": self.logging.json_logs,
            },
        }


# Searched in order when no path is given
DEFAULT_CONFIG_PATHS = (
    Path("featuregraph.json"),
    Path("config") / "featuregraph.json",
    Path("~/.featuregraph/config.json"),
)

_config: Optional[FeatureGraphConfig] = None


def find_config_file() -> Optional[Path]:
    """First existing file among DEFAULT_CONFIG_PATHS, relative to the cwd."""
    for candidate in DEFAULT_CONFIG_PATHS:
        path = candidate.expanduser()
        if path.is_file():
            return path
    return None


def load_config(filepath: Optional[str] = None) -> FeatureGraphConfig:
    """
    Load and cache the configuration.

    An explicit path wins; otherwise the first file found by
    find_config_file() is used, and with no file the environment alone.
    """
    global _config

    path = Path(filepath) if filepath else find_config_file()
    if path is None:
        _config = FeatureGraphConfig.from_env()
        source = "environment"
    else:
        _config = FeatureGraphConfig.from_file(str(path))
        source = str(path)

    logger.info(f"Configuration loaded from {source} (environment={_config.environment})")
    return _config


def get_config() -> FeatureGraphConfig:
    """Cached configuration, loaded on first use."""
    if _config is None:
        return load_config()
    return _config


def reset_config() -> None:
    """Forget the cached configuration (next get_config() reloads)."""
    global _config
    _config = None
