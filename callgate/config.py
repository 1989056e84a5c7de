"""
Configuration management for callgate.

Loads $CALLGATE_HOME/config.yaml (default ~/.config/callgate/config.yaml):

    handler_modules:        # imported at startup so @handler/@function register
      - myapp.handlers
    app_config:             # handed to each handler's set_app_config()
      site_name: Example
    log_level: INFO
    log_format: structured  # structured (JSON) or pretty (rich)
    log_file: ~/.local/state/callgate/callgate.log
    console: true
    env_file: ~/.config/callgate/.env
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv

from callgate.errors import ConfigError

LOG_FORMATS = ("structured", "pretty")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def get_callgate_home() -> Path:
    """Config directory: $CALLGATE_HOME or ~/.config/callgate."""
    env_home = os.environ.get("CALLGATE_HOME")
    if env_home:
        return Path(env_home).expanduser()
    return Path("~/.config/callgate").expanduser()


@dataclass
class CallgateConfig:
    """Complete callgate configuration."""
    handler_modules: List[str] = field(default_factory=list)
    app_config: Dict[str, Any] = field(default_factory=dict)
    log_level: str = "INFO"
    log_format: str = "structured"
    log_file: Optional[str] = None
    console: bool = True
    env_file: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CallgateConfig":
        """Build a config from parsed YAML, ignoring unknown keys."""
        known = {name for name in cls.__dataclass_fields__}
        config = cls(**{k: v for k, v in data.items() if k in known and v is not None})
        config.validate()
        return config

    def validate(self) -> None:
        """Validate configuration values."""
        if not isinstance(self.handler_modules, list) or not all(
            isinstance(m, str) for m in self.handler_modules
        ):
            raise ConfigError("handler_modules must be a list of module names")

        if not isinstance(self.app_config, dict):
            raise ConfigError("app_config must be a mapping")

        if not isinstance(self.log_level, str) or self.log_level.upper() not in LOG_LEVELS:
            raise ConfigError(
                f"Invalid log_level: {self.log_level}. Expected one of {', '.join(LOG_LEVELS)}"
            )

        if self.log_format not in LOG_FORMATS:
            raise ConfigError(
                f"Invalid log_format: {self.log_format}. Expected one of {', '.join(LOG_FORMATS)}"
            )

    def get_log_file_path(self) -> Optional[Path]:
        """Get the log file path, if file logging is enabled."""
        if not self.log_file:
            return None
        return Path(self.log_file).expanduser()

    def get_log_level(self) -> str:
        """Get logging level."""
        return self.log_level.upper()

    def __repr__(self) -> str:
        return f"CallgateConfig(handler_modules={self.handler_modules}, log_level={self.log_level})"


def load_config(config_path: Optional[Path] = None) -> CallgateConfig:
    """
    Load callgate configuration from YAML file.

    Args:
        config_path: Path to config file. Defaults to $CALLGATE_HOME/config.yaml

    Returns:
        CallgateConfig instance

    Raises:
        FileNotFoundError: If the config file does not exist
        ConfigError: If config is invalid
    """
    if config_path is None:
        config_path = get_callgate_home() / "config.yaml"

    if not config_path.exists():
        raise FileNotFoundError(
            f"callgate config.yaml not found at {config_path}. Run `callgate init`."
        )

    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML syntax: {e}")

    if not isinstance(data, dict):
        raise ConfigError("Configuration file must contain a mapping")

    try:
        config = CallgateConfig.from_dict(data)
    except TypeError as e:
        raise ConfigError(f"Invalid configuration: {e}")

    if config.env_file:
        env_path = Path(config.env_file).expanduser()
        if env_path.exists():
            load_dotenv(env_path)

    return config
