"""
Configuration Management System for GamerBot

Handles loading configuration from built-in defaults, YAML config files and
environment variables, and validates the merged result.
"""

import copy
import os
import logging
from typing import Any, Callable, Dict, List, Optional
from pathlib import Path
from dataclasses import dataclass
import yaml


@dataclass
class ConfigSource:
    """Configuration source definition"""
    name: str
    priority: int
    loader: Callable
    path: Optional[str] = None


class ConfigurationError(Exception):
    """Configuration-related errors"""
    pass


DEFAULT_CONFIG: Dict[str, Any] = {
    "app": {
        "name": "GamerBot",
        "version": "1.0.0",
        "debug": False,
        "debug_irc": False
    },
    "irc": {
        "server": "127.0.0.1",
        "port": 6667,
        "nick": "gamerbot",
        "channels": ["#games"],
        "use_tls": False,
        "insecure_tls": False,
        "use_sasl": False,
        "sasl_login": "",
        "sasl_password": "",
        "connect_timeout": 30,
        "quit_delay": 1,
        "disconnect_timeout": 5
    },
    "bot": {
        "command_prefix": "."
    },
    "games": {
        "guess": {"max_tries": 6}
    },
    "logging": {
        "level": "INFO",
        "file": None,
        "max_size": "10MB",
        "backup_count": 5,
        "console": True,
        "components": {}
    }
}


class ConfigurationManager:
    """
    Manages bot configuration with support for multiple sources and
    validation.
    """

    def __init__(self, config_dir: str = "config"):
        self.config_dir = Path(config_dir)
        self.config: Dict[str, Any] = {}
        self.sources: List[ConfigSource] = []
        self.logger = logging.getLogger(__name__)
        self.defaults = copy.deepcopy(DEFAULT_CONFIG)

        self._setup_sources()

    def _setup_sources(self):
        """Set up configuration sources in priority order"""
        # Environment variables (highest priority)
        self.sources.append(ConfigSource(
            name="environment",
            priority=4,
            loader=self._load_from_env
        ))

        local_config_path = str(self.config_dir / "config.yaml")
        self.sources.append(ConfigSource(
            name="local_config",
            priority=3,
            loader=lambda: self._load_from_file(local_config_path),
            path=local_config_path
        ))

        default_config_path = str(self.config_dir / "default.yaml")
        self.sources.append(ConfigSource(
            name="default_config",
            priority=2,
            loader=lambda: self._load_from_file(default_config_path),
            path=default_config_path
        ))

        # Built-in defaults (lowest priority)
        self.sources.append(ConfigSource(
            name="defaults",
            priority=1,
            loader=lambda: self.defaults
        ))

    def load_config(self, validate: bool = True) -> None:
        """
        Load configuration from all sources

        Args:
            validate: Validate the merged result; pass False when more
                overrides are applied before calling validate()
        """
        self.logger.info("Loading configuration from all sources")

        merged_config: Dict[str, Any] = {}

        # Lowest priority first so later sources override earlier ones
        for source in sorted(self.sources, key=lambda x: x.priority):
            source_config = source.loader()
            if source_config:
                merged_config = self._deep_merge(merged_config, source_config)
                self.logger.debug(f"Loaded configuration from {source.name}")

        self.config = merged_config
        if validate:
            self.validate()
        self.logger.info("Configuration loaded successfully")

    def _load_from_env(self) -> Dict[str, Any]:
        """Load configuration from environment variables"""
        config: Dict[str, Any] = {}

        env_mappings = {
            "GAMERBOT_SERVER": "irc.server",
            "GAMERBOT_PORT": "irc.port",
            "GAMERBOT_NICK": "irc.nick",
            "GAMERBOT_CHANNELS": "irc.channels",
            "GAMERBOT_TLS": "irc.use_tls",
            "GAMERBOT_INSECURE_TLS": "irc.insecure_tls",
            "GAMERBOT_SASL": "irc.use_sasl",
            "GAMERBOT_SASL_LOGIN": "irc.sasl_login",
            "GAMERBOT_SASL_PASSWORD": "irc.sasl_password",
            "GAMERBOT_DEBUG": "app.debug",
            "GAMERBOT_LOG_LEVEL": "logging.level",
            "GAMERBOT_LOG_FILE": "logging.file"
        }

        for env_var, config_key in env_mappings.items():
            value = os.getenv(env_var)
            if value is None:
                continue

            if config_key == "irc.channels":
                value = split_channels(value)
            elif value.lower() in ('true', 'false'):
                value = value.lower() == 'true'
            elif value.isdigit():
                value = int(value)

            self._set_nested_value(config, config_key, value)

        return config

    def _load_from_file(self, file_path: str) -> Dict[str, Any]:
        """Load configuration from a YAML file"""
        path = Path(file_path)

        if not path.exists():
            return {}

        try:
            with open(path, 'r') as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Error loading config file {path}: {e}")

        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {path} must contain a mapping")
        return data

    def _deep_merge(self, base: Dict, override: Dict) -> Dict:
        """Deep merge two dictionaries"""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = copy.deepcopy(value)

        return result

    def _set_nested_value(self, config: Dict, key_path: str, value: Any) -> None:
        """Set a nested configuration value using dot notation"""
        keys = key_path.split('.')
        current = config

        for key in keys[:-1]:
            if key not in current:
                current[key] = {}
            current = current[key]

        current[keys[-1]] = value

    def validate(self) -> None:
        """Validate configuration values"""
        errors = []

        nick = self.get('irc.nick')
        if not nick or not isinstance(nick, str) or ' ' in nick:
            errors.append(f"Invalid nick: {nick!r}")

        port = self.get('irc.port')
        if not isinstance(port, int) or port < 1 or port > 65535:
            errors.append(f"Invalid port: {port}")

        channels = self.get('irc.channels', [])
        if not isinstance(channels, list):
            errors.append(f"Channels must be a list, got {type(channels).__name__}")

        if self.get('irc.use_sasl') and not self.get('irc.sasl_password'):
            errors.append("SASL enabled without a password")

        max_tries = self.get('games.guess.max_tries')
        if not isinstance(max_tries, int) or max_tries < 1:
            errors.append(f"Invalid games.guess.max_tries: {max_tries}")

        prefix = self.get('bot.command_prefix')
        if not isinstance(prefix, str) or len(prefix) != 1:
            errors.append(f"Command prefix must be a single character: {prefix!r}")

        log_level = self.get('logging.level', 'INFO')
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if str(log_level).upper() not in valid_levels:
            errors.append(f"Invalid log level: {log_level}")

        if errors:
            raise ConfigurationError(f"Configuration validation failed: {'; '.join(errors)}")

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value using dot notation"""
        keys = key.split('.')
        current = self.config

        try:
            for k in keys:
                current = current[k]
            return current
        except (KeyError, TypeError):
            return default

    def set(self, key: str, value: Any) -> None:
        """Set configuration value using dot notation"""
        self._set_nested_value(self.config, key, value)

    def get_section(self, section: str) -> Dict[str, Any]:
        """Get entire configuration section"""
        return self.get(section, {})

    def get_channels(self) -> List[str]:
        """Get channels to join; names without the # prefix are skipped"""
        return [channel for channel in self.get('irc.channels', []) if channel.startswith('#')]


def split_channels(value: str) -> List[str]:
    """Split a comma separated channel list"""
    return [channel.strip() for channel in value.split(',') if channel.strip()]
