"""
Configuration management for AirTwitch.

Handles loading, validation, and access to application configuration.
"""

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from airtwitch.exceptions import ConfigurationError

# Global configuration instance
_config: Optional["AirTwitchConfig"] = None

CONFIG_FILE_NAME = "airtwitch.yaml"


class TwitchConfig(BaseModel):
    """Streaming platform configuration."""
    client_id: Optional[str] = None  # Explicit Client-ID override
    client_id_file: Optional[str] = None  # Replaces the bundled twitch_client_id resource
    api_host: str = "api.twitch.tv"
    usher_base_url: str = "https://usher.ttvnw.net/api/channel/hls/"
    player: str = "twitchweb"


class DiscoveryConfig(BaseModel):
    """Multicast service discovery configuration."""
    service_type: str = "_airplay._tcp.local."
    browse_seconds: float = 3.0  # How long the CLI waits for devices


class PlaybackConfig(BaseModel):
    """Remote playback configuration."""
    user_agent: str = "MediaControl/1.0"
    start_position: float = 0.0


class HttpConfig(BaseModel):
    """Shared HTTP transport configuration."""
    timeout: float = 5.0


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = "INFO"
    file: Optional[str] = None  # None = dated file under logs/
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    max_bytes: int = 10 * 1024 * 1024
    backup_count: int = 5
    to_console: bool = True
    to_file: bool = False


class AirTwitchConfig(BaseModel):
    """Main AirTwitch configuration."""
    twitch: TwitchConfig = Field(default_factory=TwitchConfig)
    discovery: DiscoveryConfig = Field(default_factory=DiscoveryConfig)
    playback: PlaybackConfig = Field(default_factory=PlaybackConfig)
    http: HttpConfig = Field(default_factory=HttpConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_config(config_path: Optional[str] = None) -> AirTwitchConfig:
    """
    Load configuration from file.

    Args:
        config_path: Path to config file. Defaults to airtwitch.yaml in the
            current directory or project root.

    Returns:
        Loaded and validated configuration.

    Raises:
        ConfigurationError: If the file cannot be parsed or holds invalid values.
    """
    global _config

    if config_path is None:
        possible_paths = [
            Path(CONFIG_FILE_NAME),
            Path(__file__).parent.parent / CONFIG_FILE_NAME,
        ]
        for path in possible_paths:
            if path.exists():
                config_path = str(path)
                break

    config_data: dict[str, Any] = {}

    if config_path and Path(config_path).exists():
        try:
            with open(config_path, encoding="utf-8") as f:
                config_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {config_path}: {e}", original_error=e) from e
        if not isinstance(config_data, dict):
            raise ConfigurationError(f"Configuration root in {config_path} must be a mapping")

    # Apply environment variable overrides
    env_overrides = _get_env_overrides()
    _deep_merge(config_data, env_overrides)

    try:
        _config = AirTwitchConfig(**config_data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}", original_error=e) from e
    return _config


def get_config() -> AirTwitchConfig:
    """
    Get the current configuration.

    Returns:
        Current configuration (loads default if not yet loaded).
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config() -> AirTwitchConfig:
    """Discard the cached configuration and load it again from disk."""
    global _config
    _config = None
    return load_config()


def _get_env_overrides() -> dict[str, Any]:
    """Get configuration overrides from environment variables."""
    overrides: dict[str, Any] = {}

    # Map of environment variables to config paths
    env_map = {
        "AIRTWITCH_LOG_LEVEL": ("logging", "level"),
        "AIRTWITCH_HTTP_TIMEOUT": ("http", "timeout"),
        "AIRTWITCH_CLIENT_ID": ("twitch", "client_id"),
        "AIRTWITCH_USER_AGENT": ("playback", "user_agent"),
    }

    for env_var, path in env_map.items():
        value = os.environ.get(env_var)
        if value is not None:
            # pydantic coerces numeric strings for typed fields
            _set_nested(overrides, path, value)

    return overrides


def _set_nested(d: dict[str, Any], path: tuple[str, ...], value: Any) -> None:
    """Set a nested dictionary value from a path tuple."""
    for key in path[:-1]:
        d = d.setdefault(key, {})
    d[path[-1]] = value


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> None:
    """Deep merge override into base dictionary."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
