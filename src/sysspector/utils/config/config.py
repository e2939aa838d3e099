# Copyright (C) 2025 Intel Corporation
# SPDX-License-Identifier: Apache-2.0

"""
Utilities for handling collection settings.

Settings come from three layers, later layers winning:
packaged defaults (configs/sysspector.yml), an optional user YAML file,
and SYSSPECTOR_* environment variables.
"""

import logging
import os
from typing import Any, Callable, Dict, Optional, Tuple

import yaml

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "SYSSPECTOR_CONFIG"
DEFAULT_CONFIG_FILE = "sysspector.yml"

# Environment variable -> (dot path, converter)
ENVIRONMENT_OVERRIDES: Dict[str, Tuple[str, Callable[[str], Any]]] = {
    "SYSSPECTOR_HTTP_TIMEOUT": ("network.http_timeout", float),
    "SYSSPECTOR_TRAFFIC_INTERFACE": ("network.traffic_interface", str),
    "SYSSPECTOR_TRAFFIC_INTERVAL": ("network.traffic_sample_interval", float),
    "SYSSPECTOR_PING_COUNT": ("network.latency.ping_count", int),
    "SYSSPECTOR_LATENCY": ("network.latency.enabled", lambda v: v.lower() in ("1", "true", "yes", "on")),
    "SYSSPECTOR_TRACE": ("network.trace.enabled", lambda v: v.lower() in ("1", "true", "yes", "on")),
    "SYSSPECTOR_MAX_EXECUTION_TIME": ("commands.max_execution_time", float),
}


class ConfigurationError(Exception):
    """Exception raised when a settings file cannot be loaded."""

    pass


def get_default_config_path() -> str:
    """Return the path of the packaged default settings file."""
    package_dir = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
    return os.path.join(package_dir, "configs", DEFAULT_CONFIG_FILE)


def load_yaml_config(config_path: str) -> Dict[str, Any]:
    """
    Load YAML configuration file.

    Args:
        config_path: Path to the YAML configuration file

    Returns:
        Dict containing the configuration

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If config file is invalid YAML
    """
    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as file:
            config = yaml.safe_load(file)
            return config if config is not None else {}
    except yaml.YAMLError as e:
        raise yaml.YAMLError(f"Invalid YAML in {config_path}: {e}")


def merge_configs(base_config: Dict[str, Any], override_config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge two configuration dictionaries.

    Args:
        base_config: Base configuration
        override_config: Configuration to override base with

    Returns:
        Merged configuration dictionary
    """
    merged = base_config.copy()

    for key, value in override_config.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = value

    return merged


def get_config_value(config: Dict[str, Any], key_path: str, default: Any = None) -> Any:
    """
    Get a configuration value using dot notation.

    Args:
        config: Configuration dictionary
        key_path: Dot-separated path to the value (e.g., "network.http_timeout")
        default: Default value if key not found

    Returns:
        Configuration value or default
    """
    keys = key_path.split(".")
    value = config

    try:
        for key in keys:
            value = value[key]
        return value
    except (KeyError, TypeError):
        return default


def set_config_value(config: Dict[str, Any], key_path: str, value: Any) -> None:
    """
    Set a configuration value using dot notation.

    Args:
        config: Configuration dictionary
        key_path: Dot-separated path to the value
        value: Value to set
    """
    keys = key_path.split(".")
    current = config
    for key in keys[:-1]:
        if not isinstance(current.get(key), dict):
            current[key] = {}
        current = current[key]
    current[keys[-1]] = value


def get_environment_config() -> Dict[str, Any]:
    """
    Get configuration values from environment variables.

    Returns:
        Dict containing environment-based configuration
    """
    env_config: Dict[str, Any] = {}

    for var, (key_path, convert) in ENVIRONMENT_OVERRIDES.items():
        value = os.environ.get(var)
        if value is None:
            continue
        try:
            set_config_value(env_config, key_path, convert(value))
        except ValueError:
            logger.warning(f"Ignoring invalid value for {var}: {value}")

    return env_config


def apply_environment_overrides(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Apply environment variable overrides to configuration.

    Args:
        config: Base configuration

    Returns:
        Configuration with environment overrides applied
    """
    env_config = get_environment_config()
    return merge_configs(config, env_config)


def load_settings(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load the collection settings.

    Args:
        config_path: Optional user settings file; SYSSPECTOR_CONFIG is used when omitted

    Returns:
        Merged settings dictionary

    Raises:
        ConfigurationError: If the user settings file is missing or invalid
    """
    settings = load_yaml_config(get_default_config_path())

    user_path = config_path or os.environ.get(CONFIG_ENV_VAR)
    if user_path:
        logger.debug(f"Loading user settings from: {user_path}")
        try:
            user_config = load_yaml_config(user_path)
        except (FileNotFoundError, yaml.YAMLError) as e:
            raise ConfigurationError(str(e)) from e
        if not isinstance(user_config, dict):
            raise ConfigurationError(f"Settings file must contain a mapping: {user_path}")
        settings = merge_configs(settings, user_config)

    return apply_environment_overrides(settings)
