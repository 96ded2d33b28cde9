"""
remote-bridge Configuration

This module provides configuration management for queues and logging.
Includes default configuration, environment-based settings, and validation.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml


@dataclass
class BridgeConfig:
    """Main configuration class for remote-bridge components"""

    # Logging
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    use_structlog: bool = True

    # Operation queue
    queue_name: str = "remote"
    max_concurrent_operations: Optional[int] = None  # None means unbounded
    default_barrier: bool = False

    # Custom settings
    custom: Dict[str, Any] = field(default_factory=dict)


def get_default_config() -> BridgeConfig:
    """Get default remote-bridge configuration"""
    return BridgeConfig()


def load_config_from_file(config_path: Union[str, Path]) -> BridgeConfig:
    """
    Load configuration from a JSON or YAML file

    Args:
        config_path: Path to configuration file

    Returns:
        BridgeConfig instance
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        if config_path.suffix.lower() in [".yaml", ".yml"]:
            data = yaml.safe_load(f)
        elif config_path.suffix.lower() == ".json":
            data = json.load(f)
        else:
            raise ValueError(f"Unsupported config file format: {config_path.suffix}")

    return _config_from_dict(data or {})


def _parse_bool(value: str) -> bool:
    return value.lower() in ["true", "1", "yes"]


def _parse_optional_int(value: str) -> Optional[int]:
    if value.strip().lower() in ["", "none", "unbounded"]:
        return None
    return int(value)


def load_config_from_env() -> BridgeConfig:
    """
    Load configuration from environment variables

    Environment variables are prefixed with REMOTE_BRIDGE_
    For example: REMOTE_BRIDGE_LOG_LEVEL=DEBUG, REMOTE_BRIDGE_MAX_CONCURRENT_OPERATIONS=4

    Returns:
        BridgeConfig instance
    """
    config = BridgeConfig()

    env_mappings = {
        "REMOTE_BRIDGE_LOG_LEVEL": ("log_level", str),
        "REMOTE_BRIDGE_LOG_FORMAT": ("log_format", str),
        "REMOTE_BRIDGE_USE_STRUCTLOG": ("use_structlog", _parse_bool),
        "REMOTE_BRIDGE_QUEUE_NAME": ("queue_name", str),
        "REMOTE_BRIDGE_MAX_CONCURRENT_OPERATIONS": (
            "max_concurrent_operations",
            _parse_optional_int,
        ),
        "REMOTE_BRIDGE_DEFAULT_BARRIER": ("default_barrier", _parse_bool),
    }

    for env_var, (attr_name, converter) in env_mappings.items():
        value = os.getenv(env_var)
        if value is not None:
            try:
                converted_value = converter(value)
                setattr(config, attr_name, converted_value)
            except (ValueError, TypeError) as e:
                raise ValueError(f"Invalid value for {env_var}: {value}. Error: {e}")

    return config


def merge_configs(
    base_config: BridgeConfig, override_config: Dict[str, Any]
) -> BridgeConfig:
    """
    Merge override values into a BridgeConfig instance

    Args:
        base_config: Base configuration
        override_config: Override values as dictionary

    Returns:
        Merged BridgeConfig instance
    """
    config_dict = _config_to_dict(base_config)
    merged_dict = _deep_merge(config_dict, override_config)
    return _config_from_dict(merged_dict)


def validate_config(config: BridgeConfig) -> List[str]:
    """
    Validate configuration and return list of issues

    Args:
        config: Configuration to validate

    Returns:
        List of validation error messages (empty if valid)
    """
    issues = []

    if config.max_concurrent_operations is not None and config.max_concurrent_operations <= 0:
        issues.append("max_concurrent_operations must be positive or None")

    if not config.queue_name:
        issues.append("queue_name must not be empty")

    valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    if config.log_level.upper() not in valid_log_levels:
        issues.append(
            f"Invalid log_level: {config.log_level}. Must be one of {valid_log_levels}"
        )

    return issues


def _config_to_dict(config: BridgeConfig) -> Dict[str, Any]:
    """Convert BridgeConfig to dictionary"""
    return {
        field_name: getattr(config, field_name)
        for field_name in config.__dataclass_fields__
    }


def _config_from_dict(data: Dict[str, Any]) -> BridgeConfig:
    """Create BridgeConfig from dictionary"""
    known = set(BridgeConfig.__dataclass_fields__)
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown configuration keys: {unknown}")
    return BridgeConfig(**data)


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge two dictionaries"""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result
