"""Configuration management for miiovac."""

import os
from pathlib import Path
from typing import Any

import yaml


def load_config(config_path: str | None = None) -> dict[str, Any]:
    """Load configuration from file or environment."""
    default_config = {
        "vacuum": {
            "monitor_interval": 60,  # Seconds between full property polls
            "refresh_delay": 1.0,  # Seconds before re-reading state after start/stop/charge
            "call_timeout": 10.0,  # Seconds to wait for each remote call
        },
        "logging": {
            "level": "INFO",
            "file": None,  # Log to this file as well when set
            "max_size": "10MB",
            "backup_count": 5,
        },
    }

    if config_path is None:
        config_path = os.environ.get("MIIOVAC_CONFIG")
        if config_path is None:
            for candidate in ["config.yaml", "config.local.yaml"]:
                if Path(candidate).exists():
                    config_path = candidate
                    break
            else:
                config_path = "config.yaml"  # Default even if doesn't exist

    config_file = Path(config_path)
    user_config = {}

    if config_file.exists():
        with open(config_file) as f:
            user_config = yaml.safe_load(f) or {}

    return _deep_merge(default_config, user_config)


def save_config(config: dict[str, Any], config_path: str = "config.yaml") -> None:
    """Save configuration to YAML file."""
    with open(config_path, "w") as f:
        yaml.dump(config, f, default_flow_style=False, indent=2)


def _deep_merge(base: dict, override: dict) -> dict:
    """Deep merge two dictionaries."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result
