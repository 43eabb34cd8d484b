"""
Configuration management for the MEV alert network.

Use get_config() to access all configuration settings.

Example:
    from mevalert.config import get_config

    config = get_config()

    # Hook parameters
    params = config.hook.hook_parameters()

    # Relay settings
    nats_url = config.nats.get_nats_url()
"""

from .base import BaseConfig, ConfigError
from .hook_config import HookConfig
from .manager import ConfigManager, get_config, reload_config
from .nats_config import NatsConfig

__all__ = [
    "BaseConfig",
    "ConfigError",
    "HookConfig",
    "NatsConfig",
    "ConfigManager",
    "get_config",
    "reload_config",
]
