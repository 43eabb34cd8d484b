"""
Configuration manager for the MEV alert network.

This module provides a centralized way to access all configuration settings
across the application. It combines all configuration classes into a single
easy-to-use interface.
"""

import logging
from typing import Any, Dict

from .base import BaseConfig, ConfigError
from .hook_config import HookConfig
from .nats_config import NatsConfig

logger = logging.getLogger(__name__)


class ConfigManager:
    """
    Centralized configuration manager that combines all configuration classes.

    This class provides easy access to all configuration settings and ensures
    that configurations are properly initialized and validated.
    """

    def __init__(self, environment: str = None):
        """
        Initialize the configuration manager.

        Args:
            environment: Override the environment (local, dev, staging, production, test)
        """
        self._environment = environment
        self._base_config = None
        self._hook_config = None
        self._nats_config = None
        self._initialize_configs()

    def _initialize_configs(self):
        """Initialize all configuration objects."""
        try:
            # Initialize base configuration first
            self._base_config = BaseConfig()
            if self._environment:
                self._base_config.ENVIRONMENT = self._environment

            self._hook_config = HookConfig()
            self._nats_config = NatsConfig()
            if self._environment:
                self._hook_config.ENVIRONMENT = self._environment
                self._nats_config.ENVIRONMENT = self._environment

            logger.info(f"Configuration initialized for environment: {self.environment}")

        except Exception as e:
            logger.error(f"Failed to initialize configuration: {e}")
            raise ConfigError(f"Configuration initialization failed: {e}") from e

    @property
    def environment(self) -> str:
        """Get current environment."""
        return self._base_config.ENVIRONMENT

    @property
    def base(self) -> BaseConfig:
        """Get base configuration."""
        return self._base_config

    @property
    def hook(self) -> HookConfig:
        """Get hook deployment configuration."""
        return self._hook_config

    @property
    def nats(self) -> NatsConfig:
        """Get NATS configuration."""
        return self._nats_config

    def get_nats_publishing_config(self) -> Dict[str, Any]:
        """
        Get NATS publishing configuration for the hook event relay.

        Returns:
            NATS configuration dictionary
        """
        return {
            "enabled": self.nats.NATS_ENABLED,
            "url": self.nats.get_nats_url(),
            "stream_name": self.nats.STREAM_NAME,
            "subjects": self.nats.stream_subjects,
            "connection_params": self.nats.connection_params,
            "jetstream_config": self.nats.jetstream_config,
        }

    def validate_configuration(self) -> bool:
        """
        Validate all configuration settings.

        Returns:
            True if all configurations are valid

        Raises:
            ConfigError: If any configuration is invalid
        """
        try:
            self.hook._validate_config()

            if self.nats.NATS_ENABLED and not self.nats.get_nats_url().startswith("nats://"):
                raise ConfigError(f"Invalid NATS URL: {self.nats.get_nats_url()}")

            if not self.hook.ORACLE_SIGNERS:
                logger.warning("No oracle signers configured, signed fee recommendations will be rejected")

            logger.info("Configuration validation successful")
            return True

        except Exception as e:
            logger.error(f"Configuration validation failed: {e}")
            raise ConfigError(f"Configuration validation failed: {e}") from e

    def to_dict(self) -> Dict[str, Any]:
        """Convert all configurations to dictionary format."""
        return {
            "environment": self.environment,
            "base": self.base.to_dict() if self.base else {},
            "hook": self.hook.to_dict() if self.hook else {},
            "nats": self.nats.to_dict() if self.nats else {},
        }

    def __repr__(self) -> str:
        """String representation of the configuration manager."""
        return f"ConfigManager(environment={self.environment})"


# Global configuration manager instance
_config_manager = None


def get_config(environment: str = None, force_reload: bool = False) -> ConfigManager:
    """
    Get the global configuration manager instance.

    Args:
        environment: Override environment
        force_reload: Force reload of configuration

    Returns:
        ConfigManager instance
    """
    global _config_manager

    if _config_manager is None or force_reload:
        _config_manager = ConfigManager(environment=environment)
        _config_manager.validate_configuration()

    return _config_manager


def reload_config(environment: str = None) -> ConfigManager:
    """
    Reload the global configuration manager.

    Args:
        environment: Override environment

    Returns:
        New ConfigManager instance
    """
    return get_config(environment=environment, force_reload=True)
