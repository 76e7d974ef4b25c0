"""Configuration loading and management for crategate."""

from crategate.kernel.config.loader import ConfigLoader, get_default_config, load_config
from crategate.kernel.config.models import (
    CrateGateConfig,
    GitConfig,
    LoggingConfig,
    MetadataConfig,
    OwnershipPolicy,
    PublishConfig,
    RegistryConfig,
)

__all__ = [
    "ConfigLoader",
    "CrateGateConfig",
    "GitConfig",
    "LoggingConfig",
    "MetadataConfig",
    "OwnershipPolicy",
    "PublishConfig",
    "RegistryConfig",
    "get_default_config",
    "load_config",
]
