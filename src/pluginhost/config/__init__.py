"""Config package for pluginhost.

Provides settings loading and validation, sensible defaults, and the
persisted plugin Config Document store.
"""
from __future__ import annotations

from pluginhost.config.defaults import DEFAULT_CONFIG
from pluginhost.config.loader import ConfigLoader
from pluginhost.config.schema import HostConfig, validate_config
from pluginhost.config.store import ConfigStore

__all__ = [
    "HostConfig",
    "validate_config",
    "ConfigLoader",
    "ConfigStore",
    "DEFAULT_CONFIG",
]
