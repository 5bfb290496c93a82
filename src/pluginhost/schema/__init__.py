"""Schema package for pluginhost: settings model and error taxonomy."""
from __future__ import annotations

from pluginhost.schema.config import HostConfig
from pluginhost.schema.errors import (
    ConfigurationError,
    ErrorSeverity,
    InstallError,
    PluginError,
    PluginHostError,
    PluginNameError,
    PluginNotInstalledError,
    PluginValidationError,
    UninstallError,
)

__all__ = [
    "HostConfig",
    "ErrorSeverity",
    "PluginHostError",
    "ConfigurationError",
    "PluginError",
    "PluginNameError",
    "PluginNotInstalledError",
    "InstallError",
    "UninstallError",
    "PluginValidationError",
]
