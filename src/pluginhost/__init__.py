"""pluginhost — install, toggle and load optional plugins for a host server.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Quick-start
-----------
>>> import pluginhost
>>> pluginhost.__version__
'0.1.0'

>>> import tempfile, pathlib
>>> config = pluginhost.HostConfig(install_root=pathlib.Path(tempfile.mkdtemp()))
>>> manager = pluginhost.PluginManager(config)
>>> manager.list_installed()
[]
"""
from __future__ import annotations

__version__: str = "0.1.0"

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------
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

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------
from pluginhost.config.defaults import DEFAULT_CONFIG
from pluginhost.config.loader import ConfigLoader
from pluginhost.config.store import ConfigStore

# ---------------------------------------------------------------------------
# Plugins
# ---------------------------------------------------------------------------
from pluginhost.plugins.candidate import (
    CallablePlugin,
    PluginCandidate,
    StructuredPlugin,
    validate_candidate,
)
from pluginhost.plugins.loader import LoadReport, PluginHost, PluginLoader
from pluginhost.plugins.manager import InstalledPlugin, PluginManager
from pluginhost.plugins.streams import collect

__all__ = [
    "__version__",
    # Schema
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
    # Config
    "DEFAULT_CONFIG",
    "ConfigLoader",
    "ConfigStore",
    # Plugins
    "CallablePlugin",
    "StructuredPlugin",
    "PluginCandidate",
    "validate_candidate",
    "PluginHost",
    "LoadReport",
    "PluginLoader",
    "InstalledPlugin",
    "PluginManager",
    "collect",
]
