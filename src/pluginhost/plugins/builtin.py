"""The plugin manager, shaped as a plugin.

This module satisfies the structured plugin contract itself, so a host
registers plugin administration the same way it registers any other
plugin: ``host.use(pluginhost.plugins.builtin)``.  ``init`` returns the
:class:`~pluginhost.plugins.manager.PluginManager` whose methods back the
manifest below.

Only a ``master`` caller may invoke any of the four operations; how a host
identifies that caller is up to the host.
"""
from __future__ import annotations

from collections.abc import Mapping

from pluginhost.config.schema import validate_config
from pluginhost.plugins.manager import PluginManager
from pluginhost.schema.config import HostConfig

name = "plugins"
version = "1.0.0"

# "source" methods return a byte stream; "async" methods return one value.
manifest: dict[str, str] = {
    "install": "source",
    "uninstall": "source",
    "enable": "async",
    "disable": "async",
}

permissions: dict[str, dict[str, list[str]]] = {
    "master": {"allow": ["install", "uninstall", "enable", "disable"]},
}


def init(host: object, config: HostConfig | Mapping[str, object]) -> PluginManager:
    """Create the manager for *host* from *config* (a model or raw mapping)."""
    if not isinstance(config, HostConfig):
        config = validate_config(dict(config))
    return PluginManager(config)
