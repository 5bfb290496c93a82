"""Plugin subsystem for pluginhost.

Two halves that never talk in-process:

- administration (:class:`PluginManager`) installs, removes and toggles
  plugins on demand, writing the Config Store and the module directory;
- startup (:class:`PluginLoader`) reads both once per host process and
  registers the enabled, well-formed plugins with the host.

Example — a plugin package
--------------------------
A Module Directory is a Python package.  Its ``__init__.py`` either
defines ``plugin`` or exposes the structured fields itself::

    name = "echo"
    version = "0.1.0"
    manifest = {"echo": "async"}

    def init(host, config):
        return {"echo": lambda text: text}
"""
from __future__ import annotations

from pluginhost.plugins.candidate import (
    CallablePlugin,
    PluginCandidate,
    StructuredPlugin,
    validate_candidate,
)
from pluginhost.plugins.installer import (
    Countdown,
    Installer,
    build_install_args,
    resolve_module_name,
)
from pluginhost.plugins.loader import LoadReport, PluginHost, PluginLoader
from pluginhost.plugins.manager import InstalledPlugin, PluginManager
from pluginhost.plugins.streams import collect

__all__ = [
    "CallablePlugin",
    "StructuredPlugin",
    "PluginCandidate",
    "validate_candidate",
    "Countdown",
    "Installer",
    "build_install_args",
    "resolve_module_name",
    "PluginHost",
    "LoadReport",
    "PluginLoader",
    "InstalledPlugin",
    "PluginManager",
    "collect",
]
