"""Startup plugin loader for pluginhost.

Runs once per host process.  Enumerates the module-container directory,
skips hidden entries and plugins the Config Store does not enable, imports
each remaining Module Directory as a Python package, validates what it
exports against the plugin contract, and hands valid plugins to the host.

A broken plugin is logged and skipped; it never aborts the scan.

Shipped in this module
----------------------
- PluginHost     — protocol for the host's ``use(plugin)`` registration sink
- LoadReport     — what one scan loaded, skipped and rejected
- PluginLoader   — the scan itself

Extension points
----------------
Plugins run in-process and unsigned, and there is no hot reload;
a restart is always required after a lifecycle change.
"""
from __future__ import annotations

import importlib.util
import logging
import re
import sys
from dataclasses import dataclass, field
from pathlib import Path
from types import ModuleType
from typing import Protocol

from pluginhost.config.store import ConfigStore
from pluginhost.plugins.candidate import PluginCandidate, validate_candidate
from pluginhost.plugins.names import HIDDEN_PREFIX
from pluginhost.schema.config import HostConfig
from pluginhost.schema.errors import PluginError, PluginValidationError

logger = logging.getLogger(__name__)

_MODULE_PREFIX = "_pluginhost_plugin_"
_EXPORT_ATTRIBUTE = "plugin"


def _module_name(plugin_name: str) -> str:
    return _MODULE_PREFIX + re.sub(r"\W", "_", plugin_name)


class PluginHost(Protocol):
    """Anything that can register a validated plugin."""

    def use(self, plugin: object) -> object: ...


@dataclass
class LoadReport:
    """Outcome of one :meth:`PluginLoader.load_enabled_plugins` scan."""

    loaded: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)


class PluginLoader:
    """Discovers, validates and registers enabled plugins.

    Parameters
    ----------
    config:
        Host settings; supplies the module-container path.
    store:
        Config Store whose in-memory enabled map decides what loads.
        Defaults to a store over ``config.config_path``.

    Examples
    --------
    >>> import tempfile, pathlib
    >>> root = pathlib.Path(tempfile.mkdtemp())
    >>> loader = PluginLoader(HostConfig(install_root=root))
    >>> class Host:
    ...     def use(self, plugin): pass
    >>> loader.load_enabled_plugins(Host()).loaded
    []
    """

    def __init__(self, config: HostConfig, store: ConfigStore | None = None) -> None:
        self._config = config
        self._store = store if store is not None else ConfigStore(config.config_path)

    def load_enabled_plugins(self, host: PluginHost) -> LoadReport:
        """Load every enabled plugin into *host*.

        A missing module-container directory yields an empty report.
        """
        report = LoadReport()
        modules_path = self._config.modules_path
        logger.info("Loading plugins from %s", modules_path)
        try:
            entries = sorted(entry.name for entry in modules_path.iterdir())
        except FileNotFoundError:
            logger.debug("Module directory %s does not exist; nothing to load.", modules_path)
            return report
        except NotADirectoryError:
            logger.warning("Module path %s is not a directory; nothing to load.", modules_path)
            return report

        for name in entries:
            if name.startswith(HIDDEN_PREFIX):
                continue
            if not self._store.is_enabled(name):
                logger.info("Skipping disabled plugin %r", name)
                report.skipped.append(name)
                continue

            logger.info("Loading plugin %r", name)
            try:
                candidate = self.load_candidate(name)
                host.use(candidate.target)
            except Exception as exc:
                sys.modules.pop(_module_name(name), None)
                logger.error("Error loading plugin %r: %s", name, exc)
                report.failed[name] = str(exc)
                continue
            report.loaded.append(name)

        return report

    def load_candidate(self, name: str) -> PluginCandidate:
        """Import the Module Directory *name* and validate what it exports.

        The export is the module's ``plugin`` attribute when defined,
        otherwise the module object itself.

        Raises
        ------
        PluginError
            If the directory has no ``__init__.py`` entry point.
        PluginValidationError
            If the export does not match the plugin contract.
        Exception
            Whatever the plugin's own code raises while importing.
        """
        module = self._import_plugin_module(name, self._config.modules_path / name)
        exported = getattr(module, _EXPORT_ATTRIBUTE, module)
        try:
            return validate_candidate(exported)
        except PluginValidationError:
            sys.modules.pop(module.__name__, None)
            raise

    def _import_plugin_module(self, name: str, plugin_dir: Path) -> ModuleType:
        entry_point = plugin_dir / "__init__.py"
        if not entry_point.is_file():
            raise PluginError(
                f"no entry point found at {entry_point}",
                context={"plugin": name, "path": str(entry_point)},
            )

        module_name = _module_name(name)
        spec = importlib.util.spec_from_file_location(
            module_name,
            entry_point,
            submodule_search_locations=[str(plugin_dir)],
        )
        if spec is None or spec.loader is None:
            raise PluginError(
                f"Could not create module spec for {entry_point}.",
                context={"plugin": name, "path": str(entry_point)},
            )

        module = importlib.util.module_from_spec(spec)
        # Registered before exec so the package can import its own submodules.
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except BaseException:
            sys.modules.pop(module_name, None)
            raise
        return module
