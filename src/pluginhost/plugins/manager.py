"""Administrative plugin operations for pluginhost.

``PluginManager`` is the surface an administrative command layer calls:
install, uninstall, enable and disable.  Each one mutates the Config Store
and, for install and uninstall, the module-container directory.  None of
them touch the running host; every confirmation says a restart is needed.

Shipped in this module
----------------------
- InstalledPlugin   — one Module Directory and its enabled flag
- PluginManager     — install / uninstall / enable / disable / list
"""
from __future__ import annotations

import asyncio
import logging
import shutil
from collections.abc import AsyncIterator
from dataclasses import dataclass
from pathlib import Path

from pluginhost.config.store import ConfigStore
from pluginhost.plugins.installer import Installer
from pluginhost.plugins.names import HIDDEN_PREFIX, module_directory
from pluginhost.plugins.streams import error_stream
from pluginhost.schema.config import HostConfig
from pluginhost.schema.errors import (
    PluginNameError,
    PluginNotInstalledError,
    UninstallError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InstalledPlugin:
    """A Module Directory present on disk."""

    name: str
    enabled: bool
    path: Path


def _remove_tree(path: Path) -> None:
    # Removing something already gone is a success, as with ``rm -rf``.
    if path.is_symlink() or path.is_file():
        path.unlink(missing_ok=True)
        return
    try:
        shutil.rmtree(path)
    except FileNotFoundError:
        pass


class PluginManager:
    """Install, remove and toggle plugins for one host.

    The module-container directory is created on construction if absent.

    Parameters
    ----------
    config:
        Host settings.
    store:
        Config Store to mutate.  Defaults to a store over
        ``config.config_path``.

    Examples
    --------
    >>> import asyncio, tempfile, pathlib
    >>> manager = PluginManager(HostConfig(install_root=pathlib.Path(tempfile.mkdtemp())))
    >>> manager.list_installed()
    []
    """

    def __init__(self, config: HostConfig, store: ConfigStore | None = None) -> None:
        self._config = config
        self._store = store if store is not None else ConfigStore(config.config_path)
        config.modules_path.mkdir(parents=True, exist_ok=True)
        self._installer = Installer(config, self._store)

    @property
    def config(self) -> HostConfig:
        return self._config

    @property
    def store(self) -> ConfigStore:
        return self._store

    # ------------------------------------------------------------------
    # Install / uninstall
    # ------------------------------------------------------------------

    def install(self, name: str, dry_run: bool = False) -> AsyncIterator[bytes]:
        """Stream an install of *name*; see :meth:`Installer.install`."""
        return self._installer.install(name, dry_run=dry_run)

    def uninstall(self, name: str) -> AsyncIterator[bytes]:
        """Remove the Module Directory for *name* and mark it disabled.

        The stream carries one completion message.  A failed removal ends
        the stream with ``UninstallError`` and leaves the Config Store
        untouched.  An invalid *name* fails the stream before any I/O.
        """
        try:
            path = module_directory(self._config.modules_path, name)
        except PluginNameError as exc:
            return error_stream(exc)
        return self._uninstall(name, path)

    async def _uninstall(self, name: str, path: Path) -> AsyncIterator[bytes]:
        try:
            await asyncio.to_thread(_remove_tree, path)
        except OSError as exc:
            logger.warning("Could not remove %s: %s", path, exc)
            raise UninstallError(
                f'"{name}" failed to uninstall: {exc}',
                context={"plugin": name, "path": str(path)},
            ) from exc

        await asyncio.to_thread(self._store.set_plugin_enabled, name, False)
        logger.info("Uninstalled plugin %r", name)
        yield (
            f'"{name}" has been uninstalled. '
            f"Restart {self._config.host_label} to disable the plugin.\n"
        ).encode("utf-8")

    # ------------------------------------------------------------------
    # Enable / disable
    # ------------------------------------------------------------------

    async def set_enabled(self, name: str, enabled: bool) -> str:
        """Flip the enabled flag for an installed plugin.

        Returns
        -------
        str
            Confirmation noting that a restart is required.

        Raises
        ------
        PluginNameError
            If *name* is empty or not a plain module name.
        PluginNotInstalledError
            If no Module Directory exists for *name*; nothing is written.
        """
        path = module_directory(self._config.modules_path, name)
        if not await asyncio.to_thread(path.is_dir):
            raise PluginNotInstalledError(name)

        await asyncio.to_thread(self._store.set_plugin_enabled, name, enabled)
        logger.info("Plugin %r %s", name, "enabled" if enabled else "disabled")
        label = self._config.host_label
        if enabled:
            return f"'{name}' has been enabled. Restart {label} to use the plugin."
        return f"'{name}' has been disabled. Restart {label} to stop using the plugin."

    async def enable(self, name: str) -> str:
        return await self.set_enabled(name, True)

    async def disable(self, name: str) -> str:
        return await self.set_enabled(name, False)

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    def is_installed(self, name: str) -> bool:
        try:
            return module_directory(self._config.modules_path, name).is_dir()
        except PluginNameError:
            return False

    def list_installed(self) -> list[InstalledPlugin]:
        """Return every visible Module Directory, sorted by name."""
        modules_path = self._config.modules_path
        if not modules_path.is_dir():
            return []
        return [
            InstalledPlugin(
                name=entry.name,
                enabled=self._store.is_enabled(entry.name),
                path=entry,
            )
            for entry in sorted(modules_path.iterdir())
            if entry.is_dir() and not entry.name.startswith(HIDDEN_PREFIX)
        ]

    def __repr__(self) -> str:
        return f"PluginManager(install_root={str(self._config.install_root)!r})"
