#!/usr/bin/env python3
"""Example: enabling a plugin and loading it at host startup

Creates a throwaway install root, drops a plugin package into the module
directory by hand (standing in for the external tool), enables it through
the PluginManager, then runs the startup PluginLoader against a toy host.

Usage:
    python examples/01_host_startup.py

Requirements:
    pip install pluginhost
"""
from __future__ import annotations

import asyncio
import logging
import tempfile
from pathlib import Path

from pluginhost import HostConfig, PluginLoader, PluginManager

PLUGIN_SOURCE = '''\
name = "greeter"
version = "0.1.0"
manifest = {"greet": "sync"}


def init(host, config):
    return {"greet": lambda who: f"hello, {who}"}
'''


class ToyHost:
    """Collects plugins the way a real server would wire them in."""

    def __init__(self) -> None:
        self.plugins: list[object] = []

    def use(self, plugin: object) -> "ToyHost":
        self.plugins.append(plugin)
        return self


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")

    with tempfile.TemporaryDirectory() as tmp:
        # Step 1: Point the subsystem at an install root
        config = HostConfig(install_root=Path(tmp))
        manager = PluginManager(config)

        # Step 2: Materialise a plugin package in the module directory
        plugin_dir = config.modules_path / "greeter"
        plugin_dir.mkdir()
        (plugin_dir / "__init__.py").write_text(PLUGIN_SOURCE, encoding="utf-8")

        # Step 3: Enable it (a restart would normally follow)
        print(asyncio.run(manager.enable("greeter")))

        # Step 4: "Restart": a fresh loader reads the persisted state
        host = ToyHost()
        report = PluginLoader(config).load_enabled_plugins(host)
        print(f"Loaded: {report.loaded}  skipped: {report.skipped}  failed: {report.failed}")

        api = host.plugins[0].init(host, config)
        print(api["greet"]("world"))


if __name__ == "__main__":
    main()
