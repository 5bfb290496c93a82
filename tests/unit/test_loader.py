"""Unit tests for pluginhost.plugins.loader."""
from __future__ import annotations

import json
import logging
import sys
import textwrap
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from pluginhost.config.store import ConfigStore
from pluginhost.plugins.candidate import CallablePlugin, StructuredPlugin
from pluginhost.plugins.loader import PluginLoader
from pluginhost.schema.config import HostConfig
from pluginhost.schema.errors import PluginError, PluginValidationError

_CALLABLE_PLUGIN = """\
def plugin(host, config):
    return {"started": True}
"""

_STRUCTURED_PLUGIN = """\
name = "structured"
version = "2.0.0"
manifest = {"ping": "async"}


def init(host, config):
    return {"ping": lambda: "pong"}
"""

_NO_INIT_PLUGIN = """\
name = "no-init"
version = "0.0.1"
manifest = {}
"""


def _write_plugin(config: HostConfig, name: str, source: str) -> Path:
    plugin_dir = config.modules_path / name
    plugin_dir.mkdir(parents=True, exist_ok=True)
    (plugin_dir / "__init__.py").write_text(textwrap.dedent(source), encoding="utf-8")
    return plugin_dir


def _enable(config: HostConfig, plugins: dict[str, bool]) -> ConfigStore:
    config.config_path.parent.mkdir(parents=True, exist_ok=True)
    config.config_path.write_text(json.dumps({"plugins": plugins}), encoding="utf-8")
    return ConfigStore(config.config_path)


@pytest.fixture()
def config(tmp_path: Path) -> HostConfig:
    return HostConfig(install_root=tmp_path)


# ---------------------------------------------------------------------------
# load_enabled_plugins
# ---------------------------------------------------------------------------


class TestLoadEnabledPlugins:
    def test_missing_module_directory_loads_nothing(self, config: HostConfig) -> None:
        host = MagicMock()
        report = PluginLoader(config).load_enabled_plugins(host)
        assert report.loaded == [] and report.skipped == [] and report.failed == {}
        host.use.assert_not_called()

    def test_one_valid_one_invalid_one_disabled(
        self, config: HostConfig, caplog: pytest.LogCaptureFixture
    ) -> None:
        _write_plugin(config, "good", _CALLABLE_PLUGIN)
        _write_plugin(config, "wrong-shape", _NO_INIT_PLUGIN)
        _write_plugin(config, "off", _CALLABLE_PLUGIN)
        store = _enable(config, {"good": True, "wrong-shape": True, "off": False})
        host = MagicMock()

        with caplog.at_level(logging.INFO, logger="pluginhost.plugins.loader"):
            report = PluginLoader(config, store).load_enabled_plugins(host)

        assert host.use.call_count == 1
        assert report.loaded == ["good"]
        assert report.skipped == ["off"]
        assert list(report.failed) == ["wrong-shape"]
        assert "init" in report.failed["wrong-shape"]

        errors = [r for r in caplog.records if r.levelno == logging.ERROR]
        skips = [r for r in caplog.records if "Skipping disabled plugin" in r.getMessage()]
        assert len(errors) == 1
        assert "wrong-shape" in errors[0].getMessage()
        assert len(skips) == 1

    def test_host_receives_the_exported_callable(self, config: HostConfig) -> None:
        _write_plugin(config, "callable-export", _CALLABLE_PLUGIN)
        store = _enable(config, {"callable-export": True})
        host = MagicMock()

        PluginLoader(config, store).load_enabled_plugins(host)

        (plugin,), _ = host.use.call_args
        assert callable(plugin)
        assert plugin(None, None) == {"started": True}

    def test_host_receives_structured_module(self, config: HostConfig) -> None:
        _write_plugin(config, "structured-export", _STRUCTURED_PLUGIN)
        store = _enable(config, {"structured-export": True})
        host = MagicMock()

        report = PluginLoader(config, store).load_enabled_plugins(host)

        assert report.loaded == ["structured-export"]
        (plugin,), _ = host.use.call_args
        assert plugin.name == "structured"
        assert plugin.manifest == {"ping": "async"}

    def test_unknown_plugins_are_skipped_without_import(self, config: HostConfig) -> None:
        _write_plugin(config, "never-enabled", "raise RuntimeError('must not import')\n")
        host = MagicMock()

        report = PluginLoader(config, _enable(config, {})).load_enabled_plugins(host)

        assert report.skipped == ["never-enabled"]
        assert report.failed == {}

    def test_hidden_entries_are_ignored(self, config: HostConfig) -> None:
        _write_plugin(config, ".cache", _CALLABLE_PLUGIN)
        host = MagicMock()

        report = PluginLoader(config, _enable(config, {".cache": True})).load_enabled_plugins(host)

        assert report.loaded == [] and report.skipped == []
        host.use.assert_not_called()

    def test_import_errors_do_not_stop_the_scan(self, config: HostConfig) -> None:
        _write_plugin(config, "a-syntax", "def broken(:\n")
        _write_plugin(config, "b-raises", "raise ImportError('missing dependency')\n")
        (config.modules_path / "c-empty").mkdir(parents=True)
        _write_plugin(config, "d-good", _CALLABLE_PLUGIN)
        store = _enable(
            config, {"a-syntax": True, "b-raises": True, "c-empty": True, "d-good": True}
        )
        host = MagicMock()

        report = PluginLoader(config, store).load_enabled_plugins(host)

        assert report.loaded == ["d-good"]
        assert sorted(report.failed) == ["a-syntax", "b-raises", "c-empty"]
        assert "missing dependency" in report.failed["b-raises"]
        assert "entry point" in report.failed["c-empty"]

    def test_host_failure_is_isolated(self, config: HostConfig) -> None:
        _write_plugin(config, "first", _CALLABLE_PLUGIN)
        _write_plugin(config, "second", _CALLABLE_PLUGIN)
        store = _enable(config, {"first": True, "second": True})
        host = MagicMock()
        host.use.side_effect = [RuntimeError("duplicate method"), None]

        report = PluginLoader(config, store).load_enabled_plugins(host)

        assert report.loaded == ["second"]
        assert report.failed == {"first": "duplicate method"}

    def test_failed_plugins_do_not_stay_in_sys_modules(self, config: HostConfig) -> None:
        # Sorted order: sm-kept, sm-refused, sm-rejected.
        _write_plugin(config, "sm-kept", _CALLABLE_PLUGIN)
        _write_plugin(config, "sm-refused", _CALLABLE_PLUGIN)
        _write_plugin(config, "sm-rejected", _NO_INIT_PLUGIN)
        store = _enable(config, {"sm-kept": True, "sm-refused": True, "sm-rejected": True})
        host = MagicMock()
        host.use.side_effect = [None, RuntimeError("refused")]

        report = PluginLoader(config, store).load_enabled_plugins(host)

        assert report.loaded == ["sm-kept"]
        assert set(report.failed) == {"sm-refused", "sm-rejected"}
        assert "_pluginhost_plugin_sm_kept" in sys.modules
        assert "_pluginhost_plugin_sm_refused" not in sys.modules
        assert "_pluginhost_plugin_sm_rejected" not in sys.modules


# ---------------------------------------------------------------------------
# load_candidate
# ---------------------------------------------------------------------------


class TestLoadCandidate:
    def test_callable_export(self, config: HostConfig) -> None:
        _write_plugin(config, "lc-callable", _CALLABLE_PLUGIN)
        assert isinstance(PluginLoader(config).load_candidate("lc-callable"), CallablePlugin)

    def test_module_as_structured_plugin(self, config: HostConfig) -> None:
        _write_plugin(config, "lc-structured", _STRUCTURED_PLUGIN)
        candidate = PluginLoader(config).load_candidate("lc-structured")
        assert isinstance(candidate, StructuredPlugin)
        assert candidate.version == "2.0.0"

    def test_missing_init_rejected(self, config: HostConfig) -> None:
        _write_plugin(config, "lc-no-init", _NO_INIT_PLUGIN)
        with pytest.raises(PluginValidationError):
            PluginLoader(config).load_candidate("lc-no-init")
        assert "_pluginhost_plugin_lc_no_init" not in sys.modules

    def test_missing_entry_point(self, config: HostConfig) -> None:
        (config.modules_path / "lc-empty").mkdir(parents=True)
        with pytest.raises(PluginError, match="entry point"):
            PluginLoader(config).load_candidate("lc-empty")

    def test_package_can_import_its_own_submodules(self, config: HostConfig) -> None:
        plugin_dir = _write_plugin(
            config,
            "lc-relative",
            "from .impl import plugin\n",
        )
        (plugin_dir / "impl.py").write_text(
            "def plugin(host, config):\n    return 'from-submodule'\n", encoding="utf-8"
        )
        candidate = PluginLoader(config).load_candidate("lc-relative")
        assert candidate.target(None, None) == "from-submodule"
