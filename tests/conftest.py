"""Shared fixtures for the pluginhost test suite."""
from __future__ import annotations

import sys
import textwrap
from collections.abc import Callable
from pathlib import Path

import pytest

from pluginhost.config.store import ConfigStore
from pluginhost.schema.config import HostConfig

_TOOL_TEMPLATE = """\
import json
import os
import subprocess
import sys
import time

with open({record!r}, "w", encoding="utf-8") as fh:
    json.dump({{"argv": sys.argv[1:], "cwd": os.getcwd()}}, fh)

for line in {stderr!r}:
    sys.stderr.write(line)
    sys.stderr.flush()

time.sleep({sleep!r})

if {linger!r}:
    # A child keeps stdout open after this process has exited.
    subprocess.Popen([sys.executable, "-c", {linger_code!r}])
else:
    sys.stdout.write({stdout!r})
    sys.stdout.flush()

sys.exit({exit_code!r})
"""


@pytest.fixture()
def host_config(tmp_path: Path) -> HostConfig:
    return HostConfig(install_root=tmp_path / "root", installer_command=["false-tool"])


@pytest.fixture()
def store(host_config: HostConfig) -> ConfigStore:
    return ConfigStore(host_config.config_path)


@pytest.fixture()
def make_tool(tmp_path: Path) -> Callable[..., tuple[list[str], Path]]:
    """Write a stand-in for the external tool.

    Returns the command prefix and the file where the tool records the
    arguments and working directory it was run with.
    """

    def factory(
        stdout: str = "",
        stderr: list[str] | None = None,
        exit_code: int = 0,
        linger: float = 0.0,
        sleep: float = 0.0,
    ) -> tuple[list[str], Path]:
        script = tmp_path / "fake_tool.py"
        record = tmp_path / "fake_tool_args.json"
        linger_code = textwrap.dedent(
            f"""
            import sys, time
            time.sleep({linger!r})
            sys.stdout.write({stdout!r})
            sys.stdout.flush()
            """
        )
        script.write_text(
            _TOOL_TEMPLATE.format(
                record=str(record),
                stderr=list(stderr or []),
                stdout=stdout,
                exit_code=exit_code,
                linger=linger,
                linger_code=linger_code,
                sleep=sleep,
            ),
            encoding="utf-8",
        )
        return [sys.executable, str(script)], record

    return factory

