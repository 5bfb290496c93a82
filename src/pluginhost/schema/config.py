"""Host configuration schema for pluginhost.

``HostConfig`` is a Pydantic v2 model that acts as the validated boundary
object between raw settings sources (YAML files, environment variables,
in-memory dicts) and the plugin lifecycle machinery.  It describes *where*
plugins live and *how* the external package-fetching tool is invoked; the
enabled/disabled map itself lives in the Config Document managed by
:class:`~pluginhost.config.store.ConfigStore`.

Shipped in this module
----------------------
- HostConfig       — Pydantic v2 model with class-method loaders
- settings_format  — "yaml" or "json" for a settings file path
- env_settings     — raw settings taken from prefixed environment variables
"""
from __future__ import annotations

import json
import os
import shlex
from collections.abc import Callable
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator


_PARSERS: dict[str, Callable[[str], object]] = {
    "yaml": yaml.safe_load,
    "json": json.loads,
}


def settings_format(path: str | Path) -> str:
    """Return the settings format implied by *path*'s suffix."""
    return "json" if Path(path).suffix.lower() == ".json" else "yaml"


def env_settings(prefix: str = "PLUGINHOST_") -> dict[str, str]:
    """Collect ``HostConfig`` fields from environment variables.

    Variables are mapped by stripping *prefix* and lower-casing the
    remainder, so ``PLUGINHOST_INSTALL_ROOT=/srv/host`` maps to
    ``install_root``.  ``PLUGINHOST_INSTALLER_COMMAND`` is later split with
    shell quoting rules by the model.
    """
    return {
        key[len(prefix):].lower(): value
        for key, value in os.environ.items()
        if key.startswith(prefix)
    }


def _default_install_root() -> Path:
    return Path.home() / ".pluginhost"


class HostConfig(BaseModel):
    """Validated settings for the plugin subsystem of a host process.

    Parameters
    ----------
    install_root:
        Directory that holds the Config Document and the module container.
        Defaults to ``~/.pluginhost``.
    config_filename:
        Name of the JSON Config Document under *install_root*.
    modules_dirname:
        Name of the module-container directory under *install_root*.  Each
        immediate subdirectory is one installed plugin.
    installer_command:
        argv prefix of the external package-fetching tool.  The install
        arguments are appended to it.
    host_label:
        How restart notices refer to the host, e.g. ``"the server"``.
    """

    model_config = {"extra": "allow", "validate_assignment": True}

    install_root: Path = Field(default_factory=_default_install_root)
    config_filename: str = Field(default="config")
    modules_dirname: str = Field(default="node_modules")
    installer_command: list[str] = Field(default_factory=lambda: ["npm"])
    host_label: str = Field(default="the server")

    @field_validator("install_root", mode="before")
    @classmethod
    def _expand_install_root(cls, value: Any) -> Any:  # noqa: ANN401
        if isinstance(value, str):
            return Path(value).expanduser()
        if isinstance(value, Path):
            return value.expanduser()
        return value

    @field_validator("installer_command", mode="before")
    @classmethod
    def _split_installer_command(cls, value: Any) -> Any:  # noqa: ANN401
        """Accept a shell-style string as well as a list."""
        if isinstance(value, str):
            return shlex.split(value)
        return value

    @field_validator("installer_command")
    @classmethod
    def _require_installer_command(cls, value: list[str]) -> list[str]:
        if not value or not value[0]:
            raise ValueError("installer_command must name an executable")
        return value

    # ------------------------------------------------------------------
    # Derived paths
    # ------------------------------------------------------------------

    @property
    def config_path(self) -> Path:
        """Path of the persisted Config Document."""
        return self.install_root / self.config_filename

    @property
    def modules_path(self) -> Path:
        """Path of the module-container directory."""
        return self.install_root / self.modules_dirname

    # ------------------------------------------------------------------
    # Class-method loaders
    # ------------------------------------------------------------------

    @classmethod
    def from_file(cls, path: str | Path, fmt: str | None = None) -> "HostConfig":
        """Parse and validate a YAML or JSON settings file.

        Parameters
        ----------
        path:
            Settings file.
        fmt:
            ``"yaml"`` or ``"json"``.  Inferred from the suffix when omitted;
            anything but ``.json`` is read as YAML.

        Raises
        ------
        OSError
            If the file cannot be read.
        UnicodeDecodeError
            If the file is not UTF-8.
        yaml.YAMLError, json.JSONDecodeError
            If the text does not parse.
        ValueError
            If the top level is not a mapping.  An empty file is treated as
            an empty mapping.
        pydantic.ValidationError
            If the parsed data fails validation.
        """
        resolved = Path(path)
        parse = _PARSERS[fmt or settings_format(resolved)]
        raw = parse(resolved.read_text(encoding="utf-8"))
        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            raise ValueError(
                f"top level of {resolved} must be a mapping, not {type(raw).__name__}"
            )
        return cls.model_validate(raw)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "HostConfig":
        """Load and validate settings from a YAML file; see :meth:`from_file`."""
        return cls.from_file(path, "yaml")

    @classmethod
    def from_env(cls, prefix: str = "PLUGINHOST_") -> "HostConfig":
        """Build settings from environment variables.

        See :func:`env_settings` for the variable mapping.
        """
        return cls.model_validate(env_settings(prefix))
