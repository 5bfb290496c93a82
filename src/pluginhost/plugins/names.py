"""Plugin name checks shared by the lifecycle operations."""
from __future__ import annotations

import os
from pathlib import Path

from pluginhost.schema.errors import PluginNameError

HIDDEN_PREFIX = "."


def require_plugin_name(value: object) -> str:
    """Return *value* if it is a non-empty string, else raise ``PluginNameError``."""
    if not isinstance(value, str) or not value:
        raise PluginNameError()
    return value


def module_directory(container: Path, name: str) -> Path:
    """Return the Module Directory path for *name* inside *container*.

    The check is lexical so that symlinked Module Directories still count
    as inside the container.

    Raises
    ------
    PluginNameError
        If *name* is empty or would point outside *container* (absolute
        paths, ``..`` segments).
    """
    require_plugin_name(name)
    root = Path(os.path.abspath(container))
    candidate = Path(os.path.normpath(os.path.join(root, name)))
    if candidate == root or root not in candidate.parents:
        raise PluginNameError(
            f'plugin name "{name}" does not name a module directory',
            context={"plugin": name},
        )
    return container / name
