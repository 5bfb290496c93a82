"""Plugin candidate shapes for pluginhost.

A module discovered at startup is only a *candidate* until it passes the
structural contract.  Two shapes are accepted:

- a bare callable, which the host invokes itself, or
- a structured plugin exposing ``name`` (str), ``version`` (str),
  ``manifest`` (mapping) and ``init`` (callable).  Structured values may
  carry these as attributes (a module, a class instance, a namespace) or
  as mapping keys.

Shipped in this module
----------------------
- CallablePlugin      — the bare-callable variant
- StructuredPlugin    — the ``{name, version, manifest, init}`` variant
- PluginCandidate     — union of both variants
- validate_candidate  — structural check returning the matching variant
"""
from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Union

from pluginhost.schema.errors import PluginValidationError

_MISSING = object()


@dataclass(frozen=True)
class CallablePlugin:
    """A plugin that is itself a callable."""

    target: Callable[..., Any]

    @property
    def kind(self) -> str:
        return "callable"


@dataclass(frozen=True)
class StructuredPlugin:
    """A plugin exposing a name, version, manifest and init entry point."""

    target: object
    name: str
    version: str
    manifest: Mapping[str, object]
    init: Callable[..., Any]

    @property
    def kind(self) -> str:
        return "structured"


PluginCandidate = Union[CallablePlugin, StructuredPlugin]


def _field(obj: object, field: str) -> object:
    if isinstance(obj, Mapping):
        return obj.get(field, _MISSING)
    return getattr(obj, field, _MISSING)


def validate_candidate(obj: object) -> PluginCandidate:
    """Classify *obj* as a plugin candidate or reject it.

    Parameters
    ----------
    obj:
        The value exported by a plugin module.

    Returns
    -------
    PluginCandidate
        ``CallablePlugin`` for callables, ``StructuredPlugin`` otherwise.

    Raises
    ------
    PluginValidationError
        Naming the first field that breaks the contract.

    Examples
    --------
    >>> validate_candidate(lambda host, config: None).kind
    'callable'
    >>> validate_candidate({"name": "x", "version": "1.0.0",
    ...                     "manifest": {}, "init": print}).name
    'x'
    """
    if callable(obj):
        return CallablePlugin(target=obj)

    if obj is None or isinstance(obj, (str, bytes, int, float, bool, list, tuple)):
        raise PluginValidationError(
            "plugin must be a callable or an object",
            context={"type": type(obj).__name__},
        )

    name = _field(obj, "name")
    if not isinstance(name, str):
        raise PluginValidationError("plugin.name must be a string")
    version = _field(obj, "version")
    if not isinstance(version, str):
        raise PluginValidationError("plugin.version must be a string")
    manifest = _field(obj, "manifest")
    if not isinstance(manifest, Mapping):
        raise PluginValidationError("plugin.manifest must be an object")
    init = _field(obj, "init")
    if not callable(init):
        raise PluginValidationError("plugin.init must be a function")

    return StructuredPlugin(
        target=obj,
        name=name,
        version=version,
        manifest=manifest,
        init=init,
    )
