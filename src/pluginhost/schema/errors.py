"""Error taxonomy for pluginhost.

Every exception raised by pluginhost derives from ``PluginHostError`` so
that an administrative front-end can catch the whole family with a single
``except PluginHostError`` clause while still telling individual failure
modes apart.

Shipped in this module
----------------------
- ErrorSeverity            — ordered severity enum
- PluginHostError          — root exception with severity and context payload
- ConfigurationError       — bad subsystem settings
- PluginError              — base for plugin lifecycle failures
- PluginNameError          — missing, empty, or escaping plugin name
- PluginNotInstalledError  — toggle on a plugin with no module directory
- InstallError             — external tool reported failure
- UninstallError           — module directory could not be removed
- PluginValidationError    — loaded code does not match the plugin contract
"""
from __future__ import annotations

from enum import Enum


class ErrorSeverity(str, Enum):
    """Ordered severity levels for ``PluginHostError`` instances.

    Severity is advisory metadata only; it lets logging and alerting
    filter by impact without changing how the exception propagates.
    """

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"


class PluginHostError(Exception):
    """Root exception for all pluginhost failures.

    Parameters
    ----------
    message:
        Human-readable description of what went wrong.
    severity:
        Advisory ``ErrorSeverity`` level.  Defaults to ``HIGH``.
    context:
        Optional dict of structured metadata (plugin names, paths, exit
        codes) that helps diagnostics without requiring log scraping.

    Examples
    --------
    >>> try:
    ...     raise PluginHostError("something broke", ErrorSeverity.MEDIUM)
    ... except PluginHostError as exc:
    ...     print(exc.severity.value)
    medium
    """

    def __init__(
        self,
        message: str,
        severity: ErrorSeverity = ErrorSeverity.HIGH,
        context: dict[str, object] | None = None,
    ) -> None:
        super().__init__(message)
        self.severity: ErrorSeverity = severity
        self.context: dict[str, object] = context or {}

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}("
            f"message={str(self)!r}, "
            f"severity={self.severity.value!r})"
        )


class ConfigurationError(PluginHostError):
    """Raised when subsystem settings cannot be loaded or validated.

    Examples: unreadable settings file, bad YAML, empty installer command.
    """


class PluginError(PluginHostError):
    """Raised when a plugin cannot be installed, removed, toggled, or loaded."""


class PluginNameError(PluginError):
    """Raised when a required plugin name is missing or unusable."""

    def __init__(
        self,
        message: str = "plugin name is required",
        context: dict[str, object] | None = None,
    ) -> None:
        super().__init__(message, severity=ErrorSeverity.LOW, context=context)


class PluginNotInstalledError(PluginError):
    """Raised when enabling or disabling a plugin with no module directory."""

    def __init__(self, plugin_name: str) -> None:
        super().__init__(
            f'Plugin "{plugin_name}" is not installed.',
            severity=ErrorSeverity.MEDIUM,
            context={"plugin": plugin_name},
        )
        self.plugin_name = plugin_name


class InstallError(PluginError):
    """Raised as the terminal element of a failed install stream."""


class UninstallError(PluginError):
    """Raised as the terminal element of a failed uninstall stream."""


class PluginValidationError(PluginError):
    """Raised when a loaded module does not satisfy the plugin contract."""
