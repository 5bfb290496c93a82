"""Settings validation helpers for pluginhost.

Shipped in this module
----------------------
- HostConfig      — re-export with full Pydantic v2 validation
- validate_config — standalone validation helper
"""
from __future__ import annotations

from pydantic import ValidationError

from pluginhost.schema.config import HostConfig
from pluginhost.schema.errors import ConfigurationError

__all__ = ["HostConfig", "validate_config"]


def validate_config(data: dict[str, object]) -> HostConfig:
    """Validate a raw dict against the ``HostConfig`` schema.

    Parameters
    ----------
    data:
        Unvalidated key/value mapping.

    Returns
    -------
    HostConfig

    Raises
    ------
    ConfigurationError
        If the data fails Pydantic validation.  The original
        ``ValidationError`` is attached as the ``__cause__``.

    Examples
    --------
    >>> validate_config({"host_label": "the relay"}).host_label
    'the relay'
    """
    try:
        return HostConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(
            f"Configuration validation failed: {exc}",
            context={"errors": exc.errors()},
        ) from exc
