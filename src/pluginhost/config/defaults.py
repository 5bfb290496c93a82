"""Default settings for pluginhost.

``DEFAULT_CONFIG`` is the baseline used by ``ConfigLoader.load_auto()``
before file or environment overrides are applied.
"""
from __future__ import annotations

from pluginhost.schema.config import HostConfig

DEFAULT_CONFIG: HostConfig = HostConfig()
"""Baseline ``HostConfig`` used when no settings file or env var is present."""
