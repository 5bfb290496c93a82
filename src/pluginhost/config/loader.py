"""Settings loader for pluginhost.

``ConfigLoader`` is the operator-facing front of ``HostConfig``: it picks
the settings file (an explicit path, or the first one discovered in a
directory), overlays ``PLUGINHOST_*`` environment variables, and turns
every way a settings source can be broken into ``ConfigurationError``.

Settings files are explicit operator input, so a missing or malformed one
raises.  The persisted plugin Config Document is a different thing and
fails soft; see :mod:`pluginhost.config.store`.

Shipped in this module
----------------------
- ConfigLoader   — file / env / auto-discovered settings with error translation
"""
from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import yaml
from pydantic import ValidationError

from pluginhost.config.defaults import DEFAULT_CONFIG
from pluginhost.config.schema import validate_config
from pluginhost.schema.config import HostConfig, env_settings, settings_format
from pluginhost.schema.errors import ConfigurationError

logger = logging.getLogger(__name__)

# Visible names first, then hidden ones; YAML before JSON within each.
_AUTO_SEARCH_PATHS: tuple[str, ...] = tuple(
    f"{prefix}pluginhost{suffix}"
    for prefix in ("", ".")
    for suffix in (".yaml", ".yml", ".json")
)


class ConfigLoader:
    """Loads ``HostConfig`` from settings files and the environment.

    Examples
    --------
    >>> loader = ConfigLoader()
    >>> loader.load_env(prefix="NO_SUCH_PREFIX_").modules_dirname
    'node_modules'
    """

    def load_file(self, path: str | Path, fmt: str | None = None) -> HostConfig:
        """Load settings from a YAML or JSON file.

        The format follows the suffix unless *fmt* names it.

        Raises
        ------
        ConfigurationError
            If the file is missing, unreadable, not UTF-8, does not parse,
            or fails validation.  The underlying error is the ``__cause__``.
        """
        resolved = Path(path)
        fmt = fmt or settings_format(resolved)
        context = {"path": str(resolved), "format": fmt}
        try:
            config = HostConfig.from_file(resolved, fmt)
        except FileNotFoundError as exc:
            raise ConfigurationError(
                f"Settings file not found: {resolved}", context=context
            ) from exc
        except ValidationError as exc:
            raise ConfigurationError(
                f"Invalid settings in {resolved}: {exc}", context=context
            ) from exc
        except OSError as exc:
            raise ConfigurationError(
                f"Could not read settings file {resolved}: {exc}", context=context
            ) from exc
        except (ValueError, yaml.YAMLError) as exc:
            # Covers undecodable bytes and JSON syntax errors as well.
            raise ConfigurationError(
                f"Failed to parse {fmt.upper()} settings at {resolved}: {exc}",
                context=context,
            ) from exc
        logger.debug("Loaded %s settings from %s", fmt, resolved)
        return config

    def load_yaml(self, path: str | Path) -> HostConfig:
        return self.load_file(path, "yaml")

    def load_json(self, path: str | Path) -> HostConfig:
        return self.load_file(path, "json")

    def load_env(self, prefix: str = "PLUGINHOST_") -> HostConfig:
        """Build settings from environment variables alone.

        See :func:`~pluginhost.schema.config.env_settings` for the mapping.
        """
        try:
            config = HostConfig.from_env(prefix=prefix)
        except ValueError as exc:
            raise ConfigurationError(
                f"Invalid environment configuration: {exc}",
                context={"prefix": prefix},
            ) from exc
        logger.debug("Loaded settings from environment with prefix %r", prefix)
        return config

    def discover(self, search_dir: str | Path | None = None) -> Iterator[Path]:
        """Yield existing settings files in *search_dir*, in preference order."""
        base_dir = Path(search_dir) if search_dir is not None else Path.cwd()
        for file_name in _AUTO_SEARCH_PATHS:
            candidate = base_dir / file_name
            if candidate.is_file():
                yield candidate

    def load_auto(
        self,
        search_dir: str | Path | None = None,
        env_prefix: str = "PLUGINHOST_",
    ) -> HostConfig:
        """Resolve settings without an explicit file.

        The first discovered settings file that loads cleanly wins; broken
        ones are logged and passed over.  With none, ``DEFAULT_CONFIG`` is
        the base.  Environment variables under *env_prefix* then override
        individual fields.
        """
        config = DEFAULT_CONFIG
        source = "built-in defaults"
        for candidate in self.discover(search_dir):
            try:
                config = self.load_file(candidate)
            except ConfigurationError as exc:
                logger.warning("Skipping settings file %s: %s", candidate, exc)
                continue
            source = str(candidate)
            break

        overrides = env_settings(env_prefix)
        if overrides:
            config = validate_config({**config.model_dump(), **overrides})
            source += f" with {len(overrides)} environment override(s)"
        logger.info("Using pluginhost settings from %s", source)
        return config
