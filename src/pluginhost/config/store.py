"""Persisted plugin state for pluginhost.

The Config Document is a JSON object at a well-known path under the
install root.  The plugin subsystem owns only its top-level ``plugins``
field, a mapping of plugin name to enabled flag; every other field belongs
to the host and must survive each write untouched.

``ConfigStore`` pairs that document with an in-memory mirror of the
``plugins`` map.  The mirror is what the current process decides with;
the file is what the next process starts from.

Shipped in this module
----------------------
- ConfigStore   — read-merge-write access plus the in-memory enabled map

Concurrency
-----------
Mutations within one process are serialised through a single lock, and
each write lands atomically via a temporary file renamed over the target.
Two host processes writing the same document still race with
last-write-wins semantics.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path

logger = logging.getLogger(__name__)

PLUGINS_FIELD = "plugins"


class ConfigStore:
    """Read-modify-write access to the plugin Config Document.

    Parameters
    ----------
    path:
        Location of the JSON Config Document.  It need not exist yet.

    Examples
    --------
    >>> import tempfile, pathlib
    >>> tmp = pathlib.Path(tempfile.mkdtemp())
    >>> store = ConfigStore(tmp / "config")
    >>> store.set_plugin_enabled("echo", True)
    >>> store.is_enabled("echo")
    True
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._lock = threading.Lock()
        self._enabled: dict[str, bool] = {}
        self.reload()

    @property
    def path(self) -> Path:
        return self._path

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def read(self) -> dict[str, object]:
        """Load and parse the Config Document.

        A missing, unreadable, or unparsable file (or one whose top level
        is not a JSON object) yields an empty document.  This never raises.
        """
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug("Config document %s does not exist yet", self._path)
            return {}
        except OSError as exc:
            logger.warning("Could not read config document %s: %s", self._path, exc)
            return {}
        except UnicodeDecodeError as exc:
            logger.warning("Ignoring undecodable config document %s: %s", self._path, exc)
            return {}
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as exc:
            logger.warning("Ignoring unparsable config document %s: %s", self._path, exc)
            return {}
        return raw if isinstance(raw, dict) else {}

    def reload(self) -> None:
        """Re-initialise the in-memory mirror from the persisted document."""
        plugins = self.read().get(PLUGINS_FIELD)
        mirror: dict[str, bool] = {}
        if isinstance(plugins, dict):
            mirror = {str(name): bool(value) for name, value in plugins.items()}
        with self._lock:
            self._enabled = mirror

    # ------------------------------------------------------------------
    # In-memory mirror
    # ------------------------------------------------------------------

    @property
    def enabled(self) -> dict[str, bool]:
        """Copy of the in-memory enabled map."""
        with self._lock:
            return dict(self._enabled)

    def is_enabled(self, name: str) -> bool:
        with self._lock:
            return bool(self._enabled.get(name))

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    def set_plugin_enabled(self, name: str, enabled: bool) -> None:
        """Record *enabled* for *name* in memory and on disk.

        Performs a full read-merge-write of the document: unrelated
        top-level fields are preserved and a missing or malformed
        ``plugins`` field is replaced with a fresh mapping.

        Raises
        ------
        OSError
            If the document cannot be written.
        """
        with self._lock:
            document = self.read()
            plugins = document.get(PLUGINS_FIELD)
            if not isinstance(plugins, dict):
                plugins = {}
            plugins[name] = enabled
            document[PLUGINS_FIELD] = plugins
            self._write(document)
            self._enabled[name] = enabled
        logger.debug("Set plugin %r enabled=%s in %s", name, enabled, self._path)

    def _write(self, document: dict[str, object]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(document, indent=2) + "\n"
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self._path.name}.", suffix=".tmp", dir=self._path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def __repr__(self) -> str:
        return f"ConfigStore(path={str(self._path)!r}, plugins={self.enabled!r})"
