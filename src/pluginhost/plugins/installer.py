"""Install orchestration for pluginhost.

Runs the external package-fetching tool as a subprocess and turns its
activity into one ordered byte stream:

1. an ``Installing "<identifier>"...`` status line,
2. the tool's standard error, relayed chunk by chunk as it arrives,
3. one completion message, or the terminal ``InstallError``.

The completion element needs two independent events: the process exit
(its return code) and the end of its standard output (the structured
report naming the installed module).  These arrive in either order, so a
:class:`Countdown` of two resolves the completion only once both are in.

Shipped in this module
----------------------
- Countdown             — fan-in barrier firing once after N arrivals
- build_install_args    — argv tail for the external tool
- resolve_module_name   — canonical name and version from the tool report
- Installer             — spawns the tool and builds the output stream
"""
from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import posixpath
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass

from pluginhost.config.store import ConfigStore
from pluginhost.plugins.names import require_plugin_name
from pluginhost.plugins.streams import error_stream
from pluginhost.schema.config import HostConfig
from pluginhost.schema.errors import InstallError, PluginNameError

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 4096


class Countdown:
    """Fire *on_complete* exactly once, after ``count`` calls to :meth:`arrive`.

    Arrival order does not matter.  Arriving after completion is a bug in
    the caller and raises ``RuntimeError``.

    Examples
    --------
    >>> fired = []
    >>> barrier = Countdown(2, lambda: fired.append(True))
    >>> barrier.arrive()
    >>> fired
    []
    >>> barrier.arrive()
    >>> fired
    [True]
    """

    def __init__(self, count: int, on_complete: Callable[[], None]) -> None:
        if count < 1:
            raise ValueError("count must be at least 1")
        self._remaining = count
        self._on_complete = on_complete

    @property
    def remaining(self) -> int:
        return self._remaining

    @property
    def done(self) -> bool:
        return self._remaining == 0

    def arrive(self) -> None:
        if self._remaining == 0:
            raise RuntimeError("Countdown already completed")
        self._remaining -= 1
        if self._remaining == 0:
            self._on_complete()


@dataclass(frozen=True)
class ToolResult:
    """What the external tool left behind once it exited and closed stdout."""

    returncode: int
    stdout: bytes


def build_install_args(identifier: str, dry_run: bool = False) -> list[str]:
    """Return the tool arguments that install *identifier* into the install root."""
    # --global-style: no top-level dedup, so each plugin keeps its own tree
    # --loglevel error: only errors reach the relayed stderr
    # --json: structured stdout, read back for the installed module name
    args = ["install", identifier, "--global-style", "--loglevel", "error", "--json"]
    if dry_run:
        args.append("--dry-run")
    return args


def resolve_module_name(stdout: str, identifier: str) -> tuple[str, str]:
    """Work out which module the tool installed.

    The tool's structured report carries a ``dependencies`` object keyed
    by installed module name; the first key wins and its ``version`` is
    returned alongside.  When the report is unusable the last path segment
    of *identifier* stands in, with an empty version.

    Examples
    --------
    >>> resolve_module_name('{"dependencies": {"foo": {"version": "1.2.3"}}}', "foo")
    ('foo', '1.2.3')
    >>> resolve_module_name("not json", "https://example.com/org/bar.git/")
    ('bar.git', '')
    """
    try:
        report = json.loads(stdout)
    except ValueError:
        report = None

    dependencies = report.get("dependencies") if isinstance(report, dict) else None
    if isinstance(dependencies, dict) and dependencies:
        name = next(iter(dependencies))
        if isinstance(name, str) and name:
            details = dependencies[name]
            version = details.get("version") if isinstance(details, dict) else None
            return name, version if isinstance(version, str) else ""

    return posixpath.basename(identifier.rstrip("/")) or identifier, ""


class Installer:
    """Installs plugins by driving the external package-fetching tool.

    Parameters
    ----------
    config:
        Host settings; supplies the install root, the tool command and the
        host label used in restart notices.
    store:
        Config Store that records the installed plugin as enabled.
    """

    def __init__(self, config: HostConfig, store: ConfigStore) -> None:
        self._config = config
        self._store = store

    def command_for(self, identifier: str, dry_run: bool = False) -> list[str]:
        return [*self._config.installer_command, *build_install_args(identifier, dry_run)]

    def install(self, identifier: str, dry_run: bool = False) -> AsyncIterator[bytes]:
        """Install *identifier* and stream the tool's progress.

        An empty or non-string *identifier* yields a stream that fails
        immediately with ``PluginNameError``; no process is spawned.  A dry
        run relays the tool's output but never enables anything.
        """
        try:
            require_plugin_name(identifier)
        except PluginNameError as exc:
            return error_stream(exc)
        return self._run(identifier, dry_run)

    async def _run(self, identifier: str, dry_run: bool) -> AsyncIterator[bytes]:
        yield f'Installing "{identifier}"...\n'.encode("utf-8")

        command = self.command_for(identifier, dry_run)
        logger.info("Running %s in %s", command, self._config.install_root)
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                cwd=self._config.install_root,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise InstallError(
                f'"{identifier}" failed to install: could not run {command[0]!r}: {exc}',
                context={"plugin": identifier, "command": command},
            ) from exc

        completion: asyncio.Future[ToolResult] = asyncio.get_running_loop().create_future()
        outcome: dict[str, object] = {}

        def resolve() -> None:
            if not completion.done():
                completion.set_result(
                    ToolResult(
                        returncode=outcome["returncode"],  # type: ignore[arg-type]
                        stdout=outcome["stdout"],  # type: ignore[arg-type]
                    )
                )

        barrier = Countdown(2, resolve)

        def arrival(key: str) -> Callable[[asyncio.Task[object]], None]:
            def on_done(task: asyncio.Task[object]) -> None:
                if task.cancelled():
                    return
                exc = task.exception()
                if exc is not None:
                    if not completion.done():
                        completion.set_exception(exc)
                    return
                outcome[key] = task.result()
                barrier.arrive()

            return on_done

        exit_task = asyncio.create_task(process.wait())
        stdout_task = asyncio.create_task(process.stdout.read())  # type: ignore[union-attr]
        exit_task.add_done_callback(arrival("returncode"))
        stdout_task.add_done_callback(arrival("stdout"))

        try:
            while True:
                chunk = await process.stderr.read(_CHUNK_SIZE)  # type: ignore[union-attr]
                if not chunk:
                    break
                yield chunk
            result = await completion
        finally:
            if process.returncode is None:
                with contextlib.suppress(ProcessLookupError):
                    process.kill()
            for task in (exit_task, stdout_task):
                if not task.done():
                    task.cancel()

        if result.returncode != 0 and not dry_run:
            logger.warning("Install of %r exited with code %s", identifier, result.returncode)
            raise InstallError(
                f'"{identifier}" failed to install. See log output above.',
                context={"plugin": identifier, "returncode": result.returncode},
            )
        if dry_run:
            logger.info("Dry run of %r finished with code %s", identifier, result.returncode)
            return

        name, version = resolve_module_name(
            result.stdout.decode("utf-8", errors="replace"), identifier
        )
        try:
            await asyncio.to_thread(self._store.set_plugin_enabled, name, True)
        except OSError as exc:
            raise InstallError(
                f'"{name}" was installed but could not be enabled: {exc}',
                context={"plugin": name, "path": str(self._store.path)},
            ) from exc

        display = f"{name}@{version}" if version else name
        logger.info("Installed plugin %s", display)
        yield (
            f'"{display}" has been installed. '
            f"Restart {self._config.host_label} to enable the plugin.\n"
        ).encode("utf-8")
