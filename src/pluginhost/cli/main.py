"""CLI entry point for pluginhost.

Invoked as::

    pluginhost [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m pluginhost.cli.main
"""
from __future__ import annotations

import asyncio
import logging
import sys
from collections.abc import AsyncIterator

import click
from rich.console import Console
from rich.table import Table

from pluginhost.schema.errors import PluginHostError

console = Console()
error_console = Console(stderr=True, style="bold red")


def _manager(ctx: click.Context):  # noqa: ANN202
    from pluginhost.config.loader import ConfigLoader
    from pluginhost.plugins.manager import PluginManager

    if "manager" not in ctx.obj:
        loader = ConfigLoader()
        config_path = ctx.obj.get("config_path")
        try:
            cfg = loader.load_file(config_path) if config_path else loader.load_auto()
            ctx.obj["manager"] = PluginManager(cfg)
        except (PluginHostError, OSError) as exc:
            error_console.print(f"Could not load config: {exc}")
            raise SystemExit(1) from exc
    return ctx.obj["manager"]


async def _relay(stream: AsyncIterator[bytes]) -> None:
    async for chunk in stream:
        sys.stdout.buffer.write(chunk)
        sys.stdout.buffer.flush()


def _run(coro):  # noqa: ANN001, ANN202
    try:
        return asyncio.run(coro)
    except (PluginHostError, OSError) as exc:
        error_console.print(str(exc))
        raise SystemExit(1) from exc


# ---------------------------------------------------------------------------
# Root group
# ---------------------------------------------------------------------------


@click.group()
@click.option(
    "--config",
    "-c",
    "config_path",
    default=None,
    help="Path to a pluginhost settings file (YAML or JSON).",
)
@click.option("--verbose", "-v", is_flag=True, help="Log lifecycle details to stderr.")
@click.version_option(package_name="pluginhost")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """Install, remove and toggle plugins for a host server."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    if verbose:
        logging.basicConfig(
            level=logging.INFO,
            format="%(levelname)s %(name)s: %(message)s",
            stream=sys.stderr,
        )


# ---------------------------------------------------------------------------
# version
# ---------------------------------------------------------------------------


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from pluginhost import __version__

    console.print(f"[bold]pluginhost[/bold] v{__version__}")
    console.print(f"Python {sys.version}")


# ---------------------------------------------------------------------------
# install / uninstall
# ---------------------------------------------------------------------------


@cli.command(name="install")
@click.argument("name")
@click.option("--dry-run", is_flag=True, help="Ask the tool for a dry run; enable nothing.")
@click.pass_context
def install_command(ctx: click.Context, name: str, dry_run: bool) -> None:
    """Install plugin NAME and enable it."""
    manager = _manager(ctx)
    _run(_relay(manager.install(name, dry_run=dry_run)))


@cli.command(name="uninstall")
@click.argument("name")
@click.pass_context
def uninstall_command(ctx: click.Context, name: str) -> None:
    """Remove plugin NAME and disable it."""
    manager = _manager(ctx)
    _run(_relay(manager.uninstall(name)))


# ---------------------------------------------------------------------------
# enable / disable
# ---------------------------------------------------------------------------


@cli.command(name="enable")
@click.argument("name")
@click.pass_context
def enable_command(ctx: click.Context, name: str) -> None:
    """Enable installed plugin NAME."""
    manager = _manager(ctx)
    console.print(_run(manager.enable(name)), markup=False)


@cli.command(name="disable")
@click.argument("name")
@click.pass_context
def disable_command(ctx: click.Context, name: str) -> None:
    """Disable installed plugin NAME."""
    manager = _manager(ctx)
    console.print(_run(manager.disable(name)), markup=False)


# ---------------------------------------------------------------------------
# list
# ---------------------------------------------------------------------------


@cli.command(name="list")
@click.pass_context
def list_command(ctx: click.Context) -> None:
    """List installed plugins and whether they are enabled."""
    manager = _manager(ctx)
    installed = manager.list_installed()

    if not installed:
        console.print(
            "[bold]Installed plugins:[/bold]\n"
            "  [dim](No plugins installed. Use `pluginhost install NAME` to add one.)[/dim]"
        )
        return

    table = Table(title="Installed plugins", header_style="bold cyan")
    table.add_column("Name")
    table.add_column("Enabled")
    for plugin in installed:
        colour = "green" if plugin.enabled else "dim"
        table.add_row(plugin.name, f"[{colour}]{'yes' if plugin.enabled else 'no'}[/{colour}]")
    console.print(table)


if __name__ == "__main__":
    cli()
