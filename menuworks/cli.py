from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import questionary
import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .config import ConfigError, MenuTree, current_platform, load_config, validate_theme, write_default_config
from .logging import setup_logging
from .settings import load_settings
from .tui.navigator import build_disabled, build_hotkeys

logger = logging.getLogger("menuworks.cli")

app = typer.Typer(
    add_completion=False,
    help="menuworks: a retro, keyboard-driven terminal launcher",
    rich_markup_mode="rich",
)
console = Console()

CONFIG_OPTION_HELP = "Menu document to use (defaults to MENUWORKS_CONFIG)"


def _config_path(config: Optional[Path]) -> Path:
    if config is not None:
        return config.expanduser()
    return load_settings().MENUWORKS_CONFIG


def _load_or_exit(path: Path) -> MenuTree:
    try:
        tree, created = load_config(path)
    except ConfigError as exc:
        console.print(f"[red]✗ Invalid configuration:[/red] {path}")
        for err in exc.errors:
            console.print(f"  [red]•[/red] {err}")
        raise typer.Exit(code=1)
    if created:
        console.print(f"[yellow]No config found; wrote the default to[/yellow] [cyan]{path}[/cyan]")
    return tree


# ═══════════════════════════════════════════════════════════════════════════════
# MAIN CALLBACK
# ═══════════════════════════════════════════════════════════════════════════════

@app.callback(invoke_without_command=True)
def _root(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(None, "--config", "-c", help=CONFIG_OPTION_HELP),
):
    """
    [bold]menuworks[/bold]: hierarchical menus that run shell commands.

    [dim]Run without arguments to launch the menu.[/dim]

    [bold]Quick Commands:[/bold]
      menuworks validate    Check the menu document
      menuworks init        Write the default menu document
      menuworks tree        Show every menu and item
    """
    if ctx.invoked_subcommand is None:
        _interactive_menu(config)
        raise typer.Exit(code=0)


# ═══════════════════════════════════════════════════════════════════════════════
# COMMANDS
# ═══════════════════════════════════════════════════════════════════════════════

@app.command("validate", help="[bold cyan]V[/bold cyan]alidate the menu document")
def validate(
    config: Optional[Path] = typer.Option(None, "--config", "-c", help=CONFIG_OPTION_HELP),
):
    """Load and validate the menu document, then print theme warnings."""
    path = _config_path(config)
    tree = _load_or_exit(path)

    warnings = validate_theme(tree)
    for warning in warnings:
        console.print(f"[yellow]⚠[/yellow] {warning}")

    console.print(Panel.fit(
        "\n".join([
            f"[bold]File:[/bold]         {path}",
            f"[bold]Root items:[/bold]   {len(tree.items)}",
            f"[bold]Named menus:[/bold]  {len(tree.menus)}",
            f"[bold]Theme:[/bold]        {tree.theme or '[dim](default)[/dim]'}",
        ]),
        title="[bold green]✓ Configuration OK[/bold green]",
    ))


@app.command("init", help="Write the default menu document")
def init(
    config: Optional[Path] = typer.Option(None, "--config", "-c", help=CONFIG_OPTION_HELP),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing file without asking"),
):
    """Write the bundled default menu document."""
    path = _config_path(config)

    if path.exists() and not force:
        overwrite = questionary.confirm(
            f"{path} already exists. Overwrite it?",
            default=False,
        ).ask()
        if not overwrite:
            console.print("[dim]Left the existing file untouched.[/dim]")
            raise typer.Exit(code=0)

    try:
        write_default_config(path)
    except OSError as exc:
        console.print(f"[red]✗ Failed to write {path}:[/red] {exc}")
        raise typer.Exit(code=1)
    console.print(f"[green]✓[/green] Default config written: [cyan]{path}[/cyan]")


@app.command("tree", help="Show every menu and item")
def tree(
    config: Optional[Path] = typer.Option(None, "--config", "-c", help=CONFIG_OPTION_HELP),
    platform: Optional[str] = typer.Option(None, "--platform", help="Platform to check commands against"),
):
    """Print the menu tree with hotkeys and disabled items for this platform."""
    settings = load_settings()
    menu_tree = _load_or_exit(_config_path(config))
    platform = (platform or settings.MENUWORKS_PLATFORM or "").strip().lower() or current_platform()
    disabled = build_disabled(menu_tree, platform)

    t = Table(title=f"[bold]{menu_tree.title or 'Menu Tree'}[/bold] [dim]({platform})[/dim]")
    t.add_column("Menu", style="cyan")
    t.add_column("#", justify="right")
    t.add_column("Kind")
    t.add_column("Key", style="bold yellow", justify="center")
    t.add_column("Label")
    t.add_column("Detail", style="dim")

    for name in menu_tree.menu_names():
        items = menu_tree.menu(name).items
        hotkeys = {idx: letter for letter, idx in build_hotkeys(items).items()}
        for i, item in enumerate(items):
            if item.type == "separator":
                t.add_row(name, str(i), "[dim]separator[/dim]", "", "", "")
                continue

            detail = ""
            if item.type == "submenu":
                detail = f"→ {item.target}"
            elif item.type == "command":
                detail = item.exec.command_for(platform)

            reason = disabled.get((name, i))
            if reason is not None:
                detail = f"[red]disabled: {reason.value}[/red]"

            t.add_row(name, str(i), item.type, hotkeys.get(i, ""), item.label, detail)

    console.print(t)


@app.command("version", help="Show the installed version")
def version():
    console.print(f"menuworks {__version__}")


# ═══════════════════════════════════════════════════════════════════════════════
# INTERACTIVE MENU
# ═══════════════════════════════════════════════════════════════════════════════

def _interactive_menu(config: Optional[Path] = None) -> None:
    """Launch the full-screen menu."""
    from .tui.input import InputPoller
    from .tui.router import Router
    # Import screens to register them
    from .tui import screens  # noqa: F401

    overrides = {"MENUWORKS_CONFIG": config} if config is not None else {}
    settings = load_settings(**overrides)
    log_file = setup_logging(settings)
    logger.info("starting menuworks %s with config %s (log=%s)", __version__, settings.MENUWORKS_CONFIG, log_file)

    poller = InputPoller().start()
    router = Router(
        console=console,
        settings=settings,
        events=poller.events,
    )

    try:
        router.run()
    except KeyboardInterrupt:
        logger.info("interrupted")
    finally:
        poller.stop()
        console.clear()
    console.print("[dim]Goodbye![/dim]")


def main():
    app()
