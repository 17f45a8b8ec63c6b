"""docsite-modules command line - inspect how module requests resolve."""

from __future__ import annotations

import sys
from pathlib import Path

import click
from rich.table import Table

from .console import console
from .console import error_console
from .logging_setup import init_json_logging
from .module_resolution import ModuleLoadError
from .module_resolution import ModuleResolver
from .module_resolution import ResolutionError
from .module_resolution import get_markdown_it_resolver
from .module_resolution import get_plugin_resolver
from .module_resolution import get_theme_resolver
from .settings import load_module_settings
from .ui import display_resolution_error

RESOLVER_FACTORIES = {
    "plugin": get_plugin_resolver,
    "theme": get_theme_resolver,
    "markdown-it": get_markdown_it_resolver,
}

kind_option = click.option(
    "--kind",
    "-k",
    type=click.Choice(list(RESOLVER_FACTORIES)),
    default="plugin",
    help="Module kind to resolve",
)
cwd_option = click.option(
    "--cwd",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=Path("."),
    help="Project directory (default: current directory)",
)
org_option = click.option("--org", "organization", default=None, help="Override the default organization")


def create_resolver(kind: str, cwd: Path, organization: str | None = None, load: bool = False) -> ModuleResolver:
    """Build the resolver for a kind from project settings plus CLI overrides."""
    project_dir = cwd.resolve()
    settings = load_module_settings(project_dir)
    updates: dict = {"auto_load": load}
    if organization is not None:
        updates["organization"] = organization
    return RESOLVER_FACTORIES[kind](project_dir, settings.model_copy(update=updates))


@click.group(invoke_without_command=True)
@click.option("--log-file", type=click.Path(dir_okay=False), default=None, help="Write JSONL diagnostics to a file")
@click.option("--log-level", default=None, help="Log level for --log-file (default: DOCSITE_LOG_LEVEL or INFO)")
@click.pass_context
def cli(ctx: click.Context, log_file: str | None, log_level: str | None):
    """Inspect how site plugins and themes resolve."""
    if log_file:
        init_json_logging(log_file, log_level)

    if ctx.invoked_subcommand is None:
        click.echo("\n" + ctx.get_help())
        ctx.exit()


@cli.command()
@click.argument("request")
@kind_option
@cwd_option
@org_option
@click.option("--load", is_flag=True, help="Import the resolved module")
@click.option("--verbose", "-v", is_flag=True, help="Show traceback on errors")
def resolve(request: str, kind: str, cwd: Path, organization: str | None, load: bool, verbose: bool):
    """Resolve REQUEST and show the module descriptor."""
    resolver = create_resolver(kind, cwd, organization, load)

    try:
        module = resolver.resolve(request)
    except (ResolutionError, ModuleLoadError) as e:
        display_resolution_error(error_console, e, verbose=verbose)
        sys.exit(1)

    if module.is_empty:
        console.print("[yellow]No module requested[/yellow]")
        return

    table = Table(title=f"{kind} '{request}'", show_header=True, header_style="bold cyan")
    table.add_column("Field", style="green")
    table.add_column("Value")

    for field, value in module.to_dict().items():
        table.add_row(field, "[dim]-[/dim]" if value is None else str(value))

    console.print(table)


@cli.command()
@click.argument("request")
@kind_option
@cwd_option
@org_option
def candidates(request: str, kind: str, cwd: Path, organization: str | None):
    """List the package names probed for REQUEST, in order."""
    resolver = create_resolver(kind, cwd, organization)
    normalized = resolver.normalize_name(request)

    table = Table(title=f"Probe order for {kind} '{request}'", show_header=True, header_style="bold cyan")
    table.add_column("#", style="dim")
    table.add_column("Package", style="green")

    for i, name in enumerate(resolver.candidates(request), 1):
        table.add_row(str(i), name)

    console.print(table)
    console.print(f"[dim]Shortcut: {normalized.shortcut}[/dim]")


@cli.command("settings")
@cwd_option
def show_settings(cwd: Path):
    """Show effective module settings for a project."""
    settings = load_module_settings(cwd.resolve())

    table = Table(title="Module Settings", show_header=True, header_style="bold cyan")
    table.add_column("Setting", style="green")
    table.add_column("Value")

    table.add_row("organization", settings.organization)
    table.add_row("bundled_paths", ", ".join(settings.bundled_paths) or "[dim](none)[/dim]")
    table.add_row("auto_load", "[dim](kind default)[/dim]" if settings.auto_load is None else str(settings.auto_load))

    console.print(table)


def main():
    cli()


if __name__ == "__main__":
    main()
