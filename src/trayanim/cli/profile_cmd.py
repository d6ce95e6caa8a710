"""Performance profile listing and selection."""

import click
from rich.console import Console
from rich.table import Table

from ..profiles import PROFILES
from .utils import build_engine, get_paths


@click.command()
@click.argument("name", required=False, type=click.Choice(sorted(PROFILES)))
@click.pass_context
def profile(ctx: click.Context, name: str | None) -> None:
    """List performance profiles, or select NAME.

    A new selection applies the next time the icon is saved or reloaded.
    """
    engine = build_engine(get_paths(ctx))

    if name is not None:
        selected = engine.select_profile(name)
        click.echo(f"✅ Performance mode set to {selected.label}")
        click.echo("ℹ️  Save or reload the icon to apply it")
        return

    table = Table(title="⚙️  Performance Modes", show_header=True, header_style="bold magenta")
    table.add_column("Mode", style="cyan", no_wrap=True)
    table.add_column("Max frames", justify="right")
    table.add_column("Min delay", justify="right")
    table.add_column("Quality")
    table.add_column("Memory", style="dim")
    table.add_column("Active", justify="center")

    for candidate in engine.profiles:
        active = "✅" if candidate.name == engine.profile.name else ""
        table.add_row(
            candidate.name,
            str(candidate.max_frames),
            f"{candidate.min_frame_delay} ms",
            candidate.quality.value,
            candidate.description,
            active,
        )

    Console().print(table)
