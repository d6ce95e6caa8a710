"""Metadata report for an image file or the stored asset."""

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from ..error_handling import TrayAnimError
from ..meta import extract_asset_metadata
from .utils import get_paths, handle_generic_error


@click.command()
@click.argument(
    "path",
    required=False,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.pass_context
def info(ctx: click.Context, path: Path | None) -> None:
    """Show format, size and frame information for PATH.

    PATH defaults to the stored tray icon asset. The format is always
    detected from the file contents, never from its extension.
    """
    target = path or get_paths(ctx).ASSET_PATH
    try:
        metadata = extract_asset_metadata(target)
    except (TrayAnimError, OSError) as e:
        handle_generic_error("Info", e)
        return

    table = Table(title=f"🖼️  {metadata.filename}", show_header=True, header_style="bold magenta")
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Value")

    table.add_row("Format", metadata.format.value)
    table.add_row("Dimensions", f"{metadata.width}x{metadata.height}")
    table.add_row("Frames", str(metadata.frame_count))
    table.add_row("Duration", f"{metadata.total_duration_ms} ms")
    if metadata.loop_count is not None:
        loops = "infinite" if metadata.loop_count == 0 else str(metadata.loop_count)
        table.add_row("Loop", loops)
    table.add_row("Size", f"{metadata.kilobytes:.1f} KB")
    table.add_row("SHA256", metadata.sha256)

    Console().print(table)
