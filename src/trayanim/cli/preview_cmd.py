"""Editor preview export."""

from pathlib import Path

import click

from .utils import build_engine, display_path_info, get_paths, handle_generic_error


@click.command()
@click.argument(
    "source", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    required=True,
    help="Where to write the preview PNG",
)
@click.pass_context
def preview(ctx: click.Context, source: Path, output: Path) -> None:
    """Write the full-resolution editor preview of SOURCE as PNG.

    For GIFs this is the first composited frame; crop coordinates passed
    to `save` refer to this image.
    """
    engine = build_engine(get_paths(ctx))
    result = engine.detect_and_load(source.read_bytes())

    if result.image is None:
        handle_generic_error("Preview", ValueError(f"cannot decode {result.format.value} data"))
        return

    output.parent.mkdir(parents=True, exist_ok=True)
    result.image.save(output, format="PNG")
    click.echo(f"🔍 Detected format: {result.format.value}")
    click.echo(f"📐 Canvas: {result.image.width}x{result.image.height}")
    display_path_info("Preview", output, "💾")
