"""Crop, re-encode and store a new tray icon."""

from pathlib import Path

import click

from ..config import DEFAULT_ICON_SIZE, MAX_ICON_SIZE, MIN_ICON_SIZE
from ..resize import CropRect
from .utils import build_engine, display_path_info, get_paths, handle_generic_error


def _parse_crop(ctx: click.Context, param: click.Parameter, value: str) -> CropRect:
    try:
        return CropRect.parse(value)
    except ValueError as e:
        raise click.BadParameter(str(e)) from e


@click.command()
@click.argument(
    "source", type=click.Path(exists=False, dir_okay=False, path_type=Path)
)
@click.option(
    "--crop",
    "-c",
    required=True,
    callback=_parse_crop,
    help="Crop rectangle as X,Y,WIDTH,HEIGHT in source pixels",
)
@click.option(
    "--size",
    "-s",
    type=click.IntRange(MIN_ICON_SIZE, MAX_ICON_SIZE),
    default=DEFAULT_ICON_SIZE,
    show_default=True,
    help="Tray icon display size in pixels",
)
@click.pass_context
def save(ctx: click.Context, source: Path, crop: CropRect, size: int) -> None:
    """Crop SOURCE and store it as the tray icon.

    Animated GIFs are sampled with the active performance profile before
    being re-encoded. The previous icon is kept if anything fails.
    """
    paths = get_paths(ctx)
    engine = build_engine(paths)

    display_path_info("Source", source, "📂")
    click.echo(f"✂️  Crop: {crop.x},{crop.y} {crop.width}x{crop.height}")
    click.echo(f"⚙️  Profile: {engine.profile.label}")

    if not engine.process_and_save(source, crop, size):
        handle_generic_error("Save", RuntimeError("see log for details; stored icon unchanged"))
        return

    click.echo("✅ Saved and applied successfully!")
    display_path_info("Stored asset", paths.ASSET_PATH, "💾")
    click.echo(f"📊 {engine.status_summary()}")
    engine.shutdown()
