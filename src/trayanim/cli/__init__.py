"""CLI module for TrayAnim commands.

The commands form a headless shell over :class:`trayanim.engine.AnimationEngine`,
standing in for the tray and editor windows.
"""

from pathlib import Path

import click

from ..config import PathConfig
from ..io import setup_logging
from .info_cmd import info
from .play_cmd import play, reload
from .preview_cmd import preview
from .profile_cmd import profile
from .save_cmd import save


@click.group()
@click.version_option(version="0.1.0", prog_name="trayanim")
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory holding the stored asset and settings (default: ~/.trayanim)",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Logging verbosity",
)
@click.pass_context
def main(ctx: click.Context, data_dir: Path | None, log_level: str) -> None:
    """🎞️ TrayAnim — animated tray icons from GIF, PNG and JPEG."""
    paths = PathConfig(DATA_DIR=data_dir)
    setup_logging(paths.LOGS_DIR, log_level)
    ctx.ensure_object(dict)
    ctx.obj["paths"] = paths


main.add_command(info)
main.add_command(preview)
main.add_command(save)
main.add_command(profile)
main.add_command(reload)
main.add_command(play)

__all__ = [
    "info",
    "main",
    "play",
    "preview",
    "profile",
    "reload",
    "save",
]
