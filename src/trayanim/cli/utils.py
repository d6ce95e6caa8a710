"""Shared utilities for CLI commands."""

import sys
from pathlib import Path

import click

from ..config import PathConfig, load_settings
from ..engine import AnimationEngine
from ..scheduler import IconSurface, TimerFactory


def handle_generic_error(command_name: str, error: Exception) -> None:
    """Handle generic command errors with consistent formatting."""
    click.echo(f"❌ {command_name} failed: {error}", err=True)
    sys.exit(1)


def display_path_info(label: str, path: Path, emoji: str = "📁") -> None:
    """Display path information with consistent formatting."""
    click.echo(f"{emoji} {label}: {path}")


def get_paths(ctx: click.Context) -> PathConfig:
    """Return the PathConfig stored on the root command context."""
    return ctx.find_root().obj["paths"]


def build_engine(
    paths: PathConfig,
    surface: IconSurface | None = None,
    timer_factory: TimerFactory | None = None,
) -> AnimationEngine:
    """Create an engine with settings loaded from ``paths``."""
    return AnimationEngine(
        paths=paths,
        settings=load_settings(paths.SETTINGS_PATH),
        surface=surface,
        timer_factory=timer_factory,
    )


class RecordingSurface:
    """Headless icon surface that remembers every image it was given."""

    def __init__(self) -> None:
        self.images = []

    def set_image(self, image) -> None:
        self.images.append(image)
