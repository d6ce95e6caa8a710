"""Reload and dry-run playback of the stored icon."""

import click
from rich.console import Console
from rich.table import Table

from ..scheduler import ManualTimerFactory
from .utils import RecordingSurface, build_engine, get_paths, handle_generic_error


@click.command()
@click.pass_context
def reload(ctx: click.Context) -> None:
    """Re-decode the stored icon at the current size and profile."""
    engine = build_engine(get_paths(ctx))
    if not engine.reload():
        handle_generic_error("Reload", RuntimeError("stored icon could not be decoded"))
        return
    click.echo(f"🔄 {engine.status_summary()}")
    engine.shutdown()


@click.command()
@click.option(
    "--ticks",
    "-n",
    type=click.IntRange(min=1),
    default=10,
    show_default=True,
    help="Number of animation ticks to simulate",
)
@click.pass_context
def play(ctx: click.Context, ticks: int) -> None:
    """Simulate the tray animation loop without waiting on real time.

    Prints which frame each tick shows and how long it stays up.
    """
    surface = RecordingSurface()
    timers = ManualTimerFactory()
    engine = build_engine(get_paths(ctx), surface=surface, timer_factory=timers)

    if not engine.reload():
        handle_generic_error("Play", RuntimeError("stored icon could not be decoded"))
        return

    # start() already showed the first frame
    timers.run(ticks - 1)
    sequence = engine.sequence
    positions = {id(frame.image): i for i, frame in enumerate(sequence)}

    table = Table(title=f"▶️  {engine.status_summary()}", show_header=True, header_style="bold magenta")
    table.add_column("Tick", justify="right")
    table.add_column("Frame", justify="right")
    table.add_column("Delay", justify="right")
    for tick, image in enumerate(surface.images):
        index = positions[id(image)]
        table.add_row(str(tick), str(index), f"{sequence[index].delay} ms")

    Console().print(table)
    click.echo(f"⏱️  Simulated {timers.elapsed_ms} ms")
    engine.shutdown()
