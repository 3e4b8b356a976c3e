"""Command-line interface for scanbind."""

from __future__ import annotations

import argparse
import logging
import math
import sys
import time
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
)
from rich.prompt import FloatPrompt

from . import DirectoryResult, DirectoryState, convert_batch
from .errors import ScanBindError
from .scale import ScaleConfig, compute_scale
from .validator import validate_directories


def _format_size(num_bytes: int) -> str:
    """Format a byte count as a human-readable string."""
    value = float(num_bytes)
    for unit in ("B", "KB", "MB", "GB"):
        if abs(value) < 1024:
            return f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} TB"


def _positive_float(text: str) -> float:
    try:
        value = float(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {text!r}") from None
    if not math.isfinite(value) or value <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive number: {text!r}")
    return value


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="scanbind",
        description=(
            "Bind each directory of scanned page images into a PDF named after"
            " the directory, resampling every page by a divisor."
        ),
    )
    parser.add_argument(
        "directories",
        nargs="+",
        type=Path,
        metavar="DIRECTORY",
        help="Directory holding at least two page images (bmp, gif, jpg, png, tif)",
    )
    parser.add_argument(
        "--dpi",
        type=_positive_float,
        default=None,
        help="Resolution of the original images in DPI (prompted if omitted)",
    )
    parser.add_argument(
        "--divisor",
        type=_positive_float,
        default=None,
        help="Divide image dimensions by this value (prompted if omitted)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        default=False,
        help="Show debug logging",
    )
    return parser


def _setup_logging(*, console: Console, verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def _prompt_positive(console: Console, prompt: str) -> float:
    """Ask for a positive number until one is given."""
    while True:
        value = FloatPrompt.ask(prompt, console=console)
        if math.isfinite(value) and value > 0:
            return value
        console.print("[prompt.invalid]Please enter a positive number")


def _read_scale(console: Console, args: argparse.Namespace) -> ScaleConfig:
    source_dpi = args.dpi
    if source_dpi is None:
        source_dpi = _prompt_positive(console, "Resolution of original images (DPI)")

    divisor = args.divisor
    if divisor is None:
        divisor = _prompt_positive(console, "Divide image dimensions by")

    return compute_scale(source_dpi=source_dpi, divisor=divisor)


def _run(console: Console, args: argparse.Namespace) -> int:
    start_time = time.monotonic()

    # Check every directory before asking for settings.
    directories = validate_directories(args.directories)
    scale = _read_scale(console, args)

    console.print(
        f"Output resolution: [bold]{scale.output_dpi:g} DPI[/bold]"
        f" ({scale.source_dpi:g} / {scale.divisor:g})"
    )

    progress = Progress(
        SpinnerColumn(),
        "[progress.description]{task.description}",
        BarColumn(),
        MofNCompleteColumn(),
        console=console,
        transient=True,
    )
    tasks: dict[Path, TaskID] = {}

    def on_page(directory: Path, index: int, total: int) -> None:
        if directory not in tasks:
            tasks[directory] = progress.add_task(
                description=f"Adding images from {directory.name}",
                total=total,
            )
        progress.update(task_id=tasks[directory], completed=index)

    def on_directory_done(result: DirectoryResult) -> None:
        if result.source in tasks:
            progress.remove_task(tasks.pop(result.source))

        if result.state is DirectoryState.COMPLETED:
            progress.console.print(
                f"PDF file created: [bold]{result.output_path}[/bold]"
                f" ({result.pages_written} pages, {_format_size(result.pdf_bytes)})"
            )
        else:
            progress.console.print(f"[yellow]Failed: {result.source}[/yellow]")
            progress.console.print(f"  [yellow]{result.error}[/yellow]", highlight=False)

    with progress:
        batch = convert_batch(
            directories,
            scale,
            on_page=on_page,
            on_directory_done=on_directory_done,
            validate=False,
        )

    elapsed = time.monotonic() - start_time

    summary_lines = [
        f"[bold]PDF files created:[/bold] {len(batch.completed)}/{len(batch.results)}",
    ]
    if batch.failed:
        summary_lines.append(f"[bold red]Failed:[/bold red] {len(batch.failed)}")
        for result in batch.failed:
            summary_lines.append(
                f"  [red]- {result.source}[/red]"
                f" ({result.pages_written}/{result.total_pages} pages added)"
            )

    console.print(Panel(
        "\n".join(summary_lines),
        title=f"[bold green]Done in {elapsed:.1f}s[/bold green]",
        border_style="green" if not batch.failed else "yellow",
    ))

    return 1 if batch.failed else 0


def main(argv: list[str] | None = None) -> None:
    """Entry point for the ``scanbind`` CLI command."""
    console = Console()
    error_console = Console(stderr=True)
    parser = _build_parser()
    args = parser.parse_args(argv)

    _setup_logging(console=error_console, verbose=args.verbose)

    try:
        status = _run(console, args)
    except ScanBindError as exc:
        error_console.print(f"[bold red]Error:[/bold red] {exc}")
        sys.exit(1)
    except KeyboardInterrupt:
        error_console.print("\n[dim]Interrupted.[/dim]")
        sys.exit(130)

    if status:
        sys.exit(status)
