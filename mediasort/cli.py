"""
Command-line interface for mediasort.
"""

import argparse
import logging
import sys
import threading
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress
from rich.table import Table

from .config import Config
from .constants import PROGRAM, get_console, get_logger
from .core import ConfigurationError, MediaSorter
from .progress import ProgressContext
from .stats import SortSummary


def parse_workers(value: str) -> int:
    """Validate a positive worker count."""
    try:
        workers = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid worker count: {value}")
    if workers < 1:
        raise argparse.ArgumentTypeError(f"Worker count must be at least 1: {value}")
    return workers


def setup_logging(console: Console, level: int) -> None:
    """Route program logging through a rich console handler."""
    logger = get_logger()
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    console_handler = RichHandler(console=console, show_time=False, show_path=False,
                                  rich_tracebacks=True, markup=False)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(console_handler)
    logger.setLevel(level)


def create_parser(config: Config) -> argparse.ArgumentParser:
    """Create argument parser with dynamic defaults from config."""
    last_source = config.get_last_source()
    last_dest = config.get_last_dest()
    workers = config.get_workers()

    source_help = "Source folder containing unsorted photos/videos"
    dest_help = "Destination folder for sorted photos/videos (created if missing)"
    workers_help = "Number of files processed in parallel"

    if last_source:
        source_help += f" (default: {last_source})"
    if last_dest:
        dest_help += f" (default: {last_dest})"
    if workers:
        workers_help += f" (default: {workers})"
    else:
        workers_help += " (default: number of CPUs)"

    parser = argparse.ArgumentParser(
        prog=PROGRAM,
        description="Reliably sort a folder of arbitrarily named photos and videos "
                    "into a year/month folder structure",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Examples:
  {PROGRAM} ~/Downloads/Photos ~/Pictures/Sorted
  {PROGRAM} --source ~/Desktop/NewPhotos --workers 4
  {PROGRAM} --yes
        """
    )

    parser.add_argument(
        "source", nargs="?",
        help=source_help
    )
    parser.add_argument(
        "dest", nargs="?",
        help=dest_help
    )
    parser.add_argument(
        "--source", "-s", dest="source_override",
        help="Override source folder"
    )
    parser.add_argument(
        "--dest", "-d", dest="dest_override",
        help="Override destination folder"
    )
    parser.add_argument(
        "--yes", "-y", action="store_true",
        help="Auto-confirm processing for saved source/dest paths"
    )
    parser.add_argument(
        "--no-file-dates", action="store_true",
        help="Do not fall back to filesystem creation time for media without an embedded date"
    )
    parser.add_argument(
        "--workers", "-w", type=parse_workers, metavar="N",
        help=workers_help
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Enable verbose logging"
    )
    parser.add_argument(
        "--quiet", "-q", action="store_true",
        help="Only report collisions and errors"
    )
    parser.add_argument(
        "--version", "-V", action="store_true",
        help=f"Display the version number of {PROGRAM} and exit"
    )

    return parser


def show_processing_plan(source: Path, dest: Path, use_file_dates: bool,
                         workers: Optional[int], console: Console) -> None:
    """Display the processing plan before execution."""
    console.print("\n[bold]Processing Plan:[/bold]")
    console.print(f"  Source:      [blue]{source}[/blue]")
    console.print(f"  Destination: [blue]{dest}[/blue]")
    console.print(f"  File Dates:  [cyan]{'Yes' if use_file_dates else 'No'}[/cyan]")
    console.print(f"  Workers:     [cyan]{workers or 'auto'}[/cyan]")
    console.print()


def confirm_processing(console: Console) -> bool:
    """Ask for confirmation when using saved configuration."""
    console.print("[yellow]Confirm processing plan with saved configuration.[/yellow]")

    try:
        response = console.input("Continue? [y/N]: ").strip().lower()
        return response in ['y', 'yes']
    except (EOFError, KeyboardInterrupt):
        console.print("\n[red]Operation cancelled[/red]")
        return False


def print_summary(summary: SortSummary, console: Console) -> None:
    """Print processing summary."""
    table = Table(title="Processing Summary")
    table.add_column("Category", style="cyan")
    table.add_column("Count", style="green")

    table.add_row("Photos", str(summary.photo_count))
    table.add_row("Videos", str(summary.video_count))
    table.add_row("Unsupported", str(summary.unsupported_count))
    table.add_row("Already Existing", str(summary.collision_count))
    table.add_row("Failed", str(summary.failure_count))

    console.print(table)


def main(config_path: Optional[Path] = None) -> int:
    """Main entry point.

    Args:
        config_path: Optional path to config file (for testing)
    """
    config = Config(config_path=config_path)
    parser = create_parser(config)
    args = parser.parse_args()

    if args.version:
        from . import __version__
        print(f"{PROGRAM} {__version__}")
        return 0

    console = get_console()
    level = logging.DEBUG if args.verbose else logging.WARNING if args.quiet else logging.INFO
    setup_logging(console, level)

    # Detect if running with no positional arguments (using saved config)
    using_saved_config = args.source is None and args.dest is None and \
                         args.source_override is None and args.dest_override is None

    source_path = args.source_override or args.source or config.get_last_source()
    dest_path = args.dest_override or args.dest or config.get_last_dest()

    if not source_path or not dest_path:
        parser.error("Source and destination folders are required")

    source = Path(source_path).expanduser().resolve()
    dest = Path(dest_path).expanduser().resolve()

    if source == dest or source in dest.parents or dest in source.parents:
        console.print("Error: Identical or overlapping source/dest folders:")
        console.print(f" - Source:      {source}")
        console.print(f" - Destination: {dest}")
        return 1

    workers = args.workers or config.get_workers()
    if args.workers:
        config.update_workers(args.workers)
    use_file_dates = config.get_use_file_creation_time() and not args.no_file_dates

    show_processing_plan(source, dest, use_file_dates, workers, console)

    if using_saved_config and not args.yes:
        if not confirm_processing(console):
            return 0

    sorter = MediaSorter(max_workers=workers, use_file_creation_time=use_file_dates)
    cancel_event = threading.Event()

    try:
        with Progress(console=console, transient=True) as progress:
            task = progress.add_task("Sorting files...", total=None)
            summary = sorter.sort(source, dest, cancel_event=cancel_event,
                                  progress_ctx=ProgressContext(progress, task))
    except ConfigurationError as e:
        console.print(f"Error: {e}")
        return 1

    # Remember paths only once they proved usable
    config.update_paths(str(source), str(dest))

    print_summary(summary, console)

    if summary.cancelled:
        console.print("\n[red]Operation cancelled by user[/red] (partial results above)")
        return 1

    console.print(f"\n[green]✓ Sorted {summary.total} files[/green]")
    return 0


if __name__ == "__main__":
    sys.exit(main())
