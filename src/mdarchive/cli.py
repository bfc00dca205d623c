"""CLI entry point for mdarchive."""

from pathlib import Path
from typing import Optional

import click
from rich.console import Console

from mdarchive.archiving import Archiver, ListToHeadingTransformer, TaskListSorter
from mdarchive.config import default_config_path, load_settings
from mdarchive.models.config import ArchiverSettings
from mdarchive.services.exceptions import MdArchiveError
from mdarchive.services.file_operations import DiskFile, LineBuffer
from mdarchive.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)
console = Console()

markdown_file = click.Path(exists=True, dir_okay=False, path_type=Path)
line_option = click.option(
    "--line",
    "-l",
    type=click.IntRange(min=1),
    required=True,
    help="1-based line number of the cursor",
)


def echo_status(message: str) -> None:
    console.print(message, markup=False, highlight=False)


def load_buffer(path: Path, line: int) -> LineBuffer:
    """Load a file as a cursor buffer, validating the 1-based line number."""
    buffer = LineBuffer.from_file(path, cursor_line=line - 1)
    if buffer.cursor_line >= len(buffer.lines):
        raise click.BadParameter(
            f"{path} has only {len(buffer.lines)} lines", param_hint="--line"
        )
    return buffer


def run_operation(operation):
    """Run an archive operation, turning domain and I/O errors into CLI errors."""
    try:
        return operation()
    except (MdArchiveError, OSError) as e:
        logger.error("operation_failed", error=str(e))
        raise click.ClickException(str(e))


@click.group()
@click.version_option(version="0.1.0", prog_name="mdarchive")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Settings file (default: ~/.config/mdarchive/config.yaml)",
)
@click.option("--verbose", "-v", is_flag=True, help="Write debug events to the log file")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path], verbose: bool):
    """mdarchive: archive completed tasks in markdown files."""
    configure_logging("DEBUG" if verbose else None)

    try:
        settings = load_settings(config_path)
    except ValueError as e:
        logger.error("config_invalid", path=str(config_path or default_config_path()))
        raise click.ClickException(str(e))

    ctx.obj = settings


@cli.command()
@click.argument("file", type=markdown_file)
@click.pass_obj
def archive(settings: ArchiverSettings, file: Path):
    """
    Move completed tasks into the archive heading.

    Examples:
        mdarchive archive notes.md
        mdarchive --config work.yaml archive todo.md
    """
    logger.info("archive_command_started", file=str(file))
    message = run_operation(lambda: Archiver(settings).archive_tasks(DiskFile(file)))
    echo_status(message)


@cli.command()
@click.argument("file", type=markdown_file)
@click.pass_obj
def delete(settings: ArchiverSettings, file: Path):
    """Delete completed tasks (tasks under the archive heading are kept)."""
    logger.info("delete_command_started", file=str(file))
    message = run_operation(lambda: Archiver(settings).delete_tasks(DiskFile(file)))
    echo_status(message)


@cli.command("archive-heading")
@click.argument("file", type=markdown_file)
@line_option
@click.pass_obj
def archive_heading(settings: ArchiverSettings, file: Path, line: int):
    """Move the heading containing --line under the archive heading."""
    buffer = load_buffer(file, line)

    def archive_and_save():
        section = Archiver(settings).archive_heading_under_cursor(buffer)
        if section is not None:
            buffer.save()
        return section

    section = run_operation(archive_and_save)
    if section is None:
        echo_status("No heading under cursor")
    else:
        echo_status(f"Archived heading: {section.title}")


@cli.command()
@click.argument("file", type=markdown_file)
@line_option
@click.pass_obj
def sort(settings: ArchiverSettings, file: Path, line: int):
    """Sort tasks in the list containing --line (plain, open, then done)."""
    buffer = load_buffer(file, line)
    if not TaskListSorter(settings).sort_list_under_cursor(buffer):
        echo_status("No list under cursor")
        return
    run_operation(buffer.save)
    echo_status("Sorted list")


@cli.command()
@click.argument("file", type=markdown_file)
@line_option
@click.pass_obj
def headings(settings: ArchiverSettings, file: Path, line: int):
    """Turn the list containing --line into headings, down to that line's depth."""
    buffer = load_buffer(file, line)
    root = ListToHeadingTransformer(settings).turn_list_items_into_headings(buffer)
    if root is None:
        echo_status("No list under cursor")
        return
    run_operation(buffer.save)
    echo_status(f"Created {sum(1 for _ in root.walk()) - 1} headings")


if __name__ == "__main__":
    cli()
