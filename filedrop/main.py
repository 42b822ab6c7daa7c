"""
Main entry point for filedrop.

This module provides the command-line interface: uploading files through the
upload manager and generating or validating configuration files.
"""

import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

import typer

from .application.startup import ApplicationStartup
from .core.domain.events import Event, UploadEvents
from .core.domain.uploads import RawFile, UploadRecord, UploadStatus
from .core.exceptions import FiledropError
from .infrastructure.config.loader import ConfigLoader
from .infrastructure.config.models import ApplicationConfig
from .infrastructure.logging.setup import setup_logging
from .utils.formatting import format_size

cli = typer.Typer(
    name="filedrop",
    help="Upload files concurrently with per-file validation, progress and cancellation"
)

logger = logging.getLogger(__name__)

FAILED_STATUSES = (UploadStatus.REJECTED, UploadStatus.FAILED)


@cli.command()
def upload(
    files: List[Path] = typer.Argument(
        ..., exists=True, dir_okay=False, readable=True, help="Files to upload"
    ),
    url: Optional[str] = typer.Option(
        None, "--url", "-u", help="Upload URL (http(s)://, file:// or a directory)"
    ),
    config_file: Optional[str] = typer.Option(
        None, "--config", "-c", help="Configuration file path"
    ),
    max_size: Optional[int] = typer.Option(
        None, "--max-size", help="Maximum file size in bytes"
    ),
    allow: Optional[List[str]] = typer.Option(
        None, "--allow", "-a", help="Allowed type pattern, e.g. .txt or image/*"
    ),
    concurrency: Optional[int] = typer.Option(
        None, "--concurrency", help="Maximum simultaneous uploads (0 = unlimited)"
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Logging level"
    )
) -> None:
    """Upload one or more files."""

    try:
        config = ConfigLoader().load_config(config_file)
        if url:
            config.upload.upload_url = url
        if max_size is not None:
            config.upload.max_file_size = max_size
        if allow:
            config.upload.allowed_types = list(allow)
        if concurrency is not None:
            config.upload.max_concurrent_uploads = concurrency
        if log_level:
            config.logging.level = log_level.upper()
        config.validate()
    except FiledropError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        sys.exit(2)

    setup_logging(config.logging)

    try:
        records = asyncio.run(run_uploads(config, files))
    except KeyboardInterrupt:
        logger.info("Upload interrupted by user")
        sys.exit(130)

    for record in records:
        typer.echo(describe_record(record))

    if any(record.status in FAILED_STATUSES for record in records):
        sys.exit(1)


@cli.command()
def init_config(
    output: str = typer.Option(
        "filedrop.yaml", "--output", "-o", help="Output configuration file"
    ),
    format: str = typer.Option(
        "yaml", "--format", "-f", help="Configuration format (yaml/json)"
    )
) -> None:
    """Generate a default configuration file."""

    try:
        ConfigLoader().save_config(ApplicationConfig(), output, format)
        typer.echo(f"Default configuration saved to {output}")
    except FiledropError as e:
        typer.echo(f"Error saving configuration: {e}", err=True)
        sys.exit(1)


@cli.command()
def validate_config(
    config_file: str = typer.Argument(..., help="Configuration file to validate")
) -> None:
    """Validate a configuration file."""

    try:
        config = ConfigLoader().load_config(config_file)
    except FiledropError as e:
        typer.echo(f"Configuration validation failed: {e}", err=True)
        sys.exit(1)

    typer.echo(f"Configuration file {config_file} is valid")
    typer.echo(f"Upload URL: {config.upload.upload_url}")
    typer.echo(f"Maximum file size: {format_size(config.upload.max_file_size)}")


@cli.command("format-size")
def format_size_command(
    num_bytes: int = typer.Argument(..., help="Number of bytes")
) -> None:
    """Print a byte count in human-readable form."""
    typer.echo(format_size(num_bytes))


async def run_uploads(config: ApplicationConfig, paths: List[Path]) -> List[UploadRecord]:
    """
    Upload files with a fully wired application and wait for every outcome.

    Args:
        config: Application configuration
        paths: Files to upload

    Returns:
        The settled upload records, in input order
    """
    async with ApplicationStartup(config) as app:
        event_bus, manager = app.event_bus, app.upload_manager
        if event_bus is None or manager is None:
            raise RuntimeError("Application services are not configured")

        await event_bus.subscribe(UploadEvents.COMPLETE, report_complete)
        await event_bus.subscribe(UploadEvents.ERROR, report_error)

        candidates = [RawFile.from_path(path) for path in paths]
        records = manager.submit(candidates)
        await manager.wait_idle()
        await event_bus.flush()

    return records


def report_complete(event: Event) -> None:
    record = event.data["record"]
    logger.info(f"Uploaded {record.name} ({format_size(record.size)})")


def report_error(event: Event) -> None:
    record = event.data["record"]
    logger.warning(f"Upload of {record.name} failed: {record.error_message}")


def describe_record(record: UploadRecord) -> str:
    line = f"{record.name}: {record.status.value}"
    if record.error_message:
        line += f" ({record.error_message})"
    return line


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
