"""
Main CLI entry point for site backups.

This module provides the command-line interface using Click with Rich
formatting for progress bars and validation summaries.
"""

import asyncio
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn
from rich.prompt import Confirm
from rich.table import Table

from site_backup import __version__
from site_backup.core.exceptions import ConfigurationError, SiteBackupError
from site_backup.media.extractor import extract_media_references, group_urls_by_folder
from site_backup.models.backup import BackupManifest, TransferProgress, ValidationResult
from site_backup.models.config import SiteBackupConfig, load_config
from site_backup.orchestrator.pipeline import export_backup, import_backup, validate_backup
from site_backup.store.rest import RestContentStore
from site_backup.transfer.base import MediaTransfer
from site_backup.transfer.http_storage import HttpObjectStorage
from site_backup.utils.logging import setup_logging

console = Console()


@contextmanager
def progress_sink(description: str) -> Iterator:
    """Yield a progress callback that drives a Rich progress bar."""
    with Progress(
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        TextColumn("[dim]{task.fields[item]}"),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task(description, total=100, item="")

        def on_progress(event: TransferProgress):
            progress.update(
                task,
                completed=event.percentage,
                description=event.message,
                item=event.current_item or ""
            )

        yield on_progress


def manifest_table(manifest: BackupManifest) -> Table:
    table = Table(title="Backup", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Backup ID", manifest.backup_id)
    table.add_row("Customer", manifest.customer_id)
    table.add_row("Domain", manifest.domain or "-")
    table.add_row("Created", manifest.created_at or "-")
    table.add_row("Version", manifest.version)
    table.add_row("Description", manifest.description or "-")
    table.add_row("Pages", str(manifest.stats.page_count))
    table.add_row("Blocks", str(manifest.stats.block_count))
    table.add_row("Media files", str(manifest.stats.media_file_count))
    table.add_row("Media size", f"{manifest.stats.media_size_bytes:,} bytes")
    return table


def print_validation(result: ValidationResult):
    if result.manifest:
        console.print(manifest_table(result.manifest))
    for error in result.errors:
        console.print(f"[red]✗ {error}[/red]")
    for warning in result.warnings:
        console.print(f"[yellow]⚠ {warning}[/yellow]")
    if result.is_valid:
        console.print("[green]✓ Backup is valid[/green]")


@click.group()
@click.version_option(__version__, prog_name="site-backup")
@click.option('--config', '-c', 'config_path', type=click.Path(exists=True, dir_okay=False),
              help='Configuration file path')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
@click.option('--log-file', type=click.Path(dir_okay=False), help='Write logs to this file')
@click.pass_context
def main(ctx: click.Context, config_path: Optional[str], verbose: bool, log_file: Optional[str]):
    """Export, validate and restore website backups."""
    ctx.ensure_object(dict)
    try:
        config = load_config(config_path)
    except ConfigurationError as e:
        console.print(f"[red]Configuration error: {e.message}[/red]")
        sys.exit(2)

    setup_logging(
        level="DEBUG" if verbose else config.log_level,
        log_file=log_file,
        console=Console(stderr=True)
    )
    ctx.obj['config'] = config
    ctx.obj['verbose'] = verbose


@main.command(name="export")
@click.argument('customer_id')
@click.option('--description', '-d', help='Note stored in the backup manifest')
@click.option('--output', '-o', type=click.Path(file_okay=False), default='.',
              help='Directory to write the archive to')
@click.pass_context
def export_command(ctx: click.Context, customer_id: str, description: Optional[str], output: str):
    """Export a customer's website to a backup archive."""
    config: SiteBackupConfig = ctx.obj['config']

    with progress_sink("Preparing backup...") as on_progress:
        result = asyncio.run(export_backup(customer_id, description, on_progress, config=config))

    if not result.success:
        console.print(f"[red]✗ Export failed: {result.error}[/red]")
        sys.exit(1)

    output_dir = Path(output)
    output_dir.mkdir(parents=True, exist_ok=True)
    destination = output_dir / result.filename
    destination.write_bytes(result.archive_bytes)

    console.print(manifest_table(result.manifest))
    if result.failed_urls:
        console.print(f"[yellow]⚠ {len(result.failed_urls)} media files could not be downloaded[/yellow]")
        if ctx.obj.get('verbose'):
            for url in result.failed_urls:
                console.print(f"[dim]  {url}[/dim]")
    console.print(f"[green]✓ Backup written to {destination}[/green]")


@main.command(name="validate")
@click.argument('archive', type=click.Path(exists=True, dir_okay=False))
@click.argument('customer_id')
def validate_command(archive: str, customer_id: str):
    """Validate a backup archive against a customer."""
    result = asyncio.run(validate_backup(archive, customer_id))
    print_validation(result)
    if not result.is_valid:
        sys.exit(1)


@main.command(name="import")
@click.argument('archive', type=click.Path(exists=True, dir_okay=False))
@click.argument('customer_id')
@click.option('--yes', '-y', is_flag=True, help='Do not ask for confirmation')
@click.pass_context
def import_command(ctx: click.Context, archive: str, customer_id: str, yes: bool):
    """Restore a backup archive into a customer's website."""
    config: SiteBackupConfig = ctx.obj['config']

    validation = asyncio.run(validate_backup(archive, customer_id))
    print_validation(validation)
    if not validation.is_valid:
        sys.exit(1)

    if not yes:
        prompt = "Replace the current website content with this backup?"
        if validation.customer_id_matches is False:
            prompt = "[yellow]This backup belongs to another customer.[/yellow] Import it anyway?"
        if not Confirm.ask(prompt, default=False, console=console):
            console.print("[yellow]Import cancelled[/yellow]")
            sys.exit(1)

    with progress_sink("Validating backup...") as on_progress:
        result = asyncio.run(import_backup(archive, customer_id, on_progress, config=config))

    if not result.success:
        console.print(f"[red]✗ Import failed: {result.error}[/red]")
        sys.exit(1)

    summary = (
        f"Restored backup [cyan]{result.manifest.backup_id}[/cyan] into [cyan]{customer_id}[/cyan]\n"
        f"Media files restored: {result.media_files_restored}"
    )
    if result.failed_files:
        summary += f"\n[yellow]Media files failed: {len(result.failed_files)}[/yellow]"
    console.print(Panel(summary, title="Import complete", border_style="green"))


@main.command(name="scan")
@click.argument('customer_id')
@click.option('--check', is_flag=True, help='Check that every media URL is reachable')
@click.pass_context
def scan_command(ctx: click.Context, customer_id: str, check: bool):
    """List the media a customer's website references."""
    config: SiteBackupConfig = ctx.obj['config']

    async def run():
        async with RestContentStore(config.store) as store, HttpObjectStorage(config.storage) as storage:
            record = await store.get(customer_id)
            urls = extract_media_references(record.content, markers=config.backup.storage_markers)
            report = await MediaTransfer(storage).verify_urls(urls) if check else None
            return urls, report

    try:
        urls, report = asyncio.run(run())
    except SiteBackupError as e:
        console.print(f"[red]✗ Scan failed: {e.message}[/red]")
        sys.exit(1)

    table = Table(title=f"Media referenced by {customer_id}")
    table.add_column("Folder", style="cyan")
    table.add_column("URL")
    if report:
        table.add_column("Status")
    for folder, folder_urls in sorted(group_urls_by_folder(urls).items()):
        for url in folder_urls:
            row = [folder, url]
            if report:
                row.append("[green]ok[/green]" if url in report.valid else f"[red]{report.errors.get(url, 'error')}[/red]")
            table.add_row(*row)
    console.print(table)
    console.print(f"{len(urls)} media references")
    if report and not report.all_valid:
        sys.exit(1)


if __name__ == "__main__":
    main()
