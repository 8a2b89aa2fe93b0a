"""Command-line interface for the site backup pipeline."""

from site_backup.cli.main import main

__all__ = ["main"]
