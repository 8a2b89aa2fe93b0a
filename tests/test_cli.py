"""
Tests for the command-line interface.
"""

import logging
from unittest.mock import AsyncMock, patch

import pytest
from click.testing import CliRunner

from site_backup import __version__
from site_backup.archive.writer import ArchiveWriter
from site_backup.cli.main import main
from site_backup.models.backup import (
    BackupManifest,
    BackupStats,
    ExportResult,
    ImportResult,
)

from conftest import HERO_URL


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for name in ("SITE_BACKUP_URL", "SITE_BACKUP_KEY", "SITE_BACKUP_BUCKET", "SITE_BACKUP_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    yield
    # The CLI binds log handlers to the runner's streams.
    logging.getLogger("site_backup").handlers.clear()


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def manifest():
    return BackupManifest(
        backup_id="b-7",
        customer_id="customer-1",
        domain="salon.example",
        created_at="2026-10-19T08:30:00+00:00",
        stats=BackupStats(page_count=2, block_count=3, media_file_count=1, media_size_bytes=4),
    )


@pytest.fixture
def archive_file(tmp_path, manifest, sample_content):
    path = tmp_path / "backup_customer-1_2026-10-19.zip"
    path.write_bytes(ArchiveWriter().write(manifest, sample_content, {HERO_URL: b"hero"}))
    return path


class TestCLI:
    """Test cases for the CLI."""
    
    def test_version(self, runner):
        result = runner.invoke(main, ['--version'])
        
        assert result.exit_code == 0
        assert __version__ in result.output
    
    def test_help(self, runner):
        result = runner.invoke(main, ['--help'])
        
        assert result.exit_code == 0
        for command in ("export", "validate", "import", "scan"):
            assert command in result.output
    
    def test_invalid_config(self, runner, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("log_level: LOUD\n")
        
        result = runner.invoke(main, ['--config', str(config_file), 'validate', '--help'])
        
        assert result.exit_code == 2
        assert "Configuration error" in result.output


class TestValidateCommand:
    """Test the validate command."""
    
    def test_valid_archive(self, runner, archive_file):
        result = runner.invoke(main, ['validate', str(archive_file), 'customer-1'])
        
        assert result.exit_code == 0
        assert "b-7" in result.output
        assert "Backup is valid" in result.output
    
    def test_customer_mismatch(self, runner, archive_file):
        result = runner.invoke(main, ['validate', str(archive_file), 'customer-2'])
        
        assert result.exit_code == 0
        assert "Customer ID does not match" in result.output
    
    def test_invalid_archive(self, runner, tmp_path):
        path = tmp_path / "broken.zip"
        path.write_bytes(b"not a zip")
        
        result = runner.invoke(main, ['validate', str(path), 'customer-1'])
        
        assert result.exit_code == 1
        assert "Backup is valid" not in result.output


class TestExportCommand:
    """Test the export command."""
    
    def test_export_writes_archive(self, runner, tmp_path, manifest):
        exported = ExportResult(
            success=True,
            archive_bytes=b"PK-archive",
            filename="backup_customer-1_2026-10-19.zip",
            manifest=manifest,
            failed_urls=[HERO_URL]
        )
        
        with patch('site_backup.cli.main.export_backup', new=AsyncMock(return_value=exported)) as mock_export:
            result = runner.invoke(main, ['export', 'customer-1', '-d', 'nightly', '-o', str(tmp_path / "out")])
        
        assert result.exit_code == 0
        assert (tmp_path / "out" / "backup_customer-1_2026-10-19.zip").read_bytes() == b"PK-archive"
        assert "1 media files could not be downloaded" in result.output
        args = mock_export.await_args
        assert args.args[0] == "customer-1"
        assert args.args[1] == "nightly"
    
    def test_export_failure(self, runner, tmp_path):
        failed = ExportResult(success=False, error="Website data could not be loaded")
        
        with patch('site_backup.cli.main.export_backup', new=AsyncMock(return_value=failed)):
            result = runner.invoke(main, ['export', 'customer-1', '-o', str(tmp_path)])
        
        assert result.exit_code == 1
        assert "Website data could not be loaded" in result.output


class TestImportCommand:
    """Test the import command."""
    
    def test_import_with_yes(self, runner, archive_file, manifest):
        imported = ImportResult(success=True, manifest=manifest, media_files_restored=1)
        
        with patch('site_backup.cli.main.import_backup', new=AsyncMock(return_value=imported)) as mock_import:
            result = runner.invoke(main, ['import', str(archive_file), 'customer-1', '--yes'])
        
        assert result.exit_code == 0
        assert "Media files restored: 1" in result.output
        mock_import.assert_awaited_once()
    
    def test_import_cancelled(self, runner, archive_file):
        with patch('site_backup.cli.main.import_backup', new=AsyncMock()) as mock_import:
            result = runner.invoke(main, ['import', str(archive_file), 'customer-1'], input="n\n")
        
        assert result.exit_code == 1
        assert "Import cancelled" in result.output
        mock_import.assert_not_awaited()
    
    def test_import_confirmed(self, runner, archive_file, manifest):
        imported = ImportResult(success=True, manifest=manifest, media_files_restored=1)
        
        with patch('site_backup.cli.main.import_backup', new=AsyncMock(return_value=imported)):
            result = runner.invoke(main, ['import', str(archive_file), 'customer-1'], input="y\n")
        
        assert result.exit_code == 0
        assert "Import complete" in result.output
    
    def test_invalid_archive_is_not_imported(self, runner, tmp_path):
        path = tmp_path / "broken.zip"
        path.write_bytes(b"not a zip")
        
        with patch('site_backup.cli.main.import_backup', new=AsyncMock()) as mock_import:
            result = runner.invoke(main, ['import', str(path), 'customer-1', '--yes'])
        
        assert result.exit_code == 1
        mock_import.assert_not_awaited()
    
    def test_import_failure(self, runner, archive_file):
        failed = ImportResult(success=False, error="Database update failed: connection reset")
        
        with patch('site_backup.cli.main.import_backup', new=AsyncMock(return_value=failed)):
            result = runner.invoke(main, ['import', str(archive_file), 'customer-1', '--yes'])
        
        assert result.exit_code == 1
        assert "Database update failed" in result.output
