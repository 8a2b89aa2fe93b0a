"""
Backup validator for checking archives before import.

Validation runs in a fixed order and stops at the first fatal error:
container readable, required documents present, manifest complete,
content parseable. A customer id mismatch and a content document
without pages are warnings only.
"""

from typing import Any, Optional

from site_backup.archive.reader import ArchiveReader
from site_backup.archive.writer import CONTENT_NAME, MANIFEST_NAME
from site_backup.core.exceptions import ArchiveError
from site_backup.models.backup import BackupManifest, ValidationResult
from site_backup.utils.logging import get_logger

logger = get_logger("archive.validator")

REQUIRED_MANIFEST_FIELDS = (
    ("backupId", "Backup ID is missing"),
    ("customerId", "Customer ID is missing"),
    ("version", "Version is missing"),
)


class BackupValidator:
    """Validates backup archives for structural completeness."""
    
    def validate(self, archive_bytes: bytes, expected_customer_id: str) -> ValidationResult:
        """
        Validate an archive against the customer it is about to be imported into.
        
        Args:
            archive_bytes: Archive content
            expected_customer_id: Customer the caller intends to import into
            
        Returns:
            ValidationResult; never raises
        """
        result = ValidationResult()
        
        try:
            reader = ArchiveReader(archive_bytes)
        except ArchiveError as e:
            result.add_error(e.message)
            logger.info(f"Backup validation failed: {e.message}")
            return result
        
        with reader:
            self._validate_members(reader, result)
            if not result.is_valid:
                return self._finish(result)
            
            manifest = self._validate_manifest(reader, result)
            if manifest is None:
                return self._finish(result)
            
            result.manifest = manifest
            result.customer_id_matches = manifest.customer_id == expected_customer_id
            if not result.customer_id_matches:
                result.add_warning(
                    f"Customer ID does not match (backup: {manifest.customer_id}, "
                    f"current: {expected_customer_id})"
                )
            
            self._validate_content(reader, result)
        
        return self._finish(result)
    
    def _validate_members(self, reader: ArchiveReader, result: ValidationResult):
        """Require both the manifest and content documents."""
        for name in (MANIFEST_NAME, CONTENT_NAME):
            if not reader.has_member(name):
                result.add_error(f"{name} is missing")
    
    def _validate_manifest(
        self,
        reader: ArchiveReader,
        result: ValidationResult
    ) -> Optional[BackupManifest]:
        try:
            data = reader.read_json(MANIFEST_NAME)
        except ArchiveError as e:
            result.add_error(e.message)
            return None
        
        if not isinstance(data, dict):
            result.add_error(f"{MANIFEST_NAME} must contain a JSON object")
            return None
        
        for field_name, message in REQUIRED_MANIFEST_FIELDS:
            if not data.get(field_name):
                result.add_error(message)
        if not result.is_valid:
            return None
        
        try:
            return reader.read_manifest()
        except ArchiveError as e:
            result.add_error(e.message)
            return None
    
    def _validate_content(self, reader: ArchiveReader, result: ValidationResult):
        try:
            content = reader.read_content()
        except ArchiveError as e:
            result.add_error(e.message)
            return
        
        if not _has_pages(content):
            result.add_warning("No pages found in backup")
    
    def _finish(self, result: ValidationResult) -> ValidationResult:
        if result.is_valid:
            logger.info(f"Backup validated with {len(result.warnings)} warnings")
        else:
            logger.info(f"Backup validation failed with {len(result.errors)} errors")
        return result


def _has_pages(content: Any) -> bool:
    return isinstance(content, dict) and isinstance(content.get("pages"), list)
