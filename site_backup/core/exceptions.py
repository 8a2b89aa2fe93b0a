"""
Custom exceptions for the site backup pipeline.

Fatal failures (store read/write, unreadable archives) and per-item
failures (a single media download or upload) are both raised as
subclasses of SiteBackupError; the orchestrators decide which ones
abort a run and which ones are logged and skipped.
"""

from typing import Any, Dict, List, Optional


class SiteBackupError(Exception):
    """Base exception class for site backup errors."""
    
    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}


class ConfigurationError(SiteBackupError):
    """Raised when there's an error in configuration."""
    pass


class TransferError(SiteBackupError):
    """Raised when a media download or upload fails."""
    pass


class ArchiveError(SiteBackupError):
    """Raised when a backup archive cannot be read or written."""
    pass


class ContentStoreError(SiteBackupError):
    """Raised when the content store cannot be read or updated."""
    pass


class BackupValidationError(SiteBackupError):
    """Raised when a backup archive fails validation."""
    
    def __init__(
        self,
        message: str,
        failed_checks: Optional[List[str]] = None,
        **kwargs
    ):
        super().__init__(message, **kwargs)
        self.failed_checks = failed_checks or []
