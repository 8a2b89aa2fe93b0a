"""
Archive reader.

Opens a backup archive from bytes and gives access to its manifest,
content document and media files.
"""

import io
import json
import posixpath
import zipfile
import zlib
from typing import Any, List, Tuple

from pydantic import ValidationError as PydanticValidationError

from site_backup.archive.writer import CONTENT_NAME, MANIFEST_NAME, MEDIA_DIR
from site_backup.core.exceptions import ArchiveError
from site_backup.models.backup import BackupManifest

# zipfile raises NotImplementedError for unsupported compression methods and
# RuntimeError for encrypted members.
MEMBER_READ_ERRORS = (zipfile.BadZipFile, zlib.error, OSError, NotImplementedError, RuntimeError)


class ArchiveReader:
    """Reads backup archives."""
    
    def __init__(self, archive_bytes: bytes):
        """
        Open an archive.
        
        Raises:
            ArchiveError: If the bytes are not a readable ZIP archive
        """
        try:
            self._zip = zipfile.ZipFile(io.BytesIO(archive_bytes))
        except (zipfile.BadZipFile, zipfile.LargeZipFile, ValueError, TypeError) as e:
            raise ArchiveError(f"Could not read backup archive: {e}")
        self._names = set(self._zip.namelist())
    
    def has_member(self, name: str) -> bool:
        return name in self._names
    
    def read_text(self, name: str) -> str:
        if name not in self._names:
            raise ArchiveError(f"{name} is missing", details={"member": name})
        try:
            return self._zip.read(name).decode("utf-8")
        except MEMBER_READ_ERRORS + (UnicodeDecodeError,) as e:
            raise ArchiveError(f"Could not read {name}: {e}", details={"member": name})
    
    def read_json(self, name: str) -> Any:
        text = self.read_text(name)
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise ArchiveError(f"{name} is not valid JSON: {e}", details={"member": name})
    
    def read_manifest(self) -> BackupManifest:
        data = self.read_json(MANIFEST_NAME)
        if not isinstance(data, dict):
            raise ArchiveError(f"{MANIFEST_NAME} must contain a JSON object")
        try:
            return BackupManifest.model_validate(data)
        except PydanticValidationError as e:
            raise ArchiveError(f"Invalid {MANIFEST_NAME}: {e}", details={"member": MANIFEST_NAME})
    
    def read_content(self) -> Any:
        return self.read_json(CONTENT_NAME)
    
    def media_names(self) -> List[str]:
        """Archive member names of the media files, in archive order."""
        return [
            info.filename
            for info in self._zip.infolist()
            if info.filename.startswith(MEDIA_DIR) and not info.is_dir()
        ]
    
    def read_media(self, name: str) -> Tuple[str, bytes]:
        """Read one media member, returning (basename, content)."""
        try:
            data = self._zip.read(name)
        except MEMBER_READ_ERRORS + (KeyError,) as e:
            raise ArchiveError(f"Could not read {name}: {e}", details={"member": name})
        return posixpath.basename(name), data

    def media_files(self) -> List[Tuple[str, bytes]]:
        """
        Read every media file.

        Returns:
            (filename, content) pairs; filenames are flattened to basenames
        """
        return [self.read_media(name) for name in self.media_names()]
    
    def close(self) -> None:
        self._zip.close()
    
    def __enter__(self) -> "ArchiveReader":
        return self
    
    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
