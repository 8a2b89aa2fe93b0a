"""
Configuration models for the site backup pipeline.

This module defines Pydantic models for the object storage, the content
store and backup behaviour, plus a loader that reads a YAML file and
applies environment variable overrides.
"""

import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import BaseModel, Field, field_validator, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from site_backup.core.exceptions import ConfigurationError

DEFAULT_STORAGE_MARKERS = [".supabase.co/storage/", "/storage/v1/object/public/"]

ENV_BASE_URL = "SITE_BACKUP_URL"
ENV_API_KEY = "SITE_BACKUP_KEY"
ENV_BUCKET = "SITE_BACKUP_BUCKET"
ENV_LOG_LEVEL = "SITE_BACKUP_LOG_LEVEL"


class StorageConfig(BaseModel):
    """Object storage configuration."""
    base_url: str = Field(default="http://localhost:54321", description="Storage service base URL")
    bucket: str = Field(default="user-media", description="Bucket that holds customer media")
    api_key: Optional[str] = Field(default=None, description="Service key sent as bearer token")
    timeout: float = Field(default=30.0, gt=0, description="HTTP timeout in seconds")
    cache_control: str = Field(default="3600", description="Cache-Control max-age for uploads")

    @field_validator('base_url')
    @classmethod
    def strip_trailing_slash(cls, v):
        return v.rstrip("/")


class ContentStoreConfig(BaseModel):
    """Content store (REST table API) configuration."""
    base_url: str = Field(default="http://localhost:54321", description="REST API base URL")
    api_key: Optional[str] = Field(default=None, description="Service key sent as bearer token")
    table: str = Field(default="websites", description="Table holding one content document per customer")
    media_table: str = Field(default="user_media", description="Media catalog table")
    timeout: float = Field(default=30.0, gt=0, description="HTTP timeout in seconds")

    @field_validator('base_url')
    @classmethod
    def strip_trailing_slash(cls, v):
        return v.rstrip("/")


class BackupConfig(BaseModel):
    """Backup and restore behaviour."""
    restored_folder: str = Field(default="restored", description="Folder for re-uploaded media")
    compression_level: int = Field(default=6, ge=0, le=9, description="DEFLATE level for archives")
    rewrite_media_urls: bool = Field(
        default=False,
        description="Point the imported content tree at the re-uploaded media"
    )
    register_restored_media: bool = Field(
        default=True,
        description="Record restored files in the media catalog"
    )
    storage_markers: List[str] = Field(
        default_factory=lambda: list(DEFAULT_STORAGE_MARKERS),
        description="Substrings identifying storage-hosted media URLs"
    )

    @field_validator('restored_folder')
    @classmethod
    def folder_is_single_segment(cls, v):
        v = v.strip("/")
        if not v or "/" in v:
            raise ValueError('restored_folder must be a single path segment')
        return v

    @field_validator('storage_markers')
    @classmethod
    def markers_not_empty(cls, v):
        if not [marker for marker in v if marker]:
            raise ValueError('At least one storage marker is required')
        return v


class SiteBackupConfig(BaseModel):
    """Complete configuration for the site backup pipeline."""
    storage: StorageConfig = Field(default_factory=StorageConfig)
    store: ContentStoreConfig = Field(default_factory=ContentStoreConfig)
    backup: BackupConfig = Field(default_factory=BackupConfig)
    log_level: str = Field(default="INFO", description="Logging level")

    model_config = ConfigDict(
        validate_assignment=True,
    )

    @field_validator('log_level')
    @classmethod
    def known_log_level(cls, v):
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f'Unknown log level: {v}')
        return level


def _apply_env_overrides(data: Dict[str, Any], environ: Dict[str, str]) -> Dict[str, Any]:
    storage = dict(data.get("storage") or {})
    store = dict(data.get("store") or {})

    # Environment values win over the file.
    if environ.get(ENV_BASE_URL):
        storage["base_url"] = environ[ENV_BASE_URL]
        store["base_url"] = environ[ENV_BASE_URL]
    if environ.get(ENV_API_KEY):
        storage["api_key"] = environ[ENV_API_KEY]
        store["api_key"] = environ[ENV_API_KEY]
    if environ.get(ENV_BUCKET):
        storage["bucket"] = environ[ENV_BUCKET]
    if environ.get(ENV_LOG_LEVEL):
        data["log_level"] = environ[ENV_LOG_LEVEL]

    data["storage"] = storage
    data["store"] = store
    return data


def load_config(
    path: Optional[Union[str, Path]] = None,
    environ: Optional[Dict[str, str]] = None
) -> SiteBackupConfig:
    """
    Load configuration from a YAML file and the environment.
    
    Args:
        path: Optional YAML configuration file
        environ: Environment mapping, defaults to os.environ
        
    Returns:
        SiteBackupConfig instance
        
    Raises:
        ConfigurationError: If the file is missing, unparsable or invalid
    """
    data: Dict[str, Any] = {}

    if path is not None:
        config_path = Path(path)
        if not config_path.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {config_path}: {e}")
        if loaded is not None and not isinstance(loaded, dict):
            raise ConfigurationError(f"Configuration root must be a mapping: {config_path}")
        data = loaded or {}

    data = _apply_env_overrides(data, dict(os.environ if environ is None else environ))

    try:
        return SiteBackupConfig.model_validate(data)
    except PydanticValidationError as e:
        raise ConfigurationError(
            f"Invalid configuration: {e}",
            details={"errors": e.errors()}
        )
