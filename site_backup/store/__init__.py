"""Content store collaborators."""

from site_backup.store.base import ContentStore, media_type_for, restored_media_entry
from site_backup.store.rest import RestContentStore

__all__ = ["ContentStore", "RestContentStore", "media_type_for", "restored_media_entry"]
