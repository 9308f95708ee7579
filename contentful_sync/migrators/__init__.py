"""Migrators that push local descriptors to a space."""

from .content_types import ContentTypeMigrator, ContentTypeSyncError
from .entries import EntryMigrator

__all__ = [
    "ContentTypeMigrator",
    "ContentTypeSyncError",
    "EntryMigrator"
]
