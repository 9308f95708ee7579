"""
Contentful Content Management API Sync

A CLI tool and library that pushes locally defined content types and entries
to a Contentful space:
- Content types: create or update, publish, and sync editor interface controls
- Entries: seed (create + publish) or update (versioned PUT + publish)

Every request goes through a shared rate-limited queue that stays below the
management API's requests-per-second ceiling.
"""

__version__ = "1.0.0"

from .config import SyncConfig, SyncSettings, load_config_from_env
from .sync import ContentfulSync
from .throttle import RequestThrottle

__all__ = ["SyncConfig", "SyncSettings", "load_config_from_env", "ContentfulSync", "RequestThrottle"]
