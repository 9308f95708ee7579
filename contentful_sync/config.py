"""Configuration models and settings for Contentful management API sync."""

from pathlib import Path
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings


MANAGEMENT_CONTENT_TYPE = "application/vnd.contentful.management.v1+json"


class SyncConfig(BaseModel):
    """Main application configuration."""

    space_id: str
    management_token: str
    base_url: str = "https://api.contentful.com"

    # Descriptor directories, mutable between sync runs
    models_path: Optional[Path] = None
    entries_path: Optional[Path] = None

    # Processing options
    requests_per_second: int = Field(default=7, ge=1, le=10)
    concurrency: int = Field(default=10, ge=1, le=50)
    timeout: float = Field(default=30.0, gt=0)

    validate_status: bool = True
    dry_run: bool = False

    @property
    def space_url(self) -> str:
        """Root URL for every resource in the space."""
        return f"{self.base_url.rstrip('/')}/spaces/{self.space_id}"

    @property
    def is_configured(self) -> bool:
        """Check that credentials for the space are present."""
        return bool(self.space_id and self.management_token)


class SyncSettings(BaseSettings):
    """Sync settings loaded from ``CONTENTFUL_*`` environment variables."""

    space_id: str = Field(default="", description="Contentful space id")
    management_token: str = Field(default="", description="Content management API token")
    base_url: str = Field(default="https://api.contentful.com")
    models_path: Optional[Path] = Field(default=None, description="Directory of content type descriptors")
    entries_path: Optional[Path] = Field(default=None, description="Directory of entry descriptors")
    requests_per_second: int = 7
    concurrency: int = 10
    validate_status: bool = True

    model_config = {
        "env_prefix": "CONTENTFUL_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    def to_config(self, **overrides: Any) -> SyncConfig:
        """Build a ``SyncConfig``, letting non-None overrides win."""
        values = self.model_dump()
        values.update({k: v for k, v in overrides.items() if v is not None})
        return SyncConfig(**values)


class ContentTypeResult(BaseModel):
    """Responses collected while syncing one content type."""

    content_type_id: str
    create_response: Dict[str, Any] = Field(default_factory=dict)
    activate_response: Dict[str, Any] = Field(default_factory=dict)
    appearance_response: Optional[Dict[str, Any]] = None
    dry_run: bool = False


class EntryResult(BaseModel):
    """Result of a create or update on one entry."""

    entry_id: Optional[str] = None
    content_type_id: Optional[str] = None
    operation: Literal["create", "update"]
    success: bool
    error: Optional[str] = None
    version: Optional[int] = None
    dry_run: bool = False


class SyncStats(BaseModel):
    """Statistics for a sync run."""

    content_types: int = 0
    editor_interfaces: int = 0
    entries_created: int = 0
    entries_updated: int = 0
    errors: int = 0
    failures: List[Dict[str, str]] = Field(default_factory=list)

    def add_content_type(self, result: ContentTypeResult) -> None:
        self.content_types += 1
        if result.appearance_response is not None:
            self.editor_interfaces += 1

    def add_entry(self, result: EntryResult) -> None:
        """Add an entry result to the statistics."""
        if result.success:
            if result.operation == "create":
                self.entries_created += 1
            else:
                self.entries_updated += 1
        else:
            self.add_failure(result.entry_id or "<new>", result.operation, result.error or "unknown error")

    def add_failure(self, item_id: str, operation: str, error: str) -> None:
        self.errors += 1
        self.failures.append({"id": item_id, "operation": operation, "error": error})


def load_config_from_env(**overrides: Any) -> SyncConfig:
    """Load configuration from environment variables and an optional ``.env`` file."""
    from dotenv import load_dotenv
    load_dotenv()
    return SyncSettings().to_config(**overrides)
