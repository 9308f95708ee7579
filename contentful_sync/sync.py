"""High level entry point tying configuration, client and migrators together."""

from pathlib import Path
from typing import List, Optional, Union
import httpx
from rich.console import Console

from .config import ContentTypeResult, EntryResult, SyncConfig
from .clients import ManagementClient
from .descriptors import DescriptorError, load_content_types, load_entries
from .migrators import ContentTypeMigrator, EntryMigrator
from .throttle import RequestThrottle


class ContentfulSync:
    """Syncs a models directory and an entries directory with one space.

    All operations of one instance share a single throttle, so concurrent
    runs never exceed the configured request rate together.
    """

    def __init__(
        self,
        config: SyncConfig,
        http_client: Optional[httpx.AsyncClient] = None,
        throttle: Optional[RequestThrottle] = None,
        console: Optional[Console] = None
    ):
        self.config = config
        self.console = console or Console()
        self.throttle = throttle or RequestThrottle(config.requests_per_second)
        self.client = ManagementClient(config, throttle=self.throttle, http_client=http_client)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.client.aclose()

    def set_models_path(self, path: Union[str, Path]) -> None:
        self.config.models_path = Path(path)

    def set_entries_path(self, path: Union[str, Path]) -> None:
        self.config.entries_path = Path(path)

    def _require_path(self, path: Optional[Path], what: str) -> Path:
        if path is None:
            raise DescriptorError(f"No {what} path configured")
        return path

    async def migrate_content_types(self) -> List[ContentTypeResult]:
        """Push every content type in the models directory.

        Raises:
            ContentTypeSyncError: after all models ran, if any of them failed.
        """
        descriptors = load_content_types(self._require_path(self.config.models_path, "models"))
        migrator = ContentTypeMigrator(
            self.client, self.console, self.config.concurrency, self.config.dry_run
        )
        return await migrator.bulk_migrate(descriptors)

    async def migrate_entries(self) -> List[EntryResult]:
        """Update every entry in the entries directory."""
        descriptors = load_entries(self._require_path(self.config.entries_path, "entries"))
        migrator = EntryMigrator(self.client, self.console, self.config.concurrency, self.config.dry_run)
        return await migrator.bulk_update(descriptors)

    async def seed_entries(self) -> List[EntryResult]:
        """Create every entry in the entries directory."""
        descriptors = load_entries(self._require_path(self.config.entries_path, "entries"))
        migrator = EntryMigrator(self.client, self.console, self.config.concurrency, self.config.dry_run)
        return await migrator.bulk_create(descriptors)
