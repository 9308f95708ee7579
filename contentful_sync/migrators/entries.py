"""Entry migrator: create (seed) and update entries, then publish them."""

import asyncio
import logging
from typing import Any, Awaitable, Callable, List, Optional
from rich.console import Console

from ..config import EntryResult
from ..clients import APIError, ManagementClient
from ..clients.management import require_version
from ..descriptors import DescriptorError, EntryDescriptor, flatten


logger = logging.getLogger(__name__)


class EntryMigrator:
    """Creates or updates entries in a space.

    Failures are reported per entry and never abort the batch.
    """

    def __init__(
        self,
        client: ManagementClient,
        console: Optional[Console] = None,
        concurrency: int = 10,
        dry_run: bool = False
    ):
        self.client = client
        self.console = console or Console()
        self.concurrency = concurrency
        self.dry_run = dry_run

    async def create_entry(self, descriptor: EntryDescriptor) -> EntryResult:
        """Create an entry and publish it.

        Raises:
            DescriptorError: if the descriptor names no content type.
        """
        content_type_id = descriptor.content_type_id
        entry_id = descriptor.entry_id
        if not content_type_id:
            raise DescriptorError("Create requires a content type id for entry.")

        if self.dry_run:
            return EntryResult(
                entry_id=entry_id,
                content_type_id=content_type_id,
                operation="create",
                success=True,
                dry_run=True
            )

        created = await self.client.create_entry(content_type_id, descriptor.to_api(), entry_id)
        entry_id = entry_id or (created.get("sys") or {}).get("id")
        if not entry_id:
            raise APIError("create entry response has no sys.id", body=created)

        published = await self.client.publish_entry(entry_id, require_version(created, f"entry {entry_id}"))

        return EntryResult(
            entry_id=entry_id,
            content_type_id=content_type_id,
            operation="create",
            success=True,
            version=(published.get("sys") or {}).get("version")
        )

    async def update_entry(self, descriptor: EntryDescriptor) -> EntryResult:
        """Update an existing entry with its current version, then republish it.

        Raises:
            DescriptorError: if the descriptor has no entry id.
        """
        entry_id = descriptor.entry_id
        content_type_id = descriptor.content_type_id
        if not entry_id:
            raise DescriptorError("Entry requires id to update")

        if self.dry_run:
            return EntryResult(
                entry_id=entry_id,
                content_type_id=content_type_id,
                operation="update",
                success=True,
                dry_run=True
            )

        version = await self.client.get_entry_version(entry_id)
        updated = await self.client.update_entry(entry_id, descriptor.to_api(), version, content_type_id)
        published = await self.client.publish_entry(entry_id, require_version(updated, f"entry {entry_id}"))

        return EntryResult(
            entry_id=entry_id,
            content_type_id=content_type_id,
            operation="update",
            success=True,
            version=(published.get("sys") or {}).get("version")
        )

    async def _run_batch(
        self,
        descriptors: Any,
        operation: str,
        action: Callable[[EntryDescriptor], Awaitable[EntryResult]]
    ) -> List[EntryResult]:
        items = flatten(descriptors)
        semaphore = asyncio.Semaphore(self.concurrency)

        async def run_single(descriptor: EntryDescriptor) -> EntryResult:
            async with semaphore:
                try:
                    result = await action(descriptor)
                except (DescriptorError, APIError) as e:
                    result = self._failure(descriptor, operation, str(e))
                except Exception as e:
                    result = self._failure(descriptor, operation, f"Unexpected error: {e}")

            self._log_result(result)
            return result

        return list(await asyncio.gather(*(run_single(d) for d in items)))

    @staticmethod
    def _failure(descriptor: EntryDescriptor, operation: str, error: str) -> EntryResult:
        logger.warning("Entry %s %s failed: %s", descriptor.entry_id or "<new>", operation, error)
        return EntryResult(
            entry_id=descriptor.entry_id,
            content_type_id=descriptor.content_type_id,
            operation=operation,
            success=False,
            error=error
        )

    def _log_result(self, result: EntryResult) -> None:
        label = result.entry_id or "<new entry>"
        if result.success:
            verb = "Would " + result.operation if result.dry_run else result.operation.capitalize() + "d"
            self.console.print(f"[green]✓ {label}: {verb} entry[/green]")
        else:
            self.console.print(f"[red]✗ {label}: {result.error}[/red]")

    async def bulk_create(self, descriptors: Any) -> List[EntryResult]:
        """Create every (possibly nested) entry descriptor."""
        return await self._run_batch(descriptors, "create", self.create_entry)

    async def bulk_update(self, descriptors: Any) -> List[EntryResult]:
        """Update every (possibly nested) entry descriptor."""
        return await self._run_batch(descriptors, "update", self.update_entry)
