"""Content type migrator: upsert, publish and editor interface sync."""

import asyncio
import logging
from typing import Dict, List, Optional, Sequence
from rich.console import Console

from ..config import ContentTypeResult
from ..clients import ManagementClient
from ..clients.management import require_version
from ..descriptors import ContentTypeDescriptor


logger = logging.getLogger(__name__)


class ContentTypeSyncError(Exception):
    """One or more content types failed to sync."""

    def __init__(self, results: List[ContentTypeResult], failures: Dict[str, BaseException]):
        self.results = results
        self.failures = failures
        failed = ", ".join(sorted(failures))
        super().__init__(f"{len(failures)} content type(s) failed to sync: {failed}")


class ContentTypeMigrator:
    """Pushes content type descriptors to a space."""

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

    async def migrate_content_type(self, descriptor: ContentTypeDescriptor) -> ContentTypeResult:
        """Run probe, upsert, publish and (when needed) editor interface sync for one model.

        Steps run strictly in order; each write echoes the version returned by
        the step before it.
        """
        content_type_id = descriptor.id
        body = descriptor.to_api()
        controls = descriptor.editor_controls()

        if self.dry_run:
            return ContentTypeResult(
                content_type_id=content_type_id,
                create_response=body,
                appearance_response={"controls": controls} if controls else None,
                dry_run=True
            )

        # Existing content types must be updated with their current version
        version = await self.client.get_content_type_version(content_type_id)
        logger.debug("Content type %s current version: %s", content_type_id, version)

        create_response = await self.client.put_content_type(content_type_id, body, version)
        activate_response = await self.client.publish_content_type(
            content_type_id, require_version(create_response, f"content type {content_type_id}")
        )

        result = ContentTypeResult(
            content_type_id=content_type_id,
            create_response=create_response,
            activate_response=activate_response
        )

        if not controls:
            return result

        interface_version = await self.client.get_editor_interface_version(content_type_id)
        result.appearance_response = await self.client.put_editor_interface(
            content_type_id, controls, interface_version
        )
        return result

    async def bulk_migrate(self, descriptors: Sequence[ContentTypeDescriptor]) -> List[ContentTypeResult]:
        """Migrate every descriptor concurrently.

        All descriptors run to completion; if any failed, ``ContentTypeSyncError``
        is raised afterwards carrying both the results and the failures.
        """
        semaphore = asyncio.Semaphore(self.concurrency)

        async def migrate_single(descriptor: ContentTypeDescriptor) -> ContentTypeResult:
            async with semaphore:
                return await self.migrate_content_type(descriptor)

        outcomes = await asyncio.gather(
            *(migrate_single(d) for d in descriptors),
            return_exceptions=True
        )

        results: List[ContentTypeResult] = []
        failures: Dict[str, BaseException] = {}
        for descriptor, outcome in zip(descriptors, outcomes):
            if isinstance(outcome, BaseException):
                failures[descriptor.id] = outcome
                self.console.print(f"[red]✗ {descriptor.id}: {outcome}[/red]")
            else:
                results.append(outcome)
                prefix = "[dim](dry run)[/dim] " if outcome.dry_run else ""
                self.console.print(f"[green]✓ {prefix}{descriptor.id}: content type synced[/green]")

        if failures:
            raise ContentTypeSyncError(results, failures)
        return results
