"""Contentful Content Management API client."""

from typing import Any, Dict, List, Optional
from .base import APIError, BaseClient, NotFoundError


VERSION_HEADER = "X-Contentful-Version"
CONTENT_TYPE_HEADER = "X-Contentful-Content-Type"


def extract_version(resource: Dict[str, Any]) -> Optional[int]:
    """Return ``sys.version`` of a resource body, or None when it has none."""
    sys_block = resource.get("sys") if isinstance(resource, dict) else None
    if not isinstance(sys_block, dict):
        return None
    return sys_block.get("version")


def require_version(resource: Dict[str, Any], what: str) -> int:
    version = extract_version(resource)
    if version is None:
        raise APIError(f"{what} response has no sys.version", body=resource)
    return version


class ManagementClient(BaseClient):
    """HTTP client for the content types and entries of one space."""

    @property
    def space_url(self) -> str:
        return self.config.space_url

    def content_type_url(self, content_type_id: str) -> str:
        return f"{self.space_url}/content_types/{content_type_id}"

    def editor_interface_url(self, content_type_id: str) -> str:
        return f"{self.content_type_url(content_type_id)}/editor_interface"

    def entries_url(self) -> str:
        return f"{self.space_url}/entries"

    def entry_url(self, entry_id: str) -> str:
        return f"{self.entries_url()}/{entry_id}"

    @staticmethod
    def _version_headers(version: Optional[int]) -> Dict[str, Any]:
        return {VERSION_HEADER: version} if version is not None else {}

    async def probe_version(self, url: str) -> Optional[int]:
        """Current version of a resource, or None if it does not exist yet."""
        try:
            resource = await self.call_json(url)
        except NotFoundError:
            return None
        return extract_version(resource)

    # Content types

    async def get_content_type_version(self, content_type_id: str) -> Optional[int]:
        return await self.probe_version(self.content_type_url(content_type_id))

    async def put_content_type(
        self,
        content_type_id: str,
        body: Dict[str, Any],
        version: Optional[int] = None
    ) -> Dict[str, Any]:
        """Create or update a content type; ``version`` is required for updates."""
        return await self.call_json(
            self.content_type_url(content_type_id),
            method="PUT",
            headers=self._version_headers(version),
            json_data=body
        )

    async def publish_content_type(self, content_type_id: str, version: int) -> Dict[str, Any]:
        """Activate a content type at the given version."""
        return await self.call_json(
            f"{self.content_type_url(content_type_id)}/published",
            method="PUT",
            headers=self._version_headers(version)
        )

    async def get_editor_interface_version(self, content_type_id: str) -> Optional[int]:
        return await self.probe_version(self.editor_interface_url(content_type_id))

    async def put_editor_interface(
        self,
        content_type_id: str,
        controls: List[Dict[str, Any]],
        version: Optional[int]
    ) -> Dict[str, Any]:
        """Replace the editor interface controls of a content type."""
        return await self.call_json(
            self.editor_interface_url(content_type_id),
            method="PUT",
            headers=self._version_headers(version),
            json_data={"controls": controls}
        )

    # Entries

    async def create_entry(
        self,
        content_type_id: str,
        body: Dict[str, Any],
        entry_id: Optional[str] = None
    ) -> Dict[str, Any]:
        """Create an entry; PUT with a known id, POST to let the server assign one."""
        headers = {CONTENT_TYPE_HEADER: content_type_id}
        if entry_id:
            return await self.call_json(self.entry_url(entry_id), method="PUT", headers=headers, json_data=body)
        return await self.call_json(self.entries_url(), method="POST", headers=headers, json_data=body)

    async def get_entry_version(self, entry_id: str) -> Optional[int]:
        """Current version of an existing entry.

        Raises:
            NotFoundError: if the entry does not exist; updates never create entries.
        """
        return extract_version(await self.call_json(self.entry_url(entry_id)))

    async def update_entry(
        self,
        entry_id: str,
        body: Dict[str, Any],
        version: Optional[int],
        content_type_id: Optional[str] = None
    ) -> Dict[str, Any]:
        headers = self._version_headers(version)
        if content_type_id:
            headers[CONTENT_TYPE_HEADER] = content_type_id
        return await self.call_json(self.entry_url(entry_id), method="PUT", headers=headers, json_data=body)

    async def publish_entry(self, entry_id: str, version: int) -> Dict[str, Any]:
        """Publish an entry at the given version."""
        return await self.call_json(
            f"{self.entry_url(entry_id)}/published",
            method="PUT",
            headers=self._version_headers(version)
        )
