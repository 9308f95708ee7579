"""Base HTTP client with authentication headers and request throttling."""

from typing import Any, Dict, Optional
import httpx
import logging

from ..config import MANAGEMENT_CONTENT_TYPE, SyncConfig
from ..throttle import RequestThrottle


logger = logging.getLogger(__name__)


class APIError(Exception):
    """Base API error."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class AuthenticationError(APIError):
    """Authentication failed."""
    pass


class NotFoundError(APIError):
    """Resource not found."""
    pass


class VersionMismatchError(APIError):
    """The version header did not match the current resource version."""
    pass


class RateLimitError(APIError):
    """Rate limit exceeded."""
    pass


class BaseClient:
    """Authenticated HTTP client whose every call passes through a ``RequestThrottle``."""

    def __init__(
        self,
        config: SyncConfig,
        throttle: Optional[RequestThrottle] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.config = config
        self.throttle = throttle or RequestThrottle(config.requests_per_second)

        # An injected client belongs to the caller and is left open
        self._owns_client = http_client is None
        self.client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(config.timeout),
            limits=httpx.Limits(max_keepalive_connections=10, max_connections=20)
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    def _get_headers(self, extra: Optional[Dict[str, Any]] = None) -> Dict[str, str]:
        """Default headers merged with caller-supplied overrides."""
        headers = {
            "Authorization": f"Bearer {self.config.management_token}",
            "Content-Type": MANAGEMENT_CONTENT_TYPE,
        }
        if extra:
            headers.update({key: str(value) for key, value in extra.items()})
        return headers

    async def call(
        self,
        url: str,
        method: str = "GET",
        headers: Optional[Dict[str, Any]] = None,
        json_data: Optional[Any] = None,
    ) -> httpx.Response:
        """Make a throttled, authenticated request.

        Non-2xx responses are returned as-is; transport errors propagate.
        """
        request_headers = self._get_headers(headers)

        async def send() -> httpx.Response:
            logger.debug("%s %s", method, url)
            return await self.client.request(
                method=method,
                url=url,
                headers=request_headers,
                json=json_data,
            )

        response = await self.throttle.enqueue(send)
        logger.debug("%s %s -> %s", method, url, response.status_code)
        return response

    def _handle_response_errors(self, response: httpx.Response, body: Any) -> None:
        """Handle common HTTP errors."""
        if response.is_success:
            return

        message = body.get("message") if isinstance(body, dict) else None
        detail = f"{response.status_code} - {message or response.text}"

        if response.status_code == 401:
            raise AuthenticationError(f"Authentication failed: {detail}", response.status_code, body)
        elif response.status_code == 404:
            raise NotFoundError(f"Resource not found: {detail}", response.status_code, body)
        elif response.status_code == 409:
            raise VersionMismatchError(f"Version mismatch: {detail}", response.status_code, body)
        elif response.status_code == 429:
            raise RateLimitError(f"Rate limit exceeded: {detail}", response.status_code, body)
        raise APIError(f"API error: {detail}", response.status_code, body)

    async def call_json(
        self,
        url: str,
        method: str = "GET",
        headers: Optional[Dict[str, Any]] = None,
        json_data: Optional[Any] = None,
    ) -> Dict[str, Any]:
        """Make a request and decode its JSON body."""
        response = await self.call(url, method=method, headers=headers, json_data=json_data)

        try:
            body = response.json() if response.content else {}
        except ValueError:
            body = {}

        if self.config.validate_status:
            self._handle_response_errors(response, body)
        elif not response.is_success:
            logger.warning("%s %s returned %s, decoding body anyway", method, url, response.status_code)

        return body if isinstance(body, dict) else {"items": body}
