import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import httpx
import pytest

from contentful_sync.clients import ManagementClient
from contentful_sync.config import SyncConfig
from contentful_sync.throttle import RequestThrottle

SPACE_ID = "space123"
TOKEN = "secret-token"


@dataclass
class RecordedRequest:
    method: str
    path: str
    headers: httpx.Headers
    body: Any

    @property
    def version(self) -> Optional[str]:
        return self.headers.get("X-Contentful-Version")


class FakeClock:
    """Monotonic clock whose sleep advances time instantly."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@dataclass
class FakeSpace:
    """In-memory stand-in for the content management API of one space.

    Writes to existing resources must carry the current version, like the real service.
    """

    resources: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    requests: List[RecordedRequest] = field(default_factory=list)
    failures: Dict[Tuple[str, str], int] = field(default_factory=dict)
    next_id: int = 0

    @property
    def calls(self) -> List[Tuple[str, str]]:
        return [(r.method, r.path) for r in self.requests]

    def add_resource(self, path: str, version: int, **extra: Any) -> None:
        resource_id = path.rstrip("/").split("/")[-1]
        self.resources[path] = {"sys": {"id": resource_id, "version": version}, **extra}

    def _reply(self, status: int, body: Any) -> httpx.Response:
        return httpx.Response(status, json=body)

    def _error(self, status: int, error_id: str, message: str) -> httpx.Response:
        return self._reply(status, {"sys": {"type": "Error", "id": error_id}, "message": message})

    def _write(self, path: str, request: RecordedRequest, body: Dict[str, Any]) -> httpx.Response:
        existing = self.resources.get(path)
        if existing is not None:
            if request.version != str(existing["sys"]["version"]):
                return self._error(409, "VersionMismatch", f"expected version {existing['sys']['version']}")
            version = existing["sys"]["version"] + 1
        else:
            if request.version is not None:
                return self._error(404, "NotFound", "resource does not exist")
            version = 1

        resource_id = path.rstrip("/").split("/")[-1]
        self.resources[path] = {"sys": {"id": resource_id, "version": version}, **body}
        return self._reply(200 if existing else 201, self.resources[path])

    def _publish(self, path: str, request: RecordedRequest) -> httpx.Response:
        parent = path[: -len("/published")]
        resource = self.resources.get(parent)
        if resource is None:
            return self._error(404, "NotFound", "resource does not exist")
        if request.version != str(resource["sys"]["version"]):
            return self._error(409, "VersionMismatch", "stale version on publish")
        resource["sys"]["version"] += 1
        resource["sys"]["publishedVersion"] = int(request.version)
        return self._reply(200, resource)

    def handler(self, request: httpx.Request) -> httpx.Response:
        prefix = f"/spaces/{SPACE_ID}"
        path = request.url.path[len(prefix):]
        body = json.loads(request.content) if request.content else None
        recorded = RecordedRequest(request.method, path, request.headers, body)
        self.requests.append(recorded)

        if (request.method, path) in self.failures:
            status = self.failures[(request.method, path)]
            return self._error(status, "Injected", f"injected failure {status}")

        if request.headers.get("Authorization") != f"Bearer {TOKEN}":
            return self._error(401, "AccessTokenInvalid", "bad token")

        if path.endswith("/published") and request.method == "PUT":
            return self._publish(path, recorded)

        if path.endswith("/editor_interface"):
            parent = path[: -len("/editor_interface")]
            if parent not in self.resources:
                return self._error(404, "NotFound", "content type does not exist")
            if path not in self.resources:
                self.add_resource(path, 1, controls=[])

        if request.method == "GET":
            resource = self.resources.get(path)
            if resource is None:
                return self._error(404, "NotFound", "resource does not exist")
            return self._reply(200, resource)

        if request.method == "POST" and path == "/entries":
            self.next_id += 1
            path = f"/entries/generated-{self.next_id}"
            return self._write(path, recorded, body or {})

        if request.method == "PUT":
            if path.startswith("/entries/") and path not in self.resources:
                if not request.headers.get("X-Contentful-Content-Type"):
                    return self._error(422, "ValidationFailed", "content type header required")
            return self._write(path, recorded, body or {})

        return self._error(405, "MethodNotAllowed", f"{request.method} {path}")


@pytest.fixture
def config() -> SyncConfig:
    return SyncConfig(space_id=SPACE_ID, management_token=TOKEN)


@pytest.fixture
def space() -> FakeSpace:
    return FakeSpace()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def throttle(config: SyncConfig, clock: FakeClock) -> RequestThrottle:
    return RequestThrottle(config.requests_per_second, clock=clock, sleep=clock.sleep)


@pytest.fixture
async def http_client(space: FakeSpace):
    async with httpx.AsyncClient(transport=httpx.MockTransport(space.handler)) as client:
        yield client


@pytest.fixture
def client(config: SyncConfig, throttle: RequestThrottle, http_client: httpx.AsyncClient) -> ManagementClient:
    return ManagementClient(config, throttle=throttle, http_client=http_client)
