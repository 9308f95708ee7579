import httpx
import pytest
from rich.console import Console

from contentful_sync.clients import ManagementClient, NotFoundError
from contentful_sync.descriptors import DescriptorError, EntryDescriptor
from contentful_sync.migrators import EntryMigrator


@pytest.fixture
def migrator(client):
    return EntryMigrator(client, Console(quiet=True))


def entry(**data):
    data.setdefault("fields", {"title": {"en-US": "Hello"}})
    return EntryDescriptor.model_validate(data)


async def test_create_without_id_posts_then_publishes(migrator, space):
    result = await migrator.create_entry(entry(contentType="post"))

    assert space.calls == [("POST", "/entries"), ("PUT", "/entries/generated-1/published")]
    create, publish = space.requests
    assert create.headers["X-Contentful-Content-Type"] == "post"
    assert create.version is None
    assert create.body == {"fields": {"title": {"en-US": "Hello"}}}
    assert publish.version == "1"

    assert result.success
    assert result.entry_id == "generated-1"
    assert result.operation == "create"


async def test_create_with_id_puts_then_publishes(migrator, space):
    descriptor = entry(sys={"id": "hello", "contentType": {"sys": {"id": "post"}}})

    result = await migrator.create_entry(descriptor)

    assert space.calls == [("PUT", "/entries/hello"), ("PUT", "/entries/hello/published")]
    assert space.requests[0].version is None
    assert space.requests[1].version == "1"
    assert result.version == 2


async def test_create_without_content_type_fails_before_network(migrator, space):
    with pytest.raises(DescriptorError, match="content type"):
        await migrator.create_entry(entry(id="orphan"))
    assert space.requests == []


async def test_update_sequence_uses_current_version(migrator, space):
    space.add_resource("/entries/hello", 7, fields={})

    result = await migrator.update_entry(entry(id="hello", contentType="post"))

    assert space.calls == [
        ("GET", "/entries/hello"),
        ("PUT", "/entries/hello"),
        ("PUT", "/entries/hello/published"),
    ]
    assert space.requests[1].version == "7"
    assert space.requests[1].body == {"fields": {"title": {"en-US": "Hello"}}}
    assert space.requests[2].version == "8"
    assert result.success and result.operation == "update"


async def test_update_without_id_fails_before_network(migrator, space):
    with pytest.raises(DescriptorError, match="requires id"):
        await migrator.update_entry(entry(contentType="post"))
    assert space.requests == []


async def test_bulk_create_flattens_nested_descriptors(migrator, space):
    a = entry(id="a", contentType="post")
    b = entry(id="b", contentType="post")
    c = entry(id="c", contentType="post")

    results = await migrator.bulk_create([[a, b], c])

    assert [r.entry_id for r in results] == ["a", "b", "c"]
    assert all(r.success for r in results)
    assert sorted(path for method, path in space.calls if method == "PUT" and path.endswith("/published")) == [
        "/entries/a/published",
        "/entries/b/published",
        "/entries/c/published",
    ]


async def test_bulk_failures_are_reported_not_raised(migrator, space):
    space.add_resource("/entries/good", 1, fields={})
    space.failures[("PUT", "/entries/bad")] = 422
    space.add_resource("/entries/bad", 1, fields={})

    results = await migrator.bulk_update([
        entry(id="good"),
        entry(id="bad"),
        entry(contentType="post"),
    ])

    by_id = {r.entry_id: r for r in results}
    assert by_id["good"].success
    assert not by_id["bad"].success
    assert "422" in by_id["bad"].error
    assert not by_id[None].success
    assert "requires id" in by_id[None].error
    assert ("PUT", "/entries/good/published") in space.calls


async def test_bulk_swallows_transport_errors(config, throttle):
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(refuse)) as http_client:
        migrator = EntryMigrator(ManagementClient(config, throttle, http_client), Console(quiet=True))
        results = await migrator.bulk_create([entry(contentType="post")])

    assert not results[0].success
    assert "connection refused" in results[0].error


async def test_dry_run_reports_without_requests(client, space):
    migrator = EntryMigrator(client, Console(quiet=True), dry_run=True)

    results = await migrator.bulk_create([entry(id="a", contentType="post"), entry()])

    assert space.requests == []
    assert results[0].success and results[0].dry_run
    assert not results[1].success


async def test_update_of_missing_entry_fails_without_writing(migrator, space):
    results = await migrator.bulk_update([entry(id="ghost", contentType="post")])

    assert results[0].success is False
    assert "not found" in results[0].error.lower()
    assert space.calls == [("GET", "/entries/ghost")]
    assert "/entries/ghost" not in space.resources


async def test_get_entry_version_raises_for_missing_entry(client):
    with pytest.raises(NotFoundError):
        await client.get_entry_version("ghost")
