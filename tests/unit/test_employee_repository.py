from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from azure.cosmos.exceptions import CosmosResourceNotFoundError

from orgchart.core.exceptions import DuplicateEmployeeError, EmployeeNotFoundError
from orgchart.services.employee_repository import CosmosEmployeeRepository, InMemoryEmployeeRepository
from tests.conftest import make_employee

SAMPLE_COSMOS_DOC = {
    "id": "JDOE",
    "name": "John Doe",
    "title": "Senior Developer",
    "timezone": "Europe/Berlin",
    "manager_id": "JSMI",
    "display_order": 2,
    "profile_image_url": None,
    "_rid": "abc==",
    "_etag": '"0000"',
    "_ts": 1700000000,
}


def _query_items(*items):
    async def mock_query_items(**kwargs):
        for item in items:
            yield item

    return mock_query_items


def _cosmos_repository(container: MagicMock) -> CosmosEmployeeRepository:
    return CosmosEmployeeRepository(client=None, container=container)


@pytest.mark.anyio
async def test_memory_find_returns_copies():
    repository = InMemoryEmployeeRepository([make_employee("a")])

    found = await repository.find_by_id("a")
    found.name = "Changed"

    assert (await repository.find_by_id("a")).name == "Employee a"
    assert await repository.find_by_id("missing") is None


@pytest.mark.anyio
async def test_memory_count_by_manager():
    repository = InMemoryEmployeeRepository([make_employee("a"), make_employee("b", "a"), make_employee("c", "a")])
    assert await repository.count_by_manager("a") == 2
    assert await repository.count_by_manager("b") == 0


@pytest.mark.anyio
async def test_memory_create_rejects_duplicate():
    repository = InMemoryEmployeeRepository([make_employee("a")])
    with pytest.raises(DuplicateEmployeeError):
        await repository.create(make_employee("a"))


@pytest.mark.anyio
async def test_memory_update_manager_id_keeps_other_fields():
    repository = InMemoryEmployeeRepository([make_employee("a"), make_employee("b", name="Bea", display_order=3)])

    updated = await repository.update_manager_id("b", "a")

    assert updated.manager_id == "a"
    assert updated.name == "Bea"
    assert updated.display_order == 3


@pytest.mark.anyio
async def test_memory_update_and_delete_missing():
    repository = InMemoryEmployeeRepository()
    with pytest.raises(EmployeeNotFoundError):
        await repository.update("x", {"title": "y"})
    with pytest.raises(EmployeeNotFoundError):
        await repository.delete("x")


@pytest.mark.anyio
async def test_memory_clear():
    repository = InMemoryEmployeeRepository([make_employee("a")])
    await repository.clear()
    assert await repository.find_all() == []
    assert await repository.check_connection() is True


@pytest.mark.anyio
async def test_cosmos_find_all_maps_documents():
    container = MagicMock()
    container.query_items = _query_items(SAMPLE_COSMOS_DOC)

    employees = await _cosmos_repository(container).find_all()

    assert len(employees) == 1
    assert employees[0].id == "JDOE"
    assert employees[0].manager_id == "JSMI"
    assert employees[0].display_order == 2


@pytest.mark.anyio
async def test_cosmos_find_by_id():
    container = MagicMock()
    container.read_item = AsyncMock(return_value=SAMPLE_COSMOS_DOC)

    employee = await _cosmos_repository(container).find_by_id("JDOE")

    assert employee.name == "John Doe"
    container.read_item.assert_awaited_once_with(item="JDOE", partition_key="JDOE")


@pytest.mark.anyio
async def test_cosmos_find_by_id_not_found():
    container = MagicMock()
    container.read_item = AsyncMock(side_effect=CosmosResourceNotFoundError(message="missing"))

    assert await _cosmos_repository(container).find_by_id("NOPE") is None


@pytest.mark.anyio
async def test_cosmos_count_by_manager():
    container = MagicMock()
    container.query_items = _query_items(3)

    assert await _cosmos_repository(container).count_by_manager("JSMI") == 3


@pytest.mark.anyio
async def test_cosmos_count_by_manager_empty_result():
    container = MagicMock()
    container.query_items = _query_items()

    assert await _cosmos_repository(container).count_by_manager("JSMI") == 0


@pytest.mark.anyio
async def test_cosmos_create():
    container = MagicMock()
    container.read_item = AsyncMock(side_effect=CosmosResourceNotFoundError(message="missing"))
    container.create_item = AsyncMock(return_value=SAMPLE_COSMOS_DOC)
    employee = make_employee("JDOE", "JSMI", name="John Doe")

    created = await _cosmos_repository(container).create(employee)

    assert created.id == "JDOE"
    body = container.create_item.await_args.kwargs["body"]
    assert body["id"] == "JDOE"
    assert body["manager_id"] == "JSMI"


@pytest.mark.anyio
async def test_cosmos_create_duplicate():
    container = MagicMock()
    container.read_item = AsyncMock(return_value=SAMPLE_COSMOS_DOC)
    container.create_item = AsyncMock()

    with pytest.raises(DuplicateEmployeeError):
        await _cosmos_repository(container).create(make_employee("JDOE"))
    container.create_item.assert_not_awaited()


@pytest.mark.anyio
async def test_cosmos_update_manager_id_patches_single_field():
    container = MagicMock()
    container.patch_item = AsyncMock(return_value={**SAMPLE_COSMOS_DOC, "manager_id": None})

    updated = await _cosmos_repository(container).update_manager_id("JDOE", None)

    assert updated.manager_id is None
    container.patch_item.assert_awaited_once_with(
        item="JDOE",
        partition_key="JDOE",
        patch_operations=[{"op": "set", "path": "/manager_id", "value": None}],
    )


@pytest.mark.anyio
async def test_cosmos_update_missing():
    container = MagicMock()
    container.patch_item = AsyncMock(side_effect=CosmosResourceNotFoundError(message="missing"))

    with pytest.raises(EmployeeNotFoundError):
        await _cosmos_repository(container).update("NOPE", {"title": "x"})


@pytest.mark.anyio
async def test_cosmos_delete():
    container = MagicMock()
    container.delete_item = AsyncMock()

    await _cosmos_repository(container).delete("JDOE")

    container.delete_item.assert_awaited_once_with(item="JDOE", partition_key="JDOE")


@pytest.mark.anyio
async def test_cosmos_clear_deletes_every_document():
    container = MagicMock()
    container.query_items = _query_items({"id": "A"}, {"id": "B"})
    container.delete_item = AsyncMock()

    await _cosmos_repository(container).clear()

    assert container.delete_item.await_count == 2


@pytest.mark.anyio
async def test_cosmos_check_connection():
    container = MagicMock()
    container.query_items = _query_items(42)

    assert await _cosmos_repository(container).check_connection() is True


@pytest.mark.anyio
async def test_cosmos_check_connection_failure():
    container = MagicMock()

    async def failing_query_items(**kwargs):
        raise ConnectionError("unreachable")
        yield  # makes this an async generator

    container.query_items = failing_query_items

    assert await _cosmos_repository(container).check_connection() is False


@pytest.mark.anyio
async def test_cosmos_close():
    client = MagicMock()
    client.close = AsyncMock()
    repository = CosmosEmployeeRepository(client=client, container=MagicMock())

    await repository.close()

    client.close.assert_awaited_once()
    assert repository.client is None
