"""Employee storage backends.

The hierarchy service only talks to the ``EmployeeRepository`` protocol. Two
backends are provided: a process-local dictionary (default, also used by the
tests) and an Azure Cosmos DB container partitioned on ``/id``.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

from azure.cosmos.aio import CosmosClient
from azure.cosmos.exceptions import CosmosResourceNotFoundError

from orgchart.core.config import Settings
from orgchart.core.exceptions import DuplicateEmployeeError, EmployeeNotFoundError
from orgchart.models.employee import Employee

logger = logging.getLogger(__name__)


class EmployeeRepository(Protocol):
    async def find_all(self) -> list[Employee]: ...

    async def find_by_id(self, employee_id: str) -> Employee | None: ...

    async def count_by_manager(self, manager_id: str) -> int: ...

    async def create(self, employee: Employee) -> Employee: ...

    async def update(self, employee_id: str, changes: dict[str, Any]) -> Employee: ...

    async def update_manager_id(self, employee_id: str, manager_id: str | None) -> Employee: ...

    async def delete(self, employee_id: str) -> None: ...

    async def clear(self) -> None: ...

    async def check_connection(self) -> bool: ...

    async def close(self) -> None: ...


class InMemoryEmployeeRepository:
    def __init__(self, employees: list[Employee] | None = None) -> None:
        self._items: dict[str, Employee] = {}
        for employee in employees or []:
            self._items[employee.id] = employee.model_copy()

    async def find_all(self) -> list[Employee]:
        return [e.model_copy() for e in self._items.values()]

    async def find_by_id(self, employee_id: str) -> Employee | None:
        employee = self._items.get(employee_id)
        return employee.model_copy() if employee else None

    async def count_by_manager(self, manager_id: str) -> int:
        return sum(1 for e in self._items.values() if e.manager_id == manager_id)

    async def create(self, employee: Employee) -> Employee:
        if employee.id in self._items:
            raise DuplicateEmployeeError(employee.id)
        self._items[employee.id] = employee.model_copy()
        return employee.model_copy()

    async def update(self, employee_id: str, changes: dict[str, Any]) -> Employee:
        current = self._items.get(employee_id)
        if current is None:
            raise EmployeeNotFoundError(employee_id)
        updated = Employee(**{**current.model_dump(), **changes, "id": employee_id})
        self._items[employee_id] = updated
        return updated.model_copy()

    async def update_manager_id(self, employee_id: str, manager_id: str | None) -> Employee:
        return await self.update(employee_id, {"manager_id": manager_id})

    async def delete(self, employee_id: str) -> None:
        if self._items.pop(employee_id, None) is None:
            raise EmployeeNotFoundError(employee_id)

    async def clear(self) -> None:
        self._items.clear()

    async def check_connection(self) -> bool:
        return True

    async def close(self) -> None:
        return None


class CosmosEmployeeRepository:
    def __init__(self, client: CosmosClient | None, container: Any) -> None:
        self.client = client
        self.container = container

    @classmethod
    def from_settings(cls, settings: Settings) -> CosmosEmployeeRepository:
        client = CosmosClient(settings.COSMOS_DB_ENDPOINT, settings.COSMOS_DB_KEY)
        db = client.get_database_client(settings.COSMOS_DB_DATABASE)
        container = db.get_container_client(settings.COSMOS_DB_EMPLOYEES_CONTAINER)
        return cls(client, container)

    async def find_all(self) -> list[Employee]:
        results: list[Employee] = []
        async for item in self.container.query_items(
            query="SELECT * FROM c",
            enable_cross_partition_query=True,
        ):
            results.append(self._to_employee(item))
        return results

    async def find_by_id(self, employee_id: str) -> Employee | None:
        try:
            item = await self.container.read_item(item=employee_id, partition_key=employee_id)
        except CosmosResourceNotFoundError:
            return None
        return self._to_employee(item)

    async def count_by_manager(self, manager_id: str) -> int:
        query = "SELECT VALUE COUNT(1) FROM c WHERE c.manager_id = @manager_id"
        params: list[dict[str, Any]] = [{"name": "@manager_id", "value": manager_id}]
        async for count in self.container.query_items(
            query=query,
            parameters=params,
            enable_cross_partition_query=True,
        ):
            return int(count)
        return 0

    async def create(self, employee: Employee) -> Employee:
        if await self.find_by_id(employee.id) is not None:
            raise DuplicateEmployeeError(employee.id)
        item = await self.container.create_item(body=employee.model_dump())
        return self._to_employee(item)

    async def update(self, employee_id: str, changes: dict[str, Any]) -> Employee:
        # A single patch call applies every field or none of them.
        operations = [{"op": "set", "path": f"/{field}", "value": value} for field, value in changes.items()]
        try:
            item = await self.container.patch_item(
                item=employee_id,
                partition_key=employee_id,
                patch_operations=operations,
            )
        except CosmosResourceNotFoundError as err:
            raise EmployeeNotFoundError(employee_id) from err
        return self._to_employee(item)

    async def update_manager_id(self, employee_id: str, manager_id: str | None) -> Employee:
        return await self.update(employee_id, {"manager_id": manager_id})

    async def delete(self, employee_id: str) -> None:
        try:
            await self.container.delete_item(item=employee_id, partition_key=employee_id)
        except CosmosResourceNotFoundError as err:
            raise EmployeeNotFoundError(employee_id) from err

    async def clear(self) -> None:
        ids: list[str] = []
        async for item in self.container.query_items(
            query="SELECT c.id FROM c",
            enable_cross_partition_query=True,
        ):
            ids.append(item["id"])
        for employee_id in ids:
            await self.container.delete_item(item=employee_id, partition_key=employee_id)
        logger.info("Deleted %d employee documents", len(ids))

    async def check_connection(self) -> bool:
        try:
            async for _ in self.container.query_items(
                query="SELECT VALUE COUNT(1) FROM c",
                enable_cross_partition_query=True,
            ):
                return True
            return True
        except Exception:
            logger.exception("Cosmos DB connection check failed")
            return False

    async def close(self) -> None:
        if self.client:
            await self.client.close()
            self.client = None

    def _to_employee(self, raw: dict[str, Any]) -> Employee:
        # Cosmos system properties (_rid, _etag, _ts, ...) are ignored by the model.
        return Employee.model_validate(raw)
