"""Employee service: CRUD plus validated changes to the reporting line."""

from __future__ import annotations

import asyncio
import logging

from orgchart.core import hierarchy
from orgchart.core.config import Settings
from orgchart.core.exceptions import (
    CycleDetectedError,
    DuplicateEmployeeError,
    EmployeeNotFoundError,
    HasSubordinatesError,
)
from orgchart.models.employee import DropDecision, DropRequest, Employee, EmployeeCreate, EmployeeUpdate, Forest
from orgchart.services import drop_preview
from orgchart.services.employee_repository import (
    CosmosEmployeeRepository,
    EmployeeRepository,
    InMemoryEmployeeRepository,
)

logger = logging.getLogger(__name__)


class EmployeeService:
    """Validates every mutation against a fresh snapshot before writing it.

    Mutations hold ``self._lock`` from the read through the write, so two
    reparent requests handled by this process cannot both pass the cycle
    check and jointly close a loop. Storage failures propagate unchanged and
    are never retried here: a retry must start over with a new snapshot.
    """

    def __init__(self, repository: EmployeeRepository | None = None) -> None:
        self.repository: EmployeeRepository | None = repository
        self.backend: str = "memory" if repository is not None else ""
        self.initialized: bool = repository is not None
        self._lock = asyncio.Lock()

    async def initialize(self, settings: Settings) -> None:
        if self.initialized:
            return

        self._lock = asyncio.Lock()
        if settings.STORAGE_BACKEND == "cosmos":
            if settings.COSMOS_DB_ENDPOINT and settings.COSMOS_DB_KEY:
                self.repository = CosmosEmployeeRepository.from_settings(settings)
                self.backend = "cosmos"
            else:
                logger.warning("Cosmos DB credentials missing, falling back to in-memory storage")
        if self.repository is None:
            self.repository = InMemoryEmployeeRepository()
            self.backend = "memory"

        self.initialized = True
        logger.info("EmployeeService initialized (backend=%s)", self.backend)

    async def close(self) -> None:
        if self.repository is not None:
            await self.repository.close()
        self.repository = None
        self.backend = ""
        self.initialized = False

    @property
    def store(self) -> EmployeeRepository:
        if self.repository is None:
            raise RuntimeError("EmployeeService not initialized")
        return self.repository

    async def check_connection(self) -> bool:
        if self.repository is None:
            return False
        return await self.repository.check_connection()

    async def _snapshot(self) -> list[Employee]:
        return await self.store.find_all()

    async def _require(self, employee_id: str) -> Employee:
        employee = await self.store.find_by_id(employee_id)
        if employee is None:
            raise EmployeeNotFoundError(employee_id)
        return employee

    # Queries

    async def list_employees(self, search: str | None = None) -> list[Employee]:
        employees = await self._snapshot()
        if not search or not search.strip():
            return sorted(employees, key=hierarchy.sort_key)
        needle = search.strip().casefold()
        return sorted((e for e in employees if needle in e.name.casefold()), key=lambda e: e.name)

    async def get_employee(self, employee_id: str) -> Employee:
        return await self._require(employee_id)

    async def get_hierarchy(self) -> Forest:
        return hierarchy.build_forest(await self._snapshot())

    async def get_roots(self) -> list[Employee]:
        return hierarchy.roots_of(await self._snapshot())

    async def get_available_managers(self, employee_id: str | None = None) -> list[Employee]:
        employees = await self._snapshot()
        if employee_id is not None and employee_id not in hierarchy.index_by_id(employees):
            raise EmployeeNotFoundError(employee_id)
        return hierarchy.available_managers(employee_id, employees)

    async def get_chain_of_command(self, employee_id: str) -> list[Employee]:
        employees = await self._snapshot()
        if employee_id not in hierarchy.index_by_id(employees):
            raise EmployeeNotFoundError(employee_id)
        return hierarchy.chain_of_command(employee_id, employees)

    async def check_cycle(self, employee_id: str, manager_id: str) -> bool:
        employees = await self._snapshot()
        by_id = hierarchy.index_by_id(employees)
        for required in (employee_id, manager_id):
            if required not in by_id:
                raise EmployeeNotFoundError(required)
        return hierarchy.would_create_cycle(employee_id, manager_id, employees)

    async def preview_drop(self, request: DropRequest) -> DropDecision:
        return drop_preview.preview(request, await self._snapshot())

    async def subordinate_count(self, employee_id: str) -> int:
        await self._require(employee_id)
        return await self.store.count_by_manager(employee_id)

    async def can_delete(self, employee_id: str) -> bool:
        return await self.subordinate_count(employee_id) == 0

    # Mutations

    async def create(self, data: EmployeeCreate) -> Employee:
        async with self._lock:
            employees = await self._snapshot()
            by_id = hierarchy.index_by_id(employees)
            employee = data.to_employee()
            if employee.id in by_id:
                raise DuplicateEmployeeError(employee.id)
            if employee.manager_id is not None and employee.manager_id not in by_id:
                raise EmployeeNotFoundError(employee.manager_id)

            created = await self.store.create(employee)
        logger.info("Created employee %s (manager=%s)", created.id, created.manager_id)
        return created

    async def create_bulk(self, items: list[EmployeeCreate]) -> list[Employee]:
        async with self._lock:
            known = set(hierarchy.index_by_id(await self._snapshot()))
            pending: list[Employee] = []
            for data in items:
                employee = data.to_employee()
                if employee.id in known:
                    raise DuplicateEmployeeError(employee.id)
                # Managers must already exist or appear earlier in the batch.
                if employee.manager_id is not None and employee.manager_id not in known:
                    raise EmployeeNotFoundError(employee.manager_id)
                known.add(employee.id)
                pending.append(employee)

            created: list[Employee] = []
            try:
                for employee in pending:
                    created.append(await self.store.create(employee))
            except Exception:
                await self._rollback(created)
                raise
        logger.info("Created %d employees in bulk", len(created))
        return created

    async def update(self, employee_id: str, data: EmployeeUpdate) -> Employee:
        changes = data.changes()
        async with self._lock:
            employees = await self._snapshot()
            current = hierarchy.index_by_id(employees).get(employee_id)
            if current is None:
                raise EmployeeNotFoundError(employee_id)

            if "manager_id" in changes:
                if changes["manager_id"] == current.manager_id:
                    del changes["manager_id"]
                else:
                    self._validate_reparent(employee_id, changes["manager_id"], employees)

            if not changes:
                return current
            updated = await self.store.update(employee_id, changes)
        logger.info("Updated employee %s fields=%s", employee_id, sorted(changes))
        return updated

    async def reparent(self, employee_id: str, new_manager_id: str | None) -> Employee:
        async with self._lock:
            employees = await self._snapshot()
            current = hierarchy.index_by_id(employees).get(employee_id)
            if current is None:
                raise EmployeeNotFoundError(employee_id)

            self._validate_reparent(employee_id, new_manager_id, employees)
            if current.manager_id == new_manager_id:
                logger.debug("Employee %s already reports to %s", employee_id, new_manager_id)
                return current

            updated = await self.store.update_manager_id(employee_id, new_manager_id)
        logger.info(
            "Reparented employee %s: manager %s -> %s",
            employee_id,
            current.manager_id,
            updated.manager_id,
        )
        return updated

    async def remove(self, employee_id: str) -> None:
        async with self._lock:
            await self._require(employee_id)
            count = await self.store.count_by_manager(employee_id)
            if count > 0:
                raise HasSubordinatesError(employee_id, count)
            await self.store.delete(employee_id)
        logger.info("Removed employee %s", employee_id)

    async def clear(self) -> None:
        async with self._lock:
            await self.store.clear()
        logger.info("Cleared all employees")

    async def _rollback(self, created: list[Employee]) -> None:
        logger.warning("Bulk create failed after %d write(s), removing them", len(created))
        # Reports were written after their managers, so delete in reverse.
        for employee in reversed(created):
            try:
                await self.store.delete(employee.id)
            except Exception:
                logger.exception("Failed to roll back employee %s", employee.id)

    def _validate_reparent(self, employee_id: str, new_manager_id: str | None, employees: list[Employee]) -> None:
        if new_manager_id is None:
            return
        if new_manager_id != employee_id and new_manager_id not in hierarchy.index_by_id(employees):
            raise EmployeeNotFoundError(new_manager_id)
        if hierarchy.would_create_cycle(employee_id, new_manager_id, employees):
            raise CycleDetectedError(employee_id, new_manager_id)


employee_service = EmployeeService()
