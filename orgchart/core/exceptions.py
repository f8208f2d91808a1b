"""Errors raised by the hierarchy service. Malformed input is rejected by pydantic before these apply."""

from __future__ import annotations


class HierarchyError(Exception):
    pass


class EmployeeNotFoundError(HierarchyError):
    def __init__(self, employee_id: str) -> None:
        super().__init__(f"Employee with id '{employee_id}' not found")
        self.employee_id = employee_id


class InvalidOperationError(HierarchyError):
    pass


class CycleDetectedError(InvalidOperationError):
    def __init__(self, employee_id: str, manager_id: str) -> None:
        super().__init__(
            f"Cannot make '{manager_id}' the manager of '{employee_id}': "
            "an employee cannot report to themselves or to one of their subordinates"
        )
        self.employee_id = employee_id
        self.manager_id = manager_id


class HasSubordinatesError(InvalidOperationError):
    def __init__(self, employee_id: str, subordinate_count: int) -> None:
        super().__init__(
            f"Cannot delete '{employee_id}': {subordinate_count} direct report(s) must be reassigned first"
        )
        self.employee_id = employee_id
        self.subordinate_count = subordinate_count


class DuplicateEmployeeError(InvalidOperationError):
    def __init__(self, employee_id: str) -> None:
        super().__init__(f"Employee with id '{employee_id}' already exists")
        self.employee_id = employee_id
