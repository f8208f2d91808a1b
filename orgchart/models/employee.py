"""Employee models: the stored record, write payloads and derived tree views."""

from __future__ import annotations

import uuid
from typing import Literal

from pydantic import BaseModel, Field, computed_field, field_validator

from orgchart.core import formatting


def new_employee_id() -> str:
    return str(uuid.uuid4())


def blank_to_none(value: str | None) -> str | None:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class EmployeeFields(BaseModel):
    """Fields shared by the stored record and the create payload."""

    name: str = Field(..., min_length=1, max_length=200)
    title: str = Field(..., min_length=1, max_length=200)
    timezone: str = Field(..., min_length=1, max_length=64)
    manager_id: str | None = None
    display_order: int = 0
    profile_image_url: str | None = None

    model_config = {"str_strip_whitespace": True}

    @field_validator("manager_id", mode="before")
    @classmethod
    def empty_manager_means_root(cls, value):
        return blank_to_none(value)


class Employee(EmployeeFields):
    """A single employee. Two records are the same employee iff their ids match."""

    id: str = Field(..., min_length=1)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Employee):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)


class EmployeeCreate(EmployeeFields):
    # Optional so seed files can reference managers declared earlier in the batch.
    id: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def empty_id_means_generated(cls, value):
        return blank_to_none(value)

    def to_employee(self) -> Employee:
        data = self.model_dump()
        data["id"] = self.id or new_employee_id()
        return Employee(**data)


class EmployeeUpdate(BaseModel):
    """Partial update. Only fields the caller actually sent are applied."""

    name: str | None = Field(default=None, min_length=1, max_length=200)
    title: str | None = Field(default=None, min_length=1, max_length=200)
    timezone: str | None = Field(default=None, min_length=1, max_length=64)
    manager_id: str | None = None
    display_order: int | None = None
    profile_image_url: str | None = None

    model_config = {"str_strip_whitespace": True}

    @field_validator("manager_id", mode="before")
    @classmethod
    def empty_manager_means_root(cls, value):
        return blank_to_none(value)

    @field_validator("name", "title", "timezone", "display_order")
    @classmethod
    def reject_explicit_null(cls, value):
        if value is None:
            raise ValueError("field may be omitted but not set to null")
        return value

    def changes(self) -> dict[str, object]:
        return self.model_dump(exclude_unset=True)


class HierarchyUpdate(BaseModel):
    new_manager_id: str | None = None

    @field_validator("new_manager_id", mode="before")
    @classmethod
    def empty_manager_means_root(cls, value):
        return blank_to_none(value)


class TreeNode(Employee):
    """An employee as rendered in the org chart, linked to its direct reports by id."""

    level: int = 0
    subordinate_ids: list[str] = Field(default_factory=list)

    @computed_field
    @property
    def initials(self) -> str:
        return formatting.initials(self.name)

    @computed_field
    @property
    def tier(self) -> str:
        return formatting.level_label(self.level)

    @computed_field
    @property
    def timezone_label(self) -> str:
        return formatting.format_timezone(self.timezone)


class Forest(BaseModel):
    """The org chart as a flat node list.

    ``nodes`` is in breadth-first order (every manager precedes its reports) and
    stays flat so that serializing a very deep chain never nests.
    """

    root_ids: list[str] = Field(default_factory=list)
    nodes: list[TreeNode] = Field(default_factory=list)
    # Employees not reachable from any root (dangling manager reference or a corrupt cycle).
    orphans: list[Employee] = Field(default_factory=list)

    def node(self, employee_id: str) -> TreeNode | None:
        return next((n for n in self.nodes if n.id == employee_id), None)

    def roots(self) -> list[TreeNode]:
        return [self.node(root_id) for root_id in self.root_ids]

    def subordinates_of(self, employee_id: str) -> list[TreeNode]:
        node = self.node(employee_id)
        if node is None:
            return []
        return [self.node(child_id) for child_id in node.subordinate_ids]


class CycleCheck(BaseModel):
    employee_id: str
    manager_id: str
    would_create_cycle: bool


class DeletionCheck(BaseModel):
    employee_id: str
    can_delete: bool
    subordinate_count: int


class DropRequest(BaseModel):
    dragged_id: str
    target_id: str | None = None
    # "on": report to target, "beside": share target's manager, "root": no manager
    mode: Literal["on", "beside", "root"] = "on"


class DropDecision(BaseModel):
    allowed: bool
    new_manager_id: str | None = None
    reason: str | None = None
