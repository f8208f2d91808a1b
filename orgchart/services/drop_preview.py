"""Instant drag-and-drop decisions for the org chart UI.

These run against the client's current snapshot so the UI can show a valid or
invalid drop target without a round trip. They use the same cycle check as
``EmployeeService.reparent``, so a drop shown as valid is accepted by the
server unless the data changed in between.
"""

from __future__ import annotations

from typing import Sequence

from orgchart.core.hierarchy import index_by_id, would_create_cycle
from orgchart.models.employee import DropDecision, DropRequest, Employee

REASON_UNKNOWN_EMPLOYEE = "unknown_employee"
REASON_SELF = "self"
REASON_CYCLE = "cycle"
REASON_ALREADY_REPORTS_TO_TARGET = "already_reports_to_target"
REASON_ALREADY_ROOT = "already_root"
REASON_ALREADY_SIBLINGS = "already_siblings"


def _reject(reason: str) -> DropDecision:
    return DropDecision(allowed=False, reason=reason)


def drop_on(dragged_id: str, target_id: str, employees: Sequence[Employee]) -> DropDecision:
    """Make the dragged employee report to the target."""
    by_id = index_by_id(employees)
    dragged = by_id.get(dragged_id)
    if dragged is None or target_id not in by_id:
        return _reject(REASON_UNKNOWN_EMPLOYEE)
    if dragged_id == target_id:
        return _reject(REASON_SELF)
    if would_create_cycle(dragged_id, target_id, employees):
        return _reject(REASON_CYCLE)
    if dragged.manager_id == target_id:
        return _reject(REASON_ALREADY_REPORTS_TO_TARGET)
    return DropDecision(allowed=True, new_manager_id=target_id)


def drop_as_root(dragged_id: str, employees: Sequence[Employee]) -> DropDecision:
    dragged = index_by_id(employees).get(dragged_id)
    if dragged is None:
        return _reject(REASON_UNKNOWN_EMPLOYEE)
    if dragged.manager_id is None:
        return _reject(REASON_ALREADY_ROOT)
    return DropDecision(allowed=True, new_manager_id=None)


def drop_beside(dragged_id: str, target_id: str, employees: Sequence[Employee]) -> DropDecision:
    """Make the dragged employee a sibling of the target (same manager)."""
    by_id = index_by_id(employees)
    dragged = by_id.get(dragged_id)
    target = by_id.get(target_id)
    if dragged is None or target is None:
        return _reject(REASON_UNKNOWN_EMPLOYEE)
    if dragged_id == target_id:
        return _reject(REASON_SELF)
    if dragged.manager_id == target.manager_id:
        return _reject(REASON_ALREADY_SIBLINGS)
    if target.manager_id is not None and target.manager_id not in by_id:
        return _reject(REASON_UNKNOWN_EMPLOYEE)
    if target.manager_id is not None and would_create_cycle(dragged_id, target.manager_id, employees):
        return _reject(REASON_CYCLE)
    return DropDecision(allowed=True, new_manager_id=target.manager_id)


def preview(request: DropRequest, employees: Sequence[Employee]) -> DropDecision:
    if request.mode == "root":
        return drop_as_root(request.dragged_id, employees)
    if request.target_id is None:
        return _reject(REASON_UNKNOWN_EMPLOYEE)
    if request.mode == "beside":
        return drop_beside(request.dragged_id, request.target_id, employees)
    return drop_on(request.dragged_id, request.target_id, employees)
