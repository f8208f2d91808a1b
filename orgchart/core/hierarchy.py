"""Reporting-line graph queries over a snapshot of employees.

Every function here is pure: it takes the flat employee collection as an
argument, never mutates it and keeps no state between calls. The
authoritative mutation path (``EmployeeService``) and the drag-and-drop
preview (``drop_preview``) both go through these functions so they always
agree on what is a legal move.

All traversals share one primitive, :func:`reachable_ids`, which walks the
``manager_id`` relation either upwards (ancestors) or downwards
(descendants). It tracks visited ids, so a corrupt snapshot that already
contains a cycle still terminates.
"""

from __future__ import annotations

import logging
from collections import defaultdict, deque
from typing import Iterable, Literal, Sequence

from orgchart.models.employee import Employee, Forest, TreeNode

logger = logging.getLogger(__name__)

Direction = Literal["ancestors", "descendants"]


def sort_key(employee: Employee) -> tuple[int, str]:
    return (employee.display_order, employee.name)


def index_by_id(employees: Iterable[Employee]) -> dict[str, Employee]:
    return {e.id: e for e in employees}


def index_by_manager(employees: Iterable[Employee]) -> dict[str | None, list[Employee]]:
    """Group employees by ``manager_id``; each group is sorted by display order then name."""
    groups: dict[str | None, list[Employee]] = defaultdict(list)
    for employee in employees:
        groups[employee.manager_id].append(employee)
    for members in groups.values():
        members.sort(key=sort_key)
    return groups


def reachable_ids(employee_id: str, employees: Sequence[Employee], direction: Direction) -> list[str]:
    """Ids reachable from ``employee_id`` along the reporting line, nearest first.

    ``"ancestors"`` follows ``manager_id`` upwards and stops at a root or at a
    reference to an employee missing from the snapshot. ``"descendants"``
    collects every transitive report breadth-first. The start id itself is
    never included, and no id is returned twice.
    """
    visited = {employee_id}
    found: list[str] = []

    if direction == "ancestors":
        by_id = index_by_id(employees)
        current = by_id.get(employee_id)
        while current is not None and current.manager_id is not None:
            manager_id = current.manager_id
            if manager_id in visited:
                logger.warning("Reporting-line cycle found above employee %s at %s", employee_id, manager_id)
                break
            visited.add(manager_id)
            found.append(manager_id)
            current = by_id.get(manager_id)
        return found

    children = index_by_manager(employees)
    queue = deque([employee_id])
    while queue:
        for child in children.get(queue.popleft(), []):
            if child.id in visited:
                logger.warning("Reporting-line cycle found below employee %s at %s", employee_id, child.id)
                continue
            visited.add(child.id)
            found.append(child.id)
            queue.append(child.id)
    return found


def ancestors_of(employee_id: str, employees: Sequence[Employee]) -> list[str]:
    return reachable_ids(employee_id, employees, "ancestors")


def descendants_of(employee_id: str, employees: Sequence[Employee]) -> set[str]:
    return set(reachable_ids(employee_id, employees, "descendants"))


def would_create_cycle(employee_id: str, proposed_manager_id: str, employees: Sequence[Employee]) -> bool:
    """True if making ``proposed_manager_id`` the manager of ``employee_id`` closes a loop.

    That is the case when the two ids are equal or when the employee appears
    anywhere on the proposed manager's chain of command. A chain that ends at
    a root, or at an id missing from the snapshot, is cycle-free.
    """
    if employee_id == proposed_manager_id:
        return True
    return employee_id in ancestors_of(proposed_manager_id, employees)


def chain_of_command(employee_id: str, employees: Sequence[Employee]) -> list[Employee]:
    """Managers of ``employee_id`` from the direct manager up to the root."""
    by_id = index_by_id(employees)
    return [by_id[i] for i in ancestors_of(employee_id, employees) if i in by_id]


def available_managers(employee_id: str | None, employees: Sequence[Employee]) -> list[Employee]:
    """Employees that may become the manager of ``employee_id``.

    Excludes the employee and all of its descendants. ``None`` stands for an
    employee that does not exist yet, for whom everyone is eligible.
    """
    if employee_id is None:
        return sorted(employees, key=sort_key)
    excluded = descendants_of(employee_id, employees) | {employee_id}
    return sorted((e for e in employees if e.id not in excluded), key=sort_key)


def subordinate_count(employee_id: str, employees: Iterable[Employee]) -> int:
    return sum(1 for e in employees if e.manager_id == employee_id)


def can_delete(employee_id: str, employees: Iterable[Employee]) -> bool:
    return subordinate_count(employee_id, employees) == 0


def roots_of(employees: Iterable[Employee]) -> list[Employee]:
    return sorted((e for e in employees if e.manager_id is None), key=sort_key)


def build_forest(employees: Sequence[Employee]) -> Forest:
    """Lay the flat collection out as a forest, breadth-first from its roots.

    Siblings are ordered by ``(display_order, name)`` at every level, so the
    same snapshot always yields the same forest. Employees that cannot be
    reached from a root (their manager is missing, or they sit on a cycle)
    are returned in ``orphans`` instead of raising.
    """
    children = index_by_manager(employees)
    nodes: list[TreeNode] = []
    placed: set[str] = set()

    queue: deque[TreeNode] = deque()
    for root in children.get(None, []):
        node = TreeNode(**root.model_dump(), level=0)
        nodes.append(node)
        placed.add(root.id)
        queue.append(node)
    root_ids = [node.id for node in nodes]

    while queue:
        parent = queue.popleft()
        for child in children.get(parent.id, []):
            if child.id in placed:
                continue
            node = TreeNode(**child.model_dump(), level=parent.level + 1)
            parent.subordinate_ids.append(child.id)
            nodes.append(node)
            placed.add(child.id)
            queue.append(node)

    orphans = sorted((e for e in employees if e.id not in placed), key=sort_key)
    if orphans:
        logger.warning(
            "%d employee(s) unreachable from any root: %s",
            len(orphans),
            ", ".join(e.id for e in orphans),
        )
    return Forest(root_ids=root_ids, nodes=nodes, orphans=orphans)


def dangling_references(employees: Sequence[Employee]) -> list[Employee]:
    """Employees whose ``manager_id`` points at an id missing from the snapshot."""
    known = {e.id for e in employees}
    return [e for e in employees if e.manager_id is not None and e.manager_id not in known]
