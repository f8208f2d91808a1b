from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Response, status

from orgchart.core.exceptions import (
    CycleDetectedError,
    EmployeeNotFoundError,
    HasSubordinatesError,
    HierarchyError,
)
from orgchart.models.employee import (
    CycleCheck,
    DeletionCheck,
    DropDecision,
    DropRequest,
    Employee,
    EmployeeCreate,
    EmployeeUpdate,
    Forest,
    HierarchyUpdate,
)
from orgchart.services.employee_service import employee_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/employees", tags=["employees"])


def _http_error(err: HierarchyError) -> HTTPException:
    if isinstance(err, EmployeeNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(err))

    detail: dict[str, object] = {"message": str(err)}
    if isinstance(err, CycleDetectedError):
        detail.update(code="cycle_detected", employee_id=err.employee_id, manager_id=err.manager_id)
    elif isinstance(err, HasSubordinatesError):
        detail.update(
            code="has_subordinates",
            employee_id=err.employee_id,
            subordinate_count=err.subordinate_count,
        )
    else:
        detail["code"] = "invalid_operation"
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


@router.get("", response_model=list[Employee])
async def list_employees(search: str | None = None):
    try:
        return await employee_service.list_employees(search)
    except Exception as err:
        logger.exception("Failed to list employees")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve employees",
        ) from err


@router.get("/hierarchy", response_model=Forest)
async def get_hierarchy():
    try:
        return await employee_service.get_hierarchy()
    except Exception as err:
        logger.exception("Failed to build hierarchy")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve hierarchy",
        ) from err


@router.get("/roots", response_model=list[Employee])
async def get_roots():
    try:
        return await employee_service.get_roots()
    except Exception as err:
        logger.exception("Failed to list root employees")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve root employees",
        ) from err


@router.get("/available-managers", response_model=list[Employee])
async def available_managers_for_new_employee():
    try:
        return await employee_service.get_available_managers(None)
    except Exception as err:
        logger.exception("Failed to list available managers")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve available managers",
        ) from err


@router.post("/drop-preview", response_model=DropDecision)
async def preview_drop(request: DropRequest):
    try:
        return await employee_service.preview_drop(request)
    except Exception as err:
        logger.exception("Failed to preview drop of %s", request.dragged_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to preview drop",
        ) from err


@router.get("/{employee_id}", response_model=Employee)
async def get_employee(employee_id: str):
    try:
        return await employee_service.get_employee(employee_id)
    except HierarchyError as err:
        raise _http_error(err) from err


@router.get("/{employee_id}/available-managers", response_model=list[Employee])
async def available_managers(employee_id: str):
    try:
        return await employee_service.get_available_managers(employee_id)
    except HierarchyError as err:
        raise _http_error(err) from err


@router.get("/{employee_id}/chain", response_model=list[Employee])
async def chain_of_command(employee_id: str):
    try:
        return await employee_service.get_chain_of_command(employee_id)
    except HierarchyError as err:
        raise _http_error(err) from err


@router.get("/{employee_id}/can-delete", response_model=DeletionCheck)
async def can_delete(employee_id: str):
    try:
        count = await employee_service.subordinate_count(employee_id)
    except HierarchyError as err:
        raise _http_error(err) from err
    return DeletionCheck(employee_id=employee_id, can_delete=count == 0, subordinate_count=count)


@router.get("/{employee_id}/cycle-check", response_model=CycleCheck)
async def cycle_check(employee_id: str, manager_id: str):
    try:
        cycle = await employee_service.check_cycle(employee_id, manager_id)
    except HierarchyError as err:
        raise _http_error(err) from err
    return CycleCheck(employee_id=employee_id, manager_id=manager_id, would_create_cycle=cycle)


@router.post("", response_model=Employee, status_code=status.HTTP_201_CREATED)
async def create_employee(request: EmployeeCreate):
    try:
        return await employee_service.create(request)
    except HierarchyError as err:
        raise _http_error(err) from err


@router.post("/bulk", response_model=list[Employee], status_code=status.HTTP_201_CREATED)
async def create_employees_bulk(request: list[EmployeeCreate]):
    try:
        return await employee_service.create_bulk(request)
    except HierarchyError as err:
        raise _http_error(err) from err


@router.put("/{employee_id}", response_model=Employee)
async def update_employee(employee_id: str, request: EmployeeUpdate):
    try:
        return await employee_service.update(employee_id, request)
    except HierarchyError as err:
        raise _http_error(err) from err


@router.put("/{employee_id}/hierarchy", response_model=Employee)
async def update_hierarchy(employee_id: str, request: HierarchyUpdate):
    try:
        employee = await employee_service.reparent(employee_id, request.new_manager_id)
    except HierarchyError as err:
        logger.info("Rejected reparent of %s to %s: %s", employee_id, request.new_manager_id, err)
        raise _http_error(err) from err
    return employee


@router.delete("/{employee_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_employee(employee_id: str):
    try:
        await employee_service.remove(employee_id)
    except HierarchyError as err:
        raise _http_error(err) from err
    return Response(status_code=status.HTTP_204_NO_CONTENT)
