from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient
from starlette.testclient import TestClient

from orgchart.main import app
from orgchart.models.employee import Employee
from orgchart.services.employee_repository import InMemoryEmployeeRepository
from orgchart.services.employee_service import EmployeeService, employee_service


def make_employee(
    employee_id: str,
    manager_id: str | None = None,
    *,
    name: str | None = None,
    title: str = "Engineer",
    display_order: int = 0,
    timezone: str = "Europe/Berlin",
) -> Employee:
    return Employee(
        id=employee_id,
        name=name or f"Employee {employee_id}",
        title=title,
        timezone=timezone,
        manager_id=manager_id,
        display_order=display_order,
    )


@pytest.fixture(autouse=True)
def _memory_storage():
    from orgchart.core.config import settings

    original = settings.STORAGE_BACKEND
    settings.STORAGE_BACKEND = "memory"
    yield
    settings.STORAGE_BACKEND = original


@pytest.fixture
def chain():
    """1 <- 2 <- 3 <- 4: each employee reports to the previous one."""
    return [
        make_employee("1"),
        make_employee("2", "1"),
        make_employee("3", "2"),
        make_employee("4", "3"),
    ]


@pytest.fixture
def org():
    """Two trees: ceo -> (cto -> dev1, dev2), (cfo -> acct); solo is a second root."""
    return [
        make_employee("ceo", name="Ada CEO"),
        make_employee("cto", "ceo", name="Grace CTO", display_order=1),
        make_employee("cfo", "ceo", name="Bob CFO", display_order=2),
        make_employee("dev1", "cto", name="Zed Dev"),
        make_employee("dev2", "cto", name="Amy Dev"),
        make_employee("acct", "cfo", name="Carl Accountant"),
        make_employee("solo", name="Solo Founder", display_order=-1),
    ]


@pytest.fixture
def service(org):
    return EmployeeService(InMemoryEmployeeRepository(org))


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
async def async_client():
    from orgchart.core.config import settings

    # ASGITransport does not run the lifespan handler.
    await employee_service.initialize(settings)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    await employee_service.close()
