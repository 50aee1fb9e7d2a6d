"""
Admin employee endpoints. Every route requires a bearer token with role admin.

Static paths (/all, /stats/overview, /search/query) are declared before
/{employee_id} so they are not captured as ids.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status

from dependencies import get_employee_service, require_admin
from schemas.dto.requests.employee import (
    CreateEmployeeRequest,
    ResetEmployeePasswordRequest,
    UpdateEmployeeRequest,
)
from schemas.dto.responses.common import MessageResponse
from schemas.dto.responses.employee import (
    DepartmentCount,
    EmployeeCreatedResponse,
    EmployeeResponse,
    EmployeeStatsResponse,
    EmployeeSummary,
    EmployeeUpdatedResponse,
    PasswordResetEmployee,
    PasswordResetResponse,
)
from schemas.models.staff import StaffDoc
from services.employee_service import EmployeeService
from shared.request_utils import public_url

router = APIRouter(
    prefix="/api/employees",
    tags=["employees"],
    dependencies=[Depends(require_admin)],
)


def _to_response(request: Request, staff: StaffDoc) -> EmployeeResponse:
    return EmployeeResponse.from_doc(staff, public_url(request, staff.photo))


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=EmployeeCreatedResponse,
)
async def create_employee(
    body: CreateEmployeeRequest,
    service: EmployeeService = Depends(get_employee_service),
) -> EmployeeCreatedResponse:
    staff = await service.create(body)
    return EmployeeCreatedResponse(employee=EmployeeSummary.from_doc(staff))


@router.get("/all", response_model=list[EmployeeResponse])
async def list_employees(
    request: Request,
    service: EmployeeService = Depends(get_employee_service),
) -> list[EmployeeResponse]:
    return [_to_response(request, staff) for staff in await service.list_all()]


@router.get("/stats/overview", response_model=EmployeeStatsResponse)
async def employee_stats(
    service: EmployeeService = Depends(get_employee_service),
) -> EmployeeStatsResponse:
    stats = await service.stats()
    return EmployeeStatsResponse(
        total_employees=stats.total_employees,
        total_admins=stats.total_admins,
        total_staff=stats.total_staff,
        departments=[DepartmentCount.model_validate(row) for row in stats.departments],
    )


@router.get("/search/query", response_model=list[EmployeeResponse])
async def search_employees(
    request: Request,
    q: Optional[str] = Query(default=None),
    service: EmployeeService = Depends(get_employee_service),
) -> list[EmployeeResponse]:
    return [_to_response(request, staff) for staff in await service.search(q)]


@router.get("/{employee_id}", response_model=EmployeeResponse)
async def get_employee(
    employee_id: str,
    request: Request,
    service: EmployeeService = Depends(get_employee_service),
) -> EmployeeResponse:
    return _to_response(request, await service.get(employee_id))


@router.put("/{employee_id}", response_model=EmployeeUpdatedResponse)
async def update_employee(
    employee_id: str,
    body: UpdateEmployeeRequest,
    request: Request,
    service: EmployeeService = Depends(get_employee_service),
) -> EmployeeUpdatedResponse:
    staff = await service.update(employee_id, body)
    return EmployeeUpdatedResponse(employee=_to_response(request, staff))


@router.delete("/{employee_id}", response_model=MessageResponse)
async def delete_employee(
    employee_id: str,
    service: EmployeeService = Depends(get_employee_service),
) -> MessageResponse:
    await service.delete(employee_id)
    return MessageResponse(message="Employee deleted successfully")


@router.put("/{employee_id}/reset-password", response_model=PasswordResetResponse)
async def reset_employee_password(
    employee_id: str,
    body: ResetEmployeePasswordRequest,
    service: EmployeeService = Depends(get_employee_service),
) -> PasswordResetResponse:
    staff = await service.reset_password(employee_id, body.new_password)
    return PasswordResetResponse(
        employee=PasswordResetEmployee(
            id=str(staff.id),
            employee_id=staff.employee_id,
            name=staff.name,
            email=staff.email,
        )
    )
