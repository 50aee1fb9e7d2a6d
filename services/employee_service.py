"""
Admin employee management.

Business rules for the /api/employees endpoints. Routes convert the returned
StaffDoc objects into response DTOs; this module never sees a Request.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from errors import ConflictError, NotFoundError, ValidationError
from infrastructure.storage.protocol import PhotoStorage
from repositories.staff_repository import StaffRepository
from schemas.dto.requests.employee import CreateEmployeeRequest, UpdateEmployeeRequest
from schemas.models.staff import ROLE_ADMIN, ROLE_EMPLOYEE, StaffDoc
from shared.crypto import hash_password
from shared.datetime_utils import parse_datetime
from shared.logging import get_logger
from shared.validators import MIN_PASSWORD_LENGTH, validate_new_password, validate_object_id

log = get_logger(__name__)

DEFAULT_DEPARTMENT = "IT"
DEFAULT_LEAVE_QUOTA = 12


@dataclass(frozen=True)
class EmployeeStats:
    total_employees: int
    total_admins: int
    departments: list[dict[str, Any]]

    @property
    def total_staff(self) -> int:
        return self.total_employees + self.total_admins


def _parse_dob(value: Optional[str]):
    try:
        return parse_datetime(value)
    except ValueError as e:
        raise ValidationError("Invalid date of birth", field="dob") from e


def _check_id(employee_id: str) -> None:
    if not validate_object_id(employee_id):
        raise ValidationError("Invalid employee ID format", field="id")


class EmployeeService:
    def __init__(self, staff: StaffRepository, storage: PhotoStorage) -> None:
        self._staff = staff
        self._storage = storage

    async def create(self, req: CreateEmployeeRequest) -> StaffDoc:
        if await self._staff.employee_id_taken(req.employee_id):
            raise ConflictError("Employee ID already exists", field="employee_id")
        if await self._staff.email_taken(req.email):
            raise ConflictError("Email already exists", field="email")

        staff = StaffDoc(
            employee_id=req.employee_id,
            name=req.name,
            email=req.email,
            password_hash=hash_password(req.password),
            phone=req.phone or "",
            role=req.role or ROLE_EMPLOYEE,
            department=req.department or DEFAULT_DEPARTMENT,
            position=req.position or "",
            current_address=req.current_address or "",
            permanent_address=req.permanent_address or "",
            aadhar=req.aadhar or None,
            leave_quota=req.leave_quota or DEFAULT_LEAVE_QUOTA,
            photo=None,
            dob=_parse_dob(req.dob),
        )
        created = await self._staff.insert(staff)
        log.info("employee_created", staff_id=str(created.id), role=created.role)
        return created

    async def list_all(self) -> list[StaffDoc]:
        return await self._staff.list_all()

    async def get(self, employee_id: str) -> StaffDoc:
        _check_id(employee_id)
        staff = await self._staff.find_by_id(employee_id)
        if staff is None:
            raise NotFoundError("Employee not found")
        return staff

    async def update(self, employee_id: str, req: UpdateEmployeeRequest) -> StaffDoc:
        """Apply only the fields present in the request body.

        ``dob: ""`` (or null) clears the stored date of birth.
        """
        _check_id(employee_id)
        fields = req.model_dump(exclude_unset=True, exclude_none=True, by_alias=True)

        if "dob" in req.model_fields_set:
            fields["dob"] = _parse_dob(req.dob)

        email = fields.get("email")
        if email and await self._staff.email_taken(email, exclude_id=employee_id):
            raise ConflictError("Email already exists", field="email")

        updated = await self._staff.update_fields(employee_id, fields)
        if updated is None:
            raise NotFoundError("Employee not found")
        log.info("employee_updated", staff_id=employee_id, fields=sorted(fields))
        return updated

    async def delete(self, employee_id: str) -> None:
        """Delete the record, then its photo file (if any)."""
        staff = await self.get(employee_id)
        if not await self._staff.delete(employee_id):
            raise NotFoundError("Employee not found")
        if staff.photo:
            await self._storage.delete(staff.photo)
        log.info("employee_deleted", staff_id=employee_id)

    async def reset_password(self, employee_id: str, new_password: str) -> StaffDoc:
        if not validate_new_password(new_password):
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters long",
                field="newPassword",
            )
        _check_id(employee_id)
        staff = await self._staff.update_password_hash(employee_id, hash_password(new_password))
        if staff is None:
            raise NotFoundError("Employee not found")
        log.info("employee_password_reset", staff_id=employee_id)
        return staff

    async def stats(self) -> EmployeeStats:
        return EmployeeStats(
            total_employees=await self._staff.count_by_role(ROLE_EMPLOYEE),
            total_admins=await self._staff.count_by_role(ROLE_ADMIN),
            departments=await self._staff.department_breakdown(),
        )

    async def search(self, query: Optional[str]) -> list[StaffDoc]:
        query = (query or "").strip()
        if not query:
            raise ValidationError("Search query is required", field="q")
        return await self._staff.search(query)
