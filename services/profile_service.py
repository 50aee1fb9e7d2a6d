"""
Profile management for the signed-in staff member and, for admins, for any
staff member.

Photo replacement order: store the new file, point the record at it, then
remove the old file. If the record update fails the new file is removed so
no orphan is left behind.
"""

from __future__ import annotations

from typing import Optional

from errors import ConflictError, NotFoundError, ValidationError
from infrastructure.storage.protocol import PhotoStorage
from repositories.staff_repository import StaffRepository
from schemas.dto.requests.profile import AdminUpdateProfileRequest, UpdateProfileRequest
from schemas.models.staff import StaffDoc
from shared.logging import get_logger
from shared.validators import validate_image_upload, validate_object_id

log = get_logger(__name__)

MAX_PHOTO_BYTES = 5 * 1024 * 1024


class ProfileService:
    def __init__(
        self,
        staff: StaffRepository,
        storage: PhotoStorage,
        max_photo_bytes: int = MAX_PHOTO_BYTES,
    ) -> None:
        self._staff = staff
        self._storage = storage
        self._max_photo_bytes = max_photo_bytes

    async def _load(self, staff_id: str, missing_message: str) -> StaffDoc:
        staff = await self._staff.find_by_id(staff_id)
        if staff is None:
            raise NotFoundError(missing_message)
        return staff

    async def _load_employee(self, employee_id: str) -> StaffDoc:
        if not validate_object_id(employee_id):
            raise ValidationError("Invalid employee ID format", field="id")
        return await self._load(employee_id, "Employee not found")

    # ── Own profile ──────────────────────────────────────────────────────────

    async def get_own(self, staff_id: str) -> StaffDoc:
        return await self._load(staff_id, "Profile not found")

    async def update_own(self, staff_id: str, req: UpdateProfileRequest) -> StaffDoc:
        if not req.name:
            raise ValidationError("Name is required", field="name")
        updated = await self._staff.update_fields(
            staff_id,
            {
                "name": req.name,
                "phone": req.phone or None,
                "currentAddress": req.current_address or "",
                "permanentAddress": req.permanent_address or "",
            },
        )
        if updated is None:
            raise NotFoundError("Profile not found")
        log.info("profile_updated", staff_id=staff_id)
        return updated

    async def upload_photo(
        self,
        staff_id: str,
        filename: Optional[str],
        content_type: Optional[str],
        data: bytes,
    ) -> str:
        staff = await self._load(staff_id, "Profile not found")
        return await self._replace_photo(staff, filename, content_type, data)

    async def delete_photo(self, staff_id: str) -> None:
        staff = await self._load(staff_id, "Profile not found")
        await self._remove_photo(staff)

    # ── Admin views ──────────────────────────────────────────────────────────

    async def list_profiles(self) -> list[StaffDoc]:
        return await self._staff.list_all()

    async def get_employee(self, employee_id: str) -> StaffDoc:
        return await self._load_employee(employee_id)

    async def update_employee(self, employee_id: str, req: AdminUpdateProfileRequest) -> StaffDoc:
        if not validate_object_id(employee_id):
            raise ValidationError("Invalid employee ID format", field="id")
        fields = req.model_dump(exclude_unset=True, exclude_none=True, by_alias=True)

        email = fields.get("email")
        if email and await self._staff.email_taken(email, exclude_id=employee_id):
            raise ConflictError("Email already exists", field="email")

        updated = await self._staff.update_fields(employee_id, fields)
        if updated is None:
            raise NotFoundError("Employee not found")
        log.info("employee_profile_updated", staff_id=employee_id, fields=sorted(fields))
        return updated

    async def upload_employee_photo(
        self,
        employee_id: str,
        filename: Optional[str],
        content_type: Optional[str],
        data: bytes,
    ) -> str:
        staff = await self._load_employee(employee_id)
        return await self._replace_photo(staff, filename, content_type, data)

    async def delete_employee_photo(self, employee_id: str) -> None:
        staff = await self._load_employee(employee_id)
        await self._remove_photo(staff)

    # ── Photo handling ───────────────────────────────────────────────────────

    async def _replace_photo(
        self,
        staff: StaffDoc,
        filename: Optional[str],
        content_type: Optional[str],
        data: bytes,
    ) -> str:
        if not filename or not data:
            raise ValidationError("No file uploaded", field="photo")
        if not validate_image_upload(filename, content_type or ""):
            raise ValidationError(
                "Only image files (jpeg, jpg, png, gif, webp) are allowed!", field="photo"
            )
        if len(data) > self._max_photo_bytes:
            raise ValidationError(
                f"File too large. Maximum size is {self._max_photo_bytes // (1024 * 1024)}MB",
                field="photo",
            )

        staff_id = str(staff.id)
        new_path = await self._storage.save(staff_id, filename, data)
        try:
            updated = await self._staff.set_photo(staff_id, new_path)
        except Exception:
            await self._storage.delete(new_path)
            raise
        if not updated:
            await self._storage.delete(new_path)
            raise NotFoundError("Employee not found")

        if staff.photo:
            await self._storage.delete(staff.photo)
        log.info("photo_replaced", staff_id=staff_id, had_previous=bool(staff.photo))
        return new_path

    async def _remove_photo(self, staff: StaffDoc) -> None:
        if not staff.photo:
            raise NotFoundError("No photo to delete")
        await self._storage.delete(staff.photo)
        await self._staff.set_photo(str(staff.id), None)
        log.info("photo_removed", staff_id=str(staff.id))
