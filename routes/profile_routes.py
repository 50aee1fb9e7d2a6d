"""
Profile endpoints. All require a bearer token; the /profiles and
/employee/{id} routes additionally require role admin.

Photos are uploaded as multipart field ``photo`` and returned as absolute URLs.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, Request, UploadFile

from dependencies import get_current_user, get_profile_service, require_admin
from schemas.dto.requests.profile import AdminUpdateProfileRequest, UpdateProfileRequest
from schemas.dto.responses.common import MessageResponse
from schemas.dto.responses.profile import (
    EmployeeProfileUpdatedResponse,
    PhotoUploadedResponse,
    ProfileResponse,
    ProfileUpdatedResponse,
)
from schemas.models.staff import AuthenticatedUser, StaffDoc
from services.profile_service import ProfileService
from shared.request_utils import public_url

router = APIRouter(prefix="/api/profile", tags=["profile"])


def _to_profile(request: Request, staff: StaffDoc, *, include_aadhar: bool = False) -> ProfileResponse:
    return ProfileResponse.from_doc(
        staff, public_url(request, staff.photo), include_aadhar=include_aadhar
    )


async def _read_upload(photo: Optional[UploadFile]) -> tuple[Optional[str], Optional[str], bytes]:
    if photo is None:
        return None, None, b""
    try:
        return photo.filename, photo.content_type, await photo.read()
    finally:
        await photo.close()


# ── Own profile ──────────────────────────────────────────────────────────────


@router.get("", response_model=ProfileResponse)
async def get_profile(
    request: Request,
    user: AuthenticatedUser = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
) -> ProfileResponse:
    return _to_profile(request, await service.get_own(user.id))


@router.put("", response_model=ProfileUpdatedResponse)
async def update_profile(
    body: UpdateProfileRequest,
    request: Request,
    user: AuthenticatedUser = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
) -> ProfileUpdatedResponse:
    staff = await service.update_own(user.id, body)
    return ProfileUpdatedResponse(user=_to_profile(request, staff))


@router.post("/upload-photo", response_model=PhotoUploadedResponse)
async def upload_photo(
    request: Request,
    photo: Optional[UploadFile] = File(default=None),
    user: AuthenticatedUser = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
) -> PhotoUploadedResponse:
    filename, content_type, data = await _read_upload(photo)
    path = await service.upload_photo(user.id, filename, content_type, data)
    return PhotoUploadedResponse(photo=public_url(request, path))


@router.delete("/delete-photo", response_model=MessageResponse)
async def delete_photo(
    user: AuthenticatedUser = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
) -> MessageResponse:
    await service.delete_photo(user.id)
    return MessageResponse(message="Photo deleted successfully")


# ── Admin ────────────────────────────────────────────────────────────────────


@router.get("/profiles", response_model=list[ProfileResponse])
async def list_profiles(
    request: Request,
    _: AuthenticatedUser = Depends(require_admin),
    service: ProfileService = Depends(get_profile_service),
) -> list[ProfileResponse]:
    return [_to_profile(request, staff) for staff in await service.list_profiles()]


@router.get("/employee/{employee_id}", response_model=ProfileResponse)
async def get_employee_profile(
    employee_id: str,
    request: Request,
    _: AuthenticatedUser = Depends(require_admin),
    service: ProfileService = Depends(get_profile_service),
) -> ProfileResponse:
    staff = await service.get_employee(employee_id)
    return _to_profile(request, staff, include_aadhar=True)


@router.put("/employee/{employee_id}", response_model=EmployeeProfileUpdatedResponse)
async def update_employee_profile(
    employee_id: str,
    body: AdminUpdateProfileRequest,
    request: Request,
    _: AuthenticatedUser = Depends(require_admin),
    service: ProfileService = Depends(get_profile_service),
) -> EmployeeProfileUpdatedResponse:
    staff = await service.update_employee(employee_id, body)
    return EmployeeProfileUpdatedResponse(
        employee=_to_profile(request, staff, include_aadhar=True)
    )


@router.post("/employee/{employee_id}/upload-photo", response_model=PhotoUploadedResponse)
async def upload_employee_photo(
    employee_id: str,
    request: Request,
    photo: Optional[UploadFile] = File(default=None),
    _: AuthenticatedUser = Depends(require_admin),
    service: ProfileService = Depends(get_profile_service),
) -> PhotoUploadedResponse:
    filename, content_type, data = await _read_upload(photo)
    path = await service.upload_employee_photo(employee_id, filename, content_type, data)
    return PhotoUploadedResponse(photo=public_url(request, path))


@router.delete("/employee/{employee_id}/delete-photo", response_model=MessageResponse)
async def delete_employee_photo(
    employee_id: str,
    _: AuthenticatedUser = Depends(require_admin),
    service: ProfileService = Depends(get_profile_service),
) -> MessageResponse:
    await service.delete_employee_photo(employee_id)
    return MessageResponse(message="Photo deleted successfully")
