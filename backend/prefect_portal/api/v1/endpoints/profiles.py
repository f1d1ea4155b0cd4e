"""
Profiles API

Users read and edit their own profile, theme and avatar. Admins may edit
anyone's profile, including the active flag.
"""
from typing import List

from fastapi import APIRouter, Depends, File, UploadFile

from prefect_portal.api.deps import list_filter, service_dependency, split_update
from prefect_portal.schemas.auth import UserResponse
from prefect_portal.schemas.profile import AdminProfileUpdate, ProfileSummary, ProfileUpdate, ThemeUpdate
from prefect_portal.services.profile_service import ProfileService
from prefect_portal.services.resource_service import ListFilter

router = APIRouter()
get_service = service_dependency(ProfileService)


@router.get("/", response_model=List[ProfileSummary])
async def list_profiles(
    filters: ListFilter = Depends(list_filter),
    service: ProfileService = Depends(get_service),
):
    return (await service.list(filters)).unwrap()


@router.get("/me", response_model=UserResponse)
async def get_my_profile(service: ProfileService = Depends(get_service)):
    return (await service.me()).unwrap()


@router.patch("/me", response_model=UserResponse)
async def update_my_profile(payload: ProfileUpdate, service: ProfileService = Depends(get_service)):
    return (await service.update_me(payload.model_dump(exclude_unset=True))).unwrap()


@router.put("/me/theme", response_model=UserResponse)
async def set_my_theme(payload: ThemeUpdate, service: ProfileService = Depends(get_service)):
    return (await service.set_theme(payload.theme)).unwrap()


@router.post("/me/avatar", response_model=UserResponse)
async def upload_avatar(
    file: UploadFile = File(...),
    service: ProfileService = Depends(get_service),
):
    """Replace the avatar; the previous image is removed from storage"""
    content = await file.read()
    content_type = file.content_type or "application/octet-stream"
    return (await service.upload_avatar(file.filename, content, content_type)).unwrap()


@router.delete("/me/avatar", response_model=UserResponse)
async def remove_avatar(service: ProfileService = Depends(get_service)):
    return (await service.remove_avatar()).unwrap()


@router.get("/{user_id}", response_model=UserResponse)
async def get_profile(user_id: str, service: ProfileService = Depends(get_service)):
    return (await service.get(user_id)).unwrap()


@router.patch("/{user_id}", response_model=UserResponse)
async def update_profile(user_id: str, payload: AdminProfileUpdate, service: ProfileService = Depends(get_service)):
    changes, expected = split_update(payload)
    return (await service.update(user_id, changes, expected)).unwrap()
