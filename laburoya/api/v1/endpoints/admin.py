from typing import Optional

from fastapi import APIRouter, Depends, Query

from laburoya.api.deps import get_admin_service, get_superuser
from laburoya.config.settings import settings
from laburoya.core.model.schemas import AdminUserUpdate, MatchStatus, UserRole
from laburoya.service.admin import AdminService

router = APIRouter(dependencies=[Depends(get_superuser)])


@router.get("/stats")
async def get_stats(admin: AdminService = Depends(get_admin_service)):
    return await admin.get_stats()


@router.get("/users")
async def list_users(
        role: Optional[UserRole] = None,
        limit: int = Query(settings.ADMIN_PAGE_SIZE, ge=1),
        offset: int = Query(0, ge=0),
        admin: AdminService = Depends(get_admin_service)
):
    return await admin.list_users(role, limit, offset)


@router.get("/users/{uid}")
async def get_user(uid: str, admin: AdminService = Depends(get_admin_service)):
    return await admin.get_user_detail(uid)


@router.patch("/users/{uid}")
async def update_user(uid: str, body: AdminUserUpdate, admin: AdminService = Depends(get_admin_service)):
    user = await admin.update_user(uid, body)
    return {"message": "User updated successfully", "user": user}


@router.delete("/users/{uid}")
async def delete_user(uid: str, hard: bool = False, admin: AdminService = Depends(get_admin_service)):
    return {"message": await admin.delete_user(uid, hard=hard)}


@router.get("/job-offers")
async def list_job_offers(
        active: Optional[bool] = None,
        employer_id: Optional[str] = None,
        limit: int = Query(settings.ADMIN_PAGE_SIZE, ge=1),
        offset: int = Query(0, ge=0),
        admin: AdminService = Depends(get_admin_service)
):
    return await admin.list_job_offers(active, employer_id, limit, offset)


@router.get("/matches")
async def list_matches(
        status: Optional[MatchStatus] = None,
        limit: int = Query(settings.ADMIN_PAGE_SIZE, ge=1),
        offset: int = Query(0, ge=0),
        admin: AdminService = Depends(get_admin_service)
):
    return await admin.list_matches(status, limit, offset)
