from fastapi import APIRouter, Depends

from laburoya.api.deps import get_current_account, get_worker_service
from laburoya.core.model.schemas import UserAccount, WorkerProfileCreate, WorkerStatusUpdate
from laburoya.service.profiles import WorkerProfileService

router = APIRouter()


@router.post("")
async def save_worker_profile(
        body: WorkerProfileCreate,
        account: UserAccount = Depends(get_current_account),
        workers: WorkerProfileService = Depends(get_worker_service)
):
    """Crea o reemplaza el perfil del trabajador y corre el matching contra las ofertas activas."""
    profile, is_new, matches = await workers.save_profile(account.uid, body)
    return {
        "message": "Worker profile created" if is_new else "Worker profile updated",
        "profile": profile,
        "new_matches": len(matches),
        "matches": matches
    }


@router.get("/me")
async def get_worker_profile(
        account: UserAccount = Depends(get_current_account),
        workers: WorkerProfileService = Depends(get_worker_service)
):
    return await workers.get_profile(account.uid)


@router.patch("/status")
async def set_worker_status(
        body: WorkerStatusUpdate,
        account: UserAccount = Depends(get_current_account),
        workers: WorkerProfileService = Depends(get_worker_service)
):
    profile, matches = await workers.set_active(account.uid, body.active)
    return {
        "message": "Status updated",
        "active": profile.active,
        "new_matches": len(matches),
        "matches": matches
    }
