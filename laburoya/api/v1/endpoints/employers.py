from fastapi import APIRouter, Depends

from laburoya.api.deps import get_current_account, get_employer_service
from laburoya.core.model.schemas import EmployerProfileCreate, UserAccount
from laburoya.service.profiles import EmployerProfileService

router = APIRouter()


@router.post("")
async def save_employer_profile(
        body: EmployerProfileCreate,
        account: UserAccount = Depends(get_current_account),
        employers: EmployerProfileService = Depends(get_employer_service)
):
    profile, is_new = await employers.save_profile(account.uid, body)
    return {
        "message": "Employer profile created" if is_new else "Employer profile updated",
        "profile": profile
    }


@router.get("/me")
async def get_employer_profile(
        account: UserAccount = Depends(get_current_account),
        employers: EmployerProfileService = Depends(get_employer_service)
):
    return await employers.get_profile(account.uid)
