from fastapi import APIRouter, Depends

from laburoya.api.deps import AuthenticatedUser, get_account_service, get_current_user
from laburoya.core.model.schemas import RoleRegistration, SecondaryRoleUpdate
from laburoya.service.accounts import AccountService

router = APIRouter()


@router.post("/register")
async def register(
        body: RoleRegistration,
        user: AuthenticatedUser = Depends(get_current_user),
        accounts: AccountService = Depends(get_account_service)
):
    account = await accounts.register(user.uid, body.role, email=user.email)
    return {
        "message": "User registered successfully",
        "uid": account.uid,
        "role": account.role
    }


@router.get("/me")
async def get_me(
        user: AuthenticatedUser = Depends(get_current_user),
        accounts: AccountService = Depends(get_account_service)
):
    return await accounts.get_me(user.uid)


@router.patch("/secondary-role")
async def set_secondary_role(
        body: SecondaryRoleUpdate,
        user: AuthenticatedUser = Depends(get_current_user),
        accounts: AccountService = Depends(get_account_service)
):
    account = await accounts.set_secondary_role(user.uid, body.secondary_role)
    return {
        "message": "Secondary role updated successfully",
        "secondary_role": account.secondary_role
    }
