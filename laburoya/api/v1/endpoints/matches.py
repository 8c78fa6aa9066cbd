from fastapi import APIRouter, Depends

from laburoya.api.deps import get_current_account, get_match_lifecycle
from laburoya.core.model.schemas import MatchStatusUpdate, UserAccount
from laburoya.service.match_lifecycle import MatchLifecycleManager

router = APIRouter()


@router.get("")
async def list_matches(
        account: UserAccount = Depends(get_current_account),
        lifecycle: MatchLifecycleManager = Depends(get_match_lifecycle)
):
    return await lifecycle.get_matches_for_user(account.uid, account.effective_role)


@router.patch("/{match_id}/status")
async def update_match_status(
        match_id: str,
        body: MatchStatusUpdate,
        account: UserAccount = Depends(get_current_account),
        lifecycle: MatchLifecycleManager = Depends(get_match_lifecycle)
):
    return await lifecycle.update_match_status(match_id, account.uid, body.status)
