from fastapi import APIRouter, Depends, status

from laburoya.api.deps import get_current_account, get_job_offer_service
from laburoya.core.model.schemas import JobOfferCreate, JobOfferUpdate, UserAccount
from laburoya.service.job_offers import JobOfferService

router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_job_offer(
        body: JobOfferCreate,
        account: UserAccount = Depends(get_current_account),
        offers: JobOfferService = Depends(get_job_offer_service)
):
    """Publica una oferta y la empareja con los trabajadores activos del mismo rubro y puesto."""
    offer, matches = await offers.create_offer(account.uid, body)
    return {
        "message": "Job offer created",
        "id": offer.id,
        "job_offer": offer,
        "new_matches": len(matches),
        "matches": matches
    }


@router.get("/mine")
async def list_my_job_offers(
        account: UserAccount = Depends(get_current_account),
        offers: JobOfferService = Depends(get_job_offer_service)
):
    return await offers.list_offers(account.uid)


@router.patch("/{offer_id}")
async def update_job_offer(
        offer_id: str,
        body: JobOfferUpdate,
        account: UserAccount = Depends(get_current_account),
        offers: JobOfferService = Depends(get_job_offer_service)
):
    updates, matches = await offers.update_offer(account.uid, offer_id, body)
    return {
        "message": "Job offer updated",
        "id": offer_id,
        "updates": updates,
        "new_matches": len(matches),
        "matches": matches
    }


@router.delete("/{offer_id}")
async def delete_job_offer(
        offer_id: str,
        account: UserAccount = Depends(get_current_account),
        offers: JobOfferService = Depends(get_job_offer_service)
):
    await offers.delete_offer(account.uid, offer_id)
    return {"message": "Job offer deleted", "id": offer_id}
