import logging
from datetime import datetime
from typing import List, Tuple

from laburoya.core.datastore.repository.base import Repository
from laburoya.core.exceptions import NotFoundException, UnauthorizedException
from laburoya.core.model.schemas import JobOffer, JobOfferCreate, JobOfferUpdate, Match, UserRole
from laburoya.service.accounts import AccountService
from laburoya.service.match_engine import MatchEngine

logger = logging.getLogger(__name__)

# No admiten null en un PATCH
REQUIRED_FIELDS = {"rubro", "puesto", "active"}


class JobOfferService:
    """Publicación y mantenimiento de las ofertas de un empleador."""

    def __init__(self, repository: Repository, match_engine: MatchEngine):
        self.repository = repository
        self.accounts = AccountService(repository)
        self.match_engine = match_engine

    async def create_offer(self, uid: str, data: JobOfferCreate) -> Tuple[JobOffer, List[Match]]:
        await self.accounts.require_role(uid, UserRole.EMPLOYER)

        offer = await self.repository.create_job_offer(JobOffer(employer_id=uid, **data.model_dump()))
        logger.info(f"Job offer {offer.id} created by {uid}")

        matches = await self.match_engine.on_job_offer_published(offer.id, offer)
        return offer, matches

    async def list_offers(self, uid: str) -> List[JobOffer]:
        return await self.repository.find_job_offers(employer_id=uid)

    async def _get_owned_offer(self, uid: str, offer_id: str) -> JobOffer:
        offer = await self.repository.get_job_offer(offer_id)
        if offer is None:
            raise NotFoundException("Job offer not found")
        if offer.employer_id != uid:
            raise UnauthorizedException("Unauthorized")
        return offer

    async def update_offer(self, uid: str, offer_id: str, data: JobOfferUpdate) -> Tuple[dict, List[Match]]:
        """
        Aplica los campos enviados. Si la oferta queda activa se vuelve a
        correr el matching; los matches previos conservan su rubro y puesto.
        """
        offer = await self._get_owned_offer(uid, offer_id)

        updates = {
            field: value for field, value in data.model_dump(exclude_unset=True).items()
            if value is not None or field not in REQUIRED_FIELDS
        }
        updates["updated_at"] = datetime.utcnow()
        offer = offer.model_copy(update=updates)
        await self.repository.save_job_offer(offer)

        matches = []
        if offer.active:
            matches = await self.match_engine.on_job_offer_published(offer.id, offer)
        return updates, matches

    async def delete_offer(self, uid: str, offer_id: str) -> None:
        """Borra la oferta. Los matches que la referencian se conservan."""
        await self._get_owned_offer(uid, offer_id)
        await self.repository.delete_job_offer(offer_id)
        logger.info(f"Job offer {offer_id} deleted by {uid}")
