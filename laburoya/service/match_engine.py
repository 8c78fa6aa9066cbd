import logging
from typing import List, Optional

from laburoya.config.settings import settings
from laburoya.core.datastore.repository.base import Repository
from laburoya.core.event.publisher import EventPublisher, build_event, publish_quietly
from laburoya.core.model.schemas import JobOffer, Match, WorkerProfile

logger = logging.getLogger(__name__)


class MatchEngine:
    """
    Crea los matches entre perfiles de trabajadores y ofertas activas.

    Un trabajador y una oferta se emparejan cuando rubro y puesto coinciden
    exactamente (sin normalizar mayúsculas ni espacios). Cada par
    (trabajador, oferta) tiene a lo sumo un match: el id se deriva del par y
    la inserción es condicional, así que dos publicaciones concurrentes no
    pueden duplicarlo. Los matches existentes nunca se modifican ni se
    eliminan aquí, aunque el perfil o la oferta dejen de coincidir.

    Las operaciones no son atómicas: si falla la escritura de un match, los
    creados antes en el mismo recorrido quedan guardados y el error se propaga.
    """

    def __init__(
            self,
            repository: Repository,
            event_publisher: Optional[EventPublisher] = None,
            topic: str = settings.KAFKA_MATCH_TOPIC
    ):
        self.repository = repository
        self.event_publisher = event_publisher or EventPublisher()
        self.topic = topic

    async def on_worker_profile_published(self, worker_id: str, profile: WorkerProfile) -> List[Match]:
        """Empareja un perfil recién guardado con las ofertas activas de su rubro y puesto."""
        offers = await self.repository.find_job_offers(
            rubro=profile.rubro,
            puesto=profile.puesto,
            active=True
        )
        logger.info(f"Worker {worker_id}: {len(offers)} candidate offers for {profile.rubro}/{profile.puesto}")

        created = []
        for offer in offers:
            match = await self._create_if_absent(
                worker_id=worker_id,
                employer_id=offer.employer_id,
                offer_id=offer.id,
                rubro=profile.rubro,
                puesto=profile.puesto
            )
            if match is not None:
                created.append(match)
        return created

    async def on_job_offer_published(self, offer_id: str, offer: JobOffer) -> List[Match]:
        """Empareja una oferta recién publicada con los trabajadores activos de su rubro y puesto."""
        workers = await self.repository.find_workers(offer.rubro, offer.puesto, active=True)
        logger.info(f"Offer {offer_id}: {len(workers)} candidate workers for {offer.rubro}/{offer.puesto}")

        created = []
        for worker in workers:
            match = await self._create_if_absent(
                worker_id=worker.uid,
                employer_id=offer.employer_id,
                offer_id=offer_id,
                rubro=offer.rubro,
                puesto=offer.puesto
            )
            if match is not None:
                created.append(match)
        return created

    async def _create_if_absent(
            self,
            worker_id: str,
            employer_id: str,
            offer_id: str,
            rubro: str,
            puesto: str
    ) -> Optional[Match]:
        if await self.repository.find_match(worker_id, offer_id) is not None:
            return None

        match = Match(
            id=Match.make_id(worker_id, offer_id),
            worker_id=worker_id,
            employer_id=employer_id,
            offer_id=offer_id,
            rubro=rubro,
            puesto=puesto
        )
        if not await self.repository.insert_match(match):
            # Otra petición lo creó entre la búsqueda y la inserción
            return None

        logger.info(f"Match created: {match.id} (employer {employer_id})")
        await publish_quietly(self.event_publisher, self.topic, build_event("MATCH_CREATED", match))
        return match
