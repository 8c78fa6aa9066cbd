import logging
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from laburoya.config.settings import settings
from laburoya.core.datastore.repository.base import Repository
from laburoya.core.event.publisher import EventPublisher, build_event, publish_quietly
from laburoya.core.exceptions import NotFoundException, UnauthorizedException, ValidationException
from laburoya.core.model.schemas import DECISION_STATUSES, Match, MatchStatus, UserRole

logger = logging.getLogger(__name__)


def enrich(view: dict, key: str, document: Optional[BaseModel], public: bool = False) -> dict:
    """
    Agrega `document` a la vista bajo `key` si existe. Un documento
    relacionado ausente no es un error: la clave simplemente se omite.
    """
    if document is None:
        return view
    view[key] = document.public_view() if public else document.model_dump()
    return view


class MatchLifecycleManager:
    """Transiciones de estado de los matches y su consulta por participante."""

    def __init__(
            self,
            repository: Repository,
            event_publisher: Optional[EventPublisher] = None,
            topic: str = settings.KAFKA_MATCH_TOPIC
    ):
        self.repository = repository
        self.event_publisher = event_publisher or EventPublisher()
        self.topic = topic

    async def get_participant_match(self, match_id: str, uid: str) -> Match:
        match = await self.repository.get_match(match_id)
        if match is None:
            raise NotFoundException("Match not found")
        if not match.has_participant(uid):
            raise UnauthorizedException("Unauthorized")
        return match

    async def update_match_status(self, match_id: str, uid: str, status: MatchStatus) -> dict:
        """
        Acepta o rechaza un match en nombre de cualquiera de sus dos participantes.

        No se exige que el match siga en "pending": un match aceptado o
        rechazado puede volver a decidirse. Se registra un warning cuando pasa.
        """
        if status not in DECISION_STATUSES:
            raise ValidationException('Invalid status. Must be "accepted" or "rejected"', field="status")

        match = await self.get_participant_match(match_id, uid)

        if match.status != MatchStatus.PENDING:
            # TODO: confirmar con producto si los estados terminales deben bloquearse
            logger.warning(f"Match {match_id} re-transitioned from {match.status.value} to {status.value} by {uid}")

        updated_at = datetime.utcnow()
        await self.repository.set_match_status(match_id, status, updated_at)
        logger.info(f"Match {match_id} set to {status.value} by {uid}")

        match.status = status
        match.updated_at = updated_at
        await publish_quietly(self.event_publisher, self.topic, build_event("MATCH_STATUS_UPDATED", match))

        return {"id": match_id, "status": status.value}

    async def get_matches_for_user(self, uid: str, role: UserRole) -> List[dict]:
        """
        Matches del usuario, más recientes primero. Para un trabajador se
        agregan el perfil del empleador y los datos públicos de la oferta;
        para un empleador, el perfil del trabajador.
        """
        if role == UserRole.WORKER:
            matches = await self.repository.list_matches(worker_id=uid)
        elif role == UserRole.EMPLOYER:
            matches = await self.repository.list_matches(employer_id=uid)
        else:
            raise ValidationException(f"Role {role} has no matches", field="role")

        views = []
        for match in matches:
            view = match.model_dump()
            if role == UserRole.WORKER:
                enrich(view, "employer", await self.repository.get_employer(match.employer_id))
                enrich(view, "job_offer", await self.repository.get_job_offer(match.offer_id), public=True)
            else:
                enrich(view, "worker", await self.repository.get_worker(match.worker_id))
            views.append(view)
        return views
