from datetime import datetime
from typing import Dict, List, Optional
import logging

from laburoya.core.datastore.repository.base import Repository
from laburoya.core.model.schemas import (
    Chat,
    EmployerProfile,
    JobOffer,
    Match,
    MatchStatus,
    Message,
    UserAccount,
    UserRole,
    WorkerProfile,
)

logger = logging.getLogger(__name__)


def _newest_first(items, key="created_at"):
    return sorted(items, key=lambda item: getattr(item, key), reverse=True)


class InMemoryRepository(Repository):
    """
    Repositorio en memoria para tests y desarrollo local.

    Guarda copias de los modelos para que los servicios no puedan mutar el
    estado almacenado sin pasar por el repositorio.
    """

    def __init__(self):
        self.users: Dict[str, UserAccount] = {}
        self.workers: Dict[str, WorkerProfile] = {}
        self.employers: Dict[str, EmployerProfile] = {}
        self.job_offers: Dict[str, JobOffer] = {}
        self.matches: Dict[str, Match] = {}
        self.chats: Dict[str, Chat] = {}
        self.messages: List[Message] = []

    # Usuarios

    async def get_user(self, uid: str) -> Optional[UserAccount]:
        user = self.users.get(uid)
        return user.model_copy() if user else None

    async def save_user(self, user: UserAccount) -> None:
        self.users[user.uid] = user.model_copy()

    async def list_users(self, role: Optional[UserRole] = None) -> List[UserAccount]:
        users = [u for u in self.users.values() if role is None or u.role == role]
        return [u.model_copy() for u in _newest_first(users)]

    async def purge_user(self, user: UserAccount) -> None:
        if user.role == UserRole.EMPLOYER:
            owned = [o.id for o in self.job_offers.values() if o.employer_id == user.uid]
            for offer_id in owned:
                del self.job_offers[offer_id]
            logger.info(f"Deleted {len(owned)} job offers of employer {user.uid}")
            self.employers.pop(user.uid, None)
        elif user.role == UserRole.WORKER:
            self.workers.pop(user.uid, None)
        self.users.pop(user.uid, None)

    # Perfiles

    async def get_worker(self, uid: str) -> Optional[WorkerProfile]:
        profile = self.workers.get(uid)
        return profile.model_copy() if profile else None

    async def save_worker(self, profile: WorkerProfile) -> None:
        self.workers[profile.uid] = profile.model_copy()

    async def find_workers(self, rubro: str, puesto: str, active: bool = True) -> List[WorkerProfile]:
        found = [
            w for w in self.workers.values()
            if w.rubro == rubro and w.puesto == puesto and w.active == active
        ]
        return [w.model_copy() for w in _newest_first(found)]

    async def get_employer(self, uid: str) -> Optional[EmployerProfile]:
        profile = self.employers.get(uid)
        return profile.model_copy() if profile else None

    async def save_employer(self, profile: EmployerProfile) -> None:
        self.employers[profile.uid] = profile.model_copy()

    # Ofertas

    async def create_job_offer(self, offer: JobOffer) -> JobOffer:
        self.job_offers[offer.id] = offer.model_copy()
        return offer

    async def get_job_offer(self, offer_id: str) -> Optional[JobOffer]:
        offer = self.job_offers.get(offer_id)
        return offer.model_copy() if offer else None

    async def save_job_offer(self, offer: JobOffer) -> None:
        if offer.id in self.job_offers:
            self.job_offers[offer.id] = offer.model_copy()

    async def delete_job_offer(self, offer_id: str) -> bool:
        return self.job_offers.pop(offer_id, None) is not None

    async def find_job_offers(
            self,
            rubro: Optional[str] = None,
            puesto: Optional[str] = None,
            active: Optional[bool] = None,
            employer_id: Optional[str] = None
    ) -> List[JobOffer]:
        found = [
            o for o in self.job_offers.values()
            if (rubro is None or o.rubro == rubro)
            and (puesto is None or o.puesto == puesto)
            and (active is None or o.active == active)
            and (employer_id is None or o.employer_id == employer_id)
        ]
        return [o.model_copy() for o in _newest_first(found)]

    # Matches

    async def get_match(self, match_id: str) -> Optional[Match]:
        match = self.matches.get(match_id)
        return match.model_copy() if match else None

    async def find_match(self, worker_id: str, offer_id: str) -> Optional[Match]:
        for match in self.matches.values():
            if match.worker_id == worker_id and match.offer_id == offer_id:
                return match.model_copy()
        return None

    async def insert_match(self, match: Match) -> bool:
        # Sin await entre la comprobación y la escritura: atómico dentro del event loop
        if match.id in self.matches:
            return False
        self.matches[match.id] = match.model_copy()
        return True

    async def set_match_status(self, match_id: str, status: MatchStatus, updated_at: datetime) -> None:
        match = self.matches.get(match_id)
        if match is not None:
            self.matches[match_id] = match.model_copy(update={"status": status, "updated_at": updated_at})

    async def list_matches(
            self,
            worker_id: Optional[str] = None,
            employer_id: Optional[str] = None,
            status: Optional[MatchStatus] = None
    ) -> List[Match]:
        found = [
            m for m in self.matches.values()
            if (worker_id is None or m.worker_id == worker_id)
            and (employer_id is None or m.employer_id == employer_id)
            and (status is None or m.status == status)
        ]
        return [m.model_copy() for m in _newest_first(found)]

    # Chats

    async def get_chat(self, chat_id: str) -> Optional[Chat]:
        chat = self.chats.get(chat_id)
        return chat.model_copy() if chat else None

    async def get_chat_by_match(self, match_id: str) -> Optional[Chat]:
        for chat in self.chats.values():
            if chat.match_id == match_id:
                return chat.model_copy()
        return None

    async def insert_chat(self, chat: Chat) -> Chat:
        existing = await self.get_chat_by_match(chat.match_id)
        if existing is not None:
            return existing
        self.chats[chat.id] = chat.model_copy()
        return chat

    async def set_chat_last_message(self, chat_id: str, preview: str, sent_at: datetime) -> None:
        chat = self.chats.get(chat_id)
        if chat is not None:
            self.chats[chat_id] = chat.model_copy(update={"last_message": preview, "last_message_at": sent_at})

    async def list_chats(
            self,
            worker_id: Optional[str] = None,
            employer_id: Optional[str] = None
    ) -> List[Chat]:
        found = [
            c for c in self.chats.values()
            if (worker_id is None or c.worker_id == worker_id)
            and (employer_id is None or c.employer_id == employer_id)
        ]
        found.sort(key=lambda c: (c.last_message_at is not None, c.last_message_at or c.created_at, c.created_at),
                   reverse=True)
        return [c.model_copy() for c in found]

    # Mensajes

    async def add_message(self, message: Message) -> None:
        self.messages.append(message.model_copy())

    async def list_messages(
            self,
            chat_id: str,
            limit: int,
            before: Optional[datetime] = None
    ) -> List[Message]:
        found = [
            m for m in self.messages
            if m.chat_id == chat_id and (before is None or m.created_at < before)
        ]
        # sorted es estable: a igual created_at se conserva el orden de inserción
        found = sorted(found, key=lambda m: m.created_at)
        return [m.model_copy() for m in reversed(found[-limit:])] if limit > 0 else []
