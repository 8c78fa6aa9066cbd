from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

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


class Repository(ABC):
    """
    Puerto de persistencia usado por todos los servicios.

    Los listados devuelven los documentos más recientes primero (created_at
    descendente) salvo que se indique otra cosa. Las búsquedas por id
    devuelven None cuando el documento no existe.
    """

    # Usuarios

    @abstractmethod
    async def get_user(self, uid: str) -> Optional[UserAccount]:
        ...

    @abstractmethod
    async def save_user(self, user: UserAccount) -> None:
        ...

    @abstractmethod
    async def list_users(self, role: Optional[UserRole] = None) -> List[UserAccount]:
        ...

    @abstractmethod
    async def purge_user(self, user: UserAccount) -> None:
        """
        Borra la cuenta, su perfil y, si es empleador, sus ofertas como una
        sola unidad. Matches y chats que lo referencian no se tocan.
        """

    # Perfiles

    @abstractmethod
    async def get_worker(self, uid: str) -> Optional[WorkerProfile]:
        ...

    @abstractmethod
    async def save_worker(self, profile: WorkerProfile) -> None:
        ...

    @abstractmethod
    async def find_workers(self, rubro: str, puesto: str, active: bool = True) -> List[WorkerProfile]:
        ...

    @abstractmethod
    async def get_employer(self, uid: str) -> Optional[EmployerProfile]:
        ...

    @abstractmethod
    async def save_employer(self, profile: EmployerProfile) -> None:
        ...

    # Ofertas

    @abstractmethod
    async def create_job_offer(self, offer: JobOffer) -> JobOffer:
        ...

    @abstractmethod
    async def get_job_offer(self, offer_id: str) -> Optional[JobOffer]:
        ...

    @abstractmethod
    async def save_job_offer(self, offer: JobOffer) -> None:
        ...

    @abstractmethod
    async def delete_job_offer(self, offer_id: str) -> bool:
        ...

    @abstractmethod
    async def find_job_offers(
            self,
            rubro: Optional[str] = None,
            puesto: Optional[str] = None,
            active: Optional[bool] = None,
            employer_id: Optional[str] = None
    ) -> List[JobOffer]:
        ...

    # Matches

    @abstractmethod
    async def get_match(self, match_id: str) -> Optional[Match]:
        ...

    @abstractmethod
    async def find_match(self, worker_id: str, offer_id: str) -> Optional[Match]:
        ...

    @abstractmethod
    async def insert_match(self, match: Match) -> bool:
        """Inserta el match solo si su id no existe. Devuelve False si ya existía."""

    @abstractmethod
    async def set_match_status(self, match_id: str, status: MatchStatus, updated_at: datetime) -> None:
        ...

    @abstractmethod
    async def list_matches(
            self,
            worker_id: Optional[str] = None,
            employer_id: Optional[str] = None,
            status: Optional[MatchStatus] = None
    ) -> List[Match]:
        ...

    # Chats

    @abstractmethod
    async def get_chat(self, chat_id: str) -> Optional[Chat]:
        ...

    @abstractmethod
    async def get_chat_by_match(self, match_id: str) -> Optional[Chat]:
        ...

    @abstractmethod
    async def insert_chat(self, chat: Chat) -> Chat:
        """Inserta el chat; si el match ya tiene uno devuelve el existente."""

    @abstractmethod
    async def set_chat_last_message(self, chat_id: str, preview: str, sent_at: datetime) -> None:
        ...

    @abstractmethod
    async def list_chats(
            self,
            worker_id: Optional[str] = None,
            employer_id: Optional[str] = None
    ) -> List[Chat]:
        """Chats ordenados por last_message_at descendente; los que no tienen mensajes al final."""

    # Mensajes

    @abstractmethod
    async def add_message(self, message: Message) -> None:
        ...

    @abstractmethod
    async def list_messages(
            self,
            chat_id: str,
            limit: int,
            before: Optional[datetime] = None
    ) -> List[Message]:
        """Mensajes del chat, más recientes primero, opcionalmente anteriores a `before`."""
