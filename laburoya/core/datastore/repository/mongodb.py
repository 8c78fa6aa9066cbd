from datetime import datetime
from enum import Enum
from typing import List, Optional, Type, TypeVar
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection
from pydantic import BaseModel
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import DuplicateKeyError

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
import logging

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def to_document(model: BaseModel, id_field: str = "id") -> dict:
    """Convierte un modelo en documento de MongoDB usando `id_field` como _id."""
    doc = model.model_dump()
    doc["_id"] = doc.pop(id_field) if id_field == "id" else doc[id_field]
    for key, value in doc.items():
        if isinstance(value, Enum):
            doc[key] = value.value
    return doc


def from_document(model: Type[ModelT], doc: Optional[dict], id_field: str = "id") -> Optional[ModelT]:
    if doc is None:
        return None
    doc = dict(doc)
    _id = doc.pop("_id")
    if id_field == "id":
        doc["id"] = _id
    return model(**doc)


class MongoDBRepository(Repository):
    """Repositorio para gestionar las operaciones con MongoDB."""

    def __init__(
            self,
            mongodb_url: str,
            database: str,
            use_transactions: bool = False,
            client: Optional[AsyncIOMotorClient] = None
    ):
        try:
            self.client = client or AsyncIOMotorClient(mongodb_url)
            self.db = self.client[database]
            self.use_transactions = use_transactions

            self.users: AsyncIOMotorCollection = self.db.users
            self.workers: AsyncIOMotorCollection = self.db.workers
            self.employers: AsyncIOMotorCollection = self.db.employers
            self.job_offers: AsyncIOMotorCollection = self.db.job_offers
            self.matches: AsyncIOMotorCollection = self.db.matches
            self.chats: AsyncIOMotorCollection = self.db.chats
            self.messages: AsyncIOMotorCollection = self.db.messages
            logging.info(f"Using database: {database}")

        except Exception as e:
            logging.error(f"Failed to create MongoDB client: {str(e)}", exc_info=True)
            raise

    async def verify_connection(self) -> bool:
        """Verifica que la conexión a MongoDB esté funcionando."""
        try:
            logger.debug("Pinging MongoDB...")
            await self.client.admin.command('ping')
            logger.debug("MongoDB ping successful.")
            return True
        except Exception as e:
            logger.error(f"MongoDB connection test failed: {str(e)}", exc_info=True)
            return False

    async def initialize(self):
        """Método para inicializar índices y otras configuraciones asincrónicas."""
        await self._setup_indexes()
        if not self.use_transactions:
            logger.warning("MONGO_USE_TRANSACTIONS is disabled: user purges are not atomic and may need a retry")

    async def _setup_indexes(self):
        """Configura los índices necesarios en MongoDB."""
        await self.workers.create_index([
            ("rubro", ASCENDING),
            ("puesto", ASCENDING),
            ("active", ASCENDING)
        ])
        await self.job_offers.create_index([
            ("rubro", ASCENDING),
            ("puesto", ASCENDING),
            ("active", ASCENDING)
        ])
        await self.job_offers.create_index([("employer_id", ASCENDING), ("created_at", DESCENDING)])

        # Un solo match por par (trabajador, oferta), aunque dos publicaciones compitan
        await self.matches.create_index([
            ("worker_id", ASCENDING),
            ("offer_id", ASCENDING)
        ], unique=True)
        await self.matches.create_index([("worker_id", ASCENDING), ("created_at", DESCENDING)])
        await self.matches.create_index([("employer_id", ASCENDING), ("created_at", DESCENDING)])

        await self.chats.create_index([("match_id", ASCENDING)], unique=True)
        await self.chats.create_index([("worker_id", ASCENDING), ("last_message_at", DESCENDING)])
        await self.chats.create_index([("employer_id", ASCENDING), ("last_message_at", DESCENDING)])

        await self.messages.create_index([("chat_id", ASCENDING), ("created_at", DESCENDING)])

    # Usuarios

    async def get_user(self, uid: str) -> Optional[UserAccount]:
        doc = await self.users.find_one({"_id": uid})
        return from_document(UserAccount, doc, id_field="uid")

    async def save_user(self, user: UserAccount) -> None:
        doc = to_document(user, id_field="uid")
        await self.users.replace_one({"_id": user.uid}, doc, upsert=True)

    async def list_users(self, role: Optional[UserRole] = None) -> List[UserAccount]:
        filter_query = {}
        if role is not None:
            filter_query["role"] = role.value
        cursor = self.users.find(filter_query).sort("created_at", DESCENDING)
        return [from_document(UserAccount, doc, id_field="uid") async for doc in cursor]

    async def purge_user(self, user: UserAccount) -> None:
        """
        Borra ofertas, perfil y cuenta. Con transacciones es una sola unidad;
        sin ellas la cuenta se borra al final, así un fallo a mitad de camino
        se puede reintentar.
        """
        if not self.use_transactions:
            await self._purge_user(user)
            return

        async with await self.client.start_session() as session:
            async with session.start_transaction():
                await self._purge_user(user, session)

    async def _purge_user(self, user: UserAccount, session=None) -> None:
        if user.role == UserRole.EMPLOYER:
            result = await self.job_offers.delete_many({"employer_id": user.uid}, session=session)
            logger.info(f"Deleted {result.deleted_count} job offers of employer {user.uid}")
            await self.employers.delete_one({"_id": user.uid}, session=session)
        elif user.role == UserRole.WORKER:
            await self.workers.delete_one({"_id": user.uid}, session=session)
        await self.users.delete_one({"_id": user.uid}, session=session)

    # Perfiles

    async def get_worker(self, uid: str) -> Optional[WorkerProfile]:
        doc = await self.workers.find_one({"_id": uid})
        return from_document(WorkerProfile, doc, id_field="uid")

    async def save_worker(self, profile: WorkerProfile) -> None:
        await self.workers.replace_one(
            {"_id": profile.uid},
            to_document(profile, id_field="uid"),
            upsert=True
        )

    async def find_workers(self, rubro: str, puesto: str, active: bool = True) -> List[WorkerProfile]:
        cursor = self.workers.find(
            {"rubro": rubro, "puesto": puesto, "active": active}
        ).sort("created_at", DESCENDING)
        return [from_document(WorkerProfile, doc, id_field="uid") async for doc in cursor]

    async def get_employer(self, uid: str) -> Optional[EmployerProfile]:
        doc = await self.employers.find_one({"_id": uid})
        return from_document(EmployerProfile, doc, id_field="uid")

    async def save_employer(self, profile: EmployerProfile) -> None:
        await self.employers.replace_one(
            {"_id": profile.uid},
            to_document(profile, id_field="uid"),
            upsert=True
        )

    # Ofertas

    async def create_job_offer(self, offer: JobOffer) -> JobOffer:
        await self.job_offers.insert_one(to_document(offer))
        return offer

    async def get_job_offer(self, offer_id: str) -> Optional[JobOffer]:
        doc = await self.job_offers.find_one({"_id": offer_id})
        return from_document(JobOffer, doc)

    async def save_job_offer(self, offer: JobOffer) -> None:
        await self.job_offers.replace_one({"_id": offer.id}, to_document(offer))

    async def delete_job_offer(self, offer_id: str) -> bool:
        result = await self.job_offers.delete_one({"_id": offer_id})
        return result.deleted_count > 0

    async def find_job_offers(
            self,
            rubro: Optional[str] = None,
            puesto: Optional[str] = None,
            active: Optional[bool] = None,
            employer_id: Optional[str] = None
    ) -> List[JobOffer]:
        """Obtiene ofertas filtrando por igualdad exacta en los campos dados."""
        filter_query = {}
        if rubro is not None:
            filter_query["rubro"] = rubro
        if puesto is not None:
            filter_query["puesto"] = puesto
        if active is not None:
            filter_query["active"] = active
        if employer_id is not None:
            filter_query["employer_id"] = employer_id

        cursor = self.job_offers.find(filter_query).sort("created_at", DESCENDING)
        return [from_document(JobOffer, doc) async for doc in cursor]

    # Matches

    async def get_match(self, match_id: str) -> Optional[Match]:
        doc = await self.matches.find_one({"_id": match_id})
        return from_document(Match, doc)

    async def find_match(self, worker_id: str, offer_id: str) -> Optional[Match]:
        doc = await self.matches.find_one({"worker_id": worker_id, "offer_id": offer_id})
        return from_document(Match, doc)

    async def insert_match(self, match: Match) -> bool:
        try:
            await self.matches.insert_one(to_document(match))
        except DuplicateKeyError:
            logger.info(f"Match {match.id} already exists, skipping insert")
            return False
        return True

    async def set_match_status(self, match_id: str, status: MatchStatus, updated_at: datetime) -> None:
        await self.matches.update_one(
            {"_id": match_id},
            {"$set": {"status": status.value, "updated_at": updated_at}}
        )

    async def list_matches(
            self,
            worker_id: Optional[str] = None,
            employer_id: Optional[str] = None,
            status: Optional[MatchStatus] = None
    ) -> List[Match]:
        filter_query = {}
        if worker_id is not None:
            filter_query["worker_id"] = worker_id
        if employer_id is not None:
            filter_query["employer_id"] = employer_id
        if status is not None:
            filter_query["status"] = status.value

        cursor = self.matches.find(filter_query).sort("created_at", DESCENDING)
        return [from_document(Match, doc) async for doc in cursor]

    # Chats

    async def get_chat(self, chat_id: str) -> Optional[Chat]:
        doc = await self.chats.find_one({"_id": chat_id})
        return from_document(Chat, doc)

    async def get_chat_by_match(self, match_id: str) -> Optional[Chat]:
        doc = await self.chats.find_one({"match_id": match_id})
        return from_document(Chat, doc)

    async def insert_chat(self, chat: Chat) -> Chat:
        try:
            await self.chats.insert_one(to_document(chat))
        except DuplicateKeyError:
            logger.info(f"Chat for match {chat.match_id} already exists, returning it")
            return await self.get_chat_by_match(chat.match_id)
        return chat

    async def set_chat_last_message(self, chat_id: str, preview: str, sent_at: datetime) -> None:
        await self.chats.update_one(
            {"_id": chat_id},
            {"$set": {"last_message": preview, "last_message_at": sent_at}}
        )

    async def list_chats(
            self,
            worker_id: Optional[str] = None,
            employer_id: Optional[str] = None
    ) -> List[Chat]:
        filter_query = {}
        if worker_id is not None:
            filter_query["worker_id"] = worker_id
        if employer_id is not None:
            filter_query["employer_id"] = employer_id

        # null ordena como el menor valor: los chats sin mensajes quedan al final
        cursor = self.chats.find(filter_query).sort([
            ("last_message_at", DESCENDING),
            ("created_at", DESCENDING)
        ])
        return [from_document(Chat, doc) async for doc in cursor]

    # Mensajes

    async def add_message(self, message: Message) -> None:
        await self.messages.insert_one(to_document(message))

    async def list_messages(
            self,
            chat_id: str,
            limit: int,
            before: Optional[datetime] = None
    ) -> List[Message]:
        filter_query = {"chat_id": chat_id}
        if before is not None:
            filter_query["created_at"] = {"$lt": before}

        cursor = self.messages.find(filter_query).sort("created_at", DESCENDING).limit(limit)
        return [from_document(Message, doc) async for doc in cursor]
