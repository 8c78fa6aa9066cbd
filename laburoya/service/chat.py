import logging
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from laburoya.config.settings import settings
from laburoya.core.datastore.repository.base import Repository
from laburoya.core.event.publisher import EventPublisher, build_event, publish_quietly
from laburoya.core.exceptions import NotFoundException, UnauthorizedException, ValidationException
from laburoya.core.model.schemas import Chat, Message, UserRole
from laburoya.service.match_lifecycle import MatchLifecycleManager, enrich

logger = logging.getLogger(__name__)


class ChatService:
    """
    Chat entre los dos participantes de un match.

    Hay un único chat por match y solo sus dos participantes pueden leerlo o
    escribir en él. El chat se puede abrir aunque el match siga pendiente.
    """

    def __init__(
            self,
            repository: Repository,
            event_publisher: Optional[EventPublisher] = None,
            topic: str = settings.KAFKA_CHAT_TOPIC,
            preview_length: int = settings.LAST_MESSAGE_PREVIEW_LENGTH,
            max_limit: int = settings.MAX_MESSAGE_LIMIT
    ):
        self.repository = repository
        self.event_publisher = event_publisher or EventPublisher()
        self.topic = topic
        self.preview_length = preview_length
        self.max_limit = max_limit
        self.matches = MatchLifecycleManager(repository)

    async def get_or_create_chat(self, match_id: str, uid: str) -> Tuple[Chat, bool]:
        """Devuelve el chat del match, creándolo si no existe. El booleano indica si se creó."""
        match = await self.matches.get_participant_match(match_id, uid)

        existing = await self.repository.get_chat_by_match(match_id)
        if existing is not None:
            return existing, False

        chat = await self.repository.insert_chat(Chat(
            match_id=match_id,
            worker_id=match.worker_id,
            employer_id=match.employer_id
        ))
        logger.info(f"Chat {chat.id} opened for match {match_id} (status {match.status.value})")
        return chat, True

    async def get_participant_chat(self, chat_id: str, uid: str) -> Chat:
        chat = await self.repository.get_chat(chat_id)
        if chat is None:
            raise NotFoundException("Chat not found")
        if not chat.has_participant(uid):
            raise UnauthorizedException("Unauthorized")
        return chat

    async def post_message(self, chat_id: str, sender_id: str, text: str) -> Message:
        text = (text or "").strip()
        if not text:
            raise ValidationException("Message text is required", field="text")

        chat = await self.get_participant_chat(chat_id, sender_id)

        message = Message(chat_id=chat.id, sender_id=sender_id, text=text)
        await self.repository.add_message(message)
        await self.repository.set_chat_last_message(chat.id, text[:self.preview_length], message.created_at)

        await publish_quietly(self.event_publisher, self.topic, build_event("MESSAGE_SENT", message))
        return message

    async def list_messages(
            self,
            chat_id: str,
            uid: str,
            limit: int = settings.DEFAULT_MESSAGE_LIMIT,
            before: Optional[datetime] = None
    ) -> List[Message]:
        """Mensajes en orden cronológico ascendente; los `limit` más recientes anteriores a `before`."""
        await self.get_participant_chat(chat_id, uid)

        limit = max(1, min(limit, self.max_limit))
        if before is not None and before.tzinfo is not None:
            # Los timestamps se guardan en UTC sin zona horaria
            before = before.astimezone(timezone.utc).replace(tzinfo=None)
        messages = await self.repository.list_messages(chat_id, limit, before=before)
        messages.reverse()
        return messages

    async def list_chats_for_user(self, uid: str, role: UserRole) -> List[dict]:
        """Chats del usuario con el perfil de la contraparte como `participant`."""
        if role == UserRole.WORKER:
            chats = await self.repository.list_chats(worker_id=uid)
        elif role == UserRole.EMPLOYER:
            chats = await self.repository.list_chats(employer_id=uid)
        else:
            raise ValidationException(f"Role {role} has no chats", field="role")

        views = []
        for chat in chats:
            view = chat.model_dump()
            if role == UserRole.WORKER:
                enrich(view, "participant", await self.repository.get_employer(chat.employer_id))
            else:
                enrich(view, "participant", await self.repository.get_worker(chat.worker_id))
            views.append(view)
        return views
