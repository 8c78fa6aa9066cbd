from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status

from laburoya.api.deps import get_chat_service, get_current_account
from laburoya.config.settings import settings
from laburoya.core.model.schemas import MessageCreate, UserAccount
from laburoya.service.chat import ChatService

router = APIRouter()


@router.get("")
async def list_chats(
        account: UserAccount = Depends(get_current_account),
        chats: ChatService = Depends(get_chat_service)
):
    return await chats.list_chats_for_user(account.uid, account.effective_role)


@router.post("/{match_id}")
async def get_or_create_chat(
        match_id: str,
        response: Response,
        account: UserAccount = Depends(get_current_account),
        chats: ChatService = Depends(get_chat_service)
):
    chat, created = await chats.get_or_create_chat(match_id, account.uid)
    if created:
        response.status_code = status.HTTP_201_CREATED
    return chat


@router.get("/{chat_id}/messages")
async def list_messages(
        chat_id: str,
        limit: int = Query(settings.DEFAULT_MESSAGE_LIMIT, ge=1),
        before: Optional[datetime] = None,
        account: UserAccount = Depends(get_current_account),
        chats: ChatService = Depends(get_chat_service)
):
    return await chats.list_messages(chat_id, account.uid, limit=limit, before=before)


@router.post("/{chat_id}/messages", status_code=status.HTTP_201_CREATED)
async def post_message(
        chat_id: str,
        body: MessageCreate,
        account: UserAccount = Depends(get_current_account),
        chats: ChatService = Depends(get_chat_service)
):
    return await chats.post_message(chat_id, account.uid, body.text)
