"""Conversations, RAG chat and reply drafting."""

from fastapi import APIRouter, Depends

from ...exceptions import InvalidRequestError
from ...services.chat import ChatService
from ...storage.repository import EmailStore
from ..dependencies import get_chat_service, get_store
from ..schemas import (
    ChatRequest,
    ChatResponse,
    ConversationOut,
    DraftReplyRequest,
    DraftReplyResponse,
    MessageOut,
)

router = APIRouter(prefix="/api", tags=["chat"])


@router.get("/conversations", response_model=list[ConversationOut])
def list_conversations(store: EmailStore = Depends(get_store)):
    return store.list_conversations()


@router.get("/conversations/{conversation_id}/messages", response_model=list[MessageOut])
def list_messages(conversation_id: int, store: EmailStore = Depends(get_store)):
    return store.get_messages(conversation_id)


@router.post("/ai/chat", response_model=ChatResponse)
def chat(request: ChatRequest, service: ChatService = Depends(get_chat_service)):
    """Answer a question using emails retrieved from the archive."""
    reply = service.chat(request.message, request.conversation_id)
    return ChatResponse(response=reply.response, conversation_id=reply.conversation_id)


@router.post("/ai/draft-reply", response_model=DraftReplyResponse)
def draft_reply(request: DraftReplyRequest, service: ChatService = Depends(get_chat_service)):
    if not request.email_id:
        raise InvalidRequestError("Email ID is required.")

    email, draft = service.draft_reply(request.email_id)
    return DraftReplyResponse(draft=draft, email_id=email.id, original_subject=email.subject)
