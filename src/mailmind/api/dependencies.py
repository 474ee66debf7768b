"""FastAPI dependencies wiring the store, the LLM client and the services."""

from fastapi import Depends

from ..analysis.llm import LLMClient, get_llm_client
from ..services.chat import ChatService
from ..services.processing import EmailProcessor
from ..storage.database import get_db
from ..storage.repository import EmailStore

_llm: LLMClient | None = None


def get_store() -> EmailStore:
    return EmailStore(get_db())


def get_llm() -> LLMClient:
    """Get or create the shared LLM client."""
    global _llm
    if _llm is None:
        _llm = get_llm_client()
    return _llm


def close_llm() -> None:
    """Close the shared LLM client if one was created."""
    global _llm
    if _llm is not None:
        _llm.close()
        _llm = None


def get_processor(
    store: EmailStore = Depends(get_store),
    llm: LLMClient = Depends(get_llm),
) -> EmailProcessor:
    return EmailProcessor(store, llm)


def get_chat_service(
    store: EmailStore = Depends(get_store),
    llm: LLMClient = Depends(get_llm),
) -> ChatService:
    return ChatService(store, llm)
