"""Ping, stats and LLM status endpoints."""

from fastapi import APIRouter, Depends

from ...analysis.llm import LLMClient
from ...storage.repository import EmailStore
from ..dependencies import get_llm, get_store
from ..schemas import OllamaStatusResponse, PingResponse, StatsResponse

router = APIRouter(prefix="/api", tags=["system"])


@router.get("/ping", response_model=PingResponse)
def ping():
    return PingResponse(
        hint=(
            "POST /api/import to import emails, GET /api/stats for statistics, "
            "POST /api/search to search"
        )
    )


@router.get("/stats", response_model=StatsResponse)
def stats(store: EmailStore = Depends(get_store)):
    """Storage mode, number of emails and time of the last import."""
    result = store.get_stats()
    return StatsResponse(
        mode=result.mode,
        emails_count=result.emails_count,
        last_import=result.last_import,
    )


@router.get("/ollama/status", response_model=OllamaStatusResponse)
def ollama_status(llm: LLMClient = Depends(get_llm)):
    return OllamaStatusResponse(connected=llm.check_connection(), base_url=llm.base_url)
