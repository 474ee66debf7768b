"""Keyword search endpoint."""

from fastapi import APIRouter, Depends

from ...services.chat import ChatService
from ..dependencies import get_chat_service
from ..schemas import SearchDebug, SearchRequest, SearchResponse, SearchResultOut

router = APIRouter(prefix="/api", tags=["search"])


@router.post("/search", response_model=SearchResponse)
def search(request: SearchRequest, chat: ChatService = Depends(get_chat_service)):
    """Keyword search over subject, body, sender and date."""
    filters = request.filters.to_filters() if request.filters else None
    result = chat.search(request.message, request.top_k, filters)

    return SearchResponse(
        answer=result.answer,
        citations=[SearchResultOut.model_validate(c) for c in result.citations],
        debug=SearchDebug(top_k=result.top_k, hits_count=result.hits_count),
    )
