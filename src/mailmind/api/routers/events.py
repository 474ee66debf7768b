"""Calendar event endpoints."""

from fastapi import APIRouter, Depends

from ...services.processing import EmailProcessor
from ...storage.repository import EmailStore
from ..dependencies import get_processor, get_store
from ..schemas import (
    EventExtractionRequest,
    EventExtractionResponse,
    EventOut,
    ExtractedEventOut,
)

router = APIRouter(prefix="/api/events", tags=["events"])


@router.post("/extract", response_model=EventExtractionResponse)
def extract_events(
    request: EventExtractionRequest,
    processor: EmailProcessor = Depends(get_processor),
):
    """Extract events from one email and store them."""
    events = processor.extract_events(request.email_id)
    return EventExtractionResponse(
        events=[ExtractedEventOut.model_validate(e) for e in events],
        email_id=request.email_id,
    )


@router.get("", response_model=list[EventOut])
def list_events(store: EmailStore = Depends(get_store)):
    return store.list_events()


@router.get("/search", response_model=list[EventOut])
def search_events(q: str = "", store: EmailStore = Depends(get_store)):
    """Events whose title or description contains ``q``."""
    return store.search_events(q)
