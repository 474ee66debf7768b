"""Email listing, classification and processing endpoints."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ...exceptions import EmailNotFoundError
from ...services.processing import EmailProcessor
from ...storage.repository import EmailStore
from ..dependencies import get_processor, get_store
from ..schemas import (
    AttachmentOut,
    ClassificationStatsResponse,
    ClassifyResponse,
    DeleteEmailsResponse,
    EmailDetailOut,
    EmailOut,
    ProcessUnprocessedResponse,
    ReprocessResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["emails"])


@router.get("/emails", response_model=list[EmailOut])
def list_emails(
    limit: int = Query(100, ge=1),
    classification: Optional[str] = None,
    store: EmailStore = Depends(get_store),
):
    """List emails newest first, optionally filtered by classification."""
    return store.list_emails(limit=limit, classification=classification)


@router.get("/emails/classification-stats", response_model=ClassificationStatsResponse)
def classification_stats(store: EmailStore = Depends(get_store)):
    return store.classification_stats()


@router.delete("/emails/all", response_model=DeleteEmailsResponse)
def delete_all_emails(store: EmailStore = Depends(get_store)):
    """Delete all emails with their events, chunks and attachments."""
    deleted = store.delete_all_emails()
    return DeleteEmailsResponse(deleted=deleted, message=f"Deleted {deleted} emails.")


@router.post("/emails/reprocess", response_model=ReprocessResponse)
def reprocess(processor: EmailProcessor = Depends(get_processor)):
    """Process every email still missing a classification or processing."""
    stats, message = processor.reprocess()
    return ReprocessResponse(
        ok=stats.failed == 0,
        processed=stats.processed,
        failed=stats.failed,
        classified=stats.classified,
        events_extracted=stats.events_extracted,
        embedded=stats.embedded,
        message=message,
    )


@router.get("/emails/{email_id}", response_model=EmailDetailOut)
def get_email(email_id: int, store: EmailStore = Depends(get_store)):
    email = store.get_email(email_id)
    if email is None:
        raise EmailNotFoundError(email_id)
    attachments = [AttachmentOut.model_validate(a) for a in store.get_attachments(email_id)]
    return EmailDetailOut(**EmailOut.model_validate(email).model_dump(), attachments=attachments)


@router.post("/emails/{email_id}/classify", response_model=ClassifyResponse)
def classify_email(email_id: int, processor: EmailProcessor = Depends(get_processor)):
    result = processor.classify_email(email_id)
    return ClassifyResponse(classification=result.classification, confidence=result.confidence)


@router.post("/process/unprocessed", response_model=ProcessUnprocessedResponse)
def process_unprocessed(processor: EmailProcessor = Depends(get_processor)):
    stats, message = processor.process_unprocessed()
    return ProcessUnprocessedResponse(
        processed=stats.processed,
        events_extracted=stats.events_extracted,
        message=message,
    )
