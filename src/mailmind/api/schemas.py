"""Request and response models for the HTTP API.

Fields are snake_case in Python and camelCase on the wire.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from ..search.keyword import SearchFilters


class CamelModel(BaseModel):
    """Base model serialising to camelCase and reading ORM objects."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ----------------------------------------------------------------------
# System
# ----------------------------------------------------------------------


class PingResponse(CamelModel):
    ok: bool = True
    hint: str


class StatsResponse(CamelModel):
    mode: str
    emails_count: int
    last_import: Optional[datetime] = None


class OllamaStatusResponse(CamelModel):
    connected: bool
    base_url: str


# ----------------------------------------------------------------------
# Emails
# ----------------------------------------------------------------------


class AttachmentOut(CamelModel):
    id: int
    email_id: int
    filename: str
    rel_path: str
    size: int
    mime: Optional[str] = None
    original_name: Optional[str] = None
    extracted_text: Optional[str] = None
    created_at: Optional[datetime] = None


class EmailOut(CamelModel):
    id: int
    subject: str
    sender: str
    date: str
    body: str
    importance: Optional[str] = None
    label: Optional[str] = None
    classification: Optional[str] = None
    classification_confidence: Optional[str] = None
    is_processed: bool = False
    created_at: Optional[datetime] = None


class EmailDetailOut(EmailOut):
    attachments: list[AttachmentOut] = []


class DeleteEmailsResponse(CamelModel):
    success: bool = True
    deleted: int
    message: str


class ClassificationStatsResponse(CamelModel):
    total: int
    task: int
    meeting: int
    approval: int
    notice: int
    unclassified: int


class ClassifyResponse(CamelModel):
    success: bool = True
    classification: str
    confidence: str


class ReprocessResponse(CamelModel):
    ok: bool
    ollama_connected: bool = True
    processed: int
    failed: int = 0
    classified: int
    events_extracted: int
    embedded: int
    message: str


class ProcessUnprocessedResponse(CamelModel):
    success: bool = True
    processed: int
    events_extracted: int
    message: str


# ----------------------------------------------------------------------
# Import
# ----------------------------------------------------------------------


class ImportResponse(CamelModel):
    ok: bool
    inserted: int
    classified: int = 0
    events_extracted: int = 0
    embedded: int = 0
    message: Optional[str] = None


# ----------------------------------------------------------------------
# Search
# ----------------------------------------------------------------------


class SearchFiltersIn(CamelModel):
    sender: Optional[str] = None
    subject: Optional[str] = None
    body: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    operator: Literal["and", "or"] = "and"

    def to_filters(self) -> SearchFilters:
        return SearchFilters(
            sender=self.sender,
            subject=self.subject,
            body=self.body,
            start_date=self.start_date,
            end_date=self.end_date,
            operator=self.operator,
        )


class SearchRequest(CamelModel):
    message: str = ""
    top_k: int = Field(default=10, ge=1, le=50)
    filters: Optional[SearchFiltersIn] = None

    @model_validator(mode="after")
    def require_query_or_filter(self) -> "SearchRequest":
        has_message = bool(self.message.strip())
        has_filter = self.filters is not None and not self.filters.to_filters().is_empty()
        if not has_message and not has_filter:
            raise ValueError("Enter a search query or a filter")
        return self


class SearchResultOut(CamelModel):
    mail_id: str
    subject: str
    score: float
    sender: Optional[str] = None
    date: Optional[str] = None
    body: str
    attachments: list[str] = []


class SearchDebug(CamelModel):
    top_k: int
    hits_count: int


class SearchResponse(CamelModel):
    answer: str
    citations: list[SearchResultOut]
    debug: SearchDebug


# ----------------------------------------------------------------------
# Chat
# ----------------------------------------------------------------------


class ConversationOut(CamelModel):
    id: int
    title: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class MessageOut(CamelModel):
    id: int
    conversation_id: int
    role: str
    content: str
    created_at: Optional[datetime] = None


class ChatRequest(CamelModel):
    message: str = Field(min_length=1)
    conversation_id: Optional[int] = None


class ChatResponse(CamelModel):
    response: str
    conversation_id: int


class DraftReplyRequest(CamelModel):
    email_id: Optional[int] = None


class DraftReplyResponse(CamelModel):
    draft: str
    email_id: int
    original_subject: str


# ----------------------------------------------------------------------
# Events
# ----------------------------------------------------------------------


class EventOut(CamelModel):
    id: int
    email_id: Optional[int] = None
    title: str
    start_date: str
    end_date: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None
    ship_number: Optional[str] = None
    created_at: Optional[datetime] = None


class ExtractedEventOut(CamelModel):
    title: str
    start_date: str
    end_date: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None
    ship_number: Optional[str] = None


class EventExtractionRequest(CamelModel):
    email_id: int


class EventExtractionResponse(CamelModel):
    events: list[ExtractedEventOut]
    email_id: int


# ----------------------------------------------------------------------
# Settings
# ----------------------------------------------------------------------


class StorageSettingsResponse(CamelModel):
    mode: str
    data_dir: str
    saved_mode: str
    saved_data_dir: str
    info: str
    needs_restart: bool


class StorageSettingsRequest(CamelModel):
    mode: Optional[str] = None
    data_dir: Optional[str] = None


class StorageSettingsSaved(CamelModel):
    success: bool = True
    message: str
    saved_mode: str
    saved_data_dir: str
