"""Data storage on SQLAlchemy (PostgreSQL or local SQLite)."""

from .models import (
    AppSetting,
    CalendarEvent,
    Conversation,
    Email,
    EmailAttachment,
    ImportLog,
    Message,
    RagChunk,
)
from .database import Database, get_db, init_db
from .repository import EmailStore, StorageStats

__all__ = [
    "AppSetting",
    "CalendarEvent",
    "Conversation",
    "Email",
    "EmailAttachment",
    "ImportLog",
    "Message",
    "RagChunk",
    "Database",
    "get_db",
    "init_db",
    "EmailStore",
    "StorageStats",
]
