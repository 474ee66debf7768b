"""SQLAlchemy ORM models for MailMind Archive."""

import enum
from datetime import datetime
from typing import List, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class Classification(enum.Enum):
    """Categories an email can be classified into."""

    TASK = "task"
    MEETING = "meeting"
    APPROVAL = "approval"
    NOTICE = "notice"


class Confidence(enum.Enum):
    """Confidence reported by the classifier."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Email(Base):
    """Email message imported from an archive."""

    __tablename__ = "emails"

    id: Mapped[int] = mapped_column(primary_key=True)
    subject: Mapped[str] = mapped_column(Text, default="")
    sender: Mapped[str] = mapped_column(Text, default="")
    # Kept as text: archives carry ISO strings, RFC 2822 strings or nothing
    date: Mapped[str] = mapped_column(String(64), default="", index=True)
    body: Mapped[str] = mapped_column(Text, default="")
    importance: Mapped[Optional[str]] = mapped_column(String(20))
    label: Mapped[Optional[str]] = mapped_column(String(255))

    classification: Mapped[Optional[str]] = mapped_column(String(20), index=True)
    classification_confidence: Mapped[Optional[str]] = mapped_column(String(20))
    is_processed: Mapped[bool] = mapped_column(Boolean, default=False, index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    # Relationships
    attachments: Mapped[List["EmailAttachment"]] = relationship(
        back_populates="email", cascade="all, delete-orphan"
    )
    events: Mapped[List["CalendarEvent"]] = relationship(
        back_populates="email", cascade="all, delete-orphan"
    )
    chunks: Mapped[List["RagChunk"]] = relationship(
        back_populates="email", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Email {self.id}: {self.subject[:50]}...>"


class EmailAttachment(Base):
    """File attached to an email, stored on disk under the attachments dir."""

    __tablename__ = "email_attachments"

    id: Mapped[int] = mapped_column(primary_key=True)
    email_id: Mapped[int] = mapped_column(ForeignKey("emails.id"), index=True)
    filename: Mapped[str] = mapped_column(String(255))
    rel_path: Mapped[str] = mapped_column(String(500))
    size: Mapped[int] = mapped_column(Integer, default=0)
    mime: Mapped[Optional[str]] = mapped_column(String(255))
    original_name: Mapped[Optional[str]] = mapped_column(String(500))
    extracted_text: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    email: Mapped["Email"] = relationship(back_populates="attachments")

    def __repr__(self) -> str:
        return f"<EmailAttachment {self.id}: {self.filename}>"


class ImportLog(Base):
    """One row per upload."""

    __tablename__ = "import_logs"

    id: Mapped[int] = mapped_column(primary_key=True)
    filename: Mapped[str] = mapped_column(String(500))
    emails_imported: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)

    def __repr__(self) -> str:
        return f"<ImportLog {self.filename}: {self.emails_imported}>"


class Conversation(Base):
    """A chat conversation with the assistant."""

    __tablename__ = "conversations"

    id: Mapped[int] = mapped_column(primary_key=True)
    title: Mapped[str] = mapped_column(String(255), default="New conversation")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)

    messages: Mapped[List["Message"]] = relationship(
        back_populates="conversation",
        cascade="all, delete-orphan",
        order_by="Message.id",
    )

    def __repr__(self) -> str:
        return f"<Conversation {self.id}: {self.title}>"


class Message(Base):
    """A single chat turn."""

    __tablename__ = "messages"

    id: Mapped[int] = mapped_column(primary_key=True)
    conversation_id: Mapped[int] = mapped_column(ForeignKey("conversations.id"), index=True)
    role: Mapped[str] = mapped_column(String(20))  # user, assistant, system
    content: Mapped[str] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    conversation: Mapped["Conversation"] = relationship(back_populates="messages")

    def __repr__(self) -> str:
        return f"<Message {self.id} ({self.role})>"


class CalendarEvent(Base):
    """Calendar event extracted from an email."""

    __tablename__ = "calendar_events"

    id: Mapped[int] = mapped_column(primary_key=True)
    email_id: Mapped[Optional[int]] = mapped_column(ForeignKey("emails.id"), index=True)
    title: Mapped[str] = mapped_column(Text)
    start_date: Mapped[str] = mapped_column(String(64), index=True)
    end_date: Mapped[Optional[str]] = mapped_column(String(64))
    location: Mapped[Optional[str]] = mapped_column(Text)
    description: Mapped[Optional[str]] = mapped_column(Text)
    ship_number: Mapped[Optional[str]] = mapped_column(String(100))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    email: Mapped[Optional["Email"]] = relationship(back_populates="events")

    def __repr__(self) -> str:
        return f"<CalendarEvent {self.id}: {self.title[:50]}>"


class RagChunk(Base):
    """Embedded slice of an email used for retrieval."""

    __tablename__ = "rag_chunks"

    id: Mapped[int] = mapped_column(primary_key=True)
    email_id: Mapped[int] = mapped_column(ForeignKey("emails.id"), index=True)
    chunk_index: Mapped[int] = mapped_column(Integer, default=0)
    content: Mapped[str] = mapped_column(Text)
    embedding: Mapped[str] = mapped_column(Text)  # JSON list of floats
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    email: Mapped["Email"] = relationship(back_populates="chunks")

    def __repr__(self) -> str:
        return f"<RagChunk email={self.email_id} #{self.chunk_index}>"


class AppSetting(Base):
    """Key/value settings persisted by the application."""

    __tablename__ = "app_settings"

    id: Mapped[int] = mapped_column(primary_key=True)
    key: Mapped[str] = mapped_column(String(100), unique=True, index=True)
    value: Mapped[str] = mapped_column(Text)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    def __repr__(self) -> str:
        return f"<AppSetting {self.key}>"
