"""Repository over the MailMind database.

All methods open their own session and return detached ORM objects; the
session factory does not expire on commit, so column attributes stay
readable after the session closes. Relationships are not loaded; related
rows come from their own getters such as ``get_attachments``.
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy import and_, delete, func, or_, select, update

from ..config.settings import get_settings
from ..ingestion.base import ParsedAttachment, ParsedEmail
from ..search.bm25 import bm25_rank
from ..search.keyword import NO_SUBJECT, SearchFilters, SearchResult, score_text, tokenize
from ..search.rag import ChunkHit
from ..search.vector import cosine_similarity
from .database import Database, get_db
from .models import (
    AppSetting,
    CalendarEvent,
    Classification,
    Conversation,
    Email,
    EmailAttachment,
    ImportLog,
    Message,
    RagChunk,
)

logger = logging.getLogger(__name__)

EMAIL_BATCH_SIZE = 100
CHUNK_BATCH_SIZE = 50
KEYWORD_CANDIDATE_LIMIT = 200
BM25_CANDIDATE_LIMIT = 3000
EVENT_SEARCH_LIMIT = 5


@dataclass
class StorageStats:
    """Summary shown on the dashboard."""

    mode: str
    emails_count: int
    last_import: Optional[datetime]


def _to_result(email: Email, score: float) -> SearchResult:
    return SearchResult(
        mail_id=str(email.id),
        subject=email.subject or NO_SUBJECT,
        score=score,
        sender=email.sender or None,
        date=email.date or None,
        body=email.body or "",
    )


class EmailStore:
    """Data access for emails, conversations, events, settings and chunks."""

    def __init__(self, db: Database | None = None):
        """Initialize the store.

        Args:
            db: Database to use. Defaults to the global instance.
        """
        self._db = db or get_db()

    # ------------------------------------------------------------------
    # Stats and import log
    # ------------------------------------------------------------------

    def count_emails(self) -> int:
        with self._db.session() as session:
            return session.scalar(select(func.count(Email.id))) or 0

    def get_last_import(self) -> ImportLog | None:
        with self._db.session() as session:
            return session.scalars(
                select(ImportLog).order_by(ImportLog.created_at.desc(), ImportLog.id.desc()).limit(1)
            ).first()

    def get_stats(self) -> StorageStats:
        """Get storage mode, email count and the time of the last import."""
        last_import = self.get_last_import()
        return StorageStats(
            mode=get_settings().storage_label,
            emails_count=self.count_emails(),
            last_import=last_import.created_at if last_import else None,
        )

    def log_import(self, filename: str, emails_imported: int) -> ImportLog:
        with self._db.session() as session:
            log = ImportLog(filename=filename, emails_imported=emails_imported)
            session.add(log)
            session.flush()
            return log

    # ------------------------------------------------------------------
    # Emails
    # ------------------------------------------------------------------

    def insert_emails(self, parsed: Iterable[ParsedEmail]) -> list[Email]:
        """Insert parsed emails in batches of 100.

        Attachments carried by the parsed emails are stored alongside.

        Args:
            parsed: Parsed emails.

        Returns:
            Inserted rows, in input order, with ids assigned.
        """
        records = list(parsed)
        inserted: list[Email] = []
        if not records:
            return inserted

        with self._db.session() as session:
            for start in range(0, len(records), EMAIL_BATCH_SIZE):
                batch = records[start:start + EMAIL_BATCH_SIZE]
                rows = []
                for item in batch:
                    email = Email(
                        subject=item.subject or "",
                        sender=item.sender or "",
                        date=item.date or "",
                        body=item.body or "",
                        importance=item.importance,
                        label=item.label,
                        is_processed=False,
                    )
                    email.attachments = [self._attachment_row(a) for a in item.attachments]
                    rows.append(email)
                session.add_all(rows)
                session.flush()
                inserted.extend(rows)
                logger.debug(f"Inserted batch of {len(rows)} emails")

        logger.info(f"Inserted {len(inserted)} emails")
        return inserted

    def get_email(self, email_id: int) -> Email | None:
        with self._db.session() as session:
            return session.get(Email, email_id)

    def list_emails(self, limit: int = 100, classification: str | None = None) -> list[Email]:
        """List emails newest first.

        Args:
            limit: Maximum number of emails.
            classification: Optional classification filter; "all" means none.

        Returns:
            Emails ordered by creation time, newest first.
        """
        with self._db.session() as session:
            stmt = select(Email)
            if classification and classification != "all":
                stmt = stmt.where(Email.classification == classification)
            stmt = stmt.order_by(Email.created_at.desc(), Email.id.desc()).limit(limit)
            return list(session.scalars(stmt))

    def get_unprocessed(self) -> list[Email]:
        with self._db.session() as session:
            stmt = (
                select(Email)
                .where(Email.is_processed.is_(False))
                .order_by(Email.created_at, Email.id)
            )
            return list(session.scalars(stmt))

    def get_needing_processing(self) -> list[Email]:
        """Emails that are unclassified or not yet marked processed."""
        with self._db.session() as session:
            stmt = (
                select(Email)
                .where(or_(Email.classification.is_(None), Email.is_processed.is_(False)))
                .order_by(Email.id)
            )
            return list(session.scalars(stmt))

    def update_classification(self, email_id: int, classification: str, confidence: str) -> None:
        with self._db.session() as session:
            session.execute(
                update(Email)
                .where(Email.id == email_id)
                .values(classification=classification, classification_confidence=confidence)
            )

    def mark_processed(self, email_id: int) -> None:
        with self._db.session() as session:
            session.execute(update(Email).where(Email.id == email_id).values(is_processed=True))

    def delete_all_emails(self) -> int:
        """Delete every email together with its events, chunks and attachments.

        Returns:
            Number of emails deleted.
        """
        with self._db.session() as session:
            count = session.scalar(select(func.count(Email.id))) or 0
            session.execute(delete(RagChunk))
            session.execute(delete(CalendarEvent))
            session.execute(delete(EmailAttachment))
            session.execute(delete(Email))

        logger.info(f"Deleted {count} emails")
        return count

    def classification_stats(self) -> dict[str, int]:
        """Count emails per classification."""
        stats = {c.value: 0 for c in Classification}
        stats["unclassified"] = 0

        with self._db.session() as session:
            rows = session.execute(
                select(Email.classification, func.count(Email.id)).group_by(Email.classification)
            ).all()

        total = 0
        for classification, count in rows:
            total += count
            if classification in stats:
                stats[classification] += count
            else:
                stats["unclassified"] += count

        return {"total": total, **stats}

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def search_emails(
        self,
        query: str,
        top_k: int = 10,
        filters: SearchFilters | None = None,
    ) -> list[SearchResult]:
        """Keyword search with optional field filters.

        Candidates are fetched with case-insensitive substring matches on the
        query and the filters, combined with the filter operator, then scored
        by literal token occurrences.

        Args:
            query: Free-text query.
            top_k: Number of results to return (at least one).
            filters: Optional field filters.

        Returns:
            Results with a positive score, best first.
        """
        filters = filters or SearchFilters()
        tokens = tokenize(" ".join([query or "", *filters.values()]))
        if not tokens:
            return []

        clauses = []
        text = (query or "").strip()
        if text:
            pattern = f"%{text}%"
            clauses.append(
                or_(
                    Email.subject.ilike(pattern),
                    Email.body.ilike(pattern),
                    Email.sender.ilike(pattern),
                    Email.date.ilike(pattern),
                )
            )
        for column, value in (
            (Email.sender, filters.sender),
            (Email.subject, filters.subject),
            (Email.body, filters.body),
        ):
            if value and value.strip():
                clauses.append(column.ilike(f"%{value.strip()}%"))
        if filters.start_date and filters.start_date.strip():
            clauses.append(Email.date >= filters.start_date.strip())
        if filters.end_date and filters.end_date.strip():
            clauses.append(Email.date <= filters.end_date.strip())

        stmt = select(Email)
        if clauses:
            combine = or_ if filters.operator == "or" else and_
            stmt = stmt.where(combine(*clauses))
        stmt = stmt.limit(KEYWORD_CANDIDATE_LIMIT)

        with self._db.session() as session:
            candidates = list(session.scalars(stmt))

        results = []
        for email in candidates:
            score = score_text(f"{email.subject} {email.body} {email.sender} {email.date}", tokens)
            if score > 0:
                results.append(_to_result(email, score))

        results.sort(key=lambda r: r.score, reverse=True)
        return results[:max(1, top_k)]

    def search_emails_bm25(self, query: str, top_k: int = 10) -> list[SearchResult]:
        """Rank up to 3000 emails with BM25 over subject, sender and body."""
        tokens = tokenize(query)
        if not tokens:
            return []

        with self._db.session() as session:
            candidates = list(session.scalars(select(Email).limit(BM25_CANDIDATE_LIMIT)))

        docs = [
            (e.id, f"{e.subject or ''} {e.sender or ''} {e.body or ''}".lower())
            for e in candidates
        ]
        scores = dict(bm25_rank(docs, tokens))

        results = [
            _to_result(e, scores[e.id]) for e in candidates if scores.get(e.id, 0) > 0
        ]
        results.sort(key=lambda r: r.score, reverse=True)
        return results[:max(1, top_k)]

    # ------------------------------------------------------------------
    # Attachments
    # ------------------------------------------------------------------

    @staticmethod
    def _attachment_row(attachment: ParsedAttachment) -> EmailAttachment:
        return EmailAttachment(
            filename=attachment.stored_name,
            rel_path=attachment.rel_path,
            size=attachment.size,
            mime=attachment.mime,
            original_name=attachment.original_name,
            extracted_text=attachment.extracted_text,
        )

    def add_attachments(self, email_id: int, attachments: list[ParsedAttachment]) -> int:
        if not attachments:
            return 0
        with self._db.session() as session:
            for attachment in attachments:
                row = self._attachment_row(attachment)
                row.email_id = email_id
                session.add(row)
        return len(attachments)

    def get_attachments(self, email_id: int) -> list[EmailAttachment]:
        with self._db.session() as session:
            stmt = (
                select(EmailAttachment)
                .where(EmailAttachment.email_id == email_id)
                .order_by(EmailAttachment.id)
            )
            return list(session.scalars(stmt))

    def get_attachment(self, attachment_id: int) -> EmailAttachment | None:
        with self._db.session() as session:
            return session.get(EmailAttachment, attachment_id)

    # ------------------------------------------------------------------
    # Conversations
    # ------------------------------------------------------------------

    def create_conversation(self, title: str) -> Conversation:
        with self._db.session() as session:
            conversation = Conversation(title=title)
            session.add(conversation)
            session.flush()
            return conversation

    def get_conversation(self, conversation_id: int) -> Conversation | None:
        with self._db.session() as session:
            return session.get(Conversation, conversation_id)

    def list_conversations(self) -> list[Conversation]:
        with self._db.session() as session:
            stmt = select(Conversation).order_by(
                Conversation.updated_at.desc(), Conversation.id.desc()
            )
            return list(session.scalars(stmt))

    def add_message(self, conversation_id: int, role: str, content: str) -> Message:
        """Store a chat message and bump the conversation's updated_at."""
        with self._db.session() as session:
            message = Message(conversation_id=conversation_id, role=role, content=content)
            session.add(message)
            session.execute(
                update(Conversation)
                .where(Conversation.id == conversation_id)
                .values(updated_at=datetime.utcnow())
            )
            session.flush()
            return message

    def get_messages(self, conversation_id: int) -> list[Message]:
        with self._db.session() as session:
            stmt = (
                select(Message)
                .where(Message.conversation_id == conversation_id)
                .order_by(Message.created_at, Message.id)
            )
            return list(session.scalars(stmt))

    # ------------------------------------------------------------------
    # Calendar events
    # ------------------------------------------------------------------

    def add_event(
        self,
        title: str,
        start_date: str,
        email_id: int | None = None,
        end_date: str | None = None,
        location: str | None = None,
        description: str | None = None,
        ship_number: str | None = None,
    ) -> CalendarEvent:
        with self._db.session() as session:
            event = CalendarEvent(
                email_id=email_id,
                title=title,
                start_date=start_date,
                end_date=end_date,
                location=location,
                description=description,
                ship_number=ship_number,
            )
            session.add(event)
            session.flush()
            return event

    def list_events(self) -> list[CalendarEvent]:
        with self._db.session() as session:
            stmt = select(CalendarEvent).order_by(
                CalendarEvent.created_at.desc(), CalendarEvent.id.desc()
            )
            return list(session.scalars(stmt))

    def get_events_for_email(self, email_id: int) -> list[CalendarEvent]:
        with self._db.session() as session:
            stmt = (
                select(CalendarEvent)
                .where(CalendarEvent.email_id == email_id)
                .order_by(CalendarEvent.created_at.desc(), CalendarEvent.id.desc())
            )
            return list(session.scalars(stmt))

    def clear_events(self) -> int:
        with self._db.session() as session:
            result = session.execute(delete(CalendarEvent))
            return result.rowcount or 0

    def search_events(self, keyword: str) -> list[CalendarEvent]:
        """Events whose title or description contains the keyword."""
        pattern = f"%{keyword}%"
        with self._db.session() as session:
            stmt = (
                select(CalendarEvent)
                .where(
                    or_(
                        CalendarEvent.title.ilike(pattern),
                        CalendarEvent.description.ilike(pattern),
                    )
                )
                .order_by(CalendarEvent.start_date)
                .limit(EVENT_SEARCH_LIMIT)
            )
            return list(session.scalars(stmt))

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def get_setting(self, key: str) -> str | None:
        with self._db.session() as session:
            setting = session.scalars(select(AppSetting).where(AppSetting.key == key)).first()
            return setting.value if setting else None

    def set_setting(self, key: str, value: str) -> None:
        with self._db.session() as session:
            setting = session.scalars(select(AppSetting).where(AppSetting.key == key)).first()
            if setting:
                setting.value = value
                setting.updated_at = datetime.utcnow()
            else:
                session.add(AppSetting(key=key, value=value))

    # ------------------------------------------------------------------
    # RAG chunks
    # ------------------------------------------------------------------

    def save_chunks(self, email_id: int, chunks: list[tuple[str, list[float]]]) -> int:
        """Store embedded chunks for an email in batches of 50.

        Args:
            email_id: Owning email.
            chunks: (content, embedding) pairs in chunk order.

        Returns:
            Number of chunks stored.
        """
        if not chunks:
            return 0

        rows = [
            RagChunk(
                email_id=email_id,
                chunk_index=index,
                content=content,
                embedding=json.dumps(embedding),
            )
            for index, (content, embedding) in enumerate(chunks)
        ]
        with self._db.session() as session:
            for start in range(0, len(rows), CHUNK_BATCH_SIZE):
                session.add_all(rows[start:start + CHUNK_BATCH_SIZE])
                session.flush()
        return len(rows)

    def search_chunks(self, query_embedding: list[float], top_k: int = 5) -> list[ChunkHit]:
        """Linear cosine-similarity scan over every stored chunk."""
        with self._db.session() as session:
            rows = session.execute(
                select(RagChunk.content, RagChunk.embedding, RagChunk.email_id)
            ).all()

        hits = []
        for content, embedding, email_id in rows:
            try:
                vector = json.loads(embedding)
            except json.JSONDecodeError:
                logger.warning(f"Skipping chunk of email {email_id} with invalid embedding")
                continue
            hits.append(
                ChunkHit(
                    content=content,
                    similarity=cosine_similarity(query_embedding, vector),
                    email_id=email_id,
                )
            )

        hits.sort(key=lambda h: h.similarity, reverse=True)
        return hits[:top_k]

    def count_chunks(self) -> int:
        with self._db.session() as session:
            return session.scalar(select(func.count(RagChunk.id))) or 0

    def get_chunks_for_email(self, email_id: int) -> list[RagChunk]:
        with self._db.session() as session:
            stmt = (
                select(RagChunk)
                .where(RagChunk.email_id == email_id)
                .order_by(RagChunk.chunk_index)
            )
            return list(session.scalars(stmt))

    def clear_chunks(self) -> int:
        with self._db.session() as session:
            result = session.execute(delete(RagChunk))
            return result.rowcount or 0
