"""Import and AI processing pipeline."""

import logging
from dataclasses import dataclass

from ..analysis.classifier import ClassificationResult, EmailClassifier
from ..analysis.embeddings import ChunkEmbedder
from ..analysis.events import EventExtractor, ExtractedEvent
from ..analysis.llm import LLMClient
from ..config.settings import Settings, get_settings
from ..exceptions import ArchiveParseError, EmailNotFoundError, LLMUnavailableError
from ..ingestion.loader import load_archive
from ..ingestion.samples import SAMPLE_FILENAME, generate_sample_emails
from ..storage.models import Email
from ..storage.repository import EmailStore

logger = logging.getLogger(__name__)


@dataclass
class ProcessingStats:
    """Counters for a batch of processed emails."""

    processed: int = 0
    failed: int = 0
    classified: int = 0
    events_extracted: int = 0
    embedded: int = 0


@dataclass
class ImportSummary:
    """Outcome of importing one upload."""

    inserted: int
    stats: ProcessingStats
    llm_connected: bool
    message: str
    parse_errors: int = 0


class EmailProcessor:
    """Classify, extract events from and embed stored emails."""

    def __init__(
        self,
        store: EmailStore,
        llm: LLMClient,
        settings: Settings | None = None,
    ):
        """Initialize the processor.

        Args:
            store: Email repository.
            llm: LLM client used for chat and embeddings.
            settings: Optional settings override.
        """
        self._store = store
        self._llm = llm
        self._settings = settings or get_settings()

        self._classifier = EmailClassifier(llm)
        self._extractor = EventExtractor(llm)
        self._embedder = ChunkEmbedder(llm, chunk_size=self._settings.chunk_size)

    def _save_events(self, email_id: int, events: list[ExtractedEvent]) -> int:
        for event in events:
            self._store.add_event(
                email_id=email_id,
                title=event.title,
                start_date=event.start_date,
                end_date=event.end_date,
                location=event.location,
                description=event.description,
                ship_number=event.ship_number,
            )
        return len(events)

    def process_email(self, email: Email, stats: ProcessingStats) -> None:
        """Run the AI steps an email is still missing, then mark it processed.

        Classification is skipped when the email already has one, event
        extraction when it already has events, and embedding when it already
        has chunks.
        """
        if not email.classification:
            result = self._classifier.classify(email.subject, email.body, email.sender)
            self._store.update_classification(email.id, result.classification, result.confidence)
            stats.classified += 1

        if not self._store.get_events_for_email(email.id):
            events = self._extractor.extract(email.subject, email.body, email.date)
            stats.events_extracted += self._save_events(email.id, events)

        if not self._store.get_chunks_for_email(email.id):
            chunks = self._embedder.embed_email(email.subject, email.sender, email.date, email.body)
            stats.embedded += self._store.save_chunks(email.id, chunks)

        self._store.mark_processed(email.id)

    def process_batch(self, emails: list[Email]) -> ProcessingStats:
        """Process emails one by one; a failing email is logged and counted."""
        stats = ProcessingStats()
        for email in emails:
            try:
                self.process_email(email, stats)
                stats.processed += 1
                logger.info(f"Processed email {email.id}")
            except Exception as e:
                stats.failed += 1
                logger.error(f"Error processing email {email.id}: {e}")
        return stats

    def _require_llm(self) -> None:
        if not self._llm.check_connection():
            raise LLMUnavailableError("connection check failed")

    def import_file(self, filename: str | None = None, content: bytes | None = None) -> ImportSummary:
        """Import an uploaded archive, or the demo emails when no file is given.

        Emails are inserted and logged first; AI processing only runs when
        the LLM is reachable.

        Args:
            filename: Original file name, or None for the demo data.
            content: File content.

        Returns:
            Import summary.

        Raises:
            UnsupportedFormatError: For unsupported extensions.
            ArchiveParseError: When no email could be read.
        """
        parse_errors = 0
        if filename is None:
            filename = SAMPLE_FILENAME
            parsed = generate_sample_emails()
        else:
            attachments_dir = self._settings.attachments_dir if self._settings.save_attachments else None
            result = load_archive(filename, content or b"", attachments_dir)
            parsed = result.emails
            parse_errors = result.error_count
            for error in result.errors:
                logger.warning(f"{filename}: {error}")

        if not parsed:
            raise ArchiveParseError("No emails found in the file.")

        inserted = self._store.insert_emails(parsed)
        self._store.log_import(filename, len(inserted))
        logger.info(f"Imported {len(inserted)} emails from {filename}")

        connected = self._llm.check_connection()
        stats = self.process_batch(inserted) if connected else ProcessingStats()

        if connected:
            message = (
                f"Imported {len(inserted)} emails. {stats.classified} classified, "
                f"{stats.events_extracted} events extracted, {stats.embedded} chunks embedded."
            )
        else:
            message = (
                f"Imported {len(inserted)} emails. "
                "Automatic processing was skipped because the AI server is not connected."
            )

        return ImportSummary(
            inserted=len(inserted),
            stats=stats,
            llm_connected=connected,
            message=message,
            parse_errors=parse_errors,
        )

    def reprocess(self) -> tuple[ProcessingStats, str]:
        """Process every email that is unclassified or not yet processed.

        Raises:
            LLMUnavailableError: If the LLM cannot be reached.
        """
        self._require_llm()

        pending = self._store.get_needing_processing()
        if not pending:
            return ProcessingStats(), "No emails to process. All emails have already been processed."

        stats = self.process_batch(pending)
        summary = (
            f"classified: {stats.classified}, events: {stats.events_extracted}, "
            f"embeddings: {stats.embedded} chunks"
        )
        if stats.failed:
            message = f"Processed {stats.processed} emails, {stats.failed} failed. {summary}"
        else:
            message = f"Reprocessed {stats.processed} emails. {summary}"
        return stats, message

    def process_unprocessed(self) -> tuple[ProcessingStats, str]:
        """Process emails not yet marked processed.

        Raises:
            LLMUnavailableError: If the LLM cannot be reached.
        """
        self._require_llm()

        stats = self.process_batch(self._store.get_unprocessed())
        message = f"Processed {stats.processed} emails, extracted {stats.events_extracted} events"
        return stats, message

    def classify_email(self, email_id: int) -> ClassificationResult:
        """Classify one email and store the result."""
        email = self._store.get_email(email_id)
        if email is None:
            raise EmailNotFoundError(email_id)

        result = self._classifier.classify(email.subject, email.body, email.sender)
        self._store.update_classification(email_id, result.classification, result.confidence)
        logger.info(f"Classified email {email_id}: {result.classification}")
        return result

    def extract_events(self, email_id: int) -> list[ExtractedEvent]:
        """Extract events from one email and store them."""
        email = self._store.get_email(email_id)
        if email is None:
            raise EmailNotFoundError(email_id)

        events = self._extractor.extract(email.subject, email.body, email.date)
        self._save_events(email_id, events)
        logger.info(f"Extracted {len(events)} events from email {email_id}")
        return events
