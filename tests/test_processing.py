"""
Tests for the import and AI processing pipeline
"""

import json

import pytest

from mailmind.exceptions import (
    ArchiveParseError,
    EmailNotFoundError,
    LLMUnavailableError,
    UnsupportedFormatError,
)
from mailmind.ingestion.samples import SAMPLE_FILENAME
from mailmind.services.processing import EmailProcessor, ProcessingStats


@pytest.fixture
def processor(store, llm, settings):
    return EmailProcessor(store, llm, settings)


class TestImportFile:
    """Test imports with and without a reachable LLM."""

    def test_sample_data(self, processor, store):
        summary = processor.import_file()

        assert summary.inserted == 8
        assert summary.llm_connected is True
        assert summary.stats.classified == 8
        assert summary.stats.embedded >= 8
        assert store.get_last_import().filename == SAMPLE_FILENAME
        assert store.get_unprocessed() == []
        assert store.classification_stats()["meeting"] == 8
        assert summary.message.startswith("Imported 8 emails. 8 classified")

    def test_json_upload(self, processor, store):
        content = json.dumps([
            {"subject": "Budget", "from": "lee@example.com", "body": "Review the budget"},
            {"subject": "Trip", "from": "park@example.com", "body": "Travel plans"},
        ]).encode()

        summary = processor.import_file("export.json", content)

        assert summary.inserted == 2
        assert store.count_emails() == 2
        assert store.get_last_import().emails_imported == 2

    def test_events_are_saved(self, processor, store, llm):
        llm.events_reply = '[{"title": "Kickoff", "startDate": "2025-01-08 10:00"}]'
        content = json.dumps([{"subject": "Kickoff", "body": "Kickoff on Wednesday"}]).encode()

        summary = processor.import_file("export.json", content)

        assert summary.stats.events_extracted == 1
        assert [e.title for e in store.list_events()] == ["Kickoff"]

    def test_llm_offline_skips_processing(self, processor, store, llm):
        llm.connected = False

        summary = processor.import_file()

        assert summary.inserted == 8
        assert summary.llm_connected is False
        assert summary.stats == ProcessingStats()
        assert "not connected" in summary.message
        assert len(store.get_unprocessed()) == 8
        assert llm.calls == []

    def test_empty_upload(self, processor):
        with pytest.raises(ArchiveParseError, match="No emails found"):
            processor.import_file("export.json", b"[]")

    def test_unsupported_format(self, processor):
        with pytest.raises(UnsupportedFormatError):
            processor.import_file("archive.mbox", b"From x")


class TestProcessEmail:
    """Test that only missing steps run."""

    def test_skips_completed_steps(self, processor, store, llm, sample_emails):
        row = store.insert_emails(sample_emails[:1])[0]
        store.update_classification(row.id, "notice", "high")
        store.add_event("Existing", "2025-01-10", email_id=row.id)
        store.save_chunks(row.id, [("chunk", [1.0])])
        email = store.get_email(row.id)

        stats = ProcessingStats()
        processor.process_email(email, stats)

        assert llm.calls == []
        assert llm.embedded == []
        assert stats == ProcessingStats()
        assert store.get_email(row.id).is_processed is True
        assert store.get_email(row.id).classification == "notice"

    def test_failures_are_counted(self, processor, store, llm, sample_emails):
        rows = store.insert_emails(sample_emails)
        llm.chat_error = RuntimeError("model crashed")

        stats = processor.process_batch(rows)

        assert stats.failed == 3
        assert stats.processed == 0
        assert len(store.get_unprocessed()) == 3


class TestReprocess:
    """Test reprocessing and processing of pending emails."""

    def test_requires_llm(self, processor, llm):
        llm.connected = False

        with pytest.raises(LLMUnavailableError):
            processor.reprocess()
        with pytest.raises(LLMUnavailableError):
            processor.process_unprocessed()

    def test_nothing_to_do(self, processor):
        stats, message = processor.reprocess()

        assert stats.processed == 0
        assert message.startswith("No emails to process")

    def test_processes_pending_emails(self, processor, store, sample_emails):
        store.insert_emails(sample_emails)

        stats, message = processor.reprocess()

        assert stats.processed == 3
        assert stats.classified == 3
        assert message.startswith("Reprocessed 3 emails")
        assert store.get_needing_processing() == []

    def test_reports_failures(self, processor, store, llm, sample_emails):
        store.insert_emails(sample_emails)
        llm.chat_error = RuntimeError("model crashed")

        stats, message = processor.reprocess()

        assert stats.failed == 3
        assert message.startswith("Processed 0 emails, 3 failed")

    def test_process_unprocessed(self, processor, store, sample_emails):
        store.insert_emails(sample_emails)

        stats, message = processor.process_unprocessed()

        assert stats.processed == 3
        assert message == "Processed 3 emails, extracted 0 events"
        assert store.count_chunks() >= 3


class TestSingleEmail:
    """Test classifying and extracting one email."""

    def test_classify_email(self, processor, store, llm, sample_emails):
        row = store.insert_emails(sample_emails[:1])[0]
        llm.classification_reply = '{"classification": "approval", "confidence": "medium"}'

        result = processor.classify_email(row.id)

        assert (result.classification, result.confidence) == ("approval", "medium")
        assert store.get_email(row.id).classification_confidence == "medium"

    def test_extract_events(self, processor, store, llm, sample_emails):
        row = store.insert_emails(sample_emails[:1])[0]
        llm.events_reply = '[{"title": "Budget review", "startDate": "2025-01-10 14:00"}]'

        events = processor.extract_events(row.id)

        assert [e.title for e in events] == ["Budget review"]
        assert [e.email_id for e in store.list_events()] == [row.id]

    def test_unknown_email(self, processor):
        with pytest.raises(EmailNotFoundError):
            processor.classify_email(999)
        with pytest.raises(EmailNotFoundError):
            processor.extract_events(999)
