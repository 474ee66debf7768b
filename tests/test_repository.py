"""
Tests for the EmailStore repository
"""

from mailmind.ingestion.base import ParsedAttachment, ParsedEmail
from mailmind.search.keyword import SearchFilters


class TestEmails:
    """Test email storage and listing."""

    def test_insert_assigns_ids(self, store, sample_emails):
        rows = store.insert_emails(sample_emails)

        assert [r.subject for r in rows] == [e.subject for e in sample_emails]
        assert all(r.id is not None for r in rows)
        assert store.count_emails() == 3

    def test_insert_nothing(self, store):
        assert store.insert_emails([]) == []

    def test_insert_with_attachments(self, store):
        attachment = ParsedAttachment(
            original_name="report.pdf",
            stored_name="000-1-report.pdf",
            rel_path="_eml/1_1/000-1-report.pdf",
            size=10,
            mime="application/pdf",
            extracted_text="Quarterly numbers",
        )
        email = ParsedEmail(subject="Report", sender="a", date="", body="", attachments=[attachment])

        row = store.insert_emails([email])[0]

        stored = store.get_attachments(row.id)
        assert [a.filename for a in stored] == ["000-1-report.pdf"]
        assert stored[0].original_name == "report.pdf"
        assert store.get_attachment(stored[0].id).extracted_text == "Quarterly numbers"

    def test_add_attachments_to_existing_email(self, store, sample_emails):
        row = store.insert_emails(sample_emails[:1])[0]
        attachments = [
            ParsedAttachment(
                original_name=name,
                stored_name=f"00{i}-{name}",
                rel_path=f"_eml/{row.id}/00{i}-{name}",
                size=5,
            )
            for i, name in enumerate(["agenda.txt", "notes.txt"])
        ]

        assert store.add_attachments(row.id, attachments) == 2
        assert store.add_attachments(row.id, []) == 0

        stored = store.get_attachments(row.id)
        assert [a.original_name for a in stored] == ["agenda.txt", "notes.txt"]
        assert all(a.email_id == row.id for a in stored)

    def test_missing_attachment(self, store, sample_emails):
        row = store.insert_emails(sample_emails[:1])[0]

        assert store.get_attachments(row.id) == []
        assert store.get_attachment(999) is None

    def test_get_missing_email(self, store):
        assert store.get_email(999) is None

    def test_list_newest_first_with_limit(self, store, sample_emails):
        rows = store.insert_emails(sample_emails)

        listed = store.list_emails(limit=2)

        assert [e.id for e in listed] == [rows[2].id, rows[1].id]

    def test_list_by_classification(self, store, sample_emails):
        rows = store.insert_emails(sample_emails)
        store.update_classification(rows[0].id, "meeting", "high")

        assert [e.id for e in store.list_emails(classification="meeting")] == [rows[0].id]
        assert len(store.list_emails(classification="all")) == 3
        assert store.list_emails(classification="notice") == []

    def test_processing_state(self, store, sample_emails):
        rows = store.insert_emails(sample_emails)
        store.update_classification(rows[0].id, "task", "low")
        store.mark_processed(rows[0].id)
        store.mark_processed(rows[1].id)

        assert [e.id for e in store.get_unprocessed()] == [rows[2].id]
        # rows[1] is processed but still unclassified
        assert [e.id for e in store.get_needing_processing()] == [rows[1].id, rows[2].id]

    def test_classification_stats(self, store, sample_emails):
        rows = store.insert_emails(sample_emails)
        store.update_classification(rows[0].id, "meeting", "high")
        store.update_classification(rows[1].id, "notice", "medium")

        assert store.classification_stats() == {
            "total": 3,
            "task": 0,
            "meeting": 1,
            "approval": 0,
            "notice": 1,
            "unclassified": 1,
        }

    def test_delete_all_removes_dependents(self, store, sample_emails):
        rows = store.insert_emails(sample_emails)
        store.add_event("Review", "2025-01-10", email_id=rows[0].id)
        store.save_chunks(rows[0].id, [("chunk", [1.0, 0.0])])

        assert store.delete_all_emails() == 3
        assert store.count_emails() == 0
        assert store.list_events() == []
        assert store.count_chunks() == 0


class TestStats:
    """Test dashboard statistics and the import log."""

    def test_stats(self, store, sample_emails):
        assert store.get_stats().last_import is None

        store.insert_emails(sample_emails)
        store.log_import("export.json", 3)
        stats = store.get_stats()

        assert stats.emails_count == 3
        assert stats.mode.startswith("Local SQLite")
        assert stats.last_import is not None
        assert store.get_last_import().filename == "export.json"


class TestKeywordSearch:
    """Test candidate selection and scoring."""

    def test_query_matches_and_scores(self, store, sample_emails):
        store.insert_emails(sample_emails)

        results = store.search_emails("budget")

        # "budget" appears 3 times in the first email, once in the third
        assert [r.subject for r in results] == ["Budget review meeting", "Contract approval"]
        assert results[0].score == 3
        assert results[0].mail_id.isdigit()

    def test_empty_query_without_filters(self, store, sample_emails):
        store.insert_emails(sample_emails)

        assert store.search_emails("   ") == []

    def test_top_k_is_at_least_one(self, store, sample_emails):
        store.insert_emails(sample_emails)

        assert len(store.search_emails("budget", top_k=0)) == 1

    def test_sender_filter(self, store, sample_emails):
        store.insert_emails(sample_emails)

        results = store.search_emails("budget", filters=SearchFilters(sender="legal"))

        assert [r.subject for r in results] == ["Contract approval"]

    def test_filters_without_query(self, store, sample_emails):
        store.insert_emails(sample_emails)

        results = store.search_emails("", filters=SearchFilters(subject="maintenance"))

        assert [r.subject for r in results] == ["Server maintenance notice"]

    def test_or_operator(self, store, sample_emails):
        store.insert_emails(sample_emails)

        filters = SearchFilters(sender="admin", subject="contract", operator="or")
        results = store.search_emails("", filters=filters)

        assert sorted(r.subject for r in results) == ["Contract approval", "Server maintenance notice"]

    def test_date_range(self, store, sample_emails):
        store.insert_emails(sample_emails)

        filters = SearchFilters(start_date="2025-01-03", end_date="2025-01-05")
        results = store.search_emails("budget", filters=filters)

        assert [r.subject for r in results] == ["Budget review meeting"]


class TestBm25Search:
    """Test BM25 search over stored emails."""

    def test_ranks_matching_emails(self, store, sample_emails):
        store.insert_emails(sample_emails)

        results = store.search_emails_bm25("budget maintenance")

        assert {r.subject for r in results} == {
            "Budget review meeting",
            "Server maintenance notice",
            "Contract approval",
        }
        assert results[0].score >= results[-1].score

    def test_empty_query(self, store, sample_emails):
        store.insert_emails(sample_emails)

        assert store.search_emails_bm25("") == []


class TestConversations:
    """Test conversations and messages."""

    def test_messages_in_order(self, store):
        conversation = store.create_conversation("Budget question")
        store.add_message(conversation.id, "user", "What is the budget?")
        store.add_message(conversation.id, "assistant", "It is 10k.")

        messages = store.get_messages(conversation.id)

        assert [(m.role, m.content) for m in messages] == [
            ("user", "What is the budget?"),
            ("assistant", "It is 10k."),
        ]

    def test_new_message_moves_conversation_to_top(self, store):
        first = store.create_conversation("first")
        second = store.create_conversation("second")
        store.add_message(first.id, "user", "bump")

        assert [c.id for c in store.list_conversations()] == [first.id, second.id]

    def test_missing_conversation(self, store):
        assert store.get_conversation(42) is None
        assert store.get_messages(42) == []


class TestEvents:
    """Test calendar events."""

    def test_add_and_list(self, store, sample_emails):
        row = store.insert_emails(sample_emails)[0]
        store.add_event("Budget review", "2025-01-10 14:00", email_id=row.id, ship_number="H-1")
        store.add_event("Maintenance", "2025-01-11 22:00")

        assert [e.title for e in store.list_events()] == ["Maintenance", "Budget review"]
        assert [e.title for e in store.get_events_for_email(row.id)] == ["Budget review"]
        assert store.get_events_for_email(row.id)[0].ship_number == "H-1"

    def test_search_orders_by_start_and_limits(self, store):
        for day in range(20, 10, -1):
            store.add_event(f"Review {day}", f"2025-01-{day}")
        store.add_event("Other", "2025-01-01", description="unrelated")

        results = store.search_events("review")

        assert [e.start_date for e in results] == [f"2025-01-{d}" for d in range(11, 16)]

    def test_search_matches_description(self, store):
        store.add_event("Dinner", "2025-01-01", description="Team budget dinner")

        assert [e.title for e in store.search_events("BUDGET")] == ["Dinner"]

    def test_clear(self, store):
        store.add_event("A", "2025-01-01")

        assert store.clear_events() == 1
        assert store.list_events() == []


class TestSettings:
    """Test key/value settings."""

    def test_upsert(self, store):
        assert store.get_setting("storage_config") is None

        store.set_setting("storage_config", "one")
        store.set_setting("storage_config", "two")

        assert store.get_setting("storage_config") == "two"


class TestChunks:
    """Test RAG chunk storage and vector search."""

    def test_save_and_search(self, store, sample_emails):
        rows = store.insert_emails(sample_emails)
        store.save_chunks(rows[0].id, [("budget chunk", [1.0, 0.0]), ("other chunk", [0.0, 1.0])])
        store.save_chunks(rows[1].id, [("mixed chunk", [1.0, 1.0])])

        hits = store.search_chunks([1.0, 0.0], top_k=2)

        assert [h.content for h in hits] == ["budget chunk", "mixed chunk"]
        assert hits[0].similarity == 1.0
        assert hits[0].email_id == rows[0].id
        assert store.count_chunks() == 3
        assert [c.chunk_index for c in store.get_chunks_for_email(rows[0].id)] == [0, 1]

    def test_save_nothing(self, store):
        assert store.save_chunks(1, []) == 0

    def test_clear(self, store, sample_emails):
        row = store.insert_emails(sample_emails)[0]
        store.save_chunks(row.id, [("a", [1.0])])

        assert store.clear_chunks() == 1
        assert store.count_chunks() == 0
