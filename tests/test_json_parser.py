"""
Tests for the JSON export parser
"""

import json

from mailmind.ingestion.json_parser import parse_json_emails


class TestParseJsonEmails:
    """Test JSON shapes and field aliases."""

    def test_top_level_array(self):
        content = json.dumps([
            {"subject": "Budget", "sender": "lee@example.com", "date": "2025-01-04", "body": "Review"},
        ])

        emails = parse_json_emails(content)

        assert len(emails) == 1
        assert emails[0].subject == "Budget"
        assert emails[0].sender == "lee@example.com"
        assert emails[0].date == "2025-01-04"
        assert emails[0].body == "Review"

    def test_emails_object(self):
        content = json.dumps({"emails": [{"Subject": "A"}, {"Subject": "B"}]})

        assert [e.subject for e in parse_json_emails(content)] == ["A", "B"]

    def test_field_aliases(self):
        content = json.dumps([
            {"Subject": "One", "From": "a@x.com", "Date": "2025-01-01", "Body": "b1"},
            {"subject": "Two", "from": "b@x.com", "sent_date": "2025-01-02", "content": "b2"},
            {"subject": "Three", "text": "b3", "importance": "high", "label": "Inbox"},
        ])

        emails = parse_json_emails(content)

        assert [e.sender for e in emails] == ["a@x.com", "b@x.com", ""]
        assert [e.date for e in emails] == ["2025-01-01", "2025-01-02", ""]
        assert [e.body for e in emails] == ["b1", "b2", "b3"]
        assert emails[2].importance == "high"
        assert emails[2].label == "Inbox"
        assert emails[0].importance is None

    def test_accepts_bytes(self):
        content = json.dumps([{"subject": "예산 검토"}], ensure_ascii=False).encode("utf-8")

        assert parse_json_emails(content)[0].subject == "예산 검토"

    def test_invalid_json_yields_nothing(self):
        assert parse_json_emails("{not json") == []

    def test_non_object_entries_are_skipped(self):
        content = json.dumps([1, "two", {"subject": "three"}])

        assert [e.subject for e in parse_json_emails(content)] == ["three"]

    def test_unexpected_document(self):
        assert parse_json_emails("42") == []
        assert parse_json_emails(json.dumps({"other": []})) == []
