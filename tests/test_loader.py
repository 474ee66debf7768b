"""
Tests for archive format dispatch
"""

import json
from unittest.mock import patch

import pytest

from mailmind.exceptions import ArchiveParseError, UnsupportedFormatError
from mailmind.ingestion.base import ParsedEmail, ParseResult
from mailmind.ingestion.loader import file_extension, load_archive


class TestFileExtension:
    """Test extension detection."""

    def test_lower_cases_extension(self):
        assert file_extension("Archive.PST") == "pst"
        assert file_extension("mail.eml") == "eml"
        assert file_extension("noext") == ""


class TestLoadArchive:
    """Test parser selection."""

    def test_json(self):
        content = json.dumps([{"subject": "Budget"}]).encode()

        result = load_archive("export.json", content)

        assert [e.subject for e in result.emails] == ["Budget"]

    def test_eml(self):
        content = b"Subject: Budget\r\nFrom: lee@example.com\r\n\r\nHello\r\n"

        result = load_archive("message.eml", content)

        assert result.emails[0].subject == "Budget"
        assert result.emails[0].body == "Hello"

    def test_mbox_is_rejected(self):
        with pytest.raises(UnsupportedFormatError, match="MBOX"):
            load_archive("archive.mbox", b"From x")

    def test_unknown_extension_is_rejected(self):
        with pytest.raises(UnsupportedFormatError, match=r"\.txt"):
            load_archive("notes.txt", b"hello")

    def test_pst_errors_without_emails_raise(self):
        failed = ParseResult(errors=["Failed to open PST file: boom"])

        with patch("mailmind.ingestion.loader.PstParser.parse_bytes", return_value=failed):
            with pytest.raises(ArchiveParseError) as exc_info:
                load_archive("archive.pst", b"data")

        assert "boom" in exc_info.value.message
        assert exc_info.value.details["errors"] == failed.errors

    def test_pst_partial_errors_are_returned(self):
        partial = ParseResult(
            emails=[ParsedEmail(subject="ok", sender="", date="", body="")],
            errors=["Error parsing email: bad item"],
        )

        with patch("mailmind.ingestion.loader.PstParser.parse_bytes", return_value=partial):
            result = load_archive("archive.pst", b"data")

        assert result.total_count == 1
        assert result.error_count == 1

    def test_attachments_dir_enables_writer(self, tmp_path):
        with patch("mailmind.ingestion.loader.EmlParser") as parser_cls:
            parser_cls.return_value.parse_bytes.return_value = ParseResult()
            load_archive("message.eml", b"", tmp_path)

        writer = parser_cls.call_args.args[0]
        assert writer.base_dir == tmp_path
