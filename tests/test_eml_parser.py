"""
Tests for the EML and ZIP parsers
"""

import io
import re
import zipfile
from email.message import EmailMessage
from pathlib import Path

from mailmind.ingestion.attachments import AttachmentWriter
from mailmind.ingestion.eml_parser import NO_SUBJECT, UNKNOWN_SENDER, EmlParser


def build_message(
    subject: str | None = "Budget review",
    sender: str | None = "Min Lee <lee@example.com>",
    date: str | None = "Mon, 06 Jan 2025 14:00:00 +0900",
    text: str | None = "Please review the budget.",
    html: str | None = None,
) -> EmailMessage:
    message = EmailMessage()
    if subject is not None:
        message["Subject"] = subject
    if sender is not None:
        message["From"] = sender
    message["To"] = "park@example.com"
    if date is not None:
        message["Date"] = date
    if text is not None:
        message.set_content(text)
    if html is not None:
        if text is None:
            message.set_content(html, subtype="html")
        else:
            message.add_alternative(html, subtype="html")
    return message


class TestParseBytes:
    """Test single-message parsing."""

    def test_plain_message(self):
        result = EmlParser().parse_bytes(build_message().as_bytes())

        assert result.error_count == 0
        email = result.emails[0]
        assert email.subject == "Budget review"
        assert email.sender == "Min Lee <lee@example.com>"
        assert email.date == "2025-01-06 14:00:00"
        assert email.body == "Please review the budget."
        assert email.importance == "normal"

    def test_defaults_for_missing_headers(self):
        message = build_message(subject=None, sender=None, date=None)

        email = EmlParser().parse_bytes(message.as_bytes()).emails[0]

        assert email.subject == NO_SUBJECT
        assert email.sender == UNKNOWN_SENDER
        assert re.fullmatch(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}", email.date)

    def test_prefers_plain_text_part(self):
        message = build_message(text="Plain body", html="<html><body><p>HTML body</p></body></html>")

        email = EmlParser().parse_bytes(message.as_bytes()).emails[0]

        assert email.body == "Plain body"

    def test_html_only_message(self):
        message = build_message(text=None, html="<html><body><p>Hello</p><p>World</p></body></html>")

        email = EmlParser().parse_bytes(message.as_bytes()).emails[0]

        assert email.body == "Hello\nWorld"

    def test_label_is_passed_through(self):
        email = EmlParser().parse_bytes(build_message().as_bytes(), label="Projects").emails[0]

        assert email.label == "Projects"


class TestAttachments:
    """Test attachment saving."""

    def test_attachments_are_written(self, tmp_path):
        message = build_message()
        message.add_attachment(
            b"line one\nline two\n",
            maintype="text",
            subtype="plain",
            filename="notes.txt",
        )

        email = EmlParser(AttachmentWriter(tmp_path)).parse_bytes(message.as_bytes()).emails[0]

        assert len(email.attachments) == 1
        attachment = email.attachments[0]
        assert attachment.original_name == "notes.txt"
        assert attachment.rel_path.startswith("_eml/")
        assert attachment.stored_name.endswith("-notes.txt")
        assert attachment.mime == "text/plain"
        assert attachment.extracted_text is None
        assert (tmp_path / attachment.rel_path).read_bytes() == b"line one\nline two\n"
        assert attachment.size == len(b"line one\nline two\n")

    def test_attachments_skipped_without_writer(self):
        message = build_message()
        message.add_attachment(b"data", maintype="application", subtype="octet-stream", filename="a.bin")

        email = EmlParser().parse_bytes(message.as_bytes()).emails[0]

        assert email.attachments == []


class TestParseZip:
    """Test ZIP bundles of EML files."""

    def _zip(self, members: dict[str, bytes]) -> bytes:
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as archive:
            for name, data in members.items():
                archive.writestr(name, data)
        return buffer.getvalue()

    def test_parses_eml_members(self):
        data = self._zip({
            "Inbox/first.eml": build_message(subject="First").as_bytes(),
            "second.EML": build_message(subject="Second").as_bytes(),
            "readme.txt": b"not an email",
        })

        result = EmlParser().parse_zip(data, "bundle.zip")

        assert result.error_count == 0
        assert sorted(e.subject for e in result.emails) == ["First", "Second"]
        labels = {e.subject: e.label for e in result.emails}
        assert labels == {"First": "Inbox", "Second": None}

    def test_bad_zip(self):
        result = EmlParser().parse_zip(b"not a zip", "broken.zip")

        assert result.emails == []
        assert result.error_count == 1
        assert "broken.zip" in result.errors[0]


class TestParseDirectory:
    """Test walking a directory of EML files."""

    def test_labels_from_folder_names(self, tmp_path: Path):
        (tmp_path / "Sent Items").mkdir()
        (tmp_path / "top.eml").write_bytes(build_message(subject="Top").as_bytes())
        (tmp_path / "Sent Items" / "1.eml").write_bytes(build_message(subject="Sent").as_bytes())

        result = EmlParser().parse_directory(tmp_path)

        labels = {e.subject: e.label for e in result.emails}
        assert labels == {"Top": None, "Sent": "Sent Items"}
