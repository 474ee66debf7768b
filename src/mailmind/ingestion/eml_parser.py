"""RFC 822 (.eml) parser, also used for ZIP bundles and readpst output."""

import logging
import zipfile
from datetime import datetime
from email import policy
from email.message import EmailMessage
from email.parser import BytesParser
from email.utils import parsedate_to_datetime
from io import BytesIO
from pathlib import Path

from .attachments import AttachmentWriter
from .base import ParsedEmail, ParseResult
from .text import decode_bytes, html_to_text, looks_like_html, normalize_body

logger = logging.getLogger(__name__)

NO_SUBJECT = "(no subject)"
UNKNOWN_SENDER = "unknown@unknown.com"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class EmlParser:
    """Parse .eml messages with the standard library email package."""

    def __init__(self, attachments: AttachmentWriter | None = None):
        """Initialize the parser.

        Args:
            attachments: Writer for attachments. Attachments are skipped when None.
        """
        self._attachments = attachments
        self._counter = 0

    def parse_bytes(self, data: bytes, filename: str = "message.eml", label: str | None = None) -> ParseResult:
        """Parse a single message.

        Args:
            data: Raw message bytes.
            filename: Source name, used in error messages.
            label: Optional folder label for the email.

        Returns:
            Result holding one email, or one error.
        """
        result = ParseResult()
        try:
            message = BytesParser(policy=policy.default).parsebytes(data)
            result.emails.append(self._convert(message, label))
        except Exception as e:
            logger.warning(f"Failed to parse {filename}: {e}")
            result.errors.append(f"Failed to parse EML file {filename}: {e}")
        return result

    def parse_file(self, path: Path | str, label: str | None = None) -> ParseResult:
        path = Path(path)
        return self.parse_bytes(path.read_bytes(), filename=path.name, label=label)

    def parse_zip(self, data: bytes, filename: str = "archive.zip") -> ParseResult:
        """Parse every .eml member of a ZIP archive.

        Args:
            data: ZIP file content.
            filename: Source name, used in error messages.

        Returns:
            Combined result of all members.
        """
        result = ParseResult()
        try:
            archive = zipfile.ZipFile(BytesIO(data))
        except zipfile.BadZipFile as e:
            result.errors.append(f"Failed to open ZIP file {filename}: {e}")
            return result

        with archive:
            members = [
                info for info in archive.infolist()
                if not info.is_dir() and info.filename.lower().endswith(".eml")
            ]
            logger.info(f"Found {len(members)} EML files in {filename}")

            for info in members:
                member_label = Path(info.filename).parent.name or None
                result.extend(
                    self.parse_bytes(archive.read(info), filename=info.filename, label=member_label)
                )

        return result

    def parse_directory(self, root: Path | str) -> ParseResult:
        """Parse every .eml file below a directory, labelled by its folder name."""
        result = ParseResult()
        root = Path(root)
        for path in sorted(root.rglob("*.eml")):
            label = path.parent.name if path.parent != root else None
            result.extend(self.parse_file(path, label=label))
        return result

    def _convert(self, message: EmailMessage, label: str | None) -> ParsedEmail:
        self._counter += 1
        email_key = f"{self._counter}_{int(datetime.now().timestamp() * 1000)}"

        subject = str(message.get("Subject") or "").strip() or NO_SUBJECT
        sender = self._sender(message)
        date = self._date(message)
        body = self._extract_body(message)

        attachments = []
        if self._attachments is not None:
            for index, part in enumerate(message.iter_attachments()):
                name = part.get_filename() or f"attachment_{index + 1}"
                try:
                    payload = part.get_payload(decode=True) or b""
                    attachments.append(
                        self._attachments.save(
                            "eml", email_key, index, name, payload, part.get_content_type()
                        )
                    )
                except OSError as e:
                    logger.error(f"Failed to save attachment {name}: {e}")

        return ParsedEmail(
            subject=subject,
            sender=sender,
            date=date,
            body=body,
            importance="normal",
            label=label,
            attachments=attachments,
        )

    def _sender(self, message: EmailMessage) -> str:
        header = message.get("From")
        if header is None:
            return UNKNOWN_SENDER
        text = str(header).strip()
        if text:
            return text
        addresses = getattr(header, "addresses", ())
        if addresses and addresses[0].addr_spec:
            return addresses[0].addr_spec
        return UNKNOWN_SENDER

    def _date(self, message: EmailMessage) -> str:
        raw = message.get("Date")
        parsed = None
        if raw is not None:
            parsed = getattr(raw, "datetime", None)
            if parsed is None:
                try:
                    parsed = parsedate_to_datetime(str(raw))
                except (TypeError, ValueError):
                    logger.debug(f"Could not parse date: {raw}")
        return (parsed or datetime.now()).strftime(DATE_FORMAT)

    def _extract_body(self, message: EmailMessage) -> str:
        """Prefer the text/plain body; fall back to HTML converted to text."""
        part = message.get_body(preferencelist=("plain", "html"))
        if part is None:
            return ""

        try:
            content = part.get_content()
        except (LookupError, UnicodeDecodeError):
            content = decode_bytes(part.get_payload(decode=True), part.get_content_charset())

        if isinstance(content, bytes):
            content = decode_bytes(content, part.get_content_charset())

        if part.get_content_subtype() == "html" or looks_like_html(content):
            content = html_to_text(content)

        return normalize_body(content)
