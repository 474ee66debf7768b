"""Outlook PST parser using pypff, with a readpst fallback."""

import logging
import os
import shutil
import subprocess
import tempfile
import time
from datetime import datetime
from pathlib import Path
from typing import Any

from .attachments import AttachmentWriter
from .base import ParsedEmail, ParseResult
from .eml_parser import EmlParser
from .text import (
    decode_bytes,
    decode_text,
    extract_sender_from_body,
    extract_sender_from_headers,
    html_to_text,
    looks_like_html,
    normalize_body,
)

logger = logging.getLogger(__name__)

NO_SUBJECT = "(no subject)"
READPST_TIMEOUT = 300

# MAPI property tags
PR_IMPORTANCE = 0x0017
PR_SENT_REPRESENTING_NAME = 0x0042
PR_SENT_REPRESENTING_EMAIL_ADDRESS = 0x0065
PR_SENDER_EMAIL_ADDRESS = 0x0C1F
PR_SENDER_SMTP_ADDRESS = 0x5D01
PR_SENT_REPRESENTING_SMTP_ADDRESS = 0x5D02
PR_DISPLAY_NAME = 0x3001
PR_ATTACH_FILENAME = 0x3704
PR_ATTACH_LONG_FILENAME = 0x3707
PR_ATTACH_MIME_TAG = 0x370E


def importance_label(value: int | None) -> str:
    """Map the MAPI importance level to a label."""
    if value == 2:
        return "high"
    if value == 0:
        return "low"
    return "normal"


def describe_open_error(message: str) -> str:
    """Turn a PST open failure into a message for the user."""
    if "findBtreeItem" in message or "Unable to find" in message:
        return f"PST format error: the file could not be read as a Unicode PST ({message})"
    if "password" in message or "encrypted" in message:
        return "The PST file is password protected. Remove the password and try again."
    return f"Failed to open PST file: {message}"


def _decode(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return decode_bytes(value)
    return decode_text(str(value))


def _mapi_entry(item: Any, property_id: int) -> Any | None:
    """Find a record entry by MAPI property tag."""
    try:
        for set_index in range(item.number_of_record_sets):
            record_set = item.get_record_set(set_index)
            for entry_index in range(record_set.number_of_entries):
                entry = record_set.get_entry(entry_index)
                if entry.entry_type == property_id:
                    return entry
    except (AttributeError, OSError):
        return None
    return None


def _mapi_string(item: Any, property_id: int) -> str:
    entry = _mapi_entry(item, property_id)
    if entry is None:
        return ""
    try:
        return _decode(entry.get_data_as_string())
    except (OSError, ValueError):
        return _decode(entry.data)


def _mapi_integer(item: Any, property_id: int) -> int | None:
    entry = _mapi_entry(item, property_id)
    if entry is None:
        return None
    try:
        return entry.get_data_as_integer()
    except (OSError, ValueError):
        return None


def _format_date(value: datetime | None) -> str:
    if not value:
        return ""
    return value.isoformat()


class PstParser:
    """Parse PST archives into emails."""

    def __init__(self, attachments: AttachmentWriter | None = None):
        """Initialize the parser.

        Args:
            attachments: Writer for attachments. Attachments are skipped when None.
        """
        self._attachments = attachments

    def parse_bytes(self, data: bytes, filename: str = "upload.pst") -> ParseResult:
        """Parse an uploaded PST held in memory.

        The content is written to a temporary file, which is always removed.
        """
        fd, temp_path = tempfile.mkstemp(prefix="pst_", suffix=f"_{Path(filename).name}")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            return self.parse_file(temp_path)
        finally:
            Path(temp_path).unlink(missing_ok=True)

    def parse_file(self, path: Path | str) -> ParseResult:
        """Parse a PST file.

        Opens the file with pypff and walks every folder. If the file cannot
        be opened, the archive is converted with readpst instead; when that
        yields nothing either, the errors of both attempts are reported.

        Args:
            path: Path to the PST file.

        Returns:
            Parsed emails and collected errors.
        """
        result = ParseResult()

        try:
            pst, root = self._open(path)
        except Exception as e:
            logger.warning(f"pypff could not open {path}, retrying with readpst: {e}")
            fallback = self.parse_with_readpst(path)
            if fallback.emails:
                return fallback

            result.errors.append(describe_open_error(str(e)))
            result.errors.extend(fallback.errors)
            return result

        try:
            self._walk_folder(root, result)
        finally:
            pst.close()

        logger.info(f"Parsed {result.total_count} emails from {path}, {result.error_count} errors")
        return result

    def _open(self, path: Path | str) -> tuple[Any, Any]:
        import pypff

        pst = pypff.file()
        pst.open(str(path))
        try:
            root = pst.get_root_folder()
        except Exception:
            pst.close()
            raise
        return pst, root

    def _walk_folder(self, folder: Any, result: ParseResult) -> None:
        """Visit subfolders first, then the folder's own messages."""
        label = _decode(folder.name)
        try:
            for i in range(folder.number_of_sub_folders):
                self._walk_folder(folder.get_sub_folder(i), result)

            for i in range(folder.number_of_sub_messages):
                try:
                    message = folder.get_sub_message(i)
                    result.emails.append(self._convert(message, label or None, result))
                except Exception as e:
                    logger.warning(f"Failed to parse message {i} in {label}: {e}")
                    result.errors.append(f"Error parsing email: {e}")
        except Exception as e:
            result.errors.append(f"Error processing folder {label}: {e}")

    def _convert(self, message: Any, label: str | None, result: ParseResult) -> ParsedEmail:
        email_key = f"{result.total_count + 1}_{int(time.time() * 1000)}"
        attachments = self._extract_attachments(message, email_key, result.errors)

        return ParsedEmail(
            subject=_decode(message.subject) or NO_SUBJECT,
            sender=self._extract_sender(message),
            date=_format_date(message.delivery_time or message.client_submit_time),
            body=self._extract_body(message),
            importance=importance_label(_mapi_integer(message, PR_IMPORTANCE)),
            label=label,
            attachments=attachments,
        )

    def _extract_body(self, message: Any) -> str:
        """Plain body unless it is really HTML; otherwise the HTML body as text."""
        body_raw = _decode(message.plain_text_body)
        html_raw = _decode(message.html_body)

        if body_raw.strip():
            if not looks_like_html(body_raw):
                return normalize_body(body_raw.strip())
            converted = html_to_text(body_raw)
            if converted:
                return normalize_body(converted)

        if html_raw.strip():
            converted = html_to_text(html_raw)
            if converted:
                return normalize_body(converted)

        return normalize_body((body_raw or html_raw).strip())

    def _extract_sender(self, message: Any) -> str:
        """First non-empty of the sender fields, transport headers and body."""
        direct = (
            _mapi_string(message, PR_SENDER_EMAIL_ADDRESS)
            or _decode(message.sender_name)
            or _mapi_string(message, PR_SENT_REPRESENTING_EMAIL_ADDRESS)
            or _mapi_string(message, PR_SENT_REPRESENTING_NAME)
            or _mapi_string(message, PR_SENDER_SMTP_ADDRESS)
            or _mapi_string(message, PR_SENT_REPRESENTING_SMTP_ADDRESS)
        )
        if direct.strip():
            return direct.strip()

        from_headers = extract_sender_from_headers(_decode(message.transport_headers))
        if from_headers:
            return from_headers

        body_raw = _decode(message.plain_text_body)
        body_text = html_to_text(body_raw) if looks_like_html(body_raw) else body_raw
        from_body = extract_sender_from_body(body_text)
        if from_body:
            return from_body

        html_raw = _decode(message.html_body)
        return extract_sender_from_body(html_to_text(html_raw) if html_raw else "")

    def _extract_attachments(self, message: Any, email_key: str, errors: list[str]) -> list:
        if self._attachments is None:
            return []

        saved = []
        for i in range(message.number_of_attachments):
            try:
                attachment = message.get_attachment(i)
                name = (
                    _mapi_string(attachment, PR_ATTACH_LONG_FILENAME)
                    or _mapi_string(attachment, PR_ATTACH_FILENAME)
                    or _mapi_string(attachment, PR_DISPLAY_NAME)
                    or f"attachment_{i}"
                )
                mime = _mapi_string(attachment, PR_ATTACH_MIME_TAG) or None
                size = attachment.size or 0
                data = attachment.read_buffer(size) if size else b""
                saved.append(self._attachments.save("pst", email_key, i, name, data, mime))
            except Exception as e:
                errors.append(f"Error extracting attachment (emailKey={email_key}, index={i}): {e}")

        return saved

    def parse_with_readpst(self, path: Path | str) -> ParseResult:
        """Convert the archive with readpst and parse the resulting .eml files.

        Each message is labelled with the folder readpst wrote it to. The
        output directory is removed afterwards.
        """
        result = ParseResult()
        output_dir = tempfile.mkdtemp(prefix="readpst_")

        try:
            completed = subprocess.run(
                ["readpst", "-e", "-o", output_dir, str(path)],
                capture_output=True,
                text=True,
                timeout=READPST_TIMEOUT,
                check=False,
            )
            if completed.returncode != 0 and completed.stderr:
                logger.warning(f"readpst stderr: {completed.stderr.strip()}")

            result.extend(EmlParser(self._attachments).parse_directory(output_dir))
        except (OSError, subprocess.SubprocessError) as e:
            result.errors.append(f"readpst failed: {e}")
        finally:
            shutil.rmtree(output_dir, ignore_errors=True)

        return result
