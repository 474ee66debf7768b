"""Pick a parser for an uploaded archive by its extension."""

import logging
from pathlib import Path

from ..exceptions import ArchiveParseError, UnsupportedFormatError
from .attachments import AttachmentWriter
from .base import ParseResult
from .eml_parser import EmlParser
from .json_parser import parse_json_emails
from .pst_parser import PstParser

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = ("json", "pst", "eml", "zip")


def file_extension(filename: str) -> str:
    return Path(filename).suffix.lower().lstrip(".")


def load_archive(
    filename: str,
    content: bytes,
    attachments_dir: Path | str | None = None,
) -> ParseResult:
    """Parse an uploaded archive.

    Args:
        filename: Original file name; its extension selects the parser.
        content: File content.
        attachments_dir: Where to store attachments, or None to skip them.

    Returns:
        Parsed emails with any per-message errors.

    Raises:
        UnsupportedFormatError: For MBOX and unknown extensions.
        ArchiveParseError: When a PST yields errors and no email.
    """
    ext = file_extension(filename)
    writer = AttachmentWriter(attachments_dir) if attachments_dir else None

    if ext == "json":
        return ParseResult(emails=parse_json_emails(content))

    if ext == "pst":
        result = PstParser(writer).parse_bytes(content, filename)
        if result.errors and not result.emails:
            raise ArchiveParseError(
                f"PST parse error: {', '.join(result.errors)}", errors=result.errors
            )
        return result

    if ext == "eml":
        return EmlParser(writer).parse_bytes(content, filename)

    if ext == "zip":
        return EmlParser(writer).parse_zip(content, filename)

    if ext == "mbox":
        raise UnsupportedFormatError(
            "MBOX files are not supported yet. Please use PST, EML or JSON."
        )

    raise UnsupportedFormatError(
        f"Unsupported file format: .{ext or '?'}. Use one of: "
        + ", ".join(f".{e}" for e in SUPPORTED_EXTENSIONS)
    )
