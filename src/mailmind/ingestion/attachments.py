"""Writing attachments to disk and extracting PDF text."""

import io
import logging
import time
from pathlib import Path

from pypdf import PdfReader
from pypdf.errors import PyPdfError

from .base import ParsedAttachment
from .text import safe_basename

logger = logging.getLogger(__name__)


def is_pdf(name: str, mime: str | None) -> bool:
    return "pdf" in (mime or "").lower() or name.lower().endswith(".pdf")


def extract_pdf_text(data: bytes) -> str | None:
    """Extract the text layer of a PDF.

    Args:
        data: PDF file content.

    Returns:
        Extracted text, or None if the PDF has no text or cannot be read.
    """
    try:
        reader = PdfReader(io.BytesIO(data))
        text = "\n".join(page.extract_text() or "" for page in reader.pages).strip()
    except (PyPdfError, ValueError, OSError) as e:
        logger.warning(f"PDF text extraction failed: {e}")
        return None
    return text or None


class AttachmentWriter:
    """Store attachments under ``<base_dir>/_<source>/<email key>/``."""

    def __init__(self, base_dir: Path | str):
        self._base_dir = Path(base_dir)

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def save(
        self,
        source: str,
        email_key: str,
        index: int,
        original_name: str,
        data: bytes,
        mime: str | None = None,
    ) -> ParsedAttachment:
        """Write one attachment and return its record.

        Args:
            source: Archive kind, used as the top-level folder ("pst", "eml").
            email_key: Unique key of the owning email within this import.
            index: Position of the attachment in the email.
            original_name: Name as found in the message.
            data: Attachment content.
            mime: Content type, when known.

        Returns:
            Attachment record with a path relative to the base directory.
        """
        safe_name = safe_basename(original_name)
        stored_name = f"{index:03d}-{int(time.time() * 1000)}-{safe_name}"
        rel_dir = Path(f"_{source}") / email_key
        abs_dir = self._base_dir / rel_dir
        abs_dir.mkdir(parents=True, exist_ok=True)

        (abs_dir / stored_name).write_bytes(data)

        extracted_text = None
        if is_pdf(safe_name, mime):
            extracted_text = extract_pdf_text(data)
            if extracted_text:
                logger.info(f"Extracted {len(extracted_text)} chars from {original_name}")

        return ParsedAttachment(
            original_name=original_name or safe_name,
            stored_name=stored_name,
            rel_path=(rel_dir / stored_name).as_posix(),
            size=len(data),
            mime=mime,
            extracted_text=extracted_text,
        )
