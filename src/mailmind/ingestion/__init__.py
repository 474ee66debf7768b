"""Email ingestion from PST, EML, ZIP and JSON archives."""

from .base import ParsedAttachment, ParsedEmail, ParseResult
from .eml_parser import EmlParser
from .json_parser import parse_json_emails
from .loader import load_archive
from .pst_parser import PstParser
from .samples import SAMPLE_FILENAME, generate_sample_emails

__all__ = [
    "ParsedAttachment",
    "ParsedEmail",
    "ParseResult",
    "EmlParser",
    "parse_json_emails",
    "load_archive",
    "PstParser",
    "SAMPLE_FILENAME",
    "generate_sample_emails",
]
