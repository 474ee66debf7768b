"""JSON email export parser."""

import json
import logging
from typing import Any

from .base import ParsedEmail

logger = logging.getLogger(__name__)

SUBJECT_KEYS = ("subject", "Subject")
SENDER_KEYS = ("sender", "from", "From")
DATE_KEYS = ("date", "Date", "sent_date")
BODY_KEYS = ("body", "content", "text", "Body")


def _first(record: dict[str, Any], keys: tuple[str, ...]) -> str:
    for key in keys:
        value = record.get(key)
        if value:
            return str(value)
    return ""


def parse_json_emails(content: str | bytes) -> list[ParsedEmail]:
    """Parse a JSON export into emails.

    Accepts either a top-level array of email objects or an object with an
    ``emails`` array. Field names are matched against a few common aliases.

    Args:
        content: JSON document.

    Returns:
        Parsed emails; empty when the document is not valid JSON.
    """
    if isinstance(content, bytes):
        content = content.decode("utf-8", errors="replace")

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        logger.warning(f"Invalid JSON upload: {e}")
        return []

    if isinstance(data, list):
        records = data
    elif isinstance(data, dict):
        records = data.get("emails") or []
    else:
        records = []

    emails = []
    for record in records:
        if not isinstance(record, dict):
            logger.debug(f"Skipping non-object JSON entry: {record!r}")
            continue
        emails.append(
            ParsedEmail(
                subject=_first(record, SUBJECT_KEYS),
                sender=_first(record, SENDER_KEYS),
                date=_first(record, DATE_KEYS),
                body=_first(record, BODY_KEYS),
                importance=str(record["importance"]) if record.get("importance") else None,
                label=str(record["label"]) if record.get("label") else None,
            )
        )

    return emails
