"""Calendar event extraction with the LLM."""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Optional

from ..exceptions import LLMUnavailableError
from .llm import LLMClient
from .prompts import EVENT_SYSTEM_PROMPT, build_event_prompt

logger = logging.getLogger(__name__)

_JSON_ARRAY = re.compile(r"\[[\s\S]*\]")


@dataclass
class ExtractedEvent:
    """An event found in an email."""

    title: str
    start_date: str
    end_date: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None
    ship_number: Optional[str] = None


def _optional_str(item: dict[str, Any], key: str) -> Optional[str]:
    value = item.get(key)
    if value is None or value == "":
        return None
    return str(value)


def parse_events(response_text: str) -> list[ExtractedEvent]:
    """Parse the first JSON array in the reply into events.

    Items that are not objects, or that lack a title or start date, are
    dropped. Anything unparseable yields an empty list.
    """
    match = _JSON_ARRAY.search(response_text or "")
    if not match:
        return []

    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse event response: {e}")
        return []

    if not isinstance(data, list):
        return []

    events = []
    for item in data:
        if not isinstance(item, dict):
            continue
        title = _optional_str(item, "title")
        start_date = _optional_str(item, "startDate")
        if not title or not start_date:
            logger.debug(f"Dropping event without title or start date: {item}")
            continue
        events.append(
            ExtractedEvent(
                title=title,
                start_date=start_date,
                end_date=_optional_str(item, "endDate"),
                location=_optional_str(item, "location"),
                description=_optional_str(item, "description"),
                ship_number=_optional_str(item, "shipNumber"),
            )
        )
    return events


class EventExtractor:
    """Extract calendar events from email text."""

    def __init__(self, llm: LLMClient):
        self._llm = llm

    def extract(self, subject: str, body: str, email_date: str) -> list[ExtractedEvent]:
        """Extract events; LLM failures yield an empty list.

        Args:
            subject: Email subject.
            body: Email body.
            email_date: Email date, used to resolve relative dates.

        Returns:
            Extracted events.
        """
        messages = [
            {"role": "system", "content": EVENT_SYSTEM_PROMPT.format(email_date=email_date)},
            {"role": "user", "content": build_event_prompt(subject, body or "")},
        ]
        try:
            response = self._llm.chat(messages)
        except LLMUnavailableError as e:
            logger.error(f"Event extraction error: {e.details.get('reason')}")
            return []

        return parse_events(response)
