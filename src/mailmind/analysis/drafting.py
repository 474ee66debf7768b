"""Reply drafting."""

from ..storage.models import Email
from .llm import LLMClient
from .prompts import DRAFT_SYSTEM_PROMPT, DRAFT_USER_TEMPLATE


class ReplyDrafter:
    """Draft a professional reply to an email."""

    def __init__(self, llm: LLMClient):
        self._llm = llm

    def draft(self, email: Email) -> str:
        """Generate a reply draft.

        Raises:
            LLMUnavailableError: If the LLM cannot be reached.
        """
        prompt = DRAFT_USER_TEMPLATE.format(
            subject=email.subject,
            sender=email.sender or "unknown",
            date=email.date or "unknown",
            body=email.body,
        )
        return self._llm.chat([
            {"role": "system", "content": DRAFT_SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ])
