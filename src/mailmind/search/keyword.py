"""Keyword tokenization and occurrence scoring."""

from dataclasses import dataclass, field
from typing import Literal, Optional

NO_SUBJECT = "(no subject)"


@dataclass
class SearchFilters:
    """Optional field filters applied on top of the free-text query."""

    sender: Optional[str] = None
    subject: Optional[str] = None
    body: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    operator: Literal["and", "or"] = "and"

    def values(self) -> list[str]:
        """Non-empty filter values, in field order."""
        raw = [self.sender, self.subject, self.body, self.start_date, self.end_date]
        return [v.strip() for v in raw if v and v.strip()]

    def is_empty(self) -> bool:
        return not self.values()


@dataclass
class SearchResult:
    """A scored email hit."""

    mail_id: str
    subject: str
    score: float
    sender: Optional[str]
    date: Optional[str]
    body: str
    attachments: list[str] = field(default_factory=list)


def tokenize(query: str | None) -> list[str]:
    """Split a query on whitespace, dropping empty tokens."""
    return (query or "").strip().split()


def score_text(text: str | None, tokens: list[str]) -> int:
    """Count case-insensitive occurrences of every token in the text.

    Args:
        text: Text to score.
        tokens: Query tokens.

    Returns:
        Sum of non-overlapping occurrences of each token.
    """
    if not text or not tokens:
        return 0

    lower = text.lower()
    return sum(lower.count(token.lower()) for token in tokens)
