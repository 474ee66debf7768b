"""Structures shared by the archive parsers."""

from dataclasses import dataclass, field


@dataclass
class ParsedAttachment:
    """Attachment written to the attachments directory."""

    original_name: str
    stored_name: str
    rel_path: str
    size: int
    mime: str | None = None
    extracted_text: str | None = None


@dataclass
class ParsedEmail:
    """Structured representation of a parsed email."""

    subject: str
    sender: str
    date: str
    body: str
    importance: str | None = None
    label: str | None = None
    attachments: list[ParsedAttachment] = field(default_factory=list)


@dataclass
class ParseResult:
    """Outcome of parsing one archive."""

    emails: list[ParsedEmail] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def total_count(self) -> int:
        return len(self.emails)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    def extend(self, other: "ParseResult") -> None:
        self.emails.extend(other.emails)
        self.errors.extend(other.errors)
