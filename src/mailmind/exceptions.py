"""
Exceptions raised by MailMind services.

Each exception carries an HTTP status code so the API layer can map it to
a response without knowing about the individual error types.
"""

from typing import Optional


class MailMindError(Exception):
    """Base exception for all MailMind errors."""

    status_code = 500

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class InvalidRequestError(MailMindError):
    """Raised when a request is missing data or is malformed."""

    status_code = 400


class EmailNotFoundError(MailMindError):
    """Raised when an email id does not exist."""

    status_code = 404

    def __init__(self, email_id: int):
        super().__init__(f"Email not found: {email_id}", details={"email_id": email_id})


class ConversationNotFoundError(MailMindError):
    """Raised when a conversation id does not exist."""

    status_code = 404

    def __init__(self, conversation_id: int):
        super().__init__(
            f"Conversation not found: {conversation_id}",
            details={"conversation_id": conversation_id},
        )


class UnsupportedFormatError(MailMindError):
    """Raised when an uploaded file has an extension we cannot import."""

    status_code = 400


class ArchiveParseError(MailMindError):
    """Raised when an archive could not be parsed into any email."""

    status_code = 400

    def __init__(self, message: str, errors: Optional[list[str]] = None):
        super().__init__(message, details={"errors": errors or []})


class LLMUnavailableError(MailMindError):
    """Raised when the LLM server cannot be reached or returns an error."""

    status_code = 503

    def __init__(self, reason: Optional[str] = None):
        message = "Cannot reach the AI server. Check that Ollama is running."
        super().__init__(message, details={"reason": reason})


class AttachmentNotFoundError(MailMindError):
    """Raised when a stored attachment file does not exist."""

    status_code = 404
