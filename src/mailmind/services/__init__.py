"""Application services shared by the HTTP API and the CLI."""

from .chat import ChatReply, ChatService, SearchAnswer
from .processing import EmailProcessor, ImportSummary, ProcessingStats

__all__ = [
    "ChatReply",
    "ChatService",
    "SearchAnswer",
    "EmailProcessor",
    "ImportSummary",
    "ProcessingStats",
]
