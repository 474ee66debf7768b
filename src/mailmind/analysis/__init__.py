"""LLM-assisted classification, event extraction, drafting and embeddings."""

from .classifier import ClassificationResult, EmailClassifier
from .drafting import ReplyDrafter
from .embeddings import ChunkEmbedder
from .events import EventExtractor, ExtractedEvent
from .llm import ClaudeClient, LLMClient, OllamaClient, get_llm_client

__all__ = [
    "ClassificationResult",
    "EmailClassifier",
    "ReplyDrafter",
    "ChunkEmbedder",
    "EventExtractor",
    "ExtractedEvent",
    "ClaudeClient",
    "LLMClient",
    "OllamaClient",
    "get_llm_client",
]
