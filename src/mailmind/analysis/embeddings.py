"""Chunk embedding for retrieval."""

import logging

from ..search.vector import DEFAULT_CHUNK_SIZE, fallback_chunk, split_into_chunks
from .llm import LLMClient

logger = logging.getLogger(__name__)


class ChunkEmbedder:
    """Split emails into chunks and embed each one."""

    def __init__(self, llm: LLMClient, chunk_size: int = DEFAULT_CHUNK_SIZE):
        """Initialize the embedder.

        Args:
            llm: Client providing ``embed``.
            chunk_size: Maximum characters per chunk.
        """
        self._llm = llm
        self._chunk_size = chunk_size

    def embed_email(
        self,
        subject: str,
        sender: str,
        date: str,
        body: str,
    ) -> list[tuple[str, list[float]]]:
        """Chunk and embed an email.

        Chunks whose embedding fails are skipped. When no chunk could be
        embedded, a single chunk with the start of the body is tried.

        Returns:
            (content, embedding) pairs in chunk order.
        """
        embedded = []
        for chunk in split_into_chunks(subject, sender, date, body, self._chunk_size):
            vector = self._llm.embed(chunk)
            if vector:
                embedded.append((chunk, vector))
            else:
                logger.warning(f"Skipping chunk that could not be embedded: {chunk[:60]!r}")

        if not embedded:
            chunk = fallback_chunk(subject, sender, date, body, self._chunk_size)
            vector = self._llm.embed(chunk)
            if vector:
                embedded.append((chunk, vector))

        return embedded
