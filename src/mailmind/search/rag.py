"""Retrieval-augmented context assembly for the chat assistant."""

from dataclasses import dataclass

from .keyword import SearchResult

VECTOR_TOP_K = 5
MIN_SIMILARITY = 0.3
KEYWORD_TOP_K = 10
MIN_KEYWORD_SCORE = 1.0
MAX_KEYWORD_ITEMS = 5
MAX_CONTEXT_ITEMS = 8
BODY_PREVIEW_CHARS = 400
CONTEXT_SEPARATOR = "\n\n---\n\n"


@dataclass
class ChunkHit:
    """A stored chunk and its similarity to the query."""

    content: str
    similarity: float
    email_id: int | None = None


def select_vector_hits(hits: list[ChunkHit]) -> list[ChunkHit]:
    """Keep hits above the similarity floor."""
    return [h for h in hits if h.similarity > MIN_SIMILARITY]


def select_keyword_hits(results: list[SearchResult]) -> list[SearchResult]:
    """Keep the best keyword hits scoring at least one match."""
    kept = [r for r in results if r.score >= MIN_KEYWORD_SCORE]
    kept.sort(key=lambda r: r.score, reverse=True)
    return kept[:MAX_KEYWORD_ITEMS]


def assemble_context(
    vector_hits: list[ChunkHit],
    keyword_hits: list[SearchResult],
) -> list[str]:
    """Merge vector and keyword hits into deduplicated context items.

    Vector hits come first and are deduplicated on the first 100 characters
    of their content. Keyword hits follow, deduplicated on subject+sender,
    while fewer than eight items have been collected.

    Args:
        vector_hits: Chunk hits, already filtered and ordered.
        keyword_hits: Keyword hits, already filtered and ordered.

    Returns:
        Formatted context items.
    """
    seen: set[str] = set()
    items: list[str] = []

    for hit in vector_hits:
        key = hit.content[:100]
        if key in seen:
            continue
        seen.add(key)
        items.append(f"[Vector match - similarity {hit.similarity * 100:.0f}%]\n{hit.content}")

    for hit in keyword_hits:
        key = hit.subject + (hit.sender or "")
        if key in seen or len(items) >= MAX_CONTEXT_ITEMS:
            continue
        seen.add(key)
        items.append(
            f"[Keyword match - score {hit.score:.1f}]\n"
            f"Subject: {hit.subject}\n"
            f"Sender: {hit.sender or ''}\n"
            f"Date: {hit.date or ''}\n"
            f"Body: {hit.body[:BODY_PREVIEW_CHARS]}..."
        )

    return items


def format_context(items: list[str]) -> str:
    return CONTEXT_SEPARATOR.join(items)
