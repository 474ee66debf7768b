"""Keyword, BM25 and vector retrieval over stored emails."""

from .bm25 import bm25_rank
from .keyword import SearchFilters, SearchResult, score_text, tokenize
from .rag import ChunkHit, assemble_context, format_context
from .vector import cosine_similarity, split_into_chunks

__all__ = [
    "bm25_rank",
    "SearchFilters",
    "SearchResult",
    "score_text",
    "tokenize",
    "ChunkHit",
    "assemble_context",
    "format_context",
    "cosine_similarity",
    "split_into_chunks",
]
