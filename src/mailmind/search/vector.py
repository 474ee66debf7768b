"""Cosine similarity and email chunking for vector retrieval."""

import re
from typing import Sequence

import numpy as np

DEFAULT_CHUNK_SIZE = 500


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity of two vectors.

    Returns 0.0 when the vectors differ in length or either has zero norm.
    """
    if len(a) != len(b):
        return 0.0

    va = np.asarray(a, dtype=float)
    vb = np.asarray(b, dtype=float)
    norm_a = float(np.linalg.norm(va))
    norm_b = float(np.linalg.norm(vb))
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return float(np.dot(va, vb) / (norm_a * norm_b))


def chunk_header(subject: str, sender: str, date: str) -> str:
    return f"Subject: {subject}\nSender: {sender}\nDate: {date}"


def split_into_chunks(
    subject: str,
    sender: str,
    date: str,
    body: str,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> list[str]:
    """Pack the body into header-prefixed chunks of at most ``chunk_size`` chars.

    Every chunk starts with the subject/sender/date header so it can be
    retrieved on its own. A chunk is only closed once it carries more than
    ten characters of body text; a single long word can therefore push a
    chunk past ``chunk_size``.

    Args:
        subject: Email subject.
        sender: Email sender.
        date: Email date.
        body: Email body.
        chunk_size: Target chunk length in characters.

    Returns:
        Chunk texts (possibly empty for an empty body).
    """
    header = chunk_header(subject, sender, date)
    prefix = header + "\n\n"
    min_len = len(header) + 10

    clean_body = re.sub(r"\s+", " ", body or "").strip()
    words = clean_body.split(" ")

    chunks = []
    current = prefix
    for word in words:
        if len(current + " " + word) > chunk_size and len(current) > min_len:
            chunks.append(current)
            current = prefix + word
        else:
            current += ("" if current.endswith("\n\n") else " ") + word

    if len(current) > min_len:
        chunks.append(current)

    return chunks


def fallback_chunk(
    subject: str,
    sender: str,
    date: str,
    body: str,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> str:
    """Single chunk used when no regular chunk could be embedded."""
    clean_body = re.sub(r"\s+", " ", body or "").strip()
    return chunk_header(subject, sender, date) + "\n\n" + clean_body[:chunk_size]
