"""Okapi BM25 ranking over a small in-memory document set."""

import math
from collections import Counter

from .keyword import tokenize

K1 = 1.2
B = 0.75


def bm25_rank(
    docs: list[tuple[int, str]],
    query_tokens: list[str],
    k1: float = K1,
    b: float = B,
) -> list[tuple[int, float]]:
    """Score every document against the query.

    Args:
        docs: (document id, text) pairs.
        query_tokens: Query tokens; matched case-insensitively.
        k1: Term frequency saturation.
        b: Length normalization.

    Returns:
        (document id, score) pairs in input order.
    """
    n_docs = len(docs)
    doc_tokens = [tokenize(text.lower()) for _, text in docs]

    df: Counter[str] = Counter()
    for tokens in doc_tokens:
        df.update(set(tokens))

    avgdl = sum(len(t) for t in doc_tokens) / max(1, n_docs)
    query = [q.lower() for q in query_tokens]

    scores = []
    for (doc_id, _), tokens in zip(docs, doc_tokens):
        dl = len(tokens)
        tf = Counter(tokens)

        score = 0.0
        for q in query:
            f = tf.get(q, 0)
            if f == 0:
                continue
            n = df.get(q, 0)
            idf = math.log(1 + (n_docs - n + 0.5) / (n + 0.5))
            denom = f + k1 * (1 - b + b * (dl / max(1e-6, avgdl)))
            score += idf * (f * (k1 + 1)) / denom

        scores.append((doc_id, score))

    return scores
