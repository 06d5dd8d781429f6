"""Heuristic keyword ranking used when embeddings are unavailable."""

from __future__ import annotations

from typing import Dict, Iterable, List, Sequence, Tuple

from ..models import VectorDocument

FULL_MATCH_WEIGHT = 10
CATEGORY_WEIGHT = 8
LEVEL_WEIGHT = 5
TAG_WEIGHT = 6
WORD_WEIGHT = 2
SYNONYM_WEIGHT = 3
NORMALIZER = 20.0
MIN_SCORE = 0.1

SYNONYMS: Dict[str, Tuple[str, ...]] = {
    "payment": ("stripe", "paypal", "gateway", "transaction", "checkout", "billing"),
    "error": ("exception", "failure", "problem", "issue", "bug"),
    "timeout": ("slow", "delay", "hang", "freeze"),
    "database": ("db", "sql", "mysql", "postgres", "connection", "query"),
    "connection": ("connect", "link", "network", "socket"),
    "security": ("auth", "authentication", "login", "breach", "attack"),
    "attack": ("hack", "intrusion", "malicious", "threat"),
    "performance": ("slow", "fast", "speed", "optimization", "memory", "cpu"),
    "memory": ("ram", "heap", "allocation", "leak"),
}


def normalize_tags(value: object) -> List[str]:
    """Coerce a metadata ``tags`` value into a list of strings."""

    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple, set)):
        return [str(tag) for tag in value]
    return []


def synonym_hits(query: str, content: str) -> int:
    hits = 0
    for term, synonyms in SYNONYMS.items():
        if term in query:
            hits += sum(1 for synonym in synonyms if synonym in content)
    return hits


def score_document(query: str, document: VectorDocument) -> int:
    """Raw heuristic score of ``document`` for an already lower-cased query."""

    metadata = document.metadata
    content = document.content.lower()
    category = str(metadata.get("category") or "").lower()
    level = str(metadata.get("level") or "").lower()
    tags = [tag.lower() for tag in normalize_tags(metadata.get("tags"))]
    words = [word for word in query.split() if len(word) > 2]

    score = 0
    if query in content:
        score += FULL_MATCH_WEIGHT
    if category and (category in query or query in category):
        score += CATEGORY_WEIGHT
    if level and level in query:
        score += LEVEL_WEIGHT
    for tag in tags:
        if tag and (tag in query or query in tag):
            score += TAG_WEIGHT
    score += WORD_WEIGHT * sum(1 for word in words if word in content)
    score += SYNONYM_WEIGHT * synonym_hits(query, content)
    return score


def keyword_search(
    query: str,
    candidates: Iterable[VectorDocument],
    *,
    max_results: int,
    min_score: float = MIN_SCORE,
) -> List[VectorDocument]:
    """Rank ``candidates`` by the heuristic and return the best ``max_results``.

    Returned documents carry the normalized heuristic score.
    """

    query = query.strip().lower()
    scored: List[VectorDocument] = []
    for document in candidates:
        raw = score_document(query, document)
        if raw > 0:
            scored.append(document.with_score(raw / NORMALIZER))

    # sorted() is stable, so equal scores keep store order.
    ranked: Sequence[VectorDocument] = sorted(scored, key=lambda doc: doc.score or 0.0, reverse=True)
    return [doc for doc in ranked if (doc.score or 0.0) >= min_score][:max_results]
