# search.py
"""
Keyword search over stored chunks.

A chunk matches when it contains any query term (lower-cased, longer than two
characters). Score is the fraction of terms found in the chunk.
"""
from dataclasses import dataclass
from typing import List


@dataclass
class SearchHit:
    text: str
    filename: str
    document_id: str
    chunk_index: int
    score: float


def query_terms(query: str) -> List[str]:
    return [w for w in (query or "").lower().split() if len(w) > 2]


def keyword_search(chunks: List[dict], query: str, limit: int = 5) -> List[SearchHit]:
    terms = query_terms(query)
    if not terms:
        return []

    hits = []
    for c in chunks:
        body = c["text"].lower()
        found = sum(1 for t in terms if t in body)
        if found:
            hits.append(SearchHit(
                text=c["text"],
                filename=c["filename"],
                document_id=c["document_id"],
                chunk_index=c["chunk_index"],
                score=found / len(terms),
            ))
    # sorted() is stable: equal scores keep storage order
    hits = sorted(hits, key=lambda h: h.score, reverse=True)
    return hits[:limit]
