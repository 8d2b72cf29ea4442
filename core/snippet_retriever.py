# core/snippet_retriever.py
import math
import re
from typing import Iterable, List, Sequence, Set
from core.entities import RagHit
from model.catalog import PageText

TOKEN_RX = re.compile(r"[A-Za-z0-9]+")
MIN_TOKEN_LEN = 3
ELLIPSIS = "…"


def tokenize(text: str) -> List[str]:
    """Lower-cased alphanumeric runs of at least MIN_TOKEN_LEN characters."""
    return [
        t.lower() for t in TOKEN_RX.findall(text or "") if len(t) >= MIN_TOKEN_LEN
    ]


def _first_match_index(text: str, tokens: Iterable[str]) -> int:
    low = text.lower()
    best = -1
    for tok in tokens:
        idx = low.find(tok)
        if idx >= 0 and (best < 0 or idx < best):
            best = idx
    return best


def make_snippet(text: str, tokens: Set[str], max_chars: int) -> str:
    """
    Window of `max_chars` around the earliest token hit, a third of it before
    the hit. Ellipses mark clipped ends.
    """
    idx = max(0, _first_match_index(text, tokens))
    start = max(0, idx - max_chars // 3)
    length = min(max_chars, len(text) - start)
    snippet = text[start : start + length].strip()
    if start > 0:
        snippet = f"{ELLIPSIS} {snippet}"
    if start + length < len(text):
        snippet = f"{snippet} {ELLIPSIS}"
    return snippet


def score_page(page_tokens: Sequence[str], query: Set[str]) -> float:
    """overlap / sqrt(len): dense matches win, long pages are diluted."""
    if not page_tokens:
        return 0.0
    overlap = sum(1 for t in page_tokens if t in query)
    return overlap / math.sqrt(len(page_tokens))


def find_top_relevant_snippets(
    pages: Sequence[PageText],
    question: str,
    top_k: int = 5,
    snippet_max_chars: int = 900,
) -> List[RagHit]:
    """
    Bag-of-words page ranking for a free-text question.
    Pages sharing no query token are never returned.
    """
    query = set(tokenize(question))
    if not query or not pages:
        return []

    hits: List[RagHit] = []
    for p in pages:
        text = p.text or ""
        if not text:
            continue
        score = score_page(tokenize(text), query)
        if score <= 0:
            continue
        hits.append(
            RagHit(
                page=p.page,
                score=score,
                snippet=make_snippet(text, query, snippet_max_chars),
            )
        )

    hits.sort(key=lambda h: h.score, reverse=True)
    return hits[: max(0, top_k)]
