"""
Relevance scoring for the ask flow.

A document is scored against a question on three axes, each in [0, 1]:
- lexical: query tokens found in the title, summary and memory items
- tag overlap: query tokens found in the topic tags
- recency: linear decay over 30 days, floored at 0.1
"""

from datetime import datetime

from copyvara.core.text import tokenize
from copyvara.models.document import Document
from copyvara.models.memory import MemoryItem
from copyvara.models.retrieval import RetrievalScore
from copyvara.utils.timeutils import parse_timestamp, utc_now

LEXICAL_WEIGHT = 0.55
TAG_WEIGHT = 0.25
RECENCY_WEIGHT = 0.20

# Memory items per document folded into the lexical text
MEMORY_ITEMS_PER_DOCUMENT = 8

RECENCY_WINDOW_DAYS = 30
RECENCY_FLOOR = 0.1
RECENCY_UNKNOWN = 0.4

SECONDS_PER_DAY = 60 * 60 * 24


def overlap_ratio(query_tokens: list[str], target_text: str) -> float:
    """
    Fraction of query tokens present in the target text.

    Duplicate query tokens count individually. An empty query scores 0.

    Args:
        query_tokens: Tokens of the question
        target_text: Text to match against (tokenized here)

    Returns:
        Ratio in [0, 1]
    """
    if not query_tokens:
        return 0.0
    target_tokens = set(tokenize(target_text))
    overlap = sum(1 for token in query_tokens if token in target_tokens)
    return overlap / len(query_tokens)


def recency_score(created_at: datetime | str | None, now: datetime | None = None) -> float:
    """
    Score how recent a document is.

    Missing timestamp -> 0.4. Unparseable or future timestamp -> 1.
    Otherwise 1 at age 0, decaying linearly to 0.1 at 30 days and beyond.

    Args:
        created_at: Creation timestamp (datetime or ISO string)
        now: Reference time (defaults to current UTC time)

    Returns:
        Score in [0.1, 1]
    """
    if created_at is None or created_at == "":
        return RECENCY_UNKNOWN

    timestamp = parse_timestamp(created_at)
    if timestamp is None:
        return 1.0

    now = now or utc_now()
    age_seconds = (parse_timestamp(now) - timestamp).total_seconds()
    if age_seconds <= 0:
        return 1.0

    age_days = age_seconds / SECONDS_PER_DAY
    return max(RECENCY_FLOOR, 1 - min(age_days, RECENCY_WINDOW_DAYS) / RECENCY_WINDOW_DAYS)


def enriched_text(document: Document, memory_items: list[MemoryItem]) -> str:
    """
    Text a document is lexically scored against.

    Title, summary and the title/content of its first eight memory items.
    """
    memory_text = " ".join(
        f"{item.title} {item.content}" for item in memory_items[:MEMORY_ITEMS_PER_DOCUMENT]
    )
    return f"{document.title} {document.summary_text or ''} {memory_text}"


def score_document(
    query_tokens: list[str],
    document: Document,
    memory_items: list[MemoryItem],
    now: datetime | None = None,
) -> RetrievalScore:
    """
    Score one document for an already tokenized question.

    Args:
        query_tokens: Tokens of the question
        document: Document to score
        memory_items: Memory items owned by the document
        now: Reference time for recency

    Returns:
        RetrievalScore with sub-scores and weighted total
    """
    lexical = overlap_ratio(query_tokens, enriched_text(document, memory_items))
    tag_overlap = overlap_ratio(query_tokens, " ".join(document.topic_tags))
    recency = recency_score(document.created_at, now=now)
    total = lexical * LEXICAL_WEIGHT + tag_overlap * TAG_WEIGHT + recency * RECENCY_WEIGHT

    return RetrievalScore(
        lexical=lexical,
        tag_overlap=tag_overlap,
        recency=recency,
        total=min(total, 1.0),
    )


def score_question(
    question: str,
    document: Document,
    memory_items: list[MemoryItem],
    now: datetime | None = None,
) -> RetrievalScore:
    """Score one document for a raw question string."""
    return score_document(tokenize(question), document, memory_items, now=now)
