"""
Relevance-ranked retrieval over the in-memory document collection.

Pure function of (question, documents, memory items): no hidden state,
deterministic and order-stable for identical inputs.
"""

import time
from datetime import datetime

from copyvara.core.text import tokenize
from copyvara.models.document import Document
from copyvara.models.memory import MemoryItem
from copyvara.models.retrieval import RankedDocument
from copyvara.services.memory_index import group_by_document
from copyvara.services.scoring import score_document
from copyvara.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_LIMIT = 8


def retrieve(
    question: str,
    documents: list[Document],
    memory_items: list[MemoryItem],
    limit: int = DEFAULT_LIMIT,
    now: datetime | None = None,
) -> list[RankedDocument]:
    """
    Rank documents for a question and keep the top `limit`.

    Sorting is stable: ties keep input order. Zero lexical overlap never
    empties the result; the recency term still orders the documents.
    Memory items whose document is not in `documents` are ignored.

    Args:
        question: Natural-language question
        documents: Candidate documents
        memory_items: Derived memory items (any document)
        limit: Maximum number of results (non-positive gives an empty list)
        now: Reference time for recency

    Returns:
        Ranked documents, highest total first
    """
    if not documents:
        return []

    start = time.time()
    query_tokens = tokenize(question)
    memory_by_document = group_by_document(memory_items)

    scored = [
        RankedDocument(
            document=document,
            score=score_document(
                query_tokens, document, memory_by_document.get(document.id, []), now=now
            ),
        )
        for document in documents
    ]

    # sorted() is stable; reverse=True keeps equal totals in input order
    ranked = sorted(scored, key=lambda r: r.score.total, reverse=True)[: max(0, limit)]

    logger.debug(
        f"Retrieval: {len(documents)} documents, {len(query_tokens)} query tokens, "
        f"top={ranked[0].score.total if ranked else 0.0:.3f}, {(time.time() - start) * 1000:.1f}ms"
    )

    return ranked
