"""
ID generation utilities for Copyvara.

Provides consistent ID generation for all entity types:
- Placeholder documents: temp-xxx (replaced by the persisted id)
- Documents: doc_xxx
- Memory items: mem-<document_id>-<category>[-N] (deterministic)
- QA sessions: qa-xxx
- Link candidates: lc-xxx, mirrored by edge e-lc-xxx
"""

from uuid import uuid4


def generate_temp_document_id() -> str:
    """
    Generate a placeholder ID for a document still being analyzed.

    Returns:
        ID in format "temp-xxx" where xxx is 12 hex characters
    """
    return f"temp-{uuid4().hex[:12]}"


def generate_document_id() -> str:
    """
    Generate unique Document ID.

    Returns:
        ID in format "doc_xxx" where xxx is 12 hex characters
    """
    return f"doc_{uuid4().hex[:12]}"


def generate_memory_item_id(document_id: str, category: str, index: int | None = None) -> str:
    """
    Generate a memory item ID derived from its owning document.

    The same (document, category, index) always yields the same ID, so a
    rebuild of the memory index produces identical IDs.

    Args:
        document_id: Owning document ID
        category: Memory category value (summary, fact, action, segment)
        index: Zero-based position within the category (None for summary)

    Returns:
        ID in format "mem-<document_id>-<category>" or "mem-<document_id>-<category>-N"
    """
    if index is None:
        return f"mem-{document_id}-{category}"
    return f"mem-{document_id}-{category}-{index}"


def generate_session_id() -> str:
    """
    Generate unique QA session ID.

    Returns:
        ID in format "qa-xxx" where xxx is 12 hex characters
    """
    return f"qa-{uuid4().hex[:12]}"


def generate_candidate_id() -> str:
    """
    Generate unique link candidate ID.

    Returns:
        ID in format "lc-xxx" where xxx is 12 hex characters
    """
    return f"lc-{uuid4().hex[:12]}"


def candidate_edge_id(candidate_id: str) -> str:
    """
    ID of the edge that mirrors a link candidate.

    Returns:
        ID in format "e-<candidate_id>"
    """
    return f"e-{candidate_id}"
