"""
Document link graph.

Links new documents to earlier ones that share topic tags. Each suggestion
is a LinkCandidate mirrored by a candidate Edge with id `e-{candidate_id}`;
the operations below review suggestions and edit confirmed edges. All
functions are pure: they return new lists and never mutate their inputs.
"""

from copyvara.core.text import normalize
from copyvara.models.document import Document
from copyvara.models.graph import Edge, EdgeStatus, GraphNode, LinkCandidate
from copyvara.utils.exceptions import NotFoundError, ValidationError
from copyvara.utils.id_generator import candidate_edge_id, generate_candidate_id
from copyvara.utils.logger import get_logger

logger = get_logger(__name__)

SNIPPET_LENGTH = 120


def build_nodes(documents: list[Document]) -> list[GraphNode]:
    """One node per document, sized by its knowledge score."""
    return [
        GraphNode(
            id=document.id,
            title=document.title,
            status=document.status,
            val=document.knowledge_score,
            tags=list(document.topic_tags),
        )
        for document in documents
    ]


def _tag_set(document: Document) -> set[str]:
    return {tag for tag in (normalize(t) for t in document.topic_tags) if tag}


def suggest_links(
    document: Document,
    documents: list[Document],
    edges: list[Edge],
    max_candidates: int = 5,
    min_shared_tags: int = 1,
) -> list[LinkCandidate]:
    """
    Suggest links from a document to analyzed documents sharing its tags.

    Confidence is the Jaccard similarity of the normalized tag sets. Pairs
    already joined by an edge are skipped.

    Args:
        document: Newly added document
        documents: Documents to link against
        edges: Existing edges
        max_candidates: Maximum suggestions (0 disables)
        min_shared_tags: Shared tags required for a suggestion

    Returns:
        Candidates ordered by confidence descending
    """
    own_tags = _tag_set(document)
    if max_candidates <= 0 or not own_tags:
        return []

    scored: list[tuple[float, Document, list[str]]] = []
    for other in documents:
        if other.id == document.id or not other.is_done():
            continue
        if any(edge.connects(document.id, other.id) for edge in edges):
            continue

        other_tags = _tag_set(other)
        shared = own_tags & other_tags
        if len(shared) < min_shared_tags:
            continue

        confidence = len(shared) / len(own_tags | other_tags)
        scored.append((confidence, other, sorted(shared)))

    scored.sort(key=lambda item: item[0], reverse=True)

    candidates = [
        LinkCandidate(
            id=generate_candidate_id(),
            from_id=document.id,
            to_id=other.id,
            to_title=other.title,
            to_snippet=other.snippet(SNIPPET_LENGTH),
            confidence=round(confidence, 3),
            rationale=f"공유 태그: {', '.join(shared)}",
        )
        for confidence, other, shared in scored[:max_candidates]
    ]

    if candidates:
        logger.bind(document_id=document.id).debug(
            f"Suggested {len(candidates)} links for {document.id}"
        )
    return candidates


def candidate_edge(candidate: LinkCandidate) -> Edge:
    """Candidate edge mirroring a suggestion."""
    return Edge(
        id=candidate_edge_id(candidate.id),
        source=candidate.from_id,
        target=candidate.to_id,
        relation=candidate.relation,
        status=EdgeStatus.CANDIDATE,
    )


def _find_candidate(candidates: list[LinkCandidate], candidate_id: str) -> LinkCandidate:
    for candidate in candidates:
        if candidate.id == candidate_id:
            return candidate
    raise NotFoundError(f"Link candidate not found: {candidate_id}")


def accept_candidate(
    candidates: list[LinkCandidate], edges: list[Edge], candidate_id: str
) -> tuple[list[LinkCandidate], list[Edge]]:
    """
    Confirm a suggested link.

    Every edge with the candidate's endpoints or the mirrored edge id becomes
    confirmed; the candidate is removed from review.

    Raises:
        NotFoundError: If no candidate has this id
    """
    candidate = _find_candidate(candidates, candidate_id)
    mirror_id = candidate_edge_id(candidate_id)

    updated: list[Edge] = []
    for edge in edges:
        is_match = edge.id == mirror_id or (
            edge.source == candidate.from_id and edge.target == candidate.to_id
        )
        if is_match:
            edge = edge.model_copy(update={"status": EdgeStatus.CONFIRMED})
        updated.append(edge)

    logger.info(f"Link accepted: {candidate.from_id} -> {candidate.to_id}")
    return [c for c in candidates if c.id != candidate_id], updated


def reject_candidate(
    candidates: list[LinkCandidate], edges: list[Edge], candidate_id: str
) -> tuple[list[LinkCandidate], list[Edge]]:
    """
    Discard a suggested link and its mirrored edge.

    Raises:
        NotFoundError: If no candidate has this id
    """
    candidate = _find_candidate(candidates, candidate_id)
    mirror_id = candidate_edge_id(candidate_id)

    logger.info(f"Link rejected: {candidate.from_id} -> {candidate.to_id}")
    return (
        [c for c in candidates if c.id != candidate_id],
        [e for e in edges if e.id != mirror_id],
    )


def delete_edge(edges: list[Edge], edge_id: str) -> list[Edge]:
    """
    Remove an edge.

    Raises:
        NotFoundError: If no edge has this id
    """
    remaining = [e for e in edges if e.id != edge_id]
    if len(remaining) == len(edges):
        raise NotFoundError(f"Edge not found: {edge_id}")
    return remaining


def update_edge(edges: list[Edge], edge_id: str, relation: str) -> list[Edge]:
    """
    Relabel an edge.

    Raises:
        ValidationError: If the relation is blank
        NotFoundError: If no edge has this id
    """
    relation = (relation or "").strip()
    if not relation:
        raise ValidationError("Edge relation cannot be empty", context={"edge_id": edge_id})

    if not any(e.id == edge_id for e in edges):
        raise NotFoundError(f"Edge not found: {edge_id}")

    return [
        e.model_copy(update={"relation": relation}) if e.id == edge_id else e for e in edges
    ]
