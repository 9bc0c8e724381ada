"""
Tests for the document link graph.

Tests cover:
1. Node building
2. Link suggestion by shared tags
3. Candidate review and edge edits
"""

import pytest

from copyvara.models.document import DocumentStatus
from copyvara.models.graph import Edge, EdgeStatus, LinkCandidate
from copyvara.services.graph import (
    accept_candidate,
    build_nodes,
    candidate_edge,
    delete_edge,
    reject_candidate,
    suggest_links,
    update_edge,
)
from copyvara.utils.exceptions import NotFoundError, ValidationError


@pytest.fixture
def documents(make_document):
    return [
        make_document(doc_id="new", title="RAG chunking", tags=["RAG", "Chunking", "LLM"]),
        make_document(doc_id="rag", title="RAG intro", summary="Retrieve then generate", tags=["rag", "llm"]),
        make_document(doc_id="chunk", title="Chunk sizes", tags=["chunking", "embedding", "vector", "index"]),
        make_document(doc_id="pasta", title="Pasta", tags=["cooking"]),
    ]


@pytest.fixture
def candidate():
    return LinkCandidate(id="lc-1", from_id="new", to_id="rag", confidence=0.5)


@pytest.mark.unit
class TestBuildNodes:
    def test_one_node_per_document(self, make_document):
        docs = [
            make_document(doc_id="a", title="A", tags=["x"], knowledge_score=80),
            make_document(doc_id="b", title="B", status=DocumentStatus.FAILED),
        ]

        nodes = build_nodes(docs)

        assert [n.id for n in nodes] == ["a", "b"]
        assert nodes[0].val == 80
        assert nodes[0].tags == ["x"]
        assert nodes[0].group == 1
        assert nodes[1].status == DocumentStatus.FAILED


@pytest.mark.unit
class TestSuggestLinks:
    def test_ranked_by_tag_overlap(self, documents):
        candidates = suggest_links(documents[0], documents, [])

        # rag: 2 shared of 3 tags; chunk: 1 shared of 6 tags
        assert [c.to_id for c in candidates] == ["rag", "chunk"]
        assert candidates[0].confidence == pytest.approx(0.667)
        assert candidates[1].confidence == pytest.approx(0.167)
        assert candidates[0].rationale == "공유 태그: llm, rag"
        assert candidates[0].to_title == "RAG intro"
        assert candidates[0].to_snippet == "Retrieve then generate"
        assert all(c.from_id == "new" for c in candidates)
        assert all(c.id.startswith("lc-") for c in candidates)

    def test_max_candidates(self, documents):
        assert [c.to_id for c in suggest_links(documents[0], documents, [], max_candidates=1)] == ["rag"]
        assert suggest_links(documents[0], documents, [], max_candidates=0) == []

    def test_min_shared_tags(self, documents):
        candidates = suggest_links(documents[0], documents, [], min_shared_tags=2)
        assert [c.to_id for c in candidates] == ["rag"]

    def test_skips_linked_pairs(self, documents):
        edges = [Edge(id="e-old", source="rag", target="new", status=EdgeStatus.CONFIRMED)]

        candidates = suggest_links(documents[0], documents, edges)

        assert [c.to_id for c in candidates] == ["chunk"]

    def test_skips_unfinished_documents(self, documents, make_document):
        pending = make_document(doc_id="pending", tags=["rag"], status=DocumentStatus.PROCESSING)

        candidates = suggest_links(documents[0], [*documents, pending], [])

        assert "pending" not in {c.to_id for c in candidates}

    def test_untagged_document(self, documents, make_document):
        assert suggest_links(make_document(doc_id="bare"), documents, []) == []

    def test_candidate_edge_mirrors_candidate(self, candidate):
        edge = candidate_edge(candidate)

        assert edge.id == "e-lc-1"
        assert (edge.source, edge.target) == ("new", "rag")
        assert edge.status == EdgeStatus.CANDIDATE


@pytest.mark.unit
class TestReview:
    def test_accept(self, candidate):
        edges = [candidate_edge(candidate), Edge(id="e-other", source="x", target="y")]

        candidates, edges = accept_candidate([candidate], edges, "lc-1")

        assert candidates == []
        assert edges[0].status == EdgeStatus.CONFIRMED
        assert edges[1].status == EdgeStatus.CANDIDATE

    def test_accept_matches_endpoints(self, candidate):
        manual = Edge(id="e-manual", source="new", target="rag")

        _, edges = accept_candidate([candidate], [manual], "lc-1")

        assert edges[0].status == EdgeStatus.CONFIRMED

    def test_reject(self, candidate):
        keep = Edge(id="e-other", source="x", target="y")

        candidates, edges = reject_candidate([candidate], [candidate_edge(candidate), keep], "lc-1")

        assert candidates == []
        assert edges == [keep]

    def test_unknown_candidate(self, candidate):
        with pytest.raises(NotFoundError):
            accept_candidate([candidate], [], "lc-missing")
        with pytest.raises(NotFoundError):
            reject_candidate([candidate], [], "lc-missing")

    def test_inputs_not_mutated(self, candidate):
        candidates = [candidate]
        edges = [candidate_edge(candidate)]

        accept_candidate(candidates, edges, "lc-1")

        assert candidates == [candidate]
        assert edges[0].status == EdgeStatus.CANDIDATE


@pytest.mark.unit
class TestEdgeEdits:
    def test_delete(self):
        edges = [Edge(id="e1", source="a", target="b"), Edge(id="e2", source="b", target="c")]

        assert [e.id for e in delete_edge(edges, "e1")] == ["e2"]
        with pytest.raises(NotFoundError):
            delete_edge(edges, "missing")

    def test_update_relation(self):
        edges = [Edge(id="e1", source="a", target="b")]

        updated = update_edge(edges, "e1", "  extends ")

        assert updated[0].relation == "extends"
        assert edges[0].relation == "related_to"

    def test_update_errors(self):
        edges = [Edge(id="e1", source="a", target="b")]

        with pytest.raises(ValidationError):
            update_edge(edges, "e1", "   ")
        with pytest.raises(NotFoundError):
            update_edge(edges, "missing", "extends")
