"""
Tests for data models.

Tests cover:
1. Document lifecycle transitions
2. Content preview and snippets
3. Immutable QA sessions
4. Boundary row parsing with defaults
5. Visualization and link graph models
"""

import json
from datetime import timezone

import pydantic
import pytest

from copyvara.models import (
    Document,
    DocumentRow,
    DocumentStatus,
    Edge,
    EdgeStatus,
    EvidenceRef,
    LinkCandidate,
    QASession,
    QuadrantPoint,
    RetrievalScore,
    VizData,
    parse_document_rows,
    parse_session_rows,
)
from copyvara.utils.exceptions import ValidationError


@pytest.mark.unit
class TestDocumentStatus:
    """Tests for forward-only status transitions."""

    def test_default_status(self):
        doc = Document(id="d1", title="t", raw_text="x")
        assert doc.status == DocumentStatus.QUEUED
        assert doc.knowledge_score == 0
        assert doc.workspace_id == "w1"

    def test_forward_transitions(self):
        doc = Document(id="d1", title="t", raw_text="x")
        doc.advance(DocumentStatus.PROCESSING)
        doc.advance(DocumentStatus.DONE)
        assert doc.is_done()

    def test_queued_straight_to_failed(self):
        doc = Document(id="d1", title="t", raw_text="x")
        doc.advance(DocumentStatus.FAILED)
        assert doc.status == DocumentStatus.FAILED

    def test_backward_transition_rejected(self):
        doc = Document(id="d1", title="t", raw_text="x", status=DocumentStatus.PROCESSING)
        with pytest.raises(ValidationError, match="Invalid status transition"):
            doc.advance(DocumentStatus.QUEUED)

    @pytest.mark.parametrize("terminal", [DocumentStatus.DONE, DocumentStatus.FAILED])
    def test_terminal_statuses(self, terminal):
        doc = Document(id="d1", title="t", raw_text="x", status=terminal)
        for target in DocumentStatus:
            with pytest.raises(ValidationError):
                doc.advance(target)

    def test_knowledge_score_bounds(self):
        with pytest.raises(pydantic.ValidationError):
            Document(id="d1", title="t", raw_text="x", knowledge_score=101)


@pytest.mark.unit
class TestDocumentPreview:
    """Tests for content preview and snippets."""

    def test_summary_preferred(self):
        doc = Document(id="d1", title="t", raw_text="raw", summary_text="summary")
        assert doc.content_preview == "summary"

    def test_raw_text_fallback(self):
        doc = Document(id="d1", title="t", raw_text="raw", summary_text="")
        assert doc.content_preview == "raw"

    def test_snippet_length(self):
        doc = Document(id="d1", title="t", raw_text="가" * 500)
        assert doc.snippet() == "가" * 180
        assert doc.snippet(10) == "가" * 10


@pytest.mark.unit
class TestQASession:
    """Tests for immutable QA sessions."""

    def test_frozen(self):
        session = QASession(id="qa-1", question="q?", answer="a")
        with pytest.raises(pydantic.ValidationError):
            session.answer = "changed"

    def test_evidence_order(self):
        refs = (EvidenceRef(id="b", title="B"), EvidenceRef(id="a", title="A"))
        session = QASession(id="qa-1", question="q?", answer="a", evidence=refs)
        assert [e.id for e in session.evidence] == ["b", "a"]

    def test_created_at_is_aware(self):
        session = QASession(id="qa-1", question="q?", answer="a")
        assert session.created_at.tzinfo is not None


@pytest.mark.unit
class TestRetrievalScore:
    def test_bounds(self):
        with pytest.raises(pydantic.ValidationError):
            RetrievalScore(lexical=1.5, tag_overlap=0, recency=0, total=0)


@pytest.mark.unit
class TestDocumentRows:
    """Tests for lenient persisted-row parsing."""

    def test_defaults_for_missing_fields(self):
        doc = DocumentRow.model_validate({"id": 7}).to_document()

        assert doc.id == "7"
        assert doc.title == "제목 없는 문서"
        assert doc.raw_text == ""
        assert doc.summary_text == ""
        assert doc.topic_tags == []
        assert doc.summary_bullets == []
        assert doc.action_plan is None
        assert doc.status == DocumentStatus.DONE
        assert doc.knowledge_score == 50
        assert doc.created_at is not None

    def test_null_columns(self):
        row = {"id": "d1", "title": None, "summary": None, "tags": None, "bullets": "oops"}
        doc = DocumentRow.model_validate(row).to_document()

        assert doc.title == "제목 없는 문서"
        assert doc.summary_text == ""
        assert doc.topic_tags == []
        assert doc.summary_bullets == []

    def test_json_text_columns(self):
        row = {
            "id": "d1",
            "title": "RAG",
            "tags": json.dumps(["rag", "llm"]),
            "action_plan": json.dumps({"goal": "g", "steps": [{"step": "s", "description": "d"}]}),
            "segments": json.dumps([{"topic": "t", "content": "c"}, "junk"]),
            "created_at": "2025-01-01T00:00:00Z",
        }
        doc = DocumentRow.model_validate(row).to_document()

        assert doc.topic_tags == ["rag", "llm"]
        assert doc.action_plan.steps[0].step == "s"
        assert len(doc.segments) == 1
        assert doc.created_at.tzinfo == timezone.utc

    def test_unknown_source_type(self):
        doc = DocumentRow.model_validate({"id": "d1", "source_type": "fax"}).to_document()
        assert doc.source_type == "manual"

    def test_parse_skips_rows_without_id(self):
        docs = parse_document_rows([{"title": "no id"}, {"id": "d1"}, "garbage"], workspace_id="w9")
        assert [d.id for d in docs] == ["d1"]
        assert docs[0].workspace_id == "w9"

    def test_parse_session_rows(self):
        rows = [
            {"id": "qa-1", "question": "q", "answer": None, "evidence": None},
            {"question": "missing id"},
        ]
        sessions = parse_session_rows(rows)

        assert len(sessions) == 1
        assert sessions[0].answer == ""
        assert sessions[0].evidence == ()

    def test_malformed_segment_keeps_batch(self):
        good = {"id": "good", "title": "RAG Basics", "tags": '["rag"]'}
        bad = {
            "id": "bad",
            "title": "Mixed segments",
            "segments": '[{"topic": "x", "relevance": "high"}, {"topic": "y", "relevance": 70}]',
        }

        docs = parse_document_rows([good, bad])

        assert [d.id for d in docs] == ["good", "bad"]
        assert docs[0].topic_tags == ["rag"]
        assert [s.topic for s in docs[1].segments] == ["y"]

    def test_malformed_action_plan_dropped(self):
        row = {
            "id": "d1",
            "action_plan": {"goal": "ship", "steps": "not a list"},
            "bullets": '["one"]',
        }

        docs = parse_document_rows([row])

        assert len(docs) == 1
        assert docs[0].action_plan is None
        assert docs[0].summary_bullets == ["one"]

    def test_malformed_evidence_dropped(self):
        rows = [
            {
                "id": "qa-1",
                "question": "q",
                "answer": "a",
                "evidence": [{"id": "d1", "title": "ok"}, {"id": ["x"]}, {"title": "no id"}],
            },
            {"id": "qa-2", "question": "q2", "answer": "a2"},
        ]

        sessions = parse_session_rows(rows)

        assert [s.id for s in sessions] == ["qa-1", "qa-2"]
        assert [e.id for e in sessions[0].evidence] == ["d1"]


@pytest.mark.unit
class TestVizData:
    def test_partial_payload(self):
        viz = VizData.model_validate(
            {"topic_map": [{"category": "Backend", "topics": ["RAG"]}], "unknown": 1}
        )

        assert viz.topic_map[0].topics == ["RAG"]
        assert viz.graph.nodes == []
        assert not viz.is_empty()
        assert VizData().is_empty()

    def test_quadrant_axes_clamped(self):
        point = QuadrantPoint(label="Ship", x=-5, y="urgent")
        assert (point.x, point.y) == (0.0, 50.0)


@pytest.mark.unit
class TestGraphModels:
    def test_edge_connects_either_direction(self):
        edge = Edge(id="e1", source="a", target="b")

        assert edge.connects("a", "b")
        assert edge.connects("b", "a")
        assert not edge.connects("a", "c")
        assert edge.status == EdgeStatus.CANDIDATE

    def test_candidate_confidence_bounds(self):
        with pytest.raises(pydantic.ValidationError):
            LinkCandidate(id="lc-1", from_id="a", to_id="b", confidence=1.5)
