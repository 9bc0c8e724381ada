"""
Tests for the QA session store.
"""

import pytest

from copyvara.models.session import EvidenceRef
from copyvara.services.sessions import SessionStore, evidence_refs


@pytest.mark.unit
class TestSessionStore:
    """Tests for SessionStore."""

    def test_append_prepends(self):
        store = SessionStore()
        first = store.append_session("first?", "a1", [])
        second = store.append_session("second?", "a2", [])

        assert [s.id for s in store.sessions] == [second.id, first.id]
        assert len(store) == 2

    def test_session_fields(self):
        store = SessionStore()
        refs = [EvidenceRef(id="d1", title="RAG", snippet="s")]
        session = store.append_session("q?", "answer", refs)

        assert session.id.startswith("qa-")
        assert session.question == "q?"
        assert session.evidence == tuple(refs)
        assert session.created_at.tzinfo is not None

    def test_sessions_returns_copy(self):
        store = SessionStore()
        store.append_session("q?", "a", [])
        store.sessions.clear()
        assert len(store) == 1

    def test_no_size_cap(self):
        store = SessionStore()
        for i in range(120):
            store.append_session(f"q{i}", "a", [])
        assert len(store) == 120

    def test_load_and_clear(self):
        source = SessionStore()
        session = source.append_session("q?", "a", [])

        store = SessionStore()
        store.load([session])
        assert store.sessions == [session]

        store.clear()
        assert store.sessions == []


@pytest.mark.unit
def test_evidence_refs(make_document):
    docs = [
        make_document(doc_id="d1", title="RAG", summary="x" * 300),
        make_document(doc_id="d2", title="Raw", summary=None, raw_text="raw text"),
    ]
    refs = evidence_refs(docs)

    assert [r.id for r in refs] == ["d1", "d2"]
    assert refs[0].snippet == "x" * 180
    assert refs[1].snippet == "raw text"
