"""
Tests for the SQLite knowledge store.

Tests cover:
1. Schema initialization
2. Document round trip and id assignment
3. Ordering and limits
4. QA history
5. Clearing and error wrapping
"""

from datetime import timedelta

import aiosqlite
import pytest

from copyvara.core.storage import SQLiteKnowledgeStore
from copyvara.models.document import ActionItem, ActionPlan, DocumentStatus, KnowledgeSegment
from copyvara.models.session import EvidenceRef, QASession
from copyvara.models.visualization import (
    ConceptEdge,
    ConceptGraph,
    ConceptNode,
    QuadrantPoint,
    TimelineEvent,
    VizData,
)
from copyvara.utils.exceptions import UpstreamPersistenceError


@pytest.fixture
async def store(tmp_path):
    """Initialized store on a temporary database file."""
    store = SQLiteKnowledgeStore(db_path=str(tmp_path / "data" / "kb.db"), workspace_id="w1")
    await store.initialize()
    yield store
    await store.close()


@pytest.mark.unit
@pytest.mark.asyncio
class TestSQLiteDocuments:
    """Document persistence."""

    async def test_temp_id_replaced(self, store, make_document):
        doc = make_document(doc_id="temp-abc", title="RAG")

        persisted = await store.save_document(doc)

        assert persisted.id.startswith("doc_")
        assert doc.id == "temp-abc"

    async def test_round_trip(self, store, make_document):
        doc = make_document(
            doc_id="d1",
            title="React",
            summary="Memoize",
            tags=["react"],
            bullets=["useMemo"],
            action_plan=ActionPlan(goal="g", steps=[ActionItem(step="s", description="d")]),
            segments=[KnowledgeSegment(topic="hooks", content="c", relevance=70)],
            source_type="chatgpt",
        )
        await store.save_document(doc)

        [loaded] = await store.fetch_documents()

        assert loaded.id == "d1"
        assert loaded.title == "React"
        assert loaded.summary_text == "Memoize"
        assert loaded.topic_tags == ["react"]
        assert loaded.summary_bullets == ["useMemo"]
        assert loaded.action_plan.steps[0].step == "s"
        assert loaded.segments[0].topic == "hooks"
        assert loaded.source_type == "chatgpt"
        assert loaded.status == DocumentStatus.DONE
        assert loaded.knowledge_score == 50
        assert loaded.created_at == doc.created_at

    async def test_viz_data_round_trip(self, store, make_document):
        viz = VizData(
            graph=ConceptGraph(
                nodes=[ConceptNode(id="n1", label="RAG"), ConceptNode(id="n2", label="검색")],
                edges=[ConceptEdge(source="n1", target="n2", relation="uses")],
            ),
            quadrant=[QuadrantPoint(label="도입", x=80, y=90, reason="급함")],
        )
        await store.save_document(make_document(doc_id="d1", title="RAG", viz_data=viz))

        [loaded] = await store.fetch_documents()

        assert loaded.viz_data == viz

    async def test_legacy_table_gains_viz_column(self, tmp_path, make_document):
        db_path = tmp_path / "legacy.db"
        async with aiosqlite.connect(db_path) as db:
            await db.execute(
                "CREATE TABLE documents (id TEXT PRIMARY KEY, title TEXT NOT NULL, raw_text TEXT, "
                "summary TEXT, bullets TEXT DEFAULT '[]', tags TEXT DEFAULT '[]', action_plan TEXT, "
                "segments TEXT DEFAULT '[]', source_type TEXT DEFAULT 'manual', created_at TEXT NOT NULL)"
            )
            await db.execute(
                "INSERT INTO documents (id, title, created_at) VALUES ('old', 'Old', '2024-01-01T00:00:00+00:00')"
            )
            await db.commit()

        legacy = SQLiteKnowledgeStore(db_path=str(db_path))
        await legacy.initialize()
        await legacy.save_document(
            make_document(doc_id="new", title="New", viz_data=VizData(timeline=[TimelineEvent(event="e")]))
        )

        docs = {d.id: d for d in await legacy.fetch_documents()}
        await legacy.close()

        assert docs["old"].viz_data is None
        assert docs["new"].viz_data.timeline[0].event == "e"

    async def test_ordered_newest_first_with_limit(self, store, make_document):
        for i in range(5):
            await store.save_document(make_document(doc_id=f"d{i}", title=f"t{i}", age_days=i))

        docs = await store.fetch_documents(limit=3)

        assert [d.id for d in docs] == ["d0", "d1", "d2"]

    async def test_missing_created_at_gets_timestamp(self, store, make_document):
        await store.save_document(make_document(doc_id="d1", age_days=None))
        [loaded] = await store.fetch_documents()
        assert loaded.created_at is not None

    async def test_empty(self, store):
        assert await store.fetch_documents() == []


@pytest.mark.unit
@pytest.mark.asyncio
class TestSQLiteSessions:
    """QA history persistence."""

    async def test_round_trip_with_evidence(self, store, now):
        session = QASession(
            id="qa-1",
            question="RAG가 뭐야",
            answer="답변",
            evidence=(EvidenceRef(id="d1", title="RAG", snippet="s"),),
            created_at=now,
        )
        await store.save_session(session)

        [loaded] = await store.fetch_sessions()

        assert loaded == session

    async def test_ordered_newest_first(self, store, now):
        for i in range(3):
            await store.save_session(
                QASession(id=f"qa-{i}", question="q", answer="a", created_at=now - timedelta(hours=i))
            )

        sessions = await store.fetch_sessions(limit=2)

        assert [s.id for s in sessions] == ["qa-0", "qa-1"]


@pytest.mark.unit
@pytest.mark.asyncio
class TestSQLiteMaintenance:
    """Clearing and failures."""

    async def test_clear(self, store, make_document):
        await store.save_document(make_document(doc_id="d1"))
        await store.save_session(QASession(id="qa-1", question="q", answer="a"))

        await store.clear()

        assert await store.fetch_documents() == []
        assert await store.fetch_sessions() == []

    async def test_missing_table_wrapped(self, tmp_path):
        store = SQLiteKnowledgeStore(db_path=str(tmp_path / "empty.db"))
        try:
            with pytest.raises(UpstreamPersistenceError, match="SQLite query failed"):
                await store.fetch_documents()
        finally:
            await store.close()
