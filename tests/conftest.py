"""
Shared test fixtures for all test modules.
"""

from datetime import datetime, timedelta, timezone

import pytest

from copyvara.models.document import ActionItem, ActionPlan, Document, DocumentStatus, KnowledgeSegment


@pytest.fixture
def now() -> datetime:
    """Fixed reference time for recency-sensitive tests."""
    return datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_document(now):
    """Factory for analyzed documents; age_days is relative to `now`."""

    def _make(
        doc_id: str = "d1",
        title: str = "Untitled",
        summary: str | None = None,
        tags: list[str] | None = None,
        bullets: list[str] | None = None,
        age_days: float | None = 0,
        raw_text: str = "",
        **kwargs,
    ) -> Document:
        created_at = None if age_days is None else now - timedelta(days=age_days)
        kwargs.setdefault("status", DocumentStatus.DONE)
        return Document(
            id=doc_id,
            title=title,
            raw_text=raw_text,
            summary_text=summary,
            topic_tags=tags or [],
            summary_bullets=bullets or [],
            created_at=created_at,
            **kwargs,
        )

    return _make


@pytest.fixture
def rich_document(make_document) -> Document:
    """Document with every analysis field populated."""
    return make_document(
        doc_id="doc_rich",
        title="React Performance",
        summary="Memoization avoids needless re-renders.",
        tags=["react", "performance"],
        bullets=["useMemo caches values", "useCallback caches functions", "Profile first"],
        action_plan=ActionPlan(
            goal="Faster UI",
            steps=[
                ActionItem(step="Profile", description="Record a trace", priority="High"),
                ActionItem(step="Memoize", description="Wrap hot components"),
            ],
        ),
        segments=[
            KnowledgeSegment(
                category="Frontend", topic="memoization", content="Cache derived props", relevance=90
            )
        ],
    )
