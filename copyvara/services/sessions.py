"""
In-memory QA session history, most recent first.
"""

from copyvara.models.document import Document
from copyvara.models.session import EvidenceRef, QASession
from copyvara.utils.id_generator import generate_session_id
from copyvara.utils.timeutils import utc_now

EVIDENCE_SNIPPET_LENGTH = 180


def evidence_refs(documents: list[Document]) -> list[EvidenceRef]:
    """Evidence references (id, title, leading snippet) for documents."""
    return [
        EvidenceRef(id=doc.id, title=doc.title, snippet=doc.snippet(EVIDENCE_SNIPPET_LENGTH))
        for doc in documents
    ]


class SessionStore:
    """
    Append-only QA history.

    New sessions are prepended. No size cap is applied here.
    """

    def __init__(self, sessions: list[QASession] | None = None):
        self._sessions: list[QASession] = list(sessions or [])

    @property
    def sessions(self) -> list[QASession]:
        """Sessions, most recent first (a copy)."""
        return list(self._sessions)

    def __len__(self) -> int:
        return len(self._sessions)

    def append_session(
        self, question: str, answer: str, evidence: list[EvidenceRef]
    ) -> QASession:
        """
        Record a finished exchange.

        Args:
            question: Question text
            answer: Final answer
            evidence: Evidence references in rank order

        Returns:
            The new session
        """
        session = QASession(
            id=generate_session_id(),
            question=question,
            answer=answer,
            evidence=tuple(evidence),
            created_at=utc_now(),
        )
        self._sessions.insert(0, session)
        return session

    def load(self, sessions: list[QASession]) -> None:
        """Replace history with persisted sessions (already newest first)."""
        self._sessions = list(sessions)

    def clear(self) -> None:
        self._sessions = []
