"""
Question answering: evidence selection, generation and length guarantee.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from copyvara.config import RetrievalConfig
from copyvara.core.llm.base import LLMProvider
from copyvara.models.document import Document
from copyvara.models.memory import MemoryItem
from copyvara.models.retrieval import RankedDocument
from copyvara.services.answer import (
    EMPTY_REPLY_FALLBACK,
    PROMPT_DOCUMENT_LIMIT,
    build_ask_prompt,
    compose_answer,
)
from copyvara.services.retriever import retrieve
from copyvara.utils.exceptions import UpstreamGenerationError, ValidationError
from copyvara.utils.logger import get_logger
from copyvara.utils.timeutils import parse_timestamp

logger = get_logger(__name__)

MIN_QUESTION_LENGTH = 2


class AnswerResult(BaseModel):
    """Outcome of one answered question."""

    question: str
    answer: str
    raw_answer: str
    evidence: list[Document] = Field(default_factory=list)
    ranked: list[RankedDocument] = Field(default_factory=list)


def validate_question(question: str) -> str:
    """
    Trim and validate a question.

    Raises:
        ValidationError: If shorter than two characters after trimming
    """
    trimmed = (question or "").strip()
    if len(trimmed) < MIN_QUESTION_LENGTH:
        raise ValidationError("질문을 2글자 이상 입력해 주세요.", context={"question": trimmed})
    return trimmed


def most_recent(documents: list[Document], limit: int = PROMPT_DOCUMENT_LIMIT) -> list[Document]:
    """Documents by created_at descending; undated documents last."""

    def sort_key(doc: Document) -> float:
        created = parse_timestamp(doc.created_at)
        return created.timestamp() if created else float("-inf")

    return sorted(documents, key=sort_key, reverse=True)[:limit]


class QuestionAnswerer:
    """
    Answers a question from a snapshot of the document collection.

    Evidence modes:
    - ranked: relevance-ranked retrieval (top `limit`)
    - recent: the 20 most recent documents, regardless of relevance
    """

    def __init__(self, llm: LLMProvider, config: RetrievalConfig | None = None,
                 max_tokens: int = 2000, temperature: float = 0.0):
        """
        Initialize question answerer.

        Args:
            llm: Text-generation provider
            config: Retrieval configuration (evidence mode and limit)
            max_tokens: Generation token limit
            temperature: Sampling temperature
        """
        self.llm = llm
        self.config = config or RetrievalConfig()
        self.max_tokens = max_tokens
        self.temperature = temperature

    def select_evidence(
        self,
        question: str,
        documents: list[Document],
        memory_items: list[MemoryItem],
        now: datetime | None = None,
    ) -> tuple[list[Document], list[RankedDocument]]:
        """
        Pick the documents used as prompt context and evidence.

        Only analyzed (done) documents qualify; placeholders still being
        analyzed and failed documents never reach the prompt.

        Returns:
            (evidence documents, ranked results; empty in recent mode)
        """
        analyzed = [d for d in documents if d.is_done()]
        if self.config.evidence_mode == "recent":
            return most_recent(analyzed), []

        ranked = retrieve(question, analyzed, memory_items, limit=self.config.limit, now=now)
        return [r.document for r in ranked], ranked

    async def answer(
        self,
        question: str,
        documents: list[Document],
        memory_items: list[MemoryItem],
        now: datetime | None = None,
    ) -> AnswerResult:
        """
        Answer a question.

        Args:
            question: Raw question text
            documents: Document snapshot
            memory_items: Memory item snapshot
            now: Reference time for recency

        Returns:
            AnswerResult with the final answer and evidence

        Raises:
            ValidationError: Question too short (no generator call is made)
            UpstreamGenerationError: Generator call failed
        """
        trimmed = validate_question(question)
        evidence, ranked = self.select_evidence(trimmed, documents, memory_items, now=now)
        prompt = build_ask_prompt(trimmed, evidence)

        logger.bind(operation="ask", evidence_mode=self.config.evidence_mode).info(
            f"Answering question with {len(evidence)} evidence documents"
        )

        try:
            raw = await self.llm.complete(
                prompt,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
        except UpstreamGenerationError:
            raise
        except Exception as e:
            logger.bind(operation="ask").error(f"Text generation failed: {e}")
            raise UpstreamGenerationError(f"Text generation failed: {e}") from e

        if not isinstance(raw, str):
            raise UpstreamGenerationError(
                "Text generation returned a non-text reply",
                context={"type": type(raw).__name__},
            )

        raw_answer = raw if raw.strip() else EMPTY_REPLY_FALLBACK
        final = compose_answer(trimmed, raw_answer, evidence)

        return AnswerResult(
            question=trimmed,
            answer=final,
            raw_answer=raw_answer,
            evidence=evidence,
            ranked=ranked,
        )
