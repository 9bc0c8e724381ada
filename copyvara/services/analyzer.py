"""
Document analysis: turn pasted text into a structured knowledge record.
"""

import re

from pydantic import BaseModel, Field, field_validator

from copyvara.core.llm.base import LLMProvider
from copyvara.core.tokenizer import TokenCounter
from copyvara.models.document import ActionPlan, Document, KnowledgeSegment
from copyvara.models.visualization import VizData
from copyvara.utils.exceptions import UpstreamGenerationError, ValidationError
from copyvara.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_KNOWLEDGE_SCORE = 50

ANALYSIS_SYSTEM_PROMPT = """당신은 지식 관리 도우미입니다. 입력된 텍스트를 구조화하여 JSON 형식으로 반환하세요.
실무 적용을 위해 다음 정보를 반드시 포함해야 합니다:
1. 간결한 제목과 3~5줄 요약
2. 핵심 포인트(bullets)와 주제 태그(tags)
3. Action Plan: 실무 적용을 위한 구체적인 목표와 실행 단계
4. Segments: 주제별로 정제된 핵심 통찰 (category, topic, content, relevance 0~100)
5. knowledge_score: 지식의 밀도와 재사용 가치를 0~100으로 평가
6. viz_data: 지식 시각화를 위한 Graph(핵심 개념 nodes와 관계 edges), Timeline(주요 사건/단계와 시점),
   Topic Map(주제분류 category와 세부항목 topics), Strategy Quadrant(x: 중요도, y: 시급성, 0~100)

반환 형식:
{
  "title": "제목 (최대한 간결하게)",
  "summary": "3~5줄 요약",
  "bullets": ["핵심 포인트 1", "핵심 포인트 2", "핵심 포인트 3"],
  "tags": ["태그1", "태그2", "태그3"],
  "action_plan": {
    "goal": "이 지식을 통해 달성하려는 핵심 목표",
    "steps": [{"step": "단계명", "description": "상세 실행 내용", "priority": "High|Medium|Low"}],
    "applications": [{"context": "적용 상황", "suggestion": "구체적 적용 방법"}]
  },
  "segments": [{"category": "분류", "topic": "주제", "content": "정제된 통찰", "relevance": 80}],
  "knowledge_score": 50,
  "viz_data": {
    "graph": {"nodes": [{"id": "id1", "label": "개념1"}], "edges": [{"source": "id1", "target": "id2", "relation": "관계"}]},
    "timeline": [{"event": "사건1", "date": "시점/기간", "description": "설명"}],
    "topic_map": [{"category": "분류1", "topics": ["주제1", "주제2"]}],
    "quadrant": [{"label": "항목1", "x": 80, "y": 90, "reason": "이유"}]
  }
}"""

_SHARE_PATTERNS = {
    "chatgpt": re.compile(r"^https?://chatgpt\.com/share/[a-z0-9-]+/?$", re.IGNORECASE),
    "gemini": re.compile(r"^https?://gemini\.google\.com/share/[a-z0-9]+/?$", re.IGNORECASE),
    "claude": re.compile(r"^https?://claude\.ai/share/[a-f0-9-]+/?$", re.IGNORECASE),
}

_HOST_MARKERS = {
    "chatgpt": ("chatgpt.com", "openai.com"),
    "gemini": ("gemini.google.com",),
    "claude": ("claude.ai",),
}


def detect_source_type(text: str) -> str:
    """
    Guess where pasted text came from.

    Share URLs or host mentions of ChatGPT, Gemini or Claude map to that
    source; anything else is manual input.
    """
    stripped = (text or "").strip()
    for source, pattern in _SHARE_PATTERNS.items():
        if pattern.match(stripped) or any(m in stripped for m in _HOST_MARKERS[source]):
            return source
    return "manual"


class DocumentAnalysis(BaseModel):
    """Structured analysis returned by the generator."""

    model_config = {"extra": "ignore"}

    title: str = Field(..., description="Concise title")
    summary: str = Field(default="", description="3-5 line summary")
    bullets: list[str] = Field(default_factory=list, description="Key points")
    tags: list[str] = Field(default_factory=list, description="Topic tags")
    action_plan: ActionPlan | None = Field(default=None, description="Goal, steps, applications")
    segments: list[KnowledgeSegment] = Field(default_factory=list, description="Refined insights")
    knowledge_score: int = Field(default=DEFAULT_KNOWLEDGE_SCORE, description="0-100")
    viz_data: VizData | None = Field(default=None, description="Graph, timeline, topic map, quadrant")

    @field_validator("knowledge_score", mode="before")
    @classmethod
    def _clamp_score(cls, value) -> int:
        try:
            return max(0, min(100, int(value)))
        except (TypeError, ValueError):
            return DEFAULT_KNOWLEDGE_SCORE

    def apply_to(self, document: Document) -> None:
        """Attach the analysis fields to a document in place."""
        document.title = self.title.strip() or document.title
        document.summary_text = self.summary
        document.summary_bullets = [b for b in self.bullets if b]
        document.topic_tags = [t for t in self.tags if t]
        document.action_plan = self.action_plan
        document.segments = list(self.segments)
        document.knowledge_score = self.knowledge_score
        document.viz_data = None if self.viz_data is None or self.viz_data.is_empty() else self.viz_data


class DocumentAnalyzer:
    """
    Calls the generator for structured document analysis.

    Raw text beyond the token budget is clipped before sending.
    """

    def __init__(
        self,
        llm: LLMProvider,
        token_counter: TokenCounter | None = None,
        max_input_tokens: int = 12000,
        max_tokens: int = 2000,
    ):
        """
        Initialize analyzer.

        Args:
            llm: Text-generation provider
            token_counter: Counter used to clip the input
            max_input_tokens: Input token budget
            max_tokens: Generation token limit
        """
        self.llm = llm
        self.token_counter = token_counter or TokenCounter()
        self.max_input_tokens = max_input_tokens
        self.max_tokens = max_tokens

    async def analyze(self, raw_text: str) -> DocumentAnalysis:
        """
        Analyze raw text.

        Args:
            raw_text: Text pasted by the user

        Returns:
            DocumentAnalysis

        Raises:
            ValidationError: Empty input
            UpstreamGenerationError: Generator failed or returned an unusable reply
        """
        if not raw_text or not raw_text.strip():
            raise ValidationError("Document text cannot be empty")

        clipped = self.token_counter.truncate(raw_text, self.max_input_tokens)
        if len(clipped) < len(raw_text):
            logger.warning(
                f"Analysis input clipped from {len(raw_text)} to {len(clipped)} characters"
            )

        try:
            result = await self.llm.complete(
                clipped,
                response_format=DocumentAnalysis,
                system_prompt=ANALYSIS_SYSTEM_PROMPT,
                max_tokens=self.max_tokens,
            )
        except UpstreamGenerationError:
            raise
        except Exception as e:
            logger.bind(operation="analyze").error(f"Document analysis failed: {e}")
            raise UpstreamGenerationError(f"Document analysis failed: {e}") from e

        if not isinstance(result, DocumentAnalysis):
            raise UpstreamGenerationError(
                "Analysis returned an unexpected reply",
                context={"type": type(result).__name__},
            )

        return result
