"""
Answer assembly: prompt construction and minimum-length post-processing.

Lengths are measured with len() (Unicode code points).
"""

from copyvara.models.document import Document

MIN_ANSWER_LENGTH = 500
SUPPLEMENT_EVIDENCE_COUNT = 3
SUPPLEMENT_SNIPPET_LENGTH = 180
PROMPT_DOCUMENT_LIMIT = 20

NO_EVIDENCE_PLACEHOLDER = (
    "현재 연결된 문서 요약이 부족하므로, 추가 문서를 붙여넣으면 답변 정확도가 더 높아집니다."
)

STRATEGY_PARAGRAPH = (
    "실행 관점에서는 (1) 질문의 키워드를 문서 태그와 맞추고, (2) 근거 문서를 2~3개 이상 "
    "교차 검증하며, (3) 결과를 바로 적용 가능한 체크리스트 형태로 정리하는 것이 효과적입니다. "
    "이 방식은 단순 요약보다 재사용성과 신뢰도를 높여주며, 이후 후속 질문에서도 동일한 맥락을 "
    "유지하게 해줍니다."
)

REINFORCEMENT_SENTENCE = (
    "\n\n보강 설명: 현재 답변은 저장된 지식 범위에서 도출된 결과이며, "
    "관련 문서를 더 추가하면 정확도와 깊이를 함께 끌어올릴 수 있습니다."
)

PROMPT_INSTRUCTION = "당신은 지식 관리 비서입니다. 제공된 지식을 바탕으로 질문에 답변하세요."
PROMPT_EMPTY_CONTEXT = "저장된 지식이 없습니다."
PROMPT_CLOSING = "위 지식만을 근거로 친절하게 한국어로 답변하세요. 근거가 없으면 모른다고 하세요."

EMPTY_REPLY_FALLBACK = "답변을 생성할 수 없습니다."


def format_evidence_lines(documents: list[Document]) -> str:
    """
    Supplement lines for up to three evidence documents.

    Each line is "{n}) {title}: {first 180 chars of summary or raw text}".
    """
    return "\n".join(
        f"{idx}) {doc.title}: {doc.snippet(SUPPLEMENT_SNIPPET_LENGTH)}"
        for idx, doc in enumerate(documents[:SUPPLEMENT_EVIDENCE_COUNT], 1)
    )


def build_supplement(question: str, evidence: list[Document]) -> str:
    """Explanatory block appended to answers that are too short."""
    evidence_block = format_evidence_lines(evidence) or NO_EVIDENCE_PLACEHOLDER
    return (
        "\n\n추가 설명:\n"
        f'질문 "{question}"에 대해 저장된 지식을 기반으로 핵심을 더 구체화하면 다음과 같습니다.\n'
        f"{evidence_block}\n\n"
        f"{STRATEGY_PARAGRAPH}"
    )


def compose_answer(question: str, raw_answer: str, evidence: list[Document]) -> str:
    """
    Guarantee a minimum answer length.

    An answer whose trimmed length reaches 500 is returned unchanged.
    Otherwise the trimmed answer is followed by a supplement built from the
    evidence, then the reinforcement sentence is appended until the result
    reaches 500 characters. Never calls the generator.

    Args:
        question: Question text
        raw_answer: Reply from the text-generation service
        evidence: Evidence documents in rank order

    Returns:
        Final answer
    """
    if len(raw_answer.strip()) >= MIN_ANSWER_LENGTH:
        return raw_answer

    merged = raw_answer.strip() + build_supplement(question, evidence)
    while len(merged) < MIN_ANSWER_LENGTH:
        merged += REINFORCEMENT_SENTENCE

    return merged


def build_ask_prompt(question: str, documents: list[Document]) -> str:
    """
    Prompt for the text-generation service.

    Frames the assistant as a knowledge-management aide, states the
    question, lists up to 20 documents as "{n}) {title}: {summary}" and asks
    for an answer grounded only in that context.

    Args:
        question: Trimmed question
        documents: Context documents in the order they should be listed

    Returns:
        Prompt text
    """
    context = "\n".join(
        f"{idx}) {doc.title}: {doc.summary_text or ''}"
        for idx, doc in enumerate(documents[:PROMPT_DOCUMENT_LIMIT], 1)
    )

    return (
        f"{PROMPT_INSTRUCTION}\n"
        f"질문: {question}\n\n"
        f"저장된 지식 요약:\n"
        f"{context or PROMPT_EMPTY_CONTEXT}\n\n"
        f"{PROMPT_CLOSING}"
    )
