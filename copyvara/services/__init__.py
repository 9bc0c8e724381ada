"""
Services for Copyvara.

High-level business logic:
- KnowledgeWorkspace: Owns state and runs the add-document and ask flows
- QuestionAnswerer: Evidence selection, generation and minimum-length answers
- DocumentAnalyzer: Structured analysis of pasted text
- SessionStore: Append-only QA history
- retrieve / score_document: Lexical relevance ranking
- build_memory_items / rebuild_all: Derived memory index
- suggest_links / accept_candidate / update_edge: Document link graph
"""

from copyvara.services.analyzer import DocumentAnalysis, DocumentAnalyzer, detect_source_type
from copyvara.services.answer import build_ask_prompt, compose_answer
from copyvara.services.graph import (
    accept_candidate,
    build_nodes,
    candidate_edge,
    delete_edge,
    reject_candidate,
    suggest_links,
    update_edge,
)
from copyvara.services.memory_index import (
    build_memory_items,
    group_by_document,
    rebuild_all,
    replace_document_items,
)
from copyvara.services.qa import AnswerResult, QuestionAnswerer, validate_question
from copyvara.services.retriever import retrieve
from copyvara.services.scoring import score_document, score_question
from copyvara.services.sessions import SessionStore, evidence_refs
from copyvara.services.workspace import KnowledgeWorkspace, LastError, WorkspaceState

__all__ = [
    "KnowledgeWorkspace",
    "WorkspaceState",
    "LastError",
    "QuestionAnswerer",
    "AnswerResult",
    "validate_question",
    "DocumentAnalyzer",
    "DocumentAnalysis",
    "detect_source_type",
    "SessionStore",
    "evidence_refs",
    "retrieve",
    "score_document",
    "score_question",
    "build_memory_items",
    "rebuild_all",
    "replace_document_items",
    "group_by_document",
    "build_ask_prompt",
    "compose_answer",
    "build_nodes",
    "suggest_links",
    "candidate_edge",
    "accept_candidate",
    "reject_candidate",
    "delete_edge",
    "update_edge",
]
