"""Utility modules for Copyvara."""

from copyvara.utils.exceptions import (
    ConfigurationError,
    CopyvaraError,
    NotFoundError,
    UpstreamGenerationError,
    UpstreamPersistenceError,
    ValidationError,
)
from copyvara.utils.id_generator import (
    candidate_edge_id,
    generate_candidate_id,
    generate_document_id,
    generate_memory_item_id,
    generate_session_id,
    generate_temp_document_id,
)
from copyvara.utils.logger import get_logger, setup_logging
from copyvara.utils.timeutils import ensure_aware, parse_timestamp, utc_now

__all__ = [
    # Logging
    "get_logger",
    "setup_logging",
    # ID Generators
    "generate_temp_document_id",
    "generate_document_id",
    "generate_memory_item_id",
    "generate_session_id",
    "generate_candidate_id",
    "candidate_edge_id",
    # Time
    "utc_now",
    "ensure_aware",
    "parse_timestamp",
    # Exceptions
    "CopyvaraError",
    "ValidationError",
    "UpstreamGenerationError",
    "UpstreamPersistenceError",
    "NotFoundError",
    "ConfigurationError",
]
