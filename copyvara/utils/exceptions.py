"""
Custom exception hierarchy for Copyvara.

Provides structured error types for the ask and add-document flows.
All exceptions inherit from CopyvaraError for easy catching.
"""


class CopyvaraError(Exception):
    """
    Base exception for all Copyvara errors.
    All custom exceptions should inherit from this class.
    """

    def __init__(self, message: str, context: dict | None = None):
        """
        Initialize Copyvara error.
        Args:
            message: Error message
            context: Optional context dictionary with additional error details
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}


class ValidationError(CopyvaraError):
    """
    Validation errors.
    Raised when input validation fails (e.g. a question that is too short).
    """

    pass


class UpstreamGenerationError(CopyvaraError):
    """
    Text-generation service errors.
    Raised when the LLM call fails (network error, bad status, malformed reply).
    """

    pass


class UpstreamPersistenceError(CopyvaraError):
    """
    Persistence service errors.
    Raised when documents or QA history cannot be fetched or saved.
    """

    pass


class NotFoundError(CopyvaraError):
    """
    Resource not found errors.
    Raised when a requested document doesn't exist.
    """

    pass


class ConfigurationError(CopyvaraError):
    """
    Configuration errors.
    Raised when configuration is invalid or missing required values.
    """

    pass
