"""Exception hierarchy for the matching and indexing pipeline."""

from __future__ import annotations


class MatchingError(Exception):
    """Base exception for all talentmatch errors."""


class DocumentNotFoundError(MatchingError):
    """Raised when a source document no longer exists."""

    def __init__(self, document_id: str, document_type: str) -> None:
        super().__init__(f"{document_type} document {document_id} not found.")
        self.document_id = document_id
        self.document_type = document_type


class SourceUnavailableError(MatchingError):
    """Raised when a document source cannot be reached (transient)."""


class AccessDeniedError(MatchingError):
    """Raised when the caller may not see the requested resource."""

    def __init__(self, message: str = "You do not have access to this resource.") -> None:
        super().__init__(message)


class AuthenticationRequiredError(MatchingError):
    """Raised when an operation needs a caller identity and none was given."""


class InvalidRequestError(MatchingError):
    """Raised on malformed input (empty ids, out-of-range paging)."""


class ConfigurationError(MatchingError):
    """Raised when configuration values are missing or invalid."""
