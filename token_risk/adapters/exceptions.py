"""
Provider Adapter Exceptions - Custom exception hierarchy.

Adapters raise these internally; BaseProviderAdapter.fetch() captures them
into a FetchResult so callers never see them raised.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional


class ProviderErrorKind(str, Enum):
    """Closed set of provider failure modes."""
    UNAVAILABLE = "Unavailable"
    NOT_FOUND = "NotFound"
    RATE_LIMITED = "RateLimited"
    MALFORMED = "Malformed"
    UNAUTHORIZED = "Unauthorized"


class ProviderError(Exception):
    """Base exception for all provider adapter errors."""

    kind: ProviderErrorKind = ProviderErrorKind.UNAVAILABLE

    def __init__(
        self,
        message: str,
        adapter_name: Optional[str] = None,
        status_code: Optional[int] = None,
        original_error: Optional[Exception] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.adapter_name = adapter_name
        self.status_code = status_code
        self.original_error = original_error
        self.context = context or {}
        self.timestamp = datetime.utcnow()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "kind": self.kind.value,
            "message": self.message,
            "adapter_name": self.adapter_name,
            "status_code": self.status_code,
            "original_error": str(self.original_error) if self.original_error else None,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
        }

    def __str__(self) -> str:
        parts = [f"{self.__class__.__name__}: {self.message}"]
        if self.adapter_name:
            parts.append(f"[adapter={self.adapter_name}]")
        if self.status_code:
            parts.append(f"[status={self.status_code}]")
        if self.original_error:
            parts.append(f"(caused by: {self.original_error})")
        return " ".join(parts)


class ProviderUnavailableError(ProviderError):
    """Network failure, timeout, or server-side error."""
    kind = ProviderErrorKind.UNAVAILABLE


class NotFoundError(ProviderError):
    """Provider has no record for the identifier."""
    kind = ProviderErrorKind.NOT_FOUND


class RateLimitError(ProviderError):
    """Rate limit exceeded."""

    kind = ProviderErrorKind.RATE_LIMITED

    def __init__(
        self,
        message: str,
        adapter_name: Optional[str] = None,
        status_code: Optional[int] = None,
        retry_after_seconds: Optional[int] = None,
        original_error: Optional[Exception] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, adapter_name, status_code, original_error, context)
        self.retry_after_seconds = retry_after_seconds

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data = super().to_dict()
        data["retry_after_seconds"] = self.retry_after_seconds
        return data


class MalformedResponseError(ProviderError):
    """Response body could not be parsed or has an unexpected shape."""

    kind = ProviderErrorKind.MALFORMED

    def __init__(
        self,
        message: str,
        adapter_name: Optional[str] = None,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
        original_error: Optional[Exception] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, adapter_name, status_code, original_error, context)
        self.response_body = response_body

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data = super().to_dict()
        data["response_body"] = self.response_body[:500] if self.response_body else None
        return data


class UnauthorizedError(ProviderError):
    """Credentials missing, invalid, or rejected."""
    kind = ProviderErrorKind.UNAUTHORIZED
