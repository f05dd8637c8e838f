"""
Engine Exceptions.

Provider failures live in token_risk.adapters.exceptions. The errors here
cover identifier validation, configuration and normalization.
"""

from enum import Enum
from typing import Any, Optional


class TokenRiskError(Exception):
    """Base exception for the risk aggregation engine."""

    def __init__(
        self,
        message: str,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
        }


class InvalidIdentifierError(TokenRiskError):
    """Token address or symbol is malformed. Fatal for the run."""

    def __init__(
        self,
        message: str,
        identifier: Optional[str] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, context)
        self.identifier = identifier


class ConfigurationErrorKind(str, Enum):
    MISSING_CREDENTIALS = "MissingCredentials"


class ConfigurationError(TokenRiskError):
    """Optional source cannot be engaged. Degrades to a report note."""

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        kind: ConfigurationErrorKind = ConfigurationErrorKind.MISSING_CREDENTIALS,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, context)
        self.source = source
        self.kind = kind

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update({"source": self.source, "kind": self.kind.value})
        return data


class NormalizationErrorKind(str, Enum):
    MISSING_FIELD = "MissingField"
    DIVIDE_BY_ZERO = "DivideByZero"
    OUT_OF_RANGE = "OutOfRange"


class NormalizationError(TokenRiskError):
    """Raw payload cannot be converted into signals."""

    def __init__(
        self,
        message: str,
        kind: NormalizationErrorKind,
        field_name: Optional[str] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, context)
        self.kind = kind
        self.field_name = field_name

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update({"kind": self.kind.value, "field_name": self.field_name})
        return data

    def __str__(self) -> str:
        if self.field_name:
            return f"{self.kind.value}: {self.message} [field={self.field_name}]"
        return f"{self.kind.value}: {self.message}"
