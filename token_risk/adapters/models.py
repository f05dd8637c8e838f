"""
Provider Adapter Models - Request options, results and metadata.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from token_risk.adapters.exceptions import ProviderError


class SourceName(str, Enum):
    """Data sources, in fixed dispatch and normalization order."""
    CHAIN_STATE = "chain_state"
    TOKEN_METADATA = "token_metadata"
    HOLDERS = "holders"
    DEX_PAIRS = "dex_pairs"
    TRANSACTIONS = "transactions"
    SOCIAL_SUMMARY = "social_summary"
    SOCIAL_POSTS = "social_posts"
    WEIGHTED_SENTIMENT = "weighted_sentiment"
    MARKET_OVERVIEW = "market_overview"

    @classmethod
    def ordered(cls) -> list["SourceName"]:
        return list(cls)


class IdentifierKind(str, Enum):
    """What an adapter expects as its identifier."""
    ADDRESS = "address"
    SYMBOL = "symbol"
    SLUG = "slug"
    SEARCH_QUERY = "search_query"


@dataclass(frozen=True)
class FetchOptions:
    """Per-call pagination and credential overrides."""
    limit: Optional[int] = None
    page: int = 1
    api_key: Optional[str] = None

    def validate(self) -> None:
        if self.limit is not None and (self.limit < 1 or self.limit > 500):
            raise ValueError("limit must be between 1 and 500")
        if self.page < 1:
            raise ValueError("page must be >= 1")


@dataclass(frozen=True)
class FetchResult:
    """Outcome of one adapter call: a payload or a ProviderError."""
    source: SourceName
    adapter_name: str
    payload: Any = None
    error: Optional[ProviderError] = None
    latency_ms: Optional[float] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(
        cls,
        source: SourceName,
        adapter_name: str,
        payload: Any,
        latency_ms: Optional[float] = None,
    ) -> "FetchResult":
        return cls(source=source, adapter_name=adapter_name, payload=payload, latency_ms=latency_ms)

    @classmethod
    def failure(
        cls,
        source: SourceName,
        adapter_name: str,
        error: ProviderError,
        latency_ms: Optional[float] = None,
    ) -> "FetchResult":
        return cls(source=source, adapter_name=adapter_name, error=error, latency_ms=latency_ms)

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source.value,
            "adapter_name": self.adapter_name,
            "ok": self.ok,
            "error": self.error.to_dict() if self.error else None,
            "latency_ms": self.latency_ms,
        }


@dataclass
class AdapterMetadata:
    """Metadata about a provider adapter."""
    name: str
    display_name: str
    source: SourceName
    identifier_kind: IdentifierKind
    requires_api_key: bool = False
    base_url: str = ""
    documentation_url: str = ""
    default_limit: Optional[int] = None
    tags: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "display_name": self.display_name,
            "source": self.source.value,
            "identifier_kind": self.identifier_kind.value,
            "requires_api_key": self.requires_api_key,
            "base_url": self.base_url,
            "documentation_url": self.documentation_url,
            "default_limit": self.default_limit,
            "tags": self.tags,
        }
