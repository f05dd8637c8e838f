"""
Provider Adapters Package - One adapter per token data source.

Features:
- Uniform fetch(identifier, options) -> FetchResult contract
- Expected failures returned as ProviderError kinds, never raised
- Injected aiohttp session, or one session per call
- No retries, no caching, no mutable state

Quick Start:
    from token_risk.adapters import (
        DexScreenerAdapter,
        FetchOptions,
        SolanaRpcAdapter,
    )

    async def get_pairs(address):
        async with aiohttp.ClientSession() as session:
            adapter = DexScreenerAdapter(session=session)
            result = await adapter.fetch(address)

            if result.ok:
                print(f"Pairs: {len(result.payload)}")
            else:
                print(f"{result.error.kind.value}: {result.error.message}")

Sources:
- chain_state: SolanaRpcAdapter
- token_metadata / holders / transactions: Solscan adapters
- dex_pairs: DexScreenerAdapter
- social_summary: LunarCrushAdapter (API key)
- social_posts: TwitterSearchAdapter (bearer token)
- weighted_sentiment: SantimentAdapter (optional API key)
- market_overview: BirdeyeOverviewAdapter (API key)

Adding New Adapters:
    class NewAdapter(BaseProviderAdapter):
        @property
        def name(self) -> str:
            return "new_adapter"

        @property
        def source(self) -> SourceName: ...

        async def fetch_raw(self, identifier, options): ...
        def metadata(self): ...

    providers.register(NewAdapter())
"""

from token_risk.adapters.base import BaseProviderAdapter
from token_risk.adapters.exceptions import (
    MalformedResponseError,
    NotFoundError,
    ProviderError,
    ProviderErrorKind,
    ProviderUnavailableError,
    RateLimitError,
    UnauthorizedError,
)
from token_risk.adapters.models import (
    AdapterMetadata,
    FetchOptions,
    FetchResult,
    IdentifierKind,
    SourceName,
)
from token_risk.adapters.providers import (
    BirdeyeOverviewAdapter,
    DexScreenerAdapter,
    LunarCrushAdapter,
    SantimentAdapter,
    SolanaRpcAdapter,
    SolscanHoldersAdapter,
    SolscanMetaAdapter,
    SolscanTransactionsAdapter,
    TwitterSearchAdapter,
)
from token_risk.adapters.registry import ProviderSet, build_default_providers


__all__ = [
    # Base
    "BaseProviderAdapter",
    # Exceptions
    "MalformedResponseError",
    "NotFoundError",
    "ProviderError",
    "ProviderErrorKind",
    "ProviderUnavailableError",
    "RateLimitError",
    "UnauthorizedError",
    # Models
    "AdapterMetadata",
    "FetchOptions",
    "FetchResult",
    "IdentifierKind",
    "SourceName",
    # Providers
    "BirdeyeOverviewAdapter",
    "DexScreenerAdapter",
    "LunarCrushAdapter",
    "SantimentAdapter",
    "SolanaRpcAdapter",
    "SolscanHoldersAdapter",
    "SolscanMetaAdapter",
    "SolscanTransactionsAdapter",
    "TwitterSearchAdapter",
    # Registry
    "ProviderSet",
    "build_default_providers",
]
