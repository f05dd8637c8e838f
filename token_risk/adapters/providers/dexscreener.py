"""
DEXScreener Pair Adapter - Free public API, no key.

Returns every pair listing the token across Solana DEXes.
"""

import logging
from typing import Any, Optional

import aiohttp

from token_risk.adapters.base import BaseProviderAdapter
from token_risk.adapters.models import (
    AdapterMetadata,
    FetchOptions,
    IdentifierKind,
    SourceName,
)


logger = logging.getLogger(__name__)


class DexScreenerAdapter(BaseProviderAdapter):
    """DEX pair reader: dexId, pairAddress, liquidity.usd, volume.h24."""

    DEFAULT_BASE_URL = "https://api.dexscreener.com/latest/dex"

    def __init__(
        self,
        timeout: float = BaseProviderAdapter.DEFAULT_TIMEOUT,
        session: Optional[aiohttp.ClientSession] = None,
        base_url: Optional[str] = None,
    ) -> None:
        super().__init__(None, timeout, session, base_url or self.DEFAULT_BASE_URL)

    @property
    def name(self) -> str:
        return "dexscreener"

    @property
    def source(self) -> SourceName:
        return SourceName.DEX_PAIRS

    def metadata(self) -> AdapterMetadata:
        return AdapterMetadata(
            name=self.name,
            display_name="DEXScreener",
            source=self.source,
            identifier_kind=IdentifierKind.ADDRESS,
            base_url=self._base_url,
            documentation_url="https://docs.dexscreener.com/api/reference",
            tags=["dex", "liquidity", "pairs"],
        )

    async def fetch_raw(
        self,
        identifier: str,
        options: FetchOptions,
    ) -> list[dict[str, Any]]:
        response = self._expect_dict(
            await self._make_request("GET", f"{self._base_url}/tokens/{identifier}"),
            "DEXScreener response",
        )
        # "pairs" is null when the token has no pools
        return self._expect_list(response.get("pairs") or [], "pairs")
