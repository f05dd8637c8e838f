"""
Birdeye Token Overview Adapter.

Requires an API key. Supplies LP lock status and market cap.
"""

import logging
from typing import Any, Optional

import aiohttp

from token_risk.adapters.base import BaseProviderAdapter
from token_risk.adapters.exceptions import NotFoundError
from token_risk.adapters.models import (
    AdapterMetadata,
    FetchOptions,
    IdentifierKind,
    SourceName,
)


logger = logging.getLogger(__name__)


class BirdeyeOverviewAdapter(BaseProviderAdapter):
    """Market overview reader keyed by token address."""

    DEFAULT_BASE_URL = "https://public-api.birdeye.so/defi"

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout: float = BaseProviderAdapter.DEFAULT_TIMEOUT,
        session: Optional[aiohttp.ClientSession] = None,
        base_url: Optional[str] = None,
    ) -> None:
        super().__init__(api_key, timeout, session, base_url or self.DEFAULT_BASE_URL)

    @property
    def name(self) -> str:
        return "birdeye"

    @property
    def source(self) -> SourceName:
        return SourceName.MARKET_OVERVIEW

    def metadata(self) -> AdapterMetadata:
        return AdapterMetadata(
            name=self.name,
            display_name="Birdeye Token Overview",
            source=self.source,
            identifier_kind=IdentifierKind.ADDRESS,
            requires_api_key=True,
            base_url=self._base_url,
            documentation_url="https://docs.birdeye.so/",
            tags=["solana", "market", "liquidity"],
        )

    async def fetch_raw(
        self,
        identifier: str,
        options: FetchOptions,
    ) -> dict[str, Any]:
        response = self._expect_dict(
            await self._make_request(
                "GET",
                f"{self._base_url}/token_overview",
                params={"address": identifier},
                headers={
                    "X-API-KEY": self._resolve_api_key(options),
                    "x-chain": "solana",
                },
            ),
            "Birdeye response",
        )
        data = response.get("data")
        if not data:
            raise NotFoundError(
                message=f"No overview for {identifier}",
                adapter_name=self.name,
            )
        return self._expect_dict(data, "overview")
