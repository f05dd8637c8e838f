"""
LunarCrush Social Summary Adapter.

Requires a free API key (lunarcrush.com/developers). Provides relative
sentiment, galaxy score, social volume and engagement per symbol.
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


class LunarCrushAdapter(BaseProviderAdapter):
    """Social metrics reader keyed by token symbol."""

    DEFAULT_BASE_URL = "https://api.lunarcrush.com/v2"

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
        return "lunarcrush"

    @property
    def source(self) -> SourceName:
        return SourceName.SOCIAL_SUMMARY

    def metadata(self) -> AdapterMetadata:
        return AdapterMetadata(
            name=self.name,
            display_name="LunarCrush",
            source=self.source,
            identifier_kind=IdentifierKind.SYMBOL,
            requires_api_key=True,
            base_url=self._base_url,
            documentation_url="https://lunarcrush.com/developers/api",
            tags=["social", "sentiment"],
        )

    async def fetch_raw(
        self,
        identifier: str,
        options: FetchOptions,
    ) -> dict[str, Any]:
        response = self._expect_dict(
            await self._make_request(
                "GET",
                self._base_url,
                params={
                    "data": "meta",
                    "symbol": identifier,
                    "key": self._resolve_api_key(options),
                },
            ),
            "LunarCrush response",
        )
        entries = self._expect_list(response.get("data") or [], "data")
        if not entries:
            raise NotFoundError(
                message=f"No social data for {identifier}",
                adapter_name=self.name,
            )
        return self._expect_dict(entries[0], "social entry")
