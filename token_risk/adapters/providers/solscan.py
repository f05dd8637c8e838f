"""
Solscan Adapters - Token metadata, holders and recent transactions.

Public v2.0 endpoints, rate limited without an account. Responses are
wrapped as {"success": bool, "data": ...}; adapters return the unwrapped
data.
"""

import logging
from typing import Any, Optional

import aiohttp

from token_risk.adapters.base import BaseProviderAdapter
from token_risk.adapters.exceptions import (
    MalformedResponseError,
    NotFoundError,
)
from token_risk.adapters.models import (
    AdapterMetadata,
    FetchOptions,
    IdentifierKind,
    SourceName,
)


logger = logging.getLogger(__name__)


class SolscanAdapter(BaseProviderAdapter):
    """Shared envelope handling for the Solscan endpoints."""

    DEFAULT_BASE_URL = "https://api.solscan.io/v2.0"

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout: float = BaseProviderAdapter.DEFAULT_TIMEOUT,
        session: Optional[aiohttp.ClientSession] = None,
        base_url: Optional[str] = None,
    ) -> None:
        super().__init__(api_key, timeout, session, base_url or self.DEFAULT_BASE_URL)

    def _headers(self, options: FetchOptions) -> Optional[dict[str, str]]:
        api_key = self._resolve_api_key(options)
        return {"token": api_key} if api_key else None

    async def _get_data(
        self,
        path: str,
        params: dict[str, Any],
        options: FetchOptions,
    ) -> Any:
        response = self._expect_dict(
            await self._make_request(
                "GET",
                f"{self._base_url}{path}",
                params=params,
                headers=self._headers(options),
            ),
            "Solscan response",
        )
        if response.get("success") is False:
            raise MalformedResponseError(
                message=f"Solscan error: {response.get('errors') or response.get('message')}",
                adapter_name=self.name,
                response_body=str(response),
            )
        if "data" not in response:
            raise MalformedResponseError(
                message="Solscan response has no data field",
                adapter_name=self.name,
                response_body=str(response),
            )
        return response["data"]


class SolscanMetaAdapter(SolscanAdapter):
    """Token metadata reader: creator, supply, decimals, holder count, name."""

    @property
    def name(self) -> str:
        return "solscan_meta"

    @property
    def source(self) -> SourceName:
        return SourceName.TOKEN_METADATA

    def metadata(self) -> AdapterMetadata:
        return AdapterMetadata(
            name=self.name,
            display_name="Solscan Token Meta",
            source=self.source,
            identifier_kind=IdentifierKind.ADDRESS,
            base_url=self._base_url,
            documentation_url="https://pro-api.solscan.io/pro-api-docs/v2.0",
            tags=["solana", "explorer", "metadata"],
        )

    async def fetch_raw(
        self,
        identifier: str,
        options: FetchOptions,
    ) -> dict[str, Any]:
        data = await self._get_data("/token/meta", {"address": identifier}, options)
        if not data:
            raise NotFoundError(
                message=f"No metadata for {identifier}",
                adapter_name=self.name,
            )
        return self._expect_dict(data, "token meta")


class SolscanHoldersAdapter(SolscanAdapter):
    """Holder list reader, ordered by descending balance."""

    DEFAULT_LIMIT = 10

    @property
    def name(self) -> str:
        return "solscan_holders"

    @property
    def source(self) -> SourceName:
        return SourceName.HOLDERS

    def metadata(self) -> AdapterMetadata:
        return AdapterMetadata(
            name=self.name,
            display_name="Solscan Token Holders",
            source=self.source,
            identifier_kind=IdentifierKind.ADDRESS,
            base_url=self._base_url,
            documentation_url="https://pro-api.solscan.io/pro-api-docs/v2.0",
            default_limit=self.DEFAULT_LIMIT,
            tags=["solana", "explorer", "holders"],
        )

    async def fetch_raw(
        self,
        identifier: str,
        options: FetchOptions,
    ) -> list[dict[str, Any]]:
        data = await self._get_data(
            "/token/holders",
            {
                "address": identifier,
                "page": options.page,
                "page_size": options.limit or self.DEFAULT_LIMIT,
            },
            options,
        )
        # Some deployments nest the list as {"items": [...], "total": n}
        if isinstance(data, dict) and "items" in data:
            data = data["items"]
        return self._expect_list(data or [], "holders")


class SolscanTransactionsAdapter(SolscanAdapter):
    """Recent token transaction reader."""

    DEFAULT_LIMIT = 20

    @property
    def name(self) -> str:
        return "solscan_txns"

    @property
    def source(self) -> SourceName:
        return SourceName.TRANSACTIONS

    def metadata(self) -> AdapterMetadata:
        return AdapterMetadata(
            name=self.name,
            display_name="Solscan Token Transactions",
            source=self.source,
            identifier_kind=IdentifierKind.ADDRESS,
            base_url=self._base_url,
            documentation_url="https://pro-api.solscan.io/pro-api-docs/v2.0",
            default_limit=self.DEFAULT_LIMIT,
            tags=["solana", "explorer", "transactions"],
        )

    async def fetch_raw(
        self,
        identifier: str,
        options: FetchOptions,
    ) -> list[dict[str, Any]]:
        data = await self._get_data(
            "/token/txns",
            {"address": identifier, "limit": options.limit or self.DEFAULT_LIMIT},
            options,
        )
        return self._expect_list(data or [], "transactions")
