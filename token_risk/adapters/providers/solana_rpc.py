"""
Solana RPC Chain State Adapter.

Reads the SPL mint account through JSON-RPC getAccountInfo with jsonParsed
encoding. Any public or private RPC endpoint works; set SOLANA_RPC_URL to
use a dedicated provider (Helius, QuickNode, ...).
"""

import logging
from typing import Any, Optional

import aiohttp

from token_risk.adapters.base import BaseProviderAdapter
from token_risk.adapters.exceptions import (
    MalformedResponseError,
    NotFoundError,
    ProviderUnavailableError,
    RateLimitError,
)
from token_risk.adapters.models import (
    AdapterMetadata,
    FetchOptions,
    IdentifierKind,
    SourceName,
)


logger = logging.getLogger(__name__)


class SolanaRpcAdapter(BaseProviderAdapter):
    """
    Chain state reader: decimals, supply and mint/freeze authorities.

    Payload shape:
        {"decimals": int, "supply": str, "mintAuthority": str | None,
         "freezeAuthority": str | None}
    """

    DEFAULT_RPC_URL = "https://api.mainnet-beta.solana.com"

    # JSON-RPC server error codes that indicate throttling
    RATE_LIMIT_CODES = {429, -32005}

    def __init__(
        self,
        rpc_url: Optional[str] = None,
        timeout: float = BaseProviderAdapter.DEFAULT_TIMEOUT,
        session: Optional[aiohttp.ClientSession] = None,
        commitment: str = "confirmed",
    ) -> None:
        super().__init__(None, timeout, session, rpc_url or self.DEFAULT_RPC_URL)
        self._commitment = commitment

    @property
    def name(self) -> str:
        return "solana_rpc"

    @property
    def source(self) -> SourceName:
        return SourceName.CHAIN_STATE

    def metadata(self) -> AdapterMetadata:
        return AdapterMetadata(
            name=self.name,
            display_name="Solana JSON-RPC",
            source=self.source,
            identifier_kind=IdentifierKind.ADDRESS,
            requires_api_key=False,
            base_url=self._base_url,
            documentation_url="https://solana.com/docs/rpc/http/getaccountinfo",
            tags=["solana", "rpc", "onchain"],
        )

    async def fetch_raw(
        self,
        identifier: str,
        options: FetchOptions,
    ) -> dict[str, Any]:
        body = {
            "jsonrpc": "2.0",
            "id": 1,
            "method": "getAccountInfo",
            "params": [
                identifier,
                {"encoding": "jsonParsed", "commitment": self._commitment},
            ],
        }
        response = self._expect_dict(
            await self._make_request("POST", self._base_url, json_body=body),
            "JSON-RPC response",
        )

        if "error" in response:
            error = response.get("error") or {}
            code = error.get("code") if isinstance(error, dict) else None
            message = error.get("message", str(error)) if isinstance(error, dict) else str(error)
            if code in self.RATE_LIMIT_CODES:
                raise RateLimitError(
                    message=f"RPC rate limited: {message}",
                    adapter_name=self.name,
                )
            raise ProviderUnavailableError(
                message=f"RPC error {code}: {message}",
                adapter_name=self.name,
            )

        result = self._expect_dict(response.get("result"), "result")
        value = result.get("value")
        if value is None:
            raise NotFoundError(
                message=f"Account {identifier} not found",
                adapter_name=self.name,
            )

        data = self._expect_dict(value, "account value").get("data")
        parsed = data.get("parsed") if isinstance(data, dict) else None
        if not isinstance(parsed, dict) or parsed.get("type") != "mint":
            raise MalformedResponseError(
                message="Account is not a parsed SPL mint",
                adapter_name=self.name,
                response_body=str(value),
            )

        info = self._expect_dict(parsed.get("info"), "mint info")
        return {
            "decimals": info.get("decimals"),
            "supply": info.get("supply"),
            "mintAuthority": info.get("mintAuthority"),
            "freezeAuthority": info.get("freezeAuthority"),
        }
