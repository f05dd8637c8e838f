"""
Provider Set - Which adapter serves which data source.

The engine receives its adapters through a ProviderSet; nothing in the
package holds a process-wide client. The chain-state adapter is
mandatory, every other source is optional.
"""

import logging
from typing import Iterator, Optional

import aiohttp

from token_risk.adapters.base import BaseProviderAdapter
from token_risk.adapters.models import SourceName
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
from token_risk.config import EngineConfig


logger = logging.getLogger(__name__)


class ProviderSet:
    """
    Adapters keyed by the source they serve.

    Usage:
        providers = ProviderSet()
        providers.register(SolanaRpcAdapter())
        providers.register(DexScreenerAdapter(session=session))

        adapter = providers.get(SourceName.DEX_PAIRS)
    """

    def __init__(self, *adapters: BaseProviderAdapter) -> None:
        self._adapters: dict[SourceName, BaseProviderAdapter] = {}
        for adapter in adapters:
            self.register(adapter)

    def register(self, adapter: BaseProviderAdapter) -> None:
        source = adapter.source
        if source in self._adapters:
            logger.warning(
                f"Source '{source.value}' already served by "
                f"'{self._adapters[source].name}', replacing with '{adapter.name}'"
            )
        self._adapters[source] = adapter
        logger.debug(f"Registered adapter '{adapter.name}' for source '{source.value}'")

    def unregister(self, source: SourceName) -> Optional[BaseProviderAdapter]:
        return self._adapters.pop(source, None)

    def get(self, source: SourceName) -> Optional[BaseProviderAdapter]:
        return self._adapters.get(source)

    def sources(self) -> list[SourceName]:
        """Registered sources in fixed dispatch order."""
        return [source for source in SourceName.ordered() if source in self._adapters]

    def __contains__(self, source: object) -> bool:
        return source in self._adapters

    def __iter__(self) -> Iterator[BaseProviderAdapter]:
        return (self._adapters[source] for source in self.sources())

    def __len__(self) -> int:
        return len(self._adapters)

    @classmethod
    def from_config(
        cls,
        config: EngineConfig,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> "ProviderSet":
        """
        Build the default adapter set.

        Keyed social and market adapters are always registered; without
        credentials they report is_configured() == False and the engine
        marks their sections as not configured.
        """
        credentials = config.credentials
        timeout = config.provider_timeout_seconds

        return cls(
            SolanaRpcAdapter(rpc_url=credentials.solana_rpc_url, timeout=timeout, session=session),
            SolscanMetaAdapter(api_key=credentials.solscan_api_key, timeout=timeout, session=session),
            SolscanHoldersAdapter(api_key=credentials.solscan_api_key, timeout=timeout, session=session),
            DexScreenerAdapter(timeout=timeout, session=session),
            SolscanTransactionsAdapter(api_key=credentials.solscan_api_key, timeout=timeout, session=session),
            LunarCrushAdapter(api_key=credentials.lunarcrush_api_key, timeout=timeout, session=session),
            TwitterSearchAdapter(bearer_token=credentials.twitter_bearer_token, timeout=timeout, session=session),
            SantimentAdapter(api_key=credentials.santiment_api_key, timeout=timeout, session=session),
            BirdeyeOverviewAdapter(api_key=credentials.birdeye_api_key, timeout=timeout, session=session),
        )


def build_default_providers(
    config: Optional[EngineConfig] = None,
    session: Optional[aiohttp.ClientSession] = None,
) -> ProviderSet:
    """Build the default ProviderSet from configuration."""
    return ProviderSet.from_config(config or EngineConfig(), session)
