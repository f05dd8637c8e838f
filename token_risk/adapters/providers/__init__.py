"""
Providers package - Provider adapter implementations.
"""

from token_risk.adapters.providers.birdeye import BirdeyeOverviewAdapter
from token_risk.adapters.providers.dexscreener import DexScreenerAdapter
from token_risk.adapters.providers.lunarcrush import LunarCrushAdapter
from token_risk.adapters.providers.santiment import SantimentAdapter
from token_risk.adapters.providers.solana_rpc import SolanaRpcAdapter
from token_risk.adapters.providers.solscan import (
    SolscanAdapter,
    SolscanHoldersAdapter,
    SolscanMetaAdapter,
    SolscanTransactionsAdapter,
)
from token_risk.adapters.providers.twitter import TwitterSearchAdapter


__all__ = [
    "BirdeyeOverviewAdapter",
    "DexScreenerAdapter",
    "LunarCrushAdapter",
    "SantimentAdapter",
    "SolanaRpcAdapter",
    "SolscanAdapter",
    "SolscanHoldersAdapter",
    "SolscanMetaAdapter",
    "SolscanTransactionsAdapter",
    "TwitterSearchAdapter",
]
