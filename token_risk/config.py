"""
Token Risk Engine - Configuration.

============================================================
PURPOSE
============================================================
Threshold table, provider credentials and run settings.

All thresholds live in one canonical table. Liquidity uses a
single $20k cut-off for "tiny" pools.

============================================================
THRESHOLD RATIONALE
============================================================
Authorities:
- Active mint authority (+30): supply can be inflated at will
- Active freeze authority (+20): holder balances can be frozen

Distribution:
- Creator share above 10% (+15)
- Top-10 share above 50% is HIGH (+25)
- Top-10 share in (20%, 50%] is MODERATE (+10)

Liquidity:
- Main pair under $20k is tiny (+25)
- No pairs at all (+30)

Transactions:
- More than 2 transfers above the dump threshold (+20)
- Dump and sell thresholds are whole-token amounts

Social (flag only):
- Relative sentiment below 0.4 is bearish
- Duplicate post ratio above 0.1 suggests bots

============================================================
"""

import os
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple
from urllib.parse import urlsplit

from dotenv import load_dotenv


# ============================================================
# RULE THRESHOLDS
# ============================================================


@dataclass(frozen=True)
class RuleThresholds:
    """Canonical heuristic thresholds and score deltas."""

    # Authorities
    mint_authority_delta: int = 30
    freeze_authority_delta: int = 20

    # Creator share (percent of supply)
    creator_share_pct: Decimal = Decimal("10")
    creator_share_delta: int = 15

    # Liquidity (USD)
    tiny_liquidity_usd: Decimal = Decimal("20000")
    tiny_liquidity_delta: int = 25
    no_liquidity_delta: int = 30

    # Top-10 concentration (percent of supply)
    high_concentration_pct: Decimal = Decimal("50")
    high_concentration_delta: int = 25
    moderate_concentration_pct: Decimal = Decimal("20")
    moderate_concentration_delta: int = 10

    # Transfers (whole-token units)
    potential_sell_tokens: Decimal = Decimal("1000000")
    large_dump_tokens: Decimal = Decimal("10000000")
    large_dump_min_count: int = 2              # fires when count > this
    large_dump_delta: int = 20

    # Social
    bearish_sentiment_below: Decimal = Decimal("0.4")
    bot_duplicate_ratio: Decimal = Decimal("0.1")
    high_social_volume: int = 1000
    twitter_hype_posts: int = 20               # hype when post count > this
    twitter_hype_tone: Decimal = Decimal("1")

    # Supplementary rules
    mintable_liquidity_delta: int = 0

    def __post_init__(self) -> None:
        if self.moderate_concentration_pct >= self.high_concentration_pct:
            raise ValueError("moderate_concentration_pct must be below high_concentration_pct")
        if self.potential_sell_tokens > self.large_dump_tokens:
            raise ValueError("potential_sell_tokens must not exceed large_dump_tokens")
        if not Decimal("0") <= self.bot_duplicate_ratio <= Decimal("1"):
            raise ValueError("bot_duplicate_ratio must be within [0, 1]")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mint_authority_delta": self.mint_authority_delta,
            "freeze_authority_delta": self.freeze_authority_delta,
            "creator_share_pct": str(self.creator_share_pct),
            "creator_share_delta": self.creator_share_delta,
            "tiny_liquidity_usd": str(self.tiny_liquidity_usd),
            "tiny_liquidity_delta": self.tiny_liquidity_delta,
            "no_liquidity_delta": self.no_liquidity_delta,
            "high_concentration_pct": str(self.high_concentration_pct),
            "high_concentration_delta": self.high_concentration_delta,
            "moderate_concentration_pct": str(self.moderate_concentration_pct),
            "moderate_concentration_delta": self.moderate_concentration_delta,
            "potential_sell_tokens": str(self.potential_sell_tokens),
            "large_dump_tokens": str(self.large_dump_tokens),
            "large_dump_min_count": self.large_dump_min_count,
            "large_dump_delta": self.large_dump_delta,
            "bearish_sentiment_below": str(self.bearish_sentiment_below),
            "bot_duplicate_ratio": str(self.bot_duplicate_ratio),
            "high_social_volume": self.high_social_volume,
            "twitter_hype_posts": self.twitter_hype_posts,
            "twitter_hype_tone": str(self.twitter_hype_tone),
            "mintable_liquidity_delta": self.mintable_liquidity_delta,
        }


# ============================================================
# PROVIDER CREDENTIALS
# ============================================================


def _redact_url(url: Optional[str]) -> Optional[str]:
    """Keep scheme and host only; RPC providers embed keys in path or query."""
    if not url:
        return None
    parsed = urlsplit(url)
    if not parsed.hostname:
        return "<redacted>"
    return f"{parsed.scheme}://{parsed.hostname}"


@dataclass(frozen=True)
class ProviderCredentials:
    """
    Endpoints and keys for external providers.

    LunarCrush, Twitter and Birdeye are engaged only when their key is
    present. Santiment runs on its free tier without a key.
    """

    solana_rpc_url: Optional[str] = None
    solscan_api_key: Optional[str] = None
    lunarcrush_api_key: Optional[str] = None
    twitter_bearer_token: Optional[str] = None
    santiment_api_key: Optional[str] = None
    birdeye_api_key: Optional[str] = None

    @classmethod
    def from_env(cls) -> "ProviderCredentials":
        return cls(
            solana_rpc_url=os.getenv("SOLANA_RPC_URL") or None,
            solscan_api_key=os.getenv("SOLSCAN_API_KEY") or None,
            lunarcrush_api_key=os.getenv("LUNARCRUSH_API_KEY") or None,
            twitter_bearer_token=os.getenv("TWITTER_BEARER_TOKEN") or None,
            santiment_api_key=os.getenv("SANTIMENT_API_KEY") or None,
            birdeye_api_key=os.getenv("BIRDEYE_API_KEY") or None,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Report which credentials are set, never their values."""
        return {
            "solana_rpc_url": _redact_url(self.solana_rpc_url),
            "solscan_api_key": bool(self.solscan_api_key),
            "lunarcrush_api_key": bool(self.lunarcrush_api_key),
            "twitter_bearer_token": bool(self.twitter_bearer_token),
            "santiment_api_key": bool(self.santiment_api_key),
            "birdeye_api_key": bool(self.birdeye_api_key),
        }


# ============================================================
# ENGINE CONFIGURATION
# ============================================================


@dataclass(frozen=True)
class EngineConfig:
    """Main configuration for the risk aggregation engine."""

    thresholds: RuleThresholds = field(default_factory=RuleThresholds)
    credentials: ProviderCredentials = field(default_factory=ProviderCredentials)

    # Timing
    run_deadline_seconds: float = 30.0
    provider_timeout_seconds: float = 10.0

    # Page sizes
    holder_limit: int = 10
    transaction_limit: int = 20
    post_limit: int = 50

    # Known vesting/treasury owners excluded from circulating supply
    vesting_wallets: Tuple[str, ...] = ()

    engine_version: str = "1.0.0"

    def __post_init__(self) -> None:
        if self.run_deadline_seconds <= 0:
            raise ValueError("run_deadline_seconds must be positive")
        if self.provider_timeout_seconds <= 0:
            raise ValueError("provider_timeout_seconds must be positive")
        if self.holder_limit < 10:
            raise ValueError("holder_limit must be at least 10 for top-10 share")

    def with_thresholds(self, **overrides: Any) -> "EngineConfig":
        return replace(self, thresholds=replace(self.thresholds, **overrides))

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> "EngineConfig":
        """
        Load configuration from environment variables.

        A .env file is loaded first when present. Environment variables:
        - TOKEN_RISK_DEADLINE_SECONDS
        - TOKEN_RISK_PROVIDER_TIMEOUT
        - TOKEN_RISK_LARGE_DUMP_TOKENS
        - TOKEN_RISK_POTENTIAL_SELL_TOKENS (defaults to at most the dump threshold)
        - TOKEN_RISK_BOT_DUPLICATE_RATIO
        - TOKEN_RISK_VESTING_WALLETS (comma separated)
        - provider keys, see ProviderCredentials.from_env
        """
        load_dotenv(dotenv_path)

        thresholds = RuleThresholds()
        large_dump = os.getenv("TOKEN_RISK_LARGE_DUMP_TOKENS")
        potential_sell = os.getenv("TOKEN_RISK_POTENTIAL_SELL_TOKENS")
        if large_dump or potential_sell:
            large_dump_tokens = Decimal(large_dump) if large_dump else thresholds.large_dump_tokens
            if potential_sell:
                potential_sell_tokens = Decimal(potential_sell)
            else:
                # A lowered dump threshold pulls the default sell threshold down with it
                potential_sell_tokens = min(thresholds.potential_sell_tokens, large_dump_tokens)
            thresholds = replace(
                thresholds,
                large_dump_tokens=large_dump_tokens,
                potential_sell_tokens=potential_sell_tokens,
            )
        if os.getenv("TOKEN_RISK_BOT_DUPLICATE_RATIO"):
            thresholds = replace(
                thresholds,
                bot_duplicate_ratio=Decimal(os.getenv("TOKEN_RISK_BOT_DUPLICATE_RATIO")),
            )

        kwargs: Dict[str, Any] = {}
        if os.getenv("TOKEN_RISK_DEADLINE_SECONDS"):
            kwargs["run_deadline_seconds"] = float(os.getenv("TOKEN_RISK_DEADLINE_SECONDS"))
        if os.getenv("TOKEN_RISK_PROVIDER_TIMEOUT"):
            kwargs["provider_timeout_seconds"] = float(os.getenv("TOKEN_RISK_PROVIDER_TIMEOUT"))
        if os.getenv("TOKEN_RISK_VESTING_WALLETS"):
            kwargs["vesting_wallets"] = tuple(
                w.strip() for w in os.getenv("TOKEN_RISK_VESTING_WALLETS").split(",") if w.strip()
            )

        return cls(
            thresholds=thresholds,
            credentials=ProviderCredentials.from_env(),
            **kwargs,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "thresholds": self.thresholds.to_dict(),
            "credentials": self.credentials.to_dict(),
            "run_deadline_seconds": self.run_deadline_seconds,
            "provider_timeout_seconds": self.provider_timeout_seconds,
            "holder_limit": self.holder_limit,
            "transaction_limit": self.transaction_limit,
            "post_limit": self.post_limit,
            "vesting_wallets": list(self.vesting_wallets),
            "engine_version": self.engine_version,
        }


def get_default_config() -> EngineConfig:
    """Get default configuration."""
    return EngineConfig()
