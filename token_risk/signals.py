"""
Signals - Normalized, provider-independent facts.

Units:
- Token amounts: Decimal, whole-token units (raw / 10**decimals)
- Percentages: Decimal in [0, 100]
- USD values: Decimal
- Counts: int
- Sentiment: Decimal in [0, 1] (relative) or provider scale (weighted)
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterable, Iterator, Mapping, Optional


class SignalKind(str, Enum):
    """All signal kinds the normalizers can produce."""

    # Chain state
    MINT_AUTHORITY_ACTIVE = "MintAuthorityActive"
    MINT_AUTHORITY_ADDRESS = "MintAuthorityAddress"
    FREEZE_AUTHORITY_ACTIVE = "FreezeAuthorityActive"
    FREEZE_AUTHORITY_ADDRESS = "FreezeAuthorityAddress"
    DECIMALS = "Decimals"
    TOTAL_SUPPLY = "TotalSupply"

    # Metadata
    CREATOR_ADDRESS = "CreatorAddress"
    CREATOR_SHARE_PERCENT = "CreatorSharePercent"
    HOLDER_COUNT = "HolderCount"
    TOKEN_NAME = "TokenName"
    TOKEN_DESCRIPTION = "TokenDescription"

    # Distribution
    TOP10_HOLDER_SHARE = "Top10HolderShare"
    SAMPLED_HOLDER_COUNT = "SampledHolderCount"
    VESTING_BALANCE = "VestingBalance"
    ESTIMATED_CIRCULATING_SUPPLY = "EstimatedCirculatingSupply"

    # Liquidity
    DEX_PAIR_COUNT = "DexPairCount"
    LIQUIDITY_USD = "LiquidityUSD"
    VOLUME_24H_USD = "Volume24hUSD"
    MAIN_PAIR_DEX = "MainPairDex"
    MAIN_PAIR_ADDRESS = "MainPairAddress"

    # Transactions
    RECENT_TX_COUNT = "RecentTxCount"
    POTENTIAL_SELL_COUNT = "PotentialSellCount"
    LARGE_DUMP_COUNT = "LargeDumpCount"
    BURN_COUNT = "BurnCount"
    BURNED_AMOUNT = "BurnedAmount"
    MINT_EVENT_COUNT = "MintEventCount"

    # Social summary
    RELATIVE_SENTIMENT = "RelativeSentiment"
    GALAXY_SCORE = "GalaxyScore"
    SOCIAL_VOLUME = "SocialVolume"
    SOCIAL_ENGAGEMENT = "SocialEngagement"
    TOP_INFLUENCERS = "TopInfluencers"

    # Social posts
    POST_COUNT = "PostCount"
    DUPLICATE_POST_COUNT = "DuplicatePostCount"
    DUPLICATE_POST_RATIO = "DuplicatePostRatio"
    POST_KEYWORD_TONE = "PostKeywordTone"

    # Weighted sentiment
    WEIGHTED_SENTIMENT_LATEST = "WeightedSentimentLatest"
    WEIGHTED_SENTIMENT_SERIES = "WeightedSentimentSeries"

    # Market overview
    LIQUIDITY_LOCKED = "LiquidityLocked"
    MARKET_CAP_USD = "MarketCapUSD"


@dataclass(frozen=True)
class Signal:
    """One normalized fact. Value objects; never partially populated."""
    kind: SignalKind
    value: Any

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "value": to_plain(self.value)}


class SignalSet:
    """
    Immutable mapping of SignalKind -> Signal.

    A kind is either present or absent. Rules must check presence before
    reading a value; absence is never treated as evidence of risk.
    """

    __slots__ = ("_signals",)

    def __init__(self, signals: Iterable[Signal] = ()) -> None:
        collected: dict[SignalKind, Signal] = {}
        for signal in signals:
            if signal.kind in collected:
                raise ValueError(f"Duplicate signal kind {signal.kind.value}")
            collected[signal.kind] = signal
        self._signals: Mapping[SignalKind, Signal] = MappingProxyType(collected)

    @classmethod
    def of(cls, **values: Any) -> "SignalSet":
        """Build from keyword arguments named after SignalKind members."""
        return cls(Signal(SignalKind[name], value) for name, value in values.items())

    def has(self, kind: SignalKind) -> bool:
        return kind in self._signals

    def get(self, kind: SignalKind) -> Optional[Signal]:
        return self._signals.get(kind)

    def value(self, kind: SignalKind, default: Any = None) -> Any:
        signal = self._signals.get(kind)
        return signal.value if signal is not None else default

    def union(self, other: "SignalSet") -> "SignalSet":
        """Merge; kinds already present here win over kinds from other."""
        merged = dict(self._signals)
        for kind, signal in other._signals.items():
            merged.setdefault(kind, signal)
        return SignalSet(merged.values())

    def kinds(self) -> list[SignalKind]:
        return list(self._signals)

    def __iter__(self) -> Iterator[Signal]:
        return iter(self._signals.values())

    def __len__(self) -> int:
        return len(self._signals)

    def __contains__(self, kind: object) -> bool:
        return kind in self._signals

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SignalSet):
            return NotImplemented
        return dict(self._signals) == dict(other._signals)

    def __repr__(self) -> str:
        inner = ", ".join(f"{k.value}={s.value!r}" for k, s in self._signals.items())
        return f"SignalSet({inner})"


def to_plain(value: Any) -> Any:
    """Convert signal values into JSON-friendly primitives."""
    if isinstance(value, Decimal):
        if value == value.to_integral_value():
            return int(value)
        return float(value)
    if isinstance(value, (list, tuple)):
        return [to_plain(v) for v in value]
    if isinstance(value, dict):
        return {k: to_plain(v) for k, v in value.items()}
    if isinstance(value, Enum):
        return value.value
    return value
