"""
Token Risk Engine - Heuristic Rules.

============================================================
PURPOSE
============================================================
Map signals to (flag, score delta) pairs.

Each rule:
1. Reads only the signals it owns
2. Does nothing when any of them is absent
3. Returns zero or more RuleHits

============================================================
DESIGN PRINCIPLES
============================================================
- Pure: same SignalSet = same hits
- Thresholds injected from RuleThresholds
- Declaration order is flag order
- Absence of a signal is never evidence of risk

============================================================
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from token_risk.config import RuleThresholds
from token_risk.report import RuleHit
from token_risk.signals import SignalKind, SignalSet


# ============================================================
# BASE RULE
# ============================================================


class HeuristicRule(ABC):
    """Abstract base class for heuristic rules."""

    flag: str = ""

    def __init__(self, thresholds: Optional[RuleThresholds] = None):
        self.thresholds = thresholds or RuleThresholds()

    @property
    def name(self) -> str:
        return self.__class__.__name__.replace("Rule", "")

    @abstractmethod
    def evaluate(self, signals: SignalSet) -> List[RuleHit]:
        """Return the hits for this rule, empty when it does not fire."""
        pass

    def _hit(self, delta: int) -> List[RuleHit]:
        return [RuleHit(rule=self.name, flag=self.flag, delta=delta)]

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}>"


# ============================================================
# AUTHORITY RULES
# ============================================================


class MintAuthorityRule(HeuristicRule):
    flag = "Mint authority active"

    def evaluate(self, signals: SignalSet) -> List[RuleHit]:
        if signals.value(SignalKind.MINT_AUTHORITY_ACTIVE) is True:
            return self._hit(self.thresholds.mint_authority_delta)
        return []


class FreezeAuthorityRule(HeuristicRule):
    flag = "Freeze authority active"

    def evaluate(self, signals: SignalSet) -> List[RuleHit]:
        if signals.value(SignalKind.FREEZE_AUTHORITY_ACTIVE) is True:
            return self._hit(self.thresholds.freeze_authority_delta)
        return []


class CreatorShareRule(HeuristicRule):
    flag = "Creator holds >10% share"

    def evaluate(self, signals: SignalSet) -> List[RuleHit]:
        share = signals.value(SignalKind.CREATOR_SHARE_PERCENT)
        if share is not None and share > self.thresholds.creator_share_pct:
            return self._hit(self.thresholds.creator_share_delta)
        return []


# ============================================================
# LIQUIDITY RULES
# ============================================================


class TinyLiquidityRule(HeuristicRule):
    """Main pair exists but its USD depth is below the tiny-pool cut-off."""

    flag = "Tiny LP (<$20k)"

    def evaluate(self, signals: SignalSet) -> List[RuleHit]:
        pair_count = signals.value(SignalKind.DEX_PAIR_COUNT)
        liquidity = signals.value(SignalKind.LIQUIDITY_USD)
        if not pair_count or liquidity is None:
            return []
        if liquidity < self.thresholds.tiny_liquidity_usd:
            return self._hit(self.thresholds.tiny_liquidity_delta)
        return []


class NoLiquidityRule(HeuristicRule):
    flag = "No liquidity pools detected"

    def evaluate(self, signals: SignalSet) -> List[RuleHit]:
        # Only a successful pair lookup returning zero pairs counts
        if signals.value(SignalKind.DEX_PAIR_COUNT) == 0:
            return self._hit(self.thresholds.no_liquidity_delta)
        return []


# ============================================================
# DISTRIBUTION RULES
# ============================================================


class HighConcentrationRule(HeuristicRule):
    flag = "High concentration (>50% in top 10)"

    def evaluate(self, signals: SignalSet) -> List[RuleHit]:
        share = signals.value(SignalKind.TOP10_HOLDER_SHARE)
        if share is not None and share > self.thresholds.high_concentration_pct:
            return self._hit(self.thresholds.high_concentration_delta)
        return []


class ModerateConcentrationRule(HeuristicRule):
    """Fires on (moderate, high]; above high only HighConcentration fires."""

    flag = "Moderate concentration (>20% in top 10)"

    def evaluate(self, signals: SignalSet) -> List[RuleHit]:
        share = signals.value(SignalKind.TOP10_HOLDER_SHARE)
        if share is None:
            return []
        if self.thresholds.moderate_concentration_pct < share <= self.thresholds.high_concentration_pct:
            return self._hit(self.thresholds.moderate_concentration_delta)
        return []


# ============================================================
# TRANSACTION RULES
# ============================================================


class LargeDumpsRule(HeuristicRule):
    flag = "Recent large dumps detected"

    def evaluate(self, signals: SignalSet) -> List[RuleHit]:
        dumps = signals.value(SignalKind.LARGE_DUMP_COUNT)
        if dumps is not None and dumps > self.thresholds.large_dump_min_count:
            return self._hit(self.thresholds.large_dump_delta)
        return []


# ============================================================
# SOCIAL RULES (flag only)
# ============================================================


class BearishSentimentRule(HeuristicRule):
    flag = "Bearish sentiment detected"

    def evaluate(self, signals: SignalSet) -> List[RuleHit]:
        sentiment = signals.value(SignalKind.RELATIVE_SENTIMENT)
        if sentiment is not None and sentiment < self.thresholds.bearish_sentiment_below:
            return self._hit(0)
        return []


class BotActivityRule(HeuristicRule):
    flag = "Potential bot activity detected"

    def evaluate(self, signals: SignalSet) -> List[RuleHit]:
        ratio = signals.value(SignalKind.DUPLICATE_POST_RATIO)
        if ratio is not None and ratio > self.thresholds.bot_duplicate_ratio:
            return self._hit(0)
        return []


# ============================================================
# SUPPLEMENTARY RULES
# ============================================================


class MintableLiquidityRule(HeuristicRule):
    """Active mint authority on a traded token can drain its pools."""

    flag = "Potential LP risk due to active mint"

    def evaluate(self, signals: SignalSet) -> List[RuleHit]:
        if signals.value(SignalKind.MINT_AUTHORITY_ACTIVE) is True and signals.value(SignalKind.DEX_PAIR_COUNT):
            return self._hit(self.thresholds.mintable_liquidity_delta)
        return []


class UnexpectedMintsRule(HeuristicRule):
    flag = "Unexpected mints detected despite renounced authority"

    def evaluate(self, signals: SignalSet) -> List[RuleHit]:
        mints = signals.value(SignalKind.MINT_EVENT_COUNT)
        if mints and signals.value(SignalKind.MINT_AUTHORITY_ACTIVE) is False:
            return self._hit(0)
        return []


class NegativeWeightedSentimentRule(HeuristicRule):
    flag = "Negative weighted sentiment in recent days"

    def evaluate(self, signals: SignalSet) -> List[RuleHit]:
        latest = signals.value(SignalKind.WEIGHTED_SENTIMENT_LATEST)
        if latest is not None and latest < 0:
            return self._hit(0)
        return []


class UnlockedLiquidityRule(HeuristicRule):
    flag = "Unlocked LP - rug pull risk"

    def evaluate(self, signals: SignalSet) -> List[RuleHit]:
        if signals.value(SignalKind.LIQUIDITY_LOCKED) is False:
            return self._hit(0)
        return []


# ============================================================
# RULE TABLE
# ============================================================


RULE_CLASSES = (
    MintAuthorityRule,
    FreezeAuthorityRule,
    CreatorShareRule,
    TinyLiquidityRule,
    NoLiquidityRule,
    HighConcentrationRule,
    ModerateConcentrationRule,
    LargeDumpsRule,
    BearishSentimentRule,
    BotActivityRule,
    MintableLiquidityRule,
    UnexpectedMintsRule,
    NegativeWeightedSentimentRule,
    UnlockedLiquidityRule,
)


def get_default_rules(thresholds: Optional[RuleThresholds] = None) -> List[HeuristicRule]:
    """Instantiate the rule table in declaration order."""
    thresholds = thresholds or RuleThresholds()
    return [rule_class(thresholds) for rule_class in RULE_CLASSES]


def evaluate_rules(rules: List[HeuristicRule], signals: SignalSet) -> List[RuleHit]:
    """Run rules in order and concatenate their hits."""
    hits: List[RuleHit] = []
    for rule in rules:
        hits.extend(rule.evaluate(signals))
    return hits
