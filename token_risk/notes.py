"""
Token Risk Engine - Informational Notes.

Notes never change the score. They record hype indicators, supply
observations and gaps in coverage, in a fixed order.
"""

from typing import Iterable, List, Optional

from token_risk.adapters.exceptions import ProviderErrorKind
from token_risk.config import RuleThresholds
from token_risk.report import ReportSection, RuleHit, SectionResult, SectionStatus
from token_risk.signals import SignalKind, SignalSet, to_plain


HIGH_SOCIAL_VOLUME = "High social mentions detected - potential hype"
TWITTER_HYPE = "Positive Twitter sentiment with high engagement"
DEFLATIONARY = "Deflationary mechanics detected via burns"
MEMECOIN = "Token appears to be a memecoin (hype-driven, high risk)"
UTILITY = "Token may have utility (verify use cases off-chain)"
PROVIDE_VESTING = "Provide known vesting/treasury wallets for better circulating supply estimate"
SANTIMENT_UNLISTED = "Santiment data unavailable (token may not be listed; use for established coins)"
MULTIPLE_SOCIAL_FLAGS = "Multiple risk flags - cross-check with on-chain data for authenticity"
COMMUNITY_BOTS = (
    "Telegram/Discord analytics: Integrate custom bots (e.g., Combot for Telegram, Statbot for Discord) "
    "for member growth, activity, and bot detection. No free public APIs available without bot access."
)

SOCIAL_RULES = ("BearishSentiment", "BotActivity", "NegativeWeightedSentiment")


def _is_memecoin(name: Optional[str], description: Optional[str]) -> bool:
    return "meme" in (name or "").lower() or "fun" in (description or "")


def build_notes(
    signals: SignalSet,
    sections: Iterable[SectionResult],
    hits: Iterable[RuleHit],
    thresholds: Optional[RuleThresholds] = None,
    vesting_configured: bool = False,
    coverage_notes: Iterable[str] = (),
) -> List[str]:
    """
    Build informational notes.

    Args:
        signals: Union of all normalized signals
        sections: Rendered sections, used for coverage gaps
        hits: Fired rules
        thresholds: Hype thresholds
        vesting_configured: Whether vesting wallets were supplied
        coverage_notes: Notes for sources that were not configured

    Returns:
        Notes in fixed order
    """
    thresholds = thresholds or RuleThresholds()
    by_section = {result.section: result for result in sections}
    notes: List[str] = list(coverage_notes)

    # Supply
    circulating = signals.value(SignalKind.ESTIMATED_CIRCULATING_SUPPLY)
    if circulating is not None:
        notes.append(
            f"Estimated circulating supply: {to_plain(circulating)} (excluding provided vesting wallets)"
        )
    elif not vesting_configured and signals.has(SignalKind.TOP10_HOLDER_SHARE):
        notes.append(PROVIDE_VESTING)

    burns = signals.value(SignalKind.BURN_COUNT)
    if burns:
        notes.append(DEFLATIONARY)

    name = signals.value(SignalKind.TOKEN_NAME)
    if name is not None:
        description = signals.value(SignalKind.TOKEN_DESCRIPTION)
        notes.append(MEMECOIN if _is_memecoin(name, description) else UTILITY)

    # Hype
    volume = signals.value(SignalKind.SOCIAL_VOLUME)
    if volume is not None and volume > thresholds.high_social_volume:
        notes.append(HIGH_SOCIAL_VOLUME)

    posts = signals.value(SignalKind.POST_COUNT)
    tone = signals.value(SignalKind.POST_KEYWORD_TONE)
    if posts is not None and tone is not None:
        if posts > thresholds.twitter_hype_posts and tone > thresholds.twitter_hype_tone:
            notes.append(TWITTER_HYPE)

    # Coverage
    weighted = by_section.get(ReportSection.WEIGHTED_SENTIMENT)
    if (
        weighted is not None
        and weighted.status == SectionStatus.ERROR
        and weighted.error_kind == ProviderErrorKind.NOT_FOUND.value
    ):
        notes.append(SANTIMENT_UNLISTED)

    notes.append(COMMUNITY_BOTS)

    social_flags = [hit for hit in hits if hit.rule in SOCIAL_RULES]
    if len(social_flags) > 1:
        notes.append(MULTIPLE_SOCIAL_FLAGS)

    return notes
