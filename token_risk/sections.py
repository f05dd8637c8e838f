"""
Token Risk Engine - Section Rendering.

Each source owns one report section. A section is rendered from the
source's own signals (falling back to signals from other sources for
shared fields such as holder count), or becomes an error marker.
"""

from typing import Dict, Tuple

from token_risk.adapters.exceptions import ProviderError, ProviderErrorKind
from token_risk.adapters.models import SourceName
from token_risk.exceptions import NormalizationError
from token_risk.report import ReportSection, SectionResult
from token_risk.signals import SignalKind, SignalSet


SOURCE_SECTIONS: Dict[SourceName, ReportSection] = {
    SourceName.CHAIN_STATE: ReportSection.AUTHORITIES,
    SourceName.TOKEN_METADATA: ReportSection.ADMIN_KEYS,
    SourceName.HOLDERS: ReportSection.TOKEN_DISTRIBUTION,
    SourceName.DEX_PAIRS: ReportSection.LP_HEALTH,
    SourceName.TRANSACTIONS: ReportSection.TRANSACTION_PATTERNS,
    SourceName.SOCIAL_SUMMARY: ReportSection.SENTIMENT,
    SourceName.SOCIAL_POSTS: ReportSection.COMMUNITY,
    SourceName.WEIGHTED_SENTIMENT: ReportSection.WEIGHTED_SENTIMENT,
    SourceName.MARKET_OVERVIEW: ReportSection.MARKET_OVERVIEW,
}

SECTION_FIELDS: Dict[ReportSection, Tuple[Tuple[str, SignalKind], ...]] = {
    ReportSection.AUTHORITIES: (
        ("mintAuthorityActive", SignalKind.MINT_AUTHORITY_ACTIVE),
        ("mintAuthority", SignalKind.MINT_AUTHORITY_ADDRESS),
        ("freezeAuthorityActive", SignalKind.FREEZE_AUTHORITY_ACTIVE),
        ("freezeAuthority", SignalKind.FREEZE_AUTHORITY_ADDRESS),
        ("decimals", SignalKind.DECIMALS),
        ("totalSupply", SignalKind.TOTAL_SUPPLY),
    ),
    ReportSection.ADMIN_KEYS: (
        ("creator", SignalKind.CREATOR_ADDRESS),
        ("creatorSharePercent", SignalKind.CREATOR_SHARE_PERCENT),
        ("name", SignalKind.TOKEN_NAME),
        ("description", SignalKind.TOKEN_DESCRIPTION),
        ("holderCount", SignalKind.HOLDER_COUNT),
        ("decimals", SignalKind.DECIMALS),
        ("totalSupply", SignalKind.TOTAL_SUPPLY),
    ),
    ReportSection.TOKEN_DISTRIBUTION: (
        ("top10HoldersPercent", SignalKind.TOP10_HOLDER_SHARE),
        ("sampledHolders", SignalKind.SAMPLED_HOLDER_COUNT),
        ("holderCount", SignalKind.HOLDER_COUNT),
        ("vestingBalance", SignalKind.VESTING_BALANCE),
        ("estimatedCirculatingSupply", SignalKind.ESTIMATED_CIRCULATING_SUPPLY),
    ),
    ReportSection.LP_HEALTH: (
        ("pairCount", SignalKind.DEX_PAIR_COUNT),
        ("mainPairDex", SignalKind.MAIN_PAIR_DEX),
        ("mainPairAddress", SignalKind.MAIN_PAIR_ADDRESS),
        ("liquidityUSD", SignalKind.LIQUIDITY_USD),
        ("volume24hUSD", SignalKind.VOLUME_24H_USD),
    ),
    ReportSection.TRANSACTION_PATTERNS: (
        ("recentTransactions", SignalKind.RECENT_TX_COUNT),
        ("potentialSells", SignalKind.POTENTIAL_SELL_COUNT),
        ("largeDumps", SignalKind.LARGE_DUMP_COUNT),
        ("burns", SignalKind.BURN_COUNT),
        ("burnedAmount", SignalKind.BURNED_AMOUNT),
        ("mintEvents", SignalKind.MINT_EVENT_COUNT),
    ),
    ReportSection.SENTIMENT: (
        ("relativeSentiment", SignalKind.RELATIVE_SENTIMENT),
        ("galaxyScore", SignalKind.GALAXY_SCORE),
        ("socialVolume", SignalKind.SOCIAL_VOLUME),
        ("socialEngagement", SignalKind.SOCIAL_ENGAGEMENT),
        ("influencers", SignalKind.TOP_INFLUENCERS),
    ),
    ReportSection.COMMUNITY: (
        ("postCount", SignalKind.POST_COUNT),
        ("duplicatePosts", SignalKind.DUPLICATE_POST_COUNT),
        ("duplicateRatio", SignalKind.DUPLICATE_POST_RATIO),
        ("keywordTone", SignalKind.POST_KEYWORD_TONE),
    ),
    ReportSection.WEIGHTED_SENTIMENT: (
        ("latest", SignalKind.WEIGHTED_SENTIMENT_LATEST),
        ("series", SignalKind.WEIGHTED_SENTIMENT_SERIES),
    ),
    ReportSection.MARKET_OVERVIEW: (
        ("liquidityLocked", SignalKind.LIQUIDITY_LOCKED),
        ("marketCapUSD", SignalKind.MARKET_CAP_USD),
    ),
}

NO_PAIRS_MESSAGE = "No DEX pairs found"


def render_section(
    section: ReportSection,
    own: SignalSet,
    shared: SignalSet,
) -> SectionResult:
    """
    Render a populated section, or the lpHealth marker for zero pairs.

    Fields missing from both signal sets render as None.
    """
    if section == ReportSection.LP_HEALTH and own.value(SignalKind.DEX_PAIR_COUNT) == 0:
        return SectionResult.failed(section, NO_PAIRS_MESSAGE, ProviderErrorKind.NOT_FOUND.value)

    signals = own.union(shared)
    return SectionResult.populated(
        section,
        {key: signals.value(kind) for key, kind in SECTION_FIELDS[section]},
    )


def render_error(section: ReportSection, error: Exception) -> SectionResult:
    """Convert a provider or normalization failure into an error marker."""
    if isinstance(error, (ProviderError, NormalizationError)):
        return SectionResult.failed(section, error.message, error.kind.value)
    return SectionResult.failed(section, str(error), ProviderErrorKind.UNAVAILABLE.value)
