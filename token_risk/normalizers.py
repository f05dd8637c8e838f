"""
Token Risk Engine - Normalizers.

============================================================
PURPOSE
============================================================
Convert provider payloads into SignalSets.

One pure function per source. A normalizer either returns a
complete SignalSet or raises NormalizationError; it never
returns a partially populated record.

============================================================
UNIT RULES
============================================================
- Raw base-unit integers go through to_token_amount() only
- Percentages come from percent_of() on those Decimals
- No float arithmetic on supply or balances
- Missing decimals/supply fails closed (MissingField)
- Zero supply fails closed (DivideByZero)

============================================================
"""

import logging
import re
from decimal import Decimal, InvalidOperation, localcontext
from typing import Any, Iterable, Optional, Sequence

from token_risk.config import RuleThresholds
from token_risk.exceptions import NormalizationError, NormalizationErrorKind
from token_risk.signals import Signal, SignalKind, SignalSet


logger = logging.getLogger(__name__)


# Enough digits for u64 supplies at any decimals value
PRECISION = 100

TOP_HOLDER_COUNT = 10

BULLISH_KEYWORDS = [
    "bullish", "moon", "pump", "buy", "long", "breakout",
    "ath", "all time high", "accumulate", "accumulation",
    "fomo", "send it", "wagmi", "lfg", "diamond hands",
    "green candle", "rally", "surge", "soaring", "rocket",
]

BEARISH_KEYWORDS = [
    "bearish", "dump", "sell", "short", "breakdown",
    "crash", "plunge", "capitulation", "fear", "panic",
    "rekt", "ngmi", "scam", "rug", "dead", "falling",
    "red candle", "collapse", "correction", "tank",
]

_WHITESPACE = re.compile(r"\s+")


# ============================================================
# NUMERIC HELPERS
# ============================================================


def _to_decimal(
    value: Any,
    field_name: str,
    allow_negative: bool = False,
) -> Decimal:
    """Parse a provider number into a finite Decimal, else OutOfRange."""
    if value is None:
        raise NormalizationError(
            f"{field_name} is missing",
            NormalizationErrorKind.MISSING_FIELD,
            field_name=field_name,
        )
    if isinstance(value, bool):
        raise NormalizationError(
            f"{field_name} is not numeric: {value!r}",
            NormalizationErrorKind.OUT_OF_RANGE,
            field_name=field_name,
        )
    try:
        # str() keeps floats at their shortest repr instead of binary expansion
        number = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise NormalizationError(
            f"{field_name} is not numeric: {value!r}",
            NormalizationErrorKind.OUT_OF_RANGE,
            field_name=field_name,
        )
    if not number.is_finite():
        raise NormalizationError(
            f"{field_name} is not finite: {value!r}",
            NormalizationErrorKind.OUT_OF_RANGE,
            field_name=field_name,
        )
    if number < 0 and not allow_negative:
        raise NormalizationError(
            f"{field_name} is negative: {value!r}",
            NormalizationErrorKind.OUT_OF_RANGE,
            field_name=field_name,
        )
    return number


def _to_decimals(value: Any, field_name: str = "decimals") -> int:
    number = _to_decimal(value, field_name)
    if number != number.to_integral_value() or number > 255:
        raise NormalizationError(
            f"{field_name} must be an integer in [0, 255]: {value!r}",
            NormalizationErrorKind.OUT_OF_RANGE,
            field_name=field_name,
        )
    return int(number)


def _to_count(value: Any, field_name: str) -> int:
    number = _to_decimal(value, field_name)
    if number != number.to_integral_value():
        raise NormalizationError(
            f"{field_name} must be a whole number: {value!r}",
            NormalizationErrorKind.OUT_OF_RANGE,
            field_name=field_name,
        )
    return int(number)


def to_token_amount(raw: Any, decimals: int, field_name: str = "amount") -> Decimal:
    """
    Convert a raw base-unit integer into whole tokens.

    The single division path for token amounts:
    Decimal(raw) / 10**decimals under a high-precision context.
    """
    amount = _to_decimal(raw, field_name)
    if amount != amount.to_integral_value():
        raise NormalizationError(
            f"{field_name} must be an integer base-unit amount: {raw!r}",
            NormalizationErrorKind.OUT_OF_RANGE,
            field_name=field_name,
        )
    if decimals < 0:
        raise NormalizationError(
            f"decimals must be non-negative: {decimals}",
            NormalizationErrorKind.OUT_OF_RANGE,
            field_name="decimals",
        )
    with localcontext() as ctx:
        ctx.prec = PRECISION
        return amount / (Decimal(10) ** decimals)


def percent_of(part: Decimal, whole: Decimal, field_name: str = "supply") -> Decimal:
    """Return part / whole * 100, raising DivideByZero for a zero whole."""
    if whole == 0:
        raise NormalizationError(
            f"Cannot compute share of zero {field_name}",
            NormalizationErrorKind.DIVIDE_BY_ZERO,
            field_name=field_name,
        )
    with localcontext() as ctx:
        ctx.prec = PRECISION
        return part * 100 / whole


def _require(payload: Any, field_name: str) -> Any:
    if not isinstance(payload, dict) or payload.get(field_name) is None:
        raise NormalizationError(
            f"{field_name} is missing",
            NormalizationErrorKind.MISSING_FIELD,
            field_name=field_name,
        )
    return payload[field_name]


def _require_list(payload: Any, what: str) -> list:
    if not isinstance(payload, list):
        raise NormalizationError(
            f"Expected a list of {what}",
            NormalizationErrorKind.MISSING_FIELD,
            field_name=what,
        )
    return payload


def _supply_basis(basis: SignalSet) -> tuple[int, Decimal]:
    """Decimals and whole-token supply from already-normalized signals."""
    decimals = basis.value(SignalKind.DECIMALS)
    total_supply = basis.value(SignalKind.TOTAL_SUPPLY)
    if decimals is None or total_supply is None:
        raise NormalizationError(
            "Supply basis unavailable (decimals and total supply required)",
            NormalizationErrorKind.MISSING_FIELD,
            field_name="supply" if decimals is not None else "decimals",
        )
    return decimals, total_supply


# ============================================================
# CHAIN STATE
# ============================================================


def normalize_mint_info(payload: Any) -> SignalSet:
    """Mint account -> authorities, decimals and total supply."""
    decimals = _to_decimals(_require(payload, "decimals"))
    total_supply = to_token_amount(_require(payload, "supply"), decimals, "supply")

    mint_authority = payload.get("mintAuthority") or None
    freeze_authority = payload.get("freezeAuthority") or None

    signals = [
        Signal(SignalKind.MINT_AUTHORITY_ACTIVE, mint_authority is not None),
        Signal(SignalKind.FREEZE_AUTHORITY_ACTIVE, freeze_authority is not None),
        Signal(SignalKind.DECIMALS, decimals),
        Signal(SignalKind.TOTAL_SUPPLY, total_supply),
    ]
    if mint_authority is not None:
        signals.append(Signal(SignalKind.MINT_AUTHORITY_ADDRESS, str(mint_authority)))
    if freeze_authority is not None:
        signals.append(Signal(SignalKind.FREEZE_AUTHORITY_ADDRESS, str(freeze_authority)))
    return SignalSet(signals)


# ============================================================
# TOKEN METADATA
# ============================================================


def normalize_token_meta(payload: Any) -> SignalSet:
    """
    Token metadata -> creator, supply basis, holder count and descriptors.

    Supply and decimals are mandatory; the remaining fields are optional
    and their signals are simply absent when the provider omits them.
    """
    decimals = _to_decimals(_require(payload, "decimals"))
    total_supply = to_token_amount(_require(payload, "supply"), decimals, "supply")

    signals = [
        Signal(SignalKind.DECIMALS, decimals),
        Signal(SignalKind.TOTAL_SUPPLY, total_supply),
    ]

    creator = payload.get("creator")
    if isinstance(creator, dict):
        if creator.get("address"):
            signals.append(Signal(SignalKind.CREATOR_ADDRESS, str(creator["address"])))
        if creator.get("share") is not None:
            share = _to_decimal(creator["share"], "creator.share")
            if share > 100:
                raise NormalizationError(
                    f"creator.share above 100%: {share}",
                    NormalizationErrorKind.OUT_OF_RANGE,
                    field_name="creator.share",
                )
            signals.append(Signal(SignalKind.CREATOR_SHARE_PERCENT, share))

    if payload.get("holder") is not None:
        signals.append(Signal(SignalKind.HOLDER_COUNT, _to_count(payload["holder"], "holder")))
    if payload.get("name"):
        signals.append(Signal(SignalKind.TOKEN_NAME, str(payload["name"])))
    if payload.get("description"):
        signals.append(Signal(SignalKind.TOKEN_DESCRIPTION, str(payload["description"])))

    return SignalSet(signals)


# ============================================================
# HOLDERS
# ============================================================


def normalize_holders(
    payload: Any,
    basis: SignalSet,
    vesting_wallets: Iterable[str] = (),
) -> SignalSet:
    """
    Holder list -> top-10 share of total supply.

    Args:
        payload: [{"owner": str, "amount": raw int}, ...]
        basis: Signals carrying DECIMALS and TOTAL_SUPPLY
        vesting_wallets: Owners excluded from circulating supply

    Returns:
        SignalSet with TOP10_HOLDER_SHARE and SAMPLED_HOLDER_COUNT, plus
        VESTING_BALANCE and ESTIMATED_CIRCULATING_SUPPLY when vesting
        wallets are configured
    """
    holders = _require_list(payload, "holders")
    if not holders:
        raise NormalizationError(
            "Holder list is empty",
            NormalizationErrorKind.MISSING_FIELD,
            field_name="holders",
        )
    decimals, total_supply = _supply_basis(basis)

    balances: list[tuple[Optional[str], Decimal]] = []
    for holder in holders:
        amount = to_token_amount(_require(holder, "amount"), decimals, "holder.amount")
        balances.append((holder.get("owner"), amount))

    # Stable sort keeps provider order among equal balances
    balances.sort(key=lambda item: item[1], reverse=True)

    with localcontext() as ctx:
        ctx.prec = PRECISION
        top_total = sum((amount for _, amount in balances[:TOP_HOLDER_COUNT]), Decimal(0))

    share = percent_of(top_total, total_supply)
    if share > 100:
        raise NormalizationError(
            f"Top-10 holders exceed total supply ({share}%)",
            NormalizationErrorKind.OUT_OF_RANGE,
            field_name="holders",
        )

    signals = [
        Signal(SignalKind.TOP10_HOLDER_SHARE, share),
        Signal(SignalKind.SAMPLED_HOLDER_COUNT, len(balances)),
    ]

    vesting = set(vesting_wallets)
    if vesting:
        with localcontext() as ctx:
            ctx.prec = PRECISION
            locked = sum(
                (amount for owner, amount in balances if owner in vesting),
                Decimal(0),
            )
            circulating = total_supply - locked
        signals.append(Signal(SignalKind.VESTING_BALANCE, locked))
        signals.append(Signal(SignalKind.ESTIMATED_CIRCULATING_SUPPLY, circulating))

    return SignalSet(signals)


# ============================================================
# DEX PAIRS
# ============================================================


def _nested_value(pair: dict, field_name: str, key: str) -> Any:
    """pair[field_name][key], or None when the object is absent."""
    container = pair.get(field_name)
    if container is None:
        return None
    if not isinstance(container, dict):
        raise NormalizationError(
            f"{field_name} is not an object: {container!r}",
            NormalizationErrorKind.OUT_OF_RANGE,
            field_name=field_name,
        )
    return container.get(key)


def normalize_dex_pairs(payload: Any) -> SignalSet:
    """
    Pair list -> main pair liquidity.

    The main pair is the one with the highest USD liquidity among pairs
    that report it; the first pair wins ties. When no pair reports
    liquidity only the pair count is produced.
    """
    pairs = _require_list(payload, "pairs")
    if not pairs:
        return SignalSet([Signal(SignalKind.DEX_PAIR_COUNT, 0)])

    main_pair: Optional[dict] = None
    main_liquidity: Optional[Decimal] = None
    for pair in pairs:
        if not isinstance(pair, dict):
            raise NormalizationError(
                "Pair entry is not an object",
                NormalizationErrorKind.MISSING_FIELD,
                field_name="pairs",
            )
        liquidity = _nested_value(pair, "liquidity", "usd")
        if liquidity is None:
            continue
        liquidity_usd = _to_decimal(liquidity, "liquidity.usd")
        if main_liquidity is None or liquidity_usd > main_liquidity:
            main_pair, main_liquidity = pair, liquidity_usd

    signals = [Signal(SignalKind.DEX_PAIR_COUNT, len(pairs))]
    if main_pair is None:
        return SignalSet(signals)

    signals.append(Signal(SignalKind.LIQUIDITY_USD, main_liquidity))
    volume = _nested_value(main_pair, "volume", "h24")
    if volume is not None:
        signals.append(Signal(SignalKind.VOLUME_24H_USD, _to_decimal(volume, "volume.h24")))
    if main_pair.get("dexId"):
        signals.append(Signal(SignalKind.MAIN_PAIR_DEX, str(main_pair["dexId"])))
    if main_pair.get("pairAddress"):
        signals.append(Signal(SignalKind.MAIN_PAIR_ADDRESS, str(main_pair["pairAddress"])))
    return SignalSet(signals)


# ============================================================
# TRANSACTIONS
# ============================================================


def normalize_transactions(
    payload: Any,
    basis: SignalSet,
    thresholds: Optional[RuleThresholds] = None,
) -> SignalSet:
    """
    Recent transactions -> transfer, burn and mint counts.

    Amounts are converted to whole tokens with the basis decimals before
    comparison against the potential-sell and large-dump thresholds.
    """
    thresholds = thresholds or RuleThresholds()
    transactions = _require_list(payload, "transactions")

    potential_sells = 0
    large_dumps = 0
    burns = 0
    mints = 0
    burned = Decimal(0)

    decimals: Optional[int] = None
    if transactions:
        decimals, _ = _supply_basis(basis)

    for tx in transactions:
        tx_type = str(_require(tx, "type")).strip().lower()
        if tx_type == "transfer":
            amount = to_token_amount(_require(tx, "amount"), decimals, "tx.amount")
            if amount > thresholds.potential_sell_tokens:
                potential_sells += 1
            if amount > thresholds.large_dump_tokens:
                large_dumps += 1
        elif tx_type == "burn":
            amount = to_token_amount(_require(tx, "amount"), decimals, "tx.amount")
            burns += 1
            with localcontext() as ctx:
                ctx.prec = PRECISION
                burned += amount
        elif tx_type == "mint":
            mints += 1

    return SignalSet([
        Signal(SignalKind.RECENT_TX_COUNT, len(transactions)),
        Signal(SignalKind.POTENTIAL_SELL_COUNT, potential_sells),
        Signal(SignalKind.LARGE_DUMP_COUNT, large_dumps),
        Signal(SignalKind.BURN_COUNT, burns),
        Signal(SignalKind.BURNED_AMOUNT, burned),
        Signal(SignalKind.MINT_EVENT_COUNT, mints),
    ])


# ============================================================
# SOCIAL
# ============================================================


def _influencer(entry: Any) -> str:
    """Influencer handle from a plain string or a profile object."""
    if isinstance(entry, str) and entry.strip():
        return entry.strip()
    if isinstance(entry, dict):
        for key in ("screen_name", "twitter_screen_name", "name"):
            if entry.get(key):
                return str(entry[key])
    raise NormalizationError(
        f"Unrecognized influencer entry: {entry!r}",
        NormalizationErrorKind.MISSING_FIELD,
        field_name="top_influencers",
    )


def normalize_social_summary(payload: Any) -> SignalSet:
    """
    Social summary -> relative sentiment on [0, 1] plus volume metrics
    and top influencer handles.

    sentiment_relative is accepted as a fraction or a percentage;
    values above 1 are read as percentages.
    """
    if not isinstance(payload, dict):
        raise NormalizationError(
            "Social summary is not an object",
            NormalizationErrorKind.MISSING_FIELD,
            field_name="social_summary",
        )

    signals = []
    if payload.get("sentiment_relative") is not None:
        sentiment = _to_decimal(payload["sentiment_relative"], "sentiment_relative")
        if sentiment > 1:
            sentiment = sentiment / 100
        if sentiment > 1:
            raise NormalizationError(
                f"sentiment_relative outside [0, 100]: {payload['sentiment_relative']!r}",
                NormalizationErrorKind.OUT_OF_RANGE,
                field_name="sentiment_relative",
            )
        signals.append(Signal(SignalKind.RELATIVE_SENTIMENT, sentiment))
    if payload.get("galaxy_score") is not None:
        signals.append(Signal(SignalKind.GALAXY_SCORE, _to_decimal(payload["galaxy_score"], "galaxy_score")))
    if payload.get("social_volume") is not None:
        signals.append(Signal(SignalKind.SOCIAL_VOLUME, _to_count(payload["social_volume"], "social_volume")))
    if payload.get("social_engagement_score") is not None:
        signals.append(Signal(
            SignalKind.SOCIAL_ENGAGEMENT,
            _to_decimal(payload["social_engagement_score"], "social_engagement_score"),
        ))
    if payload.get("top_influencers") is not None:
        influencers = _require_list(payload["top_influencers"], "top_influencers")
        signals.append(Signal(SignalKind.TOP_INFLUENCERS, tuple(_influencer(entry) for entry in influencers)))

    if not signals:
        raise NormalizationError(
            "Social summary carries no known metrics",
            NormalizationErrorKind.MISSING_FIELD,
            field_name="sentiment_relative",
        )
    return SignalSet(signals)


def _canonical_text(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip().lower()


def _keyword_hits(text: str, keywords: Sequence[str]) -> int:
    return sum(1 for keyword in keywords if re.search(rf"\b{re.escape(keyword)}\b", text))


def normalize_posts(payload: Any) -> SignalSet:
    """
    Sampled posts -> duplicate ratio and keyword tone.

    A post is a duplicate when its case- and whitespace-folded text was
    already seen in the sample. Tone is the mean of bullish minus bearish
    keyword hits per post.
    """
    posts = _require_list(payload, "posts")

    seen: set[str] = set()
    duplicates = 0
    tone_total = 0
    for post in posts:
        text = _canonical_text(str(_require(post, "text")))
        if text in seen:
            duplicates += 1
        else:
            seen.add(text)
        tone_total += _keyword_hits(text, BULLISH_KEYWORDS) - _keyword_hits(text, BEARISH_KEYWORDS)

    count = len(posts)
    ratio = Decimal(duplicates) / Decimal(count) if count else Decimal(0)
    tone = Decimal(tone_total) / Decimal(count) if count else Decimal(0)

    return SignalSet([
        Signal(SignalKind.POST_COUNT, count),
        Signal(SignalKind.DUPLICATE_POST_COUNT, duplicates),
        Signal(SignalKind.DUPLICATE_POST_RATIO, ratio),
        Signal(SignalKind.POST_KEYWORD_TONE, tone),
    ])


def normalize_weighted_sentiment(payload: Any) -> SignalSet:
    """Daily weighted sentiment series -> latest value and full series."""
    points = _require_list(payload, "timeseriesData")
    if not points:
        raise NormalizationError(
            "Weighted sentiment series is empty",
            NormalizationErrorKind.MISSING_FIELD,
            field_name="timeseriesData",
        )

    series = tuple(
        {
            "datetime": str(_require(point, "datetime")),
            "value": _to_decimal(_require(point, "value"), "value", allow_negative=True),
        }
        for point in points
    )
    latest = max(series, key=lambda point: point["datetime"])
    return SignalSet([
        Signal(SignalKind.WEIGHTED_SENTIMENT_LATEST, latest["value"]),
        Signal(SignalKind.WEIGHTED_SENTIMENT_SERIES, series),
    ])


# ============================================================
# MARKET OVERVIEW
# ============================================================


def normalize_market_overview(payload: Any) -> SignalSet:
    """Market overview -> LP lock status and market cap."""
    if not isinstance(payload, dict):
        raise NormalizationError(
            "Market overview is not an object",
            NormalizationErrorKind.MISSING_FIELD,
            field_name="market_overview",
        )

    signals = []
    if payload.get("liquidity_locked") is not None:
        signals.append(Signal(SignalKind.LIQUIDITY_LOCKED, bool(payload["liquidity_locked"])))

    market_cap = payload.get("mc", payload.get("marketCap"))
    if market_cap is not None:
        signals.append(Signal(SignalKind.MARKET_CAP_USD, _to_decimal(market_cap, "mc")))

    if not signals:
        raise NormalizationError(
            "Market overview carries neither liquidity_locked nor market cap",
            NormalizationErrorKind.MISSING_FIELD,
            field_name="liquidity_locked",
        )
    return SignalSet(signals)
