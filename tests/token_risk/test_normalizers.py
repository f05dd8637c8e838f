"""
Tests for Normalizers.

============================================================
PURPOSE
============================================================
Verify unit conversion and fail-closed behavior.

TEST PRINCIPLES:
- Exact Decimal results, no float tolerance
- Missing supply basis is an error, never a default
- Out-of-range provider values are rejected

============================================================
"""

import pytest
from decimal import Decimal

from token_risk.config import RuleThresholds
from token_risk.exceptions import NormalizationError, NormalizationErrorKind
from token_risk.normalizers import (
    normalize_dex_pairs,
    normalize_holders,
    normalize_market_overview,
    normalize_mint_info,
    normalize_posts,
    normalize_social_summary,
    normalize_token_meta,
    normalize_transactions,
    normalize_weighted_sentiment,
    percent_of,
    to_token_amount,
)
from token_risk.signals import SignalKind, SignalSet


# ============================================================
# FIXTURES
# ============================================================

@pytest.fixture
def basis():
    """Supply basis: 1000 whole tokens at 0 decimals."""
    return SignalSet.of(DECIMALS=0, TOTAL_SUPPLY=Decimal(1000))


@pytest.fixture
def basis_6dp():
    """Supply basis: 1B whole tokens at 6 decimals."""
    return SignalSet.of(DECIMALS=6, TOTAL_SUPPLY=Decimal(1_000_000_000))


# ============================================================
# UNIT CONVERSION
# ============================================================

class TestUnitConversion:
    """Tests for to_token_amount and percent_of."""

    def test_whole_token(self):
        assert to_token_amount("1000000000", 9) == Decimal(1)

    def test_u64_max_is_exact(self):
        amount = to_token_amount(str(2**64 - 1), 9)
        assert amount == Decimal("18446744073.709551615")

    def test_int_input(self):
        assert to_token_amount(1500, 3) == Decimal("1.5")

    def test_fractional_raw_amount_rejected(self):
        with pytest.raises(NormalizationError) as exc:
            to_token_amount("1.5", 0)
        assert exc.value.kind == NormalizationErrorKind.OUT_OF_RANGE

    def test_negative_amount_rejected(self):
        with pytest.raises(NormalizationError) as exc:
            to_token_amount("-5", 0)
        assert exc.value.kind == NormalizationErrorKind.OUT_OF_RANGE

    def test_non_numeric_amount_rejected(self):
        with pytest.raises(NormalizationError) as exc:
            to_token_amount("lots", 0)
        assert exc.value.kind == NormalizationErrorKind.OUT_OF_RANGE

    def test_percent_of(self):
        assert percent_of(Decimal(250), Decimal(1000)) == Decimal(25)

    def test_percent_of_zero_whole(self):
        with pytest.raises(NormalizationError) as exc:
            percent_of(Decimal(1), Decimal(0))
        assert exc.value.kind == NormalizationErrorKind.DIVIDE_BY_ZERO


# ============================================================
# CHAIN STATE & METADATA
# ============================================================

class TestMintInfo:
    """Tests for normalize_mint_info."""

    def test_active_authorities(self):
        signals = normalize_mint_info({
            "decimals": 6,
            "supply": "5000000",
            "mintAuthority": "MintAuth1111",
            "freezeAuthority": "FreezeAuth1111",
        })

        assert signals.value(SignalKind.MINT_AUTHORITY_ACTIVE) is True
        assert signals.value(SignalKind.FREEZE_AUTHORITY_ACTIVE) is True
        assert signals.value(SignalKind.MINT_AUTHORITY_ADDRESS) == "MintAuth1111"
        assert signals.value(SignalKind.TOTAL_SUPPLY) == Decimal(5)
        assert signals.value(SignalKind.DECIMALS) == 6

    def test_renounced_authorities(self):
        signals = normalize_mint_info({
            "decimals": 0,
            "supply": "1000",
            "mintAuthority": None,
            "freezeAuthority": None,
        })

        assert signals.value(SignalKind.MINT_AUTHORITY_ACTIVE) is False
        assert signals.value(SignalKind.FREEZE_AUTHORITY_ACTIVE) is False
        assert not signals.has(SignalKind.MINT_AUTHORITY_ADDRESS)

    @pytest.mark.parametrize("missing", ["decimals", "supply"])
    def test_missing_basis_fails_closed(self, missing):
        payload = {"decimals": 6, "supply": "1000", "mintAuthority": None}
        del payload[missing]

        with pytest.raises(NormalizationError) as exc:
            normalize_mint_info(payload)
        assert exc.value.kind == NormalizationErrorKind.MISSING_FIELD
        assert exc.value.field_name == missing


class TestTokenMeta:
    """Tests for normalize_token_meta."""

    def test_full_payload(self):
        signals = normalize_token_meta({
            "supply": "1000000",
            "decimals": 3,
            "creator": {"address": "Creator111", "share": 15},
            "holder": 4200,
            "name": "Meme Dog",
            "description": "just for fun",
        })

        assert signals.value(SignalKind.TOTAL_SUPPLY) == Decimal(1000)
        assert signals.value(SignalKind.CREATOR_SHARE_PERCENT) == Decimal(15)
        assert signals.value(SignalKind.CREATOR_ADDRESS) == "Creator111"
        assert signals.value(SignalKind.HOLDER_COUNT) == 4200
        assert signals.value(SignalKind.TOKEN_NAME) == "Meme Dog"

    def test_missing_supply_fails_closed(self):
        with pytest.raises(NormalizationError) as exc:
            normalize_token_meta({"decimals": 6, "name": "X"})
        assert exc.value.kind == NormalizationErrorKind.MISSING_FIELD

    def test_creator_share_above_100(self):
        with pytest.raises(NormalizationError) as exc:
            normalize_token_meta({
                "supply": "1",
                "decimals": 0,
                "creator": {"address": "C", "share": 140},
            })
        assert exc.value.kind == NormalizationErrorKind.OUT_OF_RANGE

    def test_optional_fields_absent(self):
        signals = normalize_token_meta({"supply": "10", "decimals": 1})

        assert signals.kinds() == [SignalKind.DECIMALS, SignalKind.TOTAL_SUPPLY]


# ============================================================
# HOLDERS
# ============================================================

class TestHolders:
    """Tests for normalize_holders."""

    def test_two_holders_own_everything(self, basis):
        signals = normalize_holders(
            [{"owner": "A", "amount": "600"}, {"owner": "B", "amount": "400"}],
            basis,
        )

        assert signals.value(SignalKind.TOP10_HOLDER_SHARE) == Decimal(100)
        assert signals.value(SignalKind.SAMPLED_HOLDER_COUNT) == 2

    def test_only_ten_largest_counted(self, basis):
        holders = [{"owner": f"W{i}", "amount": "10"} for i in range(10)]
        holders.append({"owner": "small", "amount": "1"})
        holders.insert(0, {"owner": "small2", "amount": "2"})

        signals = normalize_holders(holders, basis)

        assert signals.value(SignalKind.TOP10_HOLDER_SHARE) == Decimal(10)

    def test_decimals_applied(self, basis_6dp):
        signals = normalize_holders([{"owner": "A", "amount": "250000000000000"}], basis_6dp)

        assert signals.value(SignalKind.TOP10_HOLDER_SHARE) == Decimal(25)

    def test_missing_basis(self):
        with pytest.raises(NormalizationError) as exc:
            normalize_holders([{"owner": "A", "amount": "1"}], SignalSet())
        assert exc.value.kind == NormalizationErrorKind.MISSING_FIELD

    def test_zero_supply(self):
        with pytest.raises(NormalizationError) as exc:
            normalize_holders(
                [{"owner": "A", "amount": "1"}],
                SignalSet.of(DECIMALS=0, TOTAL_SUPPLY=Decimal(0)),
            )
        assert exc.value.kind == NormalizationErrorKind.DIVIDE_BY_ZERO

    def test_empty_list(self, basis):
        with pytest.raises(NormalizationError):
            normalize_holders([], basis)

    def test_holders_exceeding_supply(self, basis):
        with pytest.raises(NormalizationError) as exc:
            normalize_holders([{"owner": "A", "amount": "2000"}], basis)
        assert exc.value.kind == NormalizationErrorKind.OUT_OF_RANGE

    def test_vesting_wallets(self, basis):
        signals = normalize_holders(
            [{"owner": "Vest", "amount": "300"}, {"owner": "B", "amount": "100"}],
            basis,
            vesting_wallets=["Vest"],
        )

        assert signals.value(SignalKind.VESTING_BALANCE) == Decimal(300)
        assert signals.value(SignalKind.ESTIMATED_CIRCULATING_SUPPLY) == Decimal(700)

    def test_no_vesting_signals_without_wallets(self, basis):
        signals = normalize_holders([{"owner": "A", "amount": "1"}], basis)

        assert not signals.has(SignalKind.ESTIMATED_CIRCULATING_SUPPLY)


# ============================================================
# DEX PAIRS
# ============================================================

class TestDexPairs:
    """Tests for normalize_dex_pairs."""

    def test_main_pair_is_deepest(self):
        signals = normalize_dex_pairs([
            {"dexId": "orca", "pairAddress": "P1", "liquidity": {"usd": 5000}},
            {"dexId": "raydium", "pairAddress": "P2", "liquidity": {"usd": 85000.5}, "volume": {"h24": 1200}},
        ])

        assert signals.value(SignalKind.DEX_PAIR_COUNT) == 2
        assert signals.value(SignalKind.LIQUIDITY_USD) == Decimal("85000.5")
        assert signals.value(SignalKind.MAIN_PAIR_DEX) == "raydium"
        assert signals.value(SignalKind.VOLUME_24H_USD) == Decimal(1200)

    def test_first_pair_wins_ties(self):
        signals = normalize_dex_pairs([
            {"dexId": "a", "pairAddress": "P1", "liquidity": {"usd": 100}},
            {"dexId": "b", "pairAddress": "P2", "liquidity": {"usd": 100}},
        ])

        assert signals.value(SignalKind.MAIN_PAIR_ADDRESS) == "P1"

    def test_missing_liquidity_leaves_signal_absent(self):
        signals = normalize_dex_pairs([{"dexId": "a", "pairAddress": "P1"}])

        assert signals.value(SignalKind.DEX_PAIR_COUNT) == 1
        assert not signals.has(SignalKind.LIQUIDITY_USD)
        assert not signals.has(SignalKind.MAIN_PAIR_ADDRESS)

    def test_main_pair_skips_pairs_without_liquidity(self):
        signals = normalize_dex_pairs([
            {"dexId": "a", "pairAddress": "P1"},
            {"dexId": "b", "pairAddress": "P2", "liquidity": {"usd": 0}},
        ])

        assert signals.value(SignalKind.DEX_PAIR_COUNT) == 2
        assert signals.value(SignalKind.LIQUIDITY_USD) == Decimal(0)
        assert signals.value(SignalKind.MAIN_PAIR_ADDRESS) == "P2"

    @pytest.mark.parametrize("pair", [
        {"dexId": "raydium", "liquidity": 5000},
        {"dexId": "raydium", "liquidity": "5000"},
        {"dexId": "raydium", "liquidity": {"usd": 5000}, "volume": 12},
    ])
    def test_non_object_fields_rejected(self, pair):
        with pytest.raises(NormalizationError) as exc:
            normalize_dex_pairs([pair])
        assert exc.value.kind == NormalizationErrorKind.OUT_OF_RANGE

    def test_no_pairs(self):
        signals = normalize_dex_pairs([])

        assert signals.kinds() == [SignalKind.DEX_PAIR_COUNT]
        assert signals.value(SignalKind.DEX_PAIR_COUNT) == 0


# ============================================================
# TRANSACTIONS
# ============================================================

class TestTransactions:
    """Tests for normalize_transactions."""

    def test_counts(self, basis_6dp):
        signals = normalize_transactions(
            [
                {"type": "transfer", "amount": "20000000000000"},
                {"type": "TRANSFER", "amount": "20000000000000"},
                {"type": "Transfer", "amount": "20000000000000"},
                {"type": "transfer", "amount": "2000000000000"},
                {"type": "transfer", "amount": "1000"},
                {"type": "burn", "amount": "5000000"},
                {"type": "mint", "amount": "1"},
                {"type": "swap"},
            ],
            basis_6dp,
        )

        assert signals.value(SignalKind.RECENT_TX_COUNT) == 8
        assert signals.value(SignalKind.LARGE_DUMP_COUNT) == 3
        assert signals.value(SignalKind.POTENTIAL_SELL_COUNT) == 4
        assert signals.value(SignalKind.BURN_COUNT) == 1
        assert signals.value(SignalKind.BURNED_AMOUNT) == Decimal(5)
        assert signals.value(SignalKind.MINT_EVENT_COUNT) == 1

    def test_configurable_dump_threshold(self, basis):
        thresholds = RuleThresholds(potential_sell_tokens=Decimal(10), large_dump_tokens=Decimal(100))

        signals = normalize_transactions(
            [{"type": "transfer", "amount": "101"}, {"type": "transfer", "amount": "50"}],
            basis,
            thresholds,
        )

        assert signals.value(SignalKind.LARGE_DUMP_COUNT) == 1
        assert signals.value(SignalKind.POTENTIAL_SELL_COUNT) == 2

    def test_empty_needs_no_basis(self):
        signals = normalize_transactions([], SignalSet())

        assert signals.value(SignalKind.RECENT_TX_COUNT) == 0
        assert signals.value(SignalKind.LARGE_DUMP_COUNT) == 0

    def test_transactions_need_basis(self):
        with pytest.raises(NormalizationError) as exc:
            normalize_transactions([{"type": "transfer", "amount": "1"}], SignalSet())
        assert exc.value.kind == NormalizationErrorKind.MISSING_FIELD

    def test_negative_amount(self, basis):
        with pytest.raises(NormalizationError) as exc:
            normalize_transactions([{"type": "transfer", "amount": "-1"}], basis)
        assert exc.value.kind == NormalizationErrorKind.OUT_OF_RANGE


# ============================================================
# SOCIAL
# ============================================================

class TestSocialSummary:
    """Tests for normalize_social_summary."""

    def test_fraction_scale(self):
        signals = normalize_social_summary({
            "sentiment_relative": 0.35,
            "galaxy_score": 61,
            "social_volume": 1500,
        })

        assert signals.value(SignalKind.RELATIVE_SENTIMENT) == Decimal("0.35")
        assert signals.value(SignalKind.SOCIAL_VOLUME) == 1500

    def test_percent_scale(self):
        signals = normalize_social_summary({"sentiment_relative": 65})

        assert signals.value(SignalKind.RELATIVE_SENTIMENT) == Decimal("0.65")

    @pytest.mark.parametrize("value", [150, -0.1, "bullish"])
    def test_out_of_range(self, value):
        with pytest.raises(NormalizationError) as exc:
            normalize_social_summary({"sentiment_relative": value})
        assert exc.value.kind == NormalizationErrorKind.OUT_OF_RANGE

    def test_no_metrics(self):
        with pytest.raises(NormalizationError) as exc:
            normalize_social_summary({"symbol": "BONK"})
        assert exc.value.kind == NormalizationErrorKind.MISSING_FIELD

    def test_engagement_score(self):
        signals = normalize_social_summary({"sentiment_relative": 0.5, "social_engagement_score": 77})

        assert signals.value(SignalKind.SOCIAL_ENGAGEMENT) == Decimal(77)

    def test_top_influencers(self):
        signals = normalize_social_summary({
            "sentiment_relative": 0.5,
            "top_influencers": ["bonk_inu", {"screen_name": "solana"}, {"name": "Ansem"}],
        })

        assert signals.value(SignalKind.TOP_INFLUENCERS) == ("bonk_inu", "solana", "Ansem")

    def test_empty_influencers(self):
        signals = normalize_social_summary({"galaxy_score": 40, "top_influencers": []})

        assert signals.value(SignalKind.TOP_INFLUENCERS) == ()

    def test_unrecognized_influencer(self):
        with pytest.raises(NormalizationError) as exc:
            normalize_social_summary({"galaxy_score": 40, "top_influencers": [{"followers": 10}]})
        assert exc.value.kind == NormalizationErrorKind.MISSING_FIELD


class TestPosts:
    """Tests for normalize_posts."""

    def test_duplicates_are_case_and_space_insensitive(self):
        signals = normalize_posts([
            {"text": "GM  ser", "timestamp": "t1"},
            {"text": "gm ser", "timestamp": "t2"},
            {"text": "gm SER ", "timestamp": "t3"},
            {"text": "something else", "timestamp": "t4"},
        ])

        assert signals.value(SignalKind.POST_COUNT) == 4
        assert signals.value(SignalKind.DUPLICATE_POST_COUNT) == 2
        assert signals.value(SignalKind.DUPLICATE_POST_RATIO) == Decimal("0.5")

    def test_no_posts(self):
        signals = normalize_posts([])

        assert signals.value(SignalKind.POST_COUNT) == 0
        assert signals.value(SignalKind.DUPLICATE_POST_RATIO) == Decimal(0)

    def test_keyword_tone(self):
        signals = normalize_posts([
            {"text": "to the moon lfg"},
            {"text": "this is a scam, dump it"},
            {"text": "bullish breakout"},
        ])

        # (2 - 0) + (0 - 2) + (2 - 0) over 3 posts
        assert signals.value(SignalKind.POST_KEYWORD_TONE) == Decimal(2) / Decimal(3)


class TestWeightedSentiment:
    """Tests for normalize_weighted_sentiment."""

    def test_latest_by_datetime(self):
        signals = normalize_weighted_sentiment([
            {"datetime": "2024-01-02T00:00:00Z", "value": -1.25},
            {"datetime": "2024-01-01T00:00:00Z", "value": 0.5},
        ])

        assert signals.value(SignalKind.WEIGHTED_SENTIMENT_LATEST) == Decimal("-1.25")
        assert len(signals.value(SignalKind.WEIGHTED_SENTIMENT_SERIES)) == 2

    def test_empty_series(self):
        with pytest.raises(NormalizationError):
            normalize_weighted_sentiment([])


class TestMarketOverview:
    """Tests for normalize_market_overview."""

    def test_unlocked(self):
        signals = normalize_market_overview({"liquidity_locked": False, "mc": 125000})

        assert signals.value(SignalKind.LIQUIDITY_LOCKED) is False
        assert signals.value(SignalKind.MARKET_CAP_USD) == Decimal(125000)

    def test_nothing_usable(self):
        with pytest.raises(NormalizationError) as exc:
            normalize_market_overview({"price": 1})
        assert exc.value.kind == NormalizationErrorKind.MISSING_FIELD
