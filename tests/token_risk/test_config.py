"""
Tests for Engine Configuration and Logging Setup.
"""

import logging
import os
import pytest
from decimal import Decimal
from unittest.mock import patch

from token_risk.config import (
    EngineConfig,
    ProviderCredentials,
    RuleThresholds,
    get_default_config,
)
from token_risk.logging_setup import setup_logging


class TestRuleThresholds:
    """Tests for RuleThresholds validation."""

    def test_defaults(self):
        thresholds = RuleThresholds()

        assert thresholds.tiny_liquidity_usd == Decimal("20000")
        assert thresholds.large_dump_tokens == Decimal("10000000")
        assert thresholds.bot_duplicate_ratio == Decimal("0.1")
        assert thresholds.mintable_liquidity_delta == 0

    def test_concentration_bands_ordered(self):
        with pytest.raises(ValueError):
            RuleThresholds(moderate_concentration_pct=Decimal(50))

    def test_sell_thresholds_ordered(self):
        with pytest.raises(ValueError):
            RuleThresholds(potential_sell_tokens=Decimal(20_000_000))

    def test_ratio_range(self):
        with pytest.raises(ValueError):
            RuleThresholds(bot_duplicate_ratio=Decimal("1.5"))

    def test_to_dict_is_json_friendly(self):
        data = RuleThresholds().to_dict()

        assert data["tiny_liquidity_usd"] == "20000"
        assert data["mint_authority_delta"] == 30


class TestEngineConfig:
    """Tests for EngineConfig."""

    def test_defaults(self):
        config = get_default_config()

        assert config.run_deadline_seconds == 30.0
        assert config.holder_limit == 10
        assert config.vesting_wallets == ()

    def test_holder_limit_covers_top_ten(self):
        with pytest.raises(ValueError):
            EngineConfig(holder_limit=5)

    def test_deadline_positive(self):
        with pytest.raises(ValueError):
            EngineConfig(run_deadline_seconds=0)

    def test_with_thresholds(self):
        config = EngineConfig().with_thresholds(tiny_liquidity_usd=Decimal(5000))

        assert config.thresholds.tiny_liquidity_usd == Decimal(5000)
        assert config.thresholds.freeze_authority_delta == 20
        assert EngineConfig().thresholds.tiny_liquidity_usd == Decimal(20000)

    def test_from_env(self, tmp_path):
        env = {
            "LUNARCRUSH_API_KEY": "lc-key",
            "TOKEN_RISK_DEADLINE_SECONDS": "12.5",
            "TOKEN_RISK_LARGE_DUMP_TOKENS": "5000000",
            "TOKEN_RISK_VESTING_WALLETS": "WalletA, WalletB,",
        }

        with patch.dict(os.environ, env, clear=True):
            config = EngineConfig.from_env(str(tmp_path / "missing.env"))

        assert config.credentials.lunarcrush_api_key == "lc-key"
        assert config.credentials.twitter_bearer_token is None
        assert config.run_deadline_seconds == 12.5
        assert config.thresholds.large_dump_tokens == Decimal(5_000_000)
        assert config.vesting_wallets == ("WalletA", "WalletB")

    def test_lowered_dump_threshold_pulls_sell_threshold(self, tmp_path):
        env = {"TOKEN_RISK_LARGE_DUMP_TOKENS": "500000"}

        with patch.dict(os.environ, env, clear=True):
            config = EngineConfig.from_env(str(tmp_path / "missing.env"))

        assert config.thresholds.large_dump_tokens == Decimal(500_000)
        assert config.thresholds.potential_sell_tokens == Decimal(500_000)

    def test_potential_sell_threshold(self, tmp_path):
        env = {
            "TOKEN_RISK_LARGE_DUMP_TOKENS": "500000",
            "TOKEN_RISK_POTENTIAL_SELL_TOKENS": "50000",
        }

        with patch.dict(os.environ, env, clear=True):
            config = EngineConfig.from_env(str(tmp_path / "missing.env"))

        assert config.thresholds.potential_sell_tokens == Decimal(50_000)
        assert config.thresholds.large_dump_tokens == Decimal(500_000)

    def test_inconsistent_sell_threshold_rejected(self, tmp_path):
        env = {"TOKEN_RISK_POTENTIAL_SELL_TOKENS": "20000000"}

        with patch.dict(os.environ, env, clear=True):
            with pytest.raises(ValueError):
                EngineConfig.from_env(str(tmp_path / "missing.env"))

    def test_from_dotenv_file(self, tmp_path):
        dotenv_file = tmp_path / ".env"
        dotenv_file.write_text(
            "SANTIMENT_API_KEY=san-key\n"
            "TOKEN_RISK_BOT_DUPLICATE_RATIO=0.25\n"
        )

        with patch.dict(os.environ, {}, clear=True):
            config = EngineConfig.from_env(str(dotenv_file))

        assert config.credentials.santiment_api_key == "san-key"
        assert config.thresholds.bot_duplicate_ratio == Decimal("0.25")

    def test_environment_wins_over_dotenv(self, tmp_path):
        dotenv_file = tmp_path / ".env"
        dotenv_file.write_text("BIRDEYE_API_KEY=from-file\n")

        with patch.dict(os.environ, {"BIRDEYE_API_KEY": "from-env"}, clear=True):
            config = EngineConfig.from_env(str(dotenv_file))

        assert config.credentials.birdeye_api_key == "from-env"

    def test_to_dict_hides_secrets(self):
        config = EngineConfig(
            credentials=ProviderCredentials(
                solana_rpc_url="https://rpc.example",
                twitter_bearer_token="secret-token",
            ),
        )

        data = config.to_dict()

        assert data["credentials"]["twitter_bearer_token"] is True
        assert data["credentials"]["santiment_api_key"] is False
        assert "secret-token" not in str(data)

    @pytest.mark.parametrize("url,expected", [
        ("https://mainnet.helius-rpc.com/?api-key=abc123", "https://mainnet.helius-rpc.com"),
        ("https://solana-mainnet.g.alchemy.com/v2/abc123", "https://solana-mainnet.g.alchemy.com"),
        ("not a url abc123", "<redacted>"),
        (None, None),
    ])
    def test_rpc_url_redacted(self, url, expected):
        data = ProviderCredentials(solana_rpc_url=url).to_dict()

        assert data["solana_rpc_url"] == expected


class TestSetupLogging:
    """Tests for setup_logging."""

    @pytest.fixture(autouse=True)
    def restore_root_logger(self):
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        yield
        root.handlers = handlers
        root.setLevel(level)

    def test_returns_package_logger(self):
        logger = setup_logging(level="DEBUG")

        assert logger.name == "token_risk"
        assert logging.getLogger().level == logging.DEBUG

    def test_json_format_carries_run_id(self):
        setup_logging(log_format="json", run_id="DezXAZ8z")

        formatter = logging.getLogger().handlers[0].formatter

        assert '"run_id": "DezXAZ8z"' in formatter._fmt

    def test_unknown_level_falls_back_to_info(self):
        setup_logging(level="chatty")

        assert logging.getLogger().level == logging.INFO
