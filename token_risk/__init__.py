"""
Token Risk Engine.

Aggregates on-chain and off-chain signals about a Solana token into one
report with a bounded risk score and ordered risk flags.

Quick Start:
    from token_risk import EngineConfig, analyze_token

    config = EngineConfig.from_env()
    report = await analyze_token(address, symbol="BONK", config=config)
    print(report.risk_score, report.flags)
"""

from token_risk.adapters.models import SourceName
from token_risk.adapters.registry import ProviderSet, build_default_providers
from token_risk.config import (
    EngineConfig,
    ProviderCredentials,
    RuleThresholds,
    get_default_config,
)
from token_risk.engine import RiskAggregationEngine, TokenQuery, analyze_token
from token_risk.exceptions import (
    ConfigurationError,
    InvalidIdentifierError,
    NormalizationError,
    NormalizationErrorKind,
    TokenRiskError,
)
from token_risk.logging_setup import setup_logging
from token_risk.report import (
    ProviderCallState,
    ReportSection,
    RiskLevel,
    RiskReport,
    RuleHit,
    SectionResult,
    SectionStatus,
)
from token_risk.rules import HeuristicRule, get_default_rules
from token_risk.signals import Signal, SignalKind, SignalSet


__version__ = "1.0.0"

__all__ = [
    # Engine
    "RiskAggregationEngine",
    "TokenQuery",
    "analyze_token",
    # Providers
    "ProviderSet",
    "SourceName",
    "build_default_providers",
    # Config
    "EngineConfig",
    "ProviderCredentials",
    "RuleThresholds",
    "get_default_config",
    # Errors
    "ConfigurationError",
    "InvalidIdentifierError",
    "NormalizationError",
    "NormalizationErrorKind",
    "TokenRiskError",
    # Report
    "ProviderCallState",
    "ReportSection",
    "RiskLevel",
    "RiskReport",
    "RuleHit",
    "SectionResult",
    "SectionStatus",
    # Rules and signals
    "HeuristicRule",
    "get_default_rules",
    "Signal",
    "SignalKind",
    "SignalSet",
    # Logging
    "setup_logging",
]
