"""
Token Risk Engine - Aggregation Engine.

============================================================
PURPOSE
============================================================
Fan out to providers, normalize, score, build the report.

============================================================
RUN PIPELINE
============================================================
1. Validate identifiers (fatal before any call)
2. Plan calls: chain reader always, others when registered,
   configured and given their identifier
3. Dispatch all planned calls concurrently
4. Join; on deadline expiry cancel what is still in flight
5. Normalize each payload in fixed source order
6. Run rules in declaration order, sum deltas, clamp
7. Return the frozen report

Steps 5-7 are assemble(): synchronous and deterministic.

============================================================
FAILURE POLICY
============================================================
- Provider or normalization failure: section error marker
- Missing credentials or identifier: not-configured marker + note
- Invalid token address or symbol: InvalidIdentifierError
- Absent signals never fire rules

============================================================
"""

import asyncio
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import aiohttp
from solders.pubkey import Pubkey

from token_risk.adapters.base import BaseProviderAdapter
from token_risk.adapters.exceptions import ProviderUnavailableError
from token_risk.adapters.models import (
    FetchOptions,
    FetchResult,
    IdentifierKind,
    SourceName,
)
from token_risk.adapters.registry import ProviderSet
from token_risk.config import EngineConfig
from token_risk.exceptions import (
    ConfigurationError,
    InvalidIdentifierError,
    NormalizationError,
)
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
)
from token_risk.notes import build_notes
from token_risk.report import (
    ProviderCallState,
    ReportSection,
    RiskLevel,
    RiskReport,
    SectionResult,
    clamp_score,
)
from token_risk.rules import HeuristicRule, evaluate_rules, get_default_rules
from token_risk.sections import SOURCE_SECTIONS, render_error, render_section
from token_risk.signals import SignalSet


logger = logging.getLogger(__name__)


SYMBOL_PATTERN = re.compile(r"^[A-Za-z0-9$._-]{1,32}$")
MAX_NAME_LENGTH = 64

DEADLINE_MESSAGE = "Deadline exceeded"

COVERAGE_NOTES: Dict[SourceName, str] = {
    SourceName.SOCIAL_SUMMARY: "Provide LunarCrush API key for comprehensive sentiment analysis",
    SourceName.SOCIAL_POSTS: "Provide Twitter API keys for X sentiment and engagement analysis",
    SourceName.MARKET_OVERVIEW: "Provide Birdeye API key for LP lock and market data",
}

# A source's outcome is its fetch result, or why it was never dispatched
SourceOutcome = Union[FetchResult, ConfigurationError]


# ============================================================
# TOKEN QUERY
# ============================================================


@dataclass(frozen=True)
class TokenQuery:
    """Identifiers for one run: mint address plus optional social handles."""

    address: str
    symbol: Optional[str] = None
    name: Optional[str] = None

    def validate(self) -> None:
        """Raise InvalidIdentifierError for a malformed address or symbol."""
        if not isinstance(self.address, str) or not self.address:
            raise InvalidIdentifierError("Token address is required", identifier=self.address)
        try:
            Pubkey.from_string(self.address)
        except ValueError as e:
            raise InvalidIdentifierError(
                f"Invalid token address: {self.address}",
                identifier=self.address,
                context={"cause": str(e)},
            )

        if self.symbol is not None and not SYMBOL_PATTERN.match(self.symbol):
            raise InvalidIdentifierError(f"Invalid token symbol: {self.symbol!r}", identifier=self.symbol)

        if self.name is not None and (not self.name.strip() or len(self.name) > MAX_NAME_LENGTH):
            raise InvalidIdentifierError(f"Invalid token name: {self.name!r}", identifier=self.name)

    @property
    def slug(self) -> Optional[str]:
        return self.symbol.lower() if self.symbol else None

    @property
    def search_query(self) -> Optional[str]:
        if not self.symbol:
            return None
        if self.name:
            return f'"{self.name}" OR #{self.symbol} lang:en'
        return f"#{self.symbol} lang:en"

    def identifier_for(self, kind: IdentifierKind) -> Optional[str]:
        if kind == IdentifierKind.ADDRESS:
            return self.address
        if kind == IdentifierKind.SYMBOL:
            return self.symbol
        if kind == IdentifierKind.SLUG:
            return self.slug
        return self.search_query

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {"address": self.address, "symbol": self.symbol, "name": self.name}


@dataclass(frozen=True)
class PlannedCall:
    source: SourceName
    adapter: BaseProviderAdapter
    identifier: str
    options: FetchOptions


# ============================================================
# ENGINE
# ============================================================


class RiskAggregationEngine:
    """
    Multi-source token risk aggregation engine.

    Usage:
        providers = ProviderSet.from_config(config, session)
        engine = RiskAggregationEngine(providers, config)
        report = await engine.analyze(address, symbol="BONK")
        print(report.to_json())

    The engine holds no per-run state; one instance may serve
    concurrent runs.
    """

    def __init__(
        self,
        providers: ProviderSet,
        config: Optional[EngineConfig] = None,
        rules: Optional[List[HeuristicRule]] = None,
    ) -> None:
        if SourceName.CHAIN_STATE not in providers:
            raise ValueError("A chain state adapter is required")
        self._providers = providers
        self._config = config or EngineConfig()
        self._rules = rules if rules is not None else get_default_rules(self._config.thresholds)

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def rules(self) -> List[HeuristicRule]:
        return list(self._rules)

    # ─────────────────────────────────────────────────────────────
    # Async half
    # ─────────────────────────────────────────────────────────────

    async def analyze(
        self,
        token_address: str,
        symbol: Optional[str] = None,
        name: Optional[str] = None,
        deadline_seconds: Optional[float] = None,
    ) -> RiskReport:
        """
        Analyze one token.

        Args:
            token_address: Base58 mint address
            symbol: Ticker for social sources
            name: Display name used in the post search query
            deadline_seconds: Run deadline, defaults to config

        Returns:
            RiskReport, always, unless an identifier is invalid

        Raises:
            InvalidIdentifierError: Malformed address, symbol or name
        """
        query = TokenQuery(token_address, symbol, name)
        query.validate()

        deadline = deadline_seconds if deadline_seconds is not None else self._config.run_deadline_seconds
        planned, skipped = self._plan(query)

        outcomes: Dict[SourceName, SourceOutcome] = dict(skipped)
        outcomes.update(await self._dispatch(planned, deadline))

        report = self.assemble(query, outcomes)
        logger.info(
            f"[engine] {query.address}: score={report.risk_score} "
            f"level={report.risk_level.value} flags={len(report.flags)} "
            f"errors={[s.value for s in report.error_sections]}"
        )
        return report

    def _plan(
        self,
        query: TokenQuery,
    ) -> Tuple[List[PlannedCall], Dict[SourceName, ConfigurationError]]:
        """Split sources into calls to dispatch and sources to skip."""
        planned: List[PlannedCall] = []
        skipped: Dict[SourceName, ConfigurationError] = {}

        for source in SourceName.ordered():
            adapter = self._providers.get(source)
            if adapter is None:
                skipped[source] = ConfigurationError(
                    f"No adapter registered for {source.value}",
                    source=source.value,
                )
                continue

            if not adapter.is_configured():
                skipped[source] = ConfigurationError(
                    COVERAGE_NOTES.get(
                        source,
                        f"Provide {adapter.metadata().display_name} API key for {source.value}",
                    ),
                    source=source.value,
                )
                continue

            identifier = query.identifier_for(adapter.identifier_kind)
            if identifier is None:
                skipped[source] = ConfigurationError(
                    f"Provide token symbol for {adapter.metadata().display_name} analysis",
                    source=source.value,
                )
                continue

            planned.append(PlannedCall(source, adapter, identifier, self._options_for(source)))

        for source, error in skipped.items():
            logger.debug(f"[engine] Skipping {source.value}: {error.message}")
        return planned, skipped

    def _options_for(self, source: SourceName) -> FetchOptions:
        if source == SourceName.HOLDERS:
            return FetchOptions(limit=self._config.holder_limit)
        if source == SourceName.TRANSACTIONS:
            return FetchOptions(limit=self._config.transaction_limit)
        if source == SourceName.SOCIAL_POSTS:
            return FetchOptions(limit=self._config.post_limit)
        return FetchOptions()

    async def _dispatch(
        self,
        planned: List[PlannedCall],
        deadline: float,
    ) -> Dict[SourceName, FetchResult]:
        """Run all calls concurrently; cancel stragglers at the deadline."""
        if not planned:
            return {}

        states: Dict[SourceName, ProviderCallState] = {
            call.source: ProviderCallState.NOT_STARTED for call in planned
        }
        tasks: Dict[asyncio.Task, PlannedCall] = {}
        for call in planned:
            task = asyncio.create_task(
                call.adapter.fetch(call.identifier, call.options),
                name=f"token-risk-{call.source.value}",
            )
            tasks[task] = call
            states[call.source] = ProviderCallState.IN_FLIGHT

        done, pending = await asyncio.wait(tasks, timeout=deadline)

        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
            logger.warning(
                f"[engine] Deadline of {deadline:.1f}s exceeded, abandoned: "
                f"{[tasks[task].source.value for task in pending]}"
            )

        results: Dict[SourceName, FetchResult] = {}
        for task, call in tasks.items():
            result = self._task_result(task, call, task in done)
            results[call.source] = result
            states[call.source] = ProviderCallState.SUCCEEDED if result.ok else ProviderCallState.FAILED

        summary = ", ".join(f"{source.value}={state.value}" for source, state in states.items())
        logger.debug(f"[engine] Call states: {summary}")
        return results

    @staticmethod
    def _task_result(task: asyncio.Task, call: PlannedCall, finished: bool) -> FetchResult:
        if not finished or task.cancelled():
            return FetchResult.failure(
                call.source,
                call.adapter.name,
                ProviderUnavailableError(message=DEADLINE_MESSAGE, adapter_name=call.adapter.name),
            )
        error = task.exception()
        if error is not None:
            return FetchResult.failure(
                call.source,
                call.adapter.name,
                ProviderUnavailableError(
                    message=f"Unexpected error: {error}",
                    adapter_name=call.adapter.name,
                    original_error=error,
                ),
            )
        return task.result()

    # ─────────────────────────────────────────────────────────────
    # Sync half
    # ─────────────────────────────────────────────────────────────

    def assemble(
        self,
        query: TokenQuery,
        outcomes: Mapping[SourceName, SourceOutcome],
    ) -> RiskReport:
        """
        Normalize, score and build the report from settled outcomes.

        Sources missing from outcomes are treated as not configured.
        Identical outcomes always produce identical reports.
        """
        normalized: Dict[SourceName, SignalSet] = {}
        failures: Dict[SourceName, Exception] = {}
        coverage_notes: List[str] = []
        states: List[Tuple[str, ProviderCallState]] = []

        for source in SourceName.ordered():
            outcome = outcomes.get(source)
            if outcome is None or isinstance(outcome, ConfigurationError):
                if outcome is not None:
                    coverage_notes.append(outcome.message)
                states.append((source.value, ProviderCallState.NOT_STARTED))
                continue

            if not outcome.ok:
                failures[source] = outcome.error
                states.append((source.value, ProviderCallState.FAILED))
                continue

            states.append((source.value, ProviderCallState.SUCCEEDED))
            try:
                normalized[source] = self._normalize(source, outcome.payload, normalized)
            except NormalizationError as e:
                logger.warning(f"[{outcome.adapter_name}] Normalization failed: {e}")
                failures[source] = e

        signals = SignalSet()
        for source in SourceName.ordered():
            if source in normalized:
                signals = signals.union(normalized[source])

        sections: List[SectionResult] = []
        for source in SourceName.ordered():
            section = SOURCE_SECTIONS[source]
            if source in normalized:
                sections.append(render_section(section, normalized[source], signals))
            elif source in failures:
                sections.append(render_error(section, failures[source]))
            else:
                sections.append(SectionResult.not_configured(section))

        hits = evaluate_rules(self._rules, signals)
        score = clamp_score(sum(hit.delta for hit in hits))

        notes = build_notes(
            signals,
            sections,
            hits,
            thresholds=self._config.thresholds,
            vesting_configured=bool(self._config.vesting_wallets),
            coverage_notes=coverage_notes,
        )

        return RiskReport(
            token=query.to_dict(),
            sections=tuple(sections),
            flags=tuple(hit.flag for hit in hits),
            risk_score=score,
            risk_level=RiskLevel.from_score(score),
            score_breakdown=tuple(hits),
            notes=tuple(notes),
            source_states=tuple(states),
        )

    def _normalize(
        self,
        source: SourceName,
        payload: Any,
        normalized: Mapping[SourceName, SignalSet],
    ) -> SignalSet:
        """Dispatch to the source's normalizer; earlier sources supply the basis."""
        if source == SourceName.CHAIN_STATE:
            return normalize_mint_info(payload)
        if source == SourceName.TOKEN_METADATA:
            return normalize_token_meta(payload)
        if source == SourceName.HOLDERS:
            return normalize_holders(payload, self._supply_basis(normalized), self._config.vesting_wallets)
        if source == SourceName.DEX_PAIRS:
            return normalize_dex_pairs(payload)
        if source == SourceName.TRANSACTIONS:
            return normalize_transactions(payload, self._supply_basis(normalized), self._config.thresholds)
        if source == SourceName.SOCIAL_SUMMARY:
            return normalize_social_summary(payload)
        if source == SourceName.SOCIAL_POSTS:
            return normalize_posts(payload)
        if source == SourceName.WEIGHTED_SENTIMENT:
            return normalize_weighted_sentiment(payload)
        return normalize_market_overview(payload)

    @staticmethod
    def _supply_basis(normalized: Mapping[SourceName, SignalSet]) -> SignalSet:
        """Chain-state supply basis, falling back to metadata."""
        basis = normalized.get(SourceName.CHAIN_STATE, SignalSet())
        return basis.union(normalized.get(SourceName.TOKEN_METADATA, SignalSet()))


# ============================================================
# CONVENIENCE
# ============================================================


async def analyze_token(
    token_address: str,
    symbol: Optional[str] = None,
    name: Optional[str] = None,
    config: Optional[EngineConfig] = None,
    session: Optional[aiohttp.ClientSession] = None,
) -> RiskReport:
    """
    One-shot analysis with the default providers.

    Opens a shared ClientSession for the run unless one is supplied.
    """
    config = config or EngineConfig()
    if session is not None:
        engine = RiskAggregationEngine(ProviderSet.from_config(config, session), config)
        return await engine.analyze(token_address, symbol, name)

    async with aiohttp.ClientSession() as owned_session:
        engine = RiskAggregationEngine(ProviderSet.from_config(config, owned_session), config)
        return await engine.analyze(token_address, symbol, name)
