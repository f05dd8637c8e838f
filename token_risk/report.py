"""
Token Risk Engine - Report Model.

The report is the engine's only output. It is built once per run and
never mutated; every section is populated, an error marker, or an
explicit not-configured marker.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from token_risk.signals import to_plain


MIN_SCORE = 0
MAX_SCORE = 100


class ReportSection(str, Enum):
    """Report sections, in output order."""
    AUTHORITIES = "authorities"
    ADMIN_KEYS = "adminKeys"
    TOKEN_DISTRIBUTION = "tokenDistribution"
    LP_HEALTH = "lpHealth"
    TRANSACTION_PATTERNS = "transactionPatterns"
    SENTIMENT = "sentiment"
    COMMUNITY = "community"
    WEIGHTED_SENTIMENT = "weightedSentiment"
    MARKET_OVERVIEW = "marketOverview"


class SectionStatus(str, Enum):
    POPULATED = "populated"
    ERROR = "error"
    NOT_CONFIGURED = "not_configured"


class ProviderCallState(str, Enum):
    """Per-run lifecycle of one provider call."""
    NOT_STARTED = "NotStarted"
    IN_FLIGHT = "InFlight"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"

    @property
    def is_terminal(self) -> bool:
        return self in (ProviderCallState.SUCCEEDED, ProviderCallState.FAILED)


class RiskLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"

    @classmethod
    def from_score(cls, score: int) -> "RiskLevel":
        if score >= 75:
            return cls.CRITICAL
        if score >= 50:
            return cls.HIGH
        if score >= 25:
            return cls.MEDIUM
        return cls.LOW


def clamp_score(total: int) -> int:
    """Clamp a delta sum into [0, 100]."""
    return max(MIN_SCORE, min(MAX_SCORE, total))


@dataclass(frozen=True)
class RuleHit:
    """One fired rule: its flag and score contribution."""
    rule: str
    flag: str
    delta: int

    def to_dict(self) -> Dict[str, Any]:
        return {"rule": self.rule, "flag": self.flag, "delta": self.delta}


@dataclass(frozen=True)
class SectionResult:
    """Populated data, an error marker, or a not-configured marker."""

    section: ReportSection
    status: SectionStatus
    data: Mapping[str, Any] = field(default_factory=dict)
    error: Optional[str] = None
    error_kind: Optional[str] = None

    @classmethod
    def populated(cls, section: ReportSection, data: Mapping[str, Any]) -> "SectionResult":
        return cls(section=section, status=SectionStatus.POPULATED, data=dict(data))

    @classmethod
    def failed(cls, section: ReportSection, message: str, kind: str) -> "SectionResult":
        return cls(section=section, status=SectionStatus.ERROR, error=message, error_kind=kind)

    @classmethod
    def not_configured(cls, section: ReportSection) -> "SectionResult":
        return cls(section=section, status=SectionStatus.NOT_CONFIGURED)

    @property
    def is_error(self) -> bool:
        return self.status == SectionStatus.ERROR

    def to_dict(self) -> Dict[str, Any]:
        if self.status == SectionStatus.ERROR:
            return {"error": self.error, "errorKind": self.error_kind}
        if self.status == SectionStatus.NOT_CONFIGURED:
            return {"status": SectionStatus.NOT_CONFIGURED.value}
        return to_plain(dict(self.data))


@dataclass(frozen=True)
class RiskReport:
    """
    Aggregated risk report for one token.

    Contains:
    - One SectionResult per ReportSection
    - Flags in rule-declaration order
    - Clamped risk score with its per-rule breakdown
    - Informational notes
    - Terminal state of every provider call
    """

    token: Mapping[str, Optional[str]]
    sections: Tuple[SectionResult, ...]
    flags: Tuple[str, ...]
    risk_score: int
    risk_level: RiskLevel
    score_breakdown: Tuple[RuleHit, ...] = ()
    notes: Tuple[str, ...] = ()
    source_states: Tuple[Tuple[str, ProviderCallState], ...] = ()

    def __post_init__(self) -> None:
        if not MIN_SCORE <= self.risk_score <= MAX_SCORE:
            raise ValueError(f"risk_score out of range: {self.risk_score}")
        present = [result.section for result in self.sections]
        if sorted(present) != sorted(ReportSection) or len(present) != len(set(present)):
            raise ValueError("Report must carry every section exactly once")

    def section(self, section: ReportSection) -> SectionResult:
        for result in self.sections:
            if result.section == section:
                return result
        raise KeyError(section)

    @property
    def error_sections(self) -> list[ReportSection]:
        return [result.section for result in self.sections if result.is_error]

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"token": dict(self.token)}
        for result in self.sections:
            data[result.section.value] = result.to_dict()
        data.update({
            "flags": list(self.flags),
            "riskScore": self.risk_score,
            "riskLevel": self.risk_level.value,
            "scoreBreakdown": [hit.to_dict() for hit in self.score_breakdown],
            "notes": list(self.notes),
            "sourceStates": {source: state.value for source, state in self.source_states},
        })
        return data

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, sort_keys=True)
