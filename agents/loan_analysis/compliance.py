"""
LoanLens Covenant Compliance Evaluator

Reconciles the thresholds found in a stored analysis's financial covenants
with actual metrics supplied by the caller.

Rules (evaluated per covenant, non-exclusive, in this order):
- Leverage Ratio:          "leverage" + "ratio", threshold "X:1", actual must not exceed it
- Interest Coverage Ratio: "interest" + "cover", threshold "X:1", actual must reach it
- Minimum Net Worth:       "net worth" or "minimum", currency amount, actual must reach it

A covenant that matches no rule, has no threshold literal, or whose metric
was not supplied is skipped.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import AnalysisNotFoundError, InvalidMetricError
from .models import LoanAnalysis

logger = logging.getLogger(__name__)


class CheckStatus(str, Enum):
    PASS = "pass"
    BREACH = "breach"


class CheckSeverity(str, Enum):
    """How close a covenant is to its threshold"""
    CRITICAL = "critical"   # breached
    WARNING = "warning"     # compliant, thin buffer
    HEALTHY = "healthy"


class OverallStatus(str, Enum):
    COMPLIANT = "compliant"
    WARNING = "warning"
    BREACH = "breach"


class ActualMetrics(BaseModel):
    """
    Caller-supplied actual figures.

    Accepts camelCase keys (leverageRatio) or snake_case field names; unknown
    keys are ignored. Numeric strings are coerced; anything that is not a
    finite number is rejected.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    leverage_ratio: Optional[float] = Field(
        default=None, alias="leverageRatio", allow_inf_nan=False
    )
    interest_coverage_ratio: Optional[float] = Field(
        default=None, alias="interestCoverageRatio", allow_inf_nan=False
    )
    net_worth: Optional[float] = Field(
        default=None, alias="netWorth", allow_inf_nan=False
    )

    @field_validator("leverage_ratio", "interest_coverage_ratio", "net_worth", mode="before")
    @classmethod
    def reject_booleans(cls, value: Any) -> Any:
        # pydantic would otherwise coerce True to 1.0
        if isinstance(value, bool):
            raise ValueError("boolean is not a number")
        return value

    @classmethod
    def parse(cls, metrics: Union["ActualMetrics", Mapping[str, Any], None]) -> "ActualMetrics":
        """Validate raw metrics, raising InvalidMetricError for the first bad key"""
        if isinstance(metrics, cls):
            return metrics
        # None, for the whole mapping or one key, means "not supplied"
        if metrics is None:
            return cls()
        if not isinstance(metrics, Mapping):
            raise InvalidMetricError("actualMetrics", metrics)

        try:
            return cls.model_validate(dict(metrics))
        except ValidationError as e:
            error = e.errors()[0]
            key = str(error["loc"][0]) if error.get("loc") else "actualMetrics"
            raise InvalidMetricError(key, error.get("input")) from e


@dataclass(frozen=True)
class CovenantCheck:
    """Result of testing one covenant against one metric"""
    covenant: str
    threshold: str
    actual: str
    compliant: bool
    buffer: str
    status: CheckStatus
    severity: CheckSeverity

    def to_dict(self) -> Dict[str, Any]:
        return {
            "covenant": self.covenant,
            "threshold": self.threshold,
            "actual": self.actual,
            "compliant": self.compliant,
            "buffer": self.buffer,
            "status": self.status.value,
            "severity": self.severity.value,
        }


@dataclass(frozen=True)
class ComplianceSummary:
    total_covenants: int = 0
    breaches: int = 0
    warnings: int = 0
    healthy: int = 0
    overall_status: OverallStatus = OverallStatus.COMPLIANT

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_covenants": self.total_covenants,
            "breaches": self.breaches,
            "warnings": self.warnings,
            "healthy": self.healthy,
            "overall_status": self.overall_status.value,
        }


@dataclass(frozen=True)
class ComplianceResult:
    analysis_id: str
    details: tuple = ()
    summary: ComplianceSummary = field(default_factory=ComplianceSummary)
    timestamp: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "analysis_id": self.analysis_id,
            "details": [check.to_dict() for check in self.details],
            "summary": self.summary.to_dict(),
            "timestamp": self.timestamp,
        }


class ThresholdPatterns:
    """Threshold literals inside a financial covenant clause"""

    # 3.5:1 / 4 : 1
    RATIO = re.compile(r"(\d{1,4}(?:\.\d{1,4})?)[ \t]?:[ \t]?1(?!\d)")

    # $100,000,000 / £25 million / €1.5m
    AMOUNT = re.compile(
        r"([$£€])[ \t]?(\d(?:[\d,]{0,20}\d)?(?:\.\d{1,4})?)[ \t]?(million|billion|bn|m)?\b",
        re.IGNORECASE,
    )

    SCALES = {
        "million": 1_000_000,
        "m": 1_000_000,
        "billion": 1_000_000_000,
        "bn": 1_000_000_000,
    }


# A ratio covenant with a buffer under this is flagged as a warning
RATIO_WARNING_BUFFER = 0.5

# A net worth covenant with a buffer under this share of the threshold is a warning
NET_WORTH_WARNING_SHARE = 0.1


def _status(compliant: bool) -> CheckStatus:
    return CheckStatus.PASS if compliant else CheckStatus.BREACH


def _severity(compliant: bool, thin_buffer: bool) -> CheckSeverity:
    if not compliant:
        return CheckSeverity.CRITICAL
    if thin_buffer:
        return CheckSeverity.WARNING
    return CheckSeverity.HEALTHY


def _ratio(value: float) -> str:
    return f"{value:g}:1"


def _millions(symbol: str, value: float) -> str:
    return f"{symbol}{value / 1_000_000:.1f}M"


def check_leverage_ratio(covenant: str, metrics: ActualMetrics) -> Optional[CovenantCheck]:
    lowered = covenant.lower()
    if "leverage" not in lowered or "ratio" not in lowered:
        return None
    return _ratio_check(
        "Leverage Ratio", covenant, metrics.leverage_ratio, ceiling=True
    )


def check_interest_coverage(covenant: str, metrics: ActualMetrics) -> Optional[CovenantCheck]:
    lowered = covenant.lower()
    if "interest" not in lowered or "cover" not in lowered:
        return None
    return _ratio_check(
        "Interest Coverage Ratio", covenant, metrics.interest_coverage_ratio, ceiling=False
    )


def _ratio_check(
    name: str,
    covenant: str,
    actual: Optional[float],
    ceiling: bool,
) -> Optional[CovenantCheck]:
    match = ThresholdPatterns.RATIO.search(covenant)
    if not match:
        logger.debug(f"{name}: no ratio threshold in covenant, skipped")
        return None
    if actual is None:
        logger.debug(f"{name}: metric not supplied, skipped")
        return None

    threshold = float(match.group(1))
    if ceiling:
        compliant = actual <= threshold
        buffer = threshold - actual
    else:
        compliant = actual >= threshold
        buffer = actual - threshold

    return CovenantCheck(
        covenant=name,
        threshold=_ratio(threshold),
        actual=_ratio(actual),
        compliant=compliant,
        buffer=f"{buffer:.2f}",
        status=_status(compliant),
        severity=_severity(compliant, buffer < RATIO_WARNING_BUFFER),
    )


def check_net_worth(covenant: str, metrics: ActualMetrics) -> Optional[CovenantCheck]:
    lowered = covenant.lower()
    names_net_worth = "net worth" in lowered
    if not names_net_worth and "minimum" not in lowered:
        return None

    match = ThresholdPatterns.AMOUNT.search(covenant)
    if not match:
        logger.debug("Minimum Net Worth: no amount in covenant, skipped")
        return None
    if metrics.net_worth is None:
        logger.debug("Minimum Net Worth: metric not supplied, skipped")
        return None

    if not names_net_worth:
        logger.warning(
            "Testing a 'minimum' covenant that does not mention net worth "
            f"against netWorth: {covenant[:80]!r}"
        )

    symbol, figure, unit = match.group(1), match.group(2), match.group(3)
    threshold = float(figure.replace(",", "")) * ThresholdPatterns.SCALES.get((unit or "").lower(), 1)
    actual = metrics.net_worth
    compliant = actual >= threshold
    buffer = actual - threshold

    return CovenantCheck(
        covenant="Minimum Net Worth",
        threshold=_millions(symbol, threshold),
        actual=_millions(symbol, actual),
        compliant=compliant,
        buffer=_millions(symbol, buffer),
        status=_status(compliant),
        severity=_severity(compliant, buffer < threshold * NET_WORTH_WARNING_SHARE),
    )


COMPLIANCE_RULES = (
    check_leverage_ratio,
    check_interest_coverage,
    check_net_worth,
)


def summarize(details: List[CovenantCheck]) -> ComplianceSummary:
    breaches = sum(1 for check in details if not check.compliant)
    warnings = sum(1 for check in details if check.severity == CheckSeverity.WARNING)

    if breaches:
        overall = OverallStatus.BREACH
    elif warnings:
        overall = OverallStatus.WARNING
    else:
        overall = OverallStatus.COMPLIANT

    return ComplianceSummary(
        total_covenants=len(details),
        breaches=breaches,
        warnings=warnings,
        healthy=len(details) - breaches - warnings,
        overall_status=overall,
    )


class CovenantComplianceEvaluator:
    """
    Evaluate a stored analysis against actual metrics.

    Usage:
        evaluator = CovenantComplianceEvaluator(store)
        result = evaluator.evaluate(analysis.id, {"leverageRatio": 4.0})
        print(result.summary.overall_status)
    """

    def __init__(self, store, rules=COMPLIANCE_RULES):
        self.store = store
        self.rules = rules

    def evaluate(
        self,
        analysis_id: str,
        actual_metrics: Union[ActualMetrics, Mapping[str, Any], None],
    ) -> ComplianceResult:
        """
        Raises AnalysisNotFoundError for an unknown id and InvalidMetricError
        for a metric that is not a finite number.
        """
        analysis = self.store.get(analysis_id)
        if analysis is None:
            raise AnalysisNotFoundError([analysis_id])

        metrics = ActualMetrics.parse(actual_metrics)
        return self.evaluate_analysis(analysis, metrics)

    def evaluate_analysis(self, analysis: LoanAnalysis, metrics: ActualMetrics) -> ComplianceResult:
        details: List[CovenantCheck] = []
        for covenant in analysis.covenants.financial:
            for rule in self.rules:
                check = rule(covenant, metrics)
                if check is not None:
                    details.append(check)

        summary = summarize(details)
        logger.info(
            f"Compliance for {analysis.id}: {summary.total_covenants} checked, "
            f"{summary.breaches} breaches, {summary.warnings} warnings"
        )

        return ComplianceResult(
            analysis_id=analysis.id,
            details=tuple(details),
            summary=summary,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )
