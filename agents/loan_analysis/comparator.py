"""
LoanLens Cross-Document Comparator

Lines up two to ten stored analyses side by side and flags terms that
disagree across the set. Every output list is index-aligned with the ids
the caller passed in.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from .errors import AnalysisNotFoundError, NotEnoughInputsError, TooManyInputsError
from .models import LoanAnalysis, Severity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Inconsistency:
    """A term that differs across the compared loans"""
    type: str
    severity: Severity
    description: str
    affected_loans: tuple = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "severity": self.severity.value,
            "description": self.description,
            "affected_loans": list(self.affected_loans),
        }


@dataclass(frozen=True)
class Comparison:
    """Side-by-side view of several analyses"""
    loans: tuple = ()
    financial_terms: tuple = ()
    covenant_counts: tuple = ()
    risk_comparison: tuple = ()
    esg_comparison: tuple = ()
    inconsistencies: tuple = ()

    @property
    def has_inconsistencies(self) -> bool:
        return len(self.inconsistencies) > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "loans": [dict(loan) for loan in self.loans],
            "financial_terms": [terms.to_dict() for terms in self.financial_terms],
            "covenant_counts": [dict(counts) for counts in self.covenant_counts],
            "risk_comparison": [
                [flag.to_dict() for flag in flags] for flags in self.risk_comparison
            ],
            "esg_comparison": [esg.to_dict() for esg in self.esg_comparison],
            "inconsistencies": [issue.to_dict() for issue in self.inconsistencies],
        }


def _distinct(values) -> List[Any]:
    """Distinct non-empty values in first-seen order"""
    seen: List[Any] = []
    for value in values:
        if value and value not in seen:
            seen.append(value)
    return seen


def _label(value) -> str:
    return value.value if hasattr(value, "value") else str(value)


# =============================================================================
# INCONSISTENCY RULES
# =============================================================================
# Each rule looks at the full list of loans and returns at most one finding.
# Rules are independent; they are evaluated in the order of INCONSISTENCY_RULES.

def check_currency_mismatch(loans: Sequence[LoanAnalysis]) -> Optional[Inconsistency]:
    currencies = _distinct(loan.financial_terms.currency for loan in loans)
    if len(currencies) <= 1:
        return None
    return Inconsistency(
        type="Currency Mismatch",
        severity=Severity.HIGH,
        description=f"Multiple currencies detected: {', '.join(_label(c) for c in currencies)}",
        affected_loans=tuple(loan.name for loan in loans if loan.financial_terms.currency),
    )


def check_reference_rate_variation(loans: Sequence[LoanAnalysis]) -> Optional[Inconsistency]:
    rates = _distinct(loan.financial_terms.reference_rate for loan in loans)
    if len(rates) <= 1:
        return None
    return Inconsistency(
        type="Reference Rate Variation",
        severity=Severity.MEDIUM,
        description=f"Different reference rates used: {', '.join(rates)}",
        affected_loans=tuple(loan.name for loan in loans if loan.financial_terms.reference_rate),
    )


def check_esg_inconsistency(loans: Sequence[LoanAnalysis]) -> Optional[Inconsistency]:
    esg = [loan for loan in loans if loan.esg_clauses.has_esg_provisions]
    non_esg = [loan for loan in loans if not loan.esg_clauses.has_esg_provisions]
    if not esg or not non_esg:
        return None
    return Inconsistency(
        type="ESG Inconsistency",
        severity=Severity.MEDIUM,
        description=f"{len(esg)} loan(s) have ESG provisions, {len(non_esg)} do not",
        affected_loans=tuple(loan.name for loan in non_esg),
    )


def check_risk_profile_variation(loans: Sequence[LoanAnalysis]) -> Optional[Inconsistency]:
    high_risk = [loan for loan in loans if loan.has_high_risk]
    if not high_risk or len(high_risk) == len(loans):
        return None
    return Inconsistency(
        type="Risk Profile Variation",
        severity=Severity.HIGH,
        description=f"{len(high_risk)} loan(s) contain high-severity risk flags",
        affected_loans=tuple(loan.name for loan in high_risk),
    )


INCONSISTENCY_RULES = (
    check_currency_mismatch,
    check_reference_rate_variation,
    check_esg_inconsistency,
    check_risk_profile_variation,
)


def detect_inconsistencies(loans: Sequence[LoanAnalysis]) -> List[Inconsistency]:
    findings = []
    for rule in INCONSISTENCY_RULES:
        finding = rule(loans)
        if finding is not None:
            findings.append(finding)
    return findings


class LoanComparator:
    """
    Compare stored analyses.

    Usage:
        comparator = LoanComparator(store)
        comparison = comparator.compare([first.id, second.id])
        for issue in comparison.inconsistencies:
            print(issue.type, issue.affected_loans)
    """

    MIN_LOANS = 2
    MAX_LOANS = 10

    def __init__(self, store):
        self.store = store

    def compare(self, analysis_ids: Sequence[str]) -> Comparison:
        """
        Build the side-by-side comparison for the given ids.

        Raises NotEnoughInputsError / TooManyInputsError on arity and
        AnalysisNotFoundError naming every id the store does not hold.
        """
        ids = list(analysis_ids or [])
        if len(ids) < self.MIN_LOANS:
            raise NotEnoughInputsError(len(ids), self.MIN_LOANS)
        if len(ids) > self.MAX_LOANS:
            raise TooManyInputsError(len(ids), self.MAX_LOANS)

        loans = self._resolve(ids)
        return self.compare_analyses(loans)

    def compare_analyses(self, loans: Sequence[LoanAnalysis]) -> Comparison:
        """Compare analyses the caller already holds"""
        loans = list(loans)
        if len(loans) < self.MIN_LOANS:
            raise NotEnoughInputsError(len(loans), self.MIN_LOANS)
        if len(loans) > self.MAX_LOANS:
            raise TooManyInputsError(len(loans), self.MAX_LOANS)

        inconsistencies = detect_inconsistencies(loans)
        logger.info(f"Compared {len(loans)} loans: {len(inconsistencies)} inconsistencies")

        return Comparison(
            loans=tuple({"id": loan.id, "name": loan.name} for loan in loans),
            financial_terms=tuple(loan.financial_terms for loan in loans),
            covenant_counts=tuple(
                {
                    "financial": len(loan.covenants.financial),
                    "informational": len(loan.covenants.informational),
                    "negative": len(loan.covenants.negative),
                }
                for loan in loans
            ),
            risk_comparison=tuple(loan.risk_flags for loan in loans),
            esg_comparison=tuple(loan.esg_clauses for loan in loans),
            inconsistencies=tuple(inconsistencies),
        )

    def _resolve(self, ids: List[str]) -> List[LoanAnalysis]:
        loans = []
        missing = []
        for analysis_id in ids:
            analysis = self.store.get(analysis_id)
            if analysis is None:
                missing.append(analysis_id)
            else:
                loans.append(analysis)

        if missing:
            logger.warning(f"Comparison requested unknown analyses: {', '.join(missing)}")
            raise AnalysisNotFoundError(missing)

        return loans
