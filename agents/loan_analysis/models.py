"""
LoanLens Data Models
Structured semantic record of a loan/credit agreement

Every record is a frozen dataclass and every sequence is a tuple, so an
analysis cannot change after the pipeline publishes it.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class Currency(str, Enum):
    """Facility currency inferred from symbols and keywords"""
    USD = "USD"
    GBP = "GBP"
    EUR = "EUR"


class Severity(str, Enum):
    """Severity of a risk flag or cross-document inconsistency"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class Parties:
    """Named parties to the agreement, in first-seen order"""
    borrowers: Tuple[str, ...] = ()
    lenders: Tuple[str, ...] = ()
    agents: Tuple[str, ...] = ()
    guarantors: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "borrowers": list(self.borrowers),
            "lenders": list(self.lenders),
            "agents": list(self.agents),
            "guarantors": list(self.guarantors),
        }


@dataclass(frozen=True)
class FinancialTerms:
    """Headline commercial terms; a field is None when no rule matched"""
    principal_amount: Optional[str] = None
    currency: Optional[Currency] = None
    interest_rate: Optional[str] = None
    margin: Optional[str] = None
    reference_rate: Optional[str] = None
    commitment_fee: Optional[str] = None
    facility_type: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "principal_amount": self.principal_amount,
            "currency": self.currency.value if self.currency else None,
            "interest_rate": self.interest_rate,
            "margin": self.margin,
            "reference_rate": self.reference_rate,
            "commitment_fee": self.commitment_fee,
            "facility_type": self.facility_type,
        }


@dataclass(frozen=True)
class Covenants:
    """Covenant clauses grouped by category"""
    financial: Tuple[str, ...] = ()
    informational: Tuple[str, ...] = ()
    negative: Tuple[str, ...] = ()

    @property
    def total(self) -> int:
        return len(self.financial) + len(self.informational) + len(self.negative)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "financial": list(self.financial),
            "informational": list(self.informational),
            "negative": list(self.negative),
        }


@dataclass(frozen=True)
class KeyDate:
    type: str
    date: str

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "date": self.date}


@dataclass(frozen=True)
class ESGClauses:
    """Sustainability provisions and the KPIs tied to pricing"""
    has_esg_provisions: bool = False
    sustainability_linked: bool = False
    green_loan: bool = False
    margin_ratchet: bool = False
    kpis: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "has_esg_provisions": self.has_esg_provisions,
            "sustainability_linked": self.sustainability_linked,
            "green_loan": self.green_loan,
            "margin_ratchet": self.margin_ratchet,
            "kpis": list(self.kpis),
        }


@dataclass(frozen=True)
class RiskFlag:
    type: str
    severity: Severity
    description: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "severity": self.severity.value,
            "description": self.description,
        }


@dataclass(frozen=True)
class Obligation:
    type: str
    description: str
    deadline: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "description": self.description,
            "deadline": self.deadline,
        }


@dataclass(frozen=True)
class KeyMetrics:
    """Snapshot of the financial terms shown in the summary"""
    amount: Optional[str] = None
    currency: Optional[Currency] = None
    rate: Optional[str] = None
    type: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "amount": self.amount,
            "currency": self.currency.value if self.currency else None,
            "rate": self.rate,
            "type": self.type,
        }


@dataclass(frozen=True)
class AnalysisSummary:
    total_parties: int = 0
    total_covenants: int = 0
    total_risks: int = 0
    has_esg: bool = False
    key_metrics: KeyMetrics = field(default_factory=KeyMetrics)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_parties": self.total_parties,
            "total_covenants": self.total_covenants,
            "total_risks": self.total_risks,
            "has_esg": self.has_esg,
            "key_metrics": self.key_metrics.to_dict(),
        }


@dataclass(frozen=True)
class LoanAnalysis:
    """
    The structured record produced for one document.

    Created once by the extraction pipeline and never mutated afterwards.
    """
    # Identity
    id: str
    timestamp: str
    name: str
    source_length: int

    # Extracted fields
    parties: Parties = field(default_factory=Parties)
    financial_terms: FinancialTerms = field(default_factory=FinancialTerms)
    covenants: Covenants = field(default_factory=Covenants)
    key_dates: Tuple[KeyDate, ...] = ()
    esg_clauses: ESGClauses = field(default_factory=ESGClauses)
    risk_flags: Tuple[RiskFlag, ...] = ()
    obligations: Tuple[Obligation, ...] = ()

    # Derived
    summary: AnalysisSummary = field(default_factory=AnalysisSummary)

    @property
    def has_high_risk(self) -> bool:
        return any(flag.severity == Severity.HIGH for flag in self.risk_flags)

    def content_dict(self) -> Dict[str, Any]:
        """Everything except id and timestamp, for comparing two runs"""
        return {
            "name": self.name,
            "source_length": self.source_length,
            "parties": self.parties.to_dict(),
            "financial_terms": self.financial_terms.to_dict(),
            "covenants": self.covenants.to_dict(),
            "key_dates": [d.to_dict() for d in self.key_dates],
            "esg_clauses": self.esg_clauses.to_dict(),
            "risk_flags": [r.to_dict() for r in self.risk_flags],
            "obligations": [o.to_dict() for o in self.obligations],
            "summary": self.summary.to_dict(),
        }

    def to_dict(self) -> Dict[str, Any]:
        data = {"id": self.id, "timestamp": self.timestamp}
        data.update(self.content_dict())
        return data
