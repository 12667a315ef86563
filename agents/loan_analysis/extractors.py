"""
LoanLens Field Extractors

Seven independent, pure extractors. Each takes the raw agreement text and
returns one field of the analysis record; none of them depends on another's
output, and none raises on text that contains no recognizable terms.
"""

import re
from typing import Callable, Iterable, List, Optional, Tuple

from .models import (
    Covenants,
    ESGClauses,
    FinancialTerms,
    KeyDate,
    Obligation,
    Parties,
    RiskFlag,
)
from .patterns import (
    RISK_RULES,
    CovenantPatterns,
    ESGPatterns,
    FinancialTermPatterns,
    KeyDatePatterns,
    ObligationPatterns,
    PartyPatterns,
)


def _first_match(patterns: Iterable[re.Pattern], text: str, render: Callable) -> Optional[str]:
    """Walk an ordered rule list and return the first rule's rendered match"""
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            return render(match)
    return None


class PartyExtractor:
    """
    Extract borrowers, lenders, agents and guarantors.

    Patterns run in declared order and names keep their first-seen order.
    Agents are deduplicated case-insensitively, every other role
    case-sensitively.
    """

    MIN_NAME_LENGTH = 2     # exclusive
    MAX_NAME_LENGTH = 100   # exclusive

    def extract(self, text: str) -> Parties:
        return Parties(
            borrowers=self._collect(PartyPatterns.BORROWER, text),
            lenders=self._collect(PartyPatterns.LENDER, text),
            agents=self._collect(PartyPatterns.AGENT, text, case_sensitive=False),
            guarantors=self._collect(PartyPatterns.GUARANTOR, text),
        )

    def _collect(
        self,
        patterns: Tuple[re.Pattern, ...],
        text: str,
        case_sensitive: bool = True,
    ) -> Tuple[str, ...]:
        names: List[str] = []
        seen = set()

        for pattern in patterns:
            for match in pattern.finditer(text):
                name = self.clean_name(match.group(1))
                if not self.MIN_NAME_LENGTH < len(name) < self.MAX_NAME_LENGTH:
                    continue
                key = name if case_sensitive else name.lower()
                if key in seen:
                    continue
                seen.add(key)
                names.append(name)

        return tuple(names)

    @staticmethod
    def clean_name(raw: str) -> str:
        name = PartyPatterns.SENTENCE_BREAK.split(raw, maxsplit=1)[0]
        return name.strip().rstrip(",;:")


class FinancialTermsExtractor:
    """
    Extract headline financial terms.

    Every field has its own ordered rule list; the first rule that succeeds
    sets the field and later rules are never consulted for it.
    """

    def extract(self, text: str) -> FinancialTerms:
        lowered = text.lower()
        return FinancialTerms(
            principal_amount=_first_match(
                FinancialTermPatterns.PRINCIPAL, text, lambda m: m.group(1).strip()
            ),
            currency=self._currency(text),
            interest_rate=_first_match(
                FinancialTermPatterns.INTEREST_RATE, text, lambda m: m.group(0).strip()
            ),
            margin=_first_match(FinancialTermPatterns.MARGIN, text, self._render_margin),
            reference_rate=self._first_contained(FinancialTermPatterns.REFERENCE_RATES, text.upper()),
            commitment_fee=_first_match(
                FinancialTermPatterns.COMMITMENT_FEE, text, lambda m: m.group(1).strip()
            ),
            facility_type=self._facility_type(lowered),
        )

    @staticmethod
    def _currency(text: str):
        for currency, symbols, keywords in FinancialTermPatterns.CURRENCY:
            if any(symbol in text for symbol in symbols) or keywords.search(text):
                return currency
        return None

    @staticmethod
    def _render_margin(match) -> str:
        value, unit = match.group(1), match.group(2).lower()
        if unit == "bps" or unit.startswith("basis"):
            return f"{value} bps"
        return f"{value}%"

    @staticmethod
    def _first_contained(candidates: Tuple[str, ...], haystack: str) -> Optional[str]:
        for candidate in candidates:
            if candidate.upper() in haystack:
                return candidate
        return None

    @staticmethod
    def _facility_type(lowered: str) -> Optional[str]:
        for facility in FinancialTermPatterns.FACILITY_TYPES:
            if facility in lowered:
                return facility[0].upper() + facility[1:]
        return None


class CovenantExtractor:
    """Extract financial, informational and negative covenants."""

    MAX_PER_CATEGORY = 10
    MIN_FINANCIAL_LENGTH = 10   # exclusive
    NEAR_DUPLICATE_PREFIX = 30

    def extract(self, text: str) -> Covenants:
        return Covenants(
            financial=self._financial(text),
            informational=self._informational(text),
            negative=self._negative(text),
        )

    def _financial(self, text: str) -> Tuple[str, ...]:
        accepted: List[str] = []
        for pattern in CovenantPatterns.FINANCIAL:
            for match in pattern.finditer(text):
                if len(accepted) >= self.MAX_PER_CATEGORY:
                    return tuple(accepted)
                clause = match.group(0).strip()
                if len(clause) <= self.MIN_FINANCIAL_LENGTH:
                    continue
                prefix = clause[:self.NEAR_DUPLICATE_PREFIX]
                if any(prefix in existing for existing in accepted):
                    continue
                accepted.append(clause)
        return tuple(accepted)

    def _informational(self, text: str) -> Tuple[str, ...]:
        accepted: List[str] = []
        for pattern in CovenantPatterns.INFORMATIONAL:
            for match in pattern.finditer(text):
                if len(accepted) >= self.MAX_PER_CATEGORY:
                    return tuple(accepted)
                clause = match.group(0).strip()
                if clause not in accepted:
                    accepted.append(clause)
        return tuple(accepted)

    def _negative(self, text: str) -> Tuple[str, ...]:
        accepted: List[str] = []
        for pattern in CovenantPatterns.NEGATIVE:
            for match in pattern.finditer(text):
                if len(accepted) >= self.MAX_PER_CATEGORY:
                    return tuple(accepted)
                accepted.append(match.group(0).strip())
        return tuple(accepted)


class KeyDateExtractor:
    """Extract labeled dates and the facility tenor. Duplicates are kept."""

    def extract(self, text: str) -> Tuple[KeyDate, ...]:
        dates: List[KeyDate] = []

        for pattern in KeyDatePatterns.LABELED:
            for match in pattern.finditer(text):
                label = KeyDatePatterns.DATE_KEYWORD.split(match.group(0), maxsplit=1)[0]
                dates.append(KeyDate(type=label.strip(), date=match.group(1)))

        tenor = KeyDatePatterns.TENOR.search(text)
        if tenor:
            dates.append(KeyDate(type="Tenor", date=tenor.group(0)))

        return tuple(dates)


class ESGExtractor:
    """Detect ESG provisions and collect sustainability KPIs."""

    MAX_KPIS = 5
    MIN_KPI_LENGTH = 5

    def extract(self, text: str) -> ESGClauses:
        flags = {name: bool(pattern.search(text)) for name, pattern in ESGPatterns.FLAGS}
        return ESGClauses(kpis=self._kpis(text), **flags)

    def _kpis(self, text: str) -> Tuple[str, ...]:
        kpis: List[str] = []
        for pattern in ESGPatterns.KPI:
            for match in pattern.finditer(text):
                if len(kpis) >= self.MAX_KPIS:
                    return tuple(kpis)
                kpi = match.group(1).strip()
                if len(kpi) >= self.MIN_KPI_LENGTH:
                    kpis.append(kpi)
        return tuple(kpis)


class RiskFlagExtractor:
    """Apply the fixed risk rule table; severities come from the table."""

    def __init__(self, rules=RISK_RULES):
        self.rules = rules

    def extract(self, text: str) -> Tuple[RiskFlag, ...]:
        lowered = text.lower()
        return tuple(
            RiskFlag(type=rule.type, severity=rule.severity, description=rule.description)
            for rule in self.rules
            if rule.matches(lowered)
        )


class ObligationExtractor:
    """Extract reporting obligations that carry a day-count deadline."""

    MAX_OBLIGATIONS = 10

    def extract(self, text: str) -> Tuple[Obligation, ...]:
        obligations: List[Obligation] = []
        for pattern in ObligationPatterns.REPORTING:
            for match in pattern.finditer(text):
                if len(obligations) >= self.MAX_OBLIGATIONS:
                    return tuple(obligations)
                obligations.append(Obligation(
                    type="Reporting",
                    description=match.group(0).strip(),
                    deadline=f"{match.group(1)} days",
                ))
        return tuple(obligations)
