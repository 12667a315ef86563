"""
LoanLens Pattern Libraries
Declarative rule tables for loan agreement extraction

Every table is an ordered sequence: extractors walk it in declared order and,
where a field takes a single value, stop at the first rule that succeeds.

All regexes use bounded quantifiers only. Free-text spans are written as
``[^.]{0,N}`` rather than ``[^.]*`` so adversarial input without sentence
breaks cannot trigger quadratic backtracking.
"""

import re
from dataclasses import dataclass
from typing import Tuple

from .models import Currency, Severity


# =============================================================================
# SHARED FRAGMENTS
# =============================================================================

# Party names: a run of capitalized words joined by single spaces. Names never
# span a line break; "N.A.", "Inc." and friends may appear as tokens.
_NAME_WORD = r"[A-Z][A-Za-z0-9&'\-]{0,40}"
_NAME_ABBREV = r"(?:N\.A\.|L\.P\.|S\.A\.|B\.V\.|Inc\.|Ltd\.|Co\.|Corp\.)"
_NAME_CONNECTOR = r"(?:of|and|the|for|de|&)"
# A role label later on the same line starts a new party
_ROLE_LABEL = r"(?i:borrowers?|obligors?|lenders?|bank|(?:facility[ \t]+)?agent|guarantors?)[ \t]*:"
NAME = (
    rf"({_NAME_WORD}"
    rf"(?:,?[ \t]{{1,3}}(?:{_NAME_CONNECTOR}[ \t]{{1,3}})?(?!{_ROLE_LABEL})(?:{_NAME_ABBREV}|{_NAME_WORD})){{0,8}})"
)

# $500,000,000 / £25m / € 1.5 billion
AMOUNT = r"[$£€][ \t]?\d(?:[\d,]{0,20}\d)?(?:\.\d{1,4})?(?:[ \t]?(?:million|billion|bn|m)\b)?"

PERCENT_FIGURE = r"\d{1,3}(?:\.\d{1,4})?[ \t]*(?:%|per[ \t]?cent|basis[ \t]+points|bps)"

# 3.5:1 / 4.0x / 2.75 times
RATIO_FIGURE = (
    r"\d{1,4}(?:[.,]\d{1,3}){0,6}"
    r"(?:[ \t]?:[ \t]?1(?:\.0{1,2})?(?!\d))?"
    r"(?:[ \t]?(?:x|times)\b)?"
)

DATE_VALUE = (
    r"(\d{1,2}[ \t/\-][A-Za-z0-9]{1,9}[ \t/\-]\d{2,4}"
    r"|[A-Za-z]{3,9}[ \t]+\d{1,2},?[ \t]+\d{4})"
)


def _compile_all(patterns, flags: int = re.IGNORECASE) -> Tuple[re.Pattern, ...]:
    return tuple(re.compile(p, flags) for p in patterns)


# =============================================================================
# PARTIES
# =============================================================================

class PartyPatterns:
    """Role label patterns. Keywords are case-insensitive, names are not."""

    BORROWER = _compile_all([
        rf"\b(?i:borrowers?|obligors?)[ \t]*:[ \t]*{NAME}",
        rf"[\"“](?i:borrower)[\"”][ \t]*(?i:means|shall[ \t]+mean)[ \t]+(?:(?i:the)[ \t]+)?{NAME}",
    ], flags=0)

    LENDER = _compile_all([
        rf"\b(?i:lenders?|bank)[ \t]*:[ \t]*{NAME}",
        rf"[\"“](?i:lender)[\"”][ \t]*(?i:means|shall[ \t]+mean)[ \t]+(?:(?i:the)[ \t]+)?{NAME}",
    ], flags=0)

    AGENT = _compile_all([
        rf"\b(?i:(?:facility[ \t]+)?agent)[ \t]*:[ \t]*{NAME}",
    ], flags=0)

    GUARANTOR = _compile_all([
        rf"\b(?i:guarantors?)[ \t]*:[ \t]*{NAME}",
        rf"[\"“](?i:guarantor)[\"”][ \t]*(?i:means|shall[ \t]+mean)[ \t]+(?:(?i:the)[ \t]+)?{NAME}",
    ], flags=0)

    # A name ends at the first abbreviation that closes a sentence:
    # "Acme Inc. LENDER" -> "Acme Inc."
    SENTENCE_BREAK = re.compile(r"(?<=\.)[ \t]+(?=[A-Z])")


# =============================================================================
# FINANCIAL TERMS
# =============================================================================

class FinancialTermPatterns:
    """Ordered rules per financial field; the first success wins."""

    PRINCIPAL = _compile_all([
        rf"\b(?:principal|facility|commitment|loan)[ \t]+(?:amount|sum)[ \t]*:?[ \t]*"
        rf"(?:of[ \t]+)?(?:up[ \t]+to[ \t]+)?({AMOUNT})",
        rf"({AMOUNT})[ \t]+(?:facility|loan|credit)\b",
    ])

    # (currency, literal symbols, keyword pattern) in priority order
    CURRENCY = (
        (Currency.USD, ("$",), re.compile(r"\b(?:usd|dollars?)\b", re.IGNORECASE)),
        (Currency.GBP, ("£",), re.compile(r"\b(?:gbp|sterling)\b", re.IGNORECASE)),
        (Currency.EUR, ("€",), re.compile(r"\b(?:eur|euros?)\b", re.IGNORECASE)),
    )

    INTEREST_RATE = _compile_all([
        rf"\binterest[ \t]+rate[ \t]*(?::|is|shall[ \t]+be|will[ \t]+be)?[ \t]*(?:of[ \t]+)?{PERCENT_FIGURE}",
        rf"\bmargin[ \t]*:?[ \t]*(?:of[ \t]+)?{PERCENT_FIGURE}",
    ])

    MARGIN = _compile_all([
        r"\bmargin[ \t]*:?[ \t]*(?:of[ \t]+)?(\d{1,3}(?:\.\d{1,4})?)[ \t]*"
        r"(%|per[ \t]?cent|basis[ \t]+points|bps)",
    ])

    COMMITMENT_FEE = _compile_all([
        rf"\bcommitment[ \t]+fee[ \t]*:?[ \t]*(?:of[ \t]+)?({PERCENT_FIGURE})",
    ])

    # Most specific benchmark first so "Term SOFR" is not reported as "SOFR"
    REFERENCE_RATES = (
        "Term SOFR",
        "Compounded SOFR",
        "SOFR",
        "SONIA",
        "EURIBOR",
        "LIBOR",
    )

    FACILITY_TYPES = (
        "revolving",
        "term loan",
        "bridge",
        "acquisition",
        "working capital",
        "syndicated",
    )


# =============================================================================
# COVENANTS
# =============================================================================

class CovenantPatterns:
    """Covenant clause patterns by category."""

    FINANCIAL = _compile_all([
        # Leverage ratio
        rf"\bleverage[ \t]+ratio[^.]{{0,200}}?"
        rf"(?:not[ \t]+(?:to[ \t]+)?exceed|less[ \t]+than|greater[ \t]+than)"
        rf"[^.\d]{{0,120}}{RATIO_FIGURE}",
        # Interest cover
        rf"\binterest[ \t]+cover(?:age)?[ \t]+ratio[^.]{{0,200}}?"
        rf"(?:not[ \t]+(?:to[ \t]+)?exceed|not[ \t]+(?:be[ \t]+)?less[ \t]+than|at[ \t]+least|minimum)"
        rf"[^.\d]{{0,120}}{RATIO_FIGURE}",
        # Debt to equity / EBITDA
        rf"\bdebt[ \t\-]{{1,3}}(?:to[ \t\-]{{1,3}})?(?:equity|ebitda)[^.]{{0,100}}?ratio"
        rf"[^.\d]{{0,120}}{RATIO_FIGURE}",
        # Net worth / liquidity floors and caps
        rf"\b(?:minimum|maximum)[ \t]+(?:tangible[ \t]+)?(?:net[ \t]+worth|liquidity|cash)"
        rf"[^.\d$£€]{{0,120}}(?:{AMOUNT}|\d(?:[\d,]{{0,20}}\d)?(?:\.\d{{1,4}})?)",
    ])

    INFORMATIONAL = _compile_all([
        r"\b(?:deliver|provide|furnish)[^.]{0,200}?"
        r"(?:financial[ \t]+statements|accounts|reports)[^.]{0,100}",
        r"\b(?:annual|quarterly|monthly)[ \t]+(?:financial[ \t]+)?"
        r"(?:statements|reports|accounts)[^.]{0,50}",
    ])

    NEGATIVE_KEYWORDS = (
        "shall not",
        "will not",
        "must not",
        "prohibited from",
        "restriction on",
    )

    NEGATIVE = tuple(
        re.compile(rf"\b{re.escape(keyword)}[^.]{{10,150}}", re.IGNORECASE)
        for keyword in NEGATIVE_KEYWORDS
    )


# =============================================================================
# KEY DATES
# =============================================================================

class KeyDatePatterns:
    LABELED = _compile_all([
        rf"\b(?:maturity|termination|expiry)[ \t]+date[ \t]*:?[ \t]*{DATE_VALUE}",
        rf"\b(?:effective|closing|signing)[ \t]+date[ \t]*:?[ \t]*{DATE_VALUE}",
        rf"\b(?:repayment|payment)[ \t]+date[ \t]*:?[ \t]*{DATE_VALUE}",
    ])

    TENOR = re.compile(
        r"\b(?:tenor|term)[ \t]*:?[ \t]*(?:of[ \t]+)?(\d{1,3})[ \t]*(?:year|month|day)s?\b",
        re.IGNORECASE,
    )

    DATE_KEYWORD = re.compile(r"date", re.IGNORECASE)


# =============================================================================
# ESG
# =============================================================================

def _keyword_pattern(keywords: Tuple[str, ...]) -> re.Pattern:
    return re.compile(
        r"\b(?:" + "|".join(re.escape(k) for k in keywords) + r")",
        re.IGNORECASE,
    )


class ESGPatterns:
    """Keyword tables mapped to ESG flags, each tested independently."""

    ESG_KEYWORDS = (
        "esg",
        "sustainability",
        "environmental",
        "social",
        "governance",
        "green",
        "climate",
    )
    SUSTAINABILITY_LINKED_PHRASES = ("sustainability-linked", "sustainability linked")
    GREEN_LOAN_PHRASES = ("green loan", "green facility")
    MARGIN_RATCHET_PHRASES = ("margin adjustment", "margin ratchet")

    FLAGS = (
        ("has_esg_provisions", _keyword_pattern(ESG_KEYWORDS)),
        ("sustainability_linked", _keyword_pattern(SUSTAINABILITY_LINKED_PHRASES)),
        ("green_loan", _keyword_pattern(GREEN_LOAN_PHRASES)),
        ("margin_ratchet", _keyword_pattern(MARGIN_RATCHET_PHRASES)),
    )

    KPI = _compile_all([
        r"\b(?:kpi|key[ \t]+performance[ \t]+indicator)s?(?:[ \t]{0,3}\d{1,2})?"
        r"[ \t]*[:\-–][ \t]*([^.\n]{1,200})",
        r"\b(?:sustainability[ \t]+)?(?:target|metric)s?[ \t]*:?[ \t]*"
        r"([^.\n]{0,200}?(?:emission|carbon|renewable|diversity|waste)[^.\n]{0,200})",
    ])


# =============================================================================
# RISK FLAGS
# =============================================================================

@dataclass(frozen=True)
class RiskRule:
    """
    A fixed risk flag raised when every keyword group is satisfied.

    Each group is satisfied by any one of its phrases; phrases are matched
    against lower-cased text.
    """
    type: str
    severity: Severity
    description: str
    required_groups: Tuple[Tuple[str, ...], ...]

    def matches(self, lowered_text: str) -> bool:
        return all(
            any(phrase in lowered_text for phrase in group)
            for group in self.required_groups
        )


RISK_RULES = (
    RiskRule(
        type="Cross-Default",
        severity=Severity.HIGH,
        description="Cross-default provisions detected",
        required_groups=(("cross-default", "cross default"),),
    ),
    RiskRule(
        type="MAC Clause",
        severity=Severity.MEDIUM,
        description="Material Adverse Change clause present",
        required_groups=(("material adverse change", "mac clause"),),
    ),
    RiskRule(
        type="Change of Control",
        severity=Severity.MEDIUM,
        description="Change of control provisions detected",
        required_groups=(("change of control",),),
    ),
    RiskRule(
        type="Acceleration",
        severity=Severity.HIGH,
        description="Acceleration upon default provisions",
        required_groups=(("acceleration",), ("event of default",)),
    ),
)


# =============================================================================
# OBLIGATIONS
# =============================================================================

class ObligationPatterns:
    REPORTING = _compile_all([
        r"\b(?:shall|must|will)[ \t]+(?:deliver|provide|furnish)[^.]{0,200}?"
        r"(?:within|by|no[ \t]+later[ \t]+than)[ \t]+(\d{1,4})[ \t]*(?:business[ \t]+)?days?\b",
    ])
