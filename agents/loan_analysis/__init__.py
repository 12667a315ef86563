"""
LoanLens Loan Analysis Module

Rule-based extraction of commercial terms from loan and credit agreements,
plus the two consumers of stored analyses:
- Cross-document comparison with inconsistency detection
- Covenant compliance evaluation against actual metrics
"""

__version__ = "1.0.0"
__author__ = "LoanLens Team"

# =============================================================================
# Data Models & Errors
# =============================================================================
from .models import (
    Currency, Severity, Parties, FinancialTerms, Covenants, KeyDate,
    ESGClauses, RiskFlag, Obligation, KeyMetrics, AnalysisSummary, LoanAnalysis,
)

from .errors import (
    LoanAnalysisError, InputError, EmptyInputError, InputTooLargeError,
    InvalidMetricError, NotEnoughInputsError, TooManyInputsError,
    AnalysisNotFoundError, DuplicateAnalysisError,
)

# =============================================================================
# Extraction
# =============================================================================
from .patterns import (
    PartyPatterns, FinancialTermPatterns, CovenantPatterns, KeyDatePatterns,
    ESGPatterns, ObligationPatterns, RiskRule, RISK_RULES,
)

from .extractors import (
    PartyExtractor, FinancialTermsExtractor, CovenantExtractor, KeyDateExtractor,
    ESGExtractor, RiskFlagExtractor, ObligationExtractor,
)

from .pipeline import (
    LoanAnalysisPipeline, create_pipeline, analyze_loan_document, build_summary,
)

# =============================================================================
# Consumers
# =============================================================================
from .comparator import (
    Inconsistency, Comparison, LoanComparator, detect_inconsistencies, INCONSISTENCY_RULES,
)

from .compliance import (
    ActualMetrics, CheckStatus, CheckSeverity, OverallStatus, CovenantCheck,
    ComplianceSummary, ComplianceResult, CovenantComplianceEvaluator, COMPLIANCE_RULES,
)

from .samples import DEMO_FACILITY_AGREEMENT, DEMO_DOCUMENT_NAME

__all__ = [
    # Models
    "Currency", "Severity", "Parties", "FinancialTerms", "Covenants", "KeyDate",
    "ESGClauses", "RiskFlag", "Obligation", "KeyMetrics", "AnalysisSummary", "LoanAnalysis",
    # Errors
    "LoanAnalysisError", "InputError", "EmptyInputError", "InputTooLargeError",
    "InvalidMetricError", "NotEnoughInputsError", "TooManyInputsError",
    "AnalysisNotFoundError", "DuplicateAnalysisError",
    # Patterns
    "PartyPatterns", "FinancialTermPatterns", "CovenantPatterns", "KeyDatePatterns",
    "ESGPatterns", "ObligationPatterns", "RiskRule", "RISK_RULES",
    # Extractors
    "PartyExtractor", "FinancialTermsExtractor", "CovenantExtractor", "KeyDateExtractor",
    "ESGExtractor", "RiskFlagExtractor", "ObligationExtractor",
    # Pipeline
    "LoanAnalysisPipeline", "create_pipeline", "analyze_loan_document", "build_summary",
    # Comparator
    "Inconsistency", "Comparison", "LoanComparator", "detect_inconsistencies",
    "INCONSISTENCY_RULES",
    # Compliance
    "ActualMetrics", "CheckStatus", "CheckSeverity", "OverallStatus", "CovenantCheck",
    "ComplianceSummary", "ComplianceResult", "CovenantComplianceEvaluator", "COMPLIANCE_RULES",
    # Samples
    "DEMO_FACILITY_AGREEMENT", "DEMO_DOCUMENT_NAME",
]
