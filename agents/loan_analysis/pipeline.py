"""
LoanLens Extraction Pipeline

Runs the seven field extractors over one document and assembles the
immutable LoanAnalysis record.

Pipeline flow:
1. Validate input (empty / oversize text is rejected before any work)
2. Run every extractor against the same text
3. Build the summary from the extractor outputs
4. Stamp identity (id, timestamp, display name)
5. Optionally pass the record through an enrichment stage

Apart from id and timestamp the output is a pure function of the text and
the name, so analyzing the same document twice yields equal content.
"""

import logging
import re
import uuid
from datetime import datetime, timezone
from typing import Callable, Optional

from core.config import get_config

from .errors import EmptyInputError, InputTooLargeError
from .extractors import (
    CovenantExtractor,
    ESGExtractor,
    FinancialTermsExtractor,
    KeyDateExtractor,
    ObligationExtractor,
    PartyExtractor,
    RiskFlagExtractor,
)
from .models import (
    AnalysisSummary,
    Covenants,
    ESGClauses,
    FinancialTerms,
    KeyMetrics,
    LoanAnalysis,
    Parties,
)

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 255
_UNSAFE_NAME_CHARS = re.compile(r"[<>]")

Enricher = Callable[[str, LoanAnalysis], LoanAnalysis]


def sanitize_name(name: Optional[str], default: str) -> str:
    """Strip angle brackets and cap the display name; blank names fall back"""
    if name is None:
        return default
    cleaned = _UNSAFE_NAME_CHARS.sub("", str(name)).strip()[:MAX_NAME_LENGTH]
    return cleaned or default


def build_summary(
    parties: Parties,
    financial_terms: FinancialTerms,
    covenants: Covenants,
    esg_clauses: ESGClauses,
    risk_count: int,
) -> AnalysisSummary:
    return AnalysisSummary(
        total_parties=len(parties.borrowers) + len(parties.lenders),
        total_covenants=covenants.total,
        total_risks=risk_count,
        has_esg=esg_clauses.has_esg_provisions,
        key_metrics=KeyMetrics(
            amount=financial_terms.principal_amount,
            currency=financial_terms.currency,
            rate=financial_terms.interest_rate,
            type=financial_terms.facility_type,
        ),
    )


def _new_id() -> str:
    return uuid.uuid4().hex


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


class LoanAnalysisPipeline:
    """
    Fan the text out to every extractor and fan the results back in.

    Extractors are stateless and independent, so they run in sequence over
    the same text with no ordering constraints between them.
    """

    def __init__(
        self,
        max_input_chars: Optional[int] = None,
        default_name: Optional[str] = None,
        id_factory: Callable[[], str] = _new_id,
        clock: Callable[[], str] = _utc_timestamp,
        enricher: Optional[Enricher] = None,
    ):
        extraction = get_config().extraction
        self.max_input_chars = (
            max_input_chars if max_input_chars is not None else extraction.max_input_chars
        )
        self.default_name = default_name or extraction.default_document_name
        self.id_factory = id_factory
        self.clock = clock
        self.enricher = enricher

        self.party_extractor = PartyExtractor()
        self.financial_extractor = FinancialTermsExtractor()
        self.covenant_extractor = CovenantExtractor()
        self.date_extractor = KeyDateExtractor()
        self.esg_extractor = ESGExtractor()
        self.risk_extractor = RiskFlagExtractor()
        self.obligation_extractor = ObligationExtractor()

    def validate(self, text: Optional[str]) -> str:
        """Reject input that cannot be analyzed. Returns the text unchanged."""
        if text is None or not str(text).strip():
            raise EmptyInputError()
        text = str(text)
        if len(text) > self.max_input_chars:
            raise InputTooLargeError(len(text), self.max_input_chars)
        return text

    def analyze(self, text: Optional[str], name: Optional[str] = None) -> LoanAnalysis:
        """
        Produce the structured analysis of one agreement.

        Raises EmptyInputError or InputTooLargeError for unusable input.
        Text that matches no rule yields an analysis with empty fields.
        """
        text = self.validate(text)

        parties = self.party_extractor.extract(text)
        financial_terms = self.financial_extractor.extract(text)
        covenants = self.covenant_extractor.extract(text)
        key_dates = self.date_extractor.extract(text)
        esg_clauses = self.esg_extractor.extract(text)
        risk_flags = self.risk_extractor.extract(text)
        obligations = self.obligation_extractor.extract(text)

        analysis = LoanAnalysis(
            id=self.id_factory(),
            timestamp=self.clock(),
            name=sanitize_name(name, self.default_name),
            source_length=len(text),
            parties=parties,
            financial_terms=financial_terms,
            covenants=covenants,
            key_dates=key_dates,
            esg_clauses=esg_clauses,
            risk_flags=risk_flags,
            obligations=obligations,
            summary=build_summary(
                parties, financial_terms, covenants, esg_clauses, len(risk_flags)
            ),
        )

        logger.info(
            f"Analyzed '{analysis.name}' ({analysis.source_length:,} chars): "
            f"{analysis.summary.total_parties} parties, "
            f"{analysis.summary.total_covenants} covenants, "
            f"{analysis.summary.total_risks} risks",
            extra={"analysis_id": analysis.id},
        )

        return self._enrich(text, analysis)

    def analyze_and_store(self, text: Optional[str], store, name: Optional[str] = None) -> LoanAnalysis:
        """Analyze and publish the finished record to a store in one insert"""
        analysis = self.analyze(text, name=name)
        store.set(analysis.id, analysis)
        return analysis

    def _enrich(self, text: str, analysis: LoanAnalysis) -> LoanAnalysis:
        if self.enricher is None:
            return analysis

        try:
            enriched = self.enricher(text, analysis)
        except Exception as e:
            logger.warning(
                f"Enrichment failed for {analysis.id}, keeping base analysis: {e}",
                extra={"analysis_id": analysis.id},
            )
            return analysis

        if not isinstance(enriched, LoanAnalysis):
            logger.warning(
                f"Enricher returned {type(enriched).__name__} for {analysis.id}, "
                "keeping base analysis",
                extra={"analysis_id": analysis.id},
            )
            return analysis

        return enriched


def create_pipeline(
    max_input_chars: Optional[int] = None,
    enricher: Optional[Enricher] = None,
    **kwargs,
) -> LoanAnalysisPipeline:
    """Factory function to create a configured pipeline"""
    return LoanAnalysisPipeline(max_input_chars=max_input_chars, enricher=enricher, **kwargs)


def analyze_loan_document(text: Optional[str], name: Optional[str] = None) -> LoanAnalysis:
    """Convenience wrapper: analyze one document with the default pipeline"""
    return create_pipeline().analyze(text, name=name)
