"""
LoanLens Unit Tests: Extraction Pipeline
========================================

Tests:
- Input validation (empty, whitespace, oversize)
- Empty analysis for text with no recognizable terms
- Determinism apart from id and timestamp
- Summary derivation
- Document name handling
- Enrichment stage isolation
- Publishing to a store
"""

import dataclasses
import logging

import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from agents.loan_analysis import (
    Currency,
    EmptyInputError,
    InputError,
    InputTooLargeError,
    LoanAnalysis,
    LoanAnalysisPipeline,
    analyze_loan_document,
    create_pipeline,
)
from core.config import ExtractionConfig


# =============================================================================
# Input Validation
# =============================================================================

@pytest.mark.unit
class TestInputValidation:
    """Unusable input is rejected before extraction"""

    @pytest.mark.parametrize("text", [None, "", "   ", "\n\t \n"])
    def test_empty_input(self, pipeline, text):
        with pytest.raises(EmptyInputError) as exc_info:
            pipeline.analyze(text)

        assert str(exc_info.value) == "No text provided"

    def test_input_errors_are_value_errors(self, pipeline):
        with pytest.raises(ValueError):
            pipeline.analyze("")

    def test_oversize_input(self):
        pipeline = LoanAnalysisPipeline(max_input_chars=10)

        with pytest.raises(InputTooLargeError) as exc_info:
            pipeline.analyze("x" * 11)

        assert exc_info.value.size == 11
        assert exc_info.value.limit == 10
        assert isinstance(exc_info.value, InputError)

    def test_limit_is_inclusive(self):
        pipeline = LoanAnalysisPipeline(max_input_chars=10)
        analysis = pipeline.analyze("x" * 10)

        assert analysis.source_length == 10

    def test_limit_from_environment(self, monkeypatch):
        monkeypatch.setenv("LOANLENS_MAX_INPUT_CHARS", "5")
        pipeline = LoanAnalysisPipeline()

        assert pipeline.max_input_chars == 5
        with pytest.raises(InputTooLargeError):
            pipeline.analyze("abcdef")

    def test_default_limit(self):
        assert LoanAnalysisPipeline().max_input_chars == ExtractionConfig().max_input_chars == 5_000_000

    def test_explicit_zero_limit_kept(self):
        """A zero limit is honoured, not replaced by the configured default"""
        pipeline = LoanAnalysisPipeline(max_input_chars=0)

        assert pipeline.max_input_chars == 0
        with pytest.raises(InputTooLargeError):
            pipeline.analyze("x")


# =============================================================================
# Analysis
# =============================================================================

@pytest.mark.unit
class TestAnalyze:
    """Tests for the assembled analysis record"""

    def test_no_recognizable_terms(self, pipeline):
        """Text matching no rule yields an empty but valid analysis"""
        analysis = pipeline.analyze("hello world")

        assert analysis.parties.borrowers == ()
        assert analysis.parties.lenders == ()
        assert analysis.parties.agents == ()
        assert analysis.financial_terms.principal_amount is None
        assert analysis.financial_terms.currency is None
        assert analysis.covenants.total == 0
        assert analysis.key_dates == ()
        assert analysis.esg_clauses.has_esg_provisions is False
        assert analysis.risk_flags == ()
        assert analysis.obligations == ()
        assert analysis.summary.total_parties == 0
        assert analysis.summary.total_covenants == 0
        assert analysis.summary.total_risks == 0

    def test_facility_amount_example(self, pipeline, facility_amount_text):
        analysis = pipeline.analyze(facility_amount_text)

        assert analysis.parties.borrowers == ("Acme Corporation Limited",)
        assert analysis.financial_terms.currency == Currency.USD
        assert "$500,000,000" in analysis.financial_terms.principal_amount
        assert len(analysis.covenants.financial) == 1
        assert "3.5:1" in analysis.covenants.financial[0]

    def test_identity_fields(self, pipeline, demo_text):
        analysis = pipeline.analyze(demo_text)

        assert analysis.id == "loan1"
        assert analysis.timestamp == "2026-01-01T00:00:00+00:00"
        assert analysis.source_length == len(demo_text)

    def test_default_ids_are_unique(self, demo_text):
        pipeline = create_pipeline()
        first = pipeline.analyze(demo_text)
        second = pipeline.analyze(demo_text)

        assert first.id != second.id
        assert first.timestamp.endswith("+00:00")

    def test_deterministic_content(self, demo_text):
        """Two runs over the same text differ only in id and timestamp"""
        first = analyze_loan_document(demo_text, name="Deal")
        second = analyze_loan_document(demo_text, name="Deal")

        assert first.content_dict() == second.content_dict()
        assert first.id != second.id

    def test_summary(self, pipeline, demo_text):
        analysis = pipeline.analyze(demo_text)
        summary = analysis.summary

        assert summary.total_parties == (
            len(analysis.parties.borrowers) + len(analysis.parties.lenders)
        )
        assert summary.total_covenants == analysis.covenants.total
        assert summary.total_risks == len(analysis.risk_flags) == 4
        assert summary.has_esg is True
        assert summary.key_metrics.amount == "$500,000,000"
        assert summary.key_metrics.currency == Currency.USD
        assert summary.key_metrics.rate == analysis.financial_terms.interest_rate
        assert summary.key_metrics.type == "Revolving"

    def test_analysis_is_immutable(self, pipeline, demo_text):
        analysis = pipeline.analyze(demo_text)

        with pytest.raises(dataclasses.FrozenInstanceError):
            analysis.name = "changed"

    def test_to_dict_is_json_ready(self, pipeline, demo_text):
        data = pipeline.analyze(demo_text).to_dict()

        assert data["id"] == "loan1"
        assert data["financial_terms"]["currency"] == "USD"
        assert data["risk_flags"][0]["severity"] == "high"
        assert isinstance(data["parties"]["borrowers"], list)
        assert "id" not in pipeline.analyze(demo_text).content_dict()


# =============================================================================
# Document Names
# =============================================================================

@pytest.mark.unit
class TestDocumentName:
    """Tests for display name handling"""

    def test_default_name(self, pipeline):
        assert pipeline.analyze("some text").name == "Pasted Text"

    def test_angle_brackets_removed(self, pipeline):
        analysis = pipeline.analyze("some text", name="<b>Deal</b>.pdf")

        assert analysis.name == "bDeal/b.pdf"

    def test_name_truncated(self, pipeline):
        analysis = pipeline.analyze("some text", name="a" * 300)

        assert len(analysis.name) == 255

    def test_blank_name_falls_back(self, pipeline):
        assert pipeline.analyze("some text", name="<>").name == "Pasted Text"


# =============================================================================
# Enrichment
# =============================================================================

@pytest.mark.unit
class TestEnrichment:
    """The enrichment stage can refine but never break an analysis"""

    def test_enricher_result_used(self, demo_text):
        def rename(text, analysis):
            return dataclasses.replace(analysis, name="Enriched")

        pipeline = create_pipeline(enricher=rename)

        assert pipeline.analyze(demo_text).name == "Enriched"

    def test_enricher_called_once(self, demo_text):
        calls = []

        def record(text, analysis):
            calls.append(analysis.id)
            return analysis

        create_pipeline(enricher=record).analyze(demo_text)

        assert len(calls) == 1

    def test_enricher_failure_ignored(self, demo_text, caplog):
        def explode(text, analysis):
            raise RuntimeError("model offline")

        analysis = create_pipeline(enricher=explode).analyze(demo_text)

        assert isinstance(analysis, LoanAnalysis)
        assert analysis.parties.borrowers == ("Acme Corporation Limited",)
        assert "model offline" in caplog.text

    def test_log_records_carry_analysis_id(self, pipeline, demo_text, caplog):
        with caplog.at_level(logging.INFO, logger="agents.loan_analysis.pipeline"):
            analysis = pipeline.analyze(demo_text)

        assert any(
            getattr(record, "analysis_id", None) == analysis.id for record in caplog.records
        )

    def test_enricher_wrong_type_ignored(self, demo_text):
        analysis = create_pipeline(enricher=lambda text, analysis: {"bad": True}).analyze(demo_text)

        assert isinstance(analysis, LoanAnalysis)

    def test_enricher_not_called_for_bad_input(self):
        calls = []
        pipeline = create_pipeline(enricher=lambda text, analysis: calls.append(1))

        with pytest.raises(EmptyInputError):
            pipeline.analyze("")
        assert calls == []


# =============================================================================
# Store Publishing
# =============================================================================

@pytest.mark.unit
class TestAnalyzeAndStore:

    def test_published_to_store(self, pipeline, store, demo_text):
        analysis = pipeline.analyze_and_store(demo_text, store, name="Demo")

        assert store.get(analysis.id) is analysis
        assert len(store) == 1

    def test_failed_analysis_not_stored(self, pipeline, store):
        with pytest.raises(EmptyInputError):
            pipeline.analyze_and_store("  ", store)

        assert len(store) == 0
