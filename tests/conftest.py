"""
LoanLens Test Configuration
===========================

Fixtures:
- Demo facility agreement and a few small single-purpose agreements
- Pipeline with deterministic ids and timestamps
- In-memory store pre-populated with contrasting loans
"""

import itertools
import logging
import sys
import os

import pytest

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from agents.loan_analysis import (
    DEMO_DOCUMENT_NAME,
    DEMO_FACILITY_AGREEMENT,
    LoanAnalysisPipeline,
)
from core.config import set_config
from core.logging_config import PACKAGE_LOGGERS
from storage import InMemoryAnalysisStore


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure pytest markers"""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests (CLI, multi-component)")


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    """Fresh config per test and no handlers left behind by the CLI"""
    for var in ("LOANLENS_MAX_INPUT_CHARS", "LOANLENS_ENV", "LOG_LEVEL", "LOG_FORMAT"):
        monkeypatch.delenv(var, raising=False)
    set_config(None)
    yield
    set_config(None)
    for name in PACKAGE_LOGGERS:
        logger = logging.getLogger(name)
        logger.handlers = []
        logger.propagate = True
        logger.setLevel(logging.NOTSET)


# =============================================================================
# Sample Agreements
# =============================================================================

FACILITY_AMOUNT_TEXT = (
    "BORROWER: Acme Corporation Limited. LENDER: Global Bank PLC. "
    "FACILITY AMOUNT: $500,000,000. Leverage Ratio: the Borrower shall ensure "
    "that the Leverage Ratio does not exceed 3.5:1."
)

STERLING_FACILITY_TEXT = """
BORROWER: Northwind Holdings Ltd
LENDER: Thames Capital Bank
FACILITY AMOUNT: £250,000,000
The facility bears interest at SONIA plus a margin of 175 bps.
This is a term loan facility.
Interest Cover Ratio: the Borrower shall ensure the Interest Cover Ratio is not less than 3.0:1.
"""

PLAIN_EURO_FACILITY_TEXT = """
BORROWER: Rhine Logistics GmbH
LENDER: Frankfurt Landesbank
FACILITY AMOUNT: €75,000,000
The facility bears interest at EURIBOR plus a margin of 2.25%.
"""


@pytest.fixture
def demo_text() -> str:
    return DEMO_FACILITY_AGREEMENT


@pytest.fixture
def facility_amount_text() -> str:
    return FACILITY_AMOUNT_TEXT


@pytest.fixture
def sterling_text() -> str:
    return STERLING_FACILITY_TEXT


@pytest.fixture
def euro_text() -> str:
    return PLAIN_EURO_FACILITY_TEXT


# =============================================================================
# Pipeline & Store
# =============================================================================

@pytest.fixture
def pipeline() -> LoanAnalysisPipeline:
    """Pipeline with sequential ids and a fixed clock"""
    counter = itertools.count(1)
    return LoanAnalysisPipeline(
        id_factory=lambda: f"loan{next(counter)}",
        clock=lambda: "2026-01-01T00:00:00+00:00",
    )


@pytest.fixture
def store() -> InMemoryAnalysisStore:
    return InMemoryAnalysisStore()


@pytest.fixture
def populated_store(pipeline, store, demo_text, sterling_text, euro_text):
    """
    Store holding three contrasting loans:
    - loan1: demo agreement (USD, Term SOFR, ESG, high-severity risks)
    - loan2: sterling facility (GBP, SONIA, no ESG, no risks)
    - loan3: euro facility (EUR, EURIBOR, no ESG, no risks)
    """
    pipeline.analyze_and_store(demo_text, store, name=DEMO_DOCUMENT_NAME)
    pipeline.analyze_and_store(sterling_text, store, name="Northwind.txt")
    pipeline.analyze_and_store(euro_text, store, name="Rhine.txt")
    return store
