"""
LoanLens Analysis Store
Keyed storage for finished LoanAnalysis records

Analyses are immutable, so readers share records without copying. Only the
key map itself is guarded.
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from agents.loan_analysis.errors import DuplicateAnalysisError
from agents.loan_analysis.models import LoanAnalysis

logger = logging.getLogger(__name__)


class BaseAnalysisStore(ABC):
    """Abstract base class for analysis store backends."""

    @abstractmethod
    def get(self, analysis_id: str) -> Optional[LoanAnalysis]:
        """Return the analysis, or None when the id is unknown."""
        pass

    @abstractmethod
    def set(self, analysis_id: str, analysis: LoanAnalysis) -> None:
        """Insert a finished analysis. Raises DuplicateAnalysisError on reuse of an id."""
        pass

    @abstractmethod
    def values(self) -> List[LoanAnalysis]:
        """All stored analyses in insertion order."""
        pass

    @abstractmethod
    def delete(self, analysis_id: str) -> bool:
        """Remove an analysis. Returns False when the id was unknown."""
        pass

    def __contains__(self, analysis_id: object) -> bool:
        return isinstance(analysis_id, str) and self.get(analysis_id) is not None

    def __len__(self) -> int:
        return len(self.values())


class InMemoryAnalysisStore(BaseAnalysisStore):
    """
    Process-local store backed by a dict.

    Inserts are atomic per key; a reader sees either no record or the
    complete one.
    """

    def __init__(self):
        self._analyses: Dict[str, LoanAnalysis] = {}
        self._lock = threading.Lock()

    def get(self, analysis_id: str) -> Optional[LoanAnalysis]:
        with self._lock:
            return self._analyses.get(analysis_id)

    def set(self, analysis_id: str, analysis: LoanAnalysis) -> None:
        if not isinstance(analysis, LoanAnalysis):
            raise TypeError(f"Expected LoanAnalysis, got {type(analysis).__name__}")

        with self._lock:
            if analysis_id in self._analyses:
                raise DuplicateAnalysisError(analysis_id)
            self._analyses[analysis_id] = analysis

        logger.debug(f"Stored analysis {analysis_id} ({analysis.name})")

    def values(self) -> List[LoanAnalysis]:
        with self._lock:
            return list(self._analyses.values())

    def delete(self, analysis_id: str) -> bool:
        with self._lock:
            removed = self._analyses.pop(analysis_id, None)
        return removed is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._analyses)


def get_analysis_store() -> BaseAnalysisStore:
    """Factory for the default store backend."""
    return InMemoryAnalysisStore()
