# LoanLens Storage Layer
# Keyed, process-local storage for finished analyses

from storage.analysis_store import (
    BaseAnalysisStore,
    InMemoryAnalysisStore,
    get_analysis_store,
)

__all__ = [
    "BaseAnalysisStore",
    "InMemoryAnalysisStore",
    "get_analysis_store",
]
