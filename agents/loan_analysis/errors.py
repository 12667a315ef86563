"""
LoanLens error taxonomy.

Input errors are raised before any extraction work starts, so no partial
analysis is ever produced. Lookup errors carry the identifiers that were
missing instead of silently dropping them.
"""

from typing import Any, Iterable, List


class LoanAnalysisError(Exception):
    """Base class for all LoanLens errors"""
    pass


class InputError(LoanAnalysisError, ValueError):
    """Caller supplied input that cannot be processed"""
    pass


class EmptyInputError(InputError):
    """Raised when the document text is empty or whitespace-only"""

    def __init__(self, message: str = "No text provided"):
        super().__init__(message)


class InputTooLargeError(InputError):
    """Raised when the document text exceeds the configured size cap"""

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(
            f"Text too long: {size:,} characters exceeds the maximum of {limit:,}"
        )


class InvalidMetricError(InputError):
    """Raised when an actual metric does not parse to a finite number"""

    def __init__(self, key: str, value: Any = None):
        self.key = key
        self.value = value
        super().__init__(f"Invalid value for {key}: {value!r}")


class NotEnoughInputsError(InputError):
    """Raised when fewer loans than required are given for comparison"""

    def __init__(self, count: int, minimum: int = 2):
        self.count = count
        self.minimum = minimum
        super().__init__(f"Need at least {minimum} loans to compare, got {count}")


class TooManyInputsError(InputError):
    """Raised when more loans than allowed are given for comparison"""

    def __init__(self, count: int, maximum: int = 10):
        self.count = count
        self.maximum = maximum
        super().__init__(f"Maximum {maximum} loans can be compared at once, got {count}")


class AnalysisNotFoundError(LoanAnalysisError, LookupError):
    """Raised when one or more analysis ids are not present in the store"""

    def __init__(self, missing_ids: Iterable[str]):
        self.missing_ids: List[str] = list(missing_ids)
        super().__init__(f"Loan not found: {', '.join(self.missing_ids)}")


class DuplicateAnalysisError(LoanAnalysisError, KeyError):
    """Raised when an analysis id is already present in the store"""

    def __init__(self, analysis_id: str):
        self.analysis_id = analysis_id
        super().__init__(analysis_id)

    def __str__(self) -> str:
        return f"Analysis already stored: {self.analysis_id}"
