"""LoanLens Core - Configuration and logging"""

from .config import (
    Environment,
    LogFormat,
    ExtractionConfig,
    LoggingConfig,
    LoanLensConfig,
    get_config,
    set_config,
)
from .logging_config import JSONFormatter, setup_logging

__all__ = [
    "Environment",
    "LogFormat",
    "ExtractionConfig",
    "LoggingConfig",
    "LoanLensConfig",
    "get_config",
    "set_config",
    "JSONFormatter",
    "setup_logging",
]
