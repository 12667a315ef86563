"""
LoanLens Configuration
Environment-based configuration for the extraction pipeline and its hosts
"""

import os
from typing import Optional
from dataclasses import dataclass, field
from enum import Enum


class Environment(str, Enum):
    """Deployment environment"""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class LogFormat(str, Enum):
    TEXT = "text"
    JSON = "json"


@dataclass
class ExtractionConfig:
    """Configuration for document analysis"""
    # Oversize documents are rejected before any pattern runs
    max_input_chars: int = 5_000_000

    # Display name for documents submitted without one
    default_document_name: str = "Pasted Text"

    def __post_init__(self):
        """Load from environment variables"""
        self.max_input_chars = int(os.getenv("LOANLENS_MAX_INPUT_CHARS", self.max_input_chars))
        self.default_document_name = os.getenv(
            "LOANLENS_DEFAULT_DOCUMENT_NAME", self.default_document_name
        )


@dataclass
class LoggingConfig:
    """Configuration for log output"""
    level: str = "INFO"
    format: LogFormat = LogFormat.TEXT

    def __post_init__(self):
        """Load from environment variables"""
        self.level = os.getenv("LOG_LEVEL", self.level).upper()
        fmt = os.getenv("LOG_FORMAT", self.format.value)
        try:
            self.format = LogFormat(fmt.lower())
        except ValueError:
            self.format = LogFormat.TEXT


@dataclass
class LoanLensConfig:
    """Master configuration for LoanLens"""
    environment: Environment = Environment.DEVELOPMENT

    # Sub-configurations
    extraction: ExtractionConfig = field(default_factory=ExtractionConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def __post_init__(self):
        """Load environment from env var"""
        env_str = os.getenv("LOANLENS_ENV", self.environment.value)
        try:
            self.environment = Environment(env_str.lower())
        except ValueError:
            self.environment = Environment.DEVELOPMENT

    @classmethod
    def from_env(cls) -> "LoanLensConfig":
        """Create configuration from environment variables"""
        return cls(
            extraction=ExtractionConfig(),
            logging=LoggingConfig(),
        )

    def validate(self) -> list:
        """Validate configuration and return list of issues"""
        issues = []

        if self.extraction.max_input_chars <= 0:
            issues.append("LOANLENS_MAX_INPUT_CHARS must be positive")
        if not self.extraction.default_document_name.strip():
            issues.append("LOANLENS_DEFAULT_DOCUMENT_NAME must not be blank")

        # JSON logs are expected wherever output is shipped to a collector
        if self.environment == Environment.PRODUCTION and self.logging.format != LogFormat.JSON:
            issues.append("LOG_FORMAT should be 'json' in production")

        return issues


# Global configuration instance
_config: Optional[LoanLensConfig] = None


def get_config() -> LoanLensConfig:
    """Get the global configuration instance"""
    global _config
    if _config is None:
        _config = LoanLensConfig.from_env()
    return _config


def set_config(config: Optional[LoanLensConfig]) -> None:
    """Set the global configuration instance (None reloads from env on next use)"""
    global _config
    _config = config
