"""
LoanLens Unit Tests: Configuration & Logging
============================================
"""

import json
import logging

import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from core.config import (
    Environment,
    LogFormat,
    LoggingConfig,
    LoanLensConfig,
    get_config,
    set_config,
)
from core.logging_config import JSONFormatter, PACKAGE_LOGGERS, setup_logging


@pytest.mark.unit
class TestLoanLensConfig:

    def test_defaults(self):
        config = LoanLensConfig.from_env()

        assert config.environment == Environment.DEVELOPMENT
        assert config.extraction.max_input_chars == 5_000_000
        assert config.extraction.default_document_name == "Pasted Text"
        assert config.logging.level == "INFO"
        assert config.logging.format == LogFormat.TEXT

    def test_environment_variables(self, monkeypatch):
        monkeypatch.setenv("LOANLENS_ENV", "Production")
        monkeypatch.setenv("LOANLENS_MAX_INPUT_CHARS", "1000")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("LOG_FORMAT", "json")

        config = LoanLensConfig.from_env()

        assert config.environment == Environment.PRODUCTION
        assert config.extraction.max_input_chars == 1000
        assert config.logging.level == "DEBUG"
        assert config.logging.format == LogFormat.JSON
        assert config.validate() == []

    def test_unknown_environment_falls_back(self, monkeypatch):
        monkeypatch.setenv("LOANLENS_ENV", "moon")

        assert LoanLensConfig.from_env().environment == Environment.DEVELOPMENT

    def test_validate_flags_text_logs_in_production(self, monkeypatch):
        monkeypatch.setenv("LOANLENS_ENV", "production")

        issues = LoanLensConfig.from_env().validate()

        assert any("LOG_FORMAT" in issue for issue in issues)

    def test_global_instance_cached(self):
        assert get_config() is get_config()

    def test_set_config(self):
        custom = LoanLensConfig.from_env()
        custom.extraction.max_input_chars = 42
        set_config(custom)

        assert get_config().extraction.max_input_chars == 42


@pytest.mark.unit
class TestLogging:

    def test_json_formatter(self):
        record = logging.LogRecord(
            name="agents.loan_analysis.pipeline",
            level=logging.INFO,
            pathname=__file__,
            lineno=1,
            msg="Analyzed %s",
            args=("Deal",),
            exc_info=None,
        )
        record.analysis_id = "abc123"

        data = json.loads(JSONFormatter().format(record))

        assert data["message"] == "Analyzed Deal"
        assert data["level"] == "INFO"
        assert data["logger"] == "agents.loan_analysis.pipeline"
        assert data["analysis_id"] == "abc123"

    def test_setup_logging_configures_package_loggers(self):
        setup_logging(LoggingConfig(level="WARNING", format=LogFormat.JSON))

        for name in PACKAGE_LOGGERS:
            logger = logging.getLogger(name)
            assert logger.level == logging.WARNING
            assert len(logger.handlers) == 1
            assert isinstance(logger.handlers[0].formatter, JSONFormatter)

    def test_setup_logging_is_idempotent(self):
        setup_logging()
        setup_logging()

        assert len(logging.getLogger("agents").handlers) == 1
