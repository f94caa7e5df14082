import logging

import pytest

from ats_match.utils.logging_config import (
    PerformanceMonitor,
    configure_for_environment,
    get_logger,
    log_function_call,
)


@pytest.fixture(autouse=True)
def restore_testing_logging(monkeypatch):
    yield
    monkeypatch.setenv("ENVIRONMENT", "testing")
    configure_for_environment()


class TestConfigureForEnvironment:
    """Test cases for environment-driven logging setup"""

    def test_testing_writes_no_files(self, monkeypatch, tmp_path):
        monkeypatch.setenv("ENVIRONMENT", "testing")
        monkeypatch.setenv("LOG_DIR", str(tmp_path / "logs"))

        configure_for_environment()

        assert logging.getLogger().level == logging.WARNING
        assert not (tmp_path / "logs").exists()

    def test_production_uses_log_level_and_files(self, monkeypatch, tmp_path):
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.setenv("LOG_LEVEL", "error")
        monkeypatch.setenv("LOG_DIR", str(tmp_path / "logs"))

        configure_for_environment()

        assert logging.getLogger().level == logging.ERROR
        names = sorted(p.name for p in (tmp_path / "logs").iterdir())
        assert len(names) == 2
        assert names[0].startswith("ats_match_")
        assert names[1].startswith("ats_match_errors_")


class TestLoggerHelpers:
    """Test cases for get_logger, log_function_call and PerformanceMonitor"""

    def test_loggers_live_under_ats_match(self):
        assert get_logger("performance").name == "ats_match.performance"
        assert get_logger("ats_match.services.llm").name == "ats_match.services.llm"

    def test_log_function_call_reraises(self):
        @log_function_call
        def broken():
            raise RuntimeError("no text layer")

        with pytest.raises(RuntimeError):
            broken()
        assert broken.__name__ == "broken"

    def test_slow_operation_warns(self, caplog):
        logger = get_logger("tests.performance")
        with caplog.at_level(logging.INFO, logger="ats_match.tests.performance"):
            with PerformanceMonitor("resume structuring", logger, threshold_ms=-1):
                pass
        assert "threshold" in caplog.records[-1].getMessage()
        assert caplog.records[-1].levelno == logging.WARNING
