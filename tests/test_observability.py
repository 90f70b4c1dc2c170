"""Tests for logging setup and observers."""

import logging

from judge_consensus.observability import NOISY_LOGGERS, CountingObserver, setup_logging


class TestSetupLogging:
    """Test logging configuration."""

    def test_file_handler(self, tmp_path):
        log_file = tmp_path / "logs" / "run.log"
        setup_logging(verbose=True, log_file=log_file, use_rich=False)
        logging.getLogger("judge_consensus.test").debug("written to file")
        for handler in logging.getLogger().handlers:
            handler.flush()
        assert "written to file" in log_file.read_text()

    def test_quiets_noisy_loggers(self):
        setup_logging()
        for name in NOISY_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING


class TestCountingObserver:
    """Test event and fallback counting."""

    def test_counts(self, caplog):
        observer = CountingObserver()
        with caplog.at_level(logging.INFO, logger="judge_consensus.events"):
            observer.record_event("sufficiency_vote", votes_for=2)
            observer.record_fallback("vote", "unparseable vote", model="m")
            observer.record_fallback("vote", "judge call failed", model="n")
        assert observer.events["sufficiency_vote"] == 1
        assert observer.summary()["total_fallbacks"] == 2
        assert observer.recent_fallbacks[-1].fields == {"model": "n"}
        assert any("[vote] fallback: unparseable vote" in r.getMessage() for r in caplog.records)

    def test_recent_bounded(self):
        observer = CountingObserver(max_recent=2)
        for i in range(5):
            observer.record_fallback("challenge", f"reason {i}")
        assert [r.reason for r in observer.recent_fallbacks] == ["reason 3", "reason 4"]
        assert observer.fallbacks["challenge"] == 5
