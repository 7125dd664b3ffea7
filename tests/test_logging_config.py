"""
Tests for logging sink setup.
"""

from solgraph.logging_config import logger, setup_logging


class TestFileLogging:
    """Opt-in file sink"""

    def test_file_sink_when_enabled(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        setup_logging(suppress_console=True, enable_file_logging=True)
        logger.info("graph built")
        setup_logging(suppress_console=True, enable_file_logging=False)

        log_file = tmp_path / ".solgraph" / "logs" / "solgraph.log"
        assert "graph built" in log_file.read_text()

    def test_file_sink_from_environment(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("SOLGRAPH_FILE_LOGGING", "yes")

        setup_logging(suppress_console=True)
        logger.info("graph built")
        setup_logging(suppress_console=True, enable_file_logging=False)

        assert (tmp_path / ".solgraph" / "logs" / "solgraph.log").exists()

    def test_no_file_sink_by_default(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("SOLGRAPH_FILE_LOGGING", raising=False)

        setup_logging(suppress_console=True)
        logger.info("graph built")

        assert not (tmp_path / ".solgraph").exists()
