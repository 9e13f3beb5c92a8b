"""
Tests for Logging Configuration

Tests for storyforge/core/logging_config.py
"""

import logging

from storyforge.core.logging_config import (
    LogLevel,
    create_session_log,
    get_log_file,
    get_logger,
    setup_logging,
)


class TestLogging:
    """Tests for logger naming and setup."""

    def test_logger_namespaced(self):
        assert get_logger("storyboard.history").name == "storyforge.storyboard.history"
        assert get_logger("storyforge.custom").name == "storyforge.custom"

    def test_library_loggers_quieted(self):
        setup_logging(level=LogLevel.INFO, console_output=False)

        assert logging.getLogger("google_genai").level == logging.WARNING

        setup_logging(level=LogLevel.DEBUG, console_output=False)

        assert logging.getLogger("google_genai").level == logging.DEBUG

    def test_session_log_written(self, temp_dir):
        log_file = create_session_log(temp_dir / "logs", LogLevel.INFO)
        get_logger("test").info("panel generated")

        for handler in logging.getLogger("storyforge").handlers:
            handler.flush()

        assert get_log_file() == log_file
        assert log_file.name.startswith("storyforge_")
        assert "panel generated" in log_file.read_text(encoding="utf-8")

        root = logging.getLogger("storyforge")
        for handler in list(root.handlers):
            handler.close()
        setup_logging(level=LogLevel.INFO, console_output=False)
