from __future__ import annotations

import io
import logging
from typing import Generator
from unittest.mock import patch

import pytest

import pacpin.utils.logger as logger_module
from pacpin.utils.logger import (
    ColoredFormatter,
    get_logger,
    is_logging_configured,
    setup_logging,
    verbosity_to_level,
)


@pytest.fixture
def clean_logger_state() -> Generator[None, None, None]:
    """Clean up logger state before and after each test.

    Clears the handlers of the ``pacpin`` logger and resets the global
    configuration flag so tests don't interfere with each other.
    """
    root_logger = logging.getLogger("pacpin")
    root_logger.handlers.clear()
    root_logger.setLevel(logging.NOTSET)
    root_logger.propagate = True
    logger_module._logging_configured = False

    yield

    root_logger.handlers.clear()
    root_logger.setLevel(logging.NOTSET)
    root_logger.propagate = True
    logger_module._logging_configured = False


@pytest.fixture
def captured_stream() -> io.StringIO:
    """StringIO stream for capturing log output."""
    return io.StringIO()


def _record(level: int = logging.INFO, msg: str = "message") -> logging.LogRecord:
    return logging.LogRecord(
        name="pacpin.test",
        level=level,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )


@pytest.mark.unit
class TestColoredFormatter:
    """Tests for ColoredFormatter."""

    def test_format_with_color(self) -> None:
        """Test the level name is wrapped in ANSI codes on a color terminal."""
        formatter = ColoredFormatter("%(levelname)s: %(message)s", use_color=True)

        with patch.object(logger_module, "_stderr_supports_color", return_value=True):
            output = formatter.format(_record(logging.WARNING))

        assert output == "\033[33mWARNING\033[0m: message"

    def test_format_without_color(self) -> None:
        """Test plain output when color is disabled."""
        formatter = ColoredFormatter("%(levelname)s: %(message)s", use_color=False)

        assert formatter.format(_record()) == "INFO: message"

    def test_format_non_tty(self) -> None:
        """Test plain output when stderr is not a terminal."""
        formatter = ColoredFormatter("%(levelname)s: %(message)s", use_color=True)

        with patch.object(logger_module, "_stderr_supports_color", return_value=False):
            assert formatter.format(_record()) == "INFO: message"

    def test_format_preserves_original_record(self) -> None:
        """Test the record's level name is restored after formatting."""
        formatter = ColoredFormatter("%(levelname)s", use_color=True)
        record = _record(logging.ERROR)

        with patch.object(logger_module, "_stderr_supports_color", return_value=True):
            formatter.format(record)

        assert record.levelname == "ERROR"

    @pytest.mark.parametrize("variable", ["NO_COLOR", "CI"])
    def test_stderr_color_disabled_by_env(
        self, monkeypatch: pytest.MonkeyPatch, variable: str
    ) -> None:
        """Test NO_COLOR and CI disable colors."""
        monkeypatch.setenv(variable, "1")

        assert logger_module._stderr_supports_color() is False


@pytest.mark.unit
class TestVerbosityToLevel:
    """Tests for verbosity_to_level."""

    @pytest.mark.parametrize(
        "verbose, level",
        [(0, logging.WARNING), (1, logging.INFO), (2, logging.DEBUG), (5, logging.DEBUG)],
    )
    def test_mapping(self, verbose: int, level: int) -> None:
        """Test -v count maps to WARNING, INFO, DEBUG."""
        assert verbosity_to_level(verbose) == level


@pytest.mark.unit
class TestSetupLogging:
    """Tests for setup_logging."""

    def test_writes_to_stream(
        self, clean_logger_state: None, captured_stream: io.StringIO
    ) -> None:
        """Test messages at or above the level reach the stream."""
        setup_logging(level=logging.INFO, stream=captured_stream)

        get_logger("test").info("hello")
        get_logger("test").debug("hidden")

        output = captured_stream.getvalue()
        assert "hello" in output
        assert "hidden" not in output

    def test_verbose_format(
        self, clean_logger_state: None, captured_stream: io.StringIO
    ) -> None:
        """Test verbose format includes the logger name."""
        setup_logging(level=logging.DEBUG, verbose=True, stream=captured_stream)

        get_logger("resolver").debug("trace")

        assert "pacpin.resolver" in captured_stream.getvalue()

    def test_replaces_handlers(
        self, clean_logger_state: None, captured_stream: io.StringIO
    ) -> None:
        """Test repeated setup does not duplicate output."""
        setup_logging(stream=captured_stream)
        setup_logging(stream=captured_stream)

        get_logger("test").warning("once")

        assert captured_stream.getvalue().count("once") == 1
        assert len(logging.getLogger("pacpin").handlers) == 1

    def test_sets_configured_flag(self, clean_logger_state: None) -> None:
        """Test is_logging_configured reflects setup."""
        assert is_logging_configured() is False

        setup_logging(stream=io.StringIO())

        assert is_logging_configured() is True


@pytest.mark.unit
class TestGetLogger:
    """Tests for get_logger."""

    def test_no_name(self, clean_logger_state: None) -> None:
        """Test the package logger is returned without a name."""
        assert get_logger().name == "pacpin"
        assert get_logger("pacpin").name == "pacpin"

    def test_short_name(self, clean_logger_state: None) -> None:
        """Test short names are placed below pacpin."""
        assert get_logger("installer").name == "pacpin.installer"

    def test_dotted_module_name(self, clean_logger_state: None) -> None:
        """Test module names are used as they are."""
        assert get_logger("pacpin.core.resolver").name == "pacpin.core.resolver"

    def test_library_default_is_silent(self, clean_logger_state: None) -> None:
        """Test a NullHandler is attached when nothing is configured."""
        logger = get_logger("library_use")

        assert any(isinstance(h, logging.NullHandler) for h in logger.handlers)
