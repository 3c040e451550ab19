from __future__ import annotations

import io
import logging
from typing import Generator
from unittest.mock import patch

import pytest

import chunkmc.utils.logger as logger_module
from chunkmc.utils.logger import (
    ColoredFormatter,
    disable_logging,
    get_logger,
    is_logging_configured,
    setup_logging,
    verbosity_to_level,
)


@pytest.fixture
def clean_logger_state() -> Generator[None, None, None]:
    """Reset the chunkmc logger and the module-level configured flag.

    Yields:
        None
    """
    root_logger = logging.getLogger("chunkmc")
    root_logger.handlers.clear()
    root_logger.setLevel(logging.NOTSET)
    logger_module._logging_configured = False

    yield

    root_logger.handlers.clear()
    root_logger.setLevel(logging.NOTSET)
    root_logger.propagate = True
    logger_module._logging_configured = False


@pytest.fixture
def captured_stream() -> io.StringIO:
    return io.StringIO()


def _record(level: int = logging.INFO, msg: str = "hello") -> logging.LogRecord:
    return logging.LogRecord(
        name="chunkmc.test",
        level=level,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )


@pytest.mark.unit
class TestColoredFormatter:
    """Tests for ColoredFormatter ANSI color formatting."""

    def test_init_default_values(self) -> None:
        formatter = ColoredFormatter("%(levelname)s: %(message)s")

        assert formatter.use_color is True
        assert formatter._fmt == "%(levelname)s: %(message)s"

    def test_plain_when_color_disabled(self) -> None:
        formatter = ColoredFormatter("%(levelname)s: %(message)s", use_color=False)

        assert formatter.format(_record()) == "INFO: hello"

    def test_colored_on_tty(self) -> None:
        """Test the level name is wrapped in its ANSI color on a terminal."""
        formatter = ColoredFormatter("%(levelname)s: %(message)s")

        with patch.object(ColoredFormatter, "_should_use_color", return_value=True):
            result = formatter.format(_record(logging.WARNING))

        assert result == "\033[33mWARNING\033[0m: hello"

    def test_record_levelname_restored(self) -> None:
        """Test the shared record is left untouched for other handlers."""
        formatter = ColoredFormatter("%(levelname)s")
        record = _record(logging.ERROR)

        with patch.object(ColoredFormatter, "_should_use_color", return_value=True):
            formatter.format(record)

        assert record.levelname == "ERROR"

    def test_unknown_level_not_colored(self) -> None:
        formatter = ColoredFormatter("%(levelname)s")
        record = _record(25)

        with patch.object(ColoredFormatter, "_should_use_color", return_value=True):
            assert "\033[" not in formatter.format(record)

    def test_no_color_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("NO_COLOR", "1")

        assert ColoredFormatter._should_use_color() is False

    def test_ci_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("CI", "true")

        assert ColoredFormatter._should_use_color() is False

    def test_isatty_failure(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("CI", raising=False)

        with patch("sys.stderr") as mock_stderr:
            mock_stderr.isatty.side_effect = OSError("closed")
            assert ColoredFormatter._should_use_color() is False


@pytest.mark.unit
class TestVerbosityToLevel:
    @pytest.mark.parametrize(
        "count,level",
        [
            (-1, logging.WARNING),
            (0, logging.WARNING),
            (1, logging.INFO),
            (2, logging.DEBUG),
            (5, logging.DEBUG),
        ],
    )
    def test_mapping(self, count: int, level: int) -> None:
        assert verbosity_to_level(count) == level


@pytest.mark.unit
class TestSetupLogging:
    """Tests for setup_logging configuration function."""

    def test_setup_default_config(
        self, clean_logger_state: None, captured_stream: io.StringIO
    ) -> None:
        setup_logging(stream=captured_stream)

        logger = logging.getLogger("chunkmc")
        assert logger.level == logging.INFO
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0], logging.StreamHandler)
        assert logger.propagate is False
        assert is_logging_configured() is True

    def test_setup_custom_level(
        self, clean_logger_state: None, captured_stream: io.StringIO
    ) -> None:
        setup_logging(level=logging.DEBUG, stream=captured_stream)

        logger = logging.getLogger("chunkmc")
        assert logger.level == logging.DEBUG
        assert logger.handlers[0].level == logging.DEBUG

    def test_default_format_output(
        self,
        clean_logger_state: None,
        captured_stream: io.StringIO,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv("NO_COLOR", "1")
        setup_logging(stream=captured_stream)

        get_logger("resolver").info("resolving %s", "sodium")

        assert captured_stream.getvalue() == "INFO: resolving sodium\n"

    def test_verbose_format_includes_logger_name(
        self,
        clean_logger_state: None,
        captured_stream: io.StringIO,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv("NO_COLOR", "1")
        setup_logging(level=logging.DEBUG, verbose=True, stream=captured_stream)

        get_logger("resolver").debug("cache hit")

        output = captured_stream.getvalue()
        assert " - chunkmc.resolver - DEBUG - " in output
        assert "cache hit" in output

    def test_messages_below_level_dropped(
        self, clean_logger_state: None, captured_stream: io.StringIO
    ) -> None:
        setup_logging(level=logging.WARNING, stream=captured_stream)

        get_logger("validator").info("quiet")

        assert captured_stream.getvalue() == ""

    def test_repeated_setup_replaces_handler(
        self, clean_logger_state: None, captured_stream: io.StringIO
    ) -> None:
        """Test calling setup twice does not duplicate output."""
        setup_logging(stream=captured_stream)
        setup_logging(stream=captured_stream)

        assert len(logging.getLogger("chunkmc").handlers) == 1

    def test_no_color_disables_formatter_color(
        self,
        clean_logger_state: None,
        captured_stream: io.StringIO,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv("NO_COLOR", "1")
        setup_logging(stream=captured_stream)

        formatter = logging.getLogger("chunkmc").handlers[0].formatter
        assert isinstance(formatter, ColoredFormatter)
        assert formatter.use_color is False


@pytest.mark.unit
class TestGetLogger:
    """Tests for get_logger name normalisation."""

    def test_root_logger(self, clean_logger_state: None) -> None:
        assert get_logger().name == "chunkmc"
        assert get_logger("chunkmc").name == "chunkmc"

    def test_short_name_prefixed(self, clean_logger_state: None) -> None:
        assert get_logger("resolver").name == "chunkmc.resolver"

    def test_qualified_name_kept(self, clean_logger_state: None) -> None:
        assert get_logger("chunkmc.resolver") is get_logger("resolver")

    def test_similar_prefix_not_treated_as_namespace(self, clean_logger_state: None) -> None:
        assert get_logger("chunkmcx").name == "chunkmc.chunkmcx"

    def test_null_handler_when_unconfigured(self, clean_logger_state: None) -> None:
        logger = get_logger("nullcheck")

        assert any(isinstance(h, logging.NullHandler) for h in logger.handlers)

    def test_null_handler_added_once(self, clean_logger_state: None) -> None:
        get_logger("once")
        logger = get_logger("once")

        assert len(logger.handlers) == 1


@pytest.mark.unit
class TestDisableLogging:
    def test_disable_after_setup(
        self, clean_logger_state: None, captured_stream: io.StringIO
    ) -> None:
        setup_logging(stream=captured_stream)

        disable_logging()
        get_logger("resolver").error("should not appear")

        root_logger = logging.getLogger("chunkmc")
        assert captured_stream.getvalue() == ""
        assert is_logging_configured() is False
        assert len(root_logger.handlers) == 1
        assert isinstance(root_logger.handlers[0], logging.NullHandler)

    def test_is_logging_configured_default(self, clean_logger_state: None) -> None:
        assert is_logging_configured() is False
