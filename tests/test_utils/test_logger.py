from __future__ import annotations

import io
import pytest
import logging
from typing import Generator
from unittest.mock import patch

from depprune.utils.logger import (
    ColoredFormatter,
    disable_logging,
    get_logger,
    is_logging_configured,
    level_for_verbosity,
    setup_logging,
)


@pytest.fixture
def clean_logger_state() -> Generator[None, None, None]:
    """Clean up logger state before and after each test.

    Clears all handlers from the depprune logger, restores propagation and
    resets the global configuration flag.
    """
    import depprune.utils.logger as logger_module

    root_logger = logging.getLogger("depprune")

    def _reset() -> None:
        root_logger.handlers.clear()
        root_logger.setLevel(logging.NOTSET)
        root_logger.propagate = True
        logger_module._logging_configured = False

    _reset()
    yield
    _reset()


@pytest.fixture
def captured_stream() -> io.StringIO:
    return io.StringIO()


def _record(level: int = logging.INFO, msg: str = "Test message") -> logging.LogRecord:
    return logging.LogRecord(
        name="depprune.test",
        level=level,
        pathname="test.py",
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )


@pytest.mark.unit
class TestColoredFormatter:
    """Tests for ColoredFormatter."""

    def test_format_with_color_enabled(self) -> None:
        formatter = ColoredFormatter("%(levelname)s: %(message)s", use_color=True)

        with patch.object(ColoredFormatter, "_should_use_color", return_value=True):
            result = formatter.format(_record())

        assert result == "\033[32mINFO\033[0m: Test message"

    def test_format_with_color_disabled(self) -> None:
        formatter = ColoredFormatter("%(levelname)s: %(message)s", use_color=False)

        assert formatter.format(_record()) == "INFO: Test message"

    def test_format_without_tty(self) -> None:
        formatter = ColoredFormatter("%(levelname)s: %(message)s", use_color=True)

        with patch.object(ColoredFormatter, "_should_use_color", return_value=False):
            assert formatter.format(_record(logging.ERROR)) == "ERROR: Test message"

    def test_format_restores_record_levelname(self) -> None:
        """Records are shared by handlers and must not keep color codes."""
        formatter = ColoredFormatter("%(levelname)s", use_color=True)
        record = _record(logging.WARNING)

        with patch.object(ColoredFormatter, "_should_use_color", return_value=True):
            formatter.format(record)

        assert record.levelname == "WARNING"

    def test_unknown_level_is_not_colored(self) -> None:
        formatter = ColoredFormatter("%(levelname)s", use_color=True)
        record = _record(25)

        with patch.object(ColoredFormatter, "_should_use_color", return_value=True):
            assert formatter.format(record) == "Level 25"

    @pytest.mark.parametrize(
        "env, isatty, expected",
        [
            ({"NO_COLOR": "1"}, True, False),
            ({"CI": "true"}, True, False),
            ({}, True, True),
            ({}, False, False),
        ],
        ids=["no-color", "ci", "tty", "not-tty"],
    )
    def test_should_use_color(self, env, isatty: bool, expected: bool) -> None:
        with patch.dict("os.environ", env, clear=True):
            with patch("sys.stderr") as mock_stderr:
                mock_stderr.isatty.return_value = isatty
                assert ColoredFormatter._should_use_color() is expected


@pytest.mark.unit
class TestLevelForVerbosity:
    """Tests for level_for_verbosity."""

    @pytest.mark.parametrize(
        "verbose, level",
        [(-1, logging.WARNING), (0, logging.WARNING), (1, logging.INFO), (2, logging.DEBUG), (5, logging.DEBUG)],
    )
    def test_maps_counts(self, verbose: int, level: int) -> None:
        assert level_for_verbosity(verbose) == level


@pytest.mark.unit
class TestSetupLogging:
    """Tests for setup_logging."""

    def test_installs_single_handler(
        self, clean_logger_state: None, captured_stream: io.StringIO
    ) -> None:
        setup_logging(level=logging.DEBUG, stream=captured_stream)
        setup_logging(level=logging.INFO, stream=captured_stream)

        root_logger = logging.getLogger("depprune")
        assert len(root_logger.handlers) == 1
        assert root_logger.level == logging.INFO
        assert root_logger.propagate is False
        assert is_logging_configured() is True

    def test_filters_by_level(
        self, clean_logger_state: None, captured_stream: io.StringIO
    ) -> None:
        setup_logging(level=logging.INFO, stream=captured_stream)
        logger = get_logger("core.analyzer")

        logger.debug("hidden")
        logger.info("shown")

        output = captured_stream.getvalue()
        assert "shown" in output
        assert "hidden" not in output

    def test_verbose_format_includes_logger_name(
        self, clean_logger_state: None, captured_stream: io.StringIO
    ) -> None:
        with patch.dict("os.environ", {"NO_COLOR": "1"}):
            setup_logging(level=logging.INFO, verbose=True, stream=captured_stream)
        get_logger("registry").info("loaded")

        assert " - depprune.registry - INFO - loaded" in captured_stream.getvalue()

    def test_default_format(
        self, clean_logger_state: None, captured_stream: io.StringIO
    ) -> None:
        with patch.dict("os.environ", {"NO_COLOR": "1"}):
            setup_logging(level=logging.WARNING, stream=captured_stream)
        get_logger("registry").warning("skipped")

        assert captured_stream.getvalue() == "WARNING: skipped\n"


@pytest.mark.unit
class TestGetLogger:
    """Tests for get_logger."""

    @pytest.mark.parametrize(
        "name, expected",
        [
            (None, "depprune"),
            ("depprune", "depprune"),
            ("registry", "depprune.registry"),
            ("depprune.core.analyzer", "depprune.core.analyzer"),
        ],
        ids=["none", "root", "short", "qualified"],
    )
    def test_namespacing(self, clean_logger_state: None, name, expected: str) -> None:
        assert get_logger(name).name == expected

    def test_adds_null_handler_when_unconfigured(self, clean_logger_state: None) -> None:
        logger = get_logger("isolated.component")

        assert any(isinstance(h, logging.NullHandler) for h in logger.handlers)


@pytest.mark.unit
class TestDisableLogging:
    """Tests for disable_logging."""

    def test_silences_output(
        self, clean_logger_state: None, captured_stream: io.StringIO
    ) -> None:
        setup_logging(level=logging.DEBUG, stream=captured_stream)

        disable_logging()
        get_logger("registry").error("silenced")

        assert captured_stream.getvalue() == ""
        assert is_logging_configured() is False
