"""Tests for logging setup and result printing."""

import io
import json
import logging
import sys

from rich.console import Console

from callgate.dispatch import Dispatcher, InvocationResult
from callgate.handlers import Handler
from callgate.utils import StructuredFormatter, print_result, setup_logging


def _record(msg="hello", **extra):
    record = logging.LogRecord("callgate.test", logging.ERROR, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestStructuredFormatter:
    """Tests for JSON log formatting."""

    def test_basic_fields(self):
        data = json.loads(StructuredFormatter().format(_record()))
        assert data["level"] == "ERROR"
        assert data["message"] == "hello"
        assert data["logger"] == "callgate.test"
        assert data["timestamp"].endswith("Z")

    def test_extra_fields(self):
        record = _record(stage="render", event="handler_fault", metadata={"target": "Greeter.hello"})
        data = json.loads(StructuredFormatter().format(record))
        assert data["stage"] == "render"
        assert data["event"] == "handler_fault"
        assert data["metadata"] == {"target": "Greeter.hello"}

    def test_exception_info(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = _record()
            record.exc_info = sys.exc_info()
        data = json.loads(StructuredFormatter().format(record))
        assert "RuntimeError: boom" in data["exception"]


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_file_logging(self, tmp_path):
        log_file = tmp_path / "logs" / "callgate.log"
        logger = setup_logging(log_file=log_file, log_level="debug", console_output=False)
        try:
            logger.info("dispatched", extra={"event": "test"})
            for handler in logger.handlers:
                handler.flush()

            line = json.loads(log_file.read_text().strip())
            assert line["message"] == "dispatched"
            assert line["event"] == "test"
            assert logger.level == logging.DEBUG
        finally:
            for handler in logger.handlers:
                handler.close()
            logger.handlers = []

    def test_no_handlers_without_outputs(self):
        logger = setup_logging(console_output=False)
        assert logger.handlers == []


class TestPrintResult:
    """Tests for print_result."""

    def _console(self):
        buffer = io.StringIO()
        return Console(file=buffer, width=120, color_system=None), buffer

    def test_ok_result(self):
        console, buffer = self._console()
        print_result(InvocationResult(output="Hi World", value=[1, 2]), console)
        text = buffer.getvalue()
        assert "Hi World\n" in text
        assert "return: [1, 2]" in text

    def test_error_result(self):
        console, buffer = self._console()
        print_result(
            InvocationResult(error_message="Requested method must be public.", error_kind="policy"),
            console,
        )
        assert "policy error: Requested method must be public." in buffer.getvalue()


class TestLoggingDuringDispatch:
    """Logging while a handler runs inside a capture scope."""

    def test_pretty_fault_log_stays_out_of_echo(self, registry, capsys):
        """Fault logs go to stderr, not into the captured handler output."""
        class Boom(Handler):
            def go(self):
                print("X", end="")
                raise RuntimeError("boom")

        registry.register_class("Boom", Boom)
        logger = setup_logging(log_format="pretty")
        try:
            dispatcher = Dispatcher(registry=registry)
            dispatcher.set_route_class_method("Boom", "go")

            result = dispatcher.invoke()

            assert result.echo() == "X"
            assert "RuntimeError" in capsys.readouterr().err
        finally:
            logger.handlers = []
