"""
Log output of the ssh-knownhosts command.

Text output is rendered by rich, json output by python-json-logger. Library
modules only use the ``logging`` functions and never install handlers, this is
done once by :func:`setup_logging`.
"""

import logging
import sys
import threading
from datetime import datetime, timezone
from typing import Any, Dict

from colored.colored import stylize  # type: ignore[import-untyped]
from pythonjsonlogger import jsonlogger
from rich._emoji_codes import EMOJI
from rich.highlighter import NullHighlighter
from rich.logging import RichHandler


class Colors:
    """Terminal decorations for log messages, disabled for json output."""

    enabled: bool = True

    @classmethod
    def emoji(cls, name: str) -> str:
        if not cls.enabled:
            return ""
        return EMOJI.get(name, "")

    @classmethod
    def stylize(cls, text: Any, styles: Any) -> Any:
        if not cls.enabled:
            return text
        return stylize(text, styles)


def rich_handler(debug: bool = False) -> RichHandler:
    return RichHandler(
        highlighter=NullHighlighter(),
        markup=False,
        rich_tracebacks=True,
        enable_link_path=debug,
        show_path=debug,
    )


class StdoutLogStream:
    """
    Stream for the json log handler.

    When stdout is a closed pipe, logging switches to text output on stderr.
    """

    def __init__(self, debug: bool = False) -> None:
        self.debug = debug

    def write(self, text: str) -> None:
        sys.stdout.write(text)

    def flush(self) -> None:
        try:
            sys.stdout.flush()
        except BrokenPipeError:
            sys.stdout = sys.stderr
            Colors.enabled = True
            root_logger = logging.getLogger()
            root_logger.handlers.clear()
            root_logger.addHandler(rich_handler(self.debug))
            logging.error("stdout was closed, logging to stderr")


class JsonLogFormatter(jsonlogger.JsonFormatter):
    def process_log_record(self, log_record: Dict[str, Any]) -> Dict[str, Any]:
        log_record["message"] = log_record["message"].strip()
        return log_record

    def add_fields(
        self,
        log_record: Dict[str, Any],
        record: logging.LogRecord,
        message_dict: Dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.fromtimestamp(
            record.created, timezone.utc
        ).strftime("%Y-%m-%dT%H:%M:%S.%fZ")
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["tid"] = threading.get_native_id()


def setup_logging(*, debug: bool = False, log_format: str = "text") -> None:
    """
    Configure the root logger.

    JSON output is used when requested or when stdout is not a terminal.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if debug else logging.INFO)
    root_logger.handlers.clear()
    if log_format == "json" or not sys.stdout.isatty():
        Colors.enabled = False
        log_handler = logging.StreamHandler(stream=StdoutLogStream(debug=debug))  # type: ignore[arg-type]
        log_handler.setFormatter(JsonLogFormatter())  # type: ignore[no-untyped-call]
        root_logger.addHandler(log_handler)
    else:
        Colors.enabled = True
        root_logger.addHandler(rich_handler(debug))
