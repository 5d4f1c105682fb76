import json
import logging
import os
import sys
import time
import uuid


_RESET = "\033[0m"

# Checked in order; first match wins
_EVENT_COLORS = (
    (("FAILED", "ERROR"), "\033[31m"),
    (("WARNING",), "\033[33m"),
    (("STARTED", "COMPLETED"), "\033[32m"),
    (("DDL", "COPY", "MERGE"), "\033[36m"),
)
_DEFAULT_COLOR = "\033[35m"


def _use_color() -> bool:
    return os.getenv("LOG_COLOR", "0") == "1" and sys.stdout.isatty()


def _event_color(event_type: str, level: int) -> str:
    if level >= logging.ERROR:
        return _EVENT_COLORS[0][1]
    if level >= logging.WARNING:
        return _EVENT_COLORS[1][1]
    et = (event_type or "").upper()
    for markers, color in _EVENT_COLORS:
        if any(m in et for m in markers):
            return color
    return _DEFAULT_COLOR


class _EventFormatter(logging.Formatter):
    """
    Renders one JSON object per record, colored by event when LOG_COLOR=1
    and stdout is a terminal.
    """

    def format(self, record: logging.LogRecord) -> str:
        text = record.getMessage()
        event_type = getattr(record, "event_type", "")
        if _use_color():
            return f"{_event_color(event_type, record.levelno)}{text}{_RESET}"
        return text


def get_logger() -> logging.Logger:
    logger = logging.getLogger("schemabridge")
    if logger.handlers:
        return logger

    level_name = os.getenv("SCHEMABRIDGE_LOG_LEVEL", "INFO").upper()
    logger.setLevel(getattr(logging, level_name, logging.INFO))

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(_EventFormatter())
    logger.addHandler(handler)
    logger.propagate = False
    return logger


logger = get_logger()


def generate_request_id() -> str:
    return str(uuid.uuid4())


def log_event(event_type: str, payload: dict, level: int = logging.INFO):
    """
    Emit a structured event: `{"event_type": ..., **payload}` as one JSON line.
    Payload values that are not JSON types are rendered with str().
    """
    if not logger.isEnabledFor(level):
        return

    text = json.dumps({"event_type": event_type, **payload}, default=str)
    logger.log(level, text, extra={"event_type": event_type})


class RequestTimer:
    """Wall-clock duration of a request, in seconds."""

    def __init__(self):
        self.start_time = time.perf_counter()

    def duration(self) -> float:
        return round(time.perf_counter() - self.start_time, 4)
