"""JSON line logging for archiver client processes.

Each line carries the emitting service, the event name as ``message`` and any
``extra`` fields under ``context``. Records logged with an archiver failure attached
also get an ``error`` object naming the failure kind and its status code.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, TextIO

_STANDARD_ATTRS = frozenset(logging.makeLogRecord({}).__dict__) | {"message", "asctime"}
_INSTALLED_ATTR = "_archiver_client_handler"


def _record_context(record: logging.LogRecord) -> dict[str, Any]:
    return {
        name: value
        for name, value in vars(record).items()
        if name not in _STANDARD_ATTRS and not name.startswith("_")
    }


def _error_summary(error: BaseException) -> dict[str, Any]:
    summary: dict[str, Any] = {"kind": type(error).__name__, "detail": str(error)}
    code = getattr(error, "code", None)
    if isinstance(code, (int, str)):
        summary["code"] = code
    return summary


class JsonFormatter(logging.Formatter):
    """Render one compact JSON object per record."""

    def __init__(self, service: str = "") -> None:
        super().__init__()
        self.service = service

    def format(self, record: logging.LogRecord) -> str:
        line: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if self.service:
            line["service"] = self.service

        context = _record_context(record)
        if context:
            line["context"] = context

        if record.exc_info and record.exc_info[1] is not None:
            line["error"] = _error_summary(record.exc_info[1])
            line["exception"] = self.formatException(record.exc_info)

        return json.dumps(line, ensure_ascii=True, separators=(",", ":"), default=str)


def configure_logging(
    level: str = "INFO", stream: TextIO | None = None, service: str = ""
) -> None:
    """Route the root logger to a JSON stream handler; later calls are ignored."""

    root = logging.getLogger()
    if getattr(root, _INSTALLED_ATTR, None) is not None:
        return

    handler = logging.StreamHandler(stream if stream is not None else sys.stdout)
    handler.setFormatter(JsonFormatter(service=service))
    root.handlers = [handler]
    root.setLevel(level.upper())
    setattr(root, _INSTALLED_ATTR, handler)
