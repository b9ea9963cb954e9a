"""Log output setup for the comfyrun CLI.

Library modules only create loggers with ``logging.getLogger(__name__)`` and
attach job context through ``extra``. This module decides how those records
are rendered, as plain text for terminals or one JSON object per line for log
collectors.
"""

import json
import logging
import time

TEXT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Context attributes set through ``extra=`` by the submitter, poller and fetcher
JOB_CONTEXT_FIELDS = ("event", "prompt_id", "artifact")


class JsonFormatter(logging.Formatter):
    """Render each record as a single-line JSON object.

    The object always carries ``ts`` (UTC, ISO 8601), ``level``, ``logger``
    and ``msg``. Job context fields are copied only when the record has them,
    and a formatted traceback is added under ``exc_info`` when present.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(record.created)),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for field in JOB_CONTEXT_FIELDS:
            if hasattr(record, field):
                entry[field] = getattr(record, field)
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", json_output: bool = False) -> None:
    """Install a single stderr handler on the root logger.

    Args:
        level: Level name such as "DEBUG" or "info". Unknown names fall back
            to INFO.
        json_output: Emit JSON lines instead of the text format.

    Calling it again replaces the previous handler, so the CLI can be invoked
    repeatedly in one process without duplicating output.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter() if json_output else logging.Formatter(TEXT_FORMAT))
    root.handlers.clear()
    root.addHandler(handler)
