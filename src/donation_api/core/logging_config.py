import json
import logging
import sys

# Attributes every LogRecord carries; anything else came in through ``extra=``
_RECORD_ATTRS = set(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}

NOISY_LOGGERS = ("botocore", "urllib3", "stripe", "httpx")


class JsonFormatter(logging.Formatter):
    """
    One JSON object per line. Context passed as ``extra={"endpoint": ...}``
    or ``extra={"event_id": ...}`` is emitted as top-level keys so failures
    can be searched by endpoint or Stripe event.
    """
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        entry.update(
            (key, value) for key, value in vars(record).items()
            if key not in _RECORD_ATTRS and not key.startswith("_")
        )

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def configure_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    root.setLevel(level.upper())

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())
    root.handlers = [handler]

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
