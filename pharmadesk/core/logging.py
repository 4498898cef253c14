import json
import logging
from datetime import datetime, timezone

from pharmadesk.config import get_settings

# Passed through ``extra=`` by the purchase services.
CONTEXT_FIELDS = ("pharmacy_id", "purchase_id", "purchase_item_id", "medicine_id")


def record_context(record: logging.LogRecord) -> dict:
    context = {}
    for field in CONTEXT_FIELDS:
        value = getattr(record, field, None)
        if value is not None:
            context[field] = value
    return context


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(record_context(record))
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True, default=str)


class ContextFormatter(logging.Formatter):
    """Plain text with any pharmacy/purchase context appended as key=value."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = record_context(record)
        if not context:
            return line
        suffix = " ".join("{}={}".format(key, value) for key, value in context.items())
        head, sep, tail = line.partition("\n")
        return "{} [{}]{}{}".format(head, suffix, sep, tail)


def setup_logging() -> None:
    settings = get_settings()
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    handler = logging.StreamHandler()
    if settings.LOG_JSON:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(
            ContextFormatter(
                fmt="%(asctime)s %(levelname)s %(name)s - %(message)s",
                datefmt="%Y-%m-%dT%H:%M:%S",
            )
        )

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)
    # SQL statements only at DEBUG.
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if level <= logging.DEBUG else logging.WARNING
    )
