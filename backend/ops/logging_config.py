"""
Logging configuration for the ledger services.

Production writes one JSON object per line to stdout. Development writes
readable console lines. Ledger code attaches the posting context through
``extra=`` and those keys become top-level JSON fields:

    logger.info("Posted ...", extra={"business_unit_id": 3, "document_number": "JE-12"})

Environment variables:
- LOG_FORMAT: "json" or "console" (default: json in production)
- LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: INFO)
- LOG_SQL: "True" to echo SQL statements (default: on in debug)
"""
from datetime import datetime, timezone
import json
import logging
import os


APP_LOGGERS = ("accounts", "accounting", "financials", "ops", "celery")

# Keys the ledger passes through ``extra=``.
LEDGER_FIELDS = (
    "business_unit_id",
    "document_number",
    "source_type",
    "period",
    "total",
    "mismatches",
)


def get_logging_config(debug: bool = False) -> dict:
    """Django LOGGING dict for the current environment."""
    log_level = os.environ.get("LOG_LEVEL", "DEBUG" if debug else "INFO")
    log_format = os.environ.get("LOG_FORMAT", "console" if debug else "json")
    log_sql = os.environ.get("LOG_SQL", "True" if debug else "False") == "True"

    if log_format == "json":
        formatter = {"()": "ops.logging_config.JsonFormatter"}
    else:
        formatter = {"format": "[{asctime}] {levelname} {name} {message}", "style": "{"}

    def route(level=log_level, handler="console"):
        return {"handlers": [handler], "level": level, "propagate": False}

    loggers = {name: route() for name in APP_LOGGERS}
    loggers.update({
        "": {"handlers": ["console"], "level": log_level},
        "django": route(),
        "django.request": route("ERROR" if not debug else log_level),
        "django.db.backends": route("DEBUG", "console") if log_sql else route("INFO", "null"),
    })

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"default": formatter},
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stdout",
            },
            "null": {"class": "logging.NullHandler"},
        },
        "loggers": loggers,
    }


class JsonFormatter(logging.Formatter):
    """One JSON object per record; ledger context fields sit at the top level."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}:{record.lineno}",
        }

        for key in LEDGER_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                log_entry[key] = value

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)
