# poliux/logging_setup.py
import logging
from logging.config import dictConfig
from logging import LogRecord
from pathlib import Path
import contextvars
import os

# ---- Correlation ID (used by middleware) ----
request_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="-")

class RequestIdFilter(logging.Filter):
    def filter(self, record: LogRecord) -> bool:
        record.request_id = request_id_var.get()
        return True

# Attributes every LogRecord carries; anything else came in through `extra=`
_RECORD_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime", "request_id"}

class EventFormatter(logging.Formatter):
    """
    Appends `extra=` fields as key=value pairs, so event lines such as
    NEWSFEED_RANKED or VOTE_CAST keep their counts in the log file.
    """
    def format(self, record: LogRecord) -> str:
        line = super().format(record)
        fields = {k: v for k, v in vars(record).items() if k not in _RECORD_ATTRS and not k.startswith("_")}
        if not fields:
            return line
        return line + " | " + " ".join(f"{k}={v}" for k, v in sorted(fields.items()))

# ---- Paths & levels ----
BASE_DIR = Path(__file__).resolve().parents[1]  # project root (folder that contains 'poliux/')
LOG_DIR  = Path(os.getenv("LOG_DIR", BASE_DIR / "logs"))
LOG_FILE = LOG_DIR / "poliux.log"
EVENTS_FILE = LOG_DIR / "poliux-events.log"

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
# Per-request START/END lines; set to WARNING to quiet them in production
HTTP_LOG_LEVEL = os.getenv("HTTP_LOG_LEVEL", LOG_LEVEL).upper()

# Loggers whose records are domain events (ranking, votes, analytics, analyses)
EVENT_LOGGERS = ("poliux.newsfeed", "poliux.votes", "poliux.analytics", "poliux.analysis")

def setup_logging() -> Path:
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    standard = "%(asctime)s | %(levelname)s | %(name)s | req=%(request_id)s | %(message)s"
    dictConfig({
        "version": 1,
        "disable_existing_loggers": False,

        "filters": {
            "request_id": {"()": RequestIdFilter},
        },

        "formatters": {
            "standard": {
                "class": "poliux.logging_setup.EventFormatter",
                "format": standard + " (%(filename)s:%(lineno)d)",
            },
            "events": {
                "class": "poliux.logging_setup.EventFormatter",
                "format": standard,
            },
            "uvicorn_access": {
                "format": "%(asctime)s | %(levelname)s | %(message)s"
            },
        },

        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "standard",
                "filters": ["request_id"],
            },
            "file": {
                "class": "logging.handlers.TimedRotatingFileHandler",
                "formatter": "standard",
                "filters": ["request_id"],
                "filename": str(LOG_FILE),
                "when": "midnight",
                "backupCount": 14,
                "encoding": "utf-8",
            },
            # Domain events only, kept longer for feed and engagement analysis
            "events_file": {
                "class": "logging.handlers.TimedRotatingFileHandler",
                "formatter": "events",
                "filters": ["request_id"],
                "filename": str(EVENTS_FILE),
                "when": "midnight",
                "backupCount": 30,
                "encoding": "utf-8",
            },
            "uvicorn_console": {
                "class": "logging.StreamHandler",
                "formatter": "uvicorn_access",
            },
        },

        "loggers": {
            "poliux": {"handlers": ["console", "file"], "level": LOG_LEVEL, "propagate": False},
            "poliux.http": {"level": HTTP_LOG_LEVEL},
            **{name: {"handlers": ["events_file"], "level": LOG_LEVEL} for name in EVENT_LOGGERS},

            # SQL echo stays off unless asked for
            "sqlalchemy.engine": {"handlers": ["console", "file"], "level": "WARNING", "propagate": False},

            "uvicorn.error":  {"handlers": ["uvicorn_console", "file"], "level": "INFO", "propagate": False},
            "uvicorn.access": {"handlers": ["uvicorn_console", "file"], "level": "INFO", "propagate": False},
        },

        "root": {"handlers": ["console", "file"], "level": LOG_LEVEL},
    })

    logging.getLogger("poliux").info(f"Logging to: {LOG_FILE} (events: {EVENTS_FILE})")
    return LOG_FILE

def get_logger(name: str = "poliux") -> logging.Logger:
    return logging.getLogger(name)
