"""Process-wide logging setup driven by LOG_* environment variables."""

import os
import logging
import sys
from pythonjsonlogger import jsonlogger

SERVICE_NAME = "taskdesk-backend"

# Chatty client libraries pulled in by supabase-py
QUIET_LOGGERS = ("httpx", "httpcore", "hpack", "supabase", "postgrest")


class LoggingConfig:
    """Logging settings, read once at import."""

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
    LOG_FORMAT = os.environ.get("LOG_FORMAT", "json").lower()
    LOG_MASK_SENSITIVE = os.environ.get("LOG_MASK_SENSITIVE", "true").lower() == "true"
    LOG_CORRELATION_ID_HEADER = os.environ.get("LOG_CORRELATION_ID_HEADER", "X-Correlation-ID")
    LOG_SLOW_OPERATION_THRESHOLD_MS = int(os.environ.get("LOG_SLOW_OPERATION_THRESHOLD_MS", "1000"))

    @classmethod
    def level(cls) -> int:
        return getattr(logging, cls.LOG_LEVEL, logging.INFO)

    @classmethod
    def build_formatter(cls) -> logging.Formatter:
        """JSON lines for log drains, or a one-line text format for local runs."""
        if cls.LOG_FORMAT == "json":
            return jsonlogger.JsonFormatter(
                "%(levelname)s %(name)s %(message)s",
                timestamp=True,
                static_fields={"service": SERVICE_NAME}
            )
        return logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    @classmethod
    def setup_logging(cls) -> None:
        """Replace root handlers with a single stdout handler."""
        root_logger = logging.getLogger()
        root_logger.setLevel(cls.level())
        root_logger.handlers.clear()

        # Vercel collects stdout
        stream = logging.StreamHandler(sys.stdout)
        stream.setLevel(cls.level())
        stream.setFormatter(cls.build_formatter())
        root_logger.addHandler(stream)

        for name in QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
