# src/libs/compliance-common/compliance_common/logging_utils.py
import logging
import sys
import uuid
from contextvars import ContextVar
from typing import Optional, Union

from pythonjsonlogger import jsonlogger

from . import config

# Correlation ID of the reconciliation cycle or lookup currently running.
correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="<not-set>")
# Identifies the editing session (one per open transaction form).
form_session_id_var: ContextVar[str] = ContextVar("form_session_id", default="<not-set>")

LOG_FORMAT = " ".join(
    f"%({name})s"
    for name in (
        "asctime", "name", "levelname", "message",
        "service", "environment", "correlation_id", "form_session_id",
    )
)


class CorrelationIdFilter(logging.Filter):
    """
    Stamps every record with the running cycle's correlation ID, the form
    session it belongs to, and the service identity.
    """
    def filter(self, record):
        record.correlation_id = correlation_id_var.get()
        record.form_session_id = form_session_id_var.get()
        record.service = config.SERVICE_NAME
        record.environment = config.ENVIRONMENT
        return True


def setup_logging(level: Optional[Union[int, str]] = None) -> logging.Handler:
    """
    Routes the root logger to a single JSON handler on stdout.

    `level` defaults to the LOG_LEVEL setting. Calling this again replaces the
    handler instead of adding a second one.
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(level if level is not None else config.LOG_LEVEL)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        jsonlogger.JsonFormatter(
            LOG_FORMAT,
            rename_fields={"asctime": "timestamp", "levelname": "level", "name": "logger"},
        )
    )
    handler.addFilter(CorrelationIdFilter())
    root_logger.addHandler(handler)
    return handler


def generate_correlation_id(prefix: str) -> str:
    """
    Generates a new correlation ID with a short prefix (e.g., 'GST').
    """
    return f"{prefix}:{uuid.uuid4()}"
