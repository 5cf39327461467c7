"""JSON log output for the loan intake service"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from pythonjsonlogger import jsonlogger
from loan_intake.config import settings

LOG_FORMAT = "%(timestamp)s %(level)s %(name)s %(message)s"


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Stamps every record with UTC time, level name and the configured service name"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Route all loggers to a single JSON stdout handler"""
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(CustomJsonFormatter(LOG_FORMAT))
    root.addHandler(handler)


def log_decision(
    request_id: str,
    application_id: int,
    status: str,
    score: Optional[int],
    duration_ms: float,
) -> None:
    """One record per decided application: terminal status, score (null when inadmissible) and latency"""
    logging.info(
        "Loan application decided",
        extra={
            "request_id": request_id,
            "application_id": application_id,
            "decision_status": status,
            "score": score,
            "admissible": score is not None,
            "duration_ms": round(duration_ms, 2),
        },
    )
