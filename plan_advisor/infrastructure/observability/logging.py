"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime
from typing import Any, Dict
from pythonjsonlogger import jsonlogger


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.utcnow().isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = "plan-advisor"


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


class StructuredDecisionLog:
    """Engine decision trace written to a named logger as JSON fields"""

    # Events that mean a customer got no recommendation
    FAILURE_EVENTS = {"recommendation_failed"}

    def __init__(self, request_id: str = "unknown", logger_name: str = "plan_advisor.engine"):
        self.request_id = request_id
        self.logger = logging.getLogger(logger_name)

    def log(self, event: str, fields: Dict[str, Any]) -> None:
        level = logging.ERROR if event in self.FAILURE_EVENTS else logging.DEBUG
        self.logger.log(level, event, extra={"request_id": self.request_id, "step": event, **fields})


def log_batch_completed(
    request_id: str,
    session_id: str,
    customer_count: int,
    failed_count: int,
    duration_ms: float,
) -> None:
    """Log structured batch outcome for analysis"""
    logging.info(
        "Batch recommendation completed",
        extra={
            "request_id": request_id,
            "session_id": session_id,
            "step": "batch_complete",
            "customer_count": customer_count,
            "failed_count": failed_count,
            "duration_ms": duration_ms,
        },
    )
