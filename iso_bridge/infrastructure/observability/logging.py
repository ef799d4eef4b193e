"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from iso_bridge.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


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


def log_conversion(
    request_id: str,
    source_format: str,
    status: str,
    error_count: int,
    risk_count: int,
    assumption_count: int,
    duration_ms: float,
) -> None:
    """Log structured conversion outcome for analysis"""
    logging.info(
        "Conversion completed",
        extra={
            "request_id": request_id,
            "step": "conversion_complete",
            "source_format": source_format,
            "validation_status": status,
            "error_count": error_count,
            "risk_count": risk_count,
            "assumption_count": assumption_count,
            "duration_ms": duration_ms,
        },
    )
