"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from bot_provisioning.config import settings


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

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_report(
    request_id: str,
    tenant_id: str,
    loan_count: int,
    npl_ratio: float,
    total_provision_required: float,
    missing_maturity_count: int,
    duration_ms: float,
) -> None:
    """Log structured BOT report outcome for analysis"""
    logging.info(
        "BOT report generated",
        extra={
            "request_id": request_id,
            "tenant_id": tenant_id,
            "step": "report_complete",
            "loan_count": loan_count,
            "npl_ratio": npl_ratio,
            "total_provision_required": total_provision_required,
            "missing_maturity_count": missing_maturity_count,
            "duration_ms": duration_ms,
        },
    )
