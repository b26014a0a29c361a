"""Structured JSON logging for production observability"""

import logging
import sys
from decimal import Decimal
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from wallet_gateway.utils.date_utils import utc_now


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def __init__(self, *args, service: str = "wallet-gateway", **kwargs):
        super().__init__(*args, **kwargs)
        self.service = service

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = utc_now().isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = self.service


def setup_logging(level: str = "INFO", service: str = "wallet-gateway") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s",
        service=service,
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_transaction(
    request_id: str,
    type: str,
    admin_code: str,
    amount: Decimal,
    duration_ms: float,
) -> None:
    """Log structured outcome of a committed money movement"""
    logging.info(
        "Transaction committed",
        extra={
            "request_id": request_id,
            "step": "transaction_complete",
            "transaction_type": type,
            "admin_code": admin_code,
            "amount": str(amount),
            "duration_ms": duration_ms,
        },
    )
