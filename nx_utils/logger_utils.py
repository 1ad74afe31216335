import logging
import os
import sys
from pythonjsonlogger import jsonlogger

LOG_FORMAT = '%(asctime)s %(name)s %(levelname)s %(module)s %(funcName)s %(message)s'


class ServiceJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter that stamps every record with the service name."""

    def __init__(self, *args, service: str = "nexus", **kwargs):
        super().__init__(*args, **kwargs)
        self.service = service

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        log_record.setdefault("service", self.service)
        if record.exc_info and "exc_info" in log_record:
            log_record["error_type"] = record.exc_info[0].__name__


def get_logger(name: str, log_level: str = "INFO") -> logging.Logger:
    logger = logging.getLogger(name)
    logger.setLevel(log_level.upper())
    logger.propagate = False

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(ServiceJsonFormatter(LOG_FORMAT, service=name))
        logger.addHandler(handler)

    return logger


def set_log_level(log_level: str) -> None:
    """Apply the configured level once settings are loaded (called by the app factory)."""
    logger.setLevel(log_level.upper())


# Default logger instance; LOG_LEVEL is read again from settings in create_app
logger = get_logger("nexus", os.getenv("LOG_LEVEL", "INFO"))
