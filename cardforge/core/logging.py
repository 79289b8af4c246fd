import json
import logging
from typing import Any, Dict, Optional


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
        }

        if hasattr(record, "error_code"):
            log_data["error_code"] = record.error_code

        if hasattr(record, "details"):
            log_data["details"] = record.details

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def setup_logging(level: Optional[str] = None) -> None:
    logger = logging.getLogger()

    # Reloads would otherwise stack handlers
    for handler in list(logger.handlers):
        if isinstance(handler.formatter, JSONFormatter):
            logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JSONFormatter())
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, (level or "INFO").upper(), logging.INFO))
