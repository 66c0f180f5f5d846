"""
Structured logging for the report pipeline.

Module loggers live under the ``autonotes`` namespace; ``setup_logger()``
attaches a daily-rotated JSON file handler and a console handler to that
namespace so every ``autonotes.*`` record lands in ``autonotes.log``. Audit
events go to a separate ``audit.log``.
"""
import logging
import json
import os
from logging.handlers import TimedRotatingFileHandler
from datetime import datetime, timezone

LOG_DIR = os.getenv("AUTONOTES_LOG_DIR", "logs")

# Fields callers pass through ``extra=`` that are copied into the JSON record
EXTRA_FIELDS = ("subject", "action", "engine", "agent", "status_code")


class JSONFormatter(logging.Formatter):
    def format(self, record):
        log_record = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "name": record.name,
            "level": record.levelname,
            "message": record.getMessage(),
            "module": record.module,
            "funcName": record.funcName,
            "lineNo": record.lineno
        }
        for field in EXTRA_FIELDS:
            if hasattr(record, field):
                log_record[field] = getattr(record, field)
        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_record, default=str)


def setup_logger(name="autonotes", log_file=None, level=logging.INFO, console=True):
    """Attach JSON file (and optionally console) handlers to ``name`` once."""
    log_file = log_file or os.path.join(LOG_DIR, f"{name}.log")
    os.makedirs(os.path.dirname(log_file) or ".", exist_ok=True)

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Avoid duplicate handlers on reload
    if not logger.handlers:
        file_handler = TimedRotatingFileHandler(log_file, when="midnight", interval=1, backupCount=30)
        file_handler.setFormatter(JSONFormatter())
        logger.addHandler(file_handler)

        if console:
            console_handler = logging.StreamHandler()
            console_handler.setFormatter(
                logging.Formatter('%(asctime)s - %(name)s - [%(levelname)s] - %(message)s')
            )
            logger.addHandler(console_handler)

    # Handlers are attached here; don't duplicate through the root logger
    logger.propagate = False
    return logger


audit_logger = setup_logger("autonotes_audit", os.path.join(LOG_DIR, "audit.log"), console=False)


def log_audit_action(subject, action, details, **fields):
    """Audit trail for every generated report; ``fields`` may carry engine or agent."""
    audit_logger.info(details, extra={"subject": subject, "action": action, **fields})
