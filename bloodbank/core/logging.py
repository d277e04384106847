import logging
import logging.handlers
import sys
import os
from bloodbank.core.config import settings

# Application loggers live under this name; services use logging.getLogger(__name__)
APP_LOGGER = "bloodbank"

# Unit intake, status changes, fulfillment and expiry are also kept in the inventory trail
INVENTORY_LOGGERS = (
    "bloodbank.services.inventory_service",
    "bloodbank.services.blood_request_service",
)

class RequestIDFilter(logging.Filter):
    """Make sure every record carries a request_id for the formatter."""
    def filter(self, record):
        record.request_id = getattr(record, 'request_id', 'N/A')
        return True

def _rotating_handler(path, formatter):
    log_dir = os.path.dirname(path)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        path,
        maxBytes=settings.LOG_FILE_MAX_BYTES,
        backupCount=settings.LOG_FILE_BACKUP_COUNT,
        encoding='utf-8'
    )
    handler.setFormatter(formatter)
    return handler

def setup_logging():
    """Configure the blood bank loggers; returns the application logger."""

    formatter = logging.Formatter(settings.LOG_FORMAT)
    request_id_filter = RequestIDFilter()
    level = getattr(logging, settings.LOG_LEVEL.upper())

    # Root only carries third-party output to the console
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.WARNING)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(request_id_filter)
    root_logger.addHandler(console_handler)

    app_logger = logging.getLogger(APP_LOGGER)
    app_logger.setLevel(level)
    for handler in app_logger.handlers[:]:
        app_logger.removeHandler(handler)

    # Production keeps an application log plus a separate stock movement trail
    if not settings.DEBUG:
        file_handler = _rotating_handler(settings.LOG_FILE, formatter)
        file_handler.setLevel(level)
        file_handler.addFilter(request_id_filter)
        app_logger.addHandler(file_handler)

        inventory_handler = _rotating_handler(settings.INVENTORY_LOG_FILE, formatter)
        inventory_handler.setLevel(logging.INFO)
        inventory_handler.addFilter(request_id_filter)
        for name in INVENTORY_LOGGERS:
            logging.getLogger(name).addHandler(inventory_handler)

    logging.getLogger("uvicorn").setLevel(logging.INFO)
    logging.getLogger("uvicorn.access").setLevel(logging.INFO)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)

    return app_logger

logger = setup_logging()
