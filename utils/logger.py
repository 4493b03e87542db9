"""Application logging: a rotating ``work_tracker.log`` plus stderr, tagged with the request."""
import logging
import os
from logging.handlers import RotatingFileHandler

from flask import has_request_context, request

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(client_ip)s %(http_method)s %(http_path)s | %(message)s"


class RequestContextFilter(logging.Filter):
    """Stamp each record with the client address, method and path, or ``-`` outside a request."""

    def filter(self, record: logging.LogRecord) -> bool:
        in_request = has_request_context()
        record.client_ip = request.remote_addr if in_request else "-"
        record.http_method = request.method if in_request else "-"
        record.http_path = request.path if in_request else "-"
        return True


def _handlers(app, log_path: str, level: int) -> list[logging.Handler]:
    file_handler = RotatingFileHandler(
        log_path,
        maxBytes=int(app.config.get("LOG_MAX_BYTES", 5_000_000)),
        backupCount=int(app.config.get("LOG_BACKUP_COUNT", 5)),
        encoding="utf-8",
    )
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S%z")
    context_filter = RequestContextFilter()
    handlers = [file_handler, logging.StreamHandler()]
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        handler.addFilter(context_filter)
    return handlers


def init_logging(app) -> logging.Logger:
    log_dir = app.config.get("LOG_DIR") or os.path.join(app.instance_path, "logs")
    os.makedirs(log_dir, exist_ok=True)
    log_path = os.path.join(log_dir, "work_tracker.log")
    level = getattr(logging, (app.config.get("LOG_LEVEL") or "INFO").upper(), logging.INFO)

    logger = app.logger
    # create_app may run many times in one process.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    for handler in _handlers(app, log_path, level):
        logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False

    logger.info("Logging initialized", extra={"log_path": log_path})
    return logger
