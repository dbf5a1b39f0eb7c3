from __future__ import annotations

import logging
from pathlib import Path

LOGGER_NAME = "error_dashboard"

LOG_FORMAT = "%(asctime)s %(levelname)s runId=%(runId)s comp=%(component)s msg=%(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"


class EnsureFieldsFilter(logging.Filter):
    """
    Fills in runId and component on every record so the formatter never
    fails on records logged without them.
    """

    def __init__(self, default_component: str = "core"):
        super().__init__()
        self.run_id = "-"
        self.default_component = default_component

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "runId"):
            record.runId = self.run_id
        if not hasattr(record, "component"):
            record.component = self.default_component
        return True


_fields_filter = EnsureFieldsFilter()


def map_log_level(level_name: str) -> int:
    value = (level_name or "").strip().upper()
    if value == "ERROR":
        return logging.ERROR
    if value in ("WARN", "WARNING"):
        return logging.WARNING
    if value == "INFO":
        return logging.INFO
    if value == "DEBUG":
        return logging.DEBUG
    raise ValueError(f"Unsupported log level: {level_name}")


def configure_logging(level_name: str = "INFO", log_dir: str | None = None) -> logging.Logger:
    """
    Configure the package logger: stream handler always, plus
    `<log_dir>/update.log` when a log directory is given. Safe to call again;
    previous handlers are closed and replaced.
    """
    logger = logging.getLogger(LOGGER_NAME)
    for old in list(logger.handlers):
        old.close()
        logger.removeHandler(old)
    logger.propagate = False

    level = map_log_level(level_name)
    logger.setLevel(level)

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_dir:
        Path(log_dir).mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(Path(log_dir) / "update.log", encoding="utf-8"))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        handler.addFilter(_fields_filter)
        logger.addHandler(handler)

    return logger


def set_run_id(run_id: str) -> None:
    """Tag subsequent records that carry no explicit runId."""
    _fields_filter.run_id = run_id
