"""Logging configuration for applications embedding miiovac."""

import logging
from logging.handlers import RotatingFileHandler
from typing import Any

_SIZE_UNITS = {"KB": 1024, "MB": 1024**2, "GB": 1024**3}


class ConditionalFormatter(logging.Formatter):
    def format(self, record):
        if record.levelno >= logging.DEBUG and record.levelno < logging.INFO:
            # Debug level: show module name
            self._style._fmt = "%(asctime)s %(name)s %(message)s"
        else:
            # Info and above: hide module name
            self._style._fmt = "%(asctime)s %(message)s"
        return super().format(record)


def parse_size(size: str | int) -> int:
    """Convert sizes like "10MB" or "512KB" to bytes."""
    if isinstance(size, int):
        return size
    text = size.strip().upper()
    for unit, factor in _SIZE_UNITS.items():
        if text.endswith(unit):
            return int(float(text[: -len(unit)]) * factor)
    return int(text)


def configure_logging(config: dict[str, Any]) -> logging.Logger:
    """Set up the root logger from the ``logging`` config section."""
    log_config = config.get("logging", {})
    level = getattr(logging, str(log_config.get("level", "INFO")).upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    formatter = ConditionalFormatter(datefmt="%m-%d %H:%M:%S")

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    log_file = log_config.get("file")
    if log_file:
        handlers.append(
            RotatingFileHandler(
                log_file,
                maxBytes=parse_size(log_config.get("max_size", "10MB")),
                backupCount=log_config.get("backup_count", 5),
            )
        )

    for handler in handlers:
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)
    return root_logger
