from __future__ import annotations

import logging
import logging.config
from pathlib import Path
from typing import Any, Protocol, Union, runtime_checkable

import yaml

LOGGER_NAMESPACE = "shopify_bulk_export"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# "log" sits between debug and info, so it shares INFO with "info".
LOG_LEVELS = {
    "debug": logging.DEBUG,
    "log": logging.INFO,
    "info": logging.INFO,
    "error": logging.ERROR,
}


@runtime_checkable
class BaseLogger(Protocol):
    """The logging capabilities an export needs. ``logging.Logger`` satisfies it."""

    def debug(self, msg: Any, *args: Any, **kwargs: Any) -> None: ...

    def log(self, level: int, msg: Any, *args: Any, **kwargs: Any) -> None: ...

    def info(self, msg: Any, *args: Any, **kwargs: Any) -> None: ...

    def error(self, msg: Any, *args: Any, **kwargs: Any) -> None: ...


LOGGER_METHODS = ("debug", "log", "info", "error")


def is_logger(obj: Any) -> bool:
    """Whether `obj` provides every method of `BaseLogger`."""
    return all(callable(getattr(obj, method, None)) for method in LOGGER_METHODS)


class SilentLogger:
    """Logger that discards everything."""

    def debug(self, msg: Any, *args: Any, **kwargs: Any) -> None:
        pass

    def log(self, level: int, msg: Any, *args: Any, **kwargs: Any) -> None:
        pass

    def info(self, msg: Any, *args: Any, **kwargs: Any) -> None:
        pass

    def error(self, msg: Any, *args: Any, **kwargs: Any) -> None:
        pass


def setup_logging(config_path: str = "configs/logging.yaml") -> None:
    """Setup logging configuration from YAML file."""
    path = Path(config_path)
    if not path.exists():
        # Safe fallback
        logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
        return

    with path.open("r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f)
    logging.config.dictConfig(cfg)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance."""
    return logging.getLogger(name)


def _level_logger(name: str, level_name: str) -> logging.Logger:
    # A child per level keeps levels configured on `name` or its parents intact
    logger = get_logger(f"{name}.{level_name}")
    logger.setLevel(LOG_LEVELS[level_name])
    if not logger.hasHandlers():
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False
    return logger


def build_logger(logs: Union[bool, str, BaseLogger, None], name: str = f"{LOGGER_NAMESPACE}.export") -> BaseLogger:
    """
    Resolve the ``logs`` option into a logger.

    ``False``/``None`` gives a silent logger, ``True`` a DEBUG logger, a level
    name a logger at that level, and any object already providing
    debug/log/info/error is returned unchanged.

    When nothing in the logging tree has a handler yet, the returned logger
    gets its own stderr handler so the output is visible without
    ``setup_logging``.
    """
    if logs is None or logs is False:
        return SilentLogger()

    if isinstance(logs, str):
        if logs.lower() not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {logs!r}")
        return _level_logger(name, logs.lower())

    if logs is True:
        return _level_logger(name, "debug")

    if is_logger(logs):
        return logs

    raise ValueError("logs must be a bool, a level name, or a logger with debug/log/info/error methods")
