"""
Application logger on top of the standard logging module.

Every message can carry structured context: keyword arguments of
structured_log plus whatever log_context() blocks are active in the current
thread or task. Context is rendered after the message as `| key=value, ...`.
"""

import contextlib
import functools
import logging
import time
from contextvars import ContextVar
from pathlib import Path
from typing import Any, Callable, Dict

from imbalance_eval.core.config_management.base_config_manager import BaseConfigManager
from .base_app_logger import BaseAppLogger

LOGGER_NAME = "imbalance_eval"
DEFAULT_LOG_LEVEL = "INFO"
FILE_FORMAT = '%(asctime)s - %(threadName)s - %(levelname)s - %(message)s'
CONSOLE_FORMAT = '%(levelname)s: %(message)s'

_log_context: ContextVar[Dict[str, Any]] = ContextVar('log_context', default={})


def _render(message: str, context: Dict[str, Any]) -> str:
    if not context:
        return message
    return f"{message} | " + ", ".join(f"{key}={value}" for key, value in context.items())


class AppLogger(BaseAppLogger):
    def __init__(self, config: BaseConfigManager):
        self.config = config
        self.logger = None

    @property
    def log_level(self) -> str:
        logging_cfg = getattr(getattr(self.config, 'core', None), 'app_logging_config', None)
        return str(getattr(logging_cfg, 'log_level', DEFAULT_LOG_LEVEL)).upper()

    def setup(self, log_file: str) -> logging.Logger:
        """
        Attach a file handler and a console handler to the package logger.

        Calling setup again replaces the handlers rather than stacking them.
        """
        logger = logging.getLogger(LOGGER_NAME)
        logger.setLevel(self.log_level)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()

        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers = [
            (logging.FileHandler(log_file), FILE_FORMAT),
            (logging.StreamHandler(), CONSOLE_FORMAT),
        ]
        for handler, fmt in handlers:
            handler.setFormatter(logging.Formatter(fmt))
            logger.addHandler(handler)

        self.logger = logger
        return logger

    def structured_log(self, level: int, message: str, **kwargs) -> None:
        if self.logger is None:
            raise RuntimeError("Logger not initialized. Call setup() first.")
        self.logger.log(level, _render(message, {**_log_context.get(), **kwargs}))

    def log_performance(self, func: Callable) -> Callable:
        """Wrap func so that its duration and outcome are logged."""
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                self.structured_log(
                    logging.ERROR,
                    f"{func.__qualname__} failed",
                    duration_seconds=round(time.perf_counter() - start, 4),
                    error_type=type(e).__name__
                )
                raise
            self.structured_log(
                logging.DEBUG,
                f"{func.__qualname__} completed",
                duration_seconds=round(time.perf_counter() - start, 4)
            )
            return result
        return wrapper

    @contextlib.contextmanager
    def log_context(self, **kwargs):
        """Add key-value pairs to every log line emitted inside the block."""
        token = _log_context.set({**_log_context.get(), **kwargs})
        try:
            yield
        finally:
            _log_context.reset(token)
