"""
Simple logging system for secure-options, built on loguru.
"""

import re
import time
import os
from typing import Any, Dict, List, Pattern, Optional
from contextlib import contextmanager
from loguru import logger as loguru_logger


class AsyncLogger:
    """
    Component logger with flat format.

    Format: timestamp | level | component | message
    Records are enqueued so the caller never blocks on file I/O.
    """

    # Single file sink shared between all instances
    _handler_id: Optional[int] = None

    def __init__(self, component: str):
        self.component = component
        self.masker = SensitiveDataMasker()
        self._setup_file_handler()

    def _setup_file_handler(self) -> None:
        """
        Add the rotating file sink if SECURE_OPTIONS_LOG_FILE is set.

        - Rotation at 10MB, zip compression
        - Singleton: only one sink to avoid duplicated lines
        """
        log_file = os.getenv("SECURE_OPTIONS_LOG_FILE")
        if log_file and AsyncLogger._handler_id is None:
            AsyncLogger._handler_id = loguru_logger.add(
                log_file,
                level=os.getenv("SECURE_OPTIONS_LOG_LEVEL", "WARNING").upper(),
                format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level} | {extra[component]} | {message}",
                rotation="10 MB",
                compression="zip",
                enqueue=True,
            )

    def log(self, level: str, message: str, **context: Any) -> None:
        """
        Log a message with masked structured context.

        Context values end up in ``record["extra"]``; string values pass
        through the masker first so secrets never reach a sink.
        """
        masked: Dict[str, Any] = {
            key: self.masker.mask(value) if isinstance(value, str) else value
            for key, value in context.items()
        }
        loguru_logger.bind(component=self.component).log(level, self.masker.mask(message), **masked)

    def debug(self, message: str, **context: Any) -> None:
        """Log DEBUG level."""
        self.log("DEBUG", message, **context)

    def info(self, message: str, **context: Any) -> None:
        """Log INFO level."""
        self.log("INFO", message, **context)

    def warning(self, message: str, **context: Any) -> None:
        """Log WARNING level."""
        self.log("WARNING", message, **context)

    def error(self, message: str, include_trace: bool = False, **context: Any) -> None:
        """
        Log ERROR level with optional stack trace.

        Args:
            message: Error message
            include_trace: Attach the current traceback as stack_trace
            **context: Additional context
        """
        if include_trace:
            import traceback

            context["stack_trace"] = traceback.format_exc()

        self.log("ERROR", message, **context)


class SensitiveDataMasker:
    """
    Masks sensitive data in logs.

    Patterns masked:
    - Tokens/keys (long alphanumeric or base64 runs)
    - key=value secrets
    - Full paths (only basename shown)
    """

    def __init__(self, patterns: Optional[List[Pattern]] = None):
        self.patterns = patterns or []

    def mask(self, text: str) -> str:
        """
        Mask sensitive data.

        Example:
        - "password=hunter2secret" -> "password=***"
        - "/home/user/project/app.yaml" -> ".../app.yaml"
        - "AQIDBAUGBwgJCgsMDQ4PEBESExQ=" -> "***TOKEN***"
        """
        masked = text

        # 1. key=value secrets
        masked = re.sub(
            r'(api_key|token|secret|password|key)=[^\s,;]{4,}',
            r'\1=***',
            masked,
            flags=re.IGNORECASE,
        )

        # 2. Shorten absolute paths
        masked = re.sub(r'/[a-zA-Z0-9_/.-]{10,}/([a-zA-Z0-9_.-]+)', r'.../\1', masked)

        # 3. Long tokens, including base64 ciphertext (never inside a path)
        masked = re.sub(r'(?<![\w/+.])[A-Za-z0-9+][A-Za-z0-9+/]{19,}={0,2}', '***TOKEN***', masked)

        for pattern in self.patterns:
            masked = pattern.sub('***', masked)

        return masked


class PerformanceLogger:
    """
    Logger specialized in timing operations.
    """

    def __init__(self) -> None:
        self.logger = AsyncLogger("performance")

    @contextmanager
    def measure(self, operation: str, **context: Any):
        """
        Context manager to time an operation.

        Usage:
        ```
        with perf_logger.measure("configure", options_type="MailOptions"):
            service.configure(MailOptions, source)
        ```
        """
        start = time.perf_counter()
        try:
            yield
        finally:
            duration = time.perf_counter() - start
            self.logger.debug(
                "Operation completed", operation=operation, duration_ms=duration * 1000, **context
            )


# Library etiquette: silent until the application (or the CLI) enables it
loguru_logger.disable("secure_options")

logger = AsyncLogger("secure_options")
perf_logger = PerformanceLogger()
