"""
Structured logging utilities for the eBay Deal Scanner.

This module provides the logging configuration for console and file output,
component loggers with structured records, and the per-run scan log that
collects one human-readable, timestamped line per significant event.
"""

import json
import logging
import logging.handlers
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union


class ScanLog:
    """
    Append-only, human-readable log of a single scan run.

    One instance is created per run and handed to every component; the
    owner persists it once the run finishes.
    """

    def __init__(self, clock=datetime.now):
        self._clock = clock
        self._lines: List[str] = []

    def record(self, message: str) -> str:
        """Append a timestamped line and return it."""
        line = f"[{self._clock().isoformat()}] {message}"
        self._lines.append(line)
        return line

    @property
    def lines(self) -> List[str]:
        return list(self._lines)

    def contains(self, text: str) -> bool:
        """Check whether any recorded line mentions ``text``."""
        return any(text in line for line in self._lines)

    def render(self) -> str:
        return "\n".join(self._lines)

    def save(self, path: Union[str, Path]) -> bool:
        """
        Persist the log to ``path``.

        Returns:
            True if the file was written. Failures are reported through the
            standard logging tree and never raised.
        """
        try:
            Path(path).write_text(self.render(), encoding="utf-8")
        except OSError as e:
            logging.getLogger("ebay_deal_scanner").error(
                f"Failed to save scan log to {path}: {e}"
            )
            return False
        self.record(f"Log saved to {path}")
        return True

    def __len__(self) -> int:
        return len(self._lines)


class ComponentLogger:
    """
    Structured logger for system components.

    Provides consistent logging format and component-specific context. When
    bound to a ScanLog, every message is also appended to the scan log.
    """

    def __init__(
        self,
        component_name: str,
        extra_context: Optional[Dict[str, Any]] = None,
        sink: Optional[ScanLog] = None,
    ):
        """
        Initialize component logger.

        Args:
            component_name: Name of the component (e.g., 'page.fetcher')
            extra_context: Additional context to include in all log messages
            sink: Scan log receiving a plain-text copy of each message
        """
        self.component_name = component_name
        self.extra_context = extra_context or {}
        self.sink = sink
        self.logger = logging.getLogger(f"ebay_deal_scanner.{component_name}")

    def _format_message(
        self, message: str, extra: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Format log message with structured data."""
        log_data = {
            "timestamp": datetime.now().isoformat(),
            "component": self.component_name,
            "message": message,
            **self.extra_context,
        }

        if extra:
            log_data.update(extra)

        return log_data

    def _emit(
        self,
        level: int,
        message: str,
        extra: Optional[Dict[str, Any]] = None,
        exc_info: bool = False,
    ) -> None:
        if self.sink is not None:
            self.sink.record(message)

        log_data = self._format_message(message, extra)
        if exc_info:
            log_data["exception"] = True
        self.logger.log(level, json.dumps(log_data, default=str), exc_info=exc_info)

    def debug(self, message: str, extra: Optional[Dict[str, Any]] = None):
        """Log debug message. Debug output never reaches the scan log."""
        log_data = self._format_message(message, extra)
        self.logger.debug(json.dumps(log_data, default=str))

    def info(self, message: str, extra: Optional[Dict[str, Any]] = None):
        """Log info message."""
        self._emit(logging.INFO, message, extra)

    def warning(self, message: str, extra: Optional[Dict[str, Any]] = None):
        """Log warning message."""
        self._emit(logging.WARNING, message, extra)

    def error(
        self,
        message: str,
        extra: Optional[Dict[str, Any]] = None,
        exc_info: bool = False,
    ):
        """Log error message."""
        self._emit(logging.ERROR, message, extra, exc_info)

    def critical(
        self,
        message: str,
        extra: Optional[Dict[str, Any]] = None,
        exc_info: bool = False,
    ):
        """Log critical message."""
        self._emit(logging.CRITICAL, message, extra, exc_info)


class LoggingManager:
    """
    Centralized logging configuration and management.

    Handles log file rotation, formatting, and component-specific loggers.
    """

    def __init__(self, log_dir: str = "logs", log_level: str = "INFO"):
        """
        Initialize logging manager.

        Args:
            log_dir: Directory for log files
            log_level: Default log level
        """
        self.log_dir = Path(log_dir)
        self.log_level = getattr(logging, log_level.upper())
        self.component_loggers: Dict[str, ComponentLogger] = {}

        self.log_dir.mkdir(parents=True, exist_ok=True)
        self._setup_logging()

    def _setup_logging(self):
        """Setup logging configuration with structured output."""
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )

        root_logger = logging.getLogger("ebay_deal_scanner")
        root_logger.setLevel(self.log_level)
        root_logger.handlers.clear()

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(self.log_level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

        file_handler = logging.handlers.RotatingFileHandler(
            self.log_dir / "ebay_deal_scanner.log",
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
        )
        file_handler.setLevel(self.log_level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

        error_handler = logging.handlers.RotatingFileHandler(
            self.log_dir / "errors.log",
            maxBytes=5 * 1024 * 1024,  # 5MB
            backupCount=3,
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(formatter)
        root_logger.addHandler(error_handler)

    def get_component_logger(
        self,
        component_name: str,
        extra_context: Optional[Dict[str, Any]] = None,
    ) -> ComponentLogger:
        """
        Get or create a component logger.

        Args:
            component_name: Name of the component
            extra_context: Additional context for all log messages

        Returns:
            ComponentLogger instance
        """
        cache_key = f"{component_name}_{hash(str(extra_context))}"

        if cache_key not in self.component_loggers:
            self.component_loggers[cache_key] = ComponentLogger(
                component_name, extra_context
            )

        return self.component_loggers[cache_key]

    def set_log_level(self, level: str):
        """Set log level for all loggers except the error file."""
        log_level = getattr(logging, level.upper())
        self.log_level = log_level

        root_logger = logging.getLogger("ebay_deal_scanner")
        root_logger.setLevel(log_level)

        for handler in root_logger.handlers:
            if "errors.log" in str(getattr(handler, "baseFilename", "")):
                continue
            handler.setLevel(log_level)


# Global logging manager instance
_logging_manager: Optional[LoggingManager] = None


def setup_logging(log_dir: str = "logs", log_level: str = "INFO") -> LoggingManager:
    """
    Setup global logging configuration.

    Args:
        log_dir: Directory for log files
        log_level: Default log level

    Returns:
        LoggingManager instance
    """
    global _logging_manager
    _logging_manager = LoggingManager(log_dir, log_level)
    return _logging_manager


def get_logger(
    component_name: str,
    extra_context: Optional[Dict[str, Any]] = None,
    sink: Optional[ScanLog] = None,
) -> ComponentLogger:
    """
    Get a component logger.

    Loggers bound to a scan log are created per call since the sink belongs
    to a single run; unbound loggers are cached by the logging manager.

    Args:
        component_name: Name of the component
        extra_context: Additional context for all log messages
        sink: Scan log that should receive a copy of each message

    Returns:
        ComponentLogger instance
    """
    if sink is not None:
        return ComponentLogger(component_name, extra_context, sink)

    if _logging_manager is None:
        return ComponentLogger(component_name, extra_context)

    return _logging_manager.get_component_logger(component_name, extra_context)
