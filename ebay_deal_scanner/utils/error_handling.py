"""
Error handling utilities for the eBay Deal Scanner.

This module provides the scanner's exception types, error tracking for
monitoring, and the retry policy shared by every network-facing component.
"""

import asyncio
import random
import traceback
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, TypeVar

from .logging import ComponentLogger, get_logger

T = TypeVar("T")


class ScannerError(Exception):
    """Base class for errors raised by scanner components."""


class FetchError(ScannerError):
    """A page could not be fetched through the scraper proxy."""


class OracleError(ScannerError):
    """The ranking LLM could not produce a response."""


class ErrorSeverity(Enum):
    """Error severity levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories for classification."""

    NETWORK = "network"
    PARSING = "parsing"
    LLM_EVALUATION = "llm_evaluation"
    SYSTEM = "system"


def categorize_exception(exception: BaseException) -> ErrorCategory:
    """Map an exception onto the category it is tracked under."""
    if isinstance(exception, FetchError):
        return ErrorCategory.NETWORK
    if isinstance(exception, OracleError):
        return ErrorCategory.LLM_EVALUATION
    if isinstance(exception, ValueError):
        return ErrorCategory.PARSING
    return ErrorCategory.SYSTEM


@dataclass
class ErrorInfo:
    """Information about an error occurrence."""

    timestamp: datetime
    component: str
    category: ErrorCategory
    severity: ErrorSeverity
    message: str
    exception_type: str
    traceback: str
    context: Dict[str, Any]


class ErrorTracker:
    """
    Tracks errors and provides statistics for monitoring.
    """

    def __init__(self, max_errors: int = 1000):
        """
        Initialize error tracker.

        Args:
            max_errors: Maximum number of errors to keep in memory
        """
        self.max_errors = max_errors
        self.errors: List[ErrorInfo] = []
        self.error_counts: Dict[str, int] = {}
        self.logger = get_logger("error_tracker")

    def record_error(
        self,
        component: str,
        category: ErrorCategory,
        severity: ErrorSeverity,
        message: str,
        exception: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> ErrorInfo:
        """
        Record an error occurrence.

        Args:
            component: Component where error occurred
            category: Error category
            severity: Error severity
            message: Error message
            exception: Exception object if available
            context: Additional context information

        Returns:
            ErrorInfo object
        """
        error_info = ErrorInfo(
            timestamp=datetime.now(),
            component=component,
            category=category,
            severity=severity,
            message=message,
            exception_type=type(exception).__name__ if exception else "Unknown",
            traceback="".join(
                traceback.format_exception(
                    type(exception), exception, exception.__traceback__
                )
            )
            if exception
            else "",
            context=context or {},
        )

        self.errors.append(error_info)
        if len(self.errors) > self.max_errors:
            self.errors.pop(0)

        error_key = f"{component}.{category.value}.{severity.value}"
        self.error_counts[error_key] = self.error_counts.get(error_key, 0) + 1

        self.logger.debug(
            f"Error recorded: {message}",
            extra={
                "component": component,
                "category": category.value,
                "severity": severity.value,
                "exception_type": error_info.exception_type,
                "context": context,
            },
        )

        return error_info

    def get_error_stats(self) -> Dict[str, Any]:
        """Get error statistics."""
        last_hour = datetime.now() - timedelta(hours=1)

        return {
            "total_errors": len(self.errors),
            "errors_last_hour": len(
                [e for e in self.errors if e.timestamp >= last_hour]
            ),
            "error_counts": self.error_counts.copy(),
            "category_breakdown": {
                category.value: len([e for e in self.errors if e.category == category])
                for category in ErrorCategory
            },
        }


class RetryConfig:
    """Configuration for retry behavior."""

    def __init__(
        self,
        max_attempts: int = 3,
        backoff_step: float = 5.0,
        pre_delay: float = 0.0,
        pre_delay_jitter: float = 0.0,
    ):
        """
        Args:
            max_attempts: Total number of attempts, including the first
            backoff_step: Seconds slept after failed attempt ``n`` is
                ``n * backoff_step``
            pre_delay: Fixed delay before every attempt, first one included
            pre_delay_jitter: Upper bound of the random delay added to
                ``pre_delay``
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.backoff_step = backoff_step
        self.pre_delay = pre_delay
        self.pre_delay_jitter = pre_delay_jitter

    def backoff_for(self, attempt: int) -> float:
        """Backoff after the given 1-based failed attempt."""
        return attempt * self.backoff_step

    def pacing_delay(self) -> float:
        """Randomized delay inserted before an attempt."""
        return self.pre_delay + random.random() * self.pre_delay_jitter


class RetryPolicy:
    """
    Runs an async operation with pacing, linear backoff and bounded attempts.

    The last failure is re-raised as ``error_type`` so callers only deal with
    the scanner's own exception hierarchy.
    """

    def __init__(
        self,
        config: RetryConfig,
        logger: ComponentLogger,
        label: str,
        error_type: type = ScannerError,
        retry_on: tuple = (Exception,),
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ):
        self.config = config
        self.logger = logger
        self.label = label
        self.error_type = error_type
        self.retry_on = retry_on
        self._sleep = sleep

    async def run(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Execute ``operation`` until it succeeds or attempts run out."""
        attempts = self.config.max_attempts
        sleep = self._sleep or asyncio.sleep

        for attempt in range(1, attempts + 1):
            pacing = self.config.pacing_delay()
            if pacing > 0:
                await sleep(pacing)

            try:
                return await operation()
            except self.retry_on as e:
                self.logger.warning(
                    f"  {self.label} attempt {attempt}/{attempts} failed: {e}",
                    extra={"attempt": attempt, "max_attempts": attempts},
                )

                if attempt == attempts:
                    if isinstance(e, self.error_type):
                        raise
                    raise self.error_type(str(e)) from e

                await sleep(self.config.backoff_for(attempt))

        # max_attempts >= 1 guarantees the loop returns or raises
        raise self.error_type(f"{self.label} made no attempts")
