"""Correlated log lines and per-variant timings."""

import logging
import threading
import uuid
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

from .logging_config import setup_logger


@dataclass(frozen=True)
class LogContext:
    """
    Identifies one invocation across the handler, the orchestrator and the
    variant threads.

    Contexts are immutable; the ``with_*`` helpers return a copy that keeps
    the correlation id.
    """

    correlation_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    operation: str = ""
    component: str = ""
    tenant_id: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def with_operation(self, operation: str) -> "LogContext":
        return replace(self, operation=operation, metadata=dict(self.metadata))

    def with_component(self, component: str) -> "LogContext":
        return replace(self, component=component, metadata=dict(self.metadata))

    def with_tenant(self, tenant_id: str) -> "LogContext":
        return replace(self, tenant_id=tenant_id, metadata=dict(self.metadata))

    def with_metadata(self, **kwargs: Any) -> "LogContext":
        return replace(self, metadata={**self.metadata, **kwargs})

    def fields(self) -> Dict[str, Any]:
        """Key/value pairs appended to every line logged with this context."""
        values = dict(self.metadata)
        if self.tenant_id:
            values["tenant_id"] = self.tenant_id
        return values


def render_message(
    message: str, context: Optional[LogContext], fields: Dict[str, Any]
) -> str:
    """Render ``[operation] [correlation_id] message (k=v, ...)``."""
    prefix = ""
    values: Dict[str, Any] = {}
    if context is not None:
        prefix = f"[{context.correlation_id}] "
        if context.operation:
            prefix = f"[{context.operation}] {prefix}"
        values.update(context.fields())
    values.update(fields)

    line = f"{prefix}{message}"
    if values:
        line += " (" + ", ".join(f"{k}={v}" for k, v in values.items()) + ")"
    return line


class StructuredLogger:
    """Wraps a stdlib logger and renders LogContext into each message."""

    def __init__(self, name: str, level: Optional[str] = None):
        self._logger = setup_logger(name, level=level)

    @property
    def name(self) -> str:
        return self._logger.name

    def _log(
        self, level: int, message: str, context: Optional[LogContext], fields: Dict[str, Any]
    ) -> None:
        # Skip rendering for suppressed levels; debug lines run per variant
        if self._logger.isEnabledFor(level):
            self._logger.log(level, render_message(message, context, fields), stacklevel=3)

    def debug(self, message: str, context: Optional[LogContext] = None, **kwargs: Any) -> None:
        self._log(logging.DEBUG, message, context, kwargs)

    def info(self, message: str, context: Optional[LogContext] = None, **kwargs: Any) -> None:
        self._log(logging.INFO, message, context, kwargs)

    def warning(self, message: str, context: Optional[LogContext] = None, **kwargs: Any) -> None:
        self._log(logging.WARNING, message, context, kwargs)

    def error(self, message: str, context: Optional[LogContext] = None, **kwargs: Any) -> None:
        self._log(logging.ERROR, message, context, kwargs)

    def critical(self, message: str, context: Optional[LogContext] = None, **kwargs: Any) -> None:
        self._log(logging.CRITICAL, message, context, kwargs)


@dataclass
class PerformanceMetrics:
    """Timing of one operation, e.g. producing one variant."""

    operation: str
    start_time: float
    end_time: float
    success: bool
    error_message: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def duration_ms(self) -> float:
        return (self.end_time - self.start_time) * 1000


class MetricsCollector:
    """
    Thread-safe store of PerformanceMetrics.

    Variant threads record into it while the handler drains one summary per
    invocation, so a warm Lambda container does not accumulate timings.
    """

    def __init__(self):
        self._metrics: List[PerformanceMetrics] = []
        self._lock = threading.Lock()

    def record_metric(self, metric: PerformanceMetrics) -> None:
        with self._lock:
            self._metrics.append(metric)

    def get_metrics(self, operation: Optional[str] = None) -> List[PerformanceMetrics]:
        with self._lock:
            return [m for m in self._metrics if operation is None or m.operation == operation]

    def drain_summary(self, operation: Optional[str] = None) -> Dict[str, Any]:
        """
        Summarize and remove the matching metrics in one step.

        Returns counts and millisecond timings, or an empty dict when nothing
        was recorded.
        """
        drained: List[PerformanceMetrics] = []
        kept: List[PerformanceMetrics] = []
        with self._lock:
            for metric in self._metrics:
                if operation is None or metric.operation == operation:
                    drained.append(metric)
                else:
                    kept.append(metric)
            self._metrics = kept
        return summarize(drained)


def summarize(metrics: List[PerformanceMetrics]) -> Dict[str, Any]:
    if not metrics:
        return {}

    durations = [m.duration_ms for m in metrics]
    succeeded = sum(1 for m in metrics if m.success)
    return {
        "count": len(metrics),
        "succeeded": succeeded,
        "failed": len(metrics) - succeeded,
        "avg_ms": round(sum(durations) / len(durations), 1),
        "max_ms": round(max(durations), 1),
        "total_ms": round(sum(durations), 1),
    }


def create_logger(name: str, level: Optional[str] = None) -> StructuredLogger:
    """Create a structured logger; level falls back to ``LOG_LEVEL``."""
    return StructuredLogger(name, level)
