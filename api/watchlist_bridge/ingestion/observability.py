"""Per-source metrics and structured logging for upstream calls."""

from __future__ import annotations

import asyncio
import json
import logging
import time
from collections import defaultdict
from dataclasses import asdict, dataclass
from typing import Any, Awaitable, Callable, DefaultDict, TypeVar

from watchlist_bridge.utils.redaction import redact_secrets

logger = logging.getLogger("watchlist_bridge.ingestion")

T = TypeVar("T")


@dataclass
class OperationMetrics:
    """Aggregated counters for a source operation."""
    started: int = 0
    succeeded: int = 0
    failed: int = 0
    last_latency_ms: float | None = None
    last_error: str | None = None


class SourceMonitor:
    """Track call outcomes per source and operation."""

    def __init__(self) -> None:
        self._metrics: DefaultDict[str, DefaultDict[str, OperationMetrics]] = defaultdict(
            lambda: defaultdict(OperationMetrics)
        )
        self._lock = asyncio.Lock()

    async def track(
        self,
        source: str,
        operation: str,
        func: Callable[[], Awaitable[T]],
        *,
        context: dict[str, Any] | None = None,
    ) -> T:
        """Await ``func`` while recording latency and outcome.

        Failures are logged and re-raised; callers decide whether to degrade.
        """
        context = context or {}
        async with self._lock:
            self._metrics[source][operation].started += 1

        start = time.monotonic()
        try:
            result = await func()
        except Exception as exc:
            latency_ms = (time.monotonic() - start) * 1000
            error = redact_secrets(str(exc))
            async with self._lock:
                metrics = self._metrics[source][operation]
                metrics.failed += 1
                metrics.last_latency_ms = latency_ms
                metrics.last_error = error
            payload = {
                "event": "source_failure",
                "source": source,
                "operation": operation,
                "error": error,
                "latency_ms": round(latency_ms, 2),
                "context": context,
            }
            logger.warning(json.dumps(payload))
            raise

        latency_ms = (time.monotonic() - start) * 1000
        async with self._lock:
            metrics = self._metrics[source][operation]
            metrics.succeeded += 1
            metrics.last_latency_ms = latency_ms
            metrics.last_error = None
        payload = {
            "event": "source_success",
            "source": source,
            "operation": operation,
            "latency_ms": round(latency_ms, 2),
            "context": context,
        }
        logger.debug(json.dumps(payload))
        return result

    async def snapshot(self) -> dict[str, Any]:
        """Return a serializable snapshot of all tracked operations."""
        async with self._lock:
            return {
                source: {name: asdict(metrics) for name, metrics in operations.items()}
                for source, operations in self._metrics.items()
            }

    async def reset(self) -> None:
        async with self._lock:
            self._metrics.clear()


source_monitor = SourceMonitor()
