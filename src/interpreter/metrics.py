"""Interpreter SLI metrics for Prometheus.

2 metrics:
1. interpreter_commands_total{intent,outcome}  - commands by intent and result
2. interpreter_command_duration_seconds        - end-to-end process() latency
"""

from __future__ import annotations

import time
from collections.abc import Generator  # noqa: TC003 -- used at runtime by contextmanager
from contextlib import contextmanager

from prometheus_client import CollectorRegistry, Counter, Histogram

# Latency buckets: 1ms to 2.5s (catalog load plus a handful of writes)
_LATENCY_BUCKETS = (0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5)

OUTCOME_SUCCESS = "success"
OUTCOME_FAILURE = "failure"
OUTCOME_ERROR = "error"


class InterpreterSLI:
    """Interpreter metrics holder.

    Pass a custom CollectorRegistry for testing isolation.
    In production, use the default global registry (registry=None).
    """

    def __init__(self, *, registry: CollectorRegistry | None = None) -> None:
        kwargs = {"registry": registry} if registry is not None else {}
        self.commands_total = Counter(
            "interpreter_commands_total",
            "Interpreted commands by intent and outcome",
            ["intent", "outcome"],
            **kwargs,
        )
        self.command_duration = Histogram(
            "interpreter_command_duration_seconds",
            "Time spent interpreting one command",
            buckets=_LATENCY_BUCKETS,
            **kwargs,
        )

    def record(self, intent: str, outcome: str) -> None:
        self.commands_total.labels(intent=intent, outcome=outcome).inc()

    @contextmanager
    def timer(self) -> Generator[None, None, None]:
        """Observe elapsed time, even if the block raises."""
        start = time.monotonic()
        try:
            yield
        finally:
            self.command_duration.observe(time.monotonic() - start)
