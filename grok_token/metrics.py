"""
grok_token.metrics — Prometheus counters & gauges for the token ledger.

Exposed metrics (names are prefixed with `grok_token_`):
  - ops_total{op,result}    : Counter — ledger operations by outcome
  - events_total{event}     : Counter — committed Transfer/Approval records
  - total_supply            : Gauge   — current total supply (base units)

Labels:
  - op     ∈ {transfer, transfer_from, approve, mint, burn}
  - result ∈ {success} ∪ lower-cased error codes (e.g. insufficient_balance)

Metrics live in a private CollectorRegistry so several ledgers (and test
runs) can share a process without duplicate-registration errors. Use
`generate_latest_text()` to serve them from an HTTP handler.
"""

from __future__ import annotations

from typing import Optional

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    generate_latest,
)

_PREFIX = "grok_token_"

_registry: Optional[CollectorRegistry] = None

# Metric singletons (bound during _build_metrics)
OPS_TOTAL: Counter
EVENTS_TOTAL: Counter
TOTAL_SUPPLY: Gauge


def set_registry(registry: CollectorRegistry) -> None:
    """
    Inject a custom CollectorRegistry (e.g., an app-global one).
    Must be called before the first metric is recorded.
    """
    global _registry
    if _registry is not None:
        return
    _registry = registry
    _build_metrics()


def get_registry() -> CollectorRegistry:
    """Return the metrics registry, creating one on first use."""
    global _registry
    if _registry is None:
        _registry = CollectorRegistry()
        _build_metrics()
    return _registry


def _build_metrics() -> None:
    global OPS_TOTAL, EVENTS_TOTAL, TOTAL_SUPPLY
    reg = _registry
    OPS_TOTAL = Counter(
        _PREFIX + "ops_total",
        "Ledger operations (by operation and result).",
        labelnames=("op", "result"),
        registry=reg,
    )
    EVENTS_TOTAL = Counter(
        _PREFIX + "events_total",
        "Committed ledger events (by event name).",
        labelnames=("event",),
        registry=reg,
    )
    TOTAL_SUPPLY = Gauge(
        _PREFIX + "total_supply",
        "Current total supply in base units.",
        registry=reg,
    )


# ------------------------------ helpers -------------------------------------


def observe_op(*, op: str, result: str, event: Optional[str] = None) -> None:
    """
    Record one ledger operation.

    Args:
        op:     operation name (snake_case)
        result: 'success' or the failing error code
        event:  name of the committed event, if any
    """
    get_registry()
    OPS_TOTAL.labels(op=op, result=(result or "error").lower()).inc()
    if event:
        EVENTS_TOTAL.labels(event=event).inc()


def set_total_supply(value: int) -> None:
    get_registry()
    # Gauges are floats; very large supplies lose precision here only.
    TOTAL_SUPPLY.set(float(value))


def generate_latest_text() -> bytes:
    """Prometheus exposition format for the current registry."""
    return generate_latest(get_registry())


__all__ = [
    "get_registry",
    "set_registry",
    "observe_op",
    "set_total_supply",
    "generate_latest_text",
    "CONTENT_TYPE_LATEST",
]
