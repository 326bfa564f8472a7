# dbexplorer/monitoring.py
"""
Centralized monitoring: Prometheus metrics, structured JSON logging, optional Sentry.

Env vars:
- PROMETHEUS_ENABLED (default: true)
- SENTRY_DSN (optional)
- LOG_AS_JSON (default: true)
- LOG_LEVEL (default: INFO)
- ENVIRONMENT (default: development)
"""

import os
import logging
import time
from typing import Tuple

import sentry_sdk
from prometheus_client import (
    Counter, Histogram, Gauge,
    generate_latest, CONTENT_TYPE_LATEST, REGISTRY,
)
from pythonjsonlogger import jsonlogger

# --- ENV flags
PROMETHEUS_ENABLED = os.getenv("PROMETHEUS_ENABLED", "true").lower() in ("1", "true", "yes")
SENTRY_DSN = os.getenv("SENTRY_DSN", None)
LOG_AS_JSON = os.getenv("LOG_AS_JSON", "true").lower() in ("1", "true", "yes")
ENVIRONMENT = os.getenv("ENVIRONMENT", "development")


# --- Logger setup
def setup_logger(name: str = "dbexplorer", level: int = None) -> logging.Logger:
    level = logging.getLevelName(os.getenv("LOG_LEVEL", "INFO")) if level is None else level
    logger = logging.getLogger(name)
    logger.setLevel(level)
    if not logger.handlers:
        handler = logging.StreamHandler()
        if LOG_AS_JSON:
            fmt = jsonlogger.JsonFormatter(
                "%(asctime)s %(levelname)s %(name)s %(message)s"
            )
        else:
            fmt = logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
        handler.setFormatter(fmt)
        logger.addHandler(handler)
    return logger


logger = setup_logger()

# --- Sentry (optional)
if SENTRY_DSN:
    sentry_sdk.init(dsn=SENTRY_DSN, environment=ENVIRONMENT)
    logger.info("Sentry initialized")


# --- Prometheus metrics
REQUEST_COUNT = Counter(
    "dbexplorer_requests_total",
    "Total gateway requests",
    ["method", "operation", "status"],
)

REQUEST_LATENCY = Histogram(
    "dbexplorer_request_latency_seconds",
    "Request latency in seconds",
    ["operation"],
)

OPERATION_COUNTER = Counter(
    "dbexplorer_operations_total",
    "Table operations by outcome",
    ["operation", "outcome"],
)

ROWS_RETURNED = Gauge(
    "dbexplorer_rows_returned",
    "Rows in the last list-records response",
)


# --- Helper wrappers (never crash the app)
def observe_request(start_ts: float, operation: str, method: str, status: str):
    try:
        REQUEST_LATENCY.labels(operation=operation).observe(time.time() - start_ts)
        REQUEST_COUNT.labels(method=method, operation=operation, status=status).inc()
    except Exception:
        pass


def inc_operation(operation: str, outcome: str):
    try:
        OPERATION_COUNTER.labels(operation=operation, outcome=outcome).inc()
    except Exception:
        pass


def set_rows_returned(n: int):
    try:
        ROWS_RETURNED.set(n)
    except Exception:
        pass


def prometheus_metrics_response() -> Tuple[bytes, str]:
    """Return (body_bytes, content_type) for Prometheus scrape."""
    try:
        return generate_latest(REGISTRY), CONTENT_TYPE_LATEST
    except Exception:
        return b"", CONTENT_TYPE_LATEST
