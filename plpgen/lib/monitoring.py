# plpgen/lib/monitoring.py
from fastapi import FastAPI
from prometheus_client.registry import CollectorRegistry as Registry
from prometheus_client import Counter, Gauge
from prometheus_fastapi_instrumentator import Instrumentator
from plpgen.core.logging import log

# Create a separate registry
registry = Registry()

active_generation_jobs = Gauge(
    'plpgen_active_generation_jobs',
    'Number of batch generation jobs currently running',
    registry=registry
)

generated_units = Counter(
    'plpgen_generated_units',
    'Number of .plp variants generated',
    registry=registry
)


def register_monitoring(app: FastAPI):
    """
    Registers Prometheus monitoring on the FastAPI app and exposes /metrics.
    """
    instrumentator = Instrumentator(
        excluded_handlers=["/metrics"],  # Don't monitor the metrics endpoint itself
        registry=registry  # Use our custom registry
    ).instrument(app)

    instrumentator.expose(app, include_in_schema=False, should_gzip=True)

    log("MONITORING", "Prometheus instrumentation registered at /metrics.")
