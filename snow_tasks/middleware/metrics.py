"""HTTP metrics middleware."""

import time

from flask import Flask, g, request

from snow_tasks.telemetry import get_meter


UNMETERED_PATHS = ("/api/health",)


def register_metrics_middleware(app: Flask) -> None:
    """Record a request counter and duration histogram per route.

    Args:
        app: Flask application instance.
    """
    meter = get_meter(__name__)

    http_requests_total = meter.create_counter(
        name="http_requests_total",
        description="Total HTTP requests",
        unit="1",
    )

    http_request_duration = meter.create_histogram(
        name="http_request_duration_ms",
        description="HTTP request duration in milliseconds",
        unit="ms",
    )

    @app.before_request
    def start_timer() -> None:
        g.request_start_time = time.perf_counter()

    @app.after_request
    def record_request(response):
        if request.path in UNMETERED_PATHS:
            return response

        start_time = getattr(g, "request_start_time", None)
        duration_ms = (time.perf_counter() - start_time) * 1000 if start_time else 0

        # Use the rule so task ids don't explode cardinality
        attributes = {
            "http.request.method": request.method,
            "http.route": request.url_rule.rule if request.url_rule else "unmatched",
            "http.response.status_code": str(response.status_code),
        }

        http_requests_total.add(1, attributes)
        http_request_duration.record(duration_ms, attributes)

        return response
