"""Middleware modules."""

from snow_tasks.middleware.gate import site_password_matches, site_password_required
from snow_tasks.middleware.metrics import register_metrics_middleware


__all__ = ["site_password_required", "site_password_matches", "register_metrics_middleware"]
