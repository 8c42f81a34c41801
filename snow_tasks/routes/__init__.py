"""API route blueprints."""

from snow_tasks.routes.access import access_bp
from snow_tasks.routes.health import health_bp
from snow_tasks.routes.tasks import tasks_bp


__all__ = ["health_bp", "access_bp", "tasks_bp"]
