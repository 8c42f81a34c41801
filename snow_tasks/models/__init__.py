"""Database models."""

from snow_tasks.models.task import AVAILABLE, STATUSES, TAKEN, Task


__all__ = ["Task", "AVAILABLE", "TAKEN", "STATUSES"]
