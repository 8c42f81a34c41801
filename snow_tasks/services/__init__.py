"""Service modules."""

from snow_tasks.services.estimate import Estimate, Estimator, heuristic_estimate, init_estimator
from snow_tasks.services.lifecycle import (
    clear_taken,
    create_task,
    delete_task,
    parse_owner_credentials,
    take_task,
)


__all__ = [
    "create_task",
    "take_task",
    "clear_taken",
    "delete_task",
    "parse_owner_credentials",
    "Estimate",
    "Estimator",
    "heuristic_estimate",
    "init_estimator",
]
