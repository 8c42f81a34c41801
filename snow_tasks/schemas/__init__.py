"""Marshmallow schemas for serialization and validation."""

from snow_tasks.schemas.estimate import AccessSchema, EstimateQuerySchema
from snow_tasks.schemas.task import (
    ClaimSchema,
    OwnerCredentialsSchema,
    OwnerTaskSchema,
    TaskCreatedSchema,
    TaskCreateSchema,
    TaskSchema,
)


__all__ = [
    "TaskSchema",
    "OwnerTaskSchema",
    "TaskCreateSchema",
    "TaskCreatedSchema",
    "ClaimSchema",
    "OwnerCredentialsSchema",
    "EstimateQuerySchema",
    "AccessSchema",
]
