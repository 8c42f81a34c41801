"""Task lifecycle: create, take, clear-taken and delete.

A task is ``available`` when posted, ``taken`` once a neighbor claims it, and
goes back to ``available`` when its owner clears the claim. Deleting a task is
how its owner marks it done.
"""

import logging
from typing import Any

from marshmallow import ValidationError

from snow_tasks import store
from snow_tasks.errors import Conflict, InvalidInput, NotFound, Unauthorized
from snow_tasks.models import AVAILABLE, TAKEN, Task
from snow_tasks.schemas import ClaimSchema, OwnerCredentialsSchema, TaskCreateSchema
from snow_tasks.telemetry import get_meter, get_tracer


logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)
meter = get_meter(__name__)

tasks_created = meter.create_counter(
    name="tasks.created",
    description="Tasks posted",
    unit="1",
)
tasks_claimed = meter.create_counter(
    name="tasks.claimed",
    description="Tasks taken by a neighbor",
    unit="1",
)
tasks_completed = meter.create_counter(
    name="tasks.completed",
    description="Tasks removed by their owner",
    unit="1",
)
auth_failures = meter.create_counter(
    name="tasks.auth.failures",
    description="Owner requests with non-matching credentials",
    unit="1",
)


def _load(schema, data: Any, message: str) -> dict:
    try:
        return schema.load(data if data is not None else {})
    except ValidationError as err:
        raise InvalidInput(message, messages=err.messages) from err


def parse_owner_credentials(data: Any) -> tuple[str, str]:
    """Validate a phone+password pair.

    Raises:
        InvalidInput: If either value is blank after trimming.
    """
    creds = _load(OwnerCredentialsSchema(), data, "Phone number and password are required")
    return creds["phone"], creds["password"]


def create_task(data: Any) -> Task:
    """Validate a submission and persist it as a new available task.

    Raises:
        InvalidInput: If a required field is missing or not positive.
    """
    with tracer.start_as_current_span("task.create") as span:
        fields = _load(TaskCreateSchema(), data, "Missing or invalid fields")

        task = Task(
            name=fields["name"],
            phone=fields["phone"],
            address=fields["address"],
            area=fields["area"],
            price=fields["price"],
            wants_salt=fields["wants_salt"],
            has_equipment=fields["has_equipment"],
            description=fields["description"],
            status=AVAILABLE,
            taken_by_phone=None,
        )
        task.set_owner_password(fields["owner_password"])
        store.insert(task)

        span.set_attribute("task.id", task.id)
        span.set_attribute("task.area", task.area)
        tasks_created.add(1, {"wants_salt": str(task.wants_salt).lower()})
        logger.info(f"Task created: {task.id}")

        return task


def take_task(task_id: str, data: Any) -> None:
    """Claim an available task for the neighbor whose phone is given.

    The status change is a conditional update, so two concurrent claims
    cannot both win.

    Raises:
        InvalidInput: If the phone number is blank.
        NotFound: If no task has this id.
        Conflict: If the task is already taken.
    """
    with tracer.start_as_current_span("task.take") as span:
        span.set_attribute("task.id", task_id)
        phone = _load(ClaimSchema(), data, "Phone number is required")["phone"]

        if store.get(task_id) is None:
            span.set_attribute("task.outcome", "not_found")
            raise NotFound("Task not found")

        if not store.update_status(task_id, TAKEN, phone, expected_status=AVAILABLE):
            if store.get(task_id) is None:
                span.set_attribute("task.outcome", "not_found")
                raise NotFound("Task not found")
            span.set_attribute("task.outcome", "already_taken")
            logger.info(f"Claim rejected, task already taken: {task_id}")
            raise Conflict("Task has already been taken")

        tasks_claimed.add(1)
        logger.info(f"Task taken: {task_id}")


def _authorize(task_id: str, phone: str, password: str, span) -> Task:
    task = store.get_owned(task_id, phone, password)
    if task is None:
        # Unknown id and wrong credentials are reported the same way
        span.set_attribute("auth.status", "forbidden")
        auth_failures.add(1)
        logger.warning(f"Owner credentials rejected for task {task_id}")
        raise Unauthorized("Wrong phone number or password")
    span.set_attribute("auth.status", "success")
    return task


def clear_taken(task_id: str, data: Any) -> None:
    """Owner releases a claim, making the task available again.

    Raises:
        InvalidInput: If phone or password is blank.
        Unauthorized: If the pair does not own this task.
    """
    with tracer.start_as_current_span("task.clear_taken") as span:
        span.set_attribute("task.id", task_id)
        phone, password = parse_owner_credentials(data)
        _authorize(task_id, phone, password, span)

        store.update_status(task_id, AVAILABLE, None)
        logger.info(f"Task claim cleared: {task_id}")


def delete_task(task_id: str, data: Any) -> None:
    """Owner marks a task done, which removes it.

    Raises:
        InvalidInput: If phone or password is blank.
        Unauthorized: If the pair does not own this task.
    """
    with tracer.start_as_current_span("task.delete") as span:
        span.set_attribute("task.id", task_id)
        phone, password = parse_owner_credentials(data)
        task = _authorize(task_id, phone, password, span)
        was_taken = task.status == TAKEN

        store.delete_by_id(task_id)
        tasks_completed.add(1, {"was_taken": str(was_taken).lower()})
        logger.info(f"Task deleted: {task_id}")
