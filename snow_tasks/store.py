"""Queries against the tasks table.

Every mutation addresses exactly one row by primary key and commits on its
own, so no multi-row transaction is ever needed.
"""

from snow_tasks.extensions import db
from snow_tasks.models import Task


def list_all() -> list[Task]:
    """All tasks, newest first."""
    return db.session.query(Task).order_by(Task.created_at.desc()).all()


def list_by_owner(phone: str, password: str) -> list[Task]:
    """Tasks whose stored phone and password both match, newest first.

    No match, wrong password and unknown phone all look the same: an empty list.
    """
    candidates = (
        db.session.query(Task).filter(Task.phone == phone).order_by(Task.created_at.desc()).all()
    )
    return [task for task in candidates if task.check_owner_password(password)]


def get(task_id: str) -> Task | None:
    return db.session.get(Task, task_id)


def get_owned(task_id: str, phone: str, password: str) -> Task | None:
    """Return the task only if the supplied pair owns it."""
    task = get(task_id)
    if task is None or not task.is_owned_by(phone, password):
        return None
    return task


def insert(task: Task) -> Task:
    db.session.add(task)
    db.session.commit()
    return task


def update_status(
    task_id: str,
    status: str,
    taken_by_phone: str | None,
    expected_status: str | None = None,
) -> bool:
    """Set status and claimant in a single UPDATE.

    Args:
        task_id: Task to update.
        status: New status.
        taken_by_phone: Claimant phone, or None to clear it.
        expected_status: When given, only update if the row currently has
            this status.

    Returns:
        True if a row was changed.
    """
    query = db.session.query(Task).filter(Task.id == task_id)
    if expected_status is not None:
        query = query.filter(Task.status == expected_status)
    changed = query.update(
        {Task.status: status, Task.taken_by_phone: taken_by_phone},
        synchronize_session="fetch",
    )
    db.session.commit()
    return changed == 1


def delete_by_id(task_id: str) -> bool:
    deleted = db.session.query(Task).filter(Task.id == task_id).delete(synchronize_session="fetch")
    db.session.commit()
    return deleted == 1
