"""Task model."""

import secrets
import time

from flask import current_app
from sqlalchemy import BigInteger, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from werkzeug.security import check_password_hash, generate_password_hash

from snow_tasks.extensions import db


AVAILABLE = "available"
TAKEN = "taken"

# A completed task is deleted, so only these two are ever stored
STATUSES = (AVAILABLE, TAKEN)


def generate_task_id() -> str:
    """Return a short url-safe id (8 characters)."""
    return secrets.token_urlsafe(6)


def now_ms() -> int:
    return int(time.time() * 1000)


class Task(db.Model):
    """A snow-clearing job posted by a resident."""

    __tablename__ = "tasks"

    id: Mapped[str] = mapped_column(String(16), primary_key=True, default=generate_task_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str] = mapped_column(String(64), index=True, nullable=False)
    address: Mapped[str] = mapped_column(String(500), nullable=False)
    area: Mapped[int] = mapped_column(nullable=False)
    price: Mapped[int] = mapped_column(nullable=False)
    wants_salt: Mapped[bool] = mapped_column(default=False, nullable=False)
    has_equipment: Mapped[bool] = mapped_column(default=False, nullable=False)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    owner_password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[int] = mapped_column(BigInteger, index=True, default=now_ms, nullable=False)
    status: Mapped[str] = mapped_column(String(16), default=AVAILABLE, nullable=False)
    taken_by_phone: Mapped[str | None] = mapped_column(String(64), nullable=True)

    def set_owner_password(self, password: str) -> None:
        """Hash and store the owner's password.

        Args:
            password: Plain text password chosen by the poster. May be empty.
        """
        method = current_app.config.get("PASSWORD_HASH_METHOD", "scrypt")
        self.owner_password_hash = generate_password_hash(password, method=method)

    def check_owner_password(self, password: str) -> bool:
        return check_password_hash(self.owner_password_hash, password)

    def is_owned_by(self, phone: str, password: str) -> bool:
        """True when the supplied pair matches the stored phone and password exactly."""
        return self.phone == phone and self.check_owner_password(password)

    def __repr__(self) -> str:
        return f"<Task {self.id} {self.status}>"
