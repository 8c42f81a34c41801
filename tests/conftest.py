"""Pytest fixtures for the task board."""

import os

import pytest


# Disable OpenTelemetry for tests
os.environ["OTEL_SDK_DISABLED"] = "true"


@pytest.fixture
def app():
    """Create test application."""
    from snow_tasks import create_app
    from snow_tasks.config import TestConfig

    app = create_app(TestConfig)
    app.config["TESTING"] = True

    yield app


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def db(app):
    """Create test database."""
    from snow_tasks.extensions import db as _db

    with app.app_context():
        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def gated_app():
    """Application behind the site passphrase ``letmein``."""
    from snow_tasks import create_app
    from snow_tasks.config import TestConfig

    class GatedConfig(TestConfig):
        SITE_PASSWORD = "letmein"

    return create_app(GatedConfig)


@pytest.fixture
def gated_client(gated_app):
    return gated_app.test_client()


@pytest.fixture
def task_payload():
    """Valid creation body for task A."""
    return {
        "name": "Anna",
        "phone": "11111111",
        "address": "Snevej 1",
        "area": 50,
        "price": 150,
        "wantsSalt": True,
        "hasEquipment": False,
        "description": "Driveway and sidewalk",
        "ownerPassword": "abc",
    }


@pytest.fixture
def make_task(db):
    """Insert a task directly through the store."""
    from snow_tasks import store
    from snow_tasks.models import Task

    def _make(password="abc", **overrides):
        fields = {
            "name": "Anna",
            "phone": "11111111",
            "address": "Snevej 1",
            "area": 50,
            "price": 150,
            "wants_salt": False,
            "has_equipment": True,
            "description": "",
        }
        fields.update(overrides)
        task = Task(**fields)
        task.set_owner_password(password)
        return store.insert(task)

    return _make
