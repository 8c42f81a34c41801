"""Tests for task board endpoints."""

from unittest.mock import patch

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session


def _create(client, payload, **overrides):
    body = {**payload, **overrides}
    return client.post("/api/tasks", json=body)


def _owner_list(client, phone="11111111", password="abc"):
    return client.get("/api/tasks/mine", query_string={"phone": phone, "password": password})


def _find(tasks, task_id):
    return next(t for t in tasks if t["id"] == task_id)


class TestListTasks:
    def test_list_tasks_empty(self, client, db):
        response = client.get("/api/tasks")
        assert response.status_code == 200
        assert response.get_json() == []

    def test_list_tasks_public_view(self, client, db, task_payload):
        task_id = _create(client, task_payload).get_json()["id"]

        data = client.get("/api/tasks").get_json()
        assert len(data) == 1
        task = data[0]
        assert task["id"] == task_id
        assert task["name"] == "Anna"
        assert task["phone"] == "11111111"
        assert task["area"] == 50
        assert task["price"] == 150
        assert task["wantsSalt"] is True
        assert task["hasEquipment"] is False
        assert task["status"] == "available"
        assert "ownerPassword" not in task
        assert "owner_password_hash" not in task
        assert "takenByPhone" not in task

    def test_list_tasks_newest_first(self, client, make_task):
        make_task(name="old", created_at=1_000)
        make_task(name="new", created_at=3_000)
        make_task(name="middle", created_at=2_000)

        names = [t["name"] for t in client.get("/api/tasks").get_json()]
        assert names == ["new", "middle", "old"]

    def test_list_tasks_hides_claimant(self, client, db, task_payload):
        task_id = _create(client, task_payload).get_json()["id"]
        client.post(f"/api/tasks/{task_id}/take", json={"phone": "12345678"})

        task = _find(client.get("/api/tasks").get_json(), task_id)
        assert task["status"] == "taken"
        assert "takenByPhone" not in task
        assert "12345678" not in client.get("/api/tasks").get_data(as_text=True)


class TestCreateTask:
    def test_create_task(self, client, db, task_payload):
        response = _create(client, task_payload)
        assert response.status_code == 200
        data = response.get_json()
        assert set(data) == {"id", "createdAt", "status"}
        assert data["status"] == "available"
        assert isinstance(data["createdAt"], int)
        assert data["id"]

    def test_create_task_ids_unique(self, client, db, task_payload):
        ids = {_create(client, task_payload).get_json()["id"] for _ in range(5)}
        assert len(ids) == 5

    def test_create_task_trims_and_coerces(self, client, db, task_payload):
        response = _create(
            client,
            task_payload,
            name="  Anna  ",
            phone=11111111,
            area="60",
            price="200",
            ownerPassword=" abc ",
        )
        assert response.status_code == 200

        task = _owner_list(client).get_json()[0]
        assert task["name"] == "Anna"
        assert task["phone"] == "11111111"
        assert task["area"] == 60
        assert task["price"] == 200

    def test_create_task_empty_password_accepted(self, client, db, task_payload):
        response = _create(client, task_payload, ownerPassword="")
        assert response.status_code == 200

    def test_create_task_optional_fields_default(self, client, db, task_payload):
        for key in ("wantsSalt", "hasEquipment", "description"):
            task_payload.pop(key)
        assert _create(client, task_payload).status_code == 200

        task = client.get("/api/tasks").get_json()[0]
        assert task["wantsSalt"] is False
        assert task["hasEquipment"] is False
        assert task["description"] == ""

    def test_create_task_missing_fields(self, client, db):
        response = client.post("/api/tasks", json={})
        assert response.status_code == 400
        body = response.get_json()
        assert "error" in body
        assert {"name", "phone", "address", "area", "price", "ownerPassword"} <= set(body["messages"])

    def test_create_task_rejects_bad_values(self, client, db, task_payload):
        bad_values = [
            {"name": "   "},
            {"phone": ""},
            {"address": None},
            {"area": 0},
            {"area": -5},
            {"area": "lots"},
            {"price": 0},
            {"ownerPassword": None},
        ]
        for override in bad_values:
            response = _create(client, task_payload, **override)
            assert response.status_code == 400, override

        assert client.get("/api/tasks").get_json() == []

    def test_create_task_missing_password(self, client, db, task_payload):
        task_payload.pop("ownerPassword")
        assert _create(client, task_payload).status_code == 400
        assert client.get("/api/tasks").get_json() == []

    def test_create_task_rejects_unrecognized_flag(self, client, db, task_payload):
        response = _create(client, task_payload, wantsSalt="maybe")
        assert response.status_code == 400
        assert "wantsSalt" in response.get_json()["messages"]

    def test_create_task_accepts_flag_strings(self, client, db, task_payload):
        assert _create(client, task_payload, wantsSalt="false", hasEquipment=1).status_code == 200

        task = client.get("/api/tasks").get_json()[0]
        assert task["wantsSalt"] is False
        assert task["hasEquipment"] is True

    def test_create_task_not_json(self, client, db):
        response = client.post("/api/tasks", data="name=Anna", content_type="text/plain")
        assert response.status_code == 400


class TestListMyTasks:
    def test_list_my_tasks(self, client, db, task_payload):
        task_id = _create(client, task_payload).get_json()["id"]
        _create(client, task_payload, phone="22222222")

        response = _owner_list(client)
        assert response.status_code == 200
        data = response.get_json()
        assert [t["id"] for t in data] == [task_id]

    def test_list_my_tasks_requires_credentials(self, client, db):
        assert client.get("/api/tasks/mine").status_code == 400
        assert _owner_list(client, password="  ").status_code == 400
        assert _owner_list(client, phone="").status_code == 400

    def test_list_my_tasks_wrong_password_is_empty(self, client, db, task_payload):
        _create(client, task_payload)

        response = _owner_list(client, password="abd")
        assert response.status_code == 200
        assert response.get_json() == []

    def test_list_my_tasks_no_partial_match(self, client, db, task_payload):
        _create(client, task_payload)

        assert _owner_list(client, phone="1111111").get_json() == []
        assert _owner_list(client, password="ab").get_json() == []
        assert _owner_list(client, password="ABC").get_json() == []

    def test_list_my_tasks_same_phone_other_password(self, client, db, task_payload):
        first = _create(client, task_payload).get_json()["id"]
        second = _create(client, task_payload, ownerPassword="xyz").get_json()["id"]

        assert [t["id"] for t in _owner_list(client).get_json()] == [first]
        assert [t["id"] for t in _owner_list(client, password="xyz").get_json()] == [second]

    def test_list_my_tasks_shows_claimant(self, client, db, task_payload):
        task_id = _create(client, task_payload).get_json()["id"]
        assert "takenByPhone" not in _owner_list(client).get_json()[0]

        client.post(f"/api/tasks/{task_id}/take", json={"phone": "12345678"})

        task = _owner_list(client).get_json()[0]
        assert task["status"] == "taken"
        assert task["takenByPhone"] == "12345678"
        assert "ownerPassword" not in task


class TestTakeTask:
    def test_take_task(self, client, db, task_payload):
        task_id = _create(client, task_payload).get_json()["id"]

        response = client.post(f"/api/tasks/{task_id}/take", json={"phone": " 12345678 "})
        assert response.status_code == 200
        assert response.get_json() == {"ok": True}

        task = _owner_list(client).get_json()[0]
        assert task["status"] == "taken"
        assert task["takenByPhone"] == "12345678"

    def test_take_task_blank_phone(self, client, db, task_payload):
        task_id = _create(client, task_payload).get_json()["id"]

        for body in ({}, {"phone": ""}, {"phone": "   "}, None):
            response = client.post(f"/api/tasks/{task_id}/take", json=body)
            assert response.status_code == 400

        task = _owner_list(client).get_json()[0]
        assert task["status"] == "available"
        assert "takenByPhone" not in task

    def test_take_task_not_found(self, client, db):
        response = client.post("/api/tasks/nope/take", json={"phone": "12345678"})
        assert response.status_code == 404
        assert response.get_json()["error"] == "Task not found"

    def test_take_task_already_taken(self, client, db, task_payload):
        task_id = _create(client, task_payload).get_json()["id"]
        client.post(f"/api/tasks/{task_id}/take", json={"phone": "12345678"})

        response = client.post(f"/api/tasks/{task_id}/take", json={"phone": "87654321"})
        assert response.status_code == 409

        task = _owner_list(client).get_json()[0]
        assert task["takenByPhone"] == "12345678"


class TestClearTaken:
    def _taken_task(self, client, task_payload):
        task_id = _create(client, task_payload).get_json()["id"]
        client.post(f"/api/tasks/{task_id}/take", json={"phone": "12345678"})
        return task_id

    def test_clear_taken(self, client, db, task_payload):
        task_id = self._taken_task(client, task_payload)

        response = client.post(
            f"/api/tasks/{task_id}/clear-taken",
            json={"phone": "11111111", "password": "abc"},
        )
        assert response.status_code == 200
        assert response.get_json() == {"ok": True}

        task = _owner_list(client).get_json()[0]
        assert task["status"] == "available"
        assert "takenByPhone" not in task

    def test_clear_taken_allows_new_claim(self, client, db, task_payload):
        task_id = self._taken_task(client, task_payload)
        client.post(
            f"/api/tasks/{task_id}/clear-taken",
            json={"phone": "11111111", "password": "abc"},
        )

        response = client.post(f"/api/tasks/{task_id}/take", json={"phone": "99999999"})
        assert response.status_code == 200
        assert _owner_list(client).get_json()[0]["takenByPhone"] == "99999999"

    def test_clear_taken_wrong_password(self, client, db, task_payload):
        task_id = self._taken_task(client, task_payload)

        response = client.post(
            f"/api/tasks/{task_id}/clear-taken",
            json={"phone": "11111111", "password": "wrong"},
        )
        assert response.status_code == 403

        task = _owner_list(client).get_json()[0]
        assert task["status"] == "taken"
        assert task["takenByPhone"] == "12345678"

    def test_clear_taken_wrong_phone(self, client, db, task_payload):
        task_id = self._taken_task(client, task_payload)

        response = client.post(
            f"/api/tasks/{task_id}/clear-taken",
            json={"phone": "12345678", "password": "abc"},
        )
        assert response.status_code == 403

    def test_clear_taken_blank_credentials(self, client, db, task_payload):
        task_id = self._taken_task(client, task_payload)

        for body in ({"phone": "11111111"}, {"password": "abc"}, {"phone": " ", "password": "abc"}):
            response = client.post(f"/api/tasks/{task_id}/clear-taken", json=body)
            assert response.status_code == 400

    def test_clear_taken_unknown_task(self, client, db):
        response = client.post(
            "/api/tasks/nope/clear-taken",
            json={"phone": "11111111", "password": "abc"},
        )
        assert response.status_code == 403


class TestDeleteTask:
    def test_delete_task(self, client, db, task_payload):
        task_id = _create(client, task_payload).get_json()["id"]

        response = client.delete(f"/api/tasks/{task_id}", json={"phone": "11111111", "password": "abc"})
        assert response.status_code == 200
        assert response.get_json() == {"ok": True}
        assert client.get("/api/tasks").get_json() == []

    def test_delete_taken_task(self, client, db, task_payload):
        task_id = _create(client, task_payload).get_json()["id"]
        client.post(f"/api/tasks/{task_id}/take", json={"phone": "12345678"})

        response = client.delete(f"/api/tasks/{task_id}", json={"phone": "11111111", "password": "abc"})
        assert response.status_code == 200
        assert _owner_list(client).get_json() == []

    def test_delete_task_wrong_password(self, client, db, task_payload):
        task_id = _create(client, task_payload).get_json()["id"]

        response = client.delete(f"/api/tasks/{task_id}", json={"phone": "11111111", "password": "nope"})
        assert response.status_code == 403
        assert [t["id"] for t in client.get("/api/tasks").get_json()] == [task_id]

    def test_delete_task_blank_credentials(self, client, db, task_payload):
        task_id = _create(client, task_payload).get_json()["id"]

        response = client.delete(f"/api/tasks/{task_id}", json={"phone": "11111111", "password": ""})
        assert response.status_code == 400
        response = client.delete(f"/api/tasks/{task_id}")
        assert response.status_code == 400

    def test_delete_task_empty_password_owner_cannot_manage(self, client, db, task_payload):
        task_id = _create(client, task_payload, ownerPassword="").get_json()["id"]

        response = client.delete(f"/api/tasks/{task_id}", json={"phone": "11111111", "password": ""})
        assert response.status_code == 400
        assert len(client.get("/api/tasks").get_json()) == 1


class TestTaskScenario:
    def test_full_lifecycle(self, client, db, task_payload):
        task_id = _create(client, task_payload).get_json()["id"]
        assert _find(client.get("/api/tasks").get_json(), task_id)["status"] == "available"

        client.post(f"/api/tasks/{task_id}/take", json={"phone": "12345678"})
        public = _find(client.get("/api/tasks").get_json(), task_id)
        assert public["status"] == "taken"
        assert "takenByPhone" not in public

        response = client.post(
            f"/api/tasks/{task_id}/clear-taken",
            json={"phone": "11111111", "password": "wrong"},
        )
        assert response.status_code == 403
        assert _find(client.get("/api/tasks").get_json(), task_id)["status"] == "taken"

        response = client.post(
            f"/api/tasks/{task_id}/clear-taken",
            json={"phone": "11111111", "password": "abc"},
        )
        assert response.status_code == 200
        owner_view = _owner_list(client).get_json()[0]
        assert owner_view["status"] == "available"
        assert "takenByPhone" not in owner_view

        response = client.delete(f"/api/tasks/{task_id}", json={"phone": "11111111", "password": "abc"})
        assert response.status_code == 200
        assert all(t["id"] != task_id for t in client.get("/api/tasks").get_json())


class TestErrors:
    def test_unknown_route(self, client, db):
        response = client.get("/api/unknown")
        assert response.status_code == 404
        assert response.get_json()["error"] == "Not found"

    def test_method_not_allowed(self, client, db):
        response = client.put("/api/tasks")
        assert response.status_code == 405

    def test_storage_failure_is_500(self, task_payload):
        from snow_tasks import create_app
        from snow_tasks.config import TestConfig

        class NoPropagateConfig(TestConfig):
            PROPAGATE_EXCEPTIONS = False

        client = create_app(NoPropagateConfig).test_client()
        with patch.object(
            Session,
            "commit",
            side_effect=OperationalError("INSERT", {}, Exception("disk full")),
        ):
            response = client.post("/api/tasks", json=task_payload)

        assert response.status_code == 500
        body = response.get_json()
        assert body["error"] == "Internal server error"
        assert body["status"] == 500
