"""Task board endpoints."""

import logging

from flask import Blueprint, jsonify, request

from snow_tasks import store
from snow_tasks.middleware.gate import site_password_required
from snow_tasks.schemas import OwnerTaskSchema, TaskCreatedSchema, TaskSchema
from snow_tasks.services import lifecycle


logger = logging.getLogger(__name__)

tasks_bp = Blueprint("tasks", __name__, url_prefix="/api/tasks")


@tasks_bp.route("", methods=["GET"])
@site_password_required
def list_tasks():
    """List every task, newest first, without claimant phone numbers."""
    return jsonify(TaskSchema(many=True).dump(store.list_all()))


@tasks_bp.route("/mine", methods=["GET"])
@site_password_required
def list_my_tasks():
    """List the tasks owned by a phone+password pair.

    Query params:
        phone: Owner phone number
        password: Owner password

    Returns:
        JSON array of owner views; empty when nothing matches.
    """
    phone, password = lifecycle.parse_owner_credentials(request.args.to_dict())
    tasks = store.list_by_owner(phone, password)
    return jsonify(OwnerTaskSchema(many=True).dump(tasks))


@tasks_bp.route("", methods=["POST"])
@site_password_required
def create_task():
    """Post a new task.

    Returns:
        JSON with the new task's id, createdAt and status.
    """
    task = lifecycle.create_task(request.get_json(silent=True))
    return jsonify(TaskCreatedSchema().dump(task))


@tasks_bp.route("/<task_id>/take", methods=["POST"])
@site_password_required
def take_task(task_id: str):
    lifecycle.take_task(task_id, request.get_json(silent=True))
    return jsonify({"ok": True})


@tasks_bp.route("/<task_id>/clear-taken", methods=["POST"])
@site_password_required
def clear_taken(task_id: str):
    lifecycle.clear_taken(task_id, request.get_json(silent=True))
    return jsonify({"ok": True})


@tasks_bp.route("/<task_id>", methods=["DELETE"])
@site_password_required
def delete_task(task_id: str):
    """Owner marks the task done; the task is removed."""
    lifecycle.delete_task(task_id, request.get_json(silent=True))
    return jsonify({"ok": True})
