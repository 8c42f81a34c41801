"""Task errors and Flask error handlers with OpenTelemetry trace context."""

from typing import Any

from flask import Flask, jsonify
from opentelemetry import trace


class TaskError(Exception):
    """Base class for failures the task lifecycle reports to callers."""

    status_code = 400
    error_type = "client_error"

    def __init__(self, message: str, messages: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.messages = messages


class InvalidInput(TaskError):
    """Missing or malformed request fields."""

    status_code = 400
    error_type = "validation"


class Unauthorized(TaskError):
    """Owner credentials do not match the task."""

    status_code = 403
    error_type = "authorization"


class NotFound(TaskError):
    """No task with the requested id."""

    status_code = 404
    error_type = "not_found"


class Conflict(TaskError):
    """Transition not allowed from the task's current status."""

    status_code = 409
    error_type = "conflict"


def error_response(message: str, status_code: int, **extra: Any) -> tuple:
    """Create error response with trace context.

    Use this function in routes instead of returning jsonify directly.

    Args:
        message: Error message.
        status_code: HTTP status code.
        **extra: Additional fields merged into the body.

    Returns:
        Tuple of (response, status_code).
    """
    response: dict[str, Any] = {"error": message, "status": status_code}
    response.update(extra)

    span_context = trace.get_current_span().get_span_context()
    if span_context.is_valid:
        response["trace_id"] = format(span_context.trace_id, "032x")

    return jsonify(response), status_code


def register_error_handlers(app: Flask) -> None:
    """Register error handlers on Flask app.

    Args:
        app: Flask application instance.
    """

    @app.errorhandler(TaskError)
    def task_error(error: TaskError):
        span = trace.get_current_span()
        if span.is_recording():
            span.set_attribute("error.type", error.error_type)
        extra = {"messages": error.messages} if error.messages else {}
        return error_response(error.message, error.status_code, **extra)

    @app.errorhandler(400)
    def bad_request(error):
        return error_response("Bad request", 400)

    @app.errorhandler(404)
    def not_found(error):
        return error_response("Not found", 404)

    @app.errorhandler(405)
    def method_not_allowed(error):
        return error_response("Method not allowed", 405)

    @app.errorhandler(500)
    def internal_error(error):
        return error_response("Internal server error", 500)
