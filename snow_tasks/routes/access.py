"""Site passphrase check and clearing estimates."""

import logging

from flask import Blueprint, current_app, jsonify, request
from marshmallow import ValidationError

from snow_tasks.errors import InvalidInput, error_response
from snow_tasks.middleware.gate import site_password_matches, site_password_required
from snow_tasks.schemas import AccessSchema, EstimateQuerySchema


logger = logging.getLogger(__name__)

access_bp = Blueprint("access", __name__, url_prefix="/api")


@access_bp.route("/access", methods=["POST"])
def check_access():
    """Check a site passphrase before the client stores it.

    Returns:
        ``{"ok": true}`` on a match, 401 otherwise.
    """
    try:
        data = AccessSchema().load(request.get_json(silent=True) or {})
    except ValidationError as err:
        raise InvalidInput("Password must be a string", messages=err.messages) from err

    if not site_password_matches(data["password"]):
        logger.warning("Site password rejected")
        return error_response("Wrong site password", 401)
    return jsonify({"ok": True})


@access_bp.route("/estimate", methods=["GET"])
@site_password_required
def estimate():
    """Estimate how long a clearing job takes.

    Query params:
        area: Area in square meters
        wantsSalt: Whether salt should be spread
        hasEquipment: Whether the owner has equipment

    Returns:
        JSON estimate, or null when the area is not positive.
    """
    try:
        params = EstimateQuerySchema().load(request.args.to_dict())
    except ValidationError as err:
        raise InvalidInput("Area must be a number", messages=err.messages) from err

    estimator = current_app.extensions["estimator"]
    result = estimator.estimate(params["area"], params["wants_salt"], params["has_equipment"])
    return jsonify(result.to_dict() if result else None)
