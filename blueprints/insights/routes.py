from flask import Blueprint, current_app, jsonify, request

from blueprints.request_utils import FieldErrors, parse_int, parse_uuid, resolve_user_id
from services.insight_service import list_insights_for_user

insights_bp = Blueprint("insights", __name__)


@insights_bp.route("", methods=["GET"])
def insights():
    errors = FieldErrors()
    user_override = parse_uuid(request.args.get("user_id"), "user_id", errors)
    limit = parse_int(
        request.args.get("limit"),
        "limit",
        errors,
        minimum=1,
        maximum=current_app.config["INSIGHTS_MAX_LIMIT"],
        default=current_app.config["INSIGHTS_DEFAULT_LIMIT"],
        coerce=True,
    )
    errors.raise_if_any()

    user_id = resolve_user_id(user_override)
    return jsonify(list_insights_for_user(user_id, limit))
