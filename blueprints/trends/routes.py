from flask import Blueprint, current_app, jsonify, request

from blueprints.request_utils import FieldErrors, parse_int, parse_uuid, resolve_user_id
from services.baseline_service import get_trend_snapshot

trends_bp = Blueprint("trends", __name__)


@trends_bp.route("", methods=["GET"])
def trends():
    """Stored baselines for one window plus recent entries for charting."""
    analytics = current_app.config["ANALYTICS_CONFIG"]
    errors = FieldErrors()
    user_override = parse_uuid(request.args.get("user_id"), "user_id", errors)
    window_days = parse_int(
        request.args.get("window_days"),
        "window_days",
        errors,
        default=analytics.windows[0],
        coerce=True,
    )
    if window_days is not None and not analytics.supports_window(window_days):
        errors.add(
            "window_days",
            "window_days must be one of " + ", ".join(str(w) for w in analytics.windows),
        )
    errors.raise_if_any()

    user_id = resolve_user_id(user_override)
    return jsonify(get_trend_snapshot(user_id, window_days, config=analytics))
