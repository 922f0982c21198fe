import logging

from flask import Blueprint, current_app, jsonify, request

from blueprints.request_utils import (
    FieldErrors,
    get_json_body,
    parse_choice,
    parse_int,
    parse_iso_datetime,
    parse_text,
    parse_uuid,
    resolve_user_id,
)
from models import ENTRY_TYPES
from services.entry_service import (
    create_log_entry,
    get_log_entry,
    list_log_entries,
    to_api_entry,
)

logger = logging.getLogger(__name__)

entries_bp = Blueprint("entries", __name__)


@entries_bp.route("", methods=["POST"])
def create_entry():
    body = get_json_body()
    errors = FieldErrors()
    user_override = parse_uuid(body.get("user_id"), "user_id", errors)
    entry_type = parse_choice(body.get("type"), "type", ENTRY_TYPES, errors)
    raw_text = parse_text(body.get("raw_text"), "raw_text", errors)
    occurred_at = parse_iso_datetime(body.get("occurred_at"), "occurred_at", errors)
    errors.raise_if_any()

    user_id = resolve_user_id(user_override)
    entry = create_log_entry(
        user_id=user_id,
        entry_type=entry_type,
        raw_text=raw_text,
        occurred_at=occurred_at,
    )
    logger.info("Created %s entry %s for user %s", entry.type, entry.id, user_id)
    return jsonify(to_api_entry(entry)), 201


@entries_bp.route("", methods=["GET"])
def list_entries():
    errors = FieldErrors()
    user_override = parse_uuid(request.args.get("user_id"), "user_id", errors)
    entry_type = parse_choice(
        request.args.get("type"), "type", ENTRY_TYPES, errors, required=False
    )
    limit = parse_int(
        request.args.get("limit"),
        "limit",
        errors,
        minimum=1,
        maximum=current_app.config["ENTRIES_MAX_LIMIT"],
        default=current_app.config["ENTRIES_DEFAULT_LIMIT"],
        coerce=True,
    )
    offset = parse_int(
        request.args.get("offset"), "offset", errors, minimum=0, default=0, coerce=True
    )
    errors.raise_if_any()

    user_id = resolve_user_id(user_override)
    entries = list_log_entries(user_id, entry_type=entry_type, limit=limit, offset=offset)
    return jsonify([to_api_entry(e) for e in entries])


@entries_bp.route("/<entry_id>", methods=["GET"])
def get_entry(entry_id: str):
    errors = FieldErrors()
    entry_id = parse_uuid(entry_id, "id", errors)
    errors.raise_if_any()

    entry = get_log_entry(entry_id)
    if entry is None:
        return jsonify({"message": "Entry not found"}), 404
    return jsonify(to_api_entry(entry))
