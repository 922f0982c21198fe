import logging

from flask import Blueprint, jsonify

from blueprints.request_utils import (
    FieldErrors,
    get_json_body,
    parse_choice,
    parse_int,
    parse_text,
)
from models import FEELING_MOMENTS
from services.entry_service import EntryNotFoundError, create_feeling_entry, to_api_feeling
from services.recompute_pipeline import run_recompute_pipeline

logger = logging.getLogger(__name__)

feelings_bp = Blueprint("feelings", __name__)

NOTES_MAX_LENGTH = 280


@feelings_bp.route("", methods=["POST"])
def create_feeling(entry_id: str):
    """Attach a pre/post mood snapshot to an entry, then refresh baselines."""
    body = get_json_body()
    errors = FieldErrors()
    when = parse_choice(body.get("when"), "when", FEELING_MOMENTS, errors)
    scores = {
        name: parse_int(body.get(name), name, errors, minimum=1, maximum=5)
        for name in ("valence", "energy", "stress")
    }
    notes = parse_text(
        body.get("notes"), "notes", errors, required=False, max_length=NOTES_MAX_LENGTH
    )
    errors.raise_if_any()

    try:
        feeling, entry = create_feeling_entry(
            entry_id=entry_id,
            when=when,
            notes=notes,
            **scores,
        )
    except EntryNotFoundError:
        return jsonify({"message": "Log entry not found"}), 404

    # The feeling stays committed even if the refresh below fails.
    run_recompute_pipeline(entry.user_id)

    return jsonify(to_api_feeling(feeling)), 201
