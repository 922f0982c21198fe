"""Request parsing and user resolution shared by the JSON blueprints."""

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional
from uuid import UUID

from flask import abort, current_app, request


class RequestValidationError(ValueError):
    """Malformed request input; rendered as a 400 by the app error handler."""

    def __init__(self, issues: List[Dict[str, str]]):
        super().__init__("Validation failed")
        self.issues = issues


class FieldErrors:
    """Collects per-field problems so one response can report all of them."""

    def __init__(self):
        self.issues: List[Dict[str, str]] = []

    def add(self, field: str, message: str) -> None:
        self.issues.append({"field": field, "message": message})

    def raise_if_any(self) -> None:
        if self.issues:
            raise RequestValidationError(self.issues)


def get_json_body() -> Dict[str, Any]:
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise RequestValidationError(
            [{"field": "body", "message": "Expected a JSON object"}]
        )
    return body


def parse_uuid(value: Any, field: str, errors: FieldErrors) -> Optional[str]:
    if value in (None, ""):
        return None
    try:
        return str(UUID(str(value)))
    except ValueError:
        errors.add(field, "Must be a UUID")
        return None


def parse_choice(
    value: Any,
    field: str,
    choices: Iterable[str],
    errors: FieldErrors,
    required: bool = True,
) -> Optional[str]:
    choices = tuple(choices)
    if value in (None, ""):
        if required:
            errors.add(field, "Required")
        return None
    if value not in choices:
        errors.add(field, f"Must be one of: {', '.join(choices)}")
        return None
    return value


def parse_int(
    value: Any,
    field: str,
    errors: FieldErrors,
    *,
    minimum: Optional[int] = None,
    maximum: Optional[int] = None,
    default: Optional[int] = None,
    coerce: bool = False,
) -> Optional[int]:
    """
    Parse an integer field. JSON bodies must carry real integers; query strings
    are coerced with ``coerce=True``.
    """
    if value in (None, ""):
        if default is None:
            errors.add(field, "Required")
        return default

    if coerce and isinstance(value, str):
        try:
            value = int(value)
        except ValueError:
            errors.add(field, "Must be an integer")
            return None

    if isinstance(value, bool) or not isinstance(value, int):
        errors.add(field, "Must be an integer")
        return None
    if minimum is not None and value < minimum:
        errors.add(field, f"Must be >= {minimum}")
        return None
    if maximum is not None and value > maximum:
        errors.add(field, f"Must be <= {maximum}")
        return None
    return value


def parse_text(
    value: Any,
    field: str,
    errors: FieldErrors,
    *,
    required: bool = True,
    max_length: Optional[int] = None,
) -> Optional[str]:
    if value is None or (required and value == ""):
        if required:
            errors.add(field, "Required")
        return None
    if not isinstance(value, str):
        errors.add(field, "Must be a string")
        return None
    if max_length is not None and len(value) > max_length:
        errors.add(field, f"Must be at most {max_length} characters")
        return None
    return value


def parse_iso_datetime(value: Any, field: str, errors: FieldErrors) -> Optional[datetime]:
    """Parse ISO 8601 and normalise to naive UTC, the storage convention."""
    if not value or not isinstance(value, str):
        errors.add(field, "Required ISO 8601 datetime")
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        errors.add(field, "Must be an ISO 8601 datetime")
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def resolve_user_id(override: Optional[str] = None) -> str:
    """
    Pick the acting user: explicit ``user_id`` override, then the
    ``X-User-Id`` header, then ``DEFAULT_USER_ID`` from config.
    """
    if override:
        return override

    header_user_id = request.headers.get("X-User-Id")
    if header_user_id:
        return header_user_id

    fallback = current_app.config.get("DEFAULT_USER_ID")
    if not fallback:
        abort(
            401,
            description="DEFAULT_USER_ID must be configured for unauthenticated development flows.",
        )
    return fallback
