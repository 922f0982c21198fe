from datetime import datetime
from uuid import uuid4

from extensions import db  # type: ignore

ENTRY_TYPES = ("workout", "meal")
FEELING_MOMENTS = ("pre", "post")


def new_id() -> str:
    return str(uuid4())


class TimestampMixin:
    """Mixin that adds created_at and updated_at columns."""

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(
        db.DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
    )


def init_models():
    """Import models so that SQLAlchemy is aware of them."""
    # Local imports to avoid circular dependencies
    from .user_model import User  # noqa: F401
    from .entry_model import FeelingEntry, LogEntry  # noqa: F401
    from .baseline_model import BaselineMetric  # noqa: F401
    from .insight_model import Insight  # noqa: F401
