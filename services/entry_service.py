from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from extensions import db  # type: ignore
from models.entry_model import FeelingEntry, LogEntry
from models.user_model import User


class EntryNotFoundError(LookupError):
    """Raised when a feeling references a log entry that does not exist."""

    def __init__(self, entry_id: str):
        super().__init__(f"Log entry {entry_id} not found")
        self.entry_id = entry_id


def create_log_entry(
    *,
    user_id: str,
    entry_type: str,
    raw_text: str,
    occurred_at: datetime,
) -> LogEntry:
    User.ensure_user(user_id)
    entry = LogEntry(
        user_id=user_id,
        type=entry_type,
        raw_text=raw_text,
        occurred_at=occurred_at,
    )
    db.session.add(entry)
    db.session.commit()
    return entry


def list_log_entries(
    user_id: str,
    entry_type: Optional[str] = None,
    limit: int = 20,
    offset: int = 0,
) -> List[LogEntry]:
    """Return a page of the user's entries, newest occurrence first."""
    query = LogEntry.query.filter(LogEntry.user_id == user_id)
    if entry_type:
        query = query.filter(LogEntry.type == entry_type)
    return (
        query.order_by(LogEntry.occurred_at.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )


def get_log_entry(entry_id: str) -> Optional[LogEntry]:
    return db.session.get(LogEntry, entry_id)


def create_feeling_entry(
    *,
    entry_id: str,
    when: str,
    valence: int,
    energy: int,
    stress: int,
    notes: Optional[str] = None,
) -> Tuple[FeelingEntry, LogEntry]:
    entry = get_log_entry(entry_id)
    if entry is None:
        raise EntryNotFoundError(entry_id)

    feeling = FeelingEntry(
        log_entry_id=entry.id,
        when=when,
        valence=valence,
        energy=energy,
        stress=stress,
        notes=notes,
    )
    db.session.add(feeling)
    db.session.commit()
    return feeling, entry


def to_api_feeling(feeling: FeelingEntry) -> Dict[str, Any]:
    return {
        "id": feeling.id,
        "log_entry_id": feeling.log_entry_id,
        "when": feeling.when,
        "valence": feeling.valence,
        "energy": feeling.energy,
        "stress": feeling.stress,
        "notes": feeling.notes,
        "created_at": feeling.created_at.isoformat(),
    }


def to_api_entry(entry: LogEntry) -> Dict[str, Any]:
    return {
        "id": entry.id,
        "user_id": entry.user_id,
        "type": entry.type,
        "raw_text": entry.raw_text,
        "occurred_at": entry.occurred_at.isoformat(),
        "created_at": entry.created_at.isoformat(),
        "feelings": [to_api_feeling(f) for f in entry.feelings],
    }
