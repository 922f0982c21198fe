from typing import Optional

from extensions import db  # type: ignore
from models import TimestampMixin, new_id


class User(TimestampMixin, db.Model):
    __tablename__ = "users"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    email = db.Column(db.String(255), unique=True, nullable=True)

    log_entries = db.relationship(
        "LogEntry",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @staticmethod
    def get_user(user_id: str) -> Optional["User"]:
        return db.session.get(User, user_id)

    @staticmethod
    def ensure_user(user_id: str) -> "User":
        """Return the user row for ``user_id``, creating a bare one if missing."""
        user = User.get_user(user_id)
        if user is None:
            user = User(id=user_id)
            db.session.add(user)
            db.session.flush()
        return user
