from extensions import db  # type: ignore
from models import ENTRY_TYPES, FEELING_MOMENTS, TimestampMixin, new_id


class LogEntry(TimestampMixin, db.Model):
    __tablename__ = "log_entries"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    user_id = db.Column(
        db.String(36),
        db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    type = db.Column(db.Enum(*ENTRY_TYPES, name="log_entry_type"), nullable=False)
    raw_text = db.Column(db.Text, nullable=False)
    occurred_at = db.Column(db.DateTime, nullable=False, index=True)

    user = db.relationship("User", back_populates="log_entries")
    feelings = db.relationship(
        "FeelingEntry",
        back_populates="log_entry",
        order_by="FeelingEntry.created_at",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def post_feeling(self):
        """First post-activity feeling recorded for this entry, if any."""
        for feeling in self.feelings:
            if feeling.when == "post":
                return feeling
        return None


class FeelingEntry(TimestampMixin, db.Model):
    """A pre/post mood snapshot attached to a log entry. Append-only."""

    __tablename__ = "feeling_entries"
    __table_args__ = (
        db.CheckConstraint("valence BETWEEN 1 AND 5", name="ck_feeling_valence_range"),
        db.CheckConstraint("energy BETWEEN 1 AND 5", name="ck_feeling_energy_range"),
        db.CheckConstraint("stress BETWEEN 1 AND 5", name="ck_feeling_stress_range"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    log_entry_id = db.Column(
        db.String(36),
        db.ForeignKey("log_entries.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    when = db.Column(db.Enum(*FEELING_MOMENTS, name="feeling_when"), nullable=False)
    valence = db.Column(db.Integer, nullable=False)
    energy = db.Column(db.Integer, nullable=False)
    stress = db.Column(db.Integer, nullable=False)
    notes = db.Column(db.String(280), nullable=True)

    log_entry = db.relationship("LogEntry", back_populates="feelings")
