from typing import Any, Dict, List, Optional

from extensions import db  # type: ignore
from models import TimestampMixin, new_id


class Insight(TimestampMixin, db.Model):
    """Rule-derived statement about a user's trend.

    Exactly one row per (user_id, type, rule_name). Rules toggle ``is_active``
    and never delete rows.
    """

    __tablename__ = "insights"
    __table_args__ = (
        db.UniqueConstraint(
            "user_id", "type", "rule_name", name="uq_insight_user_type_rule"
        ),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    user_id = db.Column(
        db.String(36),
        db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    type = db.Column(db.String(64), nullable=False)
    rule_name = db.Column(db.String(128), nullable=False)
    summary = db.Column(db.Text, nullable=False)
    supporting_stats = db.Column(db.JSON, nullable=False, default=dict)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    @staticmethod
    def get_for_key(user_id: str, type_: str, rule_name: str) -> Optional["Insight"]:
        return Insight.query.filter_by(
            user_id=user_id, type=type_, rule_name=rule_name
        ).first()

    @staticmethod
    def list_active(user_id: str, limit: int) -> List["Insight"]:
        return (
            Insight.query.filter_by(user_id=user_id, is_active=True)
            .order_by(Insight.created_at.desc())
            .limit(limit)
            .all()
        )

    @staticmethod
    def save_or_update_insight(
        user_id: str,
        type_: str,
        rule_name: str,
        summary: str,
        supporting_stats: Dict[str, Any],
    ) -> "Insight":
        insight = Insight.get_for_key(user_id, type_, rule_name)
        if insight is None:
            insight = Insight(user_id=user_id, type=type_, rule_name=rule_name)
            db.session.add(insight)

        insight.summary = summary
        insight.supporting_stats = supporting_stats
        insight.is_active = True

        db.session.commit()
        return insight

    @staticmethod
    def deactivate(user_id: str, type_: str, rule_name: str) -> int:
        updated = Insight.query.filter_by(
            user_id=user_id, type=type_, rule_name=rule_name
        ).update({"is_active": False}, synchronize_session=False)
        db.session.commit()
        return updated
