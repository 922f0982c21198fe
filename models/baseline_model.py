from typing import List, Optional

from extensions import db  # type: ignore
from models import ENTRY_TYPES, TimestampMixin, new_id


class BaselineMetric(TimestampMixin, db.Model):
    """Rolling-window mean of one feeling field for a user and scope.

    A row exists only while at least one data point backs it; an empty window
    deletes the row instead of storing a zero.
    """

    __tablename__ = "baseline_metrics"
    __table_args__ = (
        db.UniqueConstraint(
            "user_id",
            "scope",
            "metric",
            "window_days",
            name="uq_baseline_user_scope_metric_window",
        ),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    user_id = db.Column(
        db.String(36),
        db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    scope = db.Column(db.Enum(*ENTRY_TYPES, name="baseline_scope"), nullable=False)
    metric = db.Column(db.String(64), nullable=False)
    window_days = db.Column(db.Integer, nullable=False)
    value = db.Column(db.Float, nullable=False)
    data_points = db.Column(db.Integer, nullable=False)

    @staticmethod
    def get_for_key(
        user_id: str, scope: str, metric: str, window_days: int
    ) -> Optional["BaselineMetric"]:
        return BaselineMetric.query.filter_by(
            user_id=user_id,
            scope=scope,
            metric=metric,
            window_days=window_days,
        ).first()

    @staticmethod
    def list_for_windows(
        user_id: str, scope: str, metric: str, windows: List[int]
    ) -> List["BaselineMetric"]:
        return BaselineMetric.query.filter(
            BaselineMetric.user_id == user_id,
            BaselineMetric.scope == scope,
            BaselineMetric.metric == metric,
            BaselineMetric.window_days.in_(windows),
        ).all()

    @staticmethod
    def save_or_update_baseline(
        user_id: str,
        scope: str,
        metric: str,
        window_days: int,
        value: float,
        data_points: int,
    ) -> "BaselineMetric":
        baseline = BaselineMetric.get_for_key(user_id, scope, metric, window_days)
        if baseline is None:
            baseline = BaselineMetric(
                user_id=user_id,
                scope=scope,
                metric=metric,
                window_days=window_days,
            )
            db.session.add(baseline)

        baseline.value = value
        baseline.data_points = data_points

        db.session.commit()
        return baseline

    @staticmethod
    def delete_for_key(user_id: str, scope: str, metric: str, window_days: int) -> int:
        deleted = BaselineMetric.query.filter_by(
            user_id=user_id,
            scope=scope,
            metric=metric,
            window_days=window_days,
        ).delete(synchronize_session=False)
        db.session.commit()
        return deleted
