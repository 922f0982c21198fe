"""
Rolling baseline metrics for each user.

- recompute_baselines: recalculates every (window, metric) baseline for a user
- get_trend_snapshot: stored baselines for one window plus recent entries
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from models.baseline_model import BaselineMetric
from models.entry_model import FeelingEntry, LogEntry
from services.analytics_config import AnalyticsConfig, MetricDefinition, get_analytics_config

logger = logging.getLogger(__name__)

BaselineKey = Tuple[str, str, int]


@dataclass
class RecomputeResult:
    user_id: str
    upserted: List[BaselineKey] = field(default_factory=list)
    deleted: List[BaselineKey] = field(default_factory=list)


def get_window_start(window_days: int, now: Optional[datetime] = None) -> datetime:
    """Plain duration subtraction; no calendar alignment."""
    now = now or datetime.utcnow()
    return now - timedelta(days=window_days)


def _fetch_post_feeling_values(
    user_id: str, definition: MetricDefinition, window_start: datetime
) -> List[int]:
    column = getattr(FeelingEntry, definition.field)
    rows = (
        FeelingEntry.query.join(LogEntry, FeelingEntry.log_entry_id == LogEntry.id)
        .filter(
            FeelingEntry.when == "post",
            LogEntry.user_id == user_id,
            LogEntry.type == definition.entry_type,
            LogEntry.occurred_at >= window_start,
        )
        .with_entities(column)
        .all()
    )
    return [row[0] for row in rows]


def _persist_baseline(
    user_id: str,
    definition: MetricDefinition,
    window_days: int,
    values: List[int],
    result: RecomputeResult,
) -> None:
    key = (definition.scope, definition.metric, window_days)
    data_points = len(values)

    if not data_points:
        deleted = BaselineMetric.delete_for_key(
            user_id, definition.scope, definition.metric, window_days
        )
        if deleted:
            result.deleted.append(key)
        return

    value = sum(values) / data_points
    BaselineMetric.save_or_update_baseline(
        user_id=user_id,
        scope=definition.scope,
        metric=definition.metric,
        window_days=window_days,
        value=value,
        data_points=data_points,
    )
    result.upserted.append(key)


def recompute_baselines(
    user_id: str,
    *,
    config: Optional[AnalyticsConfig] = None,
    now: Optional[datetime] = None,
) -> RecomputeResult:
    """
    Recompute every configured window x metric baseline for ``user_id``.

    Each window averages post-activity feelings whose entry occurred at or
    after ``now - window_days``. Keys with no data are deleted. Storage errors
    propagate; keys already written stay written.
    """
    analytics = get_analytics_config(config)
    now = now or datetime.utcnow()
    result = RecomputeResult(user_id=user_id)

    for window_days in analytics.windows:
        window_start = get_window_start(window_days, now)
        for definition in analytics.metric_definitions:
            values = _fetch_post_feeling_values(user_id, definition, window_start)
            _persist_baseline(user_id, definition, window_days, values, result)

    logger.debug(
        "Baselines recomputed for user %s: %d upserted, %d deleted",
        user_id,
        len(result.upserted),
        len(result.deleted),
    )
    return result


def to_api_baseline(baseline: BaselineMetric) -> Dict[str, Any]:
    return {
        "id": baseline.id,
        "scope": baseline.scope,
        "metric": baseline.metric,
        "value": baseline.value,
        "data_points": baseline.data_points,
        "window_days": baseline.window_days,
        "updated_at": baseline.updated_at.isoformat(),
    }


def to_recent_entry(entry: LogEntry) -> Dict[str, Any]:
    """Reduce an entry to its post-activity feeling for charting."""
    post = entry.post_feeling()
    return {
        "id": entry.id,
        "entered": entry.occurred_at.isoformat(),
        "type": entry.type,
        "post_energy": post.energy if post else None,
        "post_valence": post.valence if post else None,
        "stress": post.stress if post else None,
    }


def get_trend_snapshot(
    user_id: str,
    window_days: int,
    *,
    config: Optional[AnalyticsConfig] = None,
) -> Dict[str, List[Dict[str, Any]]]:
    analytics = get_analytics_config(config)
    if not analytics.supports_window(window_days):
        raise ValueError(f"Unsupported window: {window_days} days")

    baselines = (
        BaselineMetric.query.filter_by(user_id=user_id, window_days=window_days)
        .order_by(BaselineMetric.metric.asc(), BaselineMetric.scope.asc())
        .all()
    )
    recent_entries = (
        LogEntry.query.filter_by(user_id=user_id)
        .order_by(LogEntry.occurred_at.desc())
        .limit(analytics.recent_entry_limit)
        .all()
    )

    return {
        "baselines": [to_api_baseline(b) for b in baselines],
        "recent": [to_recent_entry(e) for e in recent_entries],
    }
