"""
Deterministic insights derived from stored baselines.

Each configured rule owns its (type, rule_name) key and decides on its own
whether its insight is active. Rules share no state.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from models.baseline_model import BaselineMetric
from models.insight_model import Insight
from services.analytics_config import AnalyticsConfig, DeltaThresholdRule, get_analytics_config

logger = logging.getLogger(__name__)


@dataclass
class RuleOutcome:
    rule: DeltaThresholdRule
    fired: bool
    insight: Optional[Insight] = None


def to_api_insight(insight: Insight) -> Dict[str, Any]:
    return {
        "id": insight.id,
        "user_id": insight.user_id,
        "type": insight.type,
        "summary": insight.summary,
        "supporting_stats": insight.supporting_stats,
        "rule_name": insight.rule_name,
        "created_at": insight.created_at.isoformat(),
        "is_active": insight.is_active,
    }


def list_insights_for_user(user_id: str, limit: int) -> List[Dict[str, Any]]:
    """Active insights for ``user_id``, newest first, at most ``limit``."""
    return [to_api_insight(i) for i in Insight.list_active(user_id, limit)]


def upsert_insight_from_rule(
    *,
    user_id: str,
    type_: str,
    rule_name: str,
    summary: str,
    supporting_stats: Dict[str, Any],
) -> Insight:
    return Insight.save_or_update_insight(
        user_id=user_id,
        type_=type_,
        rule_name=rule_name,
        summary=summary,
        supporting_stats=supporting_stats,
    )


def deactivate_insight(user_id: str, type_: str, rule_name: str) -> int:
    return Insight.deactivate(user_id, type_, rule_name)


def _evaluate_rule(user_id: str, rule: DeltaThresholdRule) -> RuleOutcome:
    rows = BaselineMetric.list_for_windows(user_id, rule.scope, rule.metric, list(rule.windows))
    by_window = {row.window_days: row for row in rows}

    fired = rule.check(by_window.get(rule.short_window), by_window.get(rule.long_window))
    if fired is None:
        deactivate_insight(user_id, rule.type, rule.rule_name)
        return RuleOutcome(rule=rule, fired=False)

    insight = upsert_insight_from_rule(
        user_id=user_id,
        type_=rule.type,
        rule_name=rule.rule_name,
        summary=fired["summary"],
        supporting_stats=fired["supporting_stats"],
    )
    logger.info(
        "Insight %s/%s active for user %s (delta=%s)",
        rule.type,
        rule.rule_name,
        user_id,
        fired["supporting_stats"]["delta"],
    )
    return RuleOutcome(rule=rule, fired=True, insight=insight)


def evaluate_insights(
    user_id: str, *, config: Optional[AnalyticsConfig] = None
) -> List[RuleOutcome]:
    """Run every configured rule against the user's current baselines."""
    analytics = get_analytics_config(config)
    return [_evaluate_rule(user_id, rule) for rule in analytics.rules]
