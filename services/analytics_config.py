"""
Immutable parameters for baseline recomputation and insight rules.

The Flask config exposes one ``AnalyticsConfig`` under ``ANALYTICS_CONFIG``;
services accept an explicit ``config=`` so callers can swap windows or rules
without touching module state.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Optional, Tuple

from flask import current_app, has_app_context

METRIC_FIELDS = ("energy", "valence", "stress")


def round_half_up(value: float, places: int) -> Decimal:
    """Round exact ties away from zero, matching how clients format these numbers."""
    return Decimal(value).quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class MetricDefinition:
    scope: str
    metric: str
    entry_type: str
    field: str

    def __post_init__(self):
        if self.field not in METRIC_FIELDS:
            raise ValueError(f"Unsupported metric field: {self.field!r}")


@dataclass(frozen=True)
class DeltaThresholdRule:
    """
    Fires when the short-window baseline beats the long-window one by at
    least ``threshold``, with both windows backed by ``min_points`` rows.
    """

    type: str
    rule_name: str
    scope: str
    metric: str
    short_window: int
    long_window: int
    threshold: float
    min_points: int
    # Formatted with delta (one decimal), short_window and long_window.
    summary_template: str

    @property
    def windows(self) -> Tuple[int, int]:
        return (self.short_window, self.long_window)

    def check(self, short_term, long_term) -> Optional[Dict[str, Any]]:
        """
        Return ``{"summary", "supporting_stats"}`` when the rule fires for the
        given baseline rows (either may be None), otherwise None.
        """
        if short_term is None or long_term is None:
            return None
        if short_term.data_points < self.min_points:
            return None
        if long_term.data_points < self.min_points:
            return None

        delta = short_term.value - long_term.value
        if delta < self.threshold:
            return None

        summary = self.summary_template.format(
            delta=round_half_up(delta, 1),
            short_window=self.short_window,
            long_window=self.long_window,
        )
        supporting_stats = {
            "short_term_window_days": short_term.window_days,
            "short_term_value": float(round_half_up(short_term.value, 2)),
            "long_term_window_days": long_term.window_days,
            "long_term_value": float(round_half_up(long_term.value, 2)),
            "delta": float(round_half_up(delta, 2)),
            "data_points_short": short_term.data_points,
            "data_points_long": long_term.data_points,
        }
        return {"summary": summary, "supporting_stats": supporting_stats}


ENERGY_UPLIFT_RULE = DeltaThresholdRule(
    type="energy_uplift_strength",
    rule_name="workout_post_energy_delta",
    scope="workout",
    metric="post_energy",
    short_window=7,
    long_window=30,
    threshold=0.8,
    min_points=3,
    summary_template=(
        "You feel +{delta} more energized after recent strength workouts "
        "versus your {long_window}-day average."
    ),
)

DEFAULT_METRIC_DEFINITIONS = (
    MetricDefinition(scope="workout", metric="post_energy", entry_type="workout", field="energy"),
    MetricDefinition(scope="workout", metric="post_valence", entry_type="workout", field="valence"),
    MetricDefinition(scope="meal", metric="post_energy", entry_type="meal", field="energy"),
    MetricDefinition(scope="meal", metric="post_valence", entry_type="meal", field="valence"),
)


@dataclass(frozen=True)
class AnalyticsConfig:
    windows: Tuple[int, ...] = (7, 30, 365)
    metric_definitions: Tuple[MetricDefinition, ...] = DEFAULT_METRIC_DEFINITIONS
    rules: Tuple[DeltaThresholdRule, ...] = (ENERGY_UPLIFT_RULE,)
    recent_entry_limit: int = 15

    def supports_window(self, window_days: int) -> bool:
        return window_days in self.windows


DEFAULT_ANALYTICS_CONFIG = AnalyticsConfig()


def get_analytics_config(config: Optional[AnalyticsConfig] = None) -> AnalyticsConfig:
    """Explicit config wins; otherwise use the current app's, then the default."""
    if config is not None:
        return config
    if has_app_context():
        return current_app.config.get("ANALYTICS_CONFIG", DEFAULT_ANALYTICS_CONFIG)
    return DEFAULT_ANALYTICS_CONFIG
