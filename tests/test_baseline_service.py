"""
Tests for baseline recomputation and trend snapshots.

Baselines are rolling-window means of post-activity feelings; an empty
window removes the row instead of storing zero.
"""
from datetime import timedelta

import pytest

from conftest import NOW, OTHER_USER_ID, USER_ID
from models.baseline_model import BaselineMetric
from services.analytics_config import AnalyticsConfig, MetricDefinition
from services.baseline_service import (
    get_trend_snapshot,
    get_window_start,
    recompute_baselines,
)


def _baselines(user_id=USER_ID):
    rows = BaselineMetric.query.filter_by(user_id=user_id).all()
    return {
        (row.scope, row.metric, row.window_days): (row.value, row.data_points)
        for row in rows
    }


class TestWindowStart:

    def test_subtracts_plain_duration(self):
        assert get_window_start(7, NOW) == NOW - timedelta(days=7)
        assert get_window_start(365, NOW) == NOW - timedelta(days=365)


class TestRecomputeBaselines:

    def test_mean_of_post_energy(self, make_entry, add_feeling):
        """Energies [4, 4, 2] average to 10/3 across every window."""
        for energy in (4, 4, 2):
            add_feeling(make_entry("workout", days_ago=1), energy=energy)

        recompute_baselines(USER_ID, now=NOW)

        stored = _baselines()
        for window in (7, 30, 365):
            value, points = stored[("workout", "post_energy", window)]
            assert value == pytest.approx(10 / 3)
            assert points == 3

    def test_valence_uses_its_own_field(self, make_entry, add_feeling):
        add_feeling(make_entry("meal", days_ago=2), energy=1, valence=5)
        add_feeling(make_entry("meal", days_ago=2), energy=1, valence=4)

        recompute_baselines(USER_ID, now=NOW)

        stored = _baselines()
        assert stored[("meal", "post_valence", 7)] == (pytest.approx(4.5), 2)
        assert stored[("meal", "post_energy", 7)] == (pytest.approx(1.0), 2)

    def test_pre_feelings_are_ignored(self, make_entry, add_feeling):
        entry = make_entry("workout", days_ago=1)
        add_feeling(entry, when="pre", energy=1)
        add_feeling(entry, when="post", energy=5)

        recompute_baselines(USER_ID, now=NOW)

        assert _baselines()[("workout", "post_energy", 7)] == (pytest.approx(5.0), 1)

    def test_other_users_data_is_not_mixed_in(self, make_entry, add_feeling):
        add_feeling(make_entry("workout", days_ago=1), energy=5)
        add_feeling(make_entry("workout", days_ago=1, user_id=OTHER_USER_ID), energy=1)

        recompute_baselines(USER_ID, now=NOW)

        assert _baselines()[("workout", "post_energy", 7)] == (pytest.approx(5.0), 1)
        assert _baselines(OTHER_USER_ID) == {}

    def test_empty_windows_have_no_rows(self, make_entry, add_feeling):
        """Only a 100-day-old workout: 7d and 30d stay absent, 365d exists."""
        add_feeling(make_entry("workout", days_ago=100), energy=3)

        recompute_baselines(USER_ID, now=NOW)

        stored = _baselines()
        assert ("workout", "post_energy", 365) in stored
        assert ("workout", "post_energy", 7) not in stored
        assert ("workout", "post_energy", 30) not in stored
        assert not any(scope == "meal" for scope, _, _ in stored)

    def test_stale_row_is_deleted_when_window_empties(self, make_entry, add_feeling):
        BaselineMetric.save_or_update_baseline(
            user_id=USER_ID,
            scope="meal",
            metric="post_energy",
            window_days=7,
            value=2.5,
            data_points=4,
        )

        result = recompute_baselines(USER_ID, now=NOW)

        assert BaselineMetric.get_for_key(USER_ID, "meal", "post_energy", 7) is None
        assert ("meal", "post_energy", 7) in result.deleted

    def test_recompute_is_idempotent(self, make_entry, add_feeling):
        for days_ago, energy in ((1, 5), (10, 2), (200, 4)):
            add_feeling(make_entry("workout", days_ago=days_ago), energy=energy, valence=3)

        recompute_baselines(USER_ID, now=NOW)
        first = _baselines()
        first_ids = {row.id for row in BaselineMetric.query.all()}

        recompute_baselines(USER_ID, now=NOW)

        assert _baselines() == first
        assert {row.id for row in BaselineMetric.query.all()} == first_ids

    def test_window_lower_bound_is_inclusive(self, make_entry, add_feeling):
        boundary = make_entry("workout", occurred_at=NOW - timedelta(days=7))
        just_outside = make_entry(
            "workout", occurred_at=NOW - timedelta(days=7, seconds=1)
        )
        add_feeling(boundary, energy=5)
        add_feeling(just_outside, energy=1)

        recompute_baselines(USER_ID, now=NOW)

        stored = _baselines()
        assert stored[("workout", "post_energy", 7)] == (pytest.approx(5.0), 1)
        assert stored[("workout", "post_energy", 30)] == (pytest.approx(3.0), 2)

    def test_result_reports_only_real_changes(self, make_entry, add_feeling):
        """A first recompute has nothing stale to delete."""
        add_feeling(make_entry("workout", days_ago=1))

        result = recompute_baselines(USER_ID, now=NOW)

        # workout post_energy + post_valence across 3 windows
        assert len(result.upserted) == 6
        assert result.deleted == []

    def test_injected_config_limits_windows_and_metrics(self, make_entry, add_feeling):
        config = AnalyticsConfig(
            windows=(3,),
            metric_definitions=(
                MetricDefinition(
                    scope="workout", metric="post_stress", entry_type="workout", field="stress"
                ),
            ),
            rules=(),
        )
        add_feeling(make_entry("workout", days_ago=1), stress=2)
        add_feeling(make_entry("workout", days_ago=5), stress=5)

        recompute_baselines(USER_ID, config=config, now=NOW)

        assert _baselines() == {("workout", "post_stress", 3): (pytest.approx(2.0), 1)}


class TestTrendSnapshot:

    def test_empty_window_still_returns_recent_entries(self, make_entry, add_feeling):
        for days_ago in range(20):
            make_entry("meal", days_ago=days_ago)

        snapshot = get_trend_snapshot(USER_ID, 30)

        assert snapshot["baselines"] == []
        assert len(snapshot["recent"]) == 15
        entered = [item["entered"] for item in snapshot["recent"]]
        assert entered == sorted(entered, reverse=True)

    def test_baselines_are_filtered_by_window_and_sorted(self, make_entry, add_feeling):
        add_feeling(make_entry("workout", days_ago=1), energy=4, valence=2)
        add_feeling(make_entry("meal", days_ago=1), energy=3, valence=5)
        recompute_baselines(USER_ID, now=NOW)

        snapshot = get_trend_snapshot(USER_ID, 7)

        metrics = [b["metric"] for b in snapshot["baselines"]]
        assert metrics == sorted(metrics)
        assert len(metrics) == 4
        assert {b["window_days"] for b in snapshot["baselines"]} == {7}
        first = snapshot["baselines"][0]
        assert set(first) == {
            "id", "scope", "metric", "value", "data_points", "window_days", "updated_at"
        }

    def test_recent_entries_use_post_feeling(self, make_entry, add_feeling):
        with_post = make_entry("workout", days_ago=1)
        add_feeling(with_post, when="pre", energy=1, valence=1, stress=5)
        add_feeling(with_post, when="post", energy=4, valence=5, stress=2)
        pre_only = make_entry("meal", days_ago=2)
        add_feeling(pre_only, when="pre", energy=2)

        recent = get_trend_snapshot(USER_ID, 7)["recent"]

        assert recent[0] == {
            "id": with_post.id,
            "entered": with_post.occurred_at.isoformat(),
            "type": "workout",
            "post_energy": 4,
            "post_valence": 5,
            "stress": 2,
        }
        assert recent[1]["post_energy"] is None
        assert recent[1]["post_valence"] is None
        assert recent[1]["stress"] is None

    def test_unsupported_window_is_rejected(self):
        with pytest.raises(ValueError):
            get_trend_snapshot(USER_ID, 14)
