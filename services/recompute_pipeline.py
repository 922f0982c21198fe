"""
Two-stage refresh run after every new feeling.

Stage 1 recomputes baselines; stage 2 evaluates insights and only runs when
stage 1 returned. Nothing is retried here: failures are logged and re-raised
to the write path that triggered them.
"""

import logging
import threading
import time
import weakref
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Iterator, List, Optional

from flask import current_app, has_app_context

from services.analytics_config import AnalyticsConfig
from services.baseline_service import RecomputeResult, recompute_baselines
from services.insight_service import RuleOutcome, evaluate_insights

logger = logging.getLogger(__name__)

DEFAULT_WARN_MS = 5000

# One lock per user id, dropped once no run holds it. Serializes recomputes
# inside this process only; separate worker processes still race with
# last-write-wins.
_user_locks: "weakref.WeakValueDictionary[str, threading.Lock]" = weakref.WeakValueDictionary()
_user_locks_guard = threading.Lock()


@dataclass
class PipelineResult:
    recompute: RecomputeResult
    outcomes: List[RuleOutcome]
    duration_ms: int


def _lock_for_user(user_id: str) -> threading.Lock:
    with _user_locks_guard:
        return _user_locks.setdefault(user_id, threading.Lock())


def _app_setting(name: str, default):
    if has_app_context():
        return current_app.config.get(name, default)
    return default


@contextmanager
def _serialized(user_id: str) -> Iterator[None]:
    if not _app_setting("SERIALIZE_RECOMPUTES", True):
        yield
        return
    with _lock_for_user(user_id):
        yield


def run_recompute_pipeline(
    user_id: str,
    *,
    config: Optional[AnalyticsConfig] = None,
    now: Optional[datetime] = None,
) -> PipelineResult:
    warn_ms = _app_setting("RECOMPUTE_WARN_MS", DEFAULT_WARN_MS)
    started = time.perf_counter()
    logger.info("Starting baseline recompute for user %s", user_id)

    try:
        with _serialized(user_id):
            recompute = recompute_baselines(user_id, config=config, now=now)
            outcomes = evaluate_insights(user_id, config=config)
    except Exception:
        duration_ms = int((time.perf_counter() - started) * 1000)
        logger.error(
            "Baseline recompute failed for user %s after %dms",
            user_id,
            duration_ms,
            exc_info=True,
        )
        raise

    duration_ms = int((time.perf_counter() - started) * 1000)
    logger.info(
        "Finished baseline recompute for user %s in %dms", user_id, duration_ms
    )
    if duration_ms > warn_ms:
        logger.warning(
            "Baseline recompute for user %s exceeded %dms threshold (%dms)",
            user_id,
            warn_ms,
            duration_ms,
        )
    return PipelineResult(recompute=recompute, outcomes=outcomes, duration_ms=duration_ms)
