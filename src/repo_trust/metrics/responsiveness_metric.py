"""
Responsive maintainer metric.

Looks at issues opened within the lookback window: how many got closed,
and how quickly (median time to close).
"""

from __future__ import annotations

import logging
import statistics
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

from ..api.base import RepositoryDataSource
from ..url_router import RepositoryRef
from .base_metric import BaseMetric

LOOKBACK_DAYS = 180
ISSUE_LIMIT = 100
FAST_CLOSE_DAYS = 7.0
SLOW_CLOSE_DAYS = 90.0
NO_ISSUES_SCORE = 0.5


def parse_ts(value: Any) -> Optional[datetime]:
    if not isinstance(value, str) or not value:
        return None
    try:
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def speed_score(median_days: float) -> float:
    """1.0 up to a week, linear decay to 0.0 at SLOW_CLOSE_DAYS."""
    if median_days <= FAST_CLOSE_DAYS:
        return 1.0
    if median_days >= SLOW_CLOSE_DAYS:
        return 0.0
    return 1.0 - (median_days - FAST_CLOSE_DAYS) / (SLOW_CLOSE_DAYS - FAST_CLOSE_DAYS)


class ResponsivenessMetric(BaseMetric):
    def __init__(
        self,
        weight: float = 0.20,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        super().__init__(name="ResponsiveMaintainer", weight=weight)
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def evaluate(
        self,
        ref: RepositoryRef,
        source: RepositoryDataSource,
        logger: logging.Logger,
    ) -> float:
        now = self._clock()
        cutoff = now - timedelta(days=LOOKBACK_DAYS)
        issues = source.list_issues(
            ref.owner,
            ref.name,
            state="all",
            since=cutoff.strftime("%Y-%m-%dT%H:%M:%SZ"),
            limit=ISSUE_LIMIT,
        )

        # `since` filters on update time; keep issues opened in the window
        recent: List[Dict[str, Any]] = []
        for it in issues:
            created = parse_ts(it.get("created_at"))
            if created is not None and created >= cutoff:
                recent.append(it)

        if not recent:
            logger.debug("no recent issues for %s; neutral score", ref.slug)
            return NO_ISSUES_SCORE

        close_days: List[float] = []
        for it in recent:
            created = parse_ts(it.get("created_at"))
            closed = parse_ts(it.get("closed_at"))
            if closed is not None and created is not None and closed >= created:
                close_days.append((closed - created).total_seconds() / 86400.0)

        closed_ratio = len(close_days) / len(recent)
        speed = speed_score(statistics.median(close_days)) if close_days else 0.0
        score = 0.5 * closed_ratio + 0.5 * speed

        logger.debug(
            "responsiveness %s: issues=%d closed=%d speed=%.2f score=%.2f",
            ref.slug, len(recent), len(close_days), speed, score,
        )
        return score

    def get_description(self) -> str:
        return "Share of recent issues closed and median time to close"
