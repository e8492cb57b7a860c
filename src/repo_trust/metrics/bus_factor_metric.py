"""
Bus Factor Metric for evaluating project sustainability.
Smallest set of authors that made half of the recent commits; falls back to
all-time contributor counts when the window is empty.
"""

from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

from ..api.base import RepositoryDataSource
from ..url_router import RepositoryRef
from .base_metric import BaseMetric

LOOKBACK_DAYS = 365
COMMIT_PAGES = 3
COVERAGE_SHARE = 0.5
TARGET_BUS_FACTOR = 5


def _author_key(commit: Dict[str, Any]) -> str:
    author = commit.get("author")
    if isinstance(author, dict) and author.get("login"):
        return str(author["login"]).lower()
    raw = (commit.get("commit") or {}).get("author") or {}
    return str(raw.get("email") or raw.get("name") or "").lower()


def bus_factor(counts: List[int], share: float = COVERAGE_SHARE) -> int:
    """Fewest authors whose commits add up to `share` of the total."""
    total = sum(c for c in counts if c > 0)
    if total <= 0:
        return 0
    covered = 0
    for k, c in enumerate(sorted(counts, reverse=True), start=1):
        covered += c
        if covered >= share * total:
            return k
    return len(counts)


class BusFactorMetric(BaseMetric):
    def __init__(
        self,
        weight: float = 0.20,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        super().__init__(name="BusFactor", weight=weight)
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def _commit_counts(
        self, ref: RepositoryRef, source: RepositoryDataSource
    ) -> List[int]:
        since = self._clock() - timedelta(days=LOOKBACK_DAYS)
        commits = source.list_commits(
            ref.owner,
            ref.name,
            since=since.strftime("%Y-%m-%dT%H:%M:%SZ"),
            max_pages=COMMIT_PAGES,
        )
        authors = Counter(k for k in map(_author_key, commits) if k)
        return list(authors.values())

    @staticmethod
    def _contributor_counts(contributors: List[Dict[str, Any]]) -> List[int]:
        counts: List[int] = []
        for c in contributors:
            try:
                v = int(c.get("contributions", 0) or 0)
            except (TypeError, ValueError):
                v = 0
            if v > 0:
                counts.append(v)
        return counts

    def evaluate(
        self,
        ref: RepositoryRef,
        source: RepositoryDataSource,
        logger: logging.Logger,
    ) -> float:
        counts = self._commit_counts(ref, source)
        origin = "commits"
        if not counts:
            counts = self._contributor_counts(
                source.list_contributors(ref.owner, ref.name)
            )
            origin = "contributors"

        k = bus_factor(counts)
        score = min(1.0, k / float(TARGET_BUS_FACTOR))
        logger.debug(
            "bus factor %s: authors=%d k=%d (%s) score=%.2f",
            ref.slug, len(counts), k, origin, score,
        )
        return score

    def get_description(self) -> str:
        return "Evaluates project sustainability from commit-author concentration"
