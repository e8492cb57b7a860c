"""
Correctness metric: is the project tested and keeping up with its issues.

A recognizable, non-empty test directory earns the base credit; a large
open-issue backlog takes part of it back.
"""

from __future__ import annotations

import logging
from typing import Tuple

from ..api.base import RepositoryDataSource
from ..url_router import RepositoryRef
from .base_metric import BaseMetric

TEST_DIR_CANDIDATES: Tuple[str, ...] = (
    "test", "tests", "spec", "__tests__", "Test", "Tests",
)

TEST_DIR_CREDIT = 1.0

# (minimum open issues, penalty), highest threshold first; one band applies
OPEN_ISSUE_PENALTIES: Tuple[Tuple[int, float], ...] = (
    (60, -0.8),
    (40, -0.6),
    (20, -0.4),
    (10, -0.2),
)


def issue_penalty(open_issues: int) -> float:
    for threshold, penalty in OPEN_ISSUE_PENALTIES:
        if open_issues >= threshold:
            return penalty
    return 0.0


class CorrectnessMetric(BaseMetric):
    def __init__(self, weight: float = 0.20):
        super().__init__(name="Correctness", weight=weight)

    def _find_test_dir(
        self,
        ref: RepositoryRef,
        source: RepositoryDataSource,
        logger: logging.Logger,
    ) -> str:
        for d in TEST_DIR_CANDIDATES:
            try:
                listing = source.list_directory(ref.owner, ref.name, d)
            except Exception as e:
                logger.debug("test dir probe %s/%s failed: %s", ref.slug, d, e)
                continue
            if listing:
                return d
        return ""

    def evaluate(
        self,
        ref: RepositoryRef,
        source: RepositoryDataSource,
        logger: logging.Logger,
    ) -> float:
        credit = 0.0
        test_dir = self._find_test_dir(ref, source, logger)
        if test_dir:
            credit += TEST_DIR_CREDIT
            logger.debug("test directory %r found in %s", test_dir, ref.slug)
        else:
            logger.debug("No recognized test directory found in %s", ref.slug)

        # an error here propagates: unknown is not "zero issues"
        cap = OPEN_ISSUE_PENALTIES[0][0]
        open_issues = source.count_open_issues(ref.owner, ref.name, cap=cap)
        penalty = issue_penalty(open_issues)
        logger.debug(
            "correctness %s: credit=%.1f open_issues=%d penalty=%.1f",
            ref.slug, credit, open_issues, penalty,
        )
        return max(0.0, credit + penalty)

    def get_description(self) -> str:
        return "Test directory presence minus an open-issue backlog penalty"
