from __future__ import annotations

import logging
import math
import time
from abc import ABC, abstractmethod
from typing import Optional

from ..api.base import RepositoryDataSource
from ..score_result import MetricResult
from ..url_router import RepositoryRef

_default_logger = logging.getLogger("repo-trust.metrics")


class BaseMetric(ABC):
    """
    Abstract base class for all rubric metrics.

    Subclasses implement `evaluate`; callers use `compute`, which times the
    whole probe body and never raises past its own boundary.
    """

    def __init__(self, name: str, weight: float = 0.0):
        """
        Initialize the base metric.

        Args:
            name (str): Name of the metric, also its NDJSON field name
            weight (float): Weight of this metric (default: 0.0)
        """
        self.name = name
        self.weight = weight

    @abstractmethod
    def evaluate(
        self,
        ref: RepositoryRef,
        source: RepositoryDataSource,
        logger: logging.Logger,
    ) -> float:
        """
        Score one repository.

        Returns:
            float: Score between 0.0 and 1.0, where 1.0 is the best score

        Raises:
            Any exception to signal that the score could not be computed.
        """

    def compute(
        self,
        ref: RepositoryRef,
        source: RepositoryDataSource,
        logger: Optional[logging.Logger] = None,
    ) -> MetricResult:
        log = logger or _default_logger
        t0 = time.perf_counter()
        try:
            raw = self.evaluate(ref, source, log)
        except NotImplementedError:
            return MetricResult.unimplemented(time.perf_counter() - t0)
        except Exception as e:
            latency = time.perf_counter() - t0
            log.debug("%s failed for %s: %s", self.name, ref.slug, e)
            return MetricResult.failed(f"{type(e).__name__}: {e}", latency)
        latency = time.perf_counter() - t0
        return MetricResult.computed(self._clip01(raw), latency)

    @staticmethod
    def _clip01(x: float) -> float:
        v = float(x)
        if not math.isfinite(v) or v < 0.0:
            return 0.0
        if v > 1.0:
            return 1.0
        return v

    def get_description(self) -> str:
        return self.name

    def __str__(self) -> str:
        """String representation of the metric."""
        return f"{self.name} (weight: {self.weight})"
