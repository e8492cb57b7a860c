# metric_eval.py
from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from typing import Dict, List, Optional

from .api.base import RepositoryDataSource
from .metrics.base_metric import BaseMetric
from .metrics.bus_factor_metric import BusFactorMetric
from .metrics.correctness_metric import CorrectnessMetric
from .metrics.license_metric import LicenseMetric
from .metrics.ramp_up_time_metric import RampUpTimeMetric
from .metrics.responsiveness_metric import ResponsivenessMetric
from .net_scorer import AggregateRecord, compute_net_score
from .score_result import MetricResult
from .url_router import RepositoryRef

DEFAULT_PROBE_TIMEOUT = 30.0  # seconds

_default_logger = logging.getLogger("repo-trust.metric_eval")


class MetricEval:
    """
    Aggregator: runs every metric for one repository and folds the results
    into an AggregateRecord.
    """

    def __init__(
        self,
        metrics: List[BaseMetric],
        weights: Dict[str, float],
        *,
        timeout: Optional[float] = DEFAULT_PROBE_TIMEOUT,
        logger: Optional[logging.Logger] = None,
    ):
        self.metrics = metrics
        self.weights = weights
        self.timeout = timeout
        self.logger = logger or _default_logger

    def evaluate_all(
        self, ref: RepositoryRef, source: RepositoryDataSource
    ) -> Dict[str, MetricResult]:
        """
        Fan the metrics out on a thread pool and join them all.

        A metric still running when its timeout expires is reported as
        timed out; its siblings are unaffected.
        """
        results: Dict[str, MetricResult] = {}
        if not self.metrics:
            return results

        pool = ThreadPoolExecutor(
            max_workers=len(self.metrics), thread_name_prefix="metric"
        )
        try:
            t0 = time.perf_counter()
            futs = [
                (m, pool.submit(m.compute, ref, source, self.logger))
                for m in self.metrics
            ]
            for metric, fut in futs:
                remaining = None
                if self.timeout is not None:
                    remaining = max(0.0, self.timeout - (time.perf_counter() - t0))
                try:
                    res = fut.result(timeout=remaining)
                except FutureTimeout:
                    self.logger.debug("%s timed out for %s", metric.name, ref.slug)
                    res = MetricResult.timed_out(time.perf_counter() - t0)
                except Exception as e:
                    res = MetricResult.failed(
                        f"{type(e).__name__}: {e}", time.perf_counter() - t0
                    )
                results[metric.name] = res
                self.logger.info("[METRIC] %s %s=%s", ref.slug, metric.name, res)
        finally:
            # do not block on probes that overran their timeout
            pool.shutdown(wait=False, cancel_futures=True)
        return results

    def aggregate(
        self, ref: RepositoryRef, source: RepositoryDataSource
    ) -> AggregateRecord:
        results = self.evaluate_all(ref, source)
        t_combine = time.perf_counter()
        net = compute_net_score(results, self.weights)
        spent = sum(r.spent for r in results.values())
        net_latency = spent + (time.perf_counter() - t_combine)
        self.logger.info(
            "[SCORE] %s net=%.3f (%.3fs)", ref.slug, net, net_latency
        )
        return AggregateRecord(
            url=ref.url,
            results=results,
            net_score=net,
            net_latency=net_latency,
        )


def init_metrics() -> List[BaseMetric]:
    weights = init_weights()
    return [
        RampUpTimeMetric(weight=weights["RampUp"]),
        CorrectnessMetric(weight=weights["Correctness"]),
        BusFactorMetric(weight=weights["BusFactor"]),
        ResponsivenessMetric(weight=weights["ResponsiveMaintainer"]),
        LicenseMetric(weight=weights["License"]),
    ]


def init_weights() -> Dict[str, float]:
    # Keys MUST match metric.name exactly; values sum to 1.
    return {
        "RampUp": 0.15,
        "Correctness": 0.20,
        "BusFactor": 0.20,
        "ResponsiveMaintainer": 0.20,
        "License": 0.25,
    }
