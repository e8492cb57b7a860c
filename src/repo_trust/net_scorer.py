"""
NetScore combination, the AggregateRecord row and its NDJSON emitter.

Field order and names of an emitted record are fixed; downstream tools
parse the rows by name and expect every field on every row.
"""

import json
import logging
import sys
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, TextIO, Tuple

from .score_result import SENTINEL, MetricResult

logger = logging.getLogger("repo-trust.net_scorer")

# Metric order within a record, after URL/NetScore.
RECORD_METRICS: Tuple[str, ...] = (
    "RampUp",
    "Correctness",
    "BusFactor",
    "ResponsiveMaintainer",
    "License",
)


def compute_net_score(
    results: Mapping[str, MetricResult], weights: Mapping[str, float]
) -> float:
    """
    Weighted average of the non-sentinel scores.

    Weights of sentinel probes are redistributed proportionally over the
    rest. If no weighted probe produced a score, NetScore is the sentinel.
    """
    live = {
        name: r.score
        for name, r in results.items()
        if not r.is_sentinel and weights.get(name, 0.0) > 0.0
    }
    total_weight = sum(weights[name] for name in live)
    if total_weight <= 0.0:
        return SENTINEL

    weighted_sum = sum(score * weights[name] for name, score in live.items())
    return max(0.0, min(1.0, weighted_sum / total_weight))


def _score_field(value: float) -> float:
    return SENTINEL if value == SENTINEL else round(value, 2)


def _latency_field(value: float) -> float:
    return SENTINEL if value == SENTINEL else round(value, 3)


@dataclass(frozen=True)
class AggregateRecord:
    """
    Complete scored output row for one input URL.

    Attributes:
        url: The URL exactly as read from the input file
        results: MetricResult per metric name
        net_score: Combined score in [0, 1], or -1
        net_latency: Seconds spent across all probes plus combination
    """

    url: str
    results: Mapping[str, MetricResult] = field(default_factory=dict)
    net_score: float = SENTINEL
    net_latency: float = 0.0

    def result(self, name: str) -> Optional[MetricResult]:
        return self.results.get(name)

    def scores(self) -> Dict[str, float]:
        """Scores only (NetScore included); latencies left out."""
        out = {"NetScore": self.net_score}
        for name in RECORD_METRICS:
            r = self.results.get(name)
            out[name] = r.score if r is not None else SENTINEL
        return out

    def to_ndjson(self) -> Dict:
        result = {
            "URL": self.url,
            "NetScore": _score_field(self.net_score),
            "NetScore_Latency": _latency_field(self.net_latency),
        }
        for name in RECORD_METRICS:
            r = self.results.get(name)
            result[name] = _score_field(r.score) if r else SENTINEL
            result[f"{name}_Latency"] = _latency_field(r.latency) if r else SENTINEL
        return result

    def to_ndjson_string(self) -> str:
        return json.dumps(self.to_ndjson(), separators=(",", ":"))

    def __str__(self) -> str:
        return (f"AggregateRecord(url='{self.url}', "
                f"net_score={self.net_score:.2f}, metrics={len(self.results)})")


def emit_ndjson(record: AggregateRecord, stream: Optional[TextIO] = None) -> None:
    """Write one record as a single NDJSON line and flush."""
    out = stream if stream is not None else sys.stdout
    line = record.to_ndjson_string()
    logger.info(
        "NDJSON summary: url=%s net=%.2f (net_latency=%.3fs)",
        record.url,
        record.net_score,
        record.net_latency,
    )
    logger.debug("NDJSON payload=%s", line)
    out.write(line + "\n")
    out.flush()
