"""
MetricResult value object returned by every metric probe.

A result is tagged with a status so that "could not compute" and "not
implemented" stay distinguishable from a real score of 0. Only COMPUTED
results carry a score; everything else serializes as the sentinel -1.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional

SENTINEL = -1.0


class ResultStatus(Enum):
    COMPUTED = "computed"
    FAILED = "failed"
    TIMED_OUT = "timed_out"
    UNIMPLEMENTED = "unimplemented"


@dataclass(frozen=True)
class MetricResult:
    """
    Outcome of one probe invocation.

    Attributes:
        score: In [0, 1] when computed, otherwise -1.
        latency: Wall-clock seconds spent, or -1 if timing never closed.
        status: Tag describing how the score was produced.
        reason: Failure description for non-computed results.
    """

    score: float
    latency: float
    status: ResultStatus = ResultStatus.COMPUTED
    reason: Optional[str] = None

    def __post_init__(self) -> None:
        if not math.isfinite(self.score) or not math.isfinite(self.latency):
            raise ValueError("score and latency must be finite")
        if self.status is ResultStatus.COMPUTED:
            if not 0.0 <= self.score <= 1.0:
                raise ValueError(f"computed score out of range: {self.score}")
        elif self.score != SENTINEL:
            raise ValueError(
                f"{self.status.value} result must carry the sentinel score"
            )
        if self.latency < 0.0 and self.latency != SENTINEL:
            raise ValueError(f"invalid latency: {self.latency}")

    @classmethod
    def computed(cls, score: float, latency: float) -> "MetricResult":
        return cls(score=float(score), latency=float(latency))

    @classmethod
    def failed(cls, reason: str, latency: float = SENTINEL) -> "MetricResult":
        return cls(SENTINEL, float(latency), ResultStatus.FAILED, reason)

    @classmethod
    def timed_out(cls, latency: float) -> "MetricResult":
        return cls(SENTINEL, float(latency), ResultStatus.TIMED_OUT,
                   "probe timed out")

    @classmethod
    def unimplemented(cls, latency: float = SENTINEL) -> "MetricResult":
        return cls(SENTINEL, float(latency), ResultStatus.UNIMPLEMENTED,
                   "probe not implemented")

    @property
    def is_sentinel(self) -> bool:
        return self.status is not ResultStatus.COMPUTED

    @property
    def spent(self) -> float:
        """Latency counted toward NetScore latency (0 if never timed)."""
        return self.latency if self.latency >= 0.0 else 0.0

    def __str__(self) -> str:
        if self.is_sentinel:
            return f"MetricResult({self.status.value}: {self.reason})"
        return f"MetricResult(score={self.score:.2f}, latency={self.latency:.3f}s)"
