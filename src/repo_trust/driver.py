"""Driver: turns a URL list into NDJSON records, one per URL, in order."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, TextIO

from .api.base import RepositoryDataSource
from .errors import InputFileError
from .metric_eval import MetricEval
from .net_scorer import AggregateRecord, emit_ndjson
from .url_router import RepositoryRef, UrlRouter

logger = logging.getLogger("repo-trust.driver")


def read_urls(path: str) -> List[str]:
    """Read one URL per line; blank lines are skipped."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            return [line.strip() for line in f if line.strip()]
    except OSError as e:
        raise InputFileError(f"URL file does not exist or is unreadable: {path}") from e


class ScoreDriver:
    """
    Resolves every URL up front, then scores and emits in input order.

    Resolution failures are fatal and happen before anything is written,
    so a bad URL never leaves a partial output file behind.
    """

    def __init__(
        self,
        evaluator: MetricEval,
        source: RepositoryDataSource,
        *,
        workers: int = 1,
        router: Optional[UrlRouter] = None,
    ):
        self.evaluator = evaluator
        self.source = source
        self.workers = max(1, int(workers))
        self.router = router or UrlRouter()

    def resolve(self, urls: List[str]) -> List[RepositoryRef]:
        refs = [self.router.parse(u) for u in urls]
        logger.info("resolved %d urls", len(refs))
        return refs

    def score(self, ref: RepositoryRef) -> AggregateRecord:
        logger.info("eval: %s", ref.slug)
        return self.evaluator.aggregate(ref, self.source)

    def run(self, urls: List[str], stream: Optional[TextIO] = None) -> int:
        """Score `urls` and write one line each to `stream`; returns the count."""
        refs = self.resolve(urls)
        emitted = 0
        if self.workers == 1 or len(refs) <= 1:
            for ref in refs:
                emit_ndjson(self.score(ref), stream)
                emitted += 1
            return emitted

        with ThreadPoolExecutor(
            max_workers=self.workers, thread_name_prefix="repo"
        ) as pool:
            # map() yields in submission order
            for record in pool.map(self.score, refs):
                emit_ndjson(record, stream)
                emitted += 1
        return emitted
