# metrics/ramp_up_time_metric.py

import logging
from dataclasses import dataclass

from ..api.base import RepositoryDataSource
from ..url_router import RepositoryRef
from .base_metric import BaseMetric

INSTALL_COMMANDS = (
    "npm install", "npm i ", "yarn add", "pnpm add",
    "pip install", "conda install", "go install", "go get",
    "cargo install", "cargo add", "gem install", "brew install",
    "git clone", "docker run", "make install",
)
GETTING_STARTED = ("getting started", "quick start", "quickstart", "installation", "usage")
EXAMPLE_POINTERS = ("examples/", "example/", "demo", "playground", "codesandbox", "jsfiddle")
DOC_SECTIONS = (
    "api reference", "api documentation", "configuration", "options",
    "faq", "troubleshooting", "contributing", "changelog",
)
EXTERNAL_DOCS = ("readthedocs", ".github.io", "https://docs.", "/wiki", "gitbook")


# -------- tuning knobs --------
@dataclass(frozen=True)
class MixHeu:
    quickstart: float = 0.36
    examples: float = 0.30
    depth: float = 0.19
    ext: float = 0.15


def _hits(text: str, keys) -> int:
    return sum(1 for k in keys if k in text)


def quickstart_score(text: str, blocks: int) -> float:
    install = _hits(text, INSTALL_COMMANDS) > 0
    guide = _hits(text, GETTING_STARTED) > 0
    if install and blocks and guide:
        return 0.94
    if blocks and (install or guide):
        return 0.79
    if install or guide:
        return 0.62
    return 0.0


def examples_score(text: str, blocks: int) -> float:
    pointer = _hits(text, EXAMPLE_POINTERS) > 0
    if blocks and pointer:
        return 0.90
    if blocks >= 2:
        return 0.79
    if blocks:
        return 0.60
    return 0.40 if pointer else 0.0


def depth_score(text: str) -> float:
    n = _hits(text, DOC_SECTIONS)
    if n >= 2:
        return 0.87
    return 0.66 if n else 0.0


class RampUpTimeMetric(BaseMetric):
    def __init__(self, weight: float = 0.15):
        super().__init__(name="RampUp", weight=weight)
        self._mh = MixHeu()

    # ---- entry point ----
    def evaluate(
        self,
        ref: RepositoryRef,
        source: RepositoryDataSource,
        logger: logging.Logger,
    ) -> float:
        readme = source.get_readme(ref.owner, ref.name)
        if not readme:
            logger.debug("no README for %s; ramp-up 0", ref.slug)
            return 0.0
        score = self.readme_signal_score(readme)
        logger.debug("ramp-up %s: %.2f", ref.slug, score)
        return score

    def get_description(self) -> str:
        return "Ramp-up score from README install steps, examples and docs signals"

    def readme_signal_score(self, text: str) -> float:
        """Mix of install/quickstart, example code, doc depth and linked docs."""
        r = text.lower()
        blocks = r.count("```") // 2

        m = self._mh
        score = (
            m.quickstart * quickstart_score(r, blocks)
            + m.examples * examples_score(r, blocks)
            + m.depth * depth_score(r)
            + m.ext * (0.72 if _hits(r, EXTERNAL_DOCS) else 0.0)
        )
        return self._clip01(score)
