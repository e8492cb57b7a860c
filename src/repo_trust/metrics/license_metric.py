# metrics/license_metric.py
from __future__ import annotations

import logging
from typing import Iterable, Optional, Tuple

from ..api.base import RepositoryDataSource
from ..errors import GitHubError
from ..url_router import RepositoryRef
from ..utils.markdown import RegexSectionExtractor, SectionExtractor
from .base_metric import BaseMetric

# Licenses compatible with LGPLv2.1; substring match, case-insensitive.
COMPATIBLE_LICENSES: Tuple[str, ...] = (
    "lgpl",
    "mit",
    "bsd",
    "apache",
    "mpl",
    "eclipse",
    "artistic",
)

LICENSE_HEADERS: Tuple[str, ...] = ("license", "licence")
LICENSE_FILE = "LICENSE"


def find_compatible(
    text: Optional[str], keywords: Iterable[str] = COMPATIBLE_LICENSES
) -> Optional[str]:
    """Return the first compatible keyword found in `text`, if any."""
    if not text:
        return None
    low = text.lower()
    for k in keywords:
        if k in low:
            return k
    return None


class LicenseMetric(BaseMetric):
    """
    Binary license metric:
      - 1.0 if the README license section or the LICENSE file names a
        compatible license.
      - 0.0 if neither does, or neither exists.
    Only when both lookups fail outright is the score left uncomputed.
    """

    def __init__(
        self,
        weight: float = 0.25,
        extractor: Optional[SectionExtractor] = None,
        keywords: Iterable[str] = COMPATIBLE_LICENSES,
    ):
        super().__init__(name="License", weight=weight)
        self._extractor = extractor or RegexSectionExtractor()
        self._keywords = tuple(keywords)

    def _readme_section(self, readme: str) -> Optional[str]:
        for header in LICENSE_HEADERS:
            section = self._extractor.extract(readme, header)
            if section is not None:
                return section
        return None

    def evaluate(
        self,
        ref: RepositoryRef,
        source: RepositoryDataSource,
        logger: logging.Logger,
    ) -> float:
        errors = []

        try:
            readme = source.get_readme(ref.owner, ref.name)
        except GitHubError as e:
            logger.debug(
                "No README for %s (%s), will check LICENSE file", ref.slug, e
            )
            errors.append(e)
            readme = None

        if readme:
            hit = find_compatible(self._readme_section(readme), self._keywords)
            if hit:
                logger.info("Compatible license %r found in README of %s", hit, ref.slug)
                return 1.0

        try:
            body = source.get_file_text(ref.owner, ref.name, LICENSE_FILE)
        except GitHubError as e:
            logger.debug("LICENSE lookup failed for %s: %s", ref.slug, e)
            errors.append(e)
            body = None

        if body is not None:
            hit = find_compatible(body, self._keywords)
            if hit:
                logger.info("Compatible license %r found in LICENSE of %s", hit, ref.slug)
                return 1.0
            logger.info("LICENSE file of %s has no compatible license", ref.slug)

        if len(errors) == 2:
            raise errors[-1]
        return 0.0

    def get_description(self) -> str:
        return (
            "Binary license compatibility with LGPLv2.1 "
            "(compatible=1.0, else 0.0) from README section or LICENSE file."
        )
