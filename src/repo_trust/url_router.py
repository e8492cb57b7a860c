import re
from dataclasses import dataclass

from .errors import InvalidUrlError


@dataclass(frozen=True)
class RepositoryRef:
    """
    Owner/name pair resolved once from an input URL.

    Attributes:
        owner: GitHub account or organization.
        name: Repository name.
        url: The input URL string, emitted verbatim in the record.
    """
    owner: str
    name: str
    url: str = ""

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.name}"


class UrlRouter:
    """Resolves repository URLs to RepositoryRef values."""

    _GH_RE = re.compile(
        (
            r"^(?:https?://)?(?:www\.)?github\.com/"
            r"(?P<owner>[-.\w]+)/(?P<repo>[-.\w]+?)"
            r"(?:\.git)?"
            r"(?:/.*)?$"
        ),
        re.IGNORECASE,
    )

    @staticmethod
    def strip_query(url: str) -> str:
        """Remove query string and fragment from a URL."""
        q = url.split("?", 1)[0]
        return q.split("#", 1)[0]

    def matches(self, url: str) -> bool:
        return self._GH_RE.match(self.strip_query(url.strip())) is not None

    def parse(self, url: str) -> RepositoryRef:
        """
        Resolve a GitHub repository URL.

        Raises:
            InvalidUrlError: if the URL is not github.com/<owner>/<repo>.
        """
        raw = (url or "").strip()
        m = self._GH_RE.match(self.strip_query(raw))
        if not m:
            raise InvalidUrlError(raw)
        return RepositoryRef(owner=m.group("owner"), name=m.group("repo"), url=raw)
