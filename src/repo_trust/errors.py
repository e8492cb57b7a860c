"""Exception hierarchy for repo-trust.

Fatal errors abort the whole run before any record is emitted.
GitHubError is raised by the data source and caught at the probe boundary.
"""

from __future__ import annotations


class RepoTrustError(Exception):
    """Base class for all repo-trust errors."""


class FatalError(RepoTrustError):
    """Run-level failure: the CLI exits non-zero and emits nothing."""


class InputFileError(FatalError):
    """The URL file is missing or unreadable."""


class InvalidUrlError(FatalError):
    """A URL does not have the github.com/<owner>/<repo> shape."""

    def __init__(self, url: str):
        super().__init__(f"Invalid URL format: {url}")
        self.url = url


class CredentialError(FatalError):
    """GITHUB_TOKEN is missing or rejected by the API."""


class GitHubError(RepoTrustError):
    """A GitHub API call failed (transport error or unexpected status)."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
