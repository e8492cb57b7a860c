"""Shared fixtures: an in-memory data source standing in for GitHub."""

import logging
from typing import Any, Dict, List, Optional

import pytest

from repo_trust.errors import GitHubError
from repo_trust.url_router import RepositoryRef


class FakeSource:
    """
    RepositoryDataSource backed by plain dicts.

    `errors` maps a method name to the exception it should raise;
    `dir_errors` lists directory paths whose lookup fails.
    """

    def __init__(
        self,
        *,
        dirs: Optional[Dict[str, List[Dict[str, Any]]]] = None,
        readme: Optional[str] = None,
        files: Optional[Dict[str, str]] = None,
        open_issues: int = 0,
        issues: Optional[List[Dict[str, Any]]] = None,
        commits: Optional[List[Dict[str, Any]]] = None,
        contributors: Optional[List[Dict[str, Any]]] = None,
        errors: Optional[Dict[str, Exception]] = None,
        dir_errors: Optional[List[str]] = None,
    ):
        self.dirs = dirs or {}
        self.readme = readme
        self.files = files or {}
        self.open_issues = open_issues
        self.issues = issues or []
        self.commits = commits or []
        self.contributors = contributors or []
        self.errors = errors or {}
        self.dir_errors = set(dir_errors or [])
        self.calls: List[str] = []

    def _enter(self, name: str) -> None:
        self.calls.append(name)
        if name in self.errors:
            raise self.errors[name]

    def validate_token(self) -> None:
        self._enter("validate_token")

    def list_directory(self, owner, repo, path):
        self._enter("list_directory")
        if path in self.dir_errors:
            raise GitHubError(f"boom: {path}", 500)
        return self.dirs.get(path)

    def get_readme(self, owner, repo):
        self._enter("get_readme")
        return self.readme

    def get_file_text(self, owner, repo, path):
        self._enter("get_file_text")
        return self.files.get(path)

    def count_open_issues(self, owner, repo, *, cap=None):
        self._enter("count_open_issues")
        return self.open_issues

    def list_issues(self, owner, repo, *, state="all", since=None, limit=100, max_pages=10):
        self._enter("list_issues")
        return list(self.issues)[:limit]

    def list_commits(self, owner, repo, *, since=None, max_pages=3):
        self._enter("list_commits")
        return list(self.commits)

    def list_contributors(self, owner, repo, *, max_pages=3):
        self._enter("list_contributors")
        return list(self.contributors)


@pytest.fixture
def ref():
    return RepositoryRef("octo", "widget", "https://github.com/octo/widget")


@pytest.fixture
def silent_logger():
    log = logging.getLogger("repo-trust.tests.silent")
    log.addHandler(logging.NullHandler())
    log.propagate = False
    return log


@pytest.fixture
def make_source():
    return FakeSource
