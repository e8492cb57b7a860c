"""Port: repository metadata/content by owner + name."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol


class RepositoryDataSource(Protocol):
    """
    Read-only capability every metric probe depends on.

    Content lookups of absent files return None. Listings (issues, commits,
    contributors) raise GitHubError when the repository itself is missing,
    as do transport and API failures.
    """

    def validate_token(self) -> None:
        ...

    def list_directory(
        self, owner: str, repo: str, path: str
    ) -> Optional[List[Dict[str, Any]]]:
        ...

    def get_readme(self, owner: str, repo: str) -> Optional[str]:
        ...

    def get_file_text(self, owner: str, repo: str, path: str) -> Optional[str]:
        ...

    def count_open_issues(
        self, owner: str, repo: str, *, cap: Optional[int] = None
    ) -> int:
        ...

    def list_issues(
        self,
        owner: str,
        repo: str,
        *,
        state: str = "all",
        since: Optional[str] = None,
        limit: int = 100,
        max_pages: int = 10,
    ) -> List[Dict[str, Any]]:
        ...

    def list_commits(
        self,
        owner: str,
        repo: str,
        *,
        since: Optional[str] = None,
        max_pages: int = 3,
    ) -> List[Dict[str, Any]]:
        ...

    def list_contributors(
        self, owner: str, repo: str, *, max_pages: int = 3
    ) -> List[Dict[str, Any]]:
        ...
