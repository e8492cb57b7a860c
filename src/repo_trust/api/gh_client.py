from __future__ import annotations

import base64
import logging
import random
import threading
import time
from typing import Any, Dict, List, Optional, Tuple, Union
from urllib.parse import quote, urljoin

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..errors import CredentialError, GitHubError

logger = logging.getLogger("repo-trust.gh_client")

API_ROOT = "https://api.github.com"
DEFAULT_TIMEOUT = 30  # seconds
PAGE_SIZE = 100

JsonBody = Union[Dict[str, Any], List[Any]]

# ---------------- retry + session ----------------


class _TimeoutHTTPAdapter(HTTPAdapter):
    """HTTPAdapter that applies a default timeout and retry policy."""

    def __init__(self, *args, timeout: int = DEFAULT_TIMEOUT, **kwargs) -> None:
        self._timeout = timeout
        super().__init__(*args, **kwargs)

    def send(self, request, **kwargs):
        if kwargs.get("timeout") is None:
            kwargs["timeout"] = self._timeout
        return super().send(request, **kwargs)


def _retry_policy() -> Retry:
    """Retry on transient server/network issues."""
    return Retry(
        total=5,
        connect=5,
        read=5,
        backoff_factor=0.4,
        status_forcelist=(500, 502, 503, 504),
        allowed_methods=frozenset({"GET"}),
        raise_on_status=False,
    )


def _make_session(token: Optional[str]) -> requests.Session:
    """Build a requests session with headers, timeout, and retry policy."""
    session = requests.Session()
    adapter = _TimeoutHTTPAdapter(
        max_retries=_retry_policy(),
        timeout=DEFAULT_TIMEOUT,
    )
    session.mount("https://", adapter)
    session.mount("http://", adapter)

    headers = {
        "Accept": "application/vnd.github+json",
        "X-GitHub-Api-Version": "2022-11-28",
        "User-Agent": "repo-trust/1.0 (+requests)",
    }
    if token:
        headers["Authorization"] = f"Bearer {token}"
    session.headers.update(headers)
    return session


# ---------------- rate limit helpers ----------------


def _sleep_until_reset(resp: requests.Response) -> None:
    remaining = resp.headers.get("X-RateLimit-Remaining")
    reset = resp.headers.get("X-RateLimit-Reset")
    if remaining == "0" and reset is not None:
        try:
            delay = max(0, int(reset) - int(time.time())) + random.uniform(0.25, 0.75)
            delay = min(delay, 60.0)  # cap long sleeps
            logger.info(
                "GitHub rate limit reached. Sleeping ~%.1fs (reset=%s)",
                delay,
                reset,
            )
            time.sleep(delay)
            return
        except ValueError:
            pass

    logger.info("GitHub throttling/backoff. Sleeping 2s.")
    time.sleep(2.0)


def _decode_content(data: Any) -> Optional[str]:
    """Decode the base64 `content` field of a contents API payload."""
    if not isinstance(data, dict):
        return None
    content = data.get("content")
    if not isinstance(content, str):
        return None
    if data.get("encoding", "base64") != "base64":
        return content
    try:
        return base64.b64decode(content).decode("utf-8", errors="replace")
    except (ValueError, TypeError) as e:
        raise GitHubError(f"undecodable content: {e}") from e


# ---------------- client ----------------


class GHClient:
    """
    GitHub REST client used as the shared, read-only data source.

    A 404 on a content lookup maps to None (the file is absent). A 404 on a
    listing means the repository itself is missing and raises GitHubError,
    like every other failure, so metric probes can tell "absent" from
    "unknown".
    """

    def __init__(
        self,
        token: Optional[str] = None,
        *,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._http = session or _make_session(token)
        self._etag_cache: Dict[str, Tuple[str, JsonBody]] = {}
        self._lock = threading.Lock()
        logger.debug("GHClient initialized (token=%s)", "present" if token else "absent")

    # -------- public --------

    def validate_token(self) -> None:
        """Single up-front credential check against GET /user."""
        try:
            resp = self._http.get(urljoin(API_ROOT, "/user"))
        except requests.RequestException as e:
            raise CredentialError(f"token check failed: {e}") from e
        if resp.status_code != 200:
            raise CredentialError(
                f"GITHUB_TOKEN is not valid (status={resp.status_code})"
            )
        logger.info("GitHub token validated")

    def list_directory(
        self, owner: str, repo: str, path: str
    ) -> Optional[List[Dict[str, Any]]]:
        data = self._get_json(f"/repos/{owner}/{repo}/contents/{quote(path)}")
        if not isinstance(data, list):
            # absent, or a file rather than a directory
            return None
        return data

    def get_readme(self, owner: str, repo: str) -> Optional[str]:
        data = self._get_json(f"/repos/{owner}/{repo}/readme")
        if data is None:
            logger.debug("get_readme: no readme for %s/%s", owner, repo)
            return None
        return _decode_content(data)

    def get_file_text(self, owner: str, repo: str, path: str) -> Optional[str]:
        data = self._get_json(f"/repos/{owner}/{repo}/contents/{quote(path)}")
        if data is None:
            logger.debug("get_file_text: %s missing in %s/%s", path, owner, repo)
            return None
        return _decode_content(data)

    def count_open_issues(
        self, owner: str, repo: str, *, cap: Optional[int] = None, max_pages: int = 10
    ) -> int:
        """
        Count open issues, excluding pull requests.

        Paging stops early once `cap` is reached; callers that only need
        to know "at least N" pass that N as the cap.
        """
        count = 0
        for page in range(1, max_pages + 1):
            batch = self._get_list(
                f"/repos/{owner}/{repo}/issues",
                params={"state": "open", "per_page": PAGE_SIZE, "page": page},
            )
            count += sum(
                1 for it in batch
                if isinstance(it, dict) and "pull_request" not in it
            )
            if cap is not None and count >= cap:
                break
            if len(batch) < PAGE_SIZE:
                break
        logger.debug("count_open_issues: %s/%s -> %d", owner, repo, count)
        return count

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
        """
        Issues (pull requests excluded), newest first, up to `limit`.

        The API's `since` filters on update time. Results are sorted by
        creation time, so paging stops once a page ends before `since`.
        """
        items: List[Dict[str, Any]] = []
        for page in range(1, max_pages + 1):
            params: Dict[str, Any] = {
                "state": state,
                "per_page": PAGE_SIZE,
                "page": page,
                "sort": "created",
                "direction": "desc",
            }
            if since:
                params["since"] = since
            batch = self._get_list(f"/repos/{owner}/{repo}/issues", params=params)
            items.extend(
                it for it in batch
                if isinstance(it, dict) and "pull_request" not in it
            )
            if len(items) >= limit or len(batch) < PAGE_SIZE:
                break
            last = batch[-1].get("created_at") if isinstance(batch[-1], dict) else None
            # ISO-8601 UTC strings order lexically
            if since and isinstance(last, str) and last < since:
                break
        logger.debug("list_issues: total=%d for %s/%s", len(items), owner, repo)
        return items[:limit]

    def list_commits(
        self,
        owner: str,
        repo: str,
        *,
        since: Optional[str] = None,
        max_pages: int = 3,
    ) -> List[Dict[str, Any]]:
        items: List[Dict[str, Any]] = []
        for page in range(1, max_pages + 1):
            params: Dict[str, Any] = {"per_page": PAGE_SIZE, "page": page}
            if since:
                params["since"] = since
            batch = self._get_list(f"/repos/{owner}/{repo}/commits", params=params)
            items.extend(c for c in batch if isinstance(c, dict))
            if len(batch) < PAGE_SIZE:
                break
        logger.debug("list_commits: total=%d for %s/%s", len(items), owner, repo)
        return items

    def list_contributors(
        self,
        owner: str,
        repo: str,
        *,
        max_pages: int = 3,
    ) -> List[Dict[str, Any]]:
        items: List[Dict[str, Any]] = []
        page = 1
        while page <= max_pages:
            logger.debug("list_contributors: page %d for %s/%s", page, owner, repo)
            batch = self._get_list(
                f"/repos/{owner}/{repo}/contributors",
                params={"per_page": PAGE_SIZE, "page": page},
            )
            items.extend(c for c in batch if isinstance(c, dict))
            if len(batch) < PAGE_SIZE:
                break
            page += 1
        logger.debug("list_contributors: total=%d for %s/%s", len(items), owner, repo)
        return items

    # -------- internals --------

    @staticmethod
    def _cache_key(url: str, params: Optional[Dict[str, Any]]) -> str:
        if not params:
            return url
        query = "&".join(f"{k}={params[k]}" for k in sorted(params))
        return f"{url}?{query}"

    def _github_get(
        self, url: str, params: Optional[Dict[str, Any]] = None
    ) -> requests.Response:
        key = self._cache_key(url, params)
        headers: Dict[str, str] = {}
        with self._lock:
            cached = self._etag_cache.get(key)
        if cached:
            headers["If-None-Match"] = cached[0]
            logger.debug("GET %s (If-None-Match sent)", key)
        else:
            logger.debug("GET %s", key)

        try:
            resp = self._http.get(url, params=params, headers=headers)
            if resp.status_code in (403, 429) and (
                resp.headers.get("X-RateLimit-Remaining") == "0"
                or resp.status_code == 429
            ):
                _sleep_until_reset(resp)
                resp = self._http.get(url, params=params, headers=headers)
        except requests.RequestException as e:
            logger.debug("Request failed: %s (%s)", key, e)
            raise GitHubError(f"request failed: {key}: {e}") from e

        if resp.status_code == 304:
            logger.debug("304 Not Modified for %s", key)
        elif resp.status_code == 404:
            logger.debug("404 Not Found for %s", key)
        elif resp.status_code >= 400:
            logger.debug("GitHub responded %d for %s", resp.status_code, key)
        return resp

    def _get_json(
        self, path: str, params: Optional[Dict[str, Any]] = None
    ) -> Optional[JsonBody]:
        url = urljoin(API_ROOT, path)
        resp = self._github_get(url, params=params)
        key = self._cache_key(url, params)

        if resp.status_code == 404:
            return None
        if resp.status_code == 304:
            with self._lock:
                cached = self._etag_cache.get(key)
            if cached:
                return cached[1]
            raise GitHubError(f"304 without cached body for {key}", 304)
        if resp.status_code != 200:
            raise GitHubError(
                f"GitHub responded {resp.status_code} for {key}", resp.status_code
            )
        try:
            data = resp.json()
        except ValueError as e:
            raise GitHubError(f"invalid JSON from {key}: {e}") from e

        etag = resp.headers.get("ETag")
        if etag:
            with self._lock:
                self._etag_cache[key] = (etag, data)
        return data

    def _get_list(
        self, path: str, params: Optional[Dict[str, Any]] = None
    ) -> List[Any]:
        """Fetch one listing page; a 404 means the repository is missing."""
        data = self._get_json(path, params=params)
        if data is None:
            raise GitHubError(f"repository not found: {path}", 404)
        if not isinstance(data, list):
            raise GitHubError(f"unexpected listing shape from {path}")
        return data
