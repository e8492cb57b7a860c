"""
Unit tests for GHClient against a mocked requests session.
"""

import base64
import logging
from unittest.mock import MagicMock, patch

import pytest
import requests

from repo_trust.api.gh_client import GHClient, _decode_content, _make_session
from repo_trust.errors import CredentialError, GitHubError
from repo_trust.metrics.correctness_metric import CorrectnessMetric
from repo_trust.score_result import ResultStatus
from repo_trust.url_router import RepositoryRef


def _resp(status=200, body=None, headers=None):
    resp = MagicMock()
    resp.status_code = status
    resp.headers = headers or {}
    if isinstance(body, Exception):
        resp.json.side_effect = body
    else:
        resp.json.return_value = body
    return resp


def _b64(text):
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def _client(*responses):
    session = MagicMock()
    session.get.side_effect = list(responses)
    return GHClient(session=session), session


class TestSession:
    def test_headers_and_adapters(self):
        session = _make_session("ghp_token")
        assert session.headers["Authorization"] == "Bearer ghp_token"
        assert session.headers["Accept"] == "application/vnd.github+json"
        assert "https://" in session.adapters

    def test_no_token_no_auth_header(self):
        assert "Authorization" not in _make_session(None).headers


class TestValidateToken:
    def test_ok(self):
        client, session = _client(_resp(200, {"login": "octo"}))
        client.validate_token()
        assert session.get.call_args[0][0] == "https://api.github.com/user"

    def test_rejected(self):
        client, _ = _client(_resp(401, {"message": "Bad credentials"}))
        with pytest.raises(CredentialError):
            client.validate_token()

    def test_network_error(self):
        client, _ = _client(requests.ConnectionError("offline"))
        with pytest.raises(CredentialError):
            client.validate_token()


class TestContent:
    def test_get_readme_decodes_base64(self):
        client, _ = _client(_resp(200, {"content": _b64("# Hello\n"), "encoding": "base64"}))
        assert client.get_readme("o", "r") == "# Hello\n"

    def test_get_readme_absent(self):
        client, _ = _client(_resp(404, {"message": "Not Found"}))
        assert client.get_readme("o", "r") is None

    def test_server_error_raises(self):
        client, _ = _client(_resp(500, {}))
        with pytest.raises(GitHubError) as exc_info:
            client.get_file_text("o", "r", "LICENSE")
        assert exc_info.value.status_code == 500

    def test_server_error_logged_below_warning(self, caplog):
        client, _ = _client(_resp(503, {}))
        with caplog.at_level(logging.DEBUG, logger="repo-trust.gh_client"):
            with pytest.raises(GitHubError):
                client.get_readme("o", "r")
        assert caplog.records
        assert all(r.levelno < logging.WARNING for r in caplog.records)

    def test_transport_error_raises(self):
        client, _ = _client(requests.ConnectionError("reset"))
        with pytest.raises(GitHubError):
            client.get_readme("o", "r")

    def test_invalid_json_raises(self):
        client, _ = _client(_resp(200, ValueError("not json")))
        with pytest.raises(GitHubError):
            client.get_readme("o", "r")

    def test_list_directory(self):
        listing = [{"name": "test_a.py", "type": "file"}]
        client, session = _client(_resp(200, listing))
        assert client.list_directory("o", "r", "tests") == listing
        assert session.get.call_args[0][0].endswith("/repos/o/r/contents/tests")

    def test_list_directory_on_file_is_none(self):
        client, _ = _client(_resp(200, {"type": "file", "content": ""}))
        assert client.list_directory("o", "r", "test") is None

    def test_decode_content_non_dict(self):
        assert _decode_content([]) is None
        assert _decode_content({"content": "plain", "encoding": "none"}) == "plain"


class TestIssues:
    def test_count_skips_pull_requests(self):
        page = [{"number": 1}, {"number": 2, "pull_request": {}}, {"number": 3}]
        client, _ = _client(_resp(200, page))
        assert client.count_open_issues("o", "r") == 2

    def test_count_stops_at_cap(self):
        full = [{"number": i} for i in range(100)]
        client, session = _client(_resp(200, full), _resp(200, full))
        assert client.count_open_issues("o", "r", cap=60) == 100
        assert session.get.call_count == 1

    def test_count_pages_until_short_page(self):
        full = [{"number": i} for i in range(100)]
        client, session = _client(_resp(200, full), _resp(200, [{"number": 1}]))
        assert client.count_open_issues("o", "r") == 101
        assert session.get.call_count == 2

    def test_count_error_propagates(self):
        client, _ = _client(_resp(502, {}))
        with pytest.raises(GitHubError):
            client.count_open_issues("o", "r")

    def test_list_issues_respects_limit(self):
        page = [{"number": i} for i in range(10)]
        client, session = _client(_resp(200, page))
        assert len(client.list_issues("o", "r", since="2024-01-01T00:00:00Z", limit=5)) == 5
        assert session.get.call_args[1]["params"]["since"] == "2024-01-01T00:00:00Z"

    def test_count_missing_repo_raises(self):
        client, _ = _client(_resp(404, {"message": "Not Found"}))
        with pytest.raises(GitHubError) as exc_info:
            client.count_open_issues("ghost", "gone")
        assert exc_info.value.status_code == 404

    def test_list_issues_missing_repo_raises(self):
        client, _ = _client(_resp(404, {"message": "Not Found"}))
        with pytest.raises(GitHubError):
            client.list_issues("ghost", "gone")

    def test_list_issues_stops_at_page_cap(self):
        prs = [{"number": i, "pull_request": {}} for i in range(100)]
        session = MagicMock()
        session.get.side_effect = lambda *a, **kw: _resp(200, prs)
        client = GHClient(session=session)
        assert client.list_issues("o", "r", limit=100) == []
        assert session.get.call_count == 10

    def test_list_issues_stops_past_since(self):
        old = [
            {"number": i, "pull_request": {}, "created_at": "2023-06-01T00:00:00Z"}
            for i in range(100)
        ]
        client, session = _client(_resp(200, old), _resp(200, old))
        assert client.list_issues("o", "r", since="2024-01-01T00:00:00Z") == []
        assert session.get.call_count == 1


class TestCommitsAndContributors:
    def test_list_commits(self):
        client, _ = _client(_resp(200, [{"sha": "a"}, {"sha": "b"}]))
        assert len(client.list_commits("o", "r")) == 2

    def test_list_commits_missing_repo_raises(self):
        client, _ = _client(_resp(404, {"message": "Not Found"}))
        with pytest.raises(GitHubError):
            client.list_commits("ghost", "gone")

    def test_list_contributors_empty(self):
        client, _ = _client(_resp(200, []))
        assert client.list_contributors("o", "r") == []


class TestCaching:
    def test_etag_304_serves_cached_body(self):
        body = {"content": _b64("cached"), "encoding": "base64"}
        client, session = _client(
            _resp(200, body, {"ETag": 'W/"abc"'}),
            _resp(304, None),
        )
        assert client.get_readme("o", "r") == "cached"
        assert client.get_readme("o", "r") == "cached"
        assert session.get.call_args[1]["headers"]["If-None-Match"] == 'W/"abc"'

    def test_304_without_cache_raises(self):
        client, _ = _client(_resp(304, None))
        with pytest.raises(GitHubError):
            client.get_readme("o", "r")


class TestRateLimit:
    @patch("repo_trust.api.gh_client.time.sleep")
    def test_retries_once_after_reset(self, mock_sleep):
        limited = _resp(403, {}, {"X-RateLimit-Remaining": "0", "X-RateLimit-Reset": "0"})
        client, session = _client(limited, _resp(200, []))
        assert client.list_commits("o", "r") == []
        assert session.get.call_count == 2
        mock_sleep.assert_called_once()

    def test_plain_forbidden_is_error(self):
        client, session = _client(_resp(403, {"message": "forbidden"}))
        with pytest.raises(GitHubError):
            client.get_readme("o", "r")
        assert session.get.call_count == 1


class TestMissingRepository:
    """Every endpoint 404s: content is absent, but issue data is unknown."""

    def setup_method(self):
        self.session = MagicMock()
        self.session.get.side_effect = lambda *a, **kw: _resp(404, {"message": "Not Found"})
        self.client = GHClient(session=self.session)

    def test_content_lookups_are_absent(self):
        assert self.client.get_readme("ghost", "gone") is None
        assert self.client.list_directory("ghost", "gone", "tests") is None

    def test_correctness_fails(self):
        ref = RepositoryRef("ghost", "gone", "https://github.com/ghost/gone")
        res = CorrectnessMetric().compute(ref, self.client, logging.getLogger("test"))
        assert res.status is ResultStatus.FAILED
        assert res.score == -1
