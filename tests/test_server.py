"""Tests for server.py: recovery hints, owner/repo defaults, and client setup."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from reviewthreads.config import Config, set_config
from reviewthreads.errors import (
    CommentLookupError,
    InvalidArgumentError,
    MissingParameterError,
    ReplyError,
    ResolveError,
    ThreadNotFoundError,
)
from reviewthreads.github_api import GitHubAuthError, GitHubError
from reviewthreads.server import _default_owner_repo, _recovery_error, build_client

if TYPE_CHECKING:
    from pytest_mock import MockerFixture


def _wrapped(exc_cls, cause: Exception):
    try:
        raise exc_cls(str(cause)) from cause
    except exc_cls as exc:
        return exc


class TestRecoveryError:
    def test_message_kept_verbatim(self):
        exc = MissingParameterError("body")
        text = _recovery_error(exc, tool_name="reply_to_pull_request_comment")
        assert text == "reply_to_pull_request_comment failed: Missing required parameter: body"

    def test_auth_hint(self):
        exc = _wrapped(ReplyError, GitHubAuthError("GitHub API access forbidden: nope"))
        text = _recovery_error(exc, tool_name="reply_to_pull_request_comment")
        assert "Failed to reply to pull request comment" in text
        assert "GITHUB_PERSONAL_ACCESS_TOKEN" in text

    def test_rate_limit_hint(self):
        exc = _wrapped(CommentLookupError, GitHubError("GitHub API rate limit exceeded: slow down", status_code=403))
        assert "Wait before retrying" in _recovery_error(exc, tool_name="get_pull_request_comment")

    def test_not_found_hint(self):
        exc = _wrapped(CommentLookupError, GitHubError("GitHub API error 404: Not Found", status_code=404))
        text = _recovery_error(exc, tool_name="get_pull_request_comment")
        assert text.startswith("get_pull_request_comment failed: Failed to get pull request comment: GitHub API error 404")
        assert "Verify owner, repo" in text

    def test_unresolvable_node_hint(self):
        exc = _wrapped(ResolveError, GitHubError("GraphQL error: Could not resolve to a node with the global id of 'x'"))
        assert "Verify owner, repo" in _recovery_error(exc, tool_name="resolve_pull_request_review_thread")

    def test_truncated_search_hint(self):
        exc = ThreadNotFoundError(99, truncated=True)
        assert "pass thread_id directly" in _recovery_error(exc, tool_name="resolve_pull_request_review_thread")

    def test_not_found_in_window_hint(self):
        exc = ThreadNotFoundError(99)
        text = _recovery_error(exc, tool_name="resolve_pull_request_review_thread")
        assert "comment ID 99" in text
        assert "Verify the comment belongs to this pull request" in text

    def test_invalid_argument_has_no_hint(self):
        exc = InvalidArgumentError("Either thread_id or comment_id must be provided")
        text = _recovery_error(exc, tool_name="resolve_pull_request_review_thread")
        assert text == "resolve_pull_request_review_thread failed: Either thread_id or comment_id must be provided"


class TestDefaultOwnerRepo:
    def test_explicit_values_kept(self):
        set_config(Config(default_repo="acme/widgets"))
        assert _default_owner_repo("owner", "repo") == ("owner", "repo")

    def test_partial_values_not_mixed_with_default(self):
        set_config(Config(default_repo="acme/widgets"))
        assert _default_owner_repo("owner", None) == ("owner", None)

    def test_default_used_when_both_omitted(self):
        set_config(Config(default_repo="acme/widgets"))
        assert _default_owner_repo(None, None) == ("acme", "widgets")

    def test_no_default_configured(self):
        assert _default_owner_repo(None, None) == (None, None)


class TestBuildClient:
    async def test_uses_config_urls(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("GITHUB_PERSONAL_ACCESS_TOKEN", "tok")
        client = build_client(Config(api_url="https://ghe.example.com/api/v3"))
        try:
            assert client.api_url == "https://ghe.example.com/api/v3"
            assert client.graphql_url == "https://ghe.example.com/api/graphql"
        finally:
            await client.aclose()

    def test_missing_token_refuses_to_start(self, mocker: MockerFixture):
        mocker.patch("reviewthreads.github_api.resolve_token", return_value=None)
        with pytest.raises(GitHubAuthError):
            build_client(Config())


class TestMain:
    def test_serve_runs_server(self, mocker: MockerFixture):
        mock_run = mocker.patch("reviewthreads.server.mcp.run")
        from reviewthreads.cli import serve

        serve()
        mock_run.assert_called_once()
