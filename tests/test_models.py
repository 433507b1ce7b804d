"""Tests for identifier parsing, models, and the error taxonomy."""

from __future__ import annotations

import pytest

from reviewthreads.errors import (
    CommentLookupError,
    FinderError,
    InvalidArgumentError,
    MissingParameterError,
    ReplyError,
    ResolveError,
    ReviewThreadsError,
    ThreadNotFoundError,
)
from reviewthreads.models import PullRequestComment, parse_comment_id, parse_thread_id


class TestParseCommentId:
    def test_positive_int(self):
        assert parse_comment_id(1234567890) == 1234567890

    @pytest.mark.parametrize("value", [0, -1])
    def test_non_positive_rejected(self, value):
        with pytest.raises(InvalidArgumentError, match="positive integer"):
            parse_comment_id(value)

    @pytest.mark.parametrize("value", ["PRRT_kwDOabc", "123", 1.5, True, None])
    def test_non_int_rejected(self, value):
        with pytest.raises(InvalidArgumentError):
            parse_comment_id(value)


class TestParseThreadId:
    def test_node_id(self):
        assert parse_thread_id("PRRT_kwDOtest123") == "PRRT_kwDOtest123"

    def test_strips_whitespace(self):
        assert parse_thread_id("  PRRT_kwDOtest123 ") == "PRRT_kwDOtest123"

    @pytest.mark.parametrize("value", [1234567, "1234567", " 42 "])
    def test_comment_id_rejected(self, value):
        with pytest.raises(InvalidArgumentError, match="looks like a comment ID"):
            parse_thread_id(value)

    @pytest.mark.parametrize("value", ["", "   ", None])
    def test_empty_rejected(self, value):
        with pytest.raises(InvalidArgumentError, match="non-empty string"):
            parse_thread_id(value)


class TestPullRequestComment:
    def test_minimal_payload(self):
        comment = PullRequestComment.model_validate({"id": 1})
        assert comment.body == ""
        assert comment.in_reply_to_id is None
        assert comment.user is None

    def test_extra_fields_kept(self):
        comment = PullRequestComment.model_validate({"id": 1, "commit_id": "abc123", "user": {"login": "me", "type": "User"}})
        dumped = comment.model_dump()
        assert dumped["commit_id"] == "abc123"
        assert dumped["user"]["type"] == "User"


class TestErrors:
    def test_all_errors_share_base(self):
        for exc in (
            MissingParameterError("owner"),
            InvalidArgumentError("bad"),
            CommentLookupError("x"),
            ReplyError("x"),
            ResolveError("x"),
            FinderError("x"),
            ThreadNotFoundError(1),
        ):
            assert isinstance(exc, ReviewThreadsError)

    def test_comment_lookup_error_is_builtin_lookup_error(self):
        assert isinstance(CommentLookupError("x"), LookupError)

    @pytest.mark.parametrize(
        ("exc", "expected"),
        [
            (CommentLookupError("boom"), "Failed to get pull request comment: boom"),
            (ReplyError("boom"), "Failed to reply to pull request comment: boom"),
            (ResolveError("boom"), "Failed to resolve pull request review thread: boom"),
            (FinderError("boom"), "Failed to find review thread ID: boom"),
        ],
    )
    def test_remote_errors_are_prefixed(self, exc, expected):
        assert str(exc) == expected
        assert exc.cause == "boom"

    def test_thread_not_found_message(self):
        exc = ThreadNotFoundError(99)
        assert str(exc) == "Failed to find review thread ID: Could not find review thread containing comment ID 99"
        assert exc.comment_id == 99
        assert exc.truncated is False

    def test_thread_not_found_truncated_message(self):
        exc = ThreadNotFoundError(99, truncated=True)
        assert "search window" in str(exc)
        assert exc.truncated is True
