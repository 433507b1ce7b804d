"""Pydantic models and identifier types for reviewthreads."""

from __future__ import annotations

from typing import Any, NewType

from pydantic import BaseModel, ConfigDict, Field

from reviewthreads.errors import InvalidArgumentError

# Review comments and review threads live in different ID namespaces.
# Comment IDs are REST ``databaseId`` integers; thread IDs are opaque
# GraphQL node IDs (``PRRT_...``).
CommentId = NewType("CommentId", int)
ThreadId = NewType("ThreadId", str)


def parse_comment_id(value: Any) -> CommentId:
    """Validate a review comment ID.

    Raises:
        InvalidArgumentError: If *value* is not a positive integer.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        msg = f"comment_id must be a positive integer, got {value!r}"
        raise InvalidArgumentError(msg)
    if value <= 0:
        msg = f"comment_id must be a positive integer, got {value}"
        raise InvalidArgumentError(msg)
    return CommentId(value)


def parse_thread_id(value: Any) -> ThreadId:
    """Validate a review thread ID.

    A purely numeric value is a comment ID passed where a thread ID was
    expected; use ``comment_id`` instead so the thread can be looked up.

    Raises:
        InvalidArgumentError: If *value* is not a non-empty string or is numeric.
    """
    if isinstance(value, bool) or isinstance(value, int):
        msg = f"thread_id {value!r} looks like a comment ID; pass it as comment_id to look up its thread"
        raise InvalidArgumentError(msg)
    if not isinstance(value, str) or not value.strip():
        msg = f"thread_id must be a non-empty string, got {value!r}"
        raise InvalidArgumentError(msg)
    if value.strip().isdigit():
        msg = f"thread_id {value!r} looks like a comment ID; pass it as comment_id to look up its thread"
        raise InvalidArgumentError(msg)
    return ThreadId(value.strip())


class CommentAuthor(BaseModel):
    """The GitHub user who wrote a review comment."""

    model_config = ConfigDict(extra="allow")

    login: str = Field(default="", description="GitHub username")


class PullRequestComment(BaseModel):
    """A pull request review comment as returned by the GitHub REST API.

    Only the fields this server relies on are declared; everything else in
    the platform payload is kept as-is.
    """

    model_config = ConfigDict(extra="allow")

    id: int = Field(description="Comment databaseId (REST ID)")
    body: str = Field(default="", description="Comment body text")
    in_reply_to_id: int | None = Field(default=None, description="ID of the comment this one replies to")
    pull_request_url: str = Field(default="", description="API URL of the owning pull request")
    path: str | None = Field(default=None, description="File path the comment is on")
    html_url: str = Field(default="", description="Browser URL of the comment")
    user: CommentAuthor | None = Field(default=None, description="Comment author")


class ThreadSummary(BaseModel):
    """A review thread as echoed back by the resolve mutation."""

    id: str = Field(description="GraphQL node ID (PRRT_...) of the thread")
    is_resolved: bool = Field(description="Whether the thread is resolved")


class ThreadLookupResult(BaseModel):
    """The thread that contains a given review comment."""

    thread_id: str = Field(description="GraphQL node ID (PRRT_...) of the thread")
    message: str = Field(description="Human-readable outcome")


class ResolveThreadResult(BaseModel):
    """Confirmation returned after resolving a review thread."""

    success: bool = Field(description="Whether the thread was resolved")
    message: str = Field(description="Human-readable outcome")
    thread: ThreadSummary = Field(description="The resolved thread")
