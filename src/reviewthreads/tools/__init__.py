"""Tool implementations, independent of the MCP server layer."""

from __future__ import annotations

from reviewthreads.tools.comments import (
    MAX_COMMENTS_PER_THREAD,
    MAX_REVIEW_THREADS,
    find_review_thread_id,
    get_pull_request_comment,
    reply_to_pull_request_comment,
    resolve_pull_request_review_thread,
    resolve_review_thread,
)

__all__ = [
    "MAX_COMMENTS_PER_THREAD",
    "MAX_REVIEW_THREADS",
    "find_review_thread_id",
    "get_pull_request_comment",
    "reply_to_pull_request_comment",
    "resolve_pull_request_review_thread",
    "resolve_review_thread",
]
