"""Error taxonomy for the review-thread tools.

Caller mistakes (:exc:`MissingParameterError`, :exc:`InvalidArgumentError`)
are raised before any network call. Remote failures are wrapped with a prefix
naming the operation that failed; the underlying error is kept as ``__cause__``.
"""

from __future__ import annotations


class ReviewThreadsError(Exception):
    """Base class for every error surfaced by a review-thread tool."""


class MissingParameterError(ReviewThreadsError):
    """Raised when a required tool parameter is absent or empty."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Missing required parameter: {name}")
        self.name = name


class InvalidArgumentError(ReviewThreadsError):
    """Raised when a parameter is present but unusable."""


class _WrappedRemoteError(ReviewThreadsError):
    """A remote operation failed; the message carries the operation prefix."""

    prefix = ""

    def __init__(self, cause: str) -> None:
        super().__init__(f"{self.prefix}: {cause}")
        self.cause = cause


class CommentLookupError(_WrappedRemoteError, LookupError):
    """Raised when a review comment cannot be fetched."""

    prefix = "Failed to get pull request comment"


class ReplyError(_WrappedRemoteError):
    """Raised when posting a reply to a review comment fails."""

    prefix = "Failed to reply to pull request comment"


class ResolveError(_WrappedRemoteError):
    """Raised when the resolveReviewThread mutation fails or is rejected."""

    prefix = "Failed to resolve pull request review thread"


class FinderError(_WrappedRemoteError):
    """Raised when the review-thread search query fails."""

    prefix = "Failed to find review thread ID"


class ThreadNotFoundError(FinderError):
    """Raised when the search completed but no thread contains the comment."""

    def __init__(self, comment_id: int, *, truncated: bool = False) -> None:
        cause = f"Could not find review thread containing comment ID {comment_id}"
        if truncated:
            cause += " (the pull request has more review threads or comments than the search window covers)"
        super().__init__(cause)
        self.comment_id = comment_id
        self.truncated = truncated
