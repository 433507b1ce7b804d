"""Core operations on pull request review comments and review threads."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from reviewthreads.errors import (
    CommentLookupError,
    FinderError,
    InvalidArgumentError,
    MissingParameterError,
    ReplyError,
    ResolveError,
    ThreadNotFoundError,
)
from reviewthreads.github_api import GitHubError
from reviewthreads.models import (
    PullRequestComment,
    ResolveThreadResult,
    ThreadLookupResult,
    ThreadSummary,
    parse_comment_id,
    parse_thread_id,
)

if TYPE_CHECKING:
    from reviewthreads.github_api import GitHubClient

logger = logging.getLogger(__name__)

# The thread search is one page deep. Comments in threads beyond the first
# MAX_REVIEW_THREADS, or beyond the first MAX_COMMENTS_PER_THREAD of their
# thread, are not found.
MAX_REVIEW_THREADS = 100
MAX_COMMENTS_PER_THREAD = 10

_FIND_THREAD_QUERY = f"""
query($owner: String!, $repo: String!, $pullNumber: Int!) {{
  repository(owner: $owner, name: $repo) {{
    pullRequest(number: $pullNumber) {{
      reviewThreads(first: {MAX_REVIEW_THREADS}) {{
        pageInfo {{ hasNextPage }}
        nodes {{
          id
          comments(first: {MAX_COMMENTS_PER_THREAD}) {{
            pageInfo {{ hasNextPage }}
            nodes {{
              databaseId
            }}
          }}
        }}
      }}
    }}
  }}
}}
"""

_RESOLVE_THREAD_MUTATION = """
mutation($threadId: ID!) {
  resolveReviewThread(input: {threadId: $threadId}) {
    thread { id isResolved }
  }
}
"""


def require_params(**params: Any) -> None:
    """Raise :exc:`MissingParameterError` for the first empty parameter.

    Parameters are checked in keyword order; ``None``, ``""`` and ``0`` all
    count as missing.
    """
    for name, value in params.items():
        if isinstance(value, str):
            value = value.strip()
        if not value:
            raise MissingParameterError(name)


# ---------------------------------------------------------------------------
# Comment lookup / reply (REST)
# ---------------------------------------------------------------------------


async def get_pull_request_comment(
    client: GitHubClient,
    comment_id: int,
    *,
    owner: str,
    repo: str,
) -> PullRequestComment:
    """Fetch a single review comment.

    Args:
        client: GitHub API client.
        comment_id: REST ID (databaseId) of the review comment.
        owner: Repository owner.
        repo: Repository name.

    Raises:
        MissingParameterError: If a parameter is empty.
        InvalidArgumentError: If *comment_id* is not a positive integer.
        CommentLookupError: If the comment does not exist or the request fails.
    """
    require_params(comment_id=comment_id, owner=owner, repo=repo)
    comment_id = parse_comment_id(comment_id)

    try:
        data = await client.rest(f"/repos/{owner}/{repo}/pulls/comments/{comment_id}")
    except GitHubError as exc:
        raise CommentLookupError(str(exc)) from exc
    if not isinstance(data, dict):
        msg = f"unexpected response for comment {comment_id}"
        raise CommentLookupError(msg)
    return PullRequestComment.model_validate(data)


async def reply_to_pull_request_comment(  # noqa: PLR0913, PLR0917
    client: GitHubClient,
    owner: str,
    repo: str,
    pull_number: int,
    comment_id: int,
    body: str,
) -> PullRequestComment:
    """Post a reply to a review comment.

    Every call creates a new comment; callers that retry must dedupe themselves.

    Returns:
        The newly created reply comment.

    Raises:
        MissingParameterError: If a parameter is empty (checked before any request).
        InvalidArgumentError: If *comment_id* is not a positive integer.
        ReplyError: If the target does not exist, access is denied, or the request fails.
    """
    require_params(owner=owner, repo=repo, pull_number=pull_number, comment_id=comment_id, body=body)
    comment_id = parse_comment_id(comment_id)

    try:
        data = await client.rest(
            f"/repos/{owner}/{repo}/pulls/{pull_number}/comments/{comment_id}/replies",
            method="POST",
            body=body,
        )
    except GitHubError as exc:
        raise ReplyError(str(exc)) from exc
    if not isinstance(data, dict):
        msg = f"unexpected response replying to comment {comment_id}"
        raise ReplyError(msg)
    logger.debug("Replied to comment %s on %s/%s#%s", comment_id, owner, repo, pull_number)
    return PullRequestComment.model_validate(data)


# ---------------------------------------------------------------------------
# Thread resolution (GraphQL)
# ---------------------------------------------------------------------------


async def resolve_review_thread(client: GitHubClient, thread_id: str) -> ResolveThreadResult:
    """Mark a review thread resolved.

    Resolving an already-resolved thread succeeds. The thread state GitHub
    echoes back is reported as-is.

    Raises:
        InvalidArgumentError: If *thread_id* is empty or looks like a comment ID.
        ResolveError: If the thread is unknown or the mutation is rejected.
    """
    thread_id = parse_thread_id(thread_id)

    try:
        result = await client.graphql(_RESOLVE_THREAD_MUTATION, variables={"threadId": thread_id})
    except GitHubError as exc:
        raise ResolveError(str(exc)) from exc

    # The payload sits under the GraphQL envelope's "data" key.
    thread_data = ((result.get("data") or {}).get("resolveReviewThread") or {}).get("thread")
    if not thread_data:
        msg = f"no thread returned for {thread_id}"
        raise ResolveError(msg)

    thread = ThreadSummary(id=thread_data.get("id", thread_id), is_resolved=bool(thread_data.get("isResolved")))
    return ResolveThreadResult(
        success=True,
        message="Review thread resolved successfully",
        thread=thread,
    )


def _match_thread(threads: list[dict[str, Any]], comment_id: int) -> str | None:
    """Return the ID of the first thread whose comments include *comment_id*."""
    for node in threads:
        comments = (node.get("comments") or {}).get("nodes") or []
        if any(c.get("databaseId") == comment_id for c in comments):
            return node["id"]
    return None


def _search_truncated(review_threads: dict[str, Any]) -> bool:
    """Whether the one-page search left threads or comments unseen."""
    if (review_threads.get("pageInfo") or {}).get("hasNextPage"):
        return True
    return any(
        ((node.get("comments") or {}).get("pageInfo") or {}).get("hasNextPage")
        for node in review_threads.get("nodes") or []
    )


async def find_review_thread_id(  # noqa: PLR0913, PLR0917
    client: GitHubClient,
    owner: str,
    repo: str,
    pull_number: int,
    comment_id: int,
) -> ThreadLookupResult:
    """Find the review thread that contains a review comment.

    Confirms the comment exists, then scans the first
    :data:`MAX_REVIEW_THREADS` threads of the pull request (and the first
    :data:`MAX_COMMENTS_PER_THREAD` comments of each) in the order GitHub
    returns them. Larger pull requests are not paged through; a miss on a
    truncated page is logged as a warning and noted in the error.

    Raises:
        CommentLookupError: If the comment does not exist (propagated unchanged).
        ThreadNotFoundError: If no thread in the search window contains the comment.
        FinderError: If the thread query fails.
    """
    await get_pull_request_comment(client, comment_id, owner=owner, repo=repo)

    try:
        result = await client.graphql(
            _FIND_THREAD_QUERY,
            variables={"owner": owner, "repo": repo, "pullNumber": pull_number},
        )
    except GitHubError as exc:
        raise FinderError(str(exc)) from exc

    pull_request = ((result.get("data") or {}).get("repository") or {}).get("pullRequest")
    if pull_request is None:
        msg = f"pull request {owner}/{repo}#{pull_number} not found"
        raise FinderError(msg)

    review_threads = pull_request.get("reviewThreads") or {}
    thread_id = _match_thread(review_threads.get("nodes") or [], comment_id)
    if thread_id is None:
        truncated = _search_truncated(review_threads)
        if truncated:
            logger.warning(
                "Comment %s not found in the first %d review threads (%d comments each) of %s/%s#%s; "
                "the pull request exceeds the search window",
                comment_id,
                MAX_REVIEW_THREADS,
                MAX_COMMENTS_PER_THREAD,
                owner,
                repo,
                pull_number,
            )
        raise ThreadNotFoundError(comment_id, truncated=truncated)

    return ThreadLookupResult(thread_id=thread_id, message="Thread ID found successfully")


async def resolve_pull_request_review_thread(  # noqa: PLR0913
    client: GitHubClient,
    *,
    thread_id: str | None = None,
    comment_id: int | None = None,
    owner: str | None = None,
    repo: str | None = None,
    pull_number: int | None = None,
) -> ResolveThreadResult:
    """Resolve a review thread given either its ID or one of its comments.

    With *thread_id*, the thread is resolved directly and no lookup happens.
    A blank *thread_id* counts as absent.
    With only *comment_id*, *owner*, *repo* and *pull_number* are required and
    the thread is found first.

    Raises:
        InvalidArgumentError: If neither *thread_id* nor *comment_id* is given.
        MissingParameterError: If the comment path lacks owner, repo or pull_number.
    """
    if isinstance(thread_id, str) and not thread_id.strip():
        thread_id = None
    if thread_id:
        return await resolve_review_thread(client, thread_id)

    if comment_id:
        require_params(owner=owner, repo=repo, pull_number=pull_number)
        lookup = await find_review_thread_id(client, owner, repo, pull_number, comment_id)  # type: ignore[arg-type]
        return await resolve_review_thread(client, lookup.thread_id)

    msg = "Either thread_id or comment_id must be provided"
    raise InvalidArgumentError(msg)
