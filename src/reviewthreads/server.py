"""FastMCP server for reviewthreads.

Exposes tools to fetch a pull request review comment, reply to it, and
resolve its review thread. Authentication uses a GitHub token from the
environment.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from fastmcp.server.dependencies import get_context
from fastmcp.server.lifespan import lifespan
from fastmcp.server.middleware.error_handling import ErrorHandlingMiddleware
from fastmcp.server.middleware.logging import LoggingMiddleware
from fastmcp.server.middleware.timing import TimingMiddleware

from reviewthreads.config import Config, get_config, load_config, set_config
from reviewthreads.errors import InvalidArgumentError, ReviewThreadsError, ThreadNotFoundError
from reviewthreads.github_api import GitHubAuthError, GitHubClient, GitHubError
from reviewthreads.models import PullRequestComment, ResolveThreadResult  # noqa: TC001 - FastMCP reads return annotations
from reviewthreads.tools import comments

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)

_LIFESPAN_CLIENT_KEY = "github"


def build_client(config: Config) -> GitHubClient:
    """Build the process-wide GitHub client from the environment token."""
    return GitHubClient.from_env(api_url=config.api_url, graphql_url=config.graphql_url)


@lifespan
async def github_client_lifespan(server: FastMCP) -> AsyncIterator[dict[str, object]]:  # noqa: ARG001
    """Load config and open the GitHub client for the lifetime of the server."""
    config = load_config()
    set_config(config)
    client = build_client(config)
    logger.info("GitHub client ready (%s)", client.api_url)
    try:
        yield {_LIFESPAN_CLIENT_KEY: client}
    finally:
        await client.aclose()


mcp = FastMCP(
    "reviewthreads",
    lifespan=github_client_lifespan,
    instructions="""\
Tools for working with individual pull request review comments on GitHub:
fetch one, reply to it, and resolve the review thread it belongs to.

## Two kinds of IDs

- **comment_id** is the numeric REST ID of a review comment (e.g. `1234567890`).
- **thread_id** is the opaque GraphQL node ID of a review thread (e.g. `PRRT_kwDO...`).

They are not interchangeable. Never pass a comment ID as `thread_id`. If you only
have a comment ID, call `resolve_pull_request_review_thread` with `comment_id`,
`owner`, `repo` and `pull_number` and the thread is looked up for you.

## Workflow

1. `get_pull_request_comment` to read the comment.
2. Fix the code it points at.
3. `reply_to_pull_request_comment` explaining what changed. Each call posts a new
   reply, so do not retry a reply that succeeded.
4. `resolve_pull_request_review_thread` to close the thread.

## Thread lookup limit

Looking up a thread from a comment ID scans only the first 100 review threads of
the pull request and the first 10 comments of each. On very large pull requests
the lookup can miss; pass `thread_id` directly in that case.
""",
)


def _recovery_error(exc: Exception, *, tool_name: str) -> str:
    """Build the error text for a failed tool call.

    The original message is kept verbatim; a short hint is appended when the
    failure has a known remedy so agents can self-correct instead of retrying.
    """
    msg = str(exc)
    cause = exc.__cause__
    low = msg.lower()

    if isinstance(cause, GitHubAuthError):
        hint = "Check that GITHUB_PERSONAL_ACCESS_TOKEN is set and has access to the repository."
    elif "rate limit" in low:
        hint = "GitHub API rate limit hit. Wait before retrying."
    elif isinstance(exc, ThreadNotFoundError) and exc.truncated:
        hint = "The pull request is larger than the thread search window; pass thread_id directly."
    elif isinstance(exc, ThreadNotFoundError):
        hint = "Verify the comment belongs to this pull request."
    elif isinstance(exc, InvalidArgumentError):
        hint = ""
    elif isinstance(cause, GitHubError) and (cause.status_code == 404 or "could not resolve" in low):  # noqa: PLR2004
        hint = "Verify owner, repo, pull_number and the ID are correct."
    else:
        hint = ""

    text = f"{tool_name} failed: {msg}"
    return f"{text} {hint}" if hint else text


def _client() -> GitHubClient:
    """Return the GitHub client opened by the server lifespan."""
    ctx = get_context()
    return ctx.lifespan_context[_LIFESPAN_CLIENT_KEY]


def _default_owner_repo(owner: str | None, repo: str | None) -> tuple[str | None, str | None]:
    """Fill owner/repo from ``default_repo`` when both are omitted."""
    if owner or repo:
        return owner, repo
    default_repo = get_config().default_repo
    if not default_repo:
        return owner, repo
    default_owner, _, default_name = default_repo.partition("/")
    return default_owner, default_name


mcp.add_middleware(ErrorHandlingMiddleware(include_traceback=True, transform_errors=False))
mcp.add_middleware(TimingMiddleware())
mcp.add_middleware(LoggingMiddleware(include_payloads=True, max_payload_length=500))


@mcp.tool(tags={"query"})
async def get_pull_request_comment(
    comment_id: int,
    owner: str | None = None,
    repo: str | None = None,
) -> PullRequestComment:
    """Get a specific pull request review comment.

    GitHub addresses review comments per repository, so owner and repo are
    needed alongside comment_id. Pass them, or set REVIEWTHREADS_DEFAULT_REPO
    so they can be omitted.

    Args:
        comment_id: Numeric REST ID of the review comment.
        owner: Repository owner. Defaults to REVIEWTHREADS_DEFAULT_REPO when owner and repo are omitted.
        repo: Repository name.

    Returns:
        The review comment as returned by GitHub (id, body, in_reply_to_id, path, user, ...).
    """
    owner, repo = _default_owner_repo(owner, repo)
    try:
        return await comments.get_pull_request_comment(_client(), comment_id, owner=owner, repo=repo)  # type: ignore[arg-type]
    except ReviewThreadsError as exc:
        logger.exception("get_pull_request_comment failed for comment %s", comment_id)
        raise ToolError(_recovery_error(exc, tool_name="get_pull_request_comment")) from exc


@mcp.tool(tags={"command"})
async def reply_to_pull_request_comment(  # noqa: PLR0913, PLR0917
    owner: str,
    repo: str,
    pull_number: int,
    comment_id: int,
    body: str,
) -> PullRequestComment:
    """Reply to a specific pull request review comment.

    Each call posts a new reply; do not retry a reply that already succeeded.

    Args:
        owner: Repository owner.
        repo: Repository name.
        pull_number: Pull request number.
        comment_id: Numeric REST ID of the review comment to reply to.
        body: Reply text.

    Returns:
        The newly created reply comment; its in_reply_to_id is comment_id.
    """
    try:
        return await comments.reply_to_pull_request_comment(_client(), owner, repo, pull_number, comment_id, body)
    except ReviewThreadsError as exc:
        logger.exception("reply_to_pull_request_comment failed for comment %s on %s/%s#%s", comment_id, owner, repo, pull_number)
        raise ToolError(_recovery_error(exc, tool_name="reply_to_pull_request_comment")) from exc


@mcp.tool(tags={"command"})
async def resolve_pull_request_review_thread(
    thread_id: str | None = None,
    comment_id: int | None = None,
    owner: str | None = None,
    repo: str | None = None,
    pull_number: int | None = None,
) -> ResolveThreadResult:
    """Resolve a pull request review thread.

    Pass either thread_id (used directly) or comment_id together with owner,
    repo and pull_number (the thread containing the comment is looked up first).

    Args:
        thread_id: GraphQL node ID (PRRT_...) of the thread. Not a comment ID.
        comment_id: Numeric REST ID of any comment in the thread.
        owner: Repository owner (required with comment_id).
        repo: Repository name (required with comment_id).
        pull_number: Pull request number (required with comment_id).

    Returns:
        success, message, and the resolved thread's id and is_resolved flag.
    """
    try:
        return await comments.resolve_pull_request_review_thread(
            _client(),
            thread_id=thread_id,
            comment_id=comment_id,
            owner=owner,
            repo=repo,
            pull_number=pull_number,
        )
    except ReviewThreadsError as exc:
        logger.exception("resolve_pull_request_review_thread failed (thread_id=%s, comment_id=%s)", thread_id, comment_id)
        raise ToolError(_recovery_error(exc, tool_name="resolve_pull_request_review_thread")) from exc


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------


@mcp.prompt
def address_review_comment(comment_id: int, owner: str, repo: str, pull_number: int) -> str:
    """Workflow for addressing a single review comment end-to-end."""
    return f"""\
Address review comment {comment_id} on {owner}/{repo}#{pull_number}:

1. Call `get_pull_request_comment(comment_id={comment_id}, owner="{owner}", repo="{repo}")`
   and read the body, file path and line.
2. Make the change the comment asks for, or decide it is not actionable.
3. Call `reply_to_pull_request_comment` once, explaining what you changed (with the
   commit hash) or why no change is needed.
4. Call `resolve_pull_request_review_thread(comment_id={comment_id}, owner="{owner}",
   repo="{repo}", pull_number={pull_number})` to resolve the thread.

If the thread lookup fails because the pull request is too large, ask the user for
the thread ID (PRRT_...) and pass it as `thread_id`.
"""
