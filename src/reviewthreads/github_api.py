"""GitHub API client using httpx with token authentication.

One :class:`GitHubClient` is built at server startup and handed to every tool.
It speaks both of GitHub's interfaces: REST for individual review comments and
GraphQL for review threads, which have no REST equivalent.

The token is read from the environment, in order:
1. ``GITHUB_PERSONAL_ACCESS_TOKEN``
2. ``GH_TOKEN``
3. ``GITHUB_TOKEN``
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, Any, Self

import httpx

from reviewthreads.config import DEFAULT_API_URL

if TYPE_CHECKING:
    from collections.abc import Mapping
    from types import TracebackType

logger = logging.getLogger(__name__)

TOKEN_ENV_VARS = ("GITHUB_PERSONAL_ACCESS_TOKEN", "GH_TOKEN", "GITHUB_TOKEN")
TOKEN_CREATE_URL = "https://github.com/settings/tokens/new?scopes=repo&description=reviewthreads"  # noqa: S105

_HTTP_UNAUTHORIZED = 401
_HTTP_FORBIDDEN = 403


# ---------------------------------------------------------------------------
# Error types
# ---------------------------------------------------------------------------


class GitHubError(Exception):
    """Raised when a GitHub API call fails."""

    def __init__(self, message: str, status_code: int = 0) -> None:
        super().__init__(message)
        self.status_code = status_code


class GitHubAuthError(GitHubError):
    """Raised when GitHub authentication fails or no token is available."""

    def __init__(self, detail: str = "") -> None:
        msg = (
            "GitHub token not found. "
            f"Set one of {', '.join(TOKEN_ENV_VARS)}.\n"
            f"Create a token (permissions pre-filled): {TOKEN_CREATE_URL}"
        )
        if detail:
            msg = f"{detail}\n{msg}"
        super().__init__(msg, status_code=_HTTP_UNAUTHORIZED)


# ---------------------------------------------------------------------------
# Token resolution
# ---------------------------------------------------------------------------


def resolve_token(environ: Mapping[str, str] | None = None) -> str | None:
    """Return the first non-empty token from :data:`TOKEN_ENV_VARS`, or ``None``."""
    env = os.environ if environ is None else environ
    for name in TOKEN_ENV_VARS:
        token = env.get(name, "").strip()
        if token:
            logger.debug("GitHub token resolved from %s", name)
            return token
    return None


# ---------------------------------------------------------------------------
# Response handling
# ---------------------------------------------------------------------------


def _raise_for_status(response: httpx.Response) -> None:
    """Raise appropriate :exc:`GitHubError` subclass for non-2xx responses."""
    if response.is_success:
        return

    if response.status_code == _HTTP_UNAUTHORIZED:
        raise GitHubAuthError("GitHub rejected the token (401 Unauthorized).")

    try:
        body = response.json()
        msg = body.get("message", response.text)
    except Exception:
        msg = response.text

    if response.status_code == _HTTP_FORBIDDEN:
        if "rate limit" in msg.lower():
            msg = f"GitHub API rate limit exceeded: {msg}"
            raise GitHubError(msg, status_code=_HTTP_FORBIDDEN)
        msg = f"GitHub API access forbidden: {msg}"
        raise GitHubAuthError(msg)

    msg = f"GitHub API error {response.status_code}: {msg}"
    raise GitHubError(msg, status_code=response.status_code)


def _decode_json(response: httpx.Response) -> Any:
    """Parse a successful response body, raising :exc:`GitHubError` on malformed JSON."""
    try:
        return response.json()
    except ValueError as exc:
        msg = f"GitHub API returned invalid JSON ({response.status_code}): {exc}"
        raise GitHubError(msg, status_code=response.status_code) from exc


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class GitHubClient:
    """Authenticated access to GitHub's REST and GraphQL APIs.

    Safe to share between concurrent tool calls: it holds no per-request
    state beyond the underlying :class:`httpx.AsyncClient` connection pool.
    """

    def __init__(
        self,
        token: str,
        *,
        api_url: str = DEFAULT_API_URL,
        graphql_url: str | None = None,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        if not token:
            raise GitHubAuthError
        self.api_url = api_url.rstrip("/")
        self.graphql_url = graphql_url or f"{self.api_url}/graphql"
        self._headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        self._http = http or httpx.AsyncClient()

    @classmethod
    def from_env(
        cls,
        *,
        api_url: str = DEFAULT_API_URL,
        graphql_url: str | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> GitHubClient:
        """Build a client from the token in the process environment.

        Raises:
            GitHubAuthError: If no token variable is set.
        """
        token = resolve_token(environ)
        if token is None:
            raise GitHubAuthError
        return cls(token, api_url=api_url, graphql_url=graphql_url)

    async def aclose(self) -> None:
        """Close the underlying HTTP connection pool."""
        await self._http.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def graphql(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        """Execute a GitHub GraphQL query or mutation.

        Args:
            query: GraphQL query or mutation string.
            variables: Optional variables dict.

        Returns:
            Parsed JSON response dict (full envelope including ``data``).

        Raises:
            GitHubError: On GraphQL errors, network or HTTP failure, or a malformed body.
            GitHubAuthError: On authentication failure.
        """
        is_mutation = query.strip().lower().startswith("mutation")
        payload: dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = variables

        logger.debug("GraphQL %s", "mutation" if is_mutation else "query")
        try:
            response = await self._http.post(self.graphql_url, headers=self._headers, json=payload)
        except httpx.HTTPError as exc:
            msg = f"GitHub API request failed: {exc!r}"
            raise GitHubError(msg) from exc

        _raise_for_status(response)
        result: dict[str, Any] = _decode_json(response)

        errors = result.get("errors")
        if errors:
            messages = "; ".join(e.get("message", str(e)) for e in errors)
            msg = f"GraphQL error: {messages}"
            raise GitHubError(msg)

        return result

    async def rest(self, endpoint: str, method: str = "GET", **kwargs: Any) -> Any:
        """Execute a single GitHub REST API call.

        Args:
            endpoint: REST API endpoint path (e.g. ``/repos/owner/repo/pulls/comments/1``).
            method: HTTP method (default ``GET``).
            **kwargs: Query parameters (GET) or JSON body fields (non-GET).

        Returns:
            Parsed JSON response, or ``None`` for an empty body.

        Raises:
            GitHubError: On network or HTTP failure, or a malformed body.
            GitHubAuthError: On authentication failure.
        """
        upper = method.upper()
        params = dict(kwargs) if upper == "GET" and kwargs else None
        json_body = dict(kwargs) if upper != "GET" and kwargs else None

        logger.debug("REST %s %s", upper, endpoint)
        try:
            response = await self._http.request(
                upper,
                f"{self.api_url}{endpoint}",
                headers=self._headers,
                params=params,
                json=json_body,
            )
        except httpx.HTTPError as exc:
            msg = f"GitHub API request failed: {exc!r}"
            raise GitHubError(msg) from exc

        _raise_for_status(response)
        if not response.content:
            return None
        return _decode_json(response)
