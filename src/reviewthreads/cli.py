"""CLI for reviewthreads, built on cyclopts (same framework as FastMCP's CLI)."""

from __future__ import annotations

import os
import sys

import cyclopts

from reviewthreads.config import ENV_PREFIX, KNOWN_ENV_VARS

app = cyclopts.App(
    name="reviewthreads",
    help="reviewthreads: MCP server for GitHub pull request review comments and threads.",
)


@app.default
def serve() -> None:
    """Run the reviewthreads MCP server (default command)."""
    from reviewthreads.server import mcp  # noqa: PLC0415

    mcp.run()


@app.command(name="check-env")
def check_env() -> None:
    """Validate the environment and print a diagnostic summary.

    Lists REVIEWTHREADS_* variables and the GitHub token variables (masking
    secrets), flags unrecognized REVIEWTHREADS_* names, and validates the
    configuration.
    """
    from reviewthreads.github_api import TOKEN_ENV_VARS  # noqa: PLC0415

    print("reviewthreads check-env")
    print("=" * 40)

    # 1. REVIEWTHREADS_* variables
    rt_vars = {k: v for k, v in sorted(os.environ.items()) if k.startswith(ENV_PREFIX)}
    if not rt_vars:
        print(f"\nNo {ENV_PREFIX}* environment variables set.")
        print("Using all defaults (zero-config mode).")
    else:
        print(f"\nFound {len(rt_vars)} {ENV_PREFIX}* variable(s):\n")
        for key, value in rt_vars.items():
            marker = "" if _is_known_var(key) else "  ⚠️  UNRECOGNIZED"
            print(f"  {key} = {_mask_value(key, value)}{marker}")

    unknown = [k for k in rt_vars if not _is_known_var(k)]
    if unknown:
        print(f"\n⚠️  {len(unknown)} unrecognized variable(s) (possible typos):")
        for k in unknown:
            print(f"  - {k}")

    # 2. Config validation
    print("\n" + "-" * 40)
    print("Validating configuration...\n")
    try:
        from reviewthreads.config import load_config  # noqa: PLC0415

        config = load_config()
    except ValueError as exc:
        print(f"❌ Configuration error: {exc}")
        sys.exit(1)

    print(f"  api_url: {config.api_url}")
    print(f"  graphql_url: {config.graphql_url}")
    print(f"  default_repo: {config.default_repo or '(not set)'}")

    # 3. Token
    print("\n" + "-" * 40)
    print("Checking GitHub token...\n")
    found = [name for name in TOKEN_ENV_VARS if os.environ.get(name, "").strip()]
    if found:
        name = found[0]
        print(f"  ✅ Using {name} = {_mask_value(name, os.environ[name].strip())}")
    else:
        print(f"  ❌ No GitHub token found. Set one of: {', '.join(TOKEN_ENV_VARS)}")

    print()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_MASK_MIN_LENGTH = 4
_TRUNCATE_LENGTH = 80


def _is_known_var(key: str) -> bool:
    """Check if a REVIEWTHREADS_* var is a recognized setting."""
    return key in KNOWN_ENV_VARS


def _mask_value(key: str, value: str) -> str:
    """Mask sensitive values."""
    sensitive_keywords = ("token", "secret", "key", "password")
    if any(kw in key.lower() for kw in sensitive_keywords):
        if len(value) > _MASK_MIN_LENGTH:
            return value[:2] + "*" * (len(value) - _MASK_MIN_LENGTH) + value[-2:]
        return "****"
    if len(value) > _TRUNCATE_LENGTH:
        return value[: _TRUNCATE_LENGTH - 3] + "..."
    return value
