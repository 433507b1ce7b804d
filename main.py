"""Main entry point for reviewthreads."""

from reviewthreads.server import mcp


def main() -> None:
    """Run the reviewthreads MCP server."""
    mcp.run()


if __name__ == "__main__":
    main()
