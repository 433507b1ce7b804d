"""reviewthreads: MCP tools for GitHub pull request review comments and threads."""
