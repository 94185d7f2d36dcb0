"""Entry point for running the MCP DevOps Plan server."""

from mcp_devops_plan import main

if __name__ == "__main__":
    main()
