"""FastMCP servers for mcp_devops_plan."""

from .main import main_mcp, run_server

__all__ = ["main_mcp", "run_server"]
