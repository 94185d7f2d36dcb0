"""Main FastMCP server setup for IBM DevOps Plan integration."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import JSONResponse

from mcp_devops_plan.plan.config import PlanConfig
from mcp_devops_plan.plan.session import SessionStore
from mcp_devops_plan.utils.io import is_read_only_mode
from mcp_devops_plan.utils.lifecycle import ensure_clean_exit, setup_signal_handlers
from mcp_devops_plan.utils.logging import mask_sensitive

from .context import MainAppContext
from .plan import plan_mcp

logger = logging.getLogger("mcp-devops-plan.server.main")


async def health_check(request: Request) -> JSONResponse:
    return JSONResponse({"status": "ok"})


@asynccontextmanager
async def main_lifespan(app: FastMCP[MainAppContext]) -> AsyncIterator[dict]:
    logger.info("Main DevOps Plan MCP server lifespan starting...")
    read_only = is_read_only_mode()

    loaded_plan_config: PlanConfig | None = None
    try:
        loaded_plan_config = PlanConfig.from_env()
        logger.info(
            f"Plan configuration loaded (server: {loaded_plan_config.server_url}, "
            f"teamspace: {loaded_plan_config.teamspace_id}, "
            f"token: {mask_sensitive(loaded_plan_config.access_token)})"
        )
    except ValueError as e:
        logger.error(f"Plan is not configured, tools will report errors: {e}")

    app_context = MainAppContext(
        plan_config=loaded_plan_config,
        session_store=SessionStore(),
        read_only=read_only,
    )
    logger.info(f"Read-only mode: {'ENABLED' if read_only else 'DISABLED'}")

    try:
        yield {"app_lifespan_context": app_context}
    except Exception as e:
        logger.error(f"Error during lifespan: {e}", exc_info=True)
        raise
    finally:
        app_context.session_store.clear()
        logger.info("Main DevOps Plan MCP server lifespan shutdown complete.")


main_mcp = FastMCP(name="MCP DevOps Plan", lifespan=main_lifespan)
# Mounted without a prefix so tool names stay as clients know them.
main_mcp.mount(plan_mcp)


@main_mcp.custom_route("/healthz", methods=["GET"], include_in_schema=False)
async def _health_check_route(request: Request) -> JSONResponse:
    return await health_check(request)


async def run_server(transport: str = "stdio", port: int = 8000) -> None:
    """Run the DevOps Plan MCP server with the specified transport."""
    setup_signal_handlers()
    try:
        if transport == "stdio":
            await main_mcp.run_async(transport="stdio")
        else:
            logger.info(f"Listening on 0.0.0.0:{port} ({transport})")
            await main_mcp.run_async(
                transport=transport,
                host="0.0.0.0",  # noqa: S104
                port=port,
            )
    finally:
        ensure_clean_exit()
