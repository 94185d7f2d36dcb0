"""Dependency provider for PlanFetcher with context awareness.

Provides get_plan_fetcher for use in tool functions.
"""

from __future__ import annotations

import logging

from fastmcp import Context

from mcp_devops_plan.plan import PlanFetcher
from mcp_devops_plan.servers.context import MainAppContext

logger = logging.getLogger("mcp-devops-plan.servers.dependencies")


async def get_plan_fetcher(ctx: Context) -> PlanFetcher:
    """Returns a PlanFetcher bound to the server's config and session slot.

    Fetchers are cheap and built per call; the session cookie lives in the
    process-wide store so it is acquired once and reused by every call.

    Raises:
        ValueError: If the Plan connection is not configured
    """
    lifespan_ctx_dict = ctx.request_context.lifespan_context
    app_lifespan_ctx: MainAppContext | None = (
        lifespan_ctx_dict.get("app_lifespan_context")
        if isinstance(lifespan_ctx_dict, dict)
        else None
    )
    if app_lifespan_ctx is None or app_lifespan_ctx.plan_config is None:
        logger.error("Plan configuration could not be resolved.")
        raise ValueError(
            "Plan client (fetcher) not available. Ensure PLAN_ACCESS_TOKEN, "
            "PLAN_SERVER_URL and PLAN_TEAMSPACE_ID are configured."
        )

    logger.debug("get_plan_fetcher: Creating PlanFetcher from lifespan config.")
    return PlanFetcher(
        config=app_lifespan_ctx.plan_config,
        session_store=app_lifespan_ctx.session_store,
    )
