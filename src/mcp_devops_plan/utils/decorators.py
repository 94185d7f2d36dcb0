import logging
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any, TypeVar

from fastmcp import Context

logger = logging.getLogger("mcp-devops-plan.utils.decorators")


F = TypeVar("F", bound=Callable[..., Awaitable[Any]])


def check_write_access(func: F) -> F:
    """
    Decorator for FastMCP tools to refuse writes when the server is read-only.

    Tools never raise past their boundary, so instead of raising the wrapper
    answers with an error text in read-only mode.
    Assumes the decorated function is async and has `ctx: Context` as its first argument.
    """

    @wraps(func)
    async def wrapper(ctx: Context, *args: Any, **kwargs: Any) -> Any:
        lifespan_ctx_dict = ctx.request_context.lifespan_context
        app_lifespan_ctx = (
            lifespan_ctx_dict.get("app_lifespan_context")
            if isinstance(lifespan_ctx_dict, dict)
            else None
        )  # type: ignore

        tool_name = func.__name__
        if app_lifespan_ctx is not None and app_lifespan_ctx.read_only:
            action_description = tool_name.replace("_", " ")
            logger.warning(f"Attempted to call tool '{tool_name}' in read-only mode.")
            return f"Error: Cannot {action_description} in read-only mode."

        return await func(ctx, *args, **kwargs)

    return wrapper  # type: ignore


def convert_empty_defaults_to_none(func: F) -> F:
    """
    Decorator that converts empty string arguments to None.
    MCP clients often send "" for optional string parameters they do not use.
    """

    @wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        for key, value in kwargs.items():
            if value == "":
                kwargs[key] = None
        return await func(*args, **kwargs)

    return wrapper  # type: ignore
