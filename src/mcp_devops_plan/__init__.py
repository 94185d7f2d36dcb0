import asyncio
import os

import click
from dotenv import load_dotenv

__version__ = "0.1.0"

from .logging_config import log_operation, setup_logger

logger = setup_logger()


@click.command()
@click.option(
    "-v",
    "--verbose",
    count=True,
    help="Increase verbosity (can be used multiple times)",
)
@click.option(
    "--env-file", type=click.Path(exists=True, dir_okay=False), help="Path to .env file"
)
@click.option(
    "--transport",
    type=click.Choice(["stdio", "sse", "streamable-http"]),
    default="stdio",
    help="Transport type (stdio, sse or streamable-http)",
)
@click.option(
    "--port",
    default=8000,
    help="Port to listen on for HTTP transports",
)
@click.option(
    "--log-dir",
    help="Directory to store log files",
)
@click.option(
    "--log-to-file/--no-log-to-file",
    default=False,
    help="Enable/disable file logging",
)
@click.option("--token", help="Plan personal access token")
@click.option(
    "--server-url",
    help="Plan server URL (e.g., https://your-server.com/plan)",
)
@click.option("--teamspace-id", help="Plan teamspace ID")
@click.option(
    "--ssl-verify/--no-ssl-verify",
    default=None,
    help="Verify SSL certificates of the Plan server (default: verify)",
)
@click.option(
    "--read-only",
    is_flag=True,
    default=False,
    help="Disable all write tools",
)
def main(
    verbose: int,
    env_file: str | None,
    transport: str,
    port: int,
    log_dir: str | None,
    log_to_file: bool,
    token: str | None,
    server_url: str | None,
    teamspace_id: str | None,
    ssl_verify: bool | None,
    read_only: bool,
) -> None:
    """MCP DevOps Plan Server - IBM DevOps Plan work items, sprints and releases for MCP."""
    logging_level = None
    if verbose == 1:
        logging_level = "INFO"
    elif verbose >= 2:
        logging_level = "DEBUG"

    setup_logger(
        name="mcp-devops-plan",
        level=logging_level,
        log_to_file=log_to_file,
        log_dir=log_dir,
    )

    with log_operation(logger, "application_startup", app_version=__version__):
        # Flags override values from the .env file
        if env_file:
            logger.info(f"Loading environment from file: {env_file}")
            load_dotenv(env_file)
        else:
            logger.debug("Attempting to load environment from default .env file")
            load_dotenv()

        if token:
            os.environ["PLAN_ACCESS_TOKEN"] = token
        if server_url:
            os.environ["PLAN_SERVER_URL"] = server_url
        if teamspace_id:
            os.environ["PLAN_TEAMSPACE_ID"] = teamspace_id
        if ssl_verify is not None:
            os.environ["PLAN_SSL_VERIFY"] = str(ssl_verify).lower()
        if read_only:
            os.environ["READ_ONLY_MODE"] = "true"
        if log_dir:
            os.environ["LOG_DIR"] = log_dir

        from .servers import run_server

        logger.info(f"Starting MCP DevOps Plan v{__version__} with {transport} transport")
        asyncio.run(run_server(transport=transport, port=port))


__all__ = ["main", "__version__", "setup_logger", "log_operation"]
