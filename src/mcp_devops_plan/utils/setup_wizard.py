"""Interactive wizard writing the Plan connection settings to a .env file."""

import logging
import os
from pathlib import Path

import click
from dotenv import load_dotenv, set_key

from .logging import mask_sensitive

logger = logging.getLogger("mcp-devops-plan.utils.setup_wizard")

SETTINGS = [
    ("PLAN_ACCESS_TOKEN", "Plan access token", True),
    ("PLAN_SERVER_URL", "Plan server URL (e.g., https://your-server.com/plan)", False),
    ("PLAN_TEAMSPACE_ID", "Teamspace ID", False),
]


def _sanitize_input(user_input: str) -> str:
    """Strip whitespace and Windows line endings from user input."""
    if not user_input:
        return user_input
    return user_input.strip().rstrip("\r\n").strip()


def _prompt_for_input(prompt: str, env_var: str, is_secret: bool = False) -> str:
    """Prompt for a value, offering the current environment value as default."""
    value = (os.getenv(env_var) or "").strip()
    if value:
        shown = mask_sensitive(value) if is_secret else value
        print(f"{prompt} [{shown}]: ", end="")
        user_input = _sanitize_input(input())
        return user_input if user_input else value
    print(f"{prompt}: ", end="")
    return _sanitize_input(input())


def write_env_file(env_path: Path, values: dict[str, str]) -> None:
    """Write settings into ``env_path``, keeping any other keys it holds."""
    env_path.touch(exist_ok=True)
    for key, value in values.items():
        set_key(str(env_path), key, value, quote_mode="never")


def run_setup(env_file: str = ".env") -> int:
    """Run the setup wizard interactively.

    Returns:
        Process exit code, 0 on success
    """
    env_path = Path(env_file)
    if env_path.exists():
        load_dotenv(env_path)

    print("\n=== MCP DevOps Plan Configuration Setup ===")
    print("Please provide the following information:\n")

    values: dict[str, str] = {}
    for env_var, prompt, is_secret in SETTINGS:
        value = _prompt_for_input(prompt, env_var, is_secret=is_secret)
        if not value:
            logger.error(f"{env_var} is required")
            return 1
        values[env_var] = value

    try:
        write_env_file(env_path, values)
    except OSError as e:
        logger.error(f"Error saving configuration: {e}")
        return 1

    print(f"\nConfiguration saved to {env_path}")
    print("You can now run the MCP server with: mcp-devops-plan")
    return 0


@click.command()
@click.option(
    "--env-file",
    default=".env",
    show_default=True,
    type=click.Path(dir_okay=False),
    help="Path of the .env file to write",
)
def main(env_file: str) -> None:
    """Configure the Plan access token, server URL and teamspace ID."""
    raise SystemExit(run_setup(env_file))
