"""Configuration module for Plan API interactions."""

import os
from dataclasses import dataclass

from ..utils.env import get_env_float, get_env_int, is_env_ssl_verify
from .constants import (
    DEFAULT_QUERY_MAX_PAGES,
    DEFAULT_QUERY_PAGE_SIZE,
    DEFAULT_STATE_CHANGE_DELAY,
)


@dataclass
class PlanConfig:
    """Plan API configuration.

    The access token is an opaque credential sent as ``Authorization: Basic``;
    it is not necessarily a base64 ``username:password`` pair.
    """

    server_url: str  # Base URL of the Plan server
    access_token: str  # Opaque Plan access token
    teamspace_id: str  # Teamspace (repository) id
    ssl_verify: bool = True  # Whether to verify TLS certificates
    state_change_delay: float = DEFAULT_STATE_CHANGE_DELAY  # Seconds between action and commit
    query_page_size: int = DEFAULT_QUERY_PAGE_SIZE  # Rows requested per result page
    query_max_pages: int = DEFAULT_QUERY_MAX_PAGES  # Upper bound on pages per query
    request_timeout: float | None = None  # Per-request timeout, None keeps the transport default

    def __post_init__(self) -> None:
        self.server_url = self.server_url.rstrip("/")

    @property
    def rest_url(self) -> str:
        """Root of the Plan REST API."""
        return f"{self.server_url}/ccmweb/rest"

    @classmethod
    def from_env(cls) -> "PlanConfig":
        """Create configuration from environment variables.

        Returns:
            PlanConfig with values from environment variables

        Raises:
            ValueError: If required environment variables are missing or invalid
        """
        access_token = os.getenv("PLAN_ACCESS_TOKEN")
        server_url = os.getenv("PLAN_SERVER_URL")
        teamspace_id = os.getenv("PLAN_TEAMSPACE_ID")

        if not access_token:
            raise ValueError(
                "Personal access token is required. Set PLAN_ACCESS_TOKEN "
                "environment variable or use --token argument."
            )
        if not server_url:
            raise ValueError(
                "Server URL is required. Set PLAN_SERVER_URL environment "
                "variable or use --server-url argument."
            )
        if not teamspace_id:
            raise ValueError(
                "Teamspace ID is required. Set PLAN_TEAMSPACE_ID environment "
                "variable or use --teamspace-id argument."
            )

        # 0 or unset keeps the transport default
        request_timeout = get_env_float("PLAN_REQUEST_TIMEOUT", 0.0) or None

        return cls(
            server_url=server_url,
            access_token=access_token,
            teamspace_id=teamspace_id,
            ssl_verify=is_env_ssl_verify("PLAN_SSL_VERIFY"),
            state_change_delay=get_env_float(
                "PLAN_STATE_CHANGE_DELAY", DEFAULT_STATE_CHANGE_DELAY
            ),
            query_page_size=get_env_int("PLAN_QUERY_PAGE_SIZE", DEFAULT_QUERY_PAGE_SIZE),
            query_max_pages=get_env_int("PLAN_QUERY_MAX_PAGES", DEFAULT_QUERY_MAX_PAGES),
            request_timeout=request_timeout,
        )
