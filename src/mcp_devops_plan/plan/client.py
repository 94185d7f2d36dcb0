"""Base client module for Plan REST API interactions."""

import logging
from typing import Any

import requests

from ..exceptions import (
    MCPDevOpsPlanAuthenticationError,
    PlanAPIError,
    TransportError,
)
from .config import PlanConfig
from .session import SessionManager, SessionStore

logger = logging.getLogger("mcp-devops-plan.plan.client")


class PlanClient:
    """Base client for Plan REST API interactions."""

    def __init__(
        self,
        config: PlanConfig | None = None,
        session_store: SessionStore | None = None,
    ) -> None:
        """Initialize the Plan client with configuration options.

        Args:
            config: Optional configuration object (will use env vars if not provided)
            session_store: Store holding the session cookie. Pass the process-wide
                store so that the cookie is acquired once and shared.

        Raises:
            ValueError: If configuration is invalid or required settings are missing
        """
        self.config = config or PlanConfig.from_env()

        self.session = requests.Session()
        self.session.headers.update(
            {"Content-Type": "application/json", "Accept": "application/json"}
        )
        self.session.verify = self.config.ssl_verify
        if not self.config.ssl_verify:
            logger.warning(
                f"TLS verification disabled for Plan server {self.config.server_url}. "
                "This is insecure and should only be used in testing environments."
            )

        self.session_store = session_store if session_store is not None else SessionStore()
        self.session_manager = SessionManager(
            self.config, self.session_store, self.session
        )

    def _path(self, template: str, **kwargs: Any) -> str:
        """Fill an endpoint template with the teamspace and the given values."""
        return template.format(teamspace=self.config.teamspace_id, **kwargs)

    def _auth_headers(self) -> dict[str, str]:
        cookie = self.session_manager.ensure_session()
        return {
            "Authorization": f"Basic {self.config.access_token}",
            "Cookie": cookie,
        }

    def _send(
        self,
        method: str,
        path: str,
        params: dict[str, str] | None = None,
        json_body: Any = None,
        headers: dict[str, str] | None = None,
    ) -> requests.Response:
        """Send an authenticated request and return the raw response.

        Non-2xx statuses are returned, not raised; callers classify them.

        Raises:
            SessionAcquisitionError: If no session cookie can be obtained
            TransportError: If the request fails at the network level
        """
        request_headers = self._auth_headers()
        if headers:
            request_headers.update(headers)

        url = f"{self.config.rest_url}{path}"
        logger.debug(f"{method} {url} params={params}")
        try:
            return self.session.request(
                method,
                url,
                params=params,
                json=json_body,
                headers=request_headers,
                timeout=self.config.request_timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Network error during {method} {path}: {e}")
            raise TransportError(f"Network error during {method} {path}: {e}") from e

    def _request(
        self,
        method: str,
        path: str,
        params: dict[str, str] | None = None,
        json_body: Any = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """Send an authenticated request and return the parsed JSON body.

        Returns:
            API response parsed as JSON, or None if no content

        Raises:
            MCPDevOpsPlanAuthenticationError: On 401/403
            PlanAPIError: On any other non-2xx status or a non-JSON body
        """
        response = self._send(method, path, params=params, json_body=json_body, headers=headers)
        if response.status_code in (401, 403):
            error_msg = (
                f"Authentication failed for Plan API ({response.status_code}). "
                "Token may be expired or invalid. Please verify credentials."
            )
            logger.error(error_msg)
            raise MCPDevOpsPlanAuthenticationError(error_msg)
        if not response.ok:
            logger.error(f"Plan API error {response.status_code} for {method} {path}")
            logger.debug(f"Error response: {response.text}")
            raise PlanAPIError(response.status_code, response.text)
        return self._parse_json(response)

    @staticmethod
    def _parse_json(response: requests.Response, strict: bool = True) -> Any:
        """Parse a JSON body; non-JSON bodies raise unless ``strict`` is False."""
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            if not strict:
                return None
            raise PlanAPIError(
                response.status_code,
                response.text,
                f"Unexpected non-JSON response from Plan server: {response.text[:200]}",
            ) from e
