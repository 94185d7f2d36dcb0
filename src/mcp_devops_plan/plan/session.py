"""Session cookie acquisition and caching for the Plan REST API.

Besides the access token, every Plan REST call needs a session cookie that
is handed out by an unauthenticated bootstrap endpoint. The cookie is fetched
once and reused for the lifetime of the process; a cookie the server later
rejects is only replaced by restarting the server.
"""

import logging

import requests

from ..exceptions import SessionAcquisitionError
from ..utils.logging import mask_sensitive
from .config import PlanConfig
from .constants import SESSION_BOOTSTRAP_PATH

logger = logging.getLogger("mcp-devops-plan.plan.session")


class SessionStore:
    """Single slot holding the raw session cookie.

    One store is shared by every client created during the process lifetime.
    Concurrent first calls may each acquire a cookie; the last write wins.
    """

    def __init__(self, cookie: str | None = None) -> None:
        self._cookie = cookie or None

    def get(self) -> str | None:
        return self._cookie

    def set(self, cookie: str) -> None:
        self._cookie = cookie

    def clear(self) -> None:
        self._cookie = None

    @property
    def has_session(self) -> bool:
        return self._cookie is not None


class SessionManager:
    """Acquires the session cookie on first use and caches it in a SessionStore."""

    def __init__(
        self, config: PlanConfig, store: SessionStore, http: requests.Session
    ) -> None:
        self.config = config
        self.store = store
        self.http = http

    def ensure_session(self) -> str:
        """Return the cached cookie, acquiring it first if the store is empty.

        Raises:
            SessionAcquisitionError: If the server does not hand out a cookie
        """
        cookie = self.store.get()
        if cookie:
            logger.debug(f"Reusing stored session cookie {mask_sensitive(cookie)}")
            return cookie

        cookie = self._acquire()
        self.store.set(cookie)
        logger.debug(f"Received session cookie {mask_sensitive(cookie)}")
        return cookie

    def _acquire(self) -> str:
        url = f"{self.config.rest_url}{SESSION_BOOTSTRAP_PATH}"
        try:
            response = self.http.get(url, timeout=self.config.request_timeout)
        except requests.RequestException as e:
            logger.error(f"Error fetching session cookie from {url}: {e}")
            raise SessionAcquisitionError(f"Failed to retrieve cookies: {e}") from e

        if not response.ok:
            logger.error(
                f"Failed to fetch session cookie: {response.status_code} {response.reason}"
            )
            raise SessionAcquisitionError(
                f"Failed to retrieve cookies: {response.status_code} {response.reason}"
            )

        cookie = response.headers.get("set-cookie")
        if not cookie:
            logger.error("No cookies found in the session bootstrap response.")
            raise SessionAcquisitionError(
                "Failed to retrieve cookies: no cookies found in the response"
            )
        return cookie
