"""Shared fixtures for the MCP DevOps Plan test suite."""

from unittest.mock import MagicMock

import pytest

from mcp_devops_plan.plan.config import PlanConfig
from mcp_devops_plan.plan.session import SessionStore
from tests.utils.factories import ResponseFactory


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def plan_config():
    """A PlanConfig with no state-change wait, suitable for unit tests."""
    return PlanConfig(
        server_url="https://plan.example.com/plan/",
        access_token="dGVzdC10b2tlbg==",
        teamspace_id="ts-1",
        state_change_delay=0.0,
        query_page_size=2,
        query_max_pages=5,
    )


@pytest.fixture
def session_store():
    """A session store already holding a cookie, so no bootstrap call is made."""
    return SessionStore("JSESSIONID=abc123; Path=/")


@pytest.fixture
def mock_http():
    """Mock of requests.Session.request returning canned responses in order."""
    return MagicMock(return_value=ResponseFactory.ok({}))
