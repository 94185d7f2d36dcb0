"""Fixtures for the Plan client tests."""

from unittest.mock import MagicMock

import pytest

from mcp_devops_plan.plan import PlanFetcher


@pytest.fixture
def plan_fetcher(plan_config, session_store):
    """A PlanFetcher whose HTTP session is a mock.

    Tests set ``plan_fetcher.session.request.side_effect`` to the responses
    the server should answer with, in order.
    """
    fetcher = PlanFetcher(config=plan_config, session_store=session_store)
    fetcher.session.request = MagicMock()
    fetcher.session.get = MagicMock()
    return fetcher
