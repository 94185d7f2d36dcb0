"""Tests for the base Plan client."""

from unittest.mock import MagicMock, patch

import pytest
import requests

from mcp_devops_plan.exceptions import (
    MCPDevOpsPlanAuthenticationError,
    PlanAPIError,
    TransportError,
)
from mcp_devops_plan.plan.client import PlanClient
from mcp_devops_plan.plan.config import PlanConfig
from mcp_devops_plan.plan.session import SessionStore
from tests.utils.factories import ResponseFactory


@pytest.fixture
def client(plan_config, session_store):
    plan_client = PlanClient(config=plan_config, session_store=session_store)
    plan_client.session.request = MagicMock()
    return plan_client


class TestPlanClient:
    """Test class for PlanClient."""

    def test_client_init(self, plan_config):
        """Test initializing PlanClient with a config object."""
        client = PlanClient(plan_config)

        assert client.config == plan_config
        assert client.session.headers["Content-Type"] == "application/json"
        assert client.session.headers["Accept"] == "application/json"
        assert client.session.verify is True
        assert client.session_store.has_session is False

    @patch("mcp_devops_plan.plan.config.PlanConfig.from_env")
    def test_client_init_from_env(self, mock_from_env):
        """Test initializing PlanClient from environment variables."""
        mock_config = PlanConfig(
            server_url="https://plan.example.com", access_token="t", teamspace_id="ts"
        )
        mock_from_env.return_value = mock_config

        client = PlanClient()

        assert client.config == mock_config
        assert mock_from_env.called

    def test_ssl_verify_disabled(self):
        """Test that TLS verification can be turned off."""
        config = PlanConfig(
            server_url="https://plan.example.com",
            access_token="t",
            teamspace_id="ts",
            ssl_verify=False,
        )
        client = PlanClient(config)
        assert client.session.verify is False

    def test_request_sends_auth_headers(self, client):
        """Test that token and cookie accompany every request."""
        client.session.request.return_value = ResponseFactory.ok([{"dbId": "1"}])

        result = client._request("GET", "/repos/ts-1/databases")

        assert result == [{"dbId": "1"}]
        call = client.session.request.call_args
        assert call.args == ("GET", "https://plan.example.com/plan/ccmweb/rest/repos/ts-1/databases")
        assert call.kwargs["headers"] == {
            "Authorization": "Basic dGVzdC10b2tlbg==",
            "Cookie": "JSESSIONID=abc123; Path=/",
        }

    @pytest.mark.parametrize("status_code", [401, 403])
    def test_request_authentication_error(self, client, status_code):
        client.session.request.return_value = ResponseFactory.error(status_code)

        with pytest.raises(MCPDevOpsPlanAuthenticationError):
            client._request("GET", "/x")

    def test_request_api_error(self, client):
        """Test that other failures carry the status and body."""
        client.session.request.return_value = ResponseFactory.error(500, "boom")

        with pytest.raises(PlanAPIError) as exc_info:
            client._request("GET", "/x")

        assert exc_info.value.status_code == 500
        assert exc_info.value.body == "boom"
        assert "500" in str(exc_info.value)

    def test_request_transport_error(self, client):
        client.session.request.side_effect = requests.Timeout("timed out")

        with pytest.raises(TransportError, match="timed out"):
            client._request("GET", "/x")

    def test_request_empty_body(self, client):
        client.session.request.return_value = ResponseFactory.ok()

        assert client._request("GET", "/x") is None

    def test_session_acquired_once_across_clients(self, plan_config):
        """Test that clients sharing a store bootstrap the session only once."""
        store = SessionStore()
        bootstrap = ResponseFactory.create(
            200, {}, headers={"set-cookie": "JSESSIONID=shared"}
        )
        first = PlanClient(plan_config, store)
        first.session.get = MagicMock(return_value=bootstrap)
        first.session.request = MagicMock(return_value=ResponseFactory.ok({}))
        second = PlanClient(plan_config, store)
        second.session.get = MagicMock()
        second.session.request = MagicMock(return_value=ResponseFactory.ok({}))

        first._request("GET", "/a")
        second._request("GET", "/b")

        first.session.get.assert_called_once()
        second.session.get.assert_not_called()
        assert second.session.request.call_args.kwargs["headers"]["Cookie"] == "JSESSIONID=shared"
