"""Unit tests for the mcp-devops-plan command line entry point."""

import os
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from mcp_devops_plan import main


@pytest.fixture
def mock_run():
    """Patch server start-up so that main only prepares the environment."""
    run_server = MagicMock(return_value="server-coroutine")
    with (
        patch("mcp_devops_plan.servers.run_server", run_server),
        patch("mcp_devops_plan.asyncio.run") as asyncio_run,
        patch("mcp_devops_plan.load_dotenv") as load_dotenv,
        patch("mcp_devops_plan.setup_logger"),
    ):
        yield run_server, asyncio_run, load_dotenv


class TestMain:
    """Test the main function's option handling."""

    def test_defaults_to_stdio(self, mock_run):
        run_server, asyncio_run, _ = mock_run
        with patch.dict(os.environ, {}, clear=True):
            result = CliRunner().invoke(main, [])

        assert result.exit_code == 0, result.output
        run_server.assert_called_once_with(transport="stdio", port=8000)
        asyncio_run.assert_called_once_with("server-coroutine")

    def test_flags_are_copied_to_environment(self, mock_run):
        with patch.dict(os.environ, {}, clear=True):
            result = CliRunner().invoke(
                main,
                [
                    "--token",
                    "tok",
                    "--server-url",
                    "https://plan.example.com/plan",
                    "--teamspace-id",
                    "ts-1",
                    "--no-ssl-verify",
                    "--read-only",
                ],
            )
            env = dict(os.environ)

        assert result.exit_code == 0, result.output
        assert env["PLAN_ACCESS_TOKEN"] == "tok"
        assert env["PLAN_SERVER_URL"] == "https://plan.example.com/plan"
        assert env["PLAN_TEAMSPACE_ID"] == "ts-1"
        assert env["PLAN_SSL_VERIFY"] == "false"
        assert env["READ_ONLY_MODE"] == "true"

    def test_ssl_verify_untouched_by_default(self, mock_run):
        with patch.dict(os.environ, {}, clear=True):
            CliRunner().invoke(main, [])
            assert "PLAN_SSL_VERIFY" not in os.environ

    def test_http_transport_and_port(self, mock_run):
        run_server, _, _ = mock_run
        with patch.dict(os.environ, {}, clear=True):
            result = CliRunner().invoke(
                main, ["--transport", "streamable-http", "--port", "9100"]
            )

        assert result.exit_code == 0, result.output
        run_server.assert_called_once_with(transport="streamable-http", port=9100)

    def test_env_file_is_loaded(self, mock_run, tmp_path):
        _, _, load_dotenv = mock_run
        env_file = tmp_path / "plan.env"
        env_file.write_text("PLAN_TEAMSPACE_ID=ts-9\n")

        with patch.dict(os.environ, {}, clear=True):
            result = CliRunner().invoke(main, ["--env-file", str(env_file)])

        assert result.exit_code == 0, result.output
        load_dotenv.assert_called_once_with(str(env_file))
