"""Tests for lifecycle management utilities."""

import signal
from unittest.mock import MagicMock, patch

from mcp_devops_plan.utils.lifecycle import (
    _shutdown_event,
    ensure_clean_exit,
    is_shutdown_requested,
    setup_signal_handlers,
)


class TestSetupSignalHandlers:
    """Test signal handler setup functionality."""

    @patch("signal.signal")
    def test_registers_termination_signals(self, mock_signal):
        setup_signal_handlers()

        registered = [c.args[0] for c in mock_signal.call_args_list]
        assert signal.SIGTERM in registered
        assert signal.SIGINT in registered
        for c in mock_signal.call_args_list:
            assert callable(c.args[1])

    @patch("signal.signal")
    def test_handler_requests_shutdown(self, mock_signal):
        _shutdown_event.clear()
        setup_signal_handlers()
        handler = mock_signal.call_args_list[0].args[1]

        handler(signal.SIGTERM, None)

        assert is_shutdown_requested() is True
        _shutdown_event.clear()


class TestEnsureCleanExit:
    """Test the output flushing on exit."""

    def test_flushes_open_streams(self):
        stdout = MagicMock(closed=False)
        stderr = MagicMock(closed=True)
        with patch("sys.stdout", stdout), patch("sys.stderr", stderr):
            ensure_clean_exit()

        stdout.flush.assert_called_once()
        stderr.flush.assert_not_called()

    def test_flush_errors_are_ignored(self):
        stdout = MagicMock(closed=False)
        stdout.flush.side_effect = OSError("broken pipe")
        with patch("sys.stdout", stdout):
            ensure_clean_exit()
