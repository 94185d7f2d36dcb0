"""Lifecycle management utilities for graceful shutdown and signal handling."""

import logging
import signal
import sys
import threading
from typing import Any

logger = logging.getLogger("mcp-devops-plan.utils.lifecycle")

_shutdown_event = threading.Event()


def setup_signal_handlers() -> None:
    """Set up signal handlers for graceful shutdown.

    Registers handlers for SIGTERM, SIGINT and, where the platform has it,
    SIGPIPE. The stdio transport writes to a pipe owned by the MCP client;
    without a SIGPIPE handler the process dies when that client disconnects.
    """

    def signal_handler(signum: int, frame: Any) -> None:
        # Only set the event; signal handlers must stay minimal.
        _shutdown_event.set()

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)

    if hasattr(signal, "SIGPIPE"):
        signal.signal(signal.SIGPIPE, signal_handler)
        logger.debug("SIGPIPE handler registered")
    else:
        logger.debug("SIGPIPE not available on this platform")


def is_shutdown_requested() -> bool:
    """Return True once a termination signal has been received."""
    return _shutdown_event.is_set()


def ensure_clean_exit() -> None:
    """Flush output streams before exit.

    Streams may already be closed by the parent process, so failures to
    flush are logged at debug level and otherwise ignored.
    """
    logger.info("Server stopped, flushing output streams...")

    for stream_name in ("stdout", "stderr"):
        stream = getattr(sys, stream_name)
        try:
            if hasattr(stream, "closed") and not stream.closed:
                stream.flush()
        except (ValueError, OSError, AttributeError) as e:
            logger.debug(f"Could not flush {stream_name}: {e}")

    logger.debug("Output streams flushed, exiting gracefully")
