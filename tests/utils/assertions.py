"""Custom assertions and helpers for MCP DevOps Plan tests."""

from typing import Any
from unittest.mock import MagicMock


def sent_requests(
    request_mock: MagicMock,
) -> list[tuple[str, str, dict[str, str] | None, Any]]:
    """(method, url, params, json) of every call made through ``request_mock``."""
    return [
        (c.args[0], c.args[1], c.kwargs.get("params"), c.kwargs.get("json"))
        for c in request_mock.call_args_list
    ]


def assert_field_has_full_metadata(field: dict[str, Any]) -> None:
    """Assert a Commit field carries every metadata key the server requires."""
    expected_keys = {
        "name",
        "value",
        "valueStatus",
        "validationStatus",
        "requiredness",
        "requirednessForUser",
        "type",
        "valueAsList",
        "messageText",
        "maxLength",
    }
    missing = expected_keys - field.keys()
    assert not missing, f"Commit field {field.get('name')} lacks {sorted(missing)}"
