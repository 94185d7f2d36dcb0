"""Logging helpers shared across MCP DevOps Plan modules."""


def mask_sensitive(value: str | None, keep_chars: int = 4) -> str:
    """Mask a credential or cookie so that only its tail is visible in logs.

    Args:
        value: The sensitive string (token, cookie header, ...)
        keep_chars: Number of trailing characters to leave readable

    Returns:
        The masked string, or ``"Not Provided"`` for empty values
    """
    if not value:
        return "Not Provided"
    if len(value) <= keep_chars * 2:
        return "*" * len(value)
    return "*" * (len(value) - keep_chars) + value[-keep_chars:]
