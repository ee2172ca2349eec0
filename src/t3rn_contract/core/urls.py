"""Endpoint URL validation shared by the CLI and the manifest reader."""

from __future__ import annotations

from urllib.parse import urlparse

from t3rn_contract.exceptions import InvalidURLError

ALLOWED_SCHEMES: tuple[str, ...] = ("ws", "wss", "http", "https")


def validate_endpoint_url(url: str) -> str:
    """Return *url* stripped, or raise :class:`InvalidURLError`."""
    stripped = url.strip()
    if not stripped:
        raise InvalidURLError("URL must not be empty.")
    parsed = urlparse(stripped)
    if parsed.scheme not in ALLOWED_SCHEMES or not parsed.netloc:
        raise InvalidURLError(
            f"Invalid URL: {stripped}",
            hint="URL must look like ws://host:port (ws, wss, http or https).",
        )
    return stripped
