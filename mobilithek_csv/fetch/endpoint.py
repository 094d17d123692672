"""Fetch the response XML, directly or through the client-certificate helper."""

from __future__ import annotations

import json
import re
from pathlib import Path

from mobilithek_csv.common.config_loader import FetchSettings
from mobilithek_csv.common.constants import XML_ACCEPT
from mobilithek_csv.common.errors import FetchError
from mobilithek_csv.common.http import HttpClient, HttpResult, RetryConfig, TimeoutConfig
from mobilithek_csv.decode.base64_codec import encode_base64

_WHITESPACE = re.compile(r"\s+")
DIRECT_ERROR_BODY_LIMIT = 400


def validate_endpoint(endpoint: str | None) -> str:
    value = (endpoint or "").strip()
    if not value:
        raise FetchError("Endpoint is required.")
    if not value.startswith("https://"):
        raise FetchError("Endpoint must start with https://")
    return value


def helper_api_url(helper_url: str) -> str:
    return f"{helper_url.rstrip('/')}/api/fetch"


def build_helper_request(endpoint: str, p12_bytes: bytes, passphrase: str) -> dict[str, str]:
    return {
        "endpoint": endpoint,
        "p12Base64": encode_base64(p12_bytes),
        "passphrase": passphrase,
    }


def parse_helper_response(result: HttpResult, helper_url: str, snippet_chars: int = 220) -> str:
    """Turn a helper reply into response text, raising ``FetchError`` otherwise.

    Transport failures arrive as non-2xx statuses with ``{"error": ...}``;
    upstream failures as 200 with ``ok: false``.
    """
    try:
        body = json.loads(result.text)
    except ValueError as exc:
        raise FetchError(f"Helper server returned non-JSON ({result.status}). Is it running at {helper_url}?") from exc
    if not isinstance(body, dict):
        raise FetchError(f"Helper server returned an unexpected payload ({result.status}).")

    if not result.ok:
        raise FetchError(body.get("error") or f"Helper server error ({result.status}).")

    if not body.get("ok"):
        upstream_text = body.get("text")
        snippet = ""
        if isinstance(upstream_text, str):
            snippet = _WHITESPACE.sub(" ", upstream_text[:snippet_chars]).strip()
        message = f"Mobilithek returned {body.get('upstreamStatus')} {body.get('upstreamStatusText') or ''}."
        if snippet:
            message += f" Response: {snippet}"
        raise FetchError(message)

    text = body.get("text")
    if not isinstance(text, str):
        raise FetchError("Helper server did not return response text.")
    return text


def _timeout(settings: FetchSettings) -> TimeoutConfig:
    return TimeoutConfig(connect=settings.connect_timeout, read=settings.read_timeout)


def fetch_via_helper(
    endpoint: str,
    p12_path: Path,
    passphrase: str,
    settings: FetchSettings,
    client: HttpClient,
) -> str:
    if not p12_path.exists():
        raise FetchError(f"Certificate file not found: {p12_path}")
    payload = build_helper_request(validate_endpoint(endpoint), p12_path.read_bytes(), passphrase)
    try:
        result = client.post_json(helper_api_url(settings.helper_url), payload=payload, timeout=_timeout(settings))
    except FetchError as exc:
        raise FetchError(f"Cannot reach helper server at {settings.helper_url}: {exc}") from exc
    return parse_helper_response(result, settings.helper_url, settings.error_snippet_chars)


def fetch_direct(endpoint: str, settings: FetchSettings, client: HttpClient) -> str:
    result = client.get_text(
        validate_endpoint(endpoint),
        headers={"Accept": XML_ACCEPT, "Cache-Control": "no-store"},
        timeout=_timeout(settings),
    )
    if not result.ok:
        hint = f" Response: {result.text}" if result.text and len(result.text) < DIRECT_ERROR_BODY_LIMIT else ""
        raise FetchError(f"Fetch failed ({result.status} {result.reason}).{hint}")
    return result.text


def fetch_response(
    endpoint: str,
    *,
    settings: FetchSettings,
    p12_path: Path | None = None,
    passphrase: str = "",
    http_client: HttpClient | None = None,
) -> str:
    owns_client = http_client is None
    client = http_client or HttpClient(retry=RetryConfig(max_attempts=settings.max_attempts))
    try:
        if p12_path is not None:
            return fetch_via_helper(endpoint, p12_path, passphrase, settings, client)
        return fetch_direct(endpoint, settings, client)
    finally:
        if owns_client:
            client.close()
