# bonsai_gateway/services/upstream.py
from __future__ import annotations
from typing import Any, Optional
import logging
import requests

from bonsai_gateway.config import get_settings
from bonsai_gateway.core.errors import NotConfiguredError, UpstreamError

logger = logging.getLogger("bonsai.providers")


def wants_live(vendor: str, api_key: Optional[str], stub_without_key: bool = True) -> bool:
    """
    Pick the live or stub strategy for a vendor from PROVIDER_MODE.

    auto: live when a key is present, else stub (or NotConfiguredError for
    vendors without a development stub). stub: always stub. live: a key is
    required.
    """
    mode = get_settings().PROVIDER_MODE
    if mode == "stub":
        return False
    if api_key:
        return True
    if mode == "live" or not stub_without_key:
        raise NotConfiguredError(f"{vendor} API key not configured")
    return False


def bearer_headers(api_key: str) -> dict[str, str]:
    return {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }


def _snippet(text: str, api_key: str) -> str:
    # Mask the key if the server echoed it back
    return (text or "")[:200].replace(api_key, "***")


def call_upstream(
    vendor: str,
    method: str,
    url: str,
    api_key: str,
    *,
    json: Any = None,
    params: Any = None,
    timeout: Optional[float] = None,
) -> Any:
    """
    One bearer-authenticated JSON request to a vendor API.

    Returns the decoded JSON body (or None for an empty body). Raises
    UpstreamError on a non-2xx status, a network failure or an undecodable
    body.
    """
    timeout = timeout if timeout is not None else get_settings().UPSTREAM_TIMEOUT_SEC
    try:
        r = requests.request(
            method, url,
            headers=bearer_headers(api_key),
            json=json,
            params=params,
            timeout=timeout,
        )
    except requests.RequestException as e:
        logger.warning("%s %s %s failed: %s", vendor, method, url, e)
        raise UpstreamError(f"{vendor} request failed: {type(e).__name__}") from e

    if not r.ok:
        logger.warning("%s %s %s -> %s: %s", vendor, method, url, r.status_code, _snippet(r.text, api_key))
        raise UpstreamError(f"{vendor} API returned {r.status_code}", upstream_status=r.status_code)

    if not r.content:
        return None
    try:
        return r.json()
    except ValueError as e:
        raise UpstreamError(f"{vendor} API returned invalid JSON") from e
