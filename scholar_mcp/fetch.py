# scholar_mcp/fetch.py -- Document fetcher
#
# Stateless apart from the pooled client. No retries: every failure is
# raised as TransportError and left to the caller.

import json
import logging
from contextlib import contextmanager
from typing import Any, Iterator, Optional

import httpx

from . import config
from .errors import TransportError, TransportTimeoutError

logger = logging.getLogger(__name__)

# =========================================================================
# GLOBAL HTTP CLIENT (Connection Pooling)
# =========================================================================

_client: Optional[httpx.AsyncClient] = None


def new_client(**kwargs) -> httpx.AsyncClient:
    """Client with the server's defaults; kwargs override (tests pass transport=)."""
    options = dict(
        timeout=httpx.Timeout(None, connect=10.0),
        follow_redirects=True,
        headers={"User-Agent": config.USER_AGENT},
        limits=httpx.Limits(max_keepalive_connections=20, max_connections=50),
    )
    options.update(kwargs)
    return httpx.AsyncClient(**options)


async def get_client() -> httpx.AsyncClient:
    """Get or create the shared HTTP client."""
    global _client
    if _client is None or _client.is_closed:
        _client = new_client()
    return _client


async def close_client() -> None:
    global _client
    if _client is not None and not _client.is_closed:
        await _client.aclose()
    _client = None


# =========================================================================
# FETCH
# =========================================================================


@contextmanager
def transport_errors(url: str) -> Iterator[None]:
    """Re-raise httpx failures inside the block as TransportError."""
    try:
        yield
    except httpx.TimeoutException as e:
        raise TransportTimeoutError(f"Request to {url} timed out: {e}", url=url) from e
    except httpx.HTTPStatusError as e:
        status = e.response.status_code
        raise TransportError(
            f"{url} returned {status}: {e.response.reason_phrase}",
            url=url,
            status_code=status,
        ) from e
    except httpx.RequestError as e:
        raise TransportError(f"Request to {url} failed: {e}", url=url) from e


async def fetch_text(
    client: httpx.AsyncClient,
    url: str,
    params: Optional[dict] = None,
    timeout: Optional[float] = None,
    headers: Optional[dict] = None,
) -> str:
    """GET url and return the body as text.

    timeout=None means no bound at all (catalog pages). A finite timeout
    turns httpx.TimeoutException into TransportTimeoutError.
    """
    logger.debug("GET %s params=%s timeout=%s", url, params, timeout)
    with transport_errors(url):
        r = await client.get(url, params=params, headers=headers, timeout=timeout)
        r.raise_for_status()
    return r.text


async def fetch_json(
    client: httpx.AsyncClient,
    url: str,
    params: Optional[dict] = None,
    timeout: Optional[float] = None,
) -> Any:
    text = await fetch_text(
        client, url, params=params, timeout=timeout, headers={"Accept": "application/json"}
    )
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise TransportError(f"{url} returned invalid JSON: {e}", url=url) from e
