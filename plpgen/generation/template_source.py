# plpgen/generation/template_source.py
"""
Retrieves the .plp template over HTTP.
"""
from typing import Optional

import httpx

from plpgen.core.exceptions import TemplateFetchError
from plpgen.core.logging import log

DEFAULT_FETCH_TIMEOUT = 60.0


async def fetch_template_bytes(
    url: Optional[str],
    client: Optional[httpx.AsyncClient] = None,
    timeout: float = DEFAULT_FETCH_TIMEOUT,
) -> bytes:
    """
    Download the template once.

    Args:
        url: Template location; blank means not configured
        client: Shared client to reuse (tests pass one with a mock transport)
        timeout: Used only when this call creates its own client
    """
    url = (url or "").strip()
    if not url:
        raise TemplateFetchError("", "TEMPLATE_URL not set")

    log("TEMPLATE", f"Fetching template from {url}")
    try:
        if client is not None:
            response = await client.get(url)
        else:
            # follow_redirects=True handles raw.githubusercontent / release redirects
            async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as own_client:
                response = await own_client.get(url)
    except httpx.TimeoutException as e:
        raise TemplateFetchError(url, f"Template fetch timed out: {e}") from e
    except httpx.HTTPError as e:
        raise TemplateFetchError(url, f"Template fetch failed: {type(e).__name__}: {e}") from e

    if not response.is_success:
        raise TemplateFetchError(
            url,
            f"Template fetch failed: {response.status_code}",
            status_code=response.status_code,
        )

    log("TEMPLATE", f"Template downloaded ({len(response.content)} bytes)")
    return response.content
