"""
Source document retrieval.
"""
import logging
from typing import Optional

import httpx

from quickink.pdf.errors import FetchError
from quickink.utils.logging import fingerprint

logger = logging.getLogger(__name__)


async def fetch_document(url: str, client: Optional[httpx.AsyncClient] = None) -> bytes:
    """
    Download a document with a single GET request.

    Args:
        url: Source document URL
        client: Shared client to use; a short-lived one is created otherwise

    Returns:
        Full response body

    Raises:
        FetchError: On transport failure or a non-2xx response
    """
    try:
        if client is not None:
            response = await client.get(url, follow_redirects=True)
        else:
            async with httpx.AsyncClient(follow_redirects=True) as own_client:
                response = await own_client.get(url)
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        logger.warning(f"Fetching source document {fingerprint(url, 'url_')} failed: {e}")
        raise FetchError(f"Failed to fetch PDF from URL: {e}")

    if not response.is_success:
        logger.warning(
            f"Fetching source document {fingerprint(url, 'url_')} returned "
            f"{response.status_code} {response.reason_phrase}"
        )
        raise FetchError(
            f"Failed to fetch PDF from URL: {response.status_code} {response.reason_phrase}",
            status_code=response.status_code,
            reason=response.reason_phrase,
        )

    logger.info(f"Fetched source document {fingerprint(url, 'url_')} ({len(response.content)} bytes)")
    return response.content
