# backend/pokebattle/pokeapi_client.py

import httpx
import logging
from typing import Optional, Dict, Any

from .clients import get_client
from .config import settings
from .exceptions import (
    MalformedDataError, PokeAPIConnectionError, PokeAPIStatusError, ResourceNotFoundError
)
from .resilience import Result, attempt, linear_backoff

logger = logging.getLogger(__name__)


def resolve_url(endpoint: str) -> str:
    """Turns "/pokemon/25" into a full PokeAPI URL; absolute URLs are returned unchanged."""
    if endpoint.startswith("http"):
        return endpoint
    if not endpoint.startswith('/'):
        endpoint = '/' + endpoint
    return f"{settings.pokeapi_base_url.rstrip('/')}{endpoint}"


async def _get(client: httpx.AsyncClient, url: str) -> httpx.Response:
    """Single GET, with transport errors and non-success statuses raised as PokeAPIError."""
    logger.debug(f"Fetching data from PokeAPI: {url}")
    try:
        response = await client.get(url)
    except httpx.InvalidURL as e:
        # Not a RequestError: the request is never built, so retrying cannot help
        raise MalformedDataError(f"Invalid URL {url!r}: {e}") from e
    except httpx.TimeoutException as e:
        raise PokeAPIConnectionError(f"Request timed out for {url}") from e
    except httpx.RequestError as e:
        raise PokeAPIConnectionError(f"An error occurred while requesting {url}: {e}") from e

    if response.status_code == 404:
        raise ResourceNotFoundError(url, response.status_code)
    if not response.is_success:
        raise PokeAPIStatusError(url, response.status_code)
    logger.debug(f"Successfully fetched data from {url}, status: {response.status_code}")
    return response


async def fetch_pokeapi(endpoint: str, *, client: Optional[httpx.AsyncClient] = None) -> Result[Dict[str, Any]]:
    """
    Fetches JSON from a PokeAPI endpoint, retrying transient failures.

    Args:
        endpoint: The API endpoint path (e.g., "/pokemon/25") or a full URL.
        client: httpx client to use; defaults to the shared client.

    Returns:
        A Result holding the decoded JSON object, or the error that caused the
        fetch to fail after all attempts.
    """
    client = client or await get_client()
    url = resolve_url(endpoint)

    try:
        response_result = await attempt(
            lambda: _get(client, url),
            max_attempts=settings.max_fetch_attempts,
            backoff=linear_backoff(settings.retry_backoff_seconds),
        )
    except MalformedDataError as e:
        logger.error(f"Cannot request {url}: {e}")
        return Result.failure(e)
    if not response_result.ok:
        return Result.failure(response_result.error, attempts=response_result.attempts)

    try:
        payload = response_result.value.json()
    except ValueError as e:
        logger.error(f"Invalid JSON received from {url}: {e}")
        return Result.failure(MalformedDataError(f"Invalid JSON from {url}"), attempts=response_result.attempts)
    if not isinstance(payload, dict):
        return Result.failure(MalformedDataError(f"Expected a JSON object from {url}"), attempts=response_result.attempts)
    return Result.success(payload, attempts=response_result.attempts)
