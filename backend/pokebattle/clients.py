# backend/pokebattle/clients.py
import httpx
import logging
from typing import Optional

from .config import settings

logger = logging.getLogger(__name__)

_client: Optional[httpx.AsyncClient] = None


def build_client() -> httpx.AsyncClient:
    """New PokeAPI client configured from settings. The caller owns and closes it."""
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.request_timeout_seconds, connect=settings.connect_timeout_seconds),
        headers={"User-Agent": settings.user_agent},
        follow_redirects=True,
        limits=httpx.Limits(max_connections=settings.max_connections, max_keepalive_connections=settings.max_connections),
    )


async def get_client() -> httpx.AsyncClient:
    """The client shared by the pipeline and the API; rebuilt if it was closed."""
    global _client
    if _client is not None and not _client.is_closed:
        return _client
    logger.info("Opening shared PokeAPI client.")
    _client = build_client()
    return _client


async def close_client() -> None:
    global _client
    client, _client = _client, None
    if client is None:
        return
    if client.is_closed:
        logger.warning("Shared PokeAPI client was already closed.")
        return
    await client.aclose()
    logger.info("Shared PokeAPI client closed.")
