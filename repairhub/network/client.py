"""
HTTP transport factory for the Repair Hub API.

The caller owns the returned client and must close it
(``async with create_http_client() as http: ...``). Nothing here is cached
at module level, so tests can hand in an ``httpx.MockTransport``.
"""

import logging

import httpx

from repairhub.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


def _log_hooks(log_bodies: bool) -> dict:
    async def log_request(request: httpx.Request) -> None:
        logger.debug("Network: --> %s %s", request.method, request.url)
        if log_bodies and "content-length" in request.headers:
            # signup bodies carry the password; keep only the size
            logger.debug("Network: request body %s bytes", request.headers["content-length"])

    async def log_response(response: httpx.Response) -> None:
        request = response.request
        logger.debug(
            "Network: <-- %s %s %s",
            response.status_code,
            request.method,
            request.url,
        )
        if log_bodies:
            await response.aread()
            logger.debug("Network: response body %s", response.text[:500])

    return {"request": [log_request], "response": [log_response]}


def create_http_client(
    settings: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Build an ``httpx.AsyncClient`` pointed at ``API_BASE_URL``."""
    cfg = settings or default_settings
    timeout = cfg.HTTP_TIMEOUT_SECONDS
    logger.info("Initializing HTTP client with base URL: %s", cfg.API_BASE_URL)
    return httpx.AsyncClient(
        base_url=cfg.API_BASE_URL,
        timeout=httpx.Timeout(connect=timeout, read=timeout, write=timeout, pool=timeout),
        event_hooks=_log_hooks(cfg.HTTP_LOG_BODIES),
        transport=transport,
    )
