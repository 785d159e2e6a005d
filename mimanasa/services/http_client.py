import logging
from typing import Optional

import httpx

from mimanasa.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


def create_http_client(
    config: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """Build the async client used for every backend call.

    ``transport`` lets tests route requests to an in-process stub backend.
    """
    config = config or default_settings

    limits = httpx.Limits(
        max_keepalive_connections=10,
        max_connections=20,
        keepalive_expiry=30.0,
    )

    timeout = httpx.Timeout(
        timeout=config.api_timeout,
        connect=config.api_connect_timeout,
    )

    base_url = config.api_base_url.rstrip("/") + "/"
    logger.debug(f"HTTP client targeting {base_url}")

    kwargs = {}
    if transport is not None:
        kwargs["transport"] = transport

    return httpx.AsyncClient(
        base_url=base_url,
        limits=limits,
        timeout=timeout,
        follow_redirects=True,
        # Content-Type is set per request (json= or files=)
        headers={
            "Accept": "application/json",
            "User-Agent": f"{config.app_name}/{config.app_version}",
        },
        **kwargs,
    )
