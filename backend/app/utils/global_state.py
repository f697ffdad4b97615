import logging
from typing import Optional

import httpx

from backend.app.core.config import settings

# Configure logger
logger = logging.getLogger(__name__)


class GlobalState:
    _http_client: Optional[httpx.AsyncClient] = None

    @classmethod
    def get_http_client(cls) -> httpx.AsyncClient:
        """
        Shared async HTTP client for Voyager and the gazetteer (connection pooling).
        """
        if cls._http_client is None or cls._http_client.is_closed:
            logger.info("[Singleton] Creating HTTP client...")
            headers = {"Accept": "application/json"}
            if settings.API_KEY:
                headers["X-Access-Token"] = settings.API_KEY
            cls._http_client = httpx.AsyncClient(
                timeout=settings.HTTP_TIMEOUT,
                headers=headers,
                follow_redirects=True,
            )
        return cls._http_client

    @classmethod
    def set_http_client(cls, client: Optional[httpx.AsyncClient]) -> None:
        """
        Replaces the shared client (tests inject one backed by httpx.MockTransport).
        """
        cls._http_client = client

    @classmethod
    async def close(cls) -> None:
        if cls._http_client is not None and not cls._http_client.is_closed:
            await cls._http_client.aclose()
            logger.info("[Singleton] HTTP client closed.")
        cls._http_client = None


def init_resources():
    """
    Warm-up function to initialize all singletons during application startup.
    """
    GlobalState.get_http_client()
