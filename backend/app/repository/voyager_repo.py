import logging
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import httpx

from backend.app.core.config import Settings, settings
from backend.app.core.errors import ErrorKind, Result
from backend.app.service.query_builder import Params, params_to_dict
from backend.app.utils.global_state import GlobalState

# Configure logger
logger = logging.getLogger(__name__)

VoyagerReply = Result[Dict[str, Any]]


class VoyagerRepository:
    def __init__(self, client: Optional[httpx.AsyncClient] = None, conf: Settings = settings):
        # Falls back to the shared client (Singleton pattern)
        self._client = client
        self.conf = conf

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client or GlobalState.get_http_client()

    @property
    def select_url(self) -> str:
        return self.conf.VOYAGER_BASE_URL.rstrip("/") + self.conf.VOYAGER_SELECT_PATH

    async def select(self, params: Params) -> VoyagerReply:
        """
        Runs a Solr select against Voyager.
        Uses GET unless the encoded URL is too long, then POSTs the same params form-encoded.
        Failures come back as a failed Result; this method does not raise.
        """
        url = f"{self.select_url}?{urlencode(params)}"

        try:
            if len(url) > self.conf.MAX_GET_URL_LENGTH:
                logger.debug(f"[Repo] URL length {len(url)} exceeds limit, using POST")
                response = await self.client.post(self.select_url, data=params_to_dict(params))
            else:
                response = await self.client.get(url)
        except httpx.HTTPError as e:
            logger.error(f"[Repo] Voyager request error: {e}")
            return VoyagerReply.failure(ErrorKind.UPSTREAM_UNAVAILABLE, str(e))

        if not response.is_success:
            logger.error(f"[Repo] Voyager query failed: {response.status_code} {response.reason_phrase}")
            return VoyagerReply.failure(ErrorKind.UPSTREAM_UNAVAILABLE, f"HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"[Repo] Voyager returned invalid JSON: {e}")
            return VoyagerReply.failure(ErrorKind.MALFORMED_RESPONSE, str(e))

        if not isinstance(data, dict):
            logger.error(f"[Repo] Voyager returned {type(data).__name__}, expected an object")
            return VoyagerReply.failure(ErrorKind.MALFORMED_RESPONSE, "response is not an object")

        return VoyagerReply.success(data)
