import logging
from typing import List, Optional

import httpx

from backend.app.core.errors import ErrorKind, Result
from backend.app.schema.search import GazetteerResult
from backend.app.service.query_builder import build_gazetteer_url
from backend.app.utils.global_state import GlobalState

# Configure logger
logger = logging.getLogger(__name__)

GazetteerLookup = Result[List[GazetteerResult]]


class GazetteerRepository:
    def __init__(self, client: Optional[httpx.AsyncClient] = None, base_url: Optional[str] = None):
        # Falls back to the shared client (Singleton pattern)
        self._client = client
        self.base_url = base_url

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client or GlobalState.get_http_client()

    async def query(self, names: List[str]) -> GazetteerLookup:
        """
        Looks up geometries for all names in one request.
        Failures come back as a failed Result; this method does not raise.
        """
        if not names:
            return GazetteerLookup.success([])

        url = build_gazetteer_url(names, self.base_url)

        try:
            response = await self.client.get(url, headers={"Accept": "application/json"})
        except httpx.HTTPError as e:
            logger.error(f"[Repo] Gazetteer query error: {e}")
            return GazetteerLookup.failure(ErrorKind.UPSTREAM_UNAVAILABLE, str(e))

        if not response.is_success:
            logger.error(f"[Repo] Gazetteer query failed: {response.status_code} {response.reason_phrase}")
            return GazetteerLookup.failure(ErrorKind.UPSTREAM_UNAVAILABLE, f"HTTP {response.status_code}")

        try:
            data = response.json()
            docs = data["response"]["docs"]
        except (ValueError, KeyError, TypeError) as e:
            logger.error(f"[Repo] Gazetteer returned an unexpected payload: {e}")
            return GazetteerLookup.failure(ErrorKind.MALFORMED_RESPONSE, str(e))

        if not isinstance(docs, list):
            logger.error("[Repo] Gazetteer response.docs is not a list")
            return GazetteerLookup.failure(ErrorKind.MALFORMED_RESPONSE, "response.docs is not a list")

        # Entries without a name or geometry are dropped
        results = [
            GazetteerResult(name=str(doc["name"]), geo=doc["geo"])
            for doc in docs
            if isinstance(doc, dict) and doc.get("name") and doc.get("geo")
        ]
        logger.info(f"[Repo] Gazetteer matched {len(results)}/{len(names)} names")
        return GazetteerLookup.success(results)
