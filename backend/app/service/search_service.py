import time
import asyncio
import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from backend.app.core.config import Settings, settings
from backend.app.repository.gazetteer_repo import GazetteerRepository
from backend.app.repository.voyager_repo import VoyagerRepository
from backend.app.schema.search import (
    SearchFilters, SearchResultItem, SearchResponse, FacetResponse, GazetteerResult,
)
from backend.app.service.facet_service import parse_facet_response
from backend.app.service.query_builder import (
    build_search_params, build_facet_params, build_filter_fragment, parse_bbox,
)
from backend.app.utils.format_utils import get_format_display_name

# Configure Logger
logger = logging.getLogger(__name__)

STATUS_OK = "success"
STATUS_DEGRADED = "degraded"


def _as_str(value: Any) -> Optional[str]:
    # Multi-valued Solr fields display their first value
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    if value is None or isinstance(value, dict):
        return None
    return str(value)


def _first_str(doc: Dict[str, Any], *keys: str) -> Optional[str]:
    for key in keys:
        value = _as_str(doc.get(key))
        if value:
            return value
    return None


def _as_str_list(value: Any) -> List[str]:
    if not value:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value if not isinstance(v, dict)]
    return [str(value)]


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def to_search_result(doc: Dict[str, Any]) -> SearchResultItem:
    """
    Maps a raw Voyager doc into the display record used by the results list.
    Scalar fields tolerate multi-valued input by keeping the first value.
    """
    raw_format = _first_str(doc, "format", "format_type")
    return SearchResultItem(
        id=_as_str(doc.get("id")) or "",
        title=_first_str(doc, "title", "name") or "Untitled",
        format=raw_format or "Unknown",
        format_display_name=get_format_display_name(raw_format),
        format_type=_as_str(doc.get("format_type")),
        format_category=_as_str(doc.get("format_category")),
        description=_first_str(doc, "abstract", "description") or "",
        thumbnail=_first_str(doc, "thumb", "path_to_thumb") or "",
        bounds=parse_bbox(_as_str(doc.get("bbox"))),
        size_bytes=_as_int(doc.get("bytes")),
        modified=_as_str(doc.get("modified")),
        keywords=_as_str_list(doc.get("keywords") or doc.get("tag_tags")),
        country=_as_str(doc.get("grp_Country")),
        agency=_as_str(doc.get("grp_Agency")),
        acquisition_date=_as_str(doc.get("fd_acquisition_date")),
        publish_date=_as_str(doc.get("fd_publish_date")),
        geometry_type=_as_str(doc.get("geometry_type")),
    )


def _map_docs(docs: List[Any]) -> List[SearchResultItem]:
    results = []
    for doc in docs:
        if not isinstance(doc, dict):
            continue
        try:
            results.append(to_search_result(doc))
        except ValidationError as e:
            logger.warning(f"[Service] Skipping malformed doc {doc.get('id')!r}: {e.error_count()} errors")
    return results


class SearchService:
    def __init__(self,
                 voyager_repo: Optional[VoyagerRepository] = None,
                 gazetteer_repo: Optional[GazetteerRepository] = None,
                 conf: Settings = settings):
        self.conf = conf
        self.voyager = voyager_repo or VoyagerRepository(conf=conf)
        self.gazetteer = gazetteer_repo or GazetteerRepository(base_url=conf.GAZETTEER_BASE_URL)

    async def search(self, filters: SearchFilters) -> SearchResponse:
        """
        Runs the composed keyword + date + spatial + facet query.
        Upstream failures give an empty, "degraded" response instead of an error.
        """
        t_start = time.time()
        fq = build_filter_fragment(filters, self.conf)
        reply = await self.voyager.select(build_search_params(filters, self.conf))

        if not reply.ok:
            logger.warning(f"[Service] Search degraded: {reply.error.value} ({reply.detail})")
            return SearchResponse(status=STATUS_DEGRADED, count=0, num_found=0, fq=fq, data=[])

        body = reply.value.get("response")
        docs = body.get("docs") if isinstance(body, dict) else None
        if not isinstance(docs, list):
            logger.error("[Service] Search response has no response.docs")
            return SearchResponse(status=STATUS_DEGRADED, count=0, num_found=0, fq=fq, data=[])

        results = _map_docs(docs)
        num_found = _as_int(body.get("numFound"))

        logger.info(f"[Service] Search returned {len(results)} docs in {time.time() - t_start:.4f}s")
        return SearchResponse(
            status=STATUS_OK,
            count=len(results),
            num_found=num_found if num_found is not None else len(results),
            fq=fq,
            data=results,
        )

    async def facets(self, filters: SearchFilters) -> FacetResponse:
        reply = await self.voyager.select(build_facet_params(filters, conf=self.conf))

        if not reply.ok:
            logger.warning(f"[Service] Facets degraded: {reply.error.value} ({reply.detail})")
            return FacetResponse(status=STATUS_DEGRADED, count=0, data=[])

        categories = parse_facet_response(reply.value)
        return FacetResponse(status=STATUS_OK, count=len(categories), data=categories)

    async def search_with_facets(self, filters: SearchFilters) -> SearchResponse:
        """
        Search and facet queries run concurrently. Neither is cancelled if a newer query arrives.
        """
        search_res, facet_res = await asyncio.gather(self.search(filters), self.facets(filters))
        return search_res.model_copy(update={"facets": facet_res.data})

    async def query_gazetteer(self, names: List[str]) -> List[GazetteerResult]:
        """
        Place-name lookup. Returns [] on any upstream failure.
        """
        lookup = await self.gazetteer.query(names)
        if not lookup.ok:
            logger.warning(f"[Service] Gazetteer degraded: {lookup.error.value} ({lookup.detail})")
        return lookup.unwrap_or([])


# Export Singleton
search_service = SearchService()
