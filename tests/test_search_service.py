"""
Tests for repository/voyager_repo.py and service/search_service.py
"""
from datetime import date
from urllib.parse import parse_qs

import httpx
import pytest

from backend.app.core.config import Settings
from backend.app.core.errors import ErrorKind
from backend.app.repository.voyager_repo import VoyagerRepository
from backend.app.schema.search import Box, LatLng, SearchFilters, SearchResultItem
import backend.app.service.search_service as search_service_module
from backend.app.service.search_service import SearchService, to_search_result

from conftest import json_response

CONF = Settings(VOYAGER_BASE_URL="http://voyager.test/", VOYAGER_SELECT_PATH="/solr/v0/select")

SEARCH_BODY = {
    "responseHeader": {"status": 0, "QTime": 3, "params": {}},
    "response": {
        "numFound": 120,
        "start": 0,
        "docs": [
            {"id": "a1", "title": "Roads", "format": "application/x-esri-shapefile",
             "bbox": "-122.5,37.7,-122.3,37.9", "bytes": 2048, "keywords": ["roads", "transport"]},
            {"id": "b2", "name": "scene.tif", "format_type": "File", "abstract": "A scene",
             "tag_tags": "imagery"},
        ],
    },
}

FACET_BODY = {
    "response": {"numFound": 120, "docs": []},
    "facet_counts": {"facet_fields": {
        "format": ["application/pdf", 4],
        "grp_Country": ["Kenya", 9, "Chile", 1],
    }},
}


def voyager_reply(request):
    params = parse_qs(request.url.query.decode())
    if request.method == "POST":
        params = {**params, **parse_qs(request.content.decode())}
    if params.get("facet") == ["true"]:
        return json_response(FACET_BODY)
    return json_response(SEARCH_BODY)


class TestVoyagerRepository:
    @pytest.mark.asyncio
    async def test_get_for_short_urls(self, mock_http):
        client, handler = mock_http(voyager_reply)
        reply = await VoyagerRepository(client, CONF).select([("q", "roads"), ("fq", "a"), ("fq", "b")])
        assert reply.ok
        request = handler.requests[0]
        assert request.method == "GET"
        assert str(request.url).startswith("http://voyager.test/solr/v0/select?")
        assert parse_qs(request.url.query.decode())["fq"] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_post_for_long_urls(self, mock_http):
        client, handler = mock_http(lambda request: json_response(SEARCH_BODY))
        conf = CONF.model_copy(update={"MAX_GET_URL_LENGTH": 60})
        reply = await VoyagerRepository(client, conf).select([("q", "x" * 100), ("fq", "a"), ("fq", "b")])
        assert reply.ok
        request = handler.requests[0]
        assert request.method == "POST"
        assert request.url.query == b""
        assert request.headers["content-type"].startswith("application/x-www-form-urlencoded")
        form = parse_qs(request.content.decode())
        assert form["q"] == ["x" * 100]
        assert form["fq"] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_error_status(self, mock_http):
        client, _ = mock_http(lambda request: httpx.Response(502))
        reply = await VoyagerRepository(client, CONF).select([("q", "x")])
        assert reply.error == ErrorKind.UPSTREAM_UNAVAILABLE

    @pytest.mark.asyncio
    async def test_timeout(self, mock_http):
        def slow(request):
            raise httpx.ReadTimeout("timed out", request=request)

        client, _ = mock_http(slow)
        reply = await VoyagerRepository(client, CONF).select([("q", "x")])
        assert reply.error == ErrorKind.UPSTREAM_UNAVAILABLE

    @pytest.mark.asyncio
    async def test_non_object_json(self, mock_http):
        client, _ = mock_http(lambda request: json_response([1, 2, 3]))
        reply = await VoyagerRepository(client, CONF).select([("q", "x")])
        assert reply.error == ErrorKind.MALFORMED_RESPONSE


class TestToSearchResult:
    def test_full_doc(self):
        item = to_search_result(SEARCH_BODY["response"]["docs"][0])
        assert item.id == "a1"
        assert item.title == "Roads"
        assert item.format_display_name == "Shapefile"
        assert item.bounds == Box(south_west=LatLng(lat=37.7, lng=-122.5),
                                  north_east=LatLng(lat=37.9, lng=-122.3))
        assert item.size_bytes == 2048
        assert item.keywords == ["roads", "transport"]

    def test_fallbacks(self):
        item = to_search_result(SEARCH_BODY["response"]["docs"][1])
        assert item.title == "scene.tif"
        assert item.format == "File"
        assert item.description == "A scene"
        assert item.bounds is None
        assert item.keywords == ["imagery"]

    def test_empty_doc(self):
        item = to_search_result({"id": 7, "bbox": "bad"})
        assert item.id == "7"
        assert item.title == "Untitled"
        assert item.format == "Unknown"
        assert item.format_display_name == "Unknown"
        assert item.bounds is None

    def test_multi_valued_scalars_keep_first_value(self):
        item = to_search_result({
            "id": ["m1"], "title": ["Ports", "Harbours"], "grp_Country": ["US", "CA"],
            "grp_Agency": ["NOAA", "USGS"], "format": ["application/pdf"],
            "bbox": ["-1,-1,1,1"], "bytes": ["10"], "modified": [], "abstract": {"en": "x"},
        })
        assert item.id == "m1"
        assert item.title == "Ports"
        assert item.country == "US"
        assert item.agency == "NOAA"
        assert item.format == "application/pdf"
        assert item.bounds.north_east == LatLng(lat=1, lng=1)
        assert item.size_bytes == 10
        assert item.modified is None
        assert item.description == ""


class TestSearchService:
    @pytest.mark.asyncio
    async def test_search(self, mock_http):
        client, handler = mock_http(voyager_reply)
        service = SearchService(voyager_repo=VoyagerRepository(client, CONF), conf=CONF)
        filters = SearchFilters(q="roads", date_from=date(2024, 1, 1), facets={"format": ["a"]})
        res = await service.search(filters)
        assert res.status == "success"
        assert res.count == 2
        assert res.num_found == 120
        assert [d.id for d in res.data] == ["a1", "b2"]
        assert res.fq.endswith('AND format:("a")')
        sent = parse_qs(handler.requests[0].url.query.decode())
        assert sent["fq"] == [res.fq]

    @pytest.mark.asyncio
    async def test_search_degrades_on_failure(self, mock_http):
        client, _ = mock_http(lambda request: httpx.Response(500))
        service = SearchService(voyager_repo=VoyagerRepository(client, CONF), conf=CONF)
        res = await service.search(SearchFilters(q="roads"))
        assert res.status == "degraded"
        assert res.data == []
        assert res.num_found == 0

    @pytest.mark.asyncio
    async def test_search_missing_docs_is_degraded(self, mock_http):
        client, _ = mock_http(lambda request: json_response({"facet_counts": {}}))
        service = SearchService(voyager_repo=VoyagerRepository(client, CONF), conf=CONF)
        res = await service.search(SearchFilters())
        assert res.status == "degraded"
        assert res.data == []

    @pytest.mark.asyncio
    async def test_facets(self, mock_http):
        client, _ = mock_http(voyager_reply)
        service = SearchService(voyager_repo=VoyagerRepository(client, CONF), conf=CONF)
        res = await service.facets(SearchFilters())
        assert res.status == "success"
        assert [c.field for c in res.data] == ["grp_Country", "format"]

    @pytest.mark.asyncio
    async def test_facets_degrade(self, mock_http):
        client, _ = mock_http(lambda request: httpx.Response(404))
        service = SearchService(voyager_repo=VoyagerRepository(client, CONF), conf=CONF)
        res = await service.facets(SearchFilters())
        assert res.status == "degraded"
        assert res.data == []

    @pytest.mark.asyncio
    async def test_search_with_facets_issues_both_queries(self, mock_http):
        client, handler = mock_http(voyager_reply)
        service = SearchService(voyager_repo=VoyagerRepository(client, CONF), conf=CONF)
        res = await service.search_with_facets(SearchFilters(q="roads"))
        assert len(handler.requests) == 2
        assert res.count == 2
        assert [c.field for c in res.facets] == ["grp_Country", "format"]

    @pytest.mark.asyncio
    async def test_multi_valued_doc_fields_do_not_fail_search(self, mock_http):
        body = {"response": {"numFound": 1, "docs": [
            {"id": "x", "title": ["Map", "Carte"], "grp_Country": ["US", "CA"]},
        ]}}
        client, _ = mock_http(lambda request: json_response(body))
        service = SearchService(voyager_repo=VoyagerRepository(client, CONF), conf=CONF)
        res = await service.search(SearchFilters(q="map"))
        assert res.status == "success"
        assert res.data[0].title == "Map"
        assert res.data[0].country == "US"

    @pytest.mark.asyncio
    async def test_doc_failing_validation_is_skipped(self, mock_http, monkeypatch):
        def strict(doc):
            # title=None fails SearchResultItem validation
            return SearchResultItem(id=str(doc["id"]), title=doc.get("title"),
                                    format="x", format_display_name="x")

        monkeypatch.setattr(search_service_module, "to_search_result", strict)
        body = {"response": {"numFound": 2, "docs": [{"id": "ok", "title": "Map"}, {"id": "bad"}]}}
        client, _ = mock_http(lambda request: json_response(body))
        service = SearchService(voyager_repo=VoyagerRepository(client, CONF), conf=CONF)
        res = await service.search(SearchFilters())
        assert res.status == "success"
        assert [d.id for d in res.data] == ["ok"]
        assert res.num_found == 2
