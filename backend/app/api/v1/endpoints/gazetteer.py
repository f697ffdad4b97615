from fastapi import APIRouter

from backend.app.schema.search import GazetteerRequest, GazetteerResponse
from backend.app.service.search_service import search_service

router = APIRouter()


@router.post("/lookup", response_model=GazetteerResponse)
async def lookup_places(request: GazetteerRequest):
    """
    Resolves place names to geometries. Names without a geometry are dropped;
    an unreachable gazetteer yields an empty list.
    """
    results = await search_service.query_gazetteer(request.names)
    return GazetteerResponse(status="success", count=len(results), data=results)
