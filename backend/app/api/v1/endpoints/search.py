import logging
from fastapi import APIRouter, HTTPException

from backend.app.core.errors import InvalidArgument, ValidationException
from backend.app.schema.search import SearchFilters, SearchResponse, FacetResponse
from backend.app.service.search_service import search_service

# Configure Logger
logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/query", response_model=SearchResponse)
async def search_catalog(filters: SearchFilters):
    """
    Keyword + date range + spatial + facet search against Voyager, with facet counts.
    An unavailable upstream gives an empty result with status "degraded".
    """
    try:
        return await search_service.search_with_facets(filters)
    except InvalidArgument as e:
        raise ValidationException(str(e))
    except Exception as e:
        logger.error(f"Catalog Search Error: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/facets", response_model=FacetResponse)
async def get_facets(filters: SearchFilters):
    """
    Facet counts only (rows=0), in stable panel order.
    """
    try:
        return await search_service.facets(filters)
    except InvalidArgument as e:
        raise ValidationException(str(e))
    except Exception as e:
        logger.error(f"Facet Error: {e}")
        raise HTTPException(status_code=500, detail=str(e))
