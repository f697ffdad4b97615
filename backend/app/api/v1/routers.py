from fastapi import APIRouter

from .endpoints.search import router as search_router
from .endpoints.gazetteer import router as gazetteer_router
from .endpoints.spatial import router as spatial_router
from .endpoints.location import router as location_router

router = APIRouter()

router.include_router(search_router, prefix="/search", tags=["Search"])
router.include_router(gazetteer_router, prefix="/gazetteer", tags=["Gazetteer"])
router.include_router(spatial_router, prefix="/spatial", tags=["Spatial"])
router.include_router(location_router, prefix="/locations", tags=["Locations"])
