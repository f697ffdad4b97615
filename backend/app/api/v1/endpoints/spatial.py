from fastapi import APIRouter

from backend.app.schema.draw import DrawRequest, DrawResponse, RenderRequest, RenderResponse
from backend.app.schema.search import SpatialFormatRequest, SpatialFormatResponse
from backend.app.service.draw_machine import transition
from backend.app.service.query_builder import build_spatial_query, describe_place
from backend.app.service.spatial_render import render_draft, render_spatial_filter

router = APIRouter()


@router.post("/draw", response_model=DrawResponse)
async def apply_draw_event(request: DrawRequest):
    """
    One step of the draw state machine. Stateless: the client sends its session back
    each time and applies the returned effects (commit filter, toggle map panning).
    """
    session, effects = transition(request.session, request.event)
    return DrawResponse(session=session, effects=effects, draft=render_draft(session))


@router.post("/render", response_model=RenderResponse)
async def render_filter(request: RenderRequest):
    """
    Overlay for the committed spatial filter; overlay is null when there is nothing to draw.
    """
    filter_type = request.type or (request.filter.type if request.filter else None)
    return RenderResponse(overlay=render_spatial_filter(filter_type, request.filter))


@router.post("/format", response_model=SpatialFormatResponse)
async def format_filter(request: SpatialFormatRequest):
    """
    Location label and Solr spatial fragment for a committed filter.
    """
    return SpatialFormatResponse(
        place=describe_place(request.filter),
        fragment=build_spatial_query(request.filter),
    )
