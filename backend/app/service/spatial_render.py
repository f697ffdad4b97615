from typing import Any, List, Optional

from backend.app.schema.draw import (
    DrawMode, DrawSession, Overlay, PathOptions,
    RectangleOverlay, MarkerOverlay, PolygonOverlay, PolylineOverlay,
)
from backend.app.schema.search import Box, LatLng, PointFilter, PolygonFilter

COMMITTED_STYLE = PathOptions(color="#3b82f6", weight=2, fill_opacity=0.1)
# Dashed while the user is still dragging or clicking
DRAFT_STYLE = PathOptions(color="#3b82f6", weight=2, fill_opacity=0.2, dash_array="5, 5")

SELECTED_POINT_POPUP = "Selected Point"


def _as_box(data: Any) -> Optional[Box]:
    return data if isinstance(data, Box) else None


def _as_point(data: Any) -> Optional[LatLng]:
    if isinstance(data, PointFilter):
        return data.location
    return data if isinstance(data, LatLng) else None


def _as_vertices(data: Any) -> Optional[List[LatLng]]:
    if isinstance(data, PolygonFilter):
        return list(data.vertices)
    if isinstance(data, (list, tuple)) and all(isinstance(p, LatLng) for p in data):
        return list(data)
    return None


def render_spatial_filter(filter_type: Optional[str], data: Any) -> Optional[Overlay]:
    """
    Overlay for the committed spatial filter.
    box -> rectangle, point -> marker, polygon -> closed polygon outline.
    Nothing is drawn when the type is None, the data is empty, or the data does not fit the type.
    """
    if not filter_type or not data:
        return None

    if filter_type == "box":
        box = _as_box(data)
        return RectangleOverlay(bounds=box, path_options=COMMITTED_STYLE) if box else None

    if filter_type == "point":
        point = _as_point(data)
        return MarkerOverlay(position=point, popup=SELECTED_POINT_POPUP) if point else None

    if filter_type == "polygon":
        vertices = _as_vertices(data)
        return PolygonOverlay(positions=vertices, path_options=COMMITTED_STYLE) if vertices else None

    return None


def render_draft(session: DrawSession) -> Optional[Overlay]:
    """
    Live geometry of an unfinished gesture, drawn dashed.
    """
    if session.mode == DrawMode.BOX and session.draft_box is not None:
        return RectangleOverlay(bounds=session.draft_box, path_options=DRAFT_STYLE)

    if session.mode == DrawMode.POLYGON and session.vertices:
        return PolylineOverlay(positions=list(session.vertices), path_options=DRAFT_STYLE)

    return None
