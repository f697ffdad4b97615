import logging
from typing import Callable, List, Optional, Protocol, Tuple

from backend.app.schema.draw import (
    DrawMode, DrawSession, DrawEvent, DrawEffect,
    SetMode, PointerDown, PointerMove, PointerUp, Click, DoubleClick, Teardown,
    EmitFilter, SetDragging, Overlay,
)
from backend.app.schema.search import Box, PointFilter, PolygonFilter, SpatialFilter
from backend.app.service.query_builder import describe_place
from backend.app.service.spatial_render import render_draft

# Configure Logger
logger = logging.getLogger(__name__)

Transition = Tuple[DrawSession, List[DrawEffect]]

MIN_POLYGON_VERTICES = 3


# ==========================================================================
#  Pure transitions: (session, event) -> (session, effects)
# ==========================================================================

def _release_drag(session: DrawSession) -> List[DrawEffect]:
    # Map panning is disabled for the whole box drag; every exit path re-enables it
    return [SetDragging(enabled=True)] if session.dragging else []


def _set_mode(session: DrawSession, mode: DrawMode) -> Transition:
    effects = _release_drag(session)
    return DrawSession(mode=mode), effects


def _box(session: DrawSession, event: DrawEvent) -> Transition:
    if isinstance(event, PointerDown):
        effects = [] if session.dragging else [SetDragging(enabled=False)]
        new = session.model_copy(update={
            "anchor": event.point,
            "draft_box": Box.from_corners(event.point, event.point),
        })
        return new, effects

    if not session.dragging:
        return session, []

    if isinstance(event, PointerMove):
        return session.model_copy(update={"draft_box": Box.from_corners(session.anchor, event.point)}), []

    if isinstance(event, PointerUp):
        final = Box.from_corners(session.anchor, event.point)
        new = session.model_copy(update={"anchor": None, "draft_box": None})
        return new, [EmitFilter(filter=final), SetDragging(enabled=True)]

    return session, []


def _point(session: DrawSession, event: DrawEvent) -> Transition:
    if isinstance(event, Click):
        return session, [EmitFilter(filter=PointFilter(location=event.point))]
    return session, []


def _polygon(session: DrawSession, event: DrawEvent) -> Transition:
    if isinstance(event, Click):
        return session.model_copy(update={"vertices": session.vertices + [event.point]}), []

    if isinstance(event, DoubleClick):
        # The preceding clicks already added this location; the double-click only closes the ring
        if len(session.vertices) < MIN_POLYGON_VERTICES:
            return session, []
        polygon = PolygonFilter(vertices=list(session.vertices))
        return session.model_copy(update={"vertices": []}), [EmitFilter(filter=polygon)]

    return session, []


_MODE_HANDLERS = {
    DrawMode.BOX: _box,
    DrawMode.POINT: _point,
    DrawMode.POLYGON: _polygon,
}


def transition(session: DrawSession, event: DrawEvent) -> Transition:
    """
    Applies one map event to a draw session.
    Never touches the committed filter; emitted filters are returned as EmitFilter effects.
    """
    if isinstance(event, SetMode):
        return _set_mode(session, event.mode)

    if isinstance(event, Teardown):
        return _set_mode(session, DrawMode.NONE)

    handler = _MODE_HANDLERS.get(session.mode)
    if handler is None:
        return session, []
    return handler(session, event)


# ==========================================================================
#  Host-side controller
# ==========================================================================

class MapSurface(Protocol):
    """The part of the map widget the controller drives."""

    def set_dragging(self, enabled: bool) -> None:
        ...


class MapDrawController:
    """
    Owns the draw session for one map plus the committed filter of the search page.
    Applies effects to the map and returns to mode `none` after each commit.

    Use as a context manager (or call close()) so panning is always restored.
    """

    def __init__(self, surface: MapSurface,
                 on_commit: Optional[Callable[[SpatialFilter], None]] = None):
        self.surface = surface
        self.on_commit = on_commit
        self.session = DrawSession()
        self.spatial_filter: Optional[SpatialFilter] = None
        self.place: str = ""

    def __enter__(self) -> "MapDrawController":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def mode(self) -> DrawMode:
        return self.session.mode

    @property
    def draft(self) -> Optional[Overlay]:
        return render_draft(self.session)

    def dispatch(self, event: DrawEvent) -> List[DrawEffect]:
        self.session, effects = transition(self.session, event)
        # Surface effects land before any commit so a failing callback
        # cannot leave the map unpannable.
        for effect in effects:
            if isinstance(effect, SetDragging):
                self.surface.set_dragging(effect.enabled)
        filters = [e.filter for e in effects if isinstance(e, EmitFilter)]
        if filters:
            try:
                for spatial_filter in filters:
                    self._commit(spatial_filter)
            finally:
                self.set_mode(DrawMode.NONE)
        return effects

    def set_mode(self, mode: DrawMode) -> List[DrawEffect]:
        return self.dispatch(SetMode(mode=mode))

    def clear_filter(self) -> None:
        self.spatial_filter = None
        self.place = ""

    def close(self) -> None:
        self.dispatch(Teardown())

    def _commit(self, spatial_filter: SpatialFilter) -> None:
        self.spatial_filter = spatial_filter
        self.place = describe_place(spatial_filter)
        logger.info(f"[Draw] Committed {spatial_filter.type} filter: {self.place}")
        if self.on_commit:
            self.on_commit(spatial_filter)
