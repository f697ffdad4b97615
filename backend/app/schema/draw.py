from enum import Enum
from typing import Annotated, List, Optional, Literal, Union

from pydantic import BaseModel, Field, model_validator

from backend.app.schema.search import LatLng, Box, SpatialFilter


class DrawMode(str, Enum):
    NONE = "none"
    BOX = "box"
    POINT = "point"
    POLYGON = "polygon"


class DrawSession(BaseModel):
    """
    Transient drawing state for one map. Never mutated in place;
    transitions return a new session.
    """
    mode: DrawMode = DrawMode.NONE
    # Fixed corner of a box drag; set only while dragging
    anchor: Optional[LatLng] = None
    # Live envelope shown while dragging
    draft_box: Optional[Box] = None
    # Polygon vertices in click order
    vertices: List[LatLng] = Field(default_factory=list)

    @property
    def dragging(self) -> bool:
        return self.anchor is not None

    @model_validator(mode="after")
    def _consistent_with_mode(self) -> "DrawSession":
        if (self.anchor is None) != (self.draft_box is None):
            raise ValueError("anchor and draft_box are set together")
        if self.anchor is not None and self.mode != DrawMode.BOX:
            raise ValueError("a drag is only possible in box mode")
        if self.vertices and self.mode != DrawMode.POLYGON:
            raise ValueError("vertices are only kept in polygon mode")
        return self


# --- Events (map pointer / keyboard input) ---

class SetMode(BaseModel):
    kind: Literal["set_mode"] = "set_mode"
    mode: DrawMode


class PointerDown(BaseModel):
    kind: Literal["pointer_down"] = "pointer_down"
    point: LatLng


class PointerMove(BaseModel):
    kind: Literal["pointer_move"] = "pointer_move"
    point: LatLng


class PointerUp(BaseModel):
    kind: Literal["pointer_up"] = "pointer_up"
    point: LatLng


class Click(BaseModel):
    kind: Literal["click"] = "click"
    point: LatLng


class DoubleClick(BaseModel):
    kind: Literal["double_click"] = "double_click"
    point: LatLng


class Teardown(BaseModel):
    kind: Literal["teardown"] = "teardown"


DrawEvent = Annotated[
    Union[SetMode, PointerDown, PointerMove, PointerUp, Click, DoubleClick, Teardown],
    Field(discriminator="kind"),
]


# --- Effects (returned as data, applied by the host) ---

class EmitFilter(BaseModel):
    kind: Literal["emit_filter"] = "emit_filter"
    filter: SpatialFilter


class SetDragging(BaseModel):
    kind: Literal["set_dragging"] = "set_dragging"
    enabled: bool


DrawEffect = Annotated[Union[EmitFilter, SetDragging], Field(discriminator="kind")]


# --- Overlays (declarative map drawing instructions) ---

class PathOptions(BaseModel):
    color: str = "#3b82f6"
    weight: int = 2
    fill_opacity: float = 0.1
    dash_array: Optional[str] = None


class MarkerIcon(BaseModel):
    icon_url: str = "marker-icon.png"
    icon_retina_url: str = "marker-icon-2x.png"
    shadow_url: str = "marker-shadow.png"
    icon_size: List[int] = Field(default_factory=lambda: [25, 41])
    icon_anchor: List[int] = Field(default_factory=lambda: [12, 41])
    popup_anchor: List[int] = Field(default_factory=lambda: [1, -34])
    shadow_size: List[int] = Field(default_factory=lambda: [41, 41])


class RectangleOverlay(BaseModel):
    kind: Literal["rectangle"] = "rectangle"
    bounds: Box
    path_options: PathOptions


class MarkerOverlay(BaseModel):
    kind: Literal["marker"] = "marker"
    position: LatLng
    icon: MarkerIcon = Field(default_factory=MarkerIcon)
    popup: Optional[str] = None


class PolygonOverlay(BaseModel):
    kind: Literal["polygon"] = "polygon"
    positions: List[LatLng]
    path_options: PathOptions


class PolylineOverlay(BaseModel):
    kind: Literal["polyline"] = "polyline"
    positions: List[LatLng]
    path_options: PathOptions


Overlay = Annotated[
    Union[RectangleOverlay, MarkerOverlay, PolygonOverlay, PolylineOverlay],
    Field(discriminator="kind"),
]


# --- API payloads ---

class DrawRequest(BaseModel):
    session: DrawSession = Field(default_factory=DrawSession)
    event: DrawEvent


class DrawResponse(BaseModel):
    session: DrawSession
    effects: List[DrawEffect]
    draft: Optional[Overlay] = None


class RenderRequest(BaseModel):
    type: Optional[Literal["box", "point", "polygon"]] = None
    filter: Optional[SpatialFilter] = None


class RenderResponse(BaseModel):
    overlay: Optional[Overlay] = None
