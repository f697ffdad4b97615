from datetime import date
from typing import Annotated, List, Optional, Any, Dict, Literal, Union

from pydantic import BaseModel, Field, field_validator


# --- 1. Geometry Models ---

class LatLng(BaseModel):
    """
    A geographic coordinate. Range is guaranteed by the map layer, not checked here.
    """
    lat: float
    lng: float


class Box(BaseModel):
    """
    Axis-aligned bounding box given by its southwest and northeast corners.
    """
    type: Literal["box"] = "box"
    south_west: LatLng
    north_east: LatLng

    @classmethod
    def from_corners(cls, a: LatLng, b: LatLng) -> "Box":
        """
        Envelope of two opposite corners; corner order is irrelevant.
        Equal corners give a zero-area box.
        """
        return cls(
            south_west=LatLng(lat=min(a.lat, b.lat), lng=min(a.lng, b.lng)),
            north_east=LatLng(lat=max(a.lat, b.lat), lng=max(a.lng, b.lng)),
        )

    @property
    def west(self) -> float:
        return self.south_west.lng

    @property
    def south(self) -> float:
        return self.south_west.lat

    @property
    def east(self) -> float:
        return self.north_east.lng

    @property
    def north(self) -> float:
        return self.north_east.lat


class PointFilter(BaseModel):
    type: Literal["point"] = "point"
    location: LatLng


class PolygonFilter(BaseModel):
    type: Literal["polygon"] = "polygon"
    # Draw order
    vertices: List[LatLng]

    @field_validator("vertices")
    @classmethod
    def _at_least_three(cls, v: List[LatLng]) -> List[LatLng]:
        if len(v) < 3:
            raise ValueError("a polygon needs at least 3 vertices")
        return v


# Committed spatial selection, tagged by `type`
SpatialFilter = Annotated[Union[Box, PointFilter, PolygonFilter], Field(discriminator="type")]


# --- 2. Facet Models ---

class FacetValue(BaseModel):
    name: str
    count: int = Field(ge=0)
    selected: bool = False


class FacetCategory(BaseModel):
    field: str
    display_name: str
    values: List[FacetValue]
    is_open: bool = False


# --- 3. Gazetteer Models ---

class GazetteerResult(BaseModel):
    name: str
    # GeoJSON-like geometry as returned by the gazetteer, e.g. {"type": ..., "coordinates": ...}
    geo: Any


class GazetteerRequest(BaseModel):
    names: List[str]


class GazetteerResponse(BaseModel):
    status: str
    count: int
    data: List[GazetteerResult]


# --- 4. Search Request Models ---

class SearchFilters(BaseModel):
    """
    Everything the search page contributes to one Voyager query.
    """
    q: Optional[str] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    date_field: Optional[str] = None
    spatial_filter: Optional[SpatialFilter] = None
    # field -> selected facet values
    facets: Dict[str, List[str]] = Field(default_factory=dict)
    # Location picker ids (region / country / state); parents cover their descendants
    locations: List[str] = Field(default_factory=list)
    start: int = Field(default=0, ge=0)
    rows: Optional[int] = Field(default=None, ge=0)
    sort: Optional[str] = None


# --- 5. Search Result Models ---

class SearchResultItem(BaseModel):
    """
    A Voyager document mapped for display.
    """
    id: str
    title: str
    format: str
    format_display_name: str
    format_type: Optional[str] = None
    format_category: Optional[str] = None
    description: str = ""
    thumbnail: str = ""
    bounds: Optional[Box] = None
    size_bytes: Optional[int] = None
    modified: Optional[str] = None
    keywords: List[str] = Field(default_factory=list)
    country: Optional[str] = None
    agency: Optional[str] = None
    acquisition_date: Optional[str] = None
    publish_date: Optional[str] = None
    geometry_type: Optional[str] = None


class SearchResponse(BaseModel):
    """
    Standard wrapper for search responses.
    `status` is "degraded" when the upstream failed and the result is empty.
    """
    status: str
    count: int
    num_found: int
    fq: Optional[str] = None
    data: List[SearchResultItem]
    facets: List[FacetCategory] = Field(default_factory=list)


class FacetResponse(BaseModel):
    status: str
    count: int
    data: List[FacetCategory]


class SpatialFormatResponse(BaseModel):
    place: str
    fragment: str


class SpatialFormatRequest(BaseModel):
    filter: SpatialFilter
