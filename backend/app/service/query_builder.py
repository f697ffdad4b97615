from datetime import date, datetime, time, timezone
from typing import Dict, List, Optional, Tuple, Union
from urllib.parse import urlencode

from backend.app.core.config import Settings, settings
from backend.app.core.errors import InvalidArgument
from backend.app.schema.search import Box, LatLng, PointFilter, PolygonFilter, SearchFilters
from backend.app.service.facet_service import FACET_FIELDS, build_filter_query, build_selection_filter_query
from backend.app.service.location_service import build_selection_fragment

DateLike = Union[date, datetime]

# Fields returned for each search hit
DEFAULT_SEARCH_FIELDS = (
    "id,title,name:[name],format,abstract,fullpath:[absolute],absolute_path:[absolute],"
    "thumb:[thumbURL],path_to_thumb,subject,download:[downloadURL],format_type,bytes,modified,"
    "shard:[shard],bbox,geo:[geo],format_category,component_files,ags_fused_cache,"
    "linkcount__children,contains_name,wms_layer_name,tag_flags,hasMissingData,layerURL:[lyrURL],"
    "hasLayerFile,likes,dislikes,grp_Country,fl_views,views,description,keywords,"
    "fd_acquisition_date,name,name_alias,tag_tags,fd_publish_date,grp_Agency,fs_english_name,"
    "fs_title,fs_product_detail_link"
)

OPEN_BOUND = "*"
END_OF_DAY = time(23, 59, 59, 999000)

# Query params are an ordered list so repeated keys (fq, facet.field) survive
Params = List[Tuple[str, str]]


# ==========================================================================
#  Date Range
# ==========================================================================

def _local_instant(value: DateLike, at: time) -> datetime:
    """
    Moves `value` to the given wall-clock time on the same local day.
    Plain dates and naive datetimes are taken in the process's local timezone;
    aware datetimes keep their own.
    """
    tz = value.tzinfo if isinstance(value, datetime) else None
    day = value.date() if isinstance(value, datetime) else value
    local = datetime.combine(day, at, tzinfo=tz)
    if tz is None:
        # astimezone() on a naive datetime assumes system local time
        local = local.astimezone()
    return local


def to_solr_timestamp(instant: datetime) -> str:
    """UTC ISO-8601 with millisecond precision, e.g. 2024-03-15T08:00:00.000Z"""
    utc = instant.astimezone(timezone.utc).replace(tzinfo=None)
    # Solr needs a 4-digit year; isoformat pads years before 1000
    return utc.isoformat(timespec="milliseconds") + "Z"


def _bound_token(value: Optional[DateLike], at: time) -> str:
    if value is None:
        return OPEN_BOUND
    try:
        return to_solr_timestamp(_local_instant(value, at))
    except (OverflowError, ValueError):
        # The day edge falls outside the datetime range (date.min / date.max near UTC),
        # which is unbounded on that side anyway
        return OPEN_BOUND


def build_date_range_query(
        date_from: Optional[DateLike] = None,
        date_to: Optional[DateLike] = None,
        field: str = "modified"
) -> Optional[str]:
    """
    Builds an inclusive Solr range query on `field`.
    `date_from` snaps to local start of day, `date_to` to local end of day;
    a missing side becomes the open bound `*`.
    Returns None if neither side is given.
    """
    if date_from is None and date_to is None:
        return None

    from_token = _bound_token(date_from, time.min)
    to_token = _bound_token(date_to, END_OF_DAY)

    return f"{field}:[{from_token} TO {to_token}]"


# ==========================================================================
#  Spatial
# ==========================================================================

def format_box(box: Box) -> str:
    """
    west,south,east,north with 4 decimals. Wire format for the Voyager `place` parameter.
    """
    return f"{box.west:.4f},{box.south:.4f},{box.east:.4f},{box.north:.4f}"


def parse_bbox(text: Optional[str]) -> Optional[Box]:
    """
    Parses a Voyager doc `bbox` ("minLng,minLat,maxLng,maxLat"). None if malformed.
    """
    if not text:
        return None
    parts = text.split(",")
    if len(parts) != 4:
        return None
    try:
        west, south, east, north = (float(p) for p in parts)
    except ValueError:
        return None
    return Box(
        south_west=LatLng(lat=south, lng=west),
        north_east=LatLng(lat=north, lng=east),
    )


def _wkt_coord(p: LatLng) -> str:
    return f"{p.lng:.4f} {p.lat:.4f}"


def build_spatial_query(spatial_filter) -> Optional[str]:
    """
    Solr spatial filter for a committed selection. Degenerate boxes are passed through.
    """
    if spatial_filter is None:
        return None

    if isinstance(spatial_filter, Box):
        b = spatial_filter
        return f'bbox:"Intersects(ENVELOPE({b.west:.4f}, {b.east:.4f}, {b.north:.4f}, {b.south:.4f}))"'

    if isinstance(spatial_filter, PointFilter):
        return f'geo:"Intersects(POINT({_wkt_coord(spatial_filter.location)}))"'

    if isinstance(spatial_filter, PolygonFilter):
        ring = spatial_filter.vertices + [spatial_filter.vertices[0]]
        coords = ", ".join(_wkt_coord(p) for p in ring)
        return f'geo:"Intersects(POLYGON(({coords})))"'

    raise InvalidArgument(f"Unsupported spatial filter: {type(spatial_filter).__name__}")


def describe_place(spatial_filter) -> str:
    """
    Label shown in the location box after drawing.
    """
    if isinstance(spatial_filter, Box):
        return format_box(spatial_filter)
    if isinstance(spatial_filter, PointFilter):
        return f"{spatial_filter.location.lat:.4f}, {spatial_filter.location.lng:.4f}"
    if isinstance(spatial_filter, PolygonFilter):
        return "Custom Polygon"
    return ""


# ==========================================================================
#  Gazetteer
# ==========================================================================

def build_gazetteer_url(names: List[str], base_url: Optional[str] = None) -> str:
    """
    One disjunction query for all names: name:"A" || name:"B".
    Names are not escaped; URL encoding is applied to the composed query only.
    """
    if not names:
        raise InvalidArgument("At least one location name is required")

    base = (base_url or settings.GAZETTEER_BASE_URL).rstrip("/")
    query = " || ".join(f'name:"{name}"' for name in names)
    params = [("q", query), ("fl", "geo:[geo], name"), ("wt", "json")]
    return f"{base}/solr/gazetteer/select?{urlencode(params)}"


# ==========================================================================
#  Composite Voyager Query
# ==========================================================================

def _base_params(conf: Settings) -> Params:
    return [
        ("disp", conf.VOYAGER_DISPLAY_ID),
        ("voyager.config.id", conf.VOYAGER_DISPLAY_ID),
        ("wt", "json"),
    ]


def build_filter_fragment(filters: SearchFilters, conf: Settings = settings) -> Optional[str]:
    """
    Date range, spatial, location and facet fragments joined with AND. None if there are none.
    """
    fragments = [
        build_date_range_query(filters.date_from, filters.date_to,
                               filters.date_field or conf.DEFAULT_DATE_FIELD),
        build_spatial_query(filters.spatial_filter),
        build_selection_fragment(filters.locations),
        build_selection_filter_query(filters.facets),
    ]
    fragments = [f for f in fragments if f]
    return " AND ".join(fragments) if fragments else None


def build_search_params(filters: SearchFilters, conf: Settings = settings) -> Params:
    params = _base_params(conf)

    keyword = (filters.q or "").strip()
    params.append(("q", keyword or "*:*"))

    fq = build_filter_fragment(filters, conf)
    if fq:
        params.append(("fq", fq))

    rows = filters.rows if filters.rows is not None else conf.DEFAULT_PAGE_SIZE
    params += [
        ("start", str(filters.start)),
        ("rows", str(min(rows, conf.MAX_PAGE_SIZE))),
        ("sort", filters.sort or conf.DEFAULT_SORT),
        ("fl", DEFAULT_SEARCH_FIELDS),
        ("extent.bbox", "true"),
        ("block", "true"),
    ]
    return params


def build_facet_params(filters: SearchFilters, fields: List[str] = FACET_FIELDS,
                       conf: Settings = settings) -> Params:
    """
    Facet-only query (rows=0). Facet selections go in as separately tagged fq params
    and each facet.field excludes its own tag, so selecting a value does not collapse
    that field's counts.
    """
    params = _base_params(conf)

    keyword = (filters.q or "").strip()
    params.append(("q", keyword or "*:*"))

    fq = build_filter_fragment(filters.model_copy(update={"facets": {}}), conf)
    if fq:
        params.append(("fq", fq))
    for field, values in filters.facets.items():
        tagged = build_filter_query(field, values)
        if tagged:
            params.append(("fq", tagged))

    params += [
        ("rows", "0"),
        ("facet", "true"),
        ("facet.mincount", "1"),
        ("facet.limit", "50"),
    ]
    for field in fields:
        params.append(("facet.field", f"{{!ex={field}}}{field}"))
        params.append((f"f.{field}.facet.mincount", "1"))
        if "grp_" in field or field in ("format", "format_type"):
            params.append((f"f.{field}.facet.sort", "index"))
    return params


def params_to_dict(params: Params) -> Dict[str, Union[str, List[str]]]:
    """
    Form body of a param list for the long-query POST; repeated keys become lists.
    """
    body: Dict[str, Union[str, List[str]]] = {}
    for key, value in params:
        if key in body:
            existing = body[key]
            body[key] = (existing if isinstance(existing, list) else [existing]) + [value]
        else:
            body[key] = value
    return body
