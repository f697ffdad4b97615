import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from backend.app.schema.search import FacetCategory, FacetValue

# Configure Logger
logger = logging.getLogger(__name__)

# Facet fields requested from Voyager, in panel order
FACET_FIELDS: List[str] = [
    "fs_Voyager_Lexicon",
    "grp_Data_Theme",
    "tag_flags",
    "grp_Geography",
    "grp_Region",
    "grp_Sub-Region",
    "grp_Country",
    "grp_State",
    "grp_County",
    "grp_City",
    "grp_Sector",
    "grp_Bureau_/_Department",
    "grp_Agency",
    "grp_Academic",
    "organization",
    "fs_event",
    "fi_year",
    "location",
    "tag_tags",
    "keywords",
    "grp_Catalog",
    "grp_data_source",
    "fs_ckan_format",
    "format",
    "format_type",
    "format_keyword",
    "geometry_type",
    "fileExtension",
    "created",
]

FACET_DISPLAY_NAMES: Dict[str, str] = {
    "fs_Voyager_Lexicon": "Voyager Lexicon",
    "grp_Data_Theme": "Data Theme",
    "tag_flags": "Flags",
    "grp_Geography": "Geography",
    "grp_Region": "Region",
    "grp_Sub-Region": "Sub-Region",
    "grp_Country": "Country",
    "grp_State": "State",
    "grp_County": "County",
    "grp_City": "City",
    "grp_Sector": "Sector",
    "grp_Bureau_/_Department": "Bureau/Department",
    "grp_Agency": "Agency",
    "grp_Academic": "Academic",
    "organization": "Organization",
    "fs_event": "Event",
    "fi_year": "Year",
    "location": "Location",
    "tag_tags": "Tags",
    "keywords": "Keywords",
    "grp_Catalog": "Catalog",
    "grp_data_source": "Data Source",
    "fs_ckan_format": "CKAN Format",
    "format": "Format",
    "format_type": "Format Type",
    "format_keyword": "Format Keyword",
    "geometry_type": "Geometry Type",
    "fileExtension": "File Extension",
    "created": "Created",
}


def _decode_pairs(flat: Sequence[Any]) -> List[FacetValue]:
    """
    Decodes Solr's [name1, count1, name2, count2, ...] encoding.
    Pairs with an empty name or missing/invalid count are skipped.
    """
    values = []
    for i in range(0, len(flat), 2):
        name = flat[i]
        if not name or i + 1 >= len(flat):
            continue
        try:
            count = int(flat[i + 1])
        except (TypeError, ValueError):
            continue
        if count < 0:
            continue
        values.append(FacetValue(name=str(name), count=count))
    return values


def parse_facets(
        raw: Optional[Mapping[str, Sequence[Any]]],
        known_fields: Sequence[str] = FACET_FIELDS,
        display_names: Optional[Mapping[str, str]] = None
) -> List[FacetCategory]:
    """
    Builds facet categories from `facet_counts.facet_fields`.
    Output follows `known_fields` order so the panel layout is stable between queries;
    fields missing from `known_fields`, without values, or not a flat pair list are left out.
    """
    if not raw:
        return []
    names = FACET_DISPLAY_NAMES if display_names is None else display_names

    categories = []
    for field in known_fields:
        flat = raw.get(field)
        if not flat or not isinstance(flat, (list, tuple)):
            continue
        values = _decode_pairs(flat)
        if values:
            categories.append(FacetCategory(
                field=field,
                display_name=names.get(field) or field,
                values=values,
            ))
    return categories


def parse_facet_response(doc: Any, known_fields: Sequence[str] = FACET_FIELDS) -> List[FacetCategory]:
    """
    parse_facets over a full Voyager response. Anything malformed yields [].
    """
    if not isinstance(doc, dict):
        logger.warning(f"[Facets] Unexpected response type: {type(doc).__name__}")
        return []
    facet_counts = doc.get("facet_counts")
    facet_fields = facet_counts.get("facet_fields") if isinstance(facet_counts, dict) else None
    if not isinstance(facet_fields, dict):
        logger.warning("[Facets] Response has no facet_counts.facet_fields")
        return []
    return parse_facets(facet_fields, known_fields)


def toggle_facet_value(categories: List[FacetCategory], category_index: int,
                       value_index: int) -> List[FacetCategory]:
    updated = list(categories)
    category = updated[category_index]
    values = [
        v.model_copy(update={"selected": not v.selected}) if i == value_index else v
        for i, v in enumerate(category.values)
    ]
    updated[category_index] = category.model_copy(update={"values": values})
    return updated


def toggle_category(categories: List[FacetCategory], category_index: int) -> List[FacetCategory]:
    updated = list(categories)
    category = updated[category_index]
    updated[category_index] = category.model_copy(update={"is_open": not category.is_open})
    return updated


def selected_values(categories: List[FacetCategory]) -> Dict[str, List[str]]:
    return {
        c.field: [v.name for v in c.values if v.selected]
        for c in categories
        if any(v.selected for v in c.values)
    }


def build_selection_filter_query(selection: Mapping[str, Sequence[str]]) -> Optional[str]:
    """
    field:("v1" OR "v2") per field with selections, joined with AND.
    """
    clauses = []
    for field, values in selection.items():
        if not values:
            continue
        quoted = " OR ".join(f'"{v}"' for v in values)
        clauses.append(f"{field}:({quoted})")
    return " AND ".join(clauses) if clauses else None


def build_facet_filter_query(categories: List[FacetCategory]) -> Optional[str]:
    return build_selection_filter_query(selected_values(categories))


def build_filter_query(field: str, values: Sequence[str]) -> Optional[str]:
    """
    Single tagged filter query, {!tag=field}field:("v1" OR ...), for use with
    {!ex=field} facet exclusion. Embedded quotes are escaped.
    """
    if not values:
        return None
    escaped = " OR ".join('"{}"'.format(v.replace('"', '\\"')) for v in values)
    return f"{{!tag={field}}}{field}:({escaped})"
