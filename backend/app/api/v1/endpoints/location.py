from fastapi import APIRouter

from backend.app.schema.location import (
    LocationSelectionRequest, LocationSelectionResponse, LocationTreeResponse,
)
from backend.app.service.location_service import (
    HIERARCHY_TREE, LOCATION_TO_VOYAGER, build_location_filter_query, checkbox_states,
    expand_selected_locations,
)

router = APIRouter()


@router.get("/tree", response_model=LocationTreeResponse)
async def get_location_tree():
    return LocationTreeResponse(tree=HIERARCHY_TREE, mapping=LOCATION_TO_VOYAGER)


@router.post("/selection", response_model=LocationSelectionResponse)
async def resolve_selection(request: LocationSelectionRequest):
    """
    Expands a picker selection to its descendants, with the checkbox state of every
    node and the fq fragment the search query will use. Unknown ids are ignored.
    """
    expanded = expand_selected_locations(request.selected)
    return LocationSelectionResponse(
        expanded=expanded,
        states=checkbox_states(expanded),
        fq=build_location_filter_query(expanded),
    )
