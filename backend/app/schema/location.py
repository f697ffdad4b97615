from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field


class TreeNode(BaseModel):
    """
    One entry of the location picker: region -> country -> state.
    """
    id: str
    label: str
    children: List["TreeNode"] = Field(default_factory=list)


class LocationMapping(BaseModel):
    # Voyager facet field (grp_Region / grp_Country / grp_State) and its value as indexed
    field: str
    value: str


CheckboxState = Union[bool, Literal["indeterminate"]]


class LocationTreeResponse(BaseModel):
    tree: List[TreeNode]
    mapping: Dict[str, LocationMapping]


class LocationSelectionRequest(BaseModel):
    selected: List[str] = Field(default_factory=list)


class LocationSelectionResponse(BaseModel):
    # Selection with every descendant added, duplicates removed
    expanded: List[str]
    # Checkbox state for every node id in the tree
    states: Dict[str, CheckboxState]
    fq: Optional[str] = None
