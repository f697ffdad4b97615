import logging
from typing import Dict, Iterator, List, Mapping, Optional, Sequence

from backend.app.schema.location import CheckboxState, LocationMapping, TreeNode

# Configure Logger
logger = logging.getLogger(__name__)


def _node(node_id: str, label: str, *children: TreeNode) -> TreeNode:
    return TreeNode(id=node_id, label=label, children=list(children))


# Location picker tree: region -> country -> state
HIERARCHY_TREE: List[TreeNode] = [
    _node("na", "North America",
          _node("usa", "United States",
                _node("ca", "California"),
                _node("ny", "New York"),
                _node("tx", "Texas"),
                _node("fl", "Florida")),
          _node("can", "Canada"),
          _node("mex", "Mexico")),
    _node("eu", "Europe",
          _node("uk", "United Kingdom",
                _node("eng", "England"),
                _node("sct", "Scotland"),
                _node("wls", "Wales")),
          _node("fr", "France"),
          _node("de", "Germany"),
          _node("it", "Italy"),
          _node("es", "Spain")),
    _node("as", "Asia",
          _node("jp", "Japan"),
          _node("cn", "China"),
          _node("in", "India"),
          _node("sg", "Singapore")),
    _node("sa", "South America",
          _node("br", "Brazil"),
          _node("ar", "Argentina"),
          _node("cl", "Chile")),
    _node("af", "Africa",
          _node("eg", "Egypt"),
          _node("za", "South Africa"),
          _node("ng", "Nigeria"),
          _node("ke", "Kenya")),
]


def _mapping(field: str, values: Dict[str, str]) -> Dict[str, LocationMapping]:
    return {k: LocationMapping(field=field, value=v) for k, v in values.items()}


# Tree id -> Voyager facet field and value. Country values carry the flag prefix Voyager indexes.
LOCATION_TO_VOYAGER: Dict[str, LocationMapping] = {
    **_mapping("grp_Region", {
        "na": "North America",
        "eu": "Europe",
        "as": "Asia",
        "sa": "South America",
        "af": "Africa",
    }),
    **_mapping("grp_Country", {
        "usa": "🇺🇸 United States",
        "can": "🇨🇦 Canada",
        "mex": "🇲🇽 Mexico",
        "uk": "🇬🇧 United Kingdom",
        "fr": "🇫🇷 France",
        "de": "🇩🇪 Germany",
        "it": "🇮🇹 Italy",
        "es": "🇪🇸 Spain",
        "jp": "🇯🇵 Japan",
        "cn": "🇨🇳 China",
        "in": "🇮🇳 India",
        "sg": "🇸🇬 Singapore",
        "br": "🇧🇷 Brazil",
        "ar": "🇦🇷 Argentina",
        "cl": "🇨🇱 Chile",
        "eg": "🇪🇬 Egypt",
        "za": "🇿🇦 South Africa",
        "ng": "🇳🇬 Nigeria",
        "ke": "🇰🇪 Kenya",
    }),
    # UK nations are indexed as states
    **_mapping("grp_State", {
        "ca": "California",
        "ny": "New York",
        "tx": "Texas",
        "fl": "Florida",
        "eng": "England",
        "sct": "Scotland",
        "wls": "Wales",
    }),
}


# ==========================================================================
#  Tree navigation
# ==========================================================================

def _walk(nodes: Sequence[TreeNode]) -> Iterator[TreeNode]:
    # Depth-first, parents before children
    for node in nodes:
        yield node
        yield from _walk(node.children)


def find_node(node_id: str, tree: Sequence[TreeNode] = HIERARCHY_TREE) -> Optional[TreeNode]:
    return next((n for n in _walk(tree) if n.id == node_id), None)


def get_all_descendant_ids(node_id: str, tree: Sequence[TreeNode] = HIERARCHY_TREE) -> List[str]:
    """
    The node's id followed by every descendant id. [] for an unknown id.
    """
    node = find_node(node_id, tree)
    return [n.id for n in _walk([node])] if node else []


def expand_selected_locations(selected: Sequence[str],
                              tree: Sequence[TreeNode] = HIERARCHY_TREE) -> List[str]:
    """
    Adds every descendant of each selected node. Selecting a parent and one of its
    children yields each id once.
    """
    expanded: Dict[str, None] = {}
    for node_id in selected:
        for d in get_all_descendant_ids(node_id, tree):
            expanded.setdefault(d)
    return list(expanded)


def get_parent_id(node_id: str, tree: Sequence[TreeNode] = HIERARCHY_TREE) -> Optional[str]:
    for node in _walk(tree):
        if any(c.id == node_id for c in node.children):
            return node.id
    return None


def get_direct_children_ids(node_id: str, tree: Sequence[TreeNode] = HIERARCHY_TREE) -> List[str]:
    node = find_node(node_id, tree)
    return [c.id for c in node.children] if node else []


def get_all_ancestor_ids(node_id: str, tree: Sequence[TreeNode] = HIERARCHY_TREE) -> List[str]:
    """Parent first, root last."""
    ancestors = []
    parent = get_parent_id(node_id, tree)
    while parent is not None:
        ancestors.append(parent)
        parent = get_parent_id(parent, tree)
    return ancestors


def leaf_ids(tree: Sequence[TreeNode] = HIERARCHY_TREE) -> List[str]:
    return [n.id for n in _walk(tree) if not n.children]


# ==========================================================================
#  Checkbox state
# ==========================================================================

def are_all_children_selected(node_id: str, selected: Sequence[str],
                              tree: Sequence[TreeNode] = HIERARCHY_TREE) -> bool:
    children = get_direct_children_ids(node_id, tree)
    return bool(children) and all(c in selected for c in children)


def are_some_children_selected(node_id: str, selected: Sequence[str],
                               tree: Sequence[TreeNode] = HIERARCHY_TREE) -> bool:
    children = get_direct_children_ids(node_id, tree)
    count = sum(1 for c in children if c in selected)
    return 0 < count < len(children)


def get_checkbox_state(node_id: str, selected: Sequence[str],
                       tree: Sequence[TreeNode] = HIERARCHY_TREE) -> CheckboxState:
    """
    Leaves are checked when selected. A parent is checked when all of its direct
    children are, and "indeterminate" when only some are or when it is selected itself
    without all of its children.
    """
    if not get_direct_children_ids(node_id, tree):
        return node_id in selected
    if are_all_children_selected(node_id, selected, tree):
        return True
    if are_some_children_selected(node_id, selected, tree) or node_id in selected:
        return "indeterminate"
    return False


def checkbox_states(selected: Sequence[str],
                    tree: Sequence[TreeNode] = HIERARCHY_TREE) -> Dict[str, CheckboxState]:
    return {n.id: get_checkbox_state(n.id, selected, tree) for n in _walk(tree)}


# ==========================================================================
#  Filter query
# ==========================================================================

def build_location_filter_query(
        location_ids: Sequence[str],
        mapping: Mapping[str, LocationMapping] = LOCATION_TO_VOYAGER
) -> Optional[str]:
    """
    One fq for a set of (already expanded) location ids:
    (grp_Region:("A") OR grp_Country:("B" OR "C") OR grp_State:("D")).
    Fields are ORed, not ANDed, so a region, its countries and their states widen
    the match together. Unmapped ids are skipped; None if nothing maps.
    """
    by_field: Dict[str, List[str]] = {}
    for location_id in location_ids:
        target = mapping.get(location_id)
        if target is None:
            logger.debug(f"[Location] No Voyager mapping for '{location_id}'")
            continue
        values = by_field.setdefault(target.field, [])
        if target.value not in values:
            values.append(target.value)

    if not by_field:
        return None
    clauses = [
        "{}:({})".format(field, " OR ".join('"{}"'.format(v.replace('"', '\\"')) for v in values))
        for field, values in by_field.items()
    ]
    return "(" + " OR ".join(clauses) + ")"


def build_selection_fragment(selected: Sequence[str],
                             tree: Sequence[TreeNode] = HIERARCHY_TREE) -> Optional[str]:
    """Expands a picker selection and encodes it as a single fq fragment."""
    return build_location_filter_query(expand_selected_locations(selected, tree))
