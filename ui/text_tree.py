"""
Plain-text presenter for the endpoint tree, used when running without a display.
"""
from typing import FrozenSet, List, Optional, Set

from catalog.filtering import FilterState, HighlightMarker, highlight
from catalog.identity import EndpointIdentity
from catalog.models import EndpointRecord
from catalog.view_mode import (
    AutoDiscoveryNodes, ClassMethodNodes, GroupKey, NodeStructure, SwaggerNodes, group_key
)
from .controller import TreePresenter


INDENT = "  "


class TextTreePresenter(TreePresenter):
    """
    Renders node structures as indented text.

    Groups are printed with a ``+`` when collapsed and ``-`` when expanded;
    with show_collapsed set, children of collapsed groups are printed too.
    The selected endpoint is prefixed with ``*``.
    """

    def __init__(self, marker: Optional[HighlightMarker] = None, show_collapsed: bool = True):
        self.marker = marker or HighlightMarker()
        self.show_collapsed = show_collapsed
        self.structure: Optional[NodeStructure] = None
        self.filter_state = FilterState.inactive()
        self.expanded: Set[GroupKey] = set()
        self.selected: Optional[EndpointRecord] = None
        self.unrestored: Optional[EndpointIdentity] = None

    def capture_expanded_keys(self) -> FrozenSet[GroupKey]:
        return frozenset(self.expanded)

    def apply_structure(self, structure: NodeStructure, filter_state: FilterState):
        self.structure = structure
        self.filter_state = filter_state
        self.expanded = set()
        self.selected = None
        self.unrestored = None

    def expand_keys(self, keys: FrozenSet[GroupKey]):
        self.expanded.update(keys)

    def select_endpoint(self, endpoint: EndpointRecord):
        self.selected = endpoint

    def show_selection_not_restored(self, identity: EndpointIdentity):
        self.unrestored = identity

    def render(self) -> str:
        """Text for the current structure, one node per line."""
        if self.structure is None:
            return ""

        lines: List[str] = []
        structure = self.structure

        if isinstance(structure, AutoDiscoveryNodes):
            for class_name, endpoints in structure.grouped_by_class.items():
                if self._group(lines, 0, (class_name,), len(endpoints)):
                    for endpoint in endpoints:
                        self._leaf(lines, 1, endpoint)
        elif isinstance(structure, SwaggerNodes):
            for tag, classes in structure.grouped_by_tag.items():
                count = sum(len(endpoints) for endpoints in classes.values())
                if not self._group(lines, 0, (tag,), count):
                    continue
                for class_name, endpoints in classes.items():
                    if self._group(lines, 1, (tag, class_name), len(endpoints)):
                        for endpoint in endpoints:
                            self._leaf(lines, 2, endpoint)
        elif isinstance(structure, ClassMethodNodes):
            for class_name, methods in structure.grouped_by_class.items():
                if not self._group(lines, 0, (class_name,), len(methods)):
                    continue
                for method_name, endpoint in methods.items():
                    if self._group(lines, 1, (class_name, method_name), 1):
                        self._leaf(lines, 2, endpoint)

        if not lines and self.filter_state.is_active:
            lines.append(f"No endpoints match '{self.filter_state.filter_text}'")
        if self.unrestored is not None:
            lines.append(f"Previously selected endpoint {self.unrestored} no longer exists")
        return "\n".join(lines)

    def _group(self, lines: List[str], depth: int, parts, count: int) -> bool:
        key = group_key(*parts)
        is_open = key in self.expanded
        lines.append(f"{INDENT * depth}{'-' if is_open else '+'} {parts[-1]} ({count})")
        return is_open or self.show_collapsed

    def _leaf(self, lines: List[str], depth: int, endpoint: EndpointRecord):
        prefix = "* " if endpoint is self.selected else ""
        label = highlight(endpoint.display_name, self.filter_state.keywords, self.marker)
        lines.append(f"{INDENT * depth}{prefix}{label}")
