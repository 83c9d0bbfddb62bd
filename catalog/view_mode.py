"""
View modes and the node structures projected for each of them.

Each view mode has exactly one structure class. Adding a mode means adding
an enum member, a structure class and a projector entry in grouping.py.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Tuple

from .models import EndpointRecord


DEFAULT_UNTAGGED_LABEL = "Untagged"


class ViewMode(Enum):
    """Hierarchical organizations available in the endpoint tree."""
    AUTO_DISCOVERY = "auto_discovery"
    SWAGGER = "swagger"
    CLASS_METHOD = "class_method"

    @property
    def label(self) -> str:
        return _VIEW_MODE_LABELS[self]

    @classmethod
    def default(cls) -> "ViewMode":
        return cls.AUTO_DISCOVERY

    @classmethod
    def from_string(cls, value: str) -> Optional["ViewMode"]:
        """
        Resolve a view mode from its value, member name or display label.

        Args:
            value: e.g. "swagger", "CLASS_METHOD" or "Class / Method"

        Returns:
            Matching ViewMode or None
        """
        if not value:
            return None

        wanted = value.strip().lower().replace('-', '_')
        for mode in cls:
            if wanted in (mode.value, mode.name.lower(), mode.label.lower()):
                return mode
        return None


_VIEW_MODE_LABELS = {
    ViewMode.AUTO_DISCOVERY: "Auto Discovery",
    ViewMode.SWAGGER: "Swagger",
    ViewMode.CLASS_METHOD: "Class / Method",
}


# Path of group names from the root, e.g. ("users", "UserController").
# Names may contain any character, so they are never joined into a string.
GroupKey = Tuple[str, ...]


def group_key(*parts: str) -> GroupKey:
    """Build the expansion key for the group reached through parts."""
    return tuple(parts)


class NodeStructure:
    """Base class for the per-mode node structures."""

    view_mode: ViewMode

    def group_keys(self) -> FrozenSet[GroupKey]:
        """All expandable group keys present in this structure."""
        raise NotImplementedError

    def endpoints(self) -> List[EndpointRecord]:
        """Leaf endpoints in display order (replicated leaves repeat)."""
        raise NotImplementedError

    def is_empty(self) -> bool:
        return not self.endpoints()


@dataclass
class AutoDiscoveryNodes(NodeStructure):
    """Endpoints grouped by declaring class."""
    grouped_by_class: Dict[str, List[EndpointRecord]] = field(default_factory=dict)
    view_mode: ViewMode = field(default=ViewMode.AUTO_DISCOVERY, init=False)

    def group_keys(self) -> FrozenSet[GroupKey]:
        return frozenset(group_key(class_name) for class_name in self.grouped_by_class)

    def endpoints(self) -> List[EndpointRecord]:
        return [endpoint
                for class_endpoints in self.grouped_by_class.values()
                for endpoint in class_endpoints]


@dataclass
class SwaggerNodes(NodeStructure):
    """Endpoints grouped by tag, then by declaring class."""
    grouped_by_tag: Dict[str, Dict[str, List[EndpointRecord]]] = field(default_factory=dict)
    untagged_label: str = DEFAULT_UNTAGGED_LABEL
    view_mode: ViewMode = field(default=ViewMode.SWAGGER, init=False)

    def group_keys(self) -> FrozenSet[GroupKey]:
        keys = set()
        for tag, classes in self.grouped_by_tag.items():
            keys.add(group_key(tag))
            for class_name in classes:
                keys.add(group_key(tag, class_name))
        return frozenset(keys)

    def endpoints(self) -> List[EndpointRecord]:
        return [endpoint
                for classes in self.grouped_by_tag.values()
                for class_endpoints in classes.values()
                for endpoint in class_endpoints]


@dataclass
class ClassMethodNodes(NodeStructure):
    """Endpoints keyed by declaring class, then by source method name."""
    grouped_by_class: Dict[str, Dict[str, EndpointRecord]] = field(default_factory=dict)
    view_mode: ViewMode = field(default=ViewMode.CLASS_METHOD, init=False)

    def group_keys(self) -> FrozenSet[GroupKey]:
        keys = set()
        for class_name, methods in self.grouped_by_class.items():
            keys.add(group_key(class_name))
            for method_name in methods:
                keys.add(group_key(class_name, method_name))
        return frozenset(keys)

    def endpoints(self) -> List[EndpointRecord]:
        return [endpoint
                for methods in self.grouped_by_class.values()
                for endpoint in methods.values()]
