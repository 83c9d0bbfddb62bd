"""
Grouping projector: builds the node structure for a view mode from a flat,
already filtered endpoint sequence. Every function here is pure.
"""
import logging
from typing import Callable, Dict, Iterable, List

from .models import EndpointRecord
from .view_mode import (
    DEFAULT_UNTAGGED_LABEL, AutoDiscoveryNodes, ClassMethodNodes,
    NodeStructure, SwaggerNodes, ViewMode
)


logger = logging.getLogger("EndpointCatalog.Grouping")


def _partition_by_class(endpoints: Iterable[EndpointRecord]) -> Dict[str, List[EndpointRecord]]:
    # Stable: classes in first-seen order, endpoints in input order
    grouped: Dict[str, List[EndpointRecord]] = {}
    for endpoint in endpoints:
        grouped.setdefault(endpoint.class_name, []).append(endpoint)
    return grouped


def build_auto_discovery(endpoints: Iterable[EndpointRecord]) -> AutoDiscoveryNodes:
    """Group endpoints by declaring class."""
    return AutoDiscoveryNodes(grouped_by_class=_partition_by_class(endpoints))


def build_swagger(endpoints: Iterable[EndpointRecord],
                  untagged_label: str = DEFAULT_UNTAGGED_LABEL) -> SwaggerNodes:
    """
    Group endpoints by tag, then by class.

    An endpoint with several tags is placed under each of them. An endpoint
    without tags goes into the untagged bucket exactly once.

    Args:
        endpoints: Filtered endpoints in display order
        untagged_label: Bucket name for endpoints without tags

    Returns:
        SwaggerNodes structure
    """
    grouped: Dict[str, Dict[str, List[EndpointRecord]]] = {}
    for endpoint in endpoints:
        tags = endpoint.tags or (untagged_label,)
        for tag in tags:
            classes = grouped.setdefault(tag, {})
            classes.setdefault(endpoint.class_name, []).append(endpoint)

    return SwaggerNodes(grouped_by_tag=grouped, untagged_label=untagged_label)


def build_class_method(endpoints: Iterable[EndpointRecord]) -> ClassMethodNodes:
    """
    Key endpoints by class, then by method name.

    Method names are assumed unique within a class. When they are not, the
    later endpoint replaces the earlier one and the earlier one is not shown.
    """
    grouped: Dict[str, Dict[str, EndpointRecord]] = {}
    for endpoint in endpoints:
        methods = grouped.setdefault(endpoint.class_name, {})
        replaced = methods.get(endpoint.method_name)
        if replaced is not None:
            logger.debug(
                f"Method name collision in {endpoint.class_name}.{endpoint.method_name}: "
                f"{replaced} replaced by {endpoint}"
            )
        methods[endpoint.method_name] = endpoint

    return ClassMethodNodes(grouped_by_class=grouped)


_PROJECTORS: Dict[ViewMode, Callable[..., NodeStructure]] = {
    ViewMode.AUTO_DISCOVERY: lambda endpoints, untagged_label: build_auto_discovery(endpoints),
    ViewMode.SWAGGER: build_swagger,
    ViewMode.CLASS_METHOD: lambda endpoints, untagged_label: build_class_method(endpoints),
}


def project(endpoints: Iterable[EndpointRecord],
            view_mode: ViewMode,
            untagged_label: str = DEFAULT_UNTAGGED_LABEL) -> NodeStructure:
    """
    Build the node structure for a view mode.

    Args:
        endpoints: Filtered flat endpoint sequence
        view_mode: Active view mode
        untagged_label: Untagged bucket name used by the Swagger view

    Returns:
        NodeStructure variant matching view_mode
    """
    endpoints = list(endpoints)
    structure = _PROJECTORS[view_mode](endpoints, untagged_label)
    logger.debug(f"Projected {len(endpoints)} endpoints for {view_mode.name}")
    return structure
