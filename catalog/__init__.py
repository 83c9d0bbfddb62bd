"""
Endpoint catalog view-state engine.
"""

__version__ = "1.0.0"

from .models import EndpointRecord, EndpointSource, HttpMethod
from .view_mode import (
    ViewMode,
    NodeStructure,
    AutoDiscoveryNodes,
    SwaggerNodes,
    ClassMethodNodes,
    DEFAULT_UNTAGGED_LABEL,
    GroupKey,
    group_key
)
from .filtering import (
    FilterState,
    FilterStrategy,
    HighlightMarker,
    filter_endpoints,
    get_filter_strategy,
    highlight,
    matches
)
from .grouping import project
from .identity import EndpointIdentity, MatchResult, MatchTier, find_match
from .expansion import ExpansionState
from .view_model import EndpointViewModel

__all__ = [
    'EndpointRecord',
    'EndpointSource',
    'HttpMethod',
    'ViewMode',
    'NodeStructure',
    'AutoDiscoveryNodes',
    'SwaggerNodes',
    'ClassMethodNodes',
    'DEFAULT_UNTAGGED_LABEL',
    'GroupKey',
    'group_key',
    'FilterState',
    'FilterStrategy',
    'HighlightMarker',
    'filter_endpoints',
    'get_filter_strategy',
    'highlight',
    'matches',
    'project',
    'EndpointIdentity',
    'MatchResult',
    'MatchTier',
    'find_match',
    'ExpansionState',
    'EndpointViewModel'
]
