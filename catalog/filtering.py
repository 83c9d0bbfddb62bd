"""
Keyword filter engine for the endpoint catalog.

Keywords are AND-combined, case-insensitive substring matches. Each view mode
gets its own strategy; strategies only differ in which fields are searchable.
"""
import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .models import EndpointRecord
from .view_mode import ViewMode


@dataclass(frozen=True)
class FilterState:
    """Parsed filter text. A new instance is produced on every text change."""
    filter_text: str = ""
    keywords: Tuple[str, ...] = field(default_factory=tuple)
    is_active: bool = False

    @classmethod
    def parse(cls, text: Optional[str]) -> "FilterState":
        """
        Build a filter state from raw user input.

        Args:
            text: Text typed into the filter field, may be None or blank

        Returns:
            FilterState whose keywords are the whitespace-separated tokens
        """
        text = (text or "").strip()
        keywords = tuple(text.split())
        return cls(filter_text=text, keywords=keywords, is_active=bool(keywords))

    @classmethod
    def inactive(cls) -> "FilterState":
        return cls()


@dataclass(frozen=True)
class HighlightMarker:
    """Markup wrapped around highlighted keyword occurrences."""
    open: str = "<b>"
    close: str = "</b>"


def contains_keyword(text: Optional[str], keyword: str) -> bool:
    """Case-insensitive substring test; missing text never matches."""
    if not text:
        return False
    return keyword.casefold() in text.casefold()


def highlight(text: str,
              keywords: Sequence[str],
              marker: Optional[HighlightMarker] = None) -> str:
    """
    Wrap every case-insensitive keyword occurrence in highlight markers.

    Keywords are applied one after another, each pass working on the output
    of the previous one. When two keywords overlap, or a keyword matches text
    inside a marker added by an earlier pass, markers end up nested. That is
    left as is; the result is for display only.

    Args:
        text: Text to annotate
        keywords: Keywords in the order they were typed
        marker: Markup to use, defaults to <b>...</b>

    Returns:
        Annotated copy of text
    """
    if not keywords or not text:
        return text

    marker = marker or HighlightMarker()
    result = text
    for keyword in keywords:
        if not keyword:
            continue
        pattern = re.compile(re.escape(keyword), re.IGNORECASE)
        result = pattern.sub(lambda m: f"{marker.open}{m.group(0)}{marker.close}", result)
    return result


class FilterStrategy:
    """
    Field-substring AND-match over an endpoint's searchable fields.

    Subclasses widen the searchable fields for their view mode; the matching
    algorithm itself never changes.
    """

    view_mode: ViewMode = ViewMode.AUTO_DISCOVERY

    def searchable_fields(self, endpoint: EndpointRecord) -> List[Optional[str]]:
        return [endpoint.path, endpoint.method.value, endpoint.summary]

    def matches(self, endpoint: EndpointRecord, keywords: Sequence[str]) -> bool:
        """
        Check whether an endpoint satisfies every keyword.

        Args:
            endpoint: Endpoint to test
            keywords: Parsed keywords, all of which must match

        Returns:
            True if keywords is empty or every keyword is found in at least
            one searchable field
        """
        if not keywords:
            return True

        fields = self.searchable_fields(endpoint)
        return all(
            any(contains_keyword(value, keyword) for value in fields)
            for keyword in keywords
        )

    def highlight(self,
                  text: str,
                  keywords: Sequence[str],
                  marker: Optional[HighlightMarker] = None) -> str:
        return highlight(text, keywords, marker)


class AutoDiscoveryFilterStrategy(FilterStrategy):
    """Matches on path, HTTP method and summary."""
    view_mode = ViewMode.AUTO_DISCOVERY


class SwaggerFilterStrategy(FilterStrategy):
    """Also matches on tag text and operation id."""
    view_mode = ViewMode.SWAGGER

    def searchable_fields(self, endpoint: EndpointRecord) -> List[Optional[str]]:
        fields = super().searchable_fields(endpoint)
        fields.extend(endpoint.tags)
        fields.append(endpoint.operation_id)
        return fields


class ClassMethodFilterStrategy(FilterStrategy):
    """Also matches on declaring class and method name."""
    view_mode = ViewMode.CLASS_METHOD

    def searchable_fields(self, endpoint: EndpointRecord) -> List[Optional[str]]:
        fields = super().searchable_fields(endpoint)
        fields.extend([endpoint.class_name, endpoint.method_name])
        return fields


_STRATEGIES: Dict[ViewMode, FilterStrategy] = {
    ViewMode.AUTO_DISCOVERY: AutoDiscoveryFilterStrategy(),
    ViewMode.SWAGGER: SwaggerFilterStrategy(),
    ViewMode.CLASS_METHOD: ClassMethodFilterStrategy(),
}


def get_filter_strategy(view_mode: ViewMode) -> FilterStrategy:
    """Get the filter strategy registered for a view mode."""
    return _STRATEGIES[view_mode]


def matches(endpoint: EndpointRecord,
            keywords: Sequence[str],
            view_mode: ViewMode = ViewMode.AUTO_DISCOVERY) -> bool:
    """Convenience wrapper around the strategy for view_mode."""
    return get_filter_strategy(view_mode).matches(endpoint, keywords)


def filter_endpoints(endpoints: Iterable[EndpointRecord],
                     filter_state: FilterState,
                     view_mode: ViewMode) -> List[EndpointRecord]:
    """
    Narrow endpoints to those matching the filter, keeping input order.

    Args:
        endpoints: Flat endpoint collection from the latest scan
        filter_state: Current filter
        view_mode: Active view mode, selects the strategy

    Returns:
        New list of matching endpoints
    """
    if not filter_state.is_active:
        return list(endpoints)

    strategy = get_filter_strategy(view_mode)
    return [endpoint for endpoint in endpoints
            if strategy.matches(endpoint, filter_state.keywords)]
