"""
View model holding the latest scan and the view-specific projections of it.
"""
import logging
from typing import List, Optional, Sequence

from .filtering import FilterState, filter_endpoints
from .grouping import project
from .models import EndpointRecord
from .view_mode import DEFAULT_UNTAGGED_LABEL, NodeStructure, ViewMode


class EndpointViewModel:
    """
    Keeps the flat endpoint collection and produces filtered node structures.

    The scan result is replaced wholesale on every refresh. The last filtered
    list is cached per (filter, view mode) pair; clear_filter() drops it.
    """

    def __init__(self, untagged_label: str = DEFAULT_UNTAGGED_LABEL):
        """
        Initialize the view model.

        Args:
            untagged_label: Bucket name for untagged endpoints in the Swagger view
        """
        self.untagged_label = untagged_label
        self.logger = logging.getLogger("EndpointCatalog.ViewModel")

        self._all_endpoints: List[EndpointRecord] = []
        self._filter_state = FilterState.inactive()
        self._cached_mode: Optional[ViewMode] = None
        self._cached_filtered: Optional[List[EndpointRecord]] = None

    def update_endpoints(self, endpoints: Sequence[EndpointRecord]):
        """Replace the endpoint collection with a new scan."""
        self._all_endpoints = list(endpoints)
        self._cached_filtered = None
        self.logger.debug(f"Endpoint collection replaced ({len(self._all_endpoints)} endpoints)")

    def all_endpoints(self) -> List[EndpointRecord]:
        return list(self._all_endpoints)

    @property
    def filter_state(self) -> FilterState:
        return self._filter_state

    def apply_filter(self, filter_state: FilterState, view_mode: ViewMode) -> List[EndpointRecord]:
        """
        Filter the current collection.

        Args:
            filter_state: Filter to apply
            view_mode: Active view mode, selects the filter strategy

        Returns:
            Matching endpoints in scan order
        """
        if (self._cached_filtered is not None
                and filter_state == self._filter_state
                and view_mode == self._cached_mode):
            return list(self._cached_filtered)

        self._filter_state = filter_state
        self._cached_mode = view_mode
        self._cached_filtered = filter_endpoints(self._all_endpoints, filter_state, view_mode)
        return list(self._cached_filtered)

    def clear_filter(self):
        self._filter_state = FilterState.inactive()
        self._cached_filtered = None
        self._cached_mode = None

    def structure_for(self, view_mode: ViewMode, filter_state: Optional[FilterState] = None) -> NodeStructure:
        """
        Build the node structure for a view mode.

        Args:
            view_mode: View mode to project
            filter_state: Filter to apply, defaults to the last applied one

        Returns:
            NodeStructure for view_mode
        """
        if filter_state is None:
            filter_state = self._filter_state
        filtered = self.apply_filter(filter_state, view_mode)
        return project(filtered, view_mode, self.untagged_label)
