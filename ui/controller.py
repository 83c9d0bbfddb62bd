"""
Endpoint tree controller.
Owns the view mode, filter and selection state of the endpoint panel and
reconciles them with each new scan.
"""
import threading
from dataclasses import dataclass, field
from typing import Callable, FrozenSet, List, Optional, Sequence

from catalog.expansion import ExpansionState
from catalog.filtering import FilterState
from catalog.identity import EndpointIdentity, MatchResult, find_match
from catalog.models import EndpointRecord
from catalog.view_mode import GroupKey, NodeStructure, ViewMode
from catalog.view_model import EndpointViewModel
from utils.error_handler import ErrorCategory, ErrorHandler, ErrorInfo, ErrorSeverity, get_error_handler
from utils.logger import get_logger, log_user_action


ViewModeListener = Callable[[ViewMode], None]
FilterListener = Callable[[FilterState], None]


class TreePresenter:
    """
    What the controller needs from the tree widget that displays endpoints.
    """

    def capture_expanded_keys(self) -> FrozenSet[GroupKey]:
        """Group keys currently expanded in the tree."""
        raise NotImplementedError

    def apply_structure(self, structure: NodeStructure, filter_state: FilterState):
        """Replace the tree contents with a new structure."""
        raise NotImplementedError

    def expand_keys(self, keys: FrozenSet[GroupKey]):
        """Expand the groups with the given keys."""
        raise NotImplementedError

    def select_endpoint(self, endpoint: EndpointRecord):
        """Select the node showing endpoint."""
        raise NotImplementedError

    def show_selection_not_restored(self, identity: EndpointIdentity):
        """Tell the user the previously selected endpoint is gone. Optional."""


@dataclass
class RefreshOutcome:
    """What a render pass produced."""
    structure: NodeStructure
    visible_endpoints: List[EndpointRecord] = field(default_factory=list)
    expanded_keys: FrozenSet[GroupKey] = field(default_factory=frozenset)
    match: MatchResult = field(default_factory=MatchResult)

    @property
    def selection_restored(self) -> bool:
        return self.match.found


class EndpointTreeController:
    """
    Manages view mode switching, filtering and selection restoration.

    State is the triple (view mode, filter state, selected identity) plus the
    last captured expansion state. Every transition produces at most one
    notification, delivered synchronously after the internal lock has been
    released.
    """

    def __init__(self,
                 view_model: Optional[EndpointViewModel] = None,
                 presenter: Optional[TreePresenter] = None,
                 initial_view_mode: ViewMode = ViewMode.AUTO_DISCOVERY,
                 error_handler: Optional[ErrorHandler] = None):
        """
        Initialize the controller.

        Args:
            view_model: Holder of the endpoint collection
            presenter: Tree widget, may be attached later with set_presenter()
            initial_view_mode: View mode active when the panel opens
            error_handler: Receives exceptions raised by listeners
        """
        self.view_model = view_model or EndpointViewModel()
        self.presenter = presenter
        self.error_handler = error_handler or get_error_handler()
        self.logger = get_logger("TreeController")

        self._lock = threading.Lock()
        self._view_mode = initial_view_mode
        self._filter_state = FilterState.inactive()
        self._selected_identity: Optional[EndpointIdentity] = None
        self._expansion_state = ExpansionState.empty()

        self._view_mode_listeners: List[ViewModeListener] = []
        self._filter_listeners: List[FilterListener] = []

    # State accessors

    @property
    def current_view_mode(self) -> ViewMode:
        with self._lock:
            return self._view_mode

    @property
    def filter_state(self) -> FilterState:
        with self._lock:
            return self._filter_state

    @property
    def selected_identity(self) -> Optional[EndpointIdentity]:
        with self._lock:
            return self._selected_identity

    @property
    def expansion_state(self) -> ExpansionState:
        with self._lock:
            return self._expansion_state

    def set_presenter(self, presenter: Optional[TreePresenter]):
        self.presenter = presenter

    # Listener registration

    def add_view_mode_listener(self, listener: ViewModeListener):
        self._view_mode_listeners.append(listener)

    def remove_view_mode_listener(self, listener: ViewModeListener):
        if listener in self._view_mode_listeners:
            self._view_mode_listeners.remove(listener)

    def add_filter_listener(self, listener: FilterListener):
        self._filter_listeners.append(listener)

    def remove_filter_listener(self, listener: FilterListener):
        if listener in self._filter_listeners:
            self._filter_listeners.remove(listener)

    # Transitions

    def switch_view_mode(self, mode: ViewMode) -> bool:
        """
        Switch to another view mode.

        Expansion is captured from the presenter before the switch. Filter
        and selection are kept.

        Args:
            mode: View mode to switch to

        Returns:
            False if mode was already active, True otherwise
        """
        with self._lock:
            if mode == self._view_mode:
                return False

        # The presenter is read outside the lock; the mode is checked again
        # before it is committed.
        captured = self._presenter_expansion()

        with self._lock:
            if mode == self._view_mode:
                return False
            previous = self._view_mode
            self._view_mode = mode
            if captured is not None:
                self._expansion_state = captured

        log_user_action("Switch view mode", f"{previous.name} -> {mode.name}")
        self._notify(self._view_mode_listeners, mode)
        return True

    def apply_filter(self, text: Optional[str]) -> FilterState:
        """
        Replace the filter with one parsed from text.

        Args:
            text: Raw filter text

        Returns:
            The new FilterState
        """
        filter_state = FilterState.parse(text)
        with self._lock:
            self._filter_state = filter_state

        self.logger.debug(f"Filter applied: {list(filter_state.keywords)}")
        self._notify(self._filter_listeners, filter_state)
        return filter_state

    def clear_filter(self) -> FilterState:
        """Clear the filter and drop the view model's cached filter results."""
        self.view_model.clear_filter()
        log_user_action("Clear filter")
        return self.apply_filter("")

    def record_selection(self, endpoint: EndpointRecord):
        """Remember endpoint as the user's selection, replacing any previous one."""
        identity = EndpointIdentity.from_endpoint(endpoint)
        with self._lock:
            self._selected_identity = identity
        self.logger.debug(f"Selection recorded: {identity}")

    def match_selection(self, endpoints: Sequence[EndpointRecord]) -> MatchResult:
        """Run tiered matching of the stored selection against endpoints."""
        with self._lock:
            identity = self._selected_identity
        return find_match(identity, endpoints)

    def restore_selection(self, endpoints: Sequence[EndpointRecord]) -> bool:
        """
        Check whether the stored selection can be located in endpoints.

        The stored identity is left unchanged, so later refreshes keep
        looking for the user's last explicit selection.

        Returns:
            True if any tier matched
        """
        return self.match_selection(endpoints).found

    def find_matching_endpoint(self, endpoints: Sequence[EndpointRecord]) -> Optional[EndpointRecord]:
        """Return the endpoint the stored selection maps to, or None."""
        return self.match_selection(endpoints).endpoint

    def capture_expansion(self) -> ExpansionState:
        """Snapshot expanded groups from the presenter, if one is attached."""
        expansion = self._presenter_expansion()
        if expansion is None:
            return self.expansion_state

        with self._lock:
            self._expansion_state = expansion
        return expansion

    def _presenter_expansion(self) -> Optional[ExpansionState]:
        if self.presenter is None:
            return None
        return ExpansionState.of(self.presenter.capture_expanded_keys())

    # Projection and refresh

    def current_structure(self) -> NodeStructure:
        """Node structure for the current mode and filter."""
        with self._lock:
            mode, filter_state = self._view_mode, self._filter_state
        return self.view_model.structure_for(mode, filter_state)

    def render(self) -> RefreshOutcome:
        """
        Re-project the current data and push it to the presenter.

        Re-expands every previously expanded group that still exists and
        selects the best match for the stored selection among the visible
        endpoints.

        Returns:
            RefreshOutcome describing the result
        """
        with self._lock:
            mode = self._view_mode
            filter_state = self._filter_state
            identity = self._selected_identity
            expansion = self._expansion_state

        visible = self.view_model.apply_filter(filter_state, mode)
        structure = self.view_model.structure_for(mode, filter_state)
        expanded_keys = expansion.restorable_in(structure)
        match = find_match(identity, visible)

        if self.presenter is not None:
            self.presenter.apply_structure(structure, filter_state)
            self.presenter.expand_keys(expanded_keys)
            if match.found:
                self.presenter.select_endpoint(match.endpoint)

        if identity is not None and not match.found:
            self.logger.info(f"Selection {identity} could not be restored")
            if self.presenter is not None:
                self.presenter.show_selection_not_restored(identity)

        return RefreshOutcome(
            structure=structure,
            visible_endpoints=visible,
            expanded_keys=expanded_keys,
            match=match
        )

    def refresh(self, endpoints: Sequence[EndpointRecord]) -> RefreshOutcome:
        """
        Replace the endpoint collection with a new scan and re-render.

        Args:
            endpoints: Complete endpoint collection from the scanner

        Returns:
            RefreshOutcome for the new data
        """
        self.capture_expansion()
        self.view_model.update_endpoints(endpoints)
        outcome = self.render()

        self.logger.info(
            f"Refreshed with {len(endpoints)} endpoints "
            f"({len(outcome.visible_endpoints)} visible, "
            f"selection match: {outcome.match.tier.value})"
        )
        return outcome

    def _notify(self, listeners: list, payload):
        for listener in list(listeners):
            try:
                listener(payload)
            except Exception as e:
                self.error_handler.handle_error(
                    ErrorInfo(
                        category=ErrorCategory.UI,
                        severity=ErrorSeverity.ERROR,
                        message=f"Listener {getattr(listener, '__name__', listener)} failed: {e}",
                        context={"payload": payload}
                    ),
                    show_dialog=False
                )
