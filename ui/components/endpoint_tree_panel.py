"""
Endpoint tree panel with view mode switching, keyword filtering and
selection that survives re-scans.
"""
import tkinter as tk
from tkinter import ttk
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Tuple

from catalog.filtering import FilterState, HighlightMarker, highlight
from catalog.identity import EndpointIdentity
from catalog.models import EndpointRecord
from catalog.view_mode import (
    AutoDiscoveryNodes, ClassMethodNodes, GroupKey, NodeStructure, SwaggerNodes,
    ViewMode, group_key
)
from ui.controller import EndpointTreeController, TreePresenter
from utils.debouncer import Debouncer
from utils.logger import get_logger, log_user_action


GROUP_PREFIX = "g:"
LEAF_PREFIX = "e:"

# Control characters never appear in endpoint text, so they can delimit
# highlighted spans in the details pane.
_DETAIL_MARKER = HighlightMarker(open="\x02", close="\x03")

METHOD_COLORS = {
    'GET': 'blue',
    'POST': 'green',
    'PUT': 'orange',
    'PATCH': 'purple',
    'DELETE': 'red'
}


def split_highlighted(text: str, marker: HighlightMarker = _DETAIL_MARKER) -> List[Tuple[str, bool]]:
    """
    Split marked-up text into (segment, highlighted) pairs.

    Nested markers are flattened: a segment is highlighted while at least
    one marker is open.
    """
    segments: List[Tuple[str, bool]] = []
    depth = 0
    current = ""
    i = 0
    while i < len(text):
        if text.startswith(marker.open, i):
            if current:
                segments.append((current, depth > 0))
                current = ""
            depth += 1
            i += len(marker.open)
        elif text.startswith(marker.close, i):
            if current:
                segments.append((current, depth > 0))
                current = ""
            depth = max(depth - 1, 0)
            i += len(marker.close)
        else:
            current += text[i]
            i += 1
    if current:
        segments.append((current, depth > 0))
    return segments


class EndpointTreePanel(ttk.Frame, TreePresenter):
    """
    Tree of discovered endpoints.

    Features:
    - Three view modes (auto discovery, Swagger tags, class/method)
    - Debounced multi-keyword filter
    - Expansion and selection kept across view switches and re-scans
    - Details pane with highlighted filter matches
    - Expand/collapse all and keyboard shortcuts

    Group nodes get generated item ids, mapped to and from their group keys.
    """

    def __init__(self,
                 parent,
                 controller: EndpointTreeController,
                 filter_debounce_ms: int = 200,
                 on_endpoint_selected: Optional[Callable[[EndpointRecord], None]] = None,
                 on_refresh_requested: Optional[Callable[[], None]] = None,
                 **kwargs):
        """
        Initialize the endpoint tree panel.

        Args:
            parent: Parent widget
            controller: Controller owning view mode, filter and selection
            filter_debounce_ms: Delay before typed filter text is applied
            on_endpoint_selected: Callback when the user selects an endpoint
            on_refresh_requested: Callback for the refresh button
            **kwargs: Additional frame arguments
        """
        super().__init__(parent, **kwargs)

        self.controller = controller
        self.on_endpoint_selected = on_endpoint_selected
        self.on_refresh_requested = on_refresh_requested
        self.logger = get_logger("EndpointTreePanel")

        # State
        self._leaf_endpoints: Dict[str, EndpointRecord] = {}
        self._group_iids: Dict[GroupKey, str] = {}
        self._group_keys: Dict[str, GroupKey] = {}
        self.shortcuts: Dict[str, Dict[str, Any]] = {}
        self._filter_state = FilterState.inactive()
        self._programmatic_selection: Optional[EndpointRecord] = None
        self.selected_endpoint: Optional[EndpointRecord] = None

        self.filter_var = tk.StringVar()
        self.view_mode_var = tk.StringVar(value=controller.current_view_mode.label)
        self._filter_debouncer = Debouncer(filter_debounce_ms, schedule=self.after, cancel=self.after_cancel)

        self._create_widgets()
        self._setup_layout()
        self._setup_bindings()

        controller.set_presenter(self)
        controller.add_view_mode_listener(self._on_view_mode_changed)
        controller.add_filter_listener(self._on_filter_changed)

    def _create_widgets(self):
        """Create UI widgets."""
        self.filter_frame = ttk.Frame(self)

        ttk.Label(self.filter_frame, text="View:").grid(row=0, column=0, sticky='w', padx=(0, 5))
        self.view_mode_combo = ttk.Combobox(
            self.filter_frame,
            textvariable=self.view_mode_var,
            values=[mode.label for mode in ViewMode],
            state='readonly',
            width=15
        )
        self.view_mode_combo.grid(row=0, column=1, sticky='w', padx=(0, 10))

        ttk.Label(self.filter_frame, text="Filter:").grid(row=0, column=2, sticky='w', padx=(0, 5))
        self.filter_entry = ttk.Entry(self.filter_frame, textvariable=self.filter_var, width=25)
        self.filter_entry.grid(row=0, column=3, sticky='ew', padx=(0, 10))

        self.clear_button = ttk.Button(self.filter_frame, text="Clear", command=self._clear_filter, width=8)
        self.clear_button.grid(row=0, column=4, padx=(0, 5))

        self.refresh_button = ttk.Button(self.filter_frame, text="Refresh", command=self._on_refresh, width=8)
        self.refresh_button.grid(row=0, column=5)

        self.filter_frame.columnconfigure(3, weight=1)

        self.tree_actions_frame = ttk.Frame(self)
        self.expand_all_button = ttk.Button(self.tree_actions_frame, text="Expand All", command=self.expand_all)
        self.expand_all_button.pack(side=tk.LEFT, padx=(0, 5))
        self.collapse_all_button = ttk.Button(self.tree_actions_frame, text="Collapse All", command=self.collapse_all)
        self.collapse_all_button.pack(side=tk.LEFT)

        self.list_frame = ttk.LabelFrame(self, text="Endpoints", padding=5)
        self.endpoints_tree = ttk.Treeview(
            self.list_frame,
            columns=('method', 'path'),
            show='tree headings',
            height=12
        )
        self.endpoints_tree.heading('#0', text='Endpoint')
        self.endpoints_tree.heading('method', text='Method')
        self.endpoints_tree.heading('path', text='Path')
        self.endpoints_tree.column('#0', width=260, minwidth=150)
        self.endpoints_tree.column('method', width=80, minwidth=60)
        self.endpoints_tree.column('path', width=260, minwidth=150)

        for method, color in METHOD_COLORS.items():
            self.endpoints_tree.tag_configure(method.lower(), foreground=color)

        self.tree_scrollbar = ttk.Scrollbar(self.list_frame, orient='vertical', command=self.endpoints_tree.yview)
        self.endpoints_tree.configure(yscrollcommand=self.tree_scrollbar.set)

        self.details_frame = ttk.LabelFrame(self, text="Endpoint Details", padding=5)
        self.details_text = tk.Text(
            self.details_frame,
            height=6,
            wrap=tk.WORD,
            font=('Consolas', 9),
            state=tk.DISABLED
        )
        self.details_text.tag_configure('match', background='yellow')

        self.status_label = ttk.Label(self, text="No endpoints", font=('Segoe UI', 8), foreground='gray')

    def _setup_layout(self):
        """Set up widget layout."""
        self.columnconfigure(0, weight=1)
        self.rowconfigure(2, weight=3)
        self.rowconfigure(3, weight=1)

        self.filter_frame.grid(row=0, column=0, sticky='ew', padx=5, pady=(5, 5))
        self.tree_actions_frame.grid(row=1, column=0, sticky='w', padx=5, pady=(0, 5))

        self.list_frame.grid(row=2, column=0, sticky='nsew', padx=5, pady=(0, 5))
        self.list_frame.columnconfigure(0, weight=1)
        self.list_frame.rowconfigure(0, weight=1)
        self.endpoints_tree.grid(row=0, column=0, sticky='nsew')
        self.tree_scrollbar.grid(row=0, column=1, sticky='ns')

        self.details_frame.grid(row=3, column=0, sticky='nsew', padx=5)
        self.details_frame.columnconfigure(0, weight=1)
        self.details_frame.rowconfigure(0, weight=1)
        self.details_text.grid(row=0, column=0, sticky='nsew')

        self.status_label.grid(row=4, column=0, sticky='w', padx=5, pady=(5, 0))

    def _setup_bindings(self):
        """Set up event bindings."""
        self.filter_var.trace_add('write', self._on_filter_text_change)
        self.view_mode_combo.bind('<<ComboboxSelected>>', self._on_view_mode_selected)
        self.endpoints_tree.bind('<<TreeviewSelect>>', self._on_tree_selection)
        self.filter_entry.bind('<Escape>', lambda event: self._clear_filter())

        self.register_shortcut('Control-Shift-V', 'Cycle View Mode', self.cycle_view_mode, 'View')
        self.register_shortcut('Control-f', 'Focus Filter', self.focus_filter, 'View')

    def register_shortcut(self, key: str, description: str, callback: Callable[[], None], category: str):
        """
        Register a keyboard shortcut on the panel's window.

        Args:
            key: Tk key sequence without brackets, e.g. 'Control-f'
            description: Human-readable description
            callback: Function to call
            category: Shortcut category for grouping
        """
        self.shortcuts[key] = {
            'description': description,
            'callback': callback,
            'category': category
        }

        def handler(event):
            callback()
            return "break"

        self.winfo_toplevel().bind(f'<{key}>', handler, add='+')

    # User input

    def cycle_view_mode(self):
        """Switch to the next view mode, wrapping around after the last one."""
        modes = list(ViewMode)
        current = self.controller.current_view_mode
        self.controller.switch_view_mode(modes[(modes.index(current) + 1) % len(modes)])

    def focus_filter(self):
        self.filter_entry.focus_set()
        self.filter_entry.select_range(0, tk.END)

    def expand_all(self):
        for iid in self._group_keys:
            self.endpoints_tree.item(iid, open=True)
        log_user_action("Expand all groups")

    def collapse_all(self):
        for iid in self._group_keys:
            self.endpoints_tree.item(iid, open=False)
        log_user_action("Collapse all groups")

    def _on_filter_text_change(self, *args):
        self._filter_debouncer.debounce(lambda: self.controller.apply_filter(self.filter_var.get()))

    def _clear_filter(self):
        self.filter_var.set("")
        # Setting the variable schedules a debounced apply; clear_filter supersedes it
        self._filter_debouncer.cancel()
        self.controller.clear_filter()

    def _on_view_mode_selected(self, event=None):
        mode = ViewMode.from_string(self.view_mode_var.get())
        if mode is not None:
            self.controller.switch_view_mode(mode)

    def _on_refresh(self):
        if self.on_refresh_requested:
            self.on_refresh_requested()

    def _on_tree_selection(self, event=None):
        selection = self.endpoints_tree.selection()
        endpoint = self._leaf_endpoints.get(selection[0]) if selection else None
        if endpoint is None:
            return

        self.selected_endpoint = endpoint
        self._update_endpoint_details()

        # Programmatic restoration must not overwrite the user's selection
        if endpoint is self._programmatic_selection:
            return
        self._programmatic_selection = None

        self.controller.record_selection(endpoint)
        if self.on_endpoint_selected:
            self.on_endpoint_selected(endpoint)

    # Controller notifications

    def _on_view_mode_changed(self, mode: ViewMode):
        self.view_mode_var.set(mode.label)
        self.controller.render()

    def _on_filter_changed(self, filter_state: FilterState):
        self.controller.capture_expansion()
        self.controller.render()

    # TreePresenter

    def capture_expanded_keys(self) -> FrozenSet[GroupKey]:
        return frozenset(
            key for iid, key in self._group_keys.items()
            if self.endpoints_tree.tk.getboolean(self.endpoints_tree.item(iid, 'open'))
        )

    def apply_structure(self, structure: NodeStructure, filter_state: FilterState):
        self._filter_state = filter_state
        self._leaf_endpoints.clear()
        self._group_iids.clear()
        self._group_keys.clear()
        self._programmatic_selection = None
        self.selected_endpoint = None
        self.endpoints_tree.delete(*self.endpoints_tree.get_children(''))

        if isinstance(structure, AutoDiscoveryNodes):
            for class_name, endpoints in structure.grouped_by_class.items():
                parent = self._insert_group('', (class_name,), class_name, len(endpoints))
                for endpoint in endpoints:
                    self._insert_leaf(parent, endpoint, endpoint.display_name)
        elif isinstance(structure, SwaggerNodes):
            for tag, classes in structure.grouped_by_tag.items():
                count = sum(len(endpoints) for endpoints in classes.values())
                tag_node = self._insert_group('', (tag,), tag, count)
                for class_name, endpoints in classes.items():
                    class_node = self._insert_group(tag_node, (tag, class_name), class_name, len(endpoints))
                    for endpoint in endpoints:
                        self._insert_leaf(class_node, endpoint, endpoint.display_name)
        elif isinstance(structure, ClassMethodNodes):
            for class_name, methods in structure.grouped_by_class.items():
                class_node = self._insert_group('', (class_name,), class_name, len(methods))
                for method_name, endpoint in methods.items():
                    method_node = self._insert_group(class_node, (class_name, method_name), method_name, 1)
                    self._insert_leaf(method_node, endpoint, str(endpoint))

        self._update_status(structure)
        self._clear_endpoint_details()

    def expand_keys(self, keys: FrozenSet[GroupKey]):
        for key in keys:
            iid = self._group_iids.get(key)
            if iid is not None:
                self.endpoints_tree.item(iid, open=True)

    def select_endpoint(self, endpoint: EndpointRecord):
        for iid, candidate in self._leaf_endpoints.items():
            if candidate is endpoint:
                self._programmatic_selection = endpoint
                parent = self.endpoints_tree.parent(iid)
                while parent:
                    self.endpoints_tree.item(parent, open=True)
                    parent = self.endpoints_tree.parent(parent)
                self.endpoints_tree.selection_set(iid)
                self.endpoints_tree.see(iid)
                return

    def show_selection_not_restored(self, identity: EndpointIdentity):
        status_text = str(self.status_label.cget('text'))
        self.status_label.configure(
            text=f"{status_text} | Previously selected endpoint {identity} no longer exists"
        )

    def group_iid(self, key: GroupKey) -> Optional[str]:
        """Tree item id of the group with key, if it is shown."""
        return self._group_iids.get(key)

    # Helpers

    def _insert_group(self, parent: str, parts: Tuple[str, ...], label: str, count: int) -> str:
        key = group_key(*parts)
        iid = f"{GROUP_PREFIX}{len(self._group_iids)}"
        self.endpoints_tree.insert(parent, 'end', iid=iid, text=f"{label} ({count})", open=False)
        self._group_iids[key] = iid
        self._group_keys[iid] = key
        return iid

    def _insert_leaf(self, parent: str, endpoint: EndpointRecord, label: str):
        iid = f"{LEAF_PREFIX}{len(self._leaf_endpoints)}"
        self.endpoints_tree.insert(
            parent,
            'end',
            iid=iid,
            text=label,
            values=(endpoint.method.value, endpoint.path),
            tags=(endpoint.method.value.lower(),)
        )
        self._leaf_endpoints[iid] = endpoint

    def _update_status(self, structure: NodeStructure):
        total_count = len(self.controller.view_model.all_endpoints())
        shown = len(set(map(id, structure.endpoints())))

        if self._filter_state.is_active and shown == 0:
            status_text = f"No endpoints match '{self._filter_state.filter_text}'"
        elif shown == total_count:
            status_text = f"Showing {total_count} endpoints"
        else:
            status_text = f"Showing {shown} of {total_count} endpoints"

        self.status_label.configure(text=status_text)

    def _update_endpoint_details(self):
        if not self.selected_endpoint:
            return

        endpoint = self.selected_endpoint
        keywords = self._filter_state.keywords
        lines = [
            f"Method: {endpoint.method.value}",
            f"Path: {endpoint.path}",
            f"Source: {endpoint.class_name}.{endpoint.method_name}",
        ]
        if endpoint.summary:
            lines.append(f"Summary: {endpoint.summary}")
        if endpoint.tags:
            lines.append(f"Tags: {', '.join(endpoint.tags)}")

        self.details_text.configure(state=tk.NORMAL)
        self.details_text.delete('1.0', tk.END)
        marked = highlight("\n".join(lines), keywords, _DETAIL_MARKER)
        for segment, is_match in split_highlighted(marked):
            self.details_text.insert(tk.END, segment, ('match',) if is_match else ())
        self.details_text.configure(state=tk.DISABLED)

    def _clear_endpoint_details(self):
        self.details_text.configure(state=tk.NORMAL)
        self.details_text.delete('1.0', tk.END)
        self.details_text.insert('1.0', "Select an endpoint to view details")
        self.details_text.configure(state=tk.DISABLED)

    def get_selected_endpoint(self) -> Optional[EndpointRecord]:
        return self.selected_endpoint
