"""
Unit tests for expansion state restoration.
"""
import pytest

from catalog.expansion import ExpansionState
from catalog.grouping import build_auto_discovery, build_class_method, build_swagger
from tests.fixtures.endpoint_fixtures import EndpointFixtures


pytestmark = pytest.mark.unit


class TestExpansionState:
    """Test cases for ExpansionState."""

    def test_empty(self):
        """Test the empty state."""
        state = ExpansionState.empty()

        assert len(state) == 0
        assert ("Foo",) not in state

    def test_of_copies_keys(self):
        """Test building a state from any iterable of keys."""
        keys = [("Foo",), ("x", "Foo")]
        state = ExpansionState.of(keys)
        keys.append(("other",))

        assert state.expanded_keys == frozenset({("Foo",), ("x", "Foo")})
        assert ("x", "Foo") in state

    def test_restorable_keeps_existing_groups(self, foo_endpoints):
        """Test that keys still present in the new structure are restored."""
        state = ExpansionState.of({("x",), ("x", "Foo"), ("Untagged",)})
        structure = build_swagger(foo_endpoints)

        assert state.restorable_in(structure) == frozenset({("x",), ("x", "Foo"), ("Untagged",)})

    def test_restorable_drops_missing_groups(self, foo_endpoints):
        """Test that keys of vanished groups are dropped."""
        state = ExpansionState.of({("Foo",), ("Bar",), ("Foo", "list")})

        assert state.restorable_in(build_auto_discovery(foo_endpoints)) == frozenset({("Foo",)})
        assert state.restorable_in(build_class_method(foo_endpoints)) == frozenset({("Foo",), ("Foo", "list")})

    def test_restorable_in_filtered_structure(self, foo_endpoints):
        """Test restoration against a structure narrowed by a filter."""
        state = ExpansionState.of({("Foo", "list"), ("Foo", "get")})
        structure = build_class_method(foo_endpoints[1:])

        assert state.restorable_in(structure) == frozenset({("Foo", "get")})

    def test_slash_in_tag_does_not_restore_nested_class(self):
        """Test that expanding a tag containing '/' restores only that tag."""
        endpoints = [
            EndpointFixtures.endpoint("/m1", class_name="Foo", method_name="m1", tags=("a",)),
            EndpointFixtures.endpoint("/m2", class_name="Bar", method_name="m2", tags=("a/Foo",)),
        ]
        state = ExpansionState.of({("a/Foo",)})

        assert state.restorable_in(build_swagger(endpoints)) == frozenset({("a/Foo",)})
