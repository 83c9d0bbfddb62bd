"""
Unit tests for the grouping projector and node structures.
"""
import pytest

from catalog.grouping import build_auto_discovery, build_class_method, build_swagger, project
from catalog.models import EndpointRecord, HttpMethod
from catalog.view_mode import (
    AutoDiscoveryNodes, ClassMethodNodes, SwaggerNodes, ViewMode, group_key
)
from tests.fixtures.endpoint_fixtures import EndpointFixtures


pytestmark = pytest.mark.unit


class TestAutoDiscovery:
    """Test cases for grouping by class."""

    def test_groups_by_class(self, service_endpoints):
        """Test that endpoints are grouped under their declaring class."""
        nodes = build_auto_discovery(service_endpoints)

        assert list(nodes.grouped_by_class) == ["UserController", "OrderController", "HealthController"]
        assert len(nodes.grouped_by_class["UserController"]) == 3
        assert len(nodes.grouped_by_class["OrderController"]) == 2

    def test_totality(self, service_endpoints):
        """Test that every endpoint appears exactly once."""
        nodes = build_auto_discovery(service_endpoints)

        assert sorted(map(id, nodes.endpoints())) == sorted(map(id, service_endpoints))

    def test_stable_order(self):
        """Test that endpoints keep their input order inside a group."""
        first = EndpointFixtures.endpoint("/z", class_name="A")
        second = EndpointFixtures.endpoint("/y", class_name="B")
        third = EndpointFixtures.endpoint("/x", class_name="A")

        nodes = build_auto_discovery([first, second, third])

        assert nodes.grouped_by_class["A"] == [first, third]

    def test_empty_input(self):
        """Test projecting no endpoints."""
        nodes = build_auto_discovery([])

        assert nodes.is_empty()
        assert nodes.group_keys() == frozenset()


class TestSwagger:
    """Test cases for grouping by tag."""

    def test_untagged_scenario(self, foo_endpoints):
        """Test /a (untagged) and /b (tag x): each lands in exactly one tag group."""
        endpoint_a, endpoint_b = foo_endpoints
        nodes = build_swagger(foo_endpoints, untagged_label="Untagged")

        assert nodes.grouped_by_tag == {
            "Untagged": {"Foo": [endpoint_a]},
            "x": {"Foo": [endpoint_b]},
        }

    def test_multi_tag_replication(self, service_endpoints):
        """Test that an endpoint with several tags appears under each tag."""
        create_user = service_endpoints[2]
        nodes = build_swagger(service_endpoints)

        assert create_user in nodes.grouped_by_tag["users"]["UserController"]
        assert create_user in nodes.grouped_by_tag["admin"]["UserController"]
        assert nodes.endpoints().count(create_user) == 2

    def test_untagged_exactly_once(self, service_endpoints):
        """Test that an untagged endpoint appears once, in the untagged bucket."""
        health = service_endpoints[5]
        nodes = build_swagger(service_endpoints)

        assert nodes.grouped_by_tag["Untagged"] == {"HealthController": [health]}
        assert nodes.endpoints().count(health) == 1

    def test_totality(self, service_endpoints):
        """Test that every endpoint appears once per tag, or once if untagged."""
        nodes = build_swagger(service_endpoints)
        leaves = nodes.endpoints()

        for endpoint in service_endpoints:
            assert leaves.count(endpoint) == max(len(endpoint.tags), 1)

    def test_custom_untagged_label(self, foo_endpoints):
        """Test that the untagged bucket name is configurable."""
        nodes = build_swagger(foo_endpoints, untagged_label="Uncategorized")

        assert "Uncategorized" in nodes.grouped_by_tag
        assert nodes.untagged_label == "Uncategorized"

    def test_group_keys(self, foo_endpoints):
        """Test tag and tag-then-class expansion keys."""
        nodes = build_swagger(foo_endpoints)

        assert nodes.group_keys() == frozenset({("Untagged",), ("Untagged", "Foo"), ("x",), ("x", "Foo")})

    def test_group_keys_with_slash_in_tag(self):
        """Test that a tag named like tag/class keeps its own keys."""
        first = EndpointFixtures.endpoint("/m1", class_name="Foo", method_name="m1", tags=("a",))
        second = EndpointFixtures.endpoint("/m2", class_name="Bar", method_name="m2", tags=("a/Foo",))

        nodes = build_swagger([first, second])

        assert nodes.group_keys() == frozenset({("a",), ("a", "Foo"), ("a/Foo",), ("a/Foo", "Bar")})

    def test_duplicate_tags_listed_once(self):
        """Test that an endpoint repeating a tag appears once in that tag."""
        endpoint = EndpointFixtures.endpoint("/m1", class_name="Foo", tags=("x", "x"))

        nodes = build_swagger([endpoint])

        assert nodes.grouped_by_tag["x"]["Foo"] == [endpoint]
        assert endpoint.tags == ("x",)


class TestClassMethod:
    """Test cases for keying by class and method."""

    def test_keys_by_class_and_method(self, foo_endpoints):
        """Test the class to method mapping."""
        endpoint_a, endpoint_b = foo_endpoints
        nodes = build_class_method(foo_endpoints)

        assert nodes.grouped_by_class == {"Foo": {"list": endpoint_a, "get": endpoint_b}}

    def test_collision_overwrites(self):
        """Test that a later endpoint with the same method name replaces the earlier one."""
        earlier = EndpointRecord(path="/v1/items", method=HttpMethod.GET, class_name="Items", method_name="list")
        later = EndpointRecord(path="/v2/items", method=HttpMethod.GET, class_name="Items", method_name="list")

        nodes = build_class_method([earlier, later])

        assert nodes.grouped_by_class["Items"]["list"] is later
        assert nodes.endpoints() == [later]

    def test_same_method_name_in_other_class(self):
        """Test that method names only collide within a class."""
        first = EndpointRecord(path="/a", method=HttpMethod.GET, class_name="A", method_name="list")
        second = EndpointRecord(path="/b", method=HttpMethod.GET, class_name="B", method_name="list")

        nodes = build_class_method([first, second])

        assert nodes.endpoints() == [first, second]

    def test_group_keys(self, foo_endpoints):
        """Test class and class-then-method expansion keys."""
        nodes = build_class_method(foo_endpoints)

        assert nodes.group_keys() == frozenset({("Foo",), ("Foo", "list"), ("Foo", "get")})


class TestProject:
    """Test cases for the per-mode dispatch."""

    @pytest.mark.parametrize("mode,structure_type", [
        (ViewMode.AUTO_DISCOVERY, AutoDiscoveryNodes),
        (ViewMode.SWAGGER, SwaggerNodes),
        (ViewMode.CLASS_METHOD, ClassMethodNodes),
    ])
    def test_structure_matches_mode(self, service_endpoints, mode, structure_type):
        """Test that each mode produces its own structure variant."""
        structure = project(service_endpoints, mode)

        assert isinstance(structure, structure_type)
        assert structure.view_mode == mode

    def test_accepts_iterators(self, service_endpoints):
        """Test projecting from a one-shot iterator."""
        structure = project(iter(service_endpoints), ViewMode.AUTO_DISCOVERY)

        assert len(structure.endpoints()) == len(service_endpoints)

    def test_untagged_label_passed_to_swagger(self, foo_endpoints):
        """Test that the untagged label reaches the Swagger projector."""
        structure = project(foo_endpoints, ViewMode.SWAGGER, untagged_label="Misc")

        assert "Misc" in structure.grouped_by_tag


class TestViewMode:
    """Test cases for view mode helpers."""

    @pytest.mark.parametrize("text,expected", [
        ("swagger", ViewMode.SWAGGER),
        ("CLASS_METHOD", ViewMode.CLASS_METHOD),
        ("class-method", ViewMode.CLASS_METHOD),
        ("Auto Discovery", ViewMode.AUTO_DISCOVERY),
        ("Class / Method", ViewMode.CLASS_METHOD),
    ])
    def test_from_string(self, text, expected):
        """Test resolving a mode from value, name or label."""
        assert ViewMode.from_string(text) == expected

    def test_from_string_unknown(self):
        """Test that unknown names resolve to None."""
        assert ViewMode.from_string("flat") is None
        assert ViewMode.from_string("") is None

    def test_default(self):
        """Test the default mode."""
        assert ViewMode.default() == ViewMode.AUTO_DISCOVERY

    def test_group_key(self):
        """Test building keys from group names."""
        assert group_key("users") == ("users",)
        assert group_key("users", "UserController") == ("users", "UserController")
