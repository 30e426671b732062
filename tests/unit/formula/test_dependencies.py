"""Unit tests for FieldDependencyGraph."""

from reportbuilder.formula.dependencies import FieldDependencyGraph
from reportbuilder.schemas.field import FieldDefinition


class TestFieldDependencyGraph:
    """Tests for FieldDependencyGraph class."""

    def test_initialization(self):
        """Test that graph initializes empty."""
        graph = FieldDependencyGraph()
        assert len(graph.dependencies) == 0
        assert len(graph.reverse) == 0

    def test_add_field_with_deps(self):
        """Test adding a field with dependencies."""
        graph = FieldDependencyGraph()
        graph.add_field("total", {"price", "qty"})
        assert graph.reverse["total"] == {"price", "qty"}
        assert graph.get_dependents("price") == {"total"}
        assert graph.get_dependents("qty") == {"total"}

    def test_from_definitions_skips_raw_fields(self):
        """Test that only calculated definitions contribute edges."""
        raw = FieldDefinition(key="qty", label="Qty")
        doubled = FieldDefinition.model_validate(
            {
                "key": "doubled",
                "label": "Doubled",
                "kind": "calculated",
                "calc": {
                    "op": "ARITH",
                    "left": {"type": "field", "value": "qty"},
                    "operator": "*",
                    "right": {"type": "const", "value": 2},
                },
            }
        )
        graph = FieldDependencyGraph.from_definitions([raw, doubled])
        assert "qty" not in graph.reverse
        assert graph.get_dependents("qty") == {"doubled"}

    def test_self_circular_reference(self):
        """Test detecting a self reference."""
        graph = FieldDependencyGraph()
        assert graph.detect_circular_reference("a", {"a"}) is True
        assert graph.detect_circular_reference("a", set()) is False

    def test_indirect_circular_reference(self):
        """Test detecting a cycle through another field."""
        graph = FieldDependencyGraph()
        graph.add_field("b", {"a"})
        graph.add_field("c", {"b"})
        assert graph.detect_circular_reference("a", {"c"}) is True
        assert graph.detect_circular_reference("d", {"c"}) is False

    def test_update_replaces_dependencies(self):
        """Test that re-adding a field replaces its edges."""
        graph = FieldDependencyGraph()
        graph.add_field("a", {"x"})
        graph.add_field("a", {"y"})
        assert graph.reverse["a"] == {"y"}
        assert graph.get_dependents("x") == set()

    def test_remove_keeps_dependent_edges(self):
        """Test that fields reading a removed key keep their edge."""
        graph = FieldDependencyGraph()
        graph.add_field("b", {"a"})
        graph.add_field("a", {"x"})
        graph.remove_field("a")
        assert "a" not in graph.reverse
        assert graph.get_dependents("x") == set()
        assert graph.get_dependents("a") == {"b"}
        assert graph.detect_circular_reference("a", {"b"}) is True

    def test_resolve_order_keeps_declared_order(self):
        """Test that independent fields keep their order."""
        graph = FieldDependencyGraph()
        graph.add_field("first", {"x"})
        graph.add_field("second", {"y"})
        assert graph.resolve_order(["first", "second"]) == (["first", "second"], [])

    def test_resolve_order_forward_reference(self):
        """Test that a field is moved after the field it reads."""
        graph = FieldDependencyGraph()
        graph.add_field("doubled", {"total"})
        graph.add_field("total", {"price"})
        graph.add_field("other", set())
        ordered, unresolved = graph.resolve_order(["doubled", "total", "other"])
        assert ordered == ["total", "doubled", "other"]
        assert unresolved == []

    def test_resolve_order_with_cycle(self):
        """Test that cyclic fields are reported as unresolved."""
        graph = FieldDependencyGraph()
        graph.add_field("a", {"b"})
        graph.add_field("b", {"a"})
        graph.add_field("c", set())
        ordered, unresolved = graph.resolve_order(["a", "b", "c"])
        assert ordered == ["c"]
        assert unresolved == ["a", "b"]
