"""Unit tests for FieldRegistry."""

import pytest

from reportbuilder.core.exceptions import (
    CircularReferenceError,
    DeletionNotConfirmedError,
    DuplicateFieldKeyError,
    FieldNotFoundError,
    ProtectedFieldError,
    RequiredFieldError,
    UnknownFieldReferenceError,
    ValidationError,
)
from reportbuilder.schemas.field import FieldSource
from reportbuilder.services.field_registry import FieldRegistry
from reportbuilder.services.field_store import InMemoryFieldStore
from reportbuilder.services.orders import ORDER_FIELDS
from reportbuilder.services.preview import materialize

BUILTIN_KEYS = [f.key for f in ORDER_FIELDS]


def raw_field(key: str, **extra) -> dict:
    return {"key": key, "label": key.title(), "kind": "raw", **extra}


def arith_field(key: str, left: str, right: str = "leadTimeDays") -> dict:
    return {
        "key": key,
        "label": key.title(),
        "kind": "calculated",
        "dataType": "number",
        "calc": {
            "op": "ARITH",
            "left": {"type": "field", "value": left},
            "operator": "+",
            "right": {"type": "field", "value": right},
        },
    }


class TestFieldRegistryQueries:
    """Tests for the initial state of the registry."""

    def test_builtin_fields_first(self, registry):
        """Test that built-in fields come first and are all selected."""
        assert [f.key for f in registry.fields] == BUILTIN_KEYS
        assert registry.selected_keys == frozenset(BUILTIN_KEYS)
        assert all(f.source == FieldSource.SYSTEM for f in registry.builtin_fields)
        assert len(registry) == len(ORDER_FIELDS)

    def test_get_and_contains(self, registry):
        """Test field lookup by key."""
        assert registry.get("orderId").label == "Order ID"
        assert registry.get("missing") is None
        assert "orderId" in registry
        assert "missing" not in registry

    def test_initial_selection(self):
        """Test an explicit initial selection ignores unknown keys."""
        registry = FieldRegistry(ORDER_FIELDS, selected_keys=["style", "nope"])
        assert registry.selected_keys == frozenset({"style"})


class TestFieldRegistryAdd:
    """Tests for adding user fields."""

    def test_add_raw_field(self, registry):
        """Test that a user field is appended and not selected."""
        field = registry.add(raw_field("notes", defaultValue="n/a"))
        assert field.source == FieldSource.USER
        assert registry.fields[-1].key == "notes"
        assert registry.user_fields == (field,)
        assert registry.is_selected("notes") is False

    def test_add_strips_key_and_label(self, registry):
        """Test that surrounding whitespace is removed."""
        field = registry.add({"key": "  notes ", "label": " Notes  "})
        assert field.key == "notes"
        assert field.label == "Notes"

    def test_add_raw_field_drops_calc(self, registry):
        """Test that a raw field never keeps a formula."""
        data = raw_field("notes")
        data["calc"] = {"op": "CONCAT", "parts": []}
        assert registry.add(data).calc is None

    @pytest.mark.parametrize("attribute", ["key", "label"])
    def test_add_requires_key_and_label(self, registry, attribute):
        """Test that blank key or label is rejected."""
        data = raw_field("notes")
        data[attribute] = "   "
        with pytest.raises(RequiredFieldError) as exc_info:
            registry.add(data)
        assert exc_info.value.message == f"Please provide {attribute}"
        assert len(registry) == len(ORDER_FIELDS)

    def test_add_duplicate_key(self, registry):
        """Test that duplicate keys are rejected and nothing changes."""
        registry.add(raw_field("notes"))
        before = len(registry)
        with pytest.raises(DuplicateFieldKeyError):
            registry.add(raw_field("notes"))
        with pytest.raises(DuplicateFieldKeyError):
            registry.add(raw_field("orderId"))
        assert len(registry) == before

    def test_add_calculated_without_calc(self, registry):
        """Test that a calculated field needs a formula."""
        with pytest.raises(ValidationError):
            registry.add({"key": "x", "label": "X", "kind": "calculated"})

    def test_add_unknown_reference(self, registry):
        """Test that formulas may only read existing fields."""
        with pytest.raises(UnknownFieldReferenceError) as exc_info:
            registry.add(arith_field("total", "price"))
        assert exc_info.value.details["missing"] == ["price"]

    def test_add_self_reference(self, registry):
        """Test that a formula cannot read its own field."""
        with pytest.raises(CircularReferenceError):
            registry.add(arith_field("loop", "loop"))

    def test_add_calculated_reading_user_field(self, registry):
        """Test that a formula may read an earlier user field."""
        registry.add(raw_field("extra", dataType="number", defaultValue="2"))
        field = registry.add(arith_field("total", "extra"))
        assert field.references() == ("extra", "leadTimeDays")


class TestFieldRegistryRemove:
    """Tests for removing user fields."""

    def test_remove_requires_confirmation(self, registry):
        """Test that removal must be confirmed."""
        registry.add(raw_field("notes"))
        with pytest.raises(DeletionNotConfirmedError):
            registry.remove("notes")
        assert "notes" in registry

    def test_remove_user_field(self, registry):
        """Test removing a selected user field."""
        registry.add(raw_field("notes"))
        registry.toggle_selection("notes")
        removed = registry.remove("notes", confirmed=True)
        assert removed.key == "notes"
        assert "notes" not in registry
        assert registry.is_selected("notes") is False

    def test_remove_builtin_field(self, registry):
        """Test that built-in fields are protected."""
        with pytest.raises(ProtectedFieldError):
            registry.remove("orderId", confirmed=True)
        assert "orderId" in registry

    def test_remove_unknown_field(self, registry):
        """Test that unknown keys are reported."""
        with pytest.raises(FieldNotFoundError):
            registry.remove("missing", confirmed=True)

    def test_removed_key_cannot_close_cycle(self, registry):
        """Test that re-adding a removed key cannot read its dependents."""
        registry.add(raw_field("base", dataType="number"))
        registry.add(arith_field("total", "base"))
        registry.remove("base", confirmed=True)
        with pytest.raises(CircularReferenceError):
            registry.add(arith_field("base", "total"))


class TestFieldRegistrySelection:
    """Tests for selection toggling."""

    def test_toggle(self, registry):
        """Test that toggling flips only the given key."""
        assert registry.toggle_selection("style") is False
        assert registry.is_selected("style") is False
        assert registry.is_selected("orderId") is True
        assert registry.toggle_selection("style") is True
        assert registry.is_selected("style") is True

    def test_toggle_unknown(self, registry):
        """Test that unknown keys cannot be selected."""
        with pytest.raises(FieldNotFoundError):
            registry.toggle_selection("missing")

    def test_selected_fields_follow_field_order(self, registry):
        """Test that selection order does not affect column order."""
        registry.add(raw_field("notes"))
        registry.toggle_selection("notes")
        registry.toggle_selection("orderId")
        registry.toggle_selection("orderId")
        keys = [f.key for f in registry.selected_fields]
        assert keys == BUILTIN_KEYS + ["notes"]


class TestFieldRegistryPersistence:
    """Tests for loading and saving user fields."""

    def test_mutations_are_saved(self, registry, store):
        """Test that the store always holds the full user field list."""
        registry.add(raw_field("notes"))
        registry.add(raw_field("extra"))
        assert [f["key"] for f in store.load()] == ["notes", "extra"]

        registry.remove("notes", confirmed=True)
        assert [f["key"] for f in store.load()] == ["extra"]

    def test_stored_fields_use_camel_case(self, registry, store):
        """Test the structural form of a stored definition."""
        registry.add(raw_field("notes", dataType="string", defaultValue="n/a"))
        stored = store.load()[0]
        assert stored["dataType"] == "string"
        assert stored["defaultValue"] == "n/a"
        assert stored["source"] == "user"

    def test_fields_are_loaded(self, registry, store):
        """Test that a new registry sees previously saved fields."""
        registry.add(raw_field("notes"))
        registry.add(arith_field("total", "leadTimeDays"))

        reloaded = FieldRegistry(ORDER_FIELDS, store=store)
        assert [f.key for f in reloaded.user_fields] == ["notes", "total"]
        assert reloaded.get("total").is_calculated

    def test_invalid_stored_fields_are_skipped(self):
        """Test that broken or conflicting entries are ignored on load."""
        store = InMemoryFieldStore(
            [
                raw_field("notes"),
                {"key": "", "label": "Blank"},
                raw_field("orderId"),
                arith_field("loop", "loop"),
                {"key": "x", "label": "X", "kind": "calculated"},
            ]
        )
        registry = FieldRegistry(ORDER_FIELDS, store=store)
        assert [f.key for f in registry.user_fields] == ["notes"]

    def test_stored_dangling_reference_is_loaded(self):
        """Test that a stored formula reading a missing field still loads."""
        store = InMemoryFieldStore([arith_field("total", "price")])
        registry = FieldRegistry(ORDER_FIELDS, store=store)
        assert [f.key for f in registry.user_fields] == ["total"]

    def test_failed_save_leaves_registry_unchanged(self):
        """Test that the registry only changes after a successful save."""

        class FailingStore(InMemoryFieldStore):
            def save(self, fields):
                raise OSError("disk full")

        failing = FieldRegistry(ORDER_FIELDS, store=FailingStore())
        with pytest.raises(OSError):
            failing.add(raw_field("notes"))
        assert "notes" not in failing


class TestFieldRegistryInvariants:
    """Tests for guarantees that span several operations."""

    def test_toggle_leaves_fields_and_values_unchanged(self, registry, orders):
        """Test that selection changes neither field order nor computed values."""
        registry.add(arith_field("total", "leadTimeDays"))
        fields_before = registry.fields
        values_before = materialize(orders, registry.fields)

        registry.toggle_selection("total")
        registry.toggle_selection("orderId")

        assert registry.fields == fields_before
        assert materialize(orders, registry.fields) == values_before

    def test_dependent_field_survives_reload(self, registry, store):
        """Test that a field reading a removed field is still loaded after restart."""
        registry.add(raw_field("base", dataType="number"))
        registry.add(arith_field("double", "base"))
        registry.remove("base", confirmed=True)
        assert [f.key for f in registry.user_fields] == ["double"]

        reloaded = FieldRegistry(ORDER_FIELDS, store=store)
        assert [f.key for f in reloaded.user_fields] == ["double"]
        assert materialize([{"leadTimeDays": 3}], reloaded.fields)[0]["double"] is None

    def test_reloaded_dangling_reference_still_blocks_cycle(self, registry, store):
        """Test that re-adding a removed key after restart cannot close a cycle."""
        registry.add(raw_field("base", dataType="number"))
        registry.add(arith_field("double", "base"))
        registry.remove("base", confirmed=True)

        reloaded = FieldRegistry(ORDER_FIELDS, store=store)
        with pytest.raises(CircularReferenceError):
            reloaded.add(arith_field("base", "double"))
