"""Field registry: the active field set and the column selection."""

from collections.abc import Iterable, Iterator, Mapping, Sequence
from typing import Any

from pydantic import ValidationError as PydanticValidationError

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
from reportbuilder.core.logging import LoggerMixin
from reportbuilder.formula.dependencies import FieldDependencyGraph
from reportbuilder.schemas.field import FieldDefinition, FieldDefinitionBase, FieldSource
from reportbuilder.services.field_store import FieldStore


def _validation_errors(exc: PydanticValidationError) -> list[dict[str, Any]]:
    return [
        {
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]


class FieldRegistry(LoggerMixin):
    """
    Ordered union of built-in and user field definitions.

    Built-in fields come first and cannot be removed; user fields follow
    in creation order. The selection set is kept separately and only
    decides which columns are shown and exported; column order always
    follows the field list.

    User fields are loaded from the store at construction and the full
    user field list is saved back after every successful add or remove.
    """

    def __init__(
        self,
        builtin_fields: Sequence[FieldDefinition],
        store: FieldStore | None = None,
        selected_keys: Iterable[str] | None = None,
    ) -> None:
        """
        Initialize registry.

        Args:
            builtin_fields: System fields of the dataset
            store: Persistence port for user fields (None keeps them in memory only)
            selected_keys: Initially selected keys (defaults to all built-in fields)
        """
        self._builtin: tuple[FieldDefinition, ...] = tuple(
            f.model_copy(update={"source": FieldSource.SYSTEM}) for f in builtin_fields
        )
        self._user: list[FieldDefinition] = []
        self._store = store
        self._graph = FieldDependencyGraph.from_definitions(self._builtin)

        if store is not None:
            self._load(store.load())

        if selected_keys is None:
            selected_keys = [f.key for f in self._builtin]
        self._selected: set[str] = {key for key in selected_keys if key in self}

    # ==========================================================================
    # Queries
    # ==========================================================================

    @property
    def fields(self) -> tuple[FieldDefinition, ...]:
        """All fields in column order."""
        return self._builtin + tuple(self._user)

    @property
    def builtin_fields(self) -> tuple[FieldDefinition, ...]:
        return self._builtin

    @property
    def user_fields(self) -> tuple[FieldDefinition, ...]:
        return tuple(self._user)

    @property
    def selected_keys(self) -> frozenset[str]:
        return frozenset(self._selected)

    @property
    def selected_fields(self) -> tuple[FieldDefinition, ...]:
        """Selected fields in field-list order (not selection order)."""
        return tuple(f for f in self.fields if f.key in self._selected)

    def is_selected(self, key: str) -> bool:
        return key in self._selected

    def get(self, key: str) -> FieldDefinition | None:
        for field in self.fields:
            if field.key == key:
                return field
        return None

    def __contains__(self, key: object) -> bool:
        return any(f.key == key for f in self.fields)

    def __iter__(self) -> Iterator[FieldDefinition]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self._builtin) + len(self._user)

    # ==========================================================================
    # Mutations
    # ==========================================================================

    def add(self, definition: FieldDefinitionBase | Mapping[str, Any]) -> FieldDefinition:
        """
        Add a user field at the end of the field list.

        Args:
            definition: Field definition, or its plain mapping form

        Returns:
            The stored definition (``source`` is always ``user``)

        Raises:
            RequiredFieldError: If key or label is missing
            ValidationError: If the definition is malformed
            DuplicateFieldKeyError: If the key already exists
            UnknownFieldReferenceError: If the formula reads an unknown field
            CircularReferenceError: If the formula reads itself
        """
        field = self._validate(definition)
        self._save(self._user + [field])

        self._user.append(field)
        self._graph.add_field(field.key, set(field.references()))

        self.logger.info(
            f"Added user field '{field.key}'",
            extra={"field_key": field.key, "kind": field.kind.value},
        )
        return field

    def remove(self, key: str, confirmed: bool = False) -> FieldDefinition:
        """
        Remove a user field and drop it from the selection.

        Args:
            key: Key of the field to remove
            confirmed: Explicit confirmation of the destructive action

        Returns:
            The removed definition

        Raises:
            FieldNotFoundError: If no field has this key
            ProtectedFieldError: If the field is built-in
            DeletionNotConfirmedError: If ``confirmed`` is not set
        """
        field = self.get(key)
        if field is None:
            raise FieldNotFoundError(key)
        if not field.is_user_defined:
            raise ProtectedFieldError(key)
        if not confirmed:
            raise DeletionNotConfirmedError(key)

        remaining = [f for f in self._user if f.key != key]
        self._save(remaining)

        self._user = remaining
        self._selected.discard(key)
        self._graph.remove_field(key)

        dependents = sorted(self._graph.get_dependents(key))
        if dependents:
            self.logger.warning(
                f"Removed field '{key}' is still referenced by: {', '.join(dependents)}"
            )
        self.logger.info(f"Removed user field '{key}'", extra={"field_key": key})
        return field

    def toggle_selection(self, key: str) -> bool:
        """
        Flip whether a field is shown and exported.

        Args:
            key: Field key

        Returns:
            New selection state

        Raises:
            FieldNotFoundError: If no field has this key
        """
        if key not in self:
            raise FieldNotFoundError(key)

        if key in self._selected:
            self._selected.discard(key)
            return False
        self._selected.add(key)
        return True

    # ==========================================================================
    # Internals
    # ==========================================================================

    def _validate(
        self,
        definition: FieldDefinitionBase | Mapping[str, Any],
        allow_dangling: bool = False,
    ) -> FieldDefinition:
        if isinstance(definition, Mapping):
            for attribute in ("key", "label"):
                value = definition.get(attribute)
                if value is None or (isinstance(value, str) and not value.strip()):
                    raise RequiredFieldError(attribute)
            data = dict(definition)
        else:
            data = definition.model_dump()

        data["source"] = FieldSource.USER
        try:
            field = FieldDefinition.model_validate(data)
        except PydanticValidationError as e:
            raise ValidationError("Invalid field definition", errors=_validation_errors(e)) from e

        if field.key in self:
            raise DuplicateFieldKeyError(field.key)

        references = set(field.references())
        missing = sorted(ref for ref in references if ref != field.key and ref not in self)
        if missing and not allow_dangling:
            raise UnknownFieldReferenceError(field.key, missing)
        if self._graph.detect_circular_reference(field.key, references):
            raise CircularReferenceError(field.key)

        return field

    def _load(self, stored: list[dict[str, Any]]) -> None:
        """
        Load persisted user fields, skipping entries that no longer validate.

        A formula may still read a field that was removed after it was
        saved; such entries load and the dangling operand evaluates to None.
        """
        for entry in stored:
            try:
                field = self._validate(entry, allow_dangling=True)
            except (RequiredFieldError, ValidationError, DuplicateFieldKeyError,
                    CircularReferenceError) as e:
                self.logger.warning(f"Skipping stored field {entry.get('key')!r}: {e.message}")
                continue
            self._user.append(field)
            self._graph.add_field(field.key, set(field.references()))

        if self._user:
            self.logger.info(f"Loaded {len(self._user)} user fields")

    def _save(self, user_fields: list[FieldDefinition]) -> None:
        if self._store is not None:
            self._store.save([f.to_storage() for f in user_fields])
