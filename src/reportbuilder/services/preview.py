"""Preview materialization.

Turns raw dataset rows plus the active field set into preview rows, and
projects preview rows into the shapes consumed by the table view and the
export encoders.
"""

from collections.abc import Iterable, Mapping, Sequence
from types import MappingProxyType
from typing import Any

from reportbuilder.core.logging import get_logger
from reportbuilder.fields import TextFieldHandler, get_field_handler
from reportbuilder.fields.base import BaseFieldTypeHandler
from reportbuilder.formula.dependencies import FieldDependencyGraph
from reportbuilder.formula.evaluator import FormulaEvaluator
from reportbuilder.schemas.field import FieldDefinitionBase

logger = get_logger(__name__)


def _handler(field: FieldDefinitionBase) -> type[BaseFieldTypeHandler]:
    return get_field_handler(field.data_type) or TextFieldHandler


def evaluation_order(field_definitions: Sequence[FieldDefinitionBase]) -> list[FieldDefinitionBase]:
    """
    Order calculated fields so each is evaluated after the fields it reads.

    Fields that do not depend on each other keep their declared order.
    Fields on a reference cycle are appended in declared order; they will
    read whatever value the row holds at that point.

    Args:
        field_definitions: Field list in declared order

    Returns:
        Calculated fields in evaluation order
    """
    calculated = [f for f in field_definitions if f.is_calculated]
    by_key = {f.key: f for f in calculated}

    graph = FieldDependencyGraph.from_definitions(calculated)
    ordered, cyclic = graph.resolve_order([f.key for f in calculated])
    if cyclic:
        logger.warning(
            f"Circular field references, evaluating in declared order: {', '.join(cyclic)}"
        )

    return [by_key[key] for key in ordered + cyclic]


def materialize(
    raw_rows: Iterable[Mapping[str, Any]],
    field_definitions: Sequence[FieldDefinitionBase],
) -> list[dict[str, Any]]:
    """
    Resolve every field of every row.

    For each row, raw fields missing from the row get their (coerced)
    default value, then calculated fields are evaluated in dependency
    order and stored under their key, overwriting any value the raw row
    had. Input rows are never modified.

    Args:
        raw_rows: Dataset rows keyed by field key
        field_definitions: Active field set in declared order

    Returns:
        New rows, same length and order as the input
    """
    raw_fields = [f for f in field_definitions if not f.is_calculated]
    defaults = {f.key: _handler(f).coerce(f.default_value) for f in raw_fields}
    calculated = evaluation_order(field_definitions)
    evaluator = FormulaEvaluator()

    preview_rows = []
    for raw_row in raw_rows:
        row: Mapping[str, Any] = {
            **raw_row,
            **{key: default for key, default in defaults.items() if key not in raw_row},
        }

        # Each step yields a new row; the evaluator gets a read-only view
        for field in calculated:
            value = evaluator.evaluate(field, MappingProxyType(row))
            row = {**row, field.key: value}

        preview_rows.append(dict(row))

    return preview_rows


def _label(field: FieldDefinitionBase) -> str:
    return field.label or field.key


def export_headers(fields: Sequence[FieldDefinitionBase]) -> list[str]:
    """Column headers of an export, one per distinct label."""
    return list(dict.fromkeys(_label(f) for f in fields))


def build_export_rows(
    preview_rows: Iterable[Mapping[str, Any]],
    fields: Sequence[FieldDefinitionBase],
) -> list[dict[str, Any]]:
    """
    Project preview rows onto the selected fields, keyed by display label.

    Missing values become empty strings. Labels are not unique; a later
    column with the same label replaces an earlier one.

    Args:
        preview_rows: Materialized rows
        fields: Selected fields in field-list order

    Returns:
        Rows mapping label to value
    """
    rows = []
    for row in preview_rows:
        exported: dict[str, Any] = {}
        for field in fields:
            value = row.get(field.key)
            exported[_label(field)] = "" if value is None else value
        rows.append(exported)
    return rows


def render_table(
    preview_rows: Iterable[Mapping[str, Any]],
    fields: Sequence[FieldDefinitionBase],
) -> tuple[list[str], list[list[str]]]:
    """
    Format preview rows for display.

    Date columns render as ``YYYY-MM-DD`` (empty if unparsable); every
    other column renders as text.

    Returns:
        Tuple of (header labels, rows of cell text)
    """
    handlers = [_handler(f) for f in fields]
    headers = [_label(f) for f in fields]
    body = [
        [handler.format_value(row.get(field.key)) for field, handler in zip(fields, handlers)]
        for row in preview_rows
    ]
    return headers, body
