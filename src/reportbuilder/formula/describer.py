"""Human-readable summaries of draft formulas.

Drafts come straight from an editing form and may be incomplete, so
everything is read defensively and missing parts render as ``?``.
"""

from collections.abc import Mapping
from typing import Any

import orjson

from reportbuilder.formula.functions import normalize_number, to_number
from reportbuilder.schemas.field import CalcOp, DateUnit, FieldDefinitionBase, FieldKind

PLACEHOLDER = "?"


def _get(data: Any, *names: str) -> Any:
    """First present value among alternative (camelCase/snake_case) keys."""
    if not isinstance(data, Mapping):
        return None
    for name in names:
        value = data.get(name)
        if value is not None:
            return value
    return None


def _text(value: Any) -> str:
    if value is None or value == "":
        return PLACEHOLDER
    return str(value)


def _quote(value: Any) -> str:
    return orjson.dumps("" if value is None else str(value)).decode("utf-8")


def _describe_field_ref(operand: Any) -> str:
    return f"FIELD:{_text(_get(operand, 'value'))}"


def _describe_number_operand(operand: Any) -> str:
    if _get(operand, "type") == "field":
        return _describe_field_ref(operand)
    value = _get(operand, "value")
    if value is None or value == "":
        return PLACEHOLDER
    number = to_number(value)
    if number is None:
        return _quote(value)
    return str(normalize_number(number))


def _describe_text_operand(operand: Any) -> str:
    if _get(operand, "type") == "field":
        return _describe_field_ref(operand)
    return _quote(_get(operand, "value"))


def describe_formula(draft: FieldDefinitionBase | Mapping[str, Any]) -> str:
    """
    Summarize the formula of a (possibly partial) field definition.

    Args:
        draft: Field definition or the raw mapping an editor is building

    Returns:
        Short description such as ``DATEDIFF(days, orderDate, dispatchDate)``
    """
    if isinstance(draft, FieldDefinitionBase):
        draft = draft.model_dump(mode="json", by_alias=True)

    if _get(draft, "kind") != FieldKind.CALCULATED.value:
        return "Raw field"

    calc = _get(draft, "calc") or {}
    op = _get(calc, "op")

    if op == CalcOp.DATE_DIFF.value:
        unit = _get(calc, "unit") or DateUnit.DAYS.value
        from_field = _text(_get(calc, "fromField", "from_field"))
        to_field = _text(_get(calc, "toField", "to_field"))
        return f"DATEDIFF({unit}, {from_field}, {to_field})"

    if op == CalcOp.ARITH.value:
        left = _describe_number_operand(_get(calc, "left"))
        right = _describe_number_operand(_get(calc, "right"))
        operator = _get(calc, "operator") or "+"
        return f"ARITH({left} {operator} {right})"

    if op == CalcOp.CONCAT.value:
        parts = _get(calc, "parts") or []
        if not isinstance(parts, (list, tuple)):
            parts = []
        return f"CONCAT({', '.join(_describe_text_operand(p) for p in parts)})"

    return "Calculated"
