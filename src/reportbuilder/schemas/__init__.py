"""Pydantic schemas for field definitions and API payloads."""

from reportbuilder.schemas.field import (
    ArithCalc,
    ArithOperator,
    CalcOp,
    ConcatCalc,
    ConstOperand,
    DataType,
    DateDiffCalc,
    DateUnit,
    FieldDefinition,
    FieldDefinitionBase,
    FieldKind,
    FieldOperand,
    FieldSource,
)

__all__ = [
    "ArithCalc",
    "ArithOperator",
    "CalcOp",
    "ConcatCalc",
    "ConstOperand",
    "DataType",
    "DateDiffCalc",
    "DateUnit",
    "FieldDefinition",
    "FieldDefinitionBase",
    "FieldKind",
    "FieldOperand",
    "FieldSource",
]
