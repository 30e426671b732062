"""Field definition schemas.

Field definitions are plain structural data: they are validated here,
serialized with camelCase keys for the field store and the API, and
never mutated after creation.
"""

from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class FieldKind(str, Enum):
    """How a field gets its value."""

    RAW = "raw"
    CALCULATED = "calculated"


class DataType(str, Enum):
    """Display type of a field."""

    STRING = "string"
    NUMBER = "number"
    DATE = "date"


class FieldSource(str, Enum):
    """Provenance of a field definition."""

    SYSTEM = "system"
    USER = "user"


class CalcOp(str, Enum):
    """Operation kinds of a calculated field."""

    DATE_DIFF = "DATE_DIFF"
    ARITH = "ARITH"
    CONCAT = "CONCAT"


class DateUnit(str, Enum):
    """Units a date difference can be expressed in."""

    DAYS = "days"
    HOURS = "hours"


class ArithOperator(str, Enum):
    """Binary operators supported by ARITH."""

    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"


class _Schema(BaseModel):
    """Frozen model serialized with camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


# =============================================================================
# Operands
# =============================================================================


class FieldOperand(_Schema):
    """Reads the value of another field on the same row."""

    type: Literal["field"] = "field"
    value: str = Field(..., min_length=1, description="Referenced field key")


class ConstOperand(_Schema):
    """A literal carried verbatim."""

    type: Literal["const"] = "const"
    value: Any = None


Operand = Annotated[Union[FieldOperand, ConstOperand], Field(discriminator="type")]


def _operand_references(operands: tuple[Any, ...]) -> tuple[str, ...]:
    return tuple(o.value for o in operands if isinstance(o, FieldOperand))


# =============================================================================
# Calc variants
# =============================================================================


class DateDiffCalc(_Schema):
    """Difference between two date-valued fields."""

    op: Literal["DATE_DIFF"] = "DATE_DIFF"
    from_field: str = Field(..., min_length=1)
    to_field: str = Field(..., min_length=1)
    # Any string is accepted; unknown units fall back to days
    unit: str = DateUnit.DAYS.value

    @field_validator("unit", mode="before")
    @classmethod
    def default_unit(cls, v: Any) -> Any:
        if v is None or v == "":
            return DateUnit.DAYS.value
        if isinstance(v, DateUnit):
            return v.value
        return v

    def references(self) -> tuple[str, ...]:
        """Field keys this calculation reads."""
        return (self.from_field, self.to_field)


class ArithCalc(_Schema):
    """Binary arithmetic over two operands."""

    op: Literal["ARITH"] = "ARITH"
    left: Operand
    right: Operand
    # Unknown operators evaluate to null instead of failing validation
    operator: Optional[str] = ArithOperator.ADD.value

    @field_validator("operator", mode="before")
    @classmethod
    def operator_value(cls, v: Any) -> Any:
        if isinstance(v, ArithOperator):
            return v.value
        return v

    def references(self) -> tuple[str, ...]:
        """Field keys this calculation reads."""
        return _operand_references((self.left, self.right))


class ConcatCalc(_Schema):
    """Join of parts in order, no separator."""

    op: Literal["CONCAT"] = "CONCAT"
    parts: tuple[Operand, ...] = ()

    @field_validator("parts", mode="before")
    @classmethod
    def missing_parts(cls, v: Any) -> Any:
        return () if v is None else v

    def references(self) -> tuple[str, ...]:
        """Field keys this calculation reads."""
        return _operand_references(self.parts)


Calc = Annotated[Union[DateDiffCalc, ArithCalc, ConcatCalc], Field(discriminator="op")]


# =============================================================================
# Field definitions
# =============================================================================


class FieldDefinitionBase(_Schema):
    """Declarative description of a column."""

    key: str = Field(..., min_length=1, max_length=255, description="Unique field key")
    label: str = Field(..., min_length=1, max_length=255, description="Display name")
    kind: FieldKind = Field(default=FieldKind.RAW, description="Raw or calculated")
    data_type: DataType = Field(default=DataType.STRING, description="Display type")
    default_value: Any = Field(default=None, description="Value for rows lacking a raw field")
    calc: Optional[Calc] = Field(default=None, description="Formula of a calculated field")

    @field_validator("key", "label", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v

    @model_validator(mode="before")
    @classmethod
    def drop_calc_for_raw(cls, data: Any) -> Any:
        """Raw fields never carry a formula, even if a form sent one along."""
        if isinstance(data, dict) and data.get("kind", FieldKind.RAW) == FieldKind.RAW:
            return {k: v for k, v in data.items() if k != "calc"}
        return data

    @model_validator(mode="after")
    def require_calc(self) -> "FieldDefinitionBase":
        if self.kind == FieldKind.CALCULATED and self.calc is None:
            raise ValueError("Calculated fields require a calc definition")
        return self

    @property
    def is_calculated(self) -> bool:
        return self.kind == FieldKind.CALCULATED

    def references(self) -> tuple[str, ...]:
        """Field keys the formula reads (empty for raw fields)."""
        if self.calc is None:
            return ()
        return self.calc.references()


class FieldDefinition(FieldDefinitionBase):
    """Field definition as held by the registry."""

    source: FieldSource = Field(default=FieldSource.USER, description="Built-in or user field")

    @property
    def is_user_defined(self) -> bool:
        return self.source == FieldSource.USER

    def to_storage(self) -> dict[str, Any]:
        """Plain structural form used by the field store."""
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# API schemas
# =============================================================================


class FieldCreate(FieldDefinitionBase):
    """Schema for creating a user field."""


class FieldResponse(FieldDefinition):
    """Schema for field response."""

    selected: bool = Field(default=False, description="Whether the column is shown and exported")


class FieldListResponse(_Schema):
    """Schema for field list response."""

    items: list[FieldResponse]
    total: int


class SelectionResponse(_Schema):
    """Selection state of one field after a toggle."""

    key: str
    selected: bool


class FormulaDescription(_Schema):
    """Human-readable summary of a draft formula."""

    formula: str
