"""Number field type handler."""

from typing import Any

from reportbuilder.fields.base import BaseFieldTypeHandler
from reportbuilder.formula.functions import normalize_number, to_number, to_text
from reportbuilder.schemas.field import DataType


class NumberFieldHandler(BaseFieldTypeHandler):
    """Handler for number fields."""

    field_type = DataType.NUMBER

    @classmethod
    def coerce(cls, value: Any) -> Any:
        """
        Parse a default into a number.

        Blank or non-numeric defaults become None, so the cell renders
        empty instead of showing text in a number column.
        """
        number = to_number(value)
        if number is None:
            return None
        return normalize_number(number)

    @classmethod
    def format_value(cls, value: Any) -> str:
        """Numbers render without a trailing ``.0``; other values as text."""
        return to_text(value)
