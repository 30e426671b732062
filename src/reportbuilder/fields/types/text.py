"""Text field type handler."""

from typing import Any

from reportbuilder.fields.base import BaseFieldTypeHandler
from reportbuilder.formula.functions import to_text
from reportbuilder.schemas.field import DataType


class TextFieldHandler(BaseFieldTypeHandler):
    """Handler for string fields."""

    field_type = DataType.STRING

    @classmethod
    def coerce(cls, value: Any) -> Any:
        """Defaults are kept as text; an empty default stays empty."""
        if value is None:
            return None
        return to_text(value)

    @classmethod
    def format_value(cls, value: Any) -> str:
        return to_text(value)
