"""Date field type handler."""

from typing import Any

from reportbuilder.fields.base import BaseFieldTypeHandler
from reportbuilder.formula.functions import format_date
from reportbuilder.schemas.field import DataType


class DateFieldHandler(BaseFieldTypeHandler):
    """
    Handler for date fields.

    Dates cross the dataset boundary as ISO calendar dates (YYYY-MM-DD),
    so defaults are normalized to that form.
    """

    field_type = DataType.DATE

    @classmethod
    def coerce(cls, value: Any) -> Any:
        """Normalize a default to ``YYYY-MM-DD``; unparsable defaults become None."""
        return format_date(value) or None

    @classmethod
    def format_value(cls, value: Any) -> str:
        """Render as ``YYYY-MM-DD``; values that are not dates render empty."""
        return format_date(value)
