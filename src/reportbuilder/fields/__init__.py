"""Field type handlers for Report Builder.

One handler per data type. Each handler coerces raw field defaults and
formats cells for the preview table.
"""

from reportbuilder.fields.base import BaseFieldTypeHandler
from reportbuilder.fields.types.date import DateFieldHandler
from reportbuilder.fields.types.number import NumberFieldHandler
from reportbuilder.fields.types.text import TextFieldHandler
from reportbuilder.schemas.field import DataType

# Registry of field type handlers
FIELD_HANDLERS: dict[DataType, type[BaseFieldTypeHandler]] = {
    TextFieldHandler.field_type: TextFieldHandler,
    NumberFieldHandler.field_type: NumberFieldHandler,
    DateFieldHandler.field_type: DateFieldHandler,
}


def get_field_handler(data_type: DataType | str) -> type[BaseFieldTypeHandler] | None:
    """
    Get field handler for given data type.

    Args:
        data_type: Data type identifier

    Returns:
        Field handler class or None if not found
    """
    try:
        return FIELD_HANDLERS.get(DataType(data_type))
    except ValueError:
        return None


def list_field_types() -> list[str]:
    """List all registered data types."""
    return [data_type.value for data_type in FIELD_HANDLERS]


__all__ = [
    "BaseFieldTypeHandler",
    "FIELD_HANDLERS",
    "get_field_handler",
    "list_field_types",
    "TextFieldHandler",
    "NumberFieldHandler",
    "DateFieldHandler",
]
