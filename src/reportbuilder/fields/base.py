"""Base class for field type handlers."""

from abc import ABC, abstractmethod
from typing import Any

from reportbuilder.schemas.field import DataType


class BaseFieldTypeHandler(ABC):
    """
    Base class for field type handlers.

    Each data type (string, number, date) implements this class to coerce
    the default value of raw fields and to format cells for display.
    Handlers are never applied to calculated results during evaluation;
    formatting happens at render time only.
    """

    field_type: DataType

    @classmethod
    @abstractmethod
    def coerce(cls, value: Any) -> Any:
        """
        Convert a configured default value to the field's data type.

        Args:
            value: Default value as entered by the user

        Returns:
            Coerced value, or None if it cannot be represented
        """
        pass

    @classmethod
    @abstractmethod
    def format_value(cls, value: Any) -> str:
        """
        Render a cell value for the preview table.

        Args:
            value: Cell value

        Returns:
            Display text (empty for missing values)
        """
        pass
