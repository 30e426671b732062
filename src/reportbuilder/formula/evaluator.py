"""Formula evaluator for Report Builder.

Evaluates the calc of a calculated field against one row.
"""

from collections.abc import Mapping
from typing import Any

from reportbuilder.core.exceptions import FieldNotCalculatedError
from reportbuilder.formula.functions import (
    Number,
    date_diff,
    normalize_number,
    to_number,
    to_text,
)
from reportbuilder.schemas.field import (
    ArithCalc,
    ArithOperator,
    ConcatCalc,
    ConstOperand,
    DateDiffCalc,
    FieldDefinitionBase,
    FieldOperand,
)


class FormulaEvaluator:
    """
    Evaluates calculated field definitions against row data.

    The row must already hold every field the formula reads, including
    calculated fields it references. Malformed input never raises: it
    evaluates to None so the cell renders empty.
    """

    def __init__(self, row: Mapping[str, Any] | None = None):
        """
        Initialize evaluator with optional row values.

        Args:
            row: Mapping of field keys to values
        """
        self._row: Mapping[str, Any] = row or {}

    def evaluate(
        self,
        definition: FieldDefinitionBase,
        row: Mapping[str, Any] | None = None,
    ) -> Any:
        """
        Evaluate a calculated field.

        Args:
            definition: Calculated field definition
            row: Optional row values (overrides constructor values)

        Returns:
            Evaluation result, untyped relative to the field's data type

        Raises:
            FieldNotCalculatedError: If the definition is a raw field
        """
        if row is not None:
            self._row = row

        if not definition.is_calculated or definition.calc is None:
            raise FieldNotCalculatedError(definition.key)

        calc = definition.calc
        if isinstance(calc, DateDiffCalc):
            return self._eval_date_diff(calc)
        if isinstance(calc, ArithCalc):
            return self._eval_arith(calc)
        if isinstance(calc, ConcatCalc):
            return self._eval_concat(calc)

        raise TypeError(f"Unsupported calc operation: {type(calc).__name__}")

    def _eval_date_diff(self, calc: DateDiffCalc) -> int | None:
        return date_diff(
            self._row.get(calc.from_field),
            self._row.get(calc.to_field),
            calc.unit,
        )

    def _eval_arith(self, calc: ArithCalc) -> Number | None:
        left = self._resolve_number(calc.left)
        right = self._resolve_number(calc.right)
        if left is None or right is None:
            return None

        op = calc.operator
        try:
            if op == ArithOperator.ADD.value:
                result = left + right
            elif op == ArithOperator.SUBTRACT.value:
                result = left - right
            elif op == ArithOperator.MULTIPLY.value:
                result = left * right
            elif op == ArithOperator.DIVIDE.value:
                if right == 0:
                    return None  # Division by zero returns None
                result = left / right
            else:
                return None
        except OverflowError:
            return None

        # Out-of-range results are not numbers either
        number = to_number(result)
        if number is None:
            return None
        return normalize_number(number)

    def _eval_concat(self, calc: ConcatCalc) -> str:
        return "".join(self._resolve_text(part) for part in calc.parts)

    # ==========================================================================
    # Operand resolution
    # ==========================================================================

    def _resolve(self, operand: FieldOperand | ConstOperand) -> Any:
        if isinstance(operand, FieldOperand):
            return self._row.get(operand.value)
        return operand.value

    def _resolve_number(self, operand: FieldOperand | ConstOperand) -> Number | None:
        return to_number(self._resolve(operand))

    def _resolve_text(self, operand: FieldOperand | ConstOperand) -> str:
        return to_text(self._resolve(operand))


def evaluate(row: Mapping[str, Any], definition: FieldDefinitionBase) -> Any:
    """
    Convenience function to evaluate one calculated field on one row.

    Args:
        row: Field values of the row
        definition: Calculated field definition

    Returns:
        Evaluation result
    """
    evaluator = FormulaEvaluator(row)
    return evaluator.evaluate(definition)
