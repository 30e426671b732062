"""Formula engine for Report Builder.

This module evaluates the fixed formula vocabulary of calculated fields:
- DATE_DIFF: difference between two date fields in days or hours
- ARITH: binary arithmetic (+, -, *, /) over field values and constants
- CONCAT: string join of field values and literal text
"""

from reportbuilder.formula.dependencies import FieldDependencyGraph
from reportbuilder.formula.describer import describe_formula
from reportbuilder.formula.evaluator import FormulaEvaluator, evaluate

__all__ = [
    "FormulaEvaluator",
    "evaluate",
    "describe_formula",
    "FieldDependencyGraph",
]
