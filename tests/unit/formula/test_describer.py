"""Unit tests for describe_formula."""

from reportbuilder.formula.describer import describe_formula
from reportbuilder.schemas.field import FieldDefinition


class TestDescribeFormula:
    """Tests for formula summaries."""

    def test_raw_field(self):
        """Test that raw drafts are described as such."""
        assert describe_formula({"key": "x", "kind": "raw"}) == "Raw field"
        assert describe_formula({}) == "Raw field"

    def test_date_diff(self, lead_time_field):
        """Test DATE_DIFF summary from a definition."""
        assert describe_formula(lead_time_field) == "DATEDIFF(days, orderDate, dispatchDate)"

    def test_date_diff_incomplete(self):
        """Test that missing fields render as placeholders."""
        draft = {"kind": "calculated", "calc": {"op": "DATE_DIFF", "fromField": "orderDate"}}
        assert describe_formula(draft) == "DATEDIFF(days, orderDate, ?)"

    def test_date_diff_snake_case(self):
        """Test that snake_case drafts are understood."""
        draft = {
            "kind": "calculated",
            "calc": {"op": "DATE_DIFF", "from_field": "a", "to_field": "b", "unit": "hours"},
        }
        assert describe_formula(draft) == "DATEDIFF(hours, a, b)"

    def test_arith(self):
        """Test ARITH summary with a field and a number."""
        draft = {
            "kind": "calculated",
            "calc": {
                "op": "ARITH",
                "left": {"type": "field", "value": "leadTimeDays"},
                "operator": "*",
                "right": {"type": "const", "value": "2"},
            },
        }
        assert describe_formula(draft) == "ARITH(FIELD:leadTimeDays * 2)"

    def test_arith_missing_and_text_constants(self):
        """Test placeholders and quoted non-numeric constants."""
        draft = {
            "kind": "calculated",
            "calc": {
                "op": "ARITH",
                "left": {"type": "const", "value": "abc"},
                "right": {"type": "const", "value": ""},
            },
        }
        assert describe_formula(draft) == 'ARITH("abc" + ?)'

    def test_concat(self):
        """Test CONCAT summary."""
        draft = FieldDefinition.model_validate(
            {
                "key": "buyerStyle",
                "label": "Buyer / Style",
                "kind": "calculated",
                "calc": {
                    "op": "CONCAT",
                    "parts": [
                        {"type": "field", "value": "buyerName"},
                        {"type": "const", "value": " - "},
                        {"type": "field", "value": "style"},
                    ],
                },
            }
        )
        assert describe_formula(draft) == 'CONCAT(FIELD:buyerName, " - ", FIELD:style)'

    def test_unknown_op(self):
        """Test fallback for drafts without a known operation."""
        assert describe_formula({"kind": "calculated", "calc": {"op": "SUM"}}) == "Calculated"
        assert describe_formula({"kind": "calculated"}) == "Calculated"
