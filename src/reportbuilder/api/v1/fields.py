"""
Field endpoints.

Handles listing, creating and deleting fields, toggling their selection
and describing draft formulas.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Query, Response, status

from reportbuilder.api.deps import Registry
from reportbuilder.formula.describer import describe_formula
from reportbuilder.schemas.field import (
    FieldCreate,
    FieldDefinition,
    FieldListResponse,
    FieldResponse,
    FormulaDescription,
    SelectionResponse,
)

router = APIRouter()


def _to_response(field: FieldDefinition, selected: bool) -> FieldResponse:
    return FieldResponse(**field.model_dump(), selected=selected)


# =============================================================================
# Field Endpoints
# =============================================================================


@router.get("", response_model=FieldListResponse)
async def list_fields(registry: Registry) -> FieldListResponse:
    """
    List all fields in column order.

    Built-in fields come first, followed by user fields in creation order.
    """
    items = [_to_response(f, registry.is_selected(f.key)) for f in registry.fields]
    return FieldListResponse(items=items, total=len(items))


@router.post(
    "",
    response_model=FieldResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_field(field_data: FieldCreate, registry: Registry) -> FieldResponse:
    """
    Create a new user field.

    The key must not be used by any existing field, and a formula may only
    reference existing fields.
    """
    field = registry.add(field_data)
    return _to_response(field, registry.is_selected(field.key))


@router.post("/describe", response_model=FormulaDescription)
async def describe_field(
    draft: Annotated[dict[str, Any], Body(description="Possibly incomplete field definition")],
) -> FormulaDescription:
    """Summarize the formula of a draft field definition."""
    return FormulaDescription(formula=describe_formula(draft))


@router.delete("/{key}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_field(
    key: str,
    registry: Registry,
    confirm: Annotated[bool, Query(description="Confirm the deletion")] = False,
) -> Response:
    """
    Delete a user field.

    Built-in fields cannot be deleted. The request must carry
    ``confirm=true``.
    """
    registry.remove(key, confirmed=confirm)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{key}/selection", response_model=SelectionResponse)
async def toggle_field_selection(key: str, registry: Registry) -> SelectionResponse:
    """Show or hide a field in the preview and exports."""
    selected = registry.toggle_selection(key)
    return SelectionResponse(key=key, selected=selected)
